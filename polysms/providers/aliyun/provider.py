"""
Aliyun SMS Provider - Sends SMS via the Aliyun dysmsapi SendSms action
"""

import json
import logging
from typing import Optional

from ...config import AliyunConfig, SmsConfig
from ...error_codes import ErrorCodeMapper
from ...models import SmsRequest, StandardErrorCode
from ...protocols import TransportProtocol, TransportResponse
from ..base import USER_AGENT, BaseSMSProvider, ParsedError, ParsedOk, ParsedResponse, load_json_object
from . import signer

logger = logging.getLogger(__name__)


class AliyunSMSProvider(BaseSMSProvider):
    """
    Aliyun SMS provider.

    Requires configuration:
    - access_key_id: AccessKey ID
    - access_key_secret: AccessKey secret

    Optional:
    - endpoint: API host (default: dysmsapi.aliyuncs.com)
    - use_https: Use https (default: True)
    """

    provider_name = "Aliyun"

    def __init__(
        self,
        config: AliyunConfig,
        transport: TransportProtocol,
        sms_config: Optional[SmsConfig] = None,
    ):
        self.config = config
        super().__init__(transport, sms_config)

    def is_enabled(self) -> bool:
        """Check if Aliyun is configured."""
        return all([self.config.access_key_id, self.config.access_key_secret, self.config.endpoint])

    def build_parameters(self, request: SmsRequest, sign_name: str) -> dict:
        """SendSms business parameters"""
        parameters = {
            "Action": "SendSms",
            "PhoneNumbers": request.phone_number,
            "SignName": sign_name,
            "TemplateCode": request.template_id,
        }
        if request.template_params:
            parameters["TemplateParam"] = json.dumps(
                dict(request.template_params), ensure_ascii=False, separators=(",", ":"),
            )
        return parameters

    async def _send(self, request: SmsRequest, sign_name: str) -> TransportResponse:
        signed = signer.build_request(
            endpoint=self.config.endpoint,
            access_key_id=self.config.access_key_id,
            access_key_secret=self.config.access_key_secret,
            parameters=self.build_parameters(request, sign_name),
            scheme=self.config.scheme,
            user_agent=USER_AGENT,
        )
        self.debug_logger.log_request(self.provider_name, signed.url, signed.headers, signed.body)
        return await self.transport.post(signed.url, signed.headers, signed.body)

    def _parse_response(self, status_code: int, body: str) -> ParsedResponse:
        """
        Parse a SendSms response.

        Success:  {"Code": "OK", "Message": "OK", "RequestId": "...", "BizId": "..."}
        Failure:  {"Code": "isv.BUSINESS_LIMIT_CONTROL", "Message": "...", "RequestId": "..."}
        """
        data = load_json_object(status_code, body)
        if isinstance(data, ParsedError):
            return data

        code = str(data.get("Code") or "")
        request_id = str(data.get("RequestId") or "")
        if code == "OK":
            return ParsedOk(request_id=request_id, biz_id=str(data.get("BizId") or ""))

        message = str(data.get("Message") or "")
        if not code:
            # no vendor code, classify by HTTP status
            return ParsedError(
                code=f"HTTP_{status_code}",
                message=message,
                request_id=request_id,
                status_code=status_code,
            )
        return ParsedError(code=code, message=message, request_id=request_id)

    def _map_error(self, code: str) -> StandardErrorCode:
        return ErrorCodeMapper.map_aliyun_error(code)
