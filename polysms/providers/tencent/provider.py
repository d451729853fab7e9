"""
Tencent SMS Provider - Sends SMS via the Tencent Cloud SMS API (2021-01-11)
"""

import logging
from typing import Any, Dict, Optional

from ...config import SmsConfig, TencentConfig
from ...error_codes import ErrorCodeMapper
from ...models import SmsRequest, StandardErrorCode
from ...protocols import TransportProtocol, TransportResponse
from ..base import BaseSMSProvider, ParsedError, ParsedOk, ParsedResponse, load_json_object
from . import signer

logger = logging.getLogger(__name__)


class TencentSMSProvider(BaseSMSProvider):
    """
    Tencent Cloud SMS provider.

    Requires configuration:
    - secret_id: Tencent Cloud SecretId
    - secret_key: Tencent Cloud SecretKey
    - sms_sdk_app_id: SMS application ID

    Optional:
    - region: API region (default: ap-beijing)
    - endpoint: Host or proxy URL requests are sent to
    - origin_endpoint: Official host used for signing behind a proxy
    """

    provider_name = "Tencent"

    def __init__(
        self,
        config: TencentConfig,
        transport: TransportProtocol,
        sms_config: Optional[SmsConfig] = None,
    ):
        self.config = config
        super().__init__(transport, sms_config)

    def is_enabled(self) -> bool:
        """Check if Tencent Cloud is configured."""
        return all([
            self.config.secret_id,
            self.config.secret_key,
            self.config.sms_sdk_app_id,
            self.config.endpoint,
        ])

    def build_payload(self, request: SmsRequest, sign_name: str) -> Dict[str, Any]:
        """SendSms action parameters, in the order they are serialized"""
        return {
            "PhoneNumberSet": [request.phone_number],
            "SmsSdkAppId": str(self.config.sms_sdk_app_id),
            "SignName": sign_name,
            "TemplateId": request.template_id,
            "TemplateParamSet": list(request.template_params.values()),
        }

    async def _send(self, request: SmsRequest, sign_name: str) -> TransportResponse:
        signed = signer.build_request(
            endpoint=self.config.endpoint,
            region=self.config.region,
            secret_id=self.config.secret_id,
            secret_key=self.config.secret_key,
            payload=self.build_payload(request, sign_name),
            scheme=self.config.scheme,
            signing_endpoint=self.config.origin_endpoint,
        )
        self.debug_logger.log_request(self.provider_name, signed.url, signed.headers, signed.body)
        return await self.transport.post(signed.url, signed.headers, signed.body)

    def _parse_response(self, status_code: int, body: str) -> ParsedResponse:
        """
        Parse a SendSms response.

        Success:  {"Response": {"SendStatusSet": [{"Code": "Ok", "SerialNo": "..."}], "RequestId": "..."}}
        Per-number failure:  SendStatusSet[0].Code carries the vendor code
        Request failure:  {"Response": {"Error": {"Code": "...", "Message": "..."}, "RequestId": "..."}}
        """
        data = load_json_object(status_code, body)
        if isinstance(data, ParsedError):
            return data

        response = data.get("Response")
        if not isinstance(response, dict):
            return ParsedError(code="INVALID_RESPONSE", message="Invalid response format")

        request_id = str(response.get("RequestId") or "")

        error = response.get("Error")
        if isinstance(error, dict):
            return ParsedError(
                code=str(error.get("Code") or ""),
                message=str(error.get("Message") or ""),
                request_id=request_id,
            )

        status_set = response.get("SendStatusSet") or []
        if not isinstance(status_set, list) or not status_set or not isinstance(status_set[0], dict):
            return ParsedError(
                code="INVALID_RESPONSE",
                message="Response has no SendStatusSet entry",
                request_id=request_id,
            )

        status = status_set[0]
        code = str(status.get("Code") or "")
        if code == "Ok":
            return ParsedOk(request_id=request_id, biz_id=str(status.get("SerialNo") or ""))

        return ParsedError(
            code=code,
            message=str(status.get("Message") or ""),
            request_id=request_id,
        )

    def _map_error(self, code: str) -> StandardErrorCode:
        return ErrorCodeMapper.map_tencent_error(code)
