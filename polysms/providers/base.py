"""
Base SMS Provider - Abstract base class for all SMS providers

A provider turns an SmsRequest into one vendor's signed wire request,
sends it through a transport, and normalizes the vendor response into an
SmsResult. Subclasses implement only the vendor-specific parts:

- _send(request, sign_name) -> (status_code, body)
- _parse_response(status_code, body) -> ParsedOk | ParsedError
- _map_error(code) -> StandardErrorCode

Everything else (sign name resolution, exception conversion, debug
logging, result normalization) lives here.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from ..config import SmsConfig
from ..debug_log import DebugLogger, mask_phone
from ..error_codes import ErrorCodeMapper
from ..models import SmsRequest, SmsResult, StandardErrorCode
from ..protocols import TransportProtocol, TransportResponse

logger = logging.getLogger(__name__)

USER_AGENT = "PolySms/1.0.0"


@dataclass(frozen=True)
class ParsedOk:
    """Vendor response that reported a successful send"""
    request_id: str
    biz_id: str = ""


@dataclass(frozen=True)
class ParsedError:
    """Vendor response that reported a failure"""
    code: str
    message: str = ""
    request_id: str = ""
    status_code: Optional[int] = None


ParsedResponse = Union[ParsedOk, ParsedError]


def load_json_object(status_code: int, body: str) -> Union[Dict[str, Any], ParsedError]:
    """Decode a JSON object body, or describe why it could not be used."""
    try:
        data = json.loads(body) if body else None
    except ValueError:
        data = None
    if not isinstance(data, dict):
        return ParsedError(
            code=f"HTTP_{status_code}",
            message=(body or "")[:200],
            status_code=status_code,
        )
    return data


class BaseSMSProvider(ABC):
    """
    Abstract base class for SMS providers.

    All SMS providers must implement:
    - provider_name - Canonical name, the registry key (case-insensitive)
    - is_enabled() - Check if provider is configured and ready
    - _send() - Sign and transmit one request
    - _parse_response() - Decode the vendor response
    - _map_error() - Map a vendor error code

    send_sms() never raises for ordinary failures: every outcome,
    including transport exceptions, comes back as an SmsResult.
    """

    provider_name: str = "unknown"

    def __init__(
        self,
        transport: TransportProtocol,
        sms_config: Optional[SmsConfig] = None,
    ):
        self.transport = transport
        self.sms_config = sms_config or SmsConfig()
        self.debug_logger = DebugLogger(enabled=self.sms_config.enable_debug_log)

        if self.is_enabled():
            logger.info(f"{self.provider_name} SMS Provider initialized")
        else:
            logger.warning(f"{self.provider_name} SMS Provider disabled - missing configuration")

    # ===== Abstract methods (must be implemented by subclasses) =====

    @abstractmethod
    def is_enabled(self) -> bool:
        """
        Check if provider is configured and enabled.

        Returns:
            True if provider can send SMS, False otherwise
        """
        pass

    @abstractmethod
    async def _send(self, request: SmsRequest, sign_name: str) -> TransportResponse:
        """Build the signed vendor request and send it through the transport"""
        pass

    @abstractmethod
    def _parse_response(self, status_code: int, body: str) -> ParsedResponse:
        """Decode the vendor response into ParsedOk or ParsedError"""
        pass

    @abstractmethod
    def _map_error(self, code: str) -> StandardErrorCode:
        """Map a vendor error code to a StandardErrorCode"""
        pass

    # ===== Public interface =====

    def resolve_sign_name(self, request: SmsRequest) -> Optional[str]:
        """Request sign name first, then the configured default."""
        return request.sign_name or self.sms_config.default_sign_name or None

    async def send_sms(self, request: SmsRequest) -> SmsResult:
        """
        Send one SMS.

        Args:
            request: The send request

        Returns:
            Normalized SmsResult with ``provider`` set to this provider
        """
        if not self.is_enabled():
            logger.warning(f"[{self.provider_name}] not configured - cannot send SMS")
            return SmsResult.failure(
                provider=self.provider_name,
                standard_error=StandardErrorCode.AUTHENTICATION_FAILED,
                error_code="PROVIDER_NOT_CONFIGURED",
                error_message=f"{self.provider_name} credentials are not configured",
            )

        sign_name = self.resolve_sign_name(request)
        if not sign_name:
            logger.error(f"[{self.provider_name}] no sign name on request and no default_sign_name configured")
            return SmsResult.failure(
                provider=self.provider_name,
                standard_error=StandardErrorCode.SIGNATURE_NOT_FOUND,
                error_code="MISSING_SIGN_NAME",
                error_message="Sign name is required: set it on the request or configure default_sign_name",
            )

        logger.debug(
            f"[{self.provider_name}] Sending SMS to {mask_phone(request.phone_number)} "
            f"with template {request.template_id}"
        )

        try:
            response = await self._send(request, sign_name)
            self.debug_logger.log_response(self.provider_name, response.status_code, response.text)
            parsed = self._parse_response(response.status_code, response.text)
        except Exception as e:
            logger.error(f"[{self.provider_name}] Error sending SMS: {e}", exc_info=True)
            return self.exception_result(e)

        return self.normalize(parsed)

    def normalize(self, parsed: ParsedResponse) -> SmsResult:
        """Turn a parsed vendor response into an SmsResult."""
        if isinstance(parsed, ParsedOk):
            return SmsResult.ok(
                provider=self.provider_name,
                request_id=parsed.request_id,
                biz_id=parsed.biz_id,
            )

        kind = self._map_error(parsed.code)
        if kind in (StandardErrorCode.UNKNOWN, StandardErrorCode.SUCCESS) and parsed.status_code is not None:
            kind = ErrorCodeMapper.map_http_status(parsed.status_code)
        elif kind == StandardErrorCode.SUCCESS:
            # Success code without the fields that make a send succeed
            kind = StandardErrorCode.UNKNOWN

        return SmsResult.failure(
            provider=self.provider_name,
            standard_error=kind,
            error_code=parsed.code,
            error_message=parsed.message,
            request_id=parsed.request_id,
        )

    def exception_result(self, error: BaseException) -> SmsResult:
        """Convert an exception raised while sending into an SmsResult."""
        return SmsResult.failure(
            provider=self.provider_name,
            standard_error=ErrorCodeMapper.classify_exception(error),
            error_code="EXCEPTION",
            error_message=str(error) or type(error).__name__,
        )

    def __repr__(self):
        return f"<{self.__class__.__name__} provider={self.provider_name} enabled={self.is_enabled()}>"
