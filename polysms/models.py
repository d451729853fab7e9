"""
PolySms Models - Request/response types shared by every provider

This module provides:
- SmsProvider: Provider selector enum (AUTO resolves to the configured default)
- StandardErrorCode: Provider-agnostic error taxonomy
- SmsRequest: Immutable send request
- SmsResult: Normalized send outcome
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class SmsProvider(str, Enum):
    """Provider selector accepted by SmsService alongside plain names"""
    AUTO = "auto"
    ALIYUN = "Aliyun"
    TENCENT = "Tencent"


class StandardErrorCode(str, Enum):
    """Unified error kinds, decoupled from any vendor vocabulary"""
    SUCCESS = "success"
    INVALID_PARAMETER = "invalid_parameter"
    AUTHENTICATION_FAILED = "authentication_failed"
    INSUFFICIENT_PERMISSIONS = "insufficient_permissions"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    TEMPLATE_NOT_FOUND = "template_not_found"
    SIGNATURE_NOT_FOUND = "signature_not_found"    # SMS sign name, not crypto
    INVALID_PHONE_NUMBER = "invalid_phone_number"
    NETWORK_ERROR = "network_error"
    PROVIDER_INTERNAL_ERROR = "provider_internal_error"
    UNKNOWN = "unknown"

    # Dispatch-level conditions, never produced by a vendor
    PROVIDER_NOT_FOUND = "provider_not_found"
    INVALID_PROVIDER_NAME = "invalid_provider_name"


@dataclass(frozen=True)
class SmsRequest:
    """
    A single-recipient SMS send request.

    Attributes:
        phone_number: Recipient number, validated by the provider
        template_id: Vendor template code (e.g., "SMS_001")
        template_params: Template variables; insertion order is kept
        sign_name: Registered sign name. Falls back to
            SmsConfig.default_sign_name when omitted.

    Example:
        request = SmsRequest(
            phone_number="13800138000",
            template_id="SMS_001",
            template_params={"code": "123456"},
            sign_name="PolySms",
        )
    """
    phone_number: str
    template_id: str
    template_params: Mapping[str, str] = field(default_factory=dict)
    sign_name: Optional[str] = None

    def __post_init__(self):
        # read-only snapshot of the caller's dict
        object.__setattr__(self, "template_params", MappingProxyType(dict(self.template_params or {})))


@dataclass
class SmsResult:
    """
    Normalized result of one send attempt.

    All providers return this format. ``error_code`` and ``error_message``
    carry the vendor's raw values for diagnostics, while ``standard_error``,
    ``friendly_message`` and ``retryable`` are provider-agnostic.
    """
    success: bool
    request_id: str = ""
    biz_id: str = ""
    error_code: str = ""
    error_message: str = ""
    provider: str = ""
    standard_error: StandardErrorCode = StandardErrorCode.UNKNOWN
    friendly_message: str = ""
    retryable: bool = False

    @classmethod
    def ok(cls, provider: str, request_id: str = "", biz_id: str = "") -> "SmsResult":
        """Build a successful result"""
        from .error_codes import ErrorCodeMapper

        return cls(
            success=True,
            request_id=request_id,
            biz_id=biz_id,
            provider=provider,
            standard_error=StandardErrorCode.SUCCESS,
            friendly_message=ErrorCodeMapper.get_error_message(StandardErrorCode.SUCCESS),
        )

    @classmethod
    def failure(
        cls,
        provider: str,
        standard_error: StandardErrorCode,
        error_code: str = "",
        error_message: str = "",
        request_id: str = "",
    ) -> "SmsResult":
        """Build a failed result; friendly message and retryability come from the mapper"""
        from .error_codes import ErrorCodeMapper

        return cls(
            success=False,
            request_id=request_id,
            error_code=error_code,
            error_message=error_message,
            provider=provider,
            standard_error=standard_error,
            friendly_message=ErrorCodeMapper.get_error_message(standard_error),
            retryable=ErrorCodeMapper.is_retryable_error(standard_error),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["standard_error"] = self.standard_error.value
        return data
