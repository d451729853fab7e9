"""
PolySms Error Codes - Map vendor error codes onto StandardErrorCode

Each vendor reports failures in its own vocabulary. ErrorCodeMapper
translates them into the unified taxonomy, supplies a provider-agnostic
message for each kind, and decides which kinds are worth retrying.

Lookups never fail: a code missing from a table maps to UNKNOWN.
"""

import asyncio
from typing import Dict, FrozenSet

import httpx

from .errors import TransportError
from .models import StandardErrorCode


class ErrorCodeMapper:
    """
    Static lookup tables from vendor codes to StandardErrorCode.

    Example:
        kind = ErrorCodeMapper.map_aliyun_error("Throttling.User")
        ErrorCodeMapper.is_retryable_error(kind)   # True
        ErrorCodeMapper.get_error_message(kind)
    """

    ALIYUN_ERRORS: Dict[str, StandardErrorCode] = {
        "OK": StandardErrorCode.SUCCESS,
        "InvalidParameter": StandardErrorCode.INVALID_PARAMETER,
        "SignatureDoesNotMatch": StandardErrorCode.AUTHENTICATION_FAILED,
        "InvalidAccessKeyId.NotFound": StandardErrorCode.AUTHENTICATION_FAILED,
        "InvalidTimeStamp.Expired": StandardErrorCode.AUTHENTICATION_FAILED,
        "Forbidden.AccessKeyDisabled": StandardErrorCode.INSUFFICIENT_PERMISSIONS,
        "InsufficientBalance": StandardErrorCode.INSUFFICIENT_BALANCE,
        "Throttling.User": StandardErrorCode.RATE_LIMIT_EXCEEDED,
        "InvalidTemplateCode.MalFormed": StandardErrorCode.TEMPLATE_NOT_FOUND,
        "InvalidSignName.MalFormed": StandardErrorCode.SIGNATURE_NOT_FOUND,
        "InvalidRecNum.MalFormed": StandardErrorCode.INVALID_PHONE_NUMBER,
        "InternalError": StandardErrorCode.PROVIDER_INTERNAL_ERROR,
    }

    TENCENT_ERRORS: Dict[str, StandardErrorCode] = {
        "Ok": StandardErrorCode.SUCCESS,
        "InvalidParameter": StandardErrorCode.INVALID_PARAMETER,
        "AuthFailure.SignatureFailure": StandardErrorCode.AUTHENTICATION_FAILED,
        "AuthFailure.SecretIdNotFound": StandardErrorCode.AUTHENTICATION_FAILED,
        "AuthFailure.TokenFailure": StandardErrorCode.AUTHENTICATION_FAILED,
        "UnauthorizedOperation": StandardErrorCode.INSUFFICIENT_PERMISSIONS,
        "RequestLimitExceeded": StandardErrorCode.RATE_LIMIT_EXCEEDED,
        "InvalidParameterValue.TemplateIDInvalid": StandardErrorCode.TEMPLATE_NOT_FOUND,
        "InvalidParameterValue.SignNameInvalid": StandardErrorCode.SIGNATURE_NOT_FOUND,
        "InvalidParameterValue.PhoneNumberInvalid": StandardErrorCode.INVALID_PHONE_NUMBER,
        "LimitExceeded.PhoneNumberDailyLimit": StandardErrorCode.RATE_LIMIT_EXCEEDED,
        "InternalError": StandardErrorCode.PROVIDER_INTERNAL_ERROR,
    }

    MESSAGES: Dict[StandardErrorCode, str] = {
        StandardErrorCode.SUCCESS: "Message sent successfully",
        StandardErrorCode.INVALID_PARAMETER: "Invalid request parameter",
        StandardErrorCode.AUTHENTICATION_FAILED: "Authentication failed, check your access keys",
        StandardErrorCode.INSUFFICIENT_PERMISSIONS: "Insufficient permissions",
        StandardErrorCode.INSUFFICIENT_BALANCE: "Insufficient account balance",
        StandardErrorCode.RATE_LIMIT_EXCEEDED: "Sending rate limit exceeded, please retry later",
        StandardErrorCode.TEMPLATE_NOT_FOUND: "SMS template not found",
        StandardErrorCode.SIGNATURE_NOT_FOUND: "SMS sign name not found",
        StandardErrorCode.INVALID_PHONE_NUMBER: "Invalid phone number",
        StandardErrorCode.NETWORK_ERROR: "Network connection error",
        StandardErrorCode.PROVIDER_INTERNAL_ERROR: "Provider internal error",
        StandardErrorCode.UNKNOWN: "Unknown error",
        StandardErrorCode.PROVIDER_NOT_FOUND: "SMS provider not found",
        StandardErrorCode.INVALID_PROVIDER_NAME: "SMS provider name cannot be empty",
    }

    RETRYABLE: FrozenSet[StandardErrorCode] = frozenset({
        StandardErrorCode.NETWORK_ERROR,
        StandardErrorCode.PROVIDER_INTERNAL_ERROR,
        StandardErrorCode.RATE_LIMIT_EXCEEDED,
    })

    @classmethod
    def map_aliyun_error(cls, code: str) -> StandardErrorCode:
        """Map an Aliyun ``Code`` value to a StandardErrorCode"""
        return cls.ALIYUN_ERRORS.get(code, StandardErrorCode.UNKNOWN)

    @classmethod
    def map_tencent_error(cls, code: str) -> StandardErrorCode:
        """Map a Tencent Cloud ``Code`` value to a StandardErrorCode"""
        return cls.TENCENT_ERRORS.get(code, StandardErrorCode.UNKNOWN)

    @classmethod
    def map_error(cls, provider: str, code: str) -> StandardErrorCode:
        """
        Map a vendor code using the table of the named provider.

        Args:
            provider: Provider name (case-insensitive, e.g. "aliyun")
            code: Vendor-native error code

        Returns:
            Matching StandardErrorCode, UNKNOWN for unknown providers or codes
        """
        tables = {
            "aliyun": cls.ALIYUN_ERRORS,
            "tencent": cls.TENCENT_ERRORS,
        }
        table = tables.get((provider or "").lower(), {})
        return table.get(code, StandardErrorCode.UNKNOWN)

    @classmethod
    def get_error_message(cls, kind: StandardErrorCode) -> str:
        """Provider-agnostic message suitable for end users"""
        return cls.MESSAGES.get(kind, cls.MESSAGES[StandardErrorCode.UNKNOWN])

    @classmethod
    def is_retryable_error(cls, kind: StandardErrorCode) -> bool:
        return kind in cls.RETRYABLE

    @staticmethod
    def map_http_status(status_code: int) -> StandardErrorCode:
        """Classify a response whose body carried no vendor error code"""
        if status_code == 429:
            return StandardErrorCode.RATE_LIMIT_EXCEEDED
        if status_code >= 500:
            return StandardErrorCode.PROVIDER_INTERNAL_ERROR
        return StandardErrorCode.UNKNOWN

    @staticmethod
    def classify_exception(error: BaseException) -> StandardErrorCode:
        """NETWORK_ERROR for transport failures and timeouts, UNKNOWN otherwise"""
        if isinstance(error, (httpx.TransportError, TransportError, asyncio.TimeoutError, ConnectionError)):
            return StandardErrorCode.NETWORK_ERROR
        return StandardErrorCode.UNKNOWN
