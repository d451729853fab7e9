"""
PolySms - Vendor-agnostic SMS gateway with automatic failover

PolySms sends template SMS through Aliyun or Tencent Cloud behind one
request/response shape. Vendor error codes are normalized into
StandardErrorCode with a friendly message and a retryable flag.

Quick Start:
    from polysms import PolySms, SmsRequest, SmsProvider

    async with PolySms("config.yaml") as sms:
        request = SmsRequest(
            phone_number="13800138000",
            template_id="SMS_001",
            template_params={"code": "123456"},
            sign_name="MyBrand",
        )

        # Default provider, failing over in priority order
        result = await sms.send(request)

        # A specific provider
        result = await sms.send(request, "Tencent")
        result = await sms.send(request, SmsProvider.ALIYUN)

        if not result.success and result.retryable:
            ...

Programmatic wiring:
    from polysms import SmsService, SmsConfig, HttpxTransport
    from polysms.providers import AliyunSMSProvider
    from polysms.config import AliyunConfig

    transport = HttpxTransport()
    aliyun = AliyunSMSProvider(AliyunConfig(access_key_id="...", access_key_secret="..."), transport)
    service = SmsService([aliyun], SmsConfig(default_provider="Aliyun"))
"""

from .app import PolySms, configure_logging
from .config import AliyunConfig, SmsConfig, TencentConfig
from .error_codes import ErrorCodeMapper
from .errors import ConfigError, PolySmsError, TransportError
from .models import SmsProvider, SmsRequest, SmsResult, StandardErrorCode
from .protocols import TransportProtocol, TransportResponse
from .service import SmsService
from .transport import HttpxTransport

__version__ = "1.0.0"

__all__ = [
    # Application
    "PolySms",
    "configure_logging",
    "SmsService",
    # Models
    "SmsRequest",
    "SmsResult",
    "SmsProvider",
    "StandardErrorCode",
    "ErrorCodeMapper",
    # Config
    "SmsConfig",
    "AliyunConfig",
    "TencentConfig",
    # Transport
    "HttpxTransport",
    "TransportProtocol",
    "TransportResponse",
    # Errors
    "PolySmsError",
    "ConfigError",
    "TransportError",
]
