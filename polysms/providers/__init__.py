"""
SMS providers - Aliyun, Tencent Cloud
"""

from .base import BaseSMSProvider, ParsedError, ParsedOk
from .aliyun import AliyunSMSProvider
from .tencent import TencentSMSProvider
from .factory import SMSProviderFactory

__all__ = [
    "BaseSMSProvider",
    "ParsedOk",
    "ParsedError",
    "AliyunSMSProvider",
    "TencentSMSProvider",
    "SMSProviderFactory",
]
