"""
Tencent Cloud SMS - TC3-HMAC-SHA256 provider
"""

from .provider import TencentSMSProvider

__all__ = ["TencentSMSProvider"]
