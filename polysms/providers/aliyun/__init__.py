"""
Aliyun SMS - HMAC-SHA1 query signature provider
"""

from .provider import AliyunSMSProvider

__all__ = ["AliyunSMSProvider"]
