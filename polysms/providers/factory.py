"""
SMS Provider Factory - Creates SMS provider instances based on configuration
"""

import logging
from typing import Any, Dict, List, Optional, Type

from ..config import AliyunConfig, SmsConfig, TencentConfig
from ..errors import ConfigError
from ..protocols import TransportProtocol
from .base import BaseSMSProvider

logger = logging.getLogger(__name__)


class SMSProviderFactory:
    """
    Factory for creating SMS providers.

    Supported providers:
    - aliyun: Aliyun SMS (dysmsapi)
    - tencent: Tencent Cloud SMS

    Examples:
        provider = SMSProviderFactory.create_provider(
            "aliyun",
            {"access_key_id": "xxx", "access_key_secret": "xxx"},
            transport=HttpxTransport(),
        )
    """

    # provider key -> (provider class, config class)
    _providers: Dict[str, tuple] = {}

    @classmethod
    def register_provider(
        cls,
        provider_name: str,
        provider_class: Type[BaseSMSProvider],
        config_class: Type[Any],
    ) -> None:
        """
        Register a provider implementation.

        Args:
            provider_name: Provider identifier (e.g., "aliyun", "tencent")
            provider_class: Provider class (must inherit from BaseSMSProvider)
            config_class: Dataclass with a ``from_dict`` constructor
        """
        if not issubclass(provider_class, BaseSMSProvider):
            raise TypeError(f"{provider_class} must inherit from BaseSMSProvider")

        cls._providers[provider_name.lower()] = (provider_class, config_class)
        logger.debug(f"Registered SMS provider: {provider_name}")

    @classmethod
    def create_provider(
        cls,
        provider_type: str,
        config: Any,
        transport: TransportProtocol,
        sms_config: Optional[SmsConfig] = None,
    ) -> BaseSMSProvider:
        """
        Create SMS provider instance.

        Args:
            provider_type: Type of provider ("aliyun", "tencent")
            config: Provider config dataclass, or a dict to build one from
            transport: HTTP transport shared by providers
            sms_config: Dispatcher config (default sign name, debug log)

        Returns:
            SMS provider instance

        Raises:
            ConfigError: If the provider type is not supported
        """
        entry = cls._providers.get((provider_type or "").lower())
        if entry is None:
            raise ConfigError(
                f"Unknown SMS provider type: {provider_type} "
                f"(supported: {cls.get_supported_providers()})"
            )

        provider_class, config_class = entry
        if config is None or isinstance(config, dict):
            config = config_class.from_dict(config)
        elif not isinstance(config, config_class):
            raise ConfigError(
                f"Invalid {provider_type} config: expected dict or {config_class.__name__}, "
                f"got {type(config).__name__}"
            )

        provider = provider_class(config=config, transport=transport, sms_config=sms_config)
        logger.info(f"Created {provider.provider_name} SMS provider")
        return provider

    @classmethod
    def get_supported_providers(cls) -> List[str]:
        """Get list of supported provider names."""
        return list(cls._providers.keys())


def _register_providers():
    """Register the built-in providers."""
    from .aliyun import AliyunSMSProvider
    from .tencent import TencentSMSProvider

    SMSProviderFactory.register_provider("aliyun", AliyunSMSProvider, AliyunConfig)
    SMSProviderFactory.register_provider("tencent", TencentSMSProvider, TencentConfig)


_register_providers()
