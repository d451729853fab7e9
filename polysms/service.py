"""
PolySms Service - Provider selection and sequential failover

SmsService holds the registered providers and routes each request to one
of them. With failover enabled, a failed send through the default
provider is retried on the remaining providers in priority order, one at
a time, stopping at the first success.

Usage:
    from polysms import SmsService, SmsConfig, SmsRequest, SmsProvider

    service = SmsService([aliyun, tencent], SmsConfig(default_provider="Aliyun"))
    result = await service.send(request)
    result = await service.send_via(request, "Tencent")
    result = await service.send_via(request, SmsProvider.TENCENT)
"""

import logging
from typing import Dict, List, Optional, Sequence, Set, Union

from .config import SmsConfig
from .debug_log import mask_phone
from .error_codes import ErrorCodeMapper
from .models import SmsProvider, SmsRequest, SmsResult, StandardErrorCode
from .providers.base import BaseSMSProvider

logger = logging.getLogger(__name__)

ProviderSelector = Union[str, SmsProvider]


class SmsService:
    """
    Dispatches SMS requests across registered providers.

    Provider names are matched case-insensitively. The registry is fixed
    at construction; concurrent sends share only read-only state.

    Args:
        providers: Provider instances, in registration order
        config: Dispatcher configuration (default: SmsConfig())

    Raises:
        ValueError: If two providers share a name (case-insensitive)
    """

    def __init__(
        self,
        providers: Sequence[BaseSMSProvider],
        config: Optional[SmsConfig] = None,
    ):
        if providers is None:
            raise ValueError("providers is required")
        self.config = config or SmsConfig()

        self._providers: Dict[str, BaseSMSProvider] = {}
        for provider in providers:
            key = provider.provider_name.lower()
            if key in self._providers:
                raise ValueError(
                    f"Duplicate SMS provider name: '{provider.provider_name}' "
                    f"collides with '{self._providers[key].provider_name}'"
                )
            self._providers[key] = provider

        logger.info(
            f"SmsService initialized with providers {self.list_available_providers()} "
            f"(default={self.config.default_provider}, failover={self.config.enable_failover})"
        )

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    async def send(self, request: SmsRequest) -> SmsResult:
        """
        Send through the default provider, failing over when enabled.

        Returns:
            The first successful result, or the last attempted failure
        """
        self._require_request(request)

        default_provider = self.config.default_provider
        logger.info(f"Using default provider: {default_provider}")
        result = await self._dispatch(request, default_provider)

        if result.success or not self.config.enable_failover:
            return result

        logger.warning(f"Default provider {default_provider} failed, trying failover providers")

        attempted: Set[str] = {(default_provider or "").lower()}
        for name in self.config.provider_priority:
            key = (name or "").lower()
            if key in attempted or key not in self._providers:
                continue
            attempted.add(key)

            logger.info(f"Trying failover provider: {name}")
            result = await self._dispatch(request, name)
            if result.success:
                logger.info(f"Failover successful with provider: {result.provider}")
                return result

        logger.warning(
            f"All providers failed; returning last result from {result.provider} "
            f"({result.standard_error.value}: {result.error_code})"
        )
        return result

    async def send_via(self, request: SmsRequest, provider: Optional[ProviderSelector]) -> SmsResult:
        """
        Send through one specific provider, without failover.

        Args:
            request: The send request
            provider: Provider name (case-insensitive) or SmsProvider member

        Returns:
            The provider's SmsResult, or a PROVIDER_NOT_FOUND /
            INVALID_PROVIDER_NAME failure
        """
        self._require_request(request)
        return await self._dispatch(request, self.resolve_provider_name(provider))

    def list_available_providers(self) -> List[str]:
        """Registered provider names, in registration order"""
        return [provider.provider_name for provider in self._providers.values()]

    def is_available(self, provider: Optional[ProviderSelector]) -> bool:
        """Whether a provider with this name (or selector) is registered"""
        name = self.resolve_provider_name(provider)
        if not name or not name.strip():
            return False
        return name.lower() in self._providers

    def get_provider(self, provider: Optional[ProviderSelector]) -> Optional[BaseSMSProvider]:
        name = self.resolve_provider_name(provider)
        if not name:
            return None
        return self._providers.get(name.lower())

    def resolve_provider_name(self, provider: Optional[ProviderSelector]) -> Optional[str]:
        """Map a selector to a provider name; AUTO means the configured default"""
        if isinstance(provider, SmsProvider):
            if provider is SmsProvider.AUTO:
                return self.config.default_provider
            return provider.value
        return provider

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    @staticmethod
    def _require_request(request: Optional[SmsRequest]) -> None:
        if request is None:
            raise ValueError("request is required")

    async def _dispatch(self, request: SmsRequest, provider_name: Optional[str]) -> SmsResult:
        """Single name-based send path shared by every entry point."""
        if provider_name is None or not provider_name.strip():
            logger.error("Provider name cannot be null or empty")
            return SmsResult.failure(
                provider=provider_name or "",
                standard_error=StandardErrorCode.INVALID_PROVIDER_NAME,
                error_code="INVALID_PROVIDER_NAME",
                error_message="Provider name cannot be null or empty",
            )

        provider = self._providers.get(provider_name.lower())
        if provider is None:
            logger.error(f"Provider {provider_name} not found")
            return SmsResult.failure(
                provider=provider_name,
                standard_error=StandardErrorCode.PROVIDER_NOT_FOUND,
                error_code="PROVIDER_NOT_FOUND",
                error_message=f"Provider {provider_name} not found",
            )

        logger.info(f"Sending SMS via {provider.provider_name} to {mask_phone(request.phone_number)}")
        try:
            result = await provider.send_sms(request)
        except Exception as e:
            logger.error(f"Exception occurred while sending SMS via {provider.provider_name}: {e}", exc_info=True)
            result = SmsResult.failure(
                provider=provider.provider_name,
                standard_error=ErrorCodeMapper.classify_exception(e),
                error_code="EXCEPTION",
                error_message=str(e) or type(e).__name__,
            )

        result.provider = provider.provider_name

        if result.success:
            logger.info(f"SMS sent successfully via {provider.provider_name}, RequestId: {result.request_id}")
        else:
            logger.warning(
                f"SMS failed via {provider.provider_name}, Error: {result.error_code} - {result.error_message}"
            )
        return result
