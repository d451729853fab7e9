"""
PolySms Application - Single entry point for configuration-driven sending.

Usage:
    from polysms import PolySms, SmsRequest

    async with PolySms("config.yaml") as sms:
        result = await sms.send(SmsRequest(
            phone_number="13800138000",
            template_id="SMS_001",
            template_params={"code": "123456"},
        ))

Config file layout:
    sms:
      default_provider: Aliyun
      enable_failover: true
      provider_priority: [Aliyun, Tencent]
      default_sign_name: MyBrand
    aliyun:
      access_key_id: ${ALIYUN_ACCESS_KEY_ID}
      access_key_secret: ${ALIYUN_ACCESS_KEY_SECRET}
    tencent:
      secret_id: ${TENCENT_SECRET_ID}
      secret_key: ${TENCENT_SECRET_KEY}
      sms_sdk_app_id: "1400000000"

Only providers with a section in the config are registered.
"""

import logging
import os
import re
import sys
from typing import Any, Dict, Optional, Union

import yaml

from .config import SmsConfig
from .errors import ConfigError
from .models import SmsRequest, SmsResult
from .protocols import TransportProtocol
from .providers.factory import SMSProviderFactory
from .service import ProviderSelector, SmsService
from .transport import DEFAULT_TIMEOUT, HttpxTransport

logger = logging.getLogger(__name__)

PROVIDER_SECTIONS = ("aliyun", "tencent")


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Basic stream logging for scripts and examples."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stdout,
    )


def _load_config(path: str) -> dict:
    """Read YAML config file with ${VAR} environment variable substitution."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = f.read()
    except OSError as e:
        raise ConfigError(f"Cannot read config file '{path}': {e}") from e

    # Replace ${VAR} with environment variable values
    def _replace_env(match):
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' not set "
                f"(referenced in config file '{path}')"
            )
        return value

    resolved = re.sub(r"\$\{(\w+)\}", _replace_env, raw)
    try:
        data = yaml.safe_load(resolved)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file '{path}': {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping at the top level")
    return data


def build_service(config: Dict[str, Any], transport: TransportProtocol) -> SmsService:
    """Create providers for every configured section and wire them into an SmsService."""
    sms_config = SmsConfig.from_dict(config.get("sms"))

    providers = []
    for section in PROVIDER_SECTIONS:
        if section not in config:
            continue
        providers.append(SMSProviderFactory.create_provider(
            section,
            config.get(section) or {},
            transport=transport,
            sms_config=sms_config,
        ))

    if not providers:
        logger.warning(f"No SMS provider configured (expected one of: {', '.join(PROVIDER_SECTIONS)})")

    return SmsService(providers, sms_config)


class PolySms:
    """
    PolySms application entry point.

    Reads config, builds the transport, providers and SmsService.

    Args:
        config: Path to a YAML configuration file, or an already-loaded dict
        transport: Custom transport (default: HttpxTransport owned by this app)

    Example:
        sms = PolySms("config.yaml")
        result = await sms.send(request)
        await sms.aclose()
    """

    def __init__(
        self,
        config: Union[str, os.PathLike, Dict[str, Any]],
        transport: Optional[TransportProtocol] = None,
    ):
        if isinstance(config, dict):
            self._config = config
        else:
            self._config = _load_config(os.fspath(config))

        timeout = float((self._config.get("http") or {}).get("timeout", DEFAULT_TIMEOUT))
        self._owns_transport = transport is None
        self.transport = transport or HttpxTransport(timeout=timeout)
        self.service = build_service(self._config, self.transport)

    async def __aenter__(self) -> "PolySms":
        if self._owns_transport:
            await self.transport.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the HTTP transport if this app created it."""
        if self._owns_transport:
            await self.transport.aclose()

    async def send(self, request: SmsRequest, provider: Optional[ProviderSelector] = None) -> SmsResult:
        """Send via the default provider (with failover), or via ``provider`` when given"""
        if provider is None:
            return await self.service.send(request)
        return await self.service.send_via(request, provider)
