"""
PolySms Config - Dataclass configuration for the dispatcher and providers

This module provides:
- SmsConfig: Dispatcher settings (default provider, failover, priority)
- AliyunConfig: Aliyun SMS credentials and endpoint
- TencentConfig: Tencent Cloud SMS credentials and endpoint

Each config can be built from a plain dict (e.g. a YAML section) with
``from_dict``; unknown keys are ignored with a warning, and values are
checked against the field types (numbers are accepted for string fields).
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Type, TypeVar, Union, get_args, get_origin

from .errors import ConfigError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _coerce(section: str, name: str, annotation: Any, value: Any) -> Any:
    """Check one config value against its field type; numbers become strings for str fields."""
    where = f"'{section}.{name}'"
    if get_origin(annotation) is Union:
        annotation = next(arg for arg in get_args(annotation) if arg is not type(None))

    if annotation is bool:
        if not isinstance(value, bool):
            raise ConfigError(f"{where} must be true or false, got {value!r}")
        return value

    if annotation is str:
        if isinstance(value, str):
            return value
        # YAML reads unquoted ids such as 1400000000 as numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        raise ConfigError(f"{where} must be a string, got {type(value).__name__}")

    if get_origin(annotation) in (list, List):
        if not isinstance(value, (list, tuple)):
            raise ConfigError(f"{where} must be a list, got {type(value).__name__}")
        (item_type,) = get_args(annotation)
        return [_coerce(section, name, item_type, item) for item in value]

    return value


def _build(cls: Type[T], section: str, data: Optional[Dict[str, Any]]) -> T:
    """Instantiate a config dataclass from a dict section."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config section '{section}' must be a mapping, got {type(data).__name__}")

    known = {f.name: f for f in fields(cls)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        logger.warning(f"Ignoring unknown keys in '{section}' config: {unknown}")

    kwargs = {}
    for name, value in data.items():
        if name not in known:
            continue
        if value is None:
            # an empty YAML value keeps the field default
            continue
        kwargs[name] = _coerce(section, name, known[name].type, value)

    try:
        return cls(**kwargs)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid '{section}' config: {e}") from e


@dataclass(frozen=True)
class SmsConfig:
    """
    Dispatcher configuration.

    Attributes:
        default_provider: Provider used by SmsService.send()
        enable_failover: Try other providers when the default fails
        provider_priority: Failover order (names, case-insensitive)
        default_sign_name: Sign name used when a request has none
        enable_debug_log: Log redacted request/response bodies at DEBUG
    """
    default_provider: str = "Aliyun"
    enable_failover: bool = True
    provider_priority: List[str] = field(default_factory=lambda: ["Aliyun", "Tencent"])
    default_sign_name: Optional[str] = None
    enable_debug_log: bool = False

    def __post_init__(self):
        if isinstance(self.provider_priority, str):
            raise ValueError("provider_priority must be a list of provider names")
        # copy so the caller's list is never shared
        object.__setattr__(self, "provider_priority", list(self.provider_priority))

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SmsConfig":
        return _build(cls, "sms", data)


@dataclass(frozen=True)
class AliyunConfig:
    """Aliyun (dysmsapi) credentials"""
    access_key_id: str = ""
    access_key_secret: str = ""
    endpoint: str = "dysmsapi.aliyuncs.com"
    use_https: bool = True

    @property
    def scheme(self) -> str:
        return "https" if self.use_https else "http"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AliyunConfig":
        return _build(cls, "aliyun", data)


@dataclass(frozen=True)
class TencentConfig:
    """
    Tencent Cloud SMS credentials.

    ``origin_endpoint`` is the official host used for signing when
    ``endpoint`` points at an internal proxy. It defaults to ``endpoint``.
    """
    secret_id: str = ""
    secret_key: str = ""
    region: str = "ap-beijing"
    sms_sdk_app_id: str = ""
    endpoint: str = "sms.tencentcloudapi.com"
    use_https: bool = True
    origin_endpoint: Optional[str] = None

    @property
    def scheme(self) -> str:
        return "https" if self.use_https else "http"

    @property
    def signing_endpoint(self) -> str:
        return self.origin_endpoint or self.endpoint

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TencentConfig":
        return _build(cls, "tencent", data)
