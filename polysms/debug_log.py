"""
PolySms Debug Log - Redacted request/response logging

When ``SmsConfig.enable_debug_log`` is on, providers hand every outbound
request and inbound response to DebugLogger. Credentials, signatures and
template parameters are replaced with ``***`` and mainland mobile
numbers are partially masked before anything is emitted.

The redaction helpers are pure functions and are usable on their own.
"""

import json
import logging
import re
from typing import Any, Dict, Optional
from urllib.parse import unquote

logger = logging.getLogger(__name__)

MASK = "***"

SENSITIVE_QUERY_PARAMS = ("Signature", "AccessKeyId", "SignatureNonce", "TemplateParam")
SENSITIVE_HEADERS = frozenset({"authorization", "x-tc-token"})
SENSITIVE_FIELDS = frozenset({
    "secretkey",
    "secretid",
    "accesskeysecret",
    "accesskeyid",
    "templateparamset",
    "templateparam",
})

_MOBILE_RE = re.compile(r"^(\+?86)?1[3-9]\d{9}$")


def mask_phone(value: str) -> str:
    """Keep the first 3 and last 4 digits of a mainland mobile number."""
    if not value or not _MOBILE_RE.match(value):
        return value
    prefix = value[:-11]
    number = value[-11:]
    return f"{prefix}{number[:3]}****{number[-4:]}"


def sanitize_url(url: str) -> str:
    """Redact signing parameters and mask phone numbers in a query string."""
    if not url:
        return url
    for param in SENSITIVE_QUERY_PARAMS:
        url = re.sub(rf"([?&]){param}=[^&]*", rf"\g<1>{param}={MASK}", url)

    def _mask_numbers(match: "re.Match[str]") -> str:
        numbers = unquote(match.group(2)).split(",")
        return match.group(1) + ",".join(mask_phone(n) for n in numbers)

    return re.sub(r"([?&]PhoneNumbers=)([^&]*)", _mask_numbers, url)


def sanitize_headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    """Return a copy of headers with credentials redacted."""
    return {
        key: MASK if key.lower() in SENSITIVE_HEADERS else value
        for key, value in (headers or {}).items()
    }


def _sanitize_value(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: MASK if key.lower() in SENSITIVE_FIELDS else _sanitize_value(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_sanitize_value(item) for item in value]
    if isinstance(value, str):
        return mask_phone(value)
    return value


def sanitize_body(body: str) -> str:
    """Redact a JSON body. Non-JSON bodies are returned unchanged."""
    if not body:
        return body
    try:
        parsed = json.loads(body)
    except ValueError:
        return body
    return json.dumps(_sanitize_value(parsed), ensure_ascii=False, indent=2)


class DebugLogger:
    """
    Emits redacted HTTP traffic at DEBUG level.

    Logging failures are reported and discarded so that the send path
    is never interrupted.
    """

    def __init__(self, enabled: bool = False, log: Optional[logging.Logger] = None):
        self.enabled = enabled
        self._log = log or logger

    def _active(self) -> bool:
        return self.enabled and self._log.isEnabledFor(logging.DEBUG)

    def log_request(self, provider: str, url: str, headers: Dict[str, str], body: str) -> None:
        if not self._active():
            return
        try:
            self._log.debug(f"[{provider}] HTTP Request - URL: {sanitize_url(url)}")
            headers_json = json.dumps(sanitize_headers(headers), ensure_ascii=False)
            self._log.debug(f"[{provider}] HTTP Request - Headers: {headers_json}")
            if body:
                self._log.debug(f"[{provider}] HTTP Request - Body: {sanitize_body(body)}")
        except Exception:
            logger.warning("Failed to write debug request log", exc_info=True)

    def log_response(self, provider: str, status_code: int, body: str) -> None:
        if not self._active():
            return
        try:
            self._log.debug(f"[{provider}] HTTP Response - Status: {status_code}")
            self._log.debug(f"[{provider}] HTTP Response - Content: {sanitize_body(body)}")
        except Exception:
            logger.warning("Failed to write debug response log", exc_info=True)
