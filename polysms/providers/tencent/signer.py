"""
Tencent Signer - TC3-HMAC-SHA256 request signature

Signing steps:
1. Canonical request: method, path, empty query, canonical headers
   (content-type and host), signed header list and the hex SHA-256 of
   the body
2. Credential scope: <date>/sms/tc3_request (date in UTC)
3. String to sign: algorithm, timestamp, credential scope, hex SHA-256
   of the canonical request
4. Signing key: HMAC chain "TC3"+secret -> date -> service -> "tc3_request"
5. Signature: lowercase hex HMAC-SHA256 of the string to sign

The body bytes that are hashed are the bytes transmitted.
"""

import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple, Union
from urllib.parse import urlsplit

ALGORITHM = "TC3-HMAC-SHA256"
SERVICE = "sms"
API_VERSION = "2021-01-11"
TERMINATOR = "tc3_request"
CONTENT_TYPE = "application/json; charset=utf-8"
SIGNED_HEADERS = "content-type;host"
HTTP_METHOD = "POST"

_DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True)
class TencentSignedRequest:
    """A fully signed Tencent Cloud request plus its signing intermediates"""
    url: str
    headers: Dict[str, str]
    body: str
    canonical_request: str
    string_to_sign: str
    signature: str


def sha256_hex(data: Union[str, bytes]) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def resolve_endpoint(endpoint: str, scheme: str = "https") -> Tuple[str, str, str]:
    """
    Split an endpoint into (scheme, host, path).

    ``endpoint`` may be a bare host ("sms.tencentcloudapi.com"), a host
    with port, or a full URL. The port is kept in ``host`` only when it
    is not the default for the scheme; ``path`` defaults to "/".
    """
    if "://" not in endpoint:
        endpoint = f"{scheme}://{endpoint}"
    parts = urlsplit(endpoint)
    scheme = parts.scheme or scheme
    host = parts.hostname or ""
    if parts.port is not None and parts.port != _DEFAULT_PORTS.get(scheme):
        host = f"{host}:{parts.port}"
    path = parts.path or "/"
    return scheme, host, path


def serialize_payload(payload: Mapping[str, Any]) -> str:
    """Compact JSON; key order is preserved so repeated calls hash identically"""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def canonical_headers(host: str, content_type: str = CONTENT_TYPE) -> str:
    return f"content-type:{content_type}\nhost:{host}\n".lower()


def build_canonical_request(path: str, host: str, body: str) -> str:
    return "\n".join([
        HTTP_METHOD,
        path,
        "",
        canonical_headers(host),
        SIGNED_HEADERS,
        sha256_hex(body),
    ])


def utc_date(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


def credential_scope(date: str, service: str = SERVICE) -> str:
    return f"{date}/{service}/{TERMINATOR}"


def build_string_to_sign(timestamp: int, scope: str, canonical_request: str) -> str:
    return f"{ALGORITHM}\n{timestamp}\n{scope}\n{sha256_hex(canonical_request)}"


def sign(secret_key: str, date: str, string_to_sign: str, service: str = SERVICE) -> str:
    """Derive the signing key and return the lowercase hex signature"""
    secret_date = hmac_sha256(f"TC3{secret_key}".encode("utf-8"), date)
    secret_service = hmac_sha256(secret_date, service)
    secret_signing = hmac_sha256(secret_service, TERMINATOR)
    return hmac.new(secret_signing, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()


def build_request(
    endpoint: str,
    region: str,
    secret_id: str,
    secret_key: str,
    payload: Mapping[str, Any],
    action: str = "SendSms",
    scheme: str = "https",
    signing_endpoint: Optional[str] = None,
    timestamp: Optional[int] = None,
) -> TencentSignedRequest:
    """
    Build a signed Tencent Cloud API request.

    Args:
        endpoint: Where the request is sent (host or URL)
        region: X-TC-Region value, e.g. "ap-beijing"
        secret_id: SecretId
        secret_key: SecretKey
        payload: Action parameters, serialized as the JSON body
        action: X-TC-Action value
        scheme: Scheme used when ``endpoint`` has none
        signing_endpoint: Host the signature is computed for (default: endpoint)
        timestamp: Fixed epoch seconds (default: now)

    Returns:
        TencentSignedRequest with URL, headers and the exact body to send
    """
    url_scheme, url_host, url_path = resolve_endpoint(endpoint, scheme)
    if signing_endpoint:
        _, sign_host, sign_path = resolve_endpoint(signing_endpoint, scheme)
    else:
        sign_host, sign_path = url_host, url_path

    if timestamp is None:
        timestamp = int(time.time())
    date = utc_date(timestamp)
    body = serialize_payload(payload)

    canonical_request = build_canonical_request(sign_path, sign_host, body)
    scope = credential_scope(date)
    to_sign = build_string_to_sign(timestamp, scope, canonical_request)
    signature = sign(secret_key, date, to_sign)

    authorization = (
        f"{ALGORITHM} Credential={secret_id}/{scope}, "
        f"SignedHeaders={SIGNED_HEADERS}, Signature={signature}"
    )
    headers = {
        "Authorization": authorization,
        "Content-Type": CONTENT_TYPE,
        "Host": sign_host,
        "X-TC-Action": action,
        "X-TC-Timestamp": str(timestamp),
        "X-TC-Version": API_VERSION,
        "X-TC-Region": region,
    }

    return TencentSignedRequest(
        url=f"{url_scheme}://{url_host}{url_path}",
        headers=headers,
        body=body,
        canonical_request=canonical_request,
        string_to_sign=to_sign,
        signature=signature,
    )
