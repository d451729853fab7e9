"""
Aliyun Signer - RPC-style query string signature (HMAC-SHA1)

Signing steps:
1. Merge business parameters with the common parameters (AccessKeyId,
   SignatureMethod, SignatureVersion, Timestamp, SignatureNonce, Format,
   Version)
2. Drop any existing Signature, sort by key (code point order) and
   percent-encode each key and value
3. String to sign: POST&%2F&<percent-encoded canonical query string>
4. HMAC-SHA1 keyed with "<AccessKeySecret>&", base64 encoded

All functions here are pure: pass ``timestamp`` and ``nonce`` to get a
reproducible signature.
"""

import base64
import hashlib
import hmac
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional
from urllib.parse import quote

SIGNATURE_METHOD = "HMAC-SHA1"
SIGNATURE_VERSION = "1.0"
API_VERSION = "2017-05-25"
RESPONSE_FORMAT = "JSON"
HTTP_METHOD = "POST"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# quote() always keeps letters, digits and "_.-~"
_SAFE_CHARS = "~!'()"


@dataclass(frozen=True)
class AliyunSignedRequest:
    """A fully signed Aliyun request, ready for the transport"""
    url: str
    headers: Dict[str, str]
    parameters: Dict[str, str] = field(default_factory=dict)
    body: str = ""


def percent_encode(value: str) -> str:
    """
    Percent-encode a key or value for the canonical query string.

    Space becomes %20 and "*" becomes %2A; "~", "!", "'", "(" and ")"
    are kept as-is.
    """
    if not value:
        return ""
    return quote(value, safe=_SAFE_CHARS)


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """UTC timestamp with second resolution, e.g. 2024-01-02T03:04:05Z"""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


def canonicalize(parameters: Mapping[str, str]) -> str:
    """Sorted, percent-encoded ``key=value`` pairs joined with "&", Signature excluded"""
    pairs = (
        f"{percent_encode(key)}={percent_encode(value)}"
        for key, value in sorted(parameters.items())
        if key != "Signature"
    )
    return "&".join(pairs)


def string_to_sign(parameters: Mapping[str, str], method: str = HTTP_METHOD) -> str:
    return f"{method}&{percent_encode('/')}&{percent_encode(canonicalize(parameters))}"


def compute_signature(access_key_secret: str, parameters: Mapping[str, str]) -> str:
    """Base64 HMAC-SHA1 of the string to sign, keyed with ``secret + "&"``"""
    key = f"{access_key_secret}&".encode("utf-8")
    message = string_to_sign(parameters).encode("utf-8")
    digest = hmac.new(key, message, hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def build_parameters(
    access_key_id: str,
    parameters: Mapping[str, str],
    timestamp: Optional[str] = None,
    nonce: Optional[str] = None,
) -> Dict[str, str]:
    """Business parameters plus the common request parameters"""
    merged = {key: value for key, value in parameters.items() if key != "Signature"}
    merged.update({
        "AccessKeyId": access_key_id,
        "SignatureVersion": SIGNATURE_VERSION,
        "SignatureMethod": SIGNATURE_METHOD,
        "Timestamp": timestamp or format_timestamp(),
        "SignatureNonce": nonce or str(uuid.uuid4()),
        "Format": RESPONSE_FORMAT,
        "Version": API_VERSION,
    })
    return merged


def build_request(
    endpoint: str,
    access_key_id: str,
    access_key_secret: str,
    parameters: Mapping[str, str],
    scheme: str = "https",
    timestamp: Optional[str] = None,
    nonce: Optional[str] = None,
    user_agent: str = "PolySms/1.0.0",
) -> AliyunSignedRequest:
    """
    Build a signed Aliyun request.

    Args:
        endpoint: API host, e.g. "dysmsapi.aliyuncs.com"
        access_key_id: AccessKey ID
        access_key_secret: AccessKey secret
        parameters: Business parameters (Action, PhoneNumbers, ...)
        scheme: "https" or "http"
        timestamp: Fixed timestamp string (default: now, UTC)
        nonce: Fixed nonce (default: random UUID)
        user_agent: User-Agent header value

    Returns:
        AliyunSignedRequest whose URL carries every parameter and the Signature
    """
    signed = build_parameters(access_key_id, parameters, timestamp=timestamp, nonce=nonce)
    signed["Signature"] = compute_signature(access_key_secret, signed)

    query = "&".join(
        f"{percent_encode(key)}={percent_encode(value)}"
        for key, value in sorted(signed.items())
    )
    url = f"{scheme}://{endpoint.rstrip('/')}/?{query}"

    return AliyunSignedRequest(
        url=url,
        headers={"User-Agent": user_agent},
        parameters=signed,
    )
