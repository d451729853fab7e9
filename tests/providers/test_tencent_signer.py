"""Tests for polysms.providers.tencent.signer — TC3-HMAC-SHA256"""

import hashlib
import hmac
import json

import pytest

from polysms.providers.tencent import signer


TIMESTAMP = 1704067200  # 2024-01-01T00:00:00Z

PAYLOAD = {
    "PhoneNumberSet": ["+8613800138000"],
    "SmsSdkAppId": "1400000000",
    "SignName": "测试签名",
    "TemplateId": "1234567",
    "TemplateParamSet": ["123456"],
}


def _sign(**kwargs):
    params = dict(
        endpoint="sms.tencentcloudapi.com",
        region="ap-guangzhou",
        secret_id="AKIDEXAMPLE",
        secret_key="secretkey",
        payload=PAYLOAD,
        timestamp=TIMESTAMP,
    )
    params.update(kwargs)
    return signer.build_request(**params)


def _hmac(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


# =========================================================================
# resolve_endpoint
# =========================================================================


class TestResolveEndpoint:

    def test_bare_host(self):
        assert signer.resolve_endpoint("sms.tencentcloudapi.com") == ("https", "sms.tencentcloudapi.com", "/")

    def test_default_port_dropped(self):
        assert signer.resolve_endpoint("https://sms.tencentcloudapi.com:443") == (
            "https", "sms.tencentcloudapi.com", "/",
        )
        assert signer.resolve_endpoint("proxy.local:80", scheme="http") == ("http", "proxy.local", "/")

    def test_custom_port_kept(self):
        assert signer.resolve_endpoint("http://proxy.local:8080/sms") == ("http", "proxy.local:8080", "/sms")

    def test_scheme_fallback(self):
        assert signer.resolve_endpoint("sms.tencentcloudapi.com", scheme="http")[0] == "http"


# =========================================================================
# Signing
# =========================================================================


class TestSignature:

    def test_body_hash_round_trip(self):
        signed = _sign()
        body_hash = hashlib.sha256(signed.body.encode("utf-8")).hexdigest()

        assert signed.canonical_request.split("\n")[-1] == body_hash
        assert signed.string_to_sign.split("\n")[-1] == hashlib.sha256(
            signed.canonical_request.encode("utf-8")
        ).hexdigest()

    def test_body_is_compact_json_of_payload(self):
        signed = _sign()
        assert json.loads(signed.body) == PAYLOAD
        assert ", " not in signed.body
        assert list(json.loads(signed.body)) == list(PAYLOAD)

    def test_canonical_request_layout(self):
        signed = _sign()
        lines = signed.canonical_request.split("\n")

        assert lines[0] == "POST"
        assert lines[1] == "/"
        assert lines[2] == ""
        assert lines[3] == "content-type:application/json; charset=utf-8"
        assert lines[4] == "host:sms.tencentcloudapi.com"
        assert lines[5] == ""
        assert lines[6] == "content-type;host"

    def test_canonical_headers_lowercased(self):
        assert signer.canonical_headers("SMS.TencentCloudAPI.com") == (
            "content-type:application/json; charset=utf-8\nhost:sms.tencentcloudapi.com\n"
        )

    def test_string_to_sign_layout(self):
        signed = _sign()
        lines = signed.string_to_sign.split("\n")

        assert lines[0] == "TC3-HMAC-SHA256"
        assert lines[1] == str(TIMESTAMP)
        assert lines[2] == "2024-01-01/sms/tc3_request"

    def test_matches_independent_computation(self):
        signed = _sign()

        body = json.dumps(PAYLOAD, ensure_ascii=False, separators=(",", ":"))
        canonical = "\n".join([
            "POST",
            "/",
            "",
            "content-type:application/json; charset=utf-8\nhost:sms.tencentcloudapi.com\n",
            "content-type;host",
            hashlib.sha256(body.encode("utf-8")).hexdigest(),
        ])
        to_sign = "\n".join([
            "TC3-HMAC-SHA256",
            str(TIMESTAMP),
            "2024-01-01/sms/tc3_request",
            hashlib.sha256(canonical.encode("utf-8")).hexdigest(),
        ])
        key = _hmac(_hmac(_hmac(b"TC3secretkey", "2024-01-01"), "sms"), "tc3_request")
        expected = hmac.new(key, to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

        assert signed.body == body
        assert signed.canonical_request == canonical
        assert signed.string_to_sign == to_sign
        assert signed.signature == expected

    def test_signature_is_lowercase_hex(self):
        signature = _sign().signature
        assert len(signature) == 64
        assert signature == signature.lower()
        int(signature, 16)

    def test_deterministic(self):
        assert _sign().signature == _sign().signature

    def test_inputs_change_signature(self):
        base = _sign().signature
        assert _sign(secret_key="other").signature != base
        assert _sign(timestamp=TIMESTAMP + 1).signature != base
        assert _sign(payload=dict(PAYLOAD, TemplateId="7654321")).signature != base

    def test_date_is_utc(self):
        # 2024-01-01T23:30:00Z is already 2024-01-02 in UTC+8
        assert signer.utc_date(1704151800) == "2024-01-01"


# =========================================================================
# Headers and URL
# =========================================================================


class TestHeaders:

    def test_authorization(self):
        signed = _sign()
        assert signed.headers["Authorization"] == (
            "TC3-HMAC-SHA256 Credential=AKIDEXAMPLE/2024-01-01/sms/tc3_request, "
            f"SignedHeaders=content-type;host, Signature={signed.signature}"
        )

    def test_api_headers(self):
        headers = _sign().headers
        assert headers["Content-Type"] == "application/json; charset=utf-8"
        assert headers["Host"] == "sms.tencentcloudapi.com"
        assert headers["X-TC-Action"] == "SendSms"
        assert headers["X-TC-Timestamp"] == str(TIMESTAMP)
        assert headers["X-TC-Version"] == "2021-01-11"
        assert headers["X-TC-Region"] == "ap-guangzhou"

    def test_url(self):
        assert _sign().url == "https://sms.tencentcloudapi.com/"
        assert _sign(scheme="http").url == "http://sms.tencentcloudapi.com/"

    def test_port_in_host_header(self):
        signed = _sign(endpoint="http://sms.local:8080")
        assert signed.headers["Host"] == "sms.local:8080"
        assert "host:sms.local:8080" in signed.canonical_request

    def test_proxy_signs_for_origin(self):
        proxied = _sign(endpoint="http://proxy.internal:8080/tc", signing_endpoint="sms.tencentcloudapi.com")
        direct = _sign()

        assert proxied.url == "http://proxy.internal:8080/tc"
        assert proxied.headers["Host"] == "sms.tencentcloudapi.com"
        assert proxied.signature == direct.signature
