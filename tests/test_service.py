"""Tests for polysms.service — provider selection and failover

Tests cover:
- send() default provider, failover ordering and de-duplication
- send_via() by name and by enum, unknown/blank names, exception conversion
- list_available_providers() / is_available()
- None request rejected before any provider runs
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from polysms.config import SmsConfig
from polysms.models import SmsProvider, SmsRequest, SmsResult, StandardErrorCode
from polysms.service import SmsService


# ── Helpers ──


def _ok(provider: str, request_id: str = "req-123") -> SmsResult:
    return SmsResult.ok(provider=provider, request_id=request_id)


def _fail(provider: str, kind=StandardErrorCode.PROVIDER_INTERNAL_ERROR, code="InternalError") -> SmsResult:
    return SmsResult.failure(provider=provider, standard_error=kind, error_code=code)


def _make_provider(name: str, result=None, side_effect=None) -> MagicMock:
    """Create a mock provider whose send_sms returns a fixed result."""
    provider = MagicMock()
    provider.provider_name = name
    provider.send_sms = AsyncMock(return_value=result, side_effect=side_effect)
    return provider


@pytest.fixture
def request_():
    return SmsRequest(
        phone_number="13800138000",
        template_id="SMS_001",
        template_params={"code": "123456"},
        sign_name="测试签名",
    )


@pytest.fixture
def config():
    return SmsConfig(
        default_provider="Aliyun",
        enable_failover=True,
        provider_priority=["Aliyun", "Tencent"],
    )


# =========================================================================
# Construction
# =========================================================================


class TestConstruction:

    def test_duplicate_names_rejected_case_insensitively(self, config):
        with pytest.raises(ValueError, match="Duplicate"):
            SmsService([_make_provider("Aliyun"), _make_provider("ALIYUN")], config)

    def test_default_config(self):
        service = SmsService([])
        assert service.config.default_provider == "Aliyun"
        assert service.config.enable_failover is True


# =========================================================================
# send() — default provider and failover
# =========================================================================


class TestSend:

    @pytest.mark.asyncio
    async def test_uses_configured_default(self, request_, config):
        aliyun = _make_provider("Aliyun", _ok("Aliyun"))
        tencent = _make_provider("Tencent", _ok("Tencent"))
        service = SmsService([aliyun, tencent], config)

        result = await service.send(request_)

        assert result.success is True
        assert result.provider == "Aliyun"
        aliyun.send_sms.assert_awaited_once_with(request_)
        tencent.send_sms.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failover_tries_second_provider(self, request_, config):
        aliyun = _make_provider("Aliyun", _fail("Aliyun"))
        tencent = _make_provider("Tencent", _ok("Tencent", "req-456"))
        service = SmsService([aliyun, tencent], config)

        result = await service.send(request_)

        assert result.success is True
        assert result.provider == "Tencent"
        assert result.request_id == "req-456"
        aliyun.send_sms.assert_awaited_once()
        tencent.send_sms.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failover_disabled_invokes_only_default(self, request_):
        aliyun = _make_provider("Aliyun", _fail("Aliyun"))
        tencent = _make_provider("Tencent", _ok("Tencent"))
        config = SmsConfig(default_provider="Aliyun", enable_failover=False)
        service = SmsService([aliyun, tencent], config)

        result = await service.send(request_)

        assert result.success is False
        assert result.provider == "Aliyun"
        aliyun.send_sms.assert_awaited_once()
        tencent.send_sms.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_all_fail_returns_last_attempt(self, request_, config):
        aliyun = _make_provider("Aliyun", _fail("Aliyun", code="InternalError"))
        tencent = _make_provider(
            "Tencent", _fail("Tencent", StandardErrorCode.RATE_LIMIT_EXCEEDED, "RequestLimitExceeded"),
        )
        service = SmsService([aliyun, tencent], config)

        result = await service.send(request_)

        assert result.success is False
        assert result.provider == "Tencent"
        assert result.error_code == "RequestLimitExceeded"
        assert result.standard_error == StandardErrorCode.RATE_LIMIT_EXCEEDED

    @pytest.mark.asyncio
    async def test_priority_order_is_followed(self, request_):
        calls = []

        def _recording(name, result):
            async def _send(req):
                calls.append(name)
                return result
            provider = MagicMock()
            provider.provider_name = name
            provider.send_sms = _send
            return provider

        providers = [
            _recording("A", _fail("A")),
            _recording("B", _fail("B")),
            _recording("C", _fail("C")),
        ]
        config = SmsConfig(default_provider="B", provider_priority=["C", "A", "B"])
        service = SmsService(providers, config)

        await service.send(request_)

        assert calls == ["B", "C", "A"]

    @pytest.mark.asyncio
    async def test_default_in_priority_list_not_retried(self, request_):
        aliyun = _make_provider("Aliyun", _fail("Aliyun"))
        tencent = _make_provider("Tencent", _fail("Tencent"))
        config = SmsConfig(default_provider="aliyun", provider_priority=["Tencent", "ALIYUN", "tencent"])
        service = SmsService([aliyun, tencent], config)

        await service.send(request_)

        assert aliyun.send_sms.await_count == 1
        assert tencent.send_sms.await_count == 1

    @pytest.mark.asyncio
    async def test_unregistered_priority_names_skipped(self, request_):
        aliyun = _make_provider("Aliyun", _fail("Aliyun"))
        config = SmsConfig(default_provider="Aliyun", provider_priority=["Twilio", "Aliyun"])
        service = SmsService([aliyun], config)

        result = await service.send(request_)

        assert result.provider == "Aliyun"
        assert result.success is False
        aliyun.send_sms.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_default_fails_over(self, request_):
        tencent = _make_provider("Tencent", _ok("Tencent"))
        config = SmsConfig(default_provider="Aliyun", provider_priority=["Aliyun", "Tencent"])
        service = SmsService([tencent], config)

        result = await service.send(request_)

        assert result.success is True
        assert result.provider == "Tencent"

    @pytest.mark.asyncio
    async def test_stops_at_first_success(self, request_):
        a = _make_provider("A", _fail("A"))
        b = _make_provider("B", _ok("B"))
        c = _make_provider("C", _ok("C"))
        config = SmsConfig(default_provider="A", provider_priority=["A", "B", "C"])
        service = SmsService([a, b, c], config)

        result = await service.send(request_)

        assert result.provider == "B"
        c.send_sms.assert_not_awaited()


# =========================================================================
# send_via() — explicit provider
# =========================================================================


class TestSendVia:

    @pytest.mark.asyncio
    async def test_by_name(self, request_, config):
        aliyun = _make_provider("Aliyun", _ok("Aliyun"))
        tencent = _make_provider("Tencent", _ok("Tencent"))
        service = SmsService([aliyun, tencent], config)

        result = await service.send_via(request_, "Tencent")

        assert result.success is True
        assert result.provider == "Tencent"
        tencent.send_sms.assert_awaited_once()
        aliyun.send_sms.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_name_is_case_insensitive(self, request_, config):
        tencent = _make_provider("Tencent", _ok("Tencent"))
        service = SmsService([tencent], config)

        result = await service.send_via(request_, "tENCENT")

        assert result.provider == "Tencent"

    @pytest.mark.asyncio
    async def test_by_enum(self, request_, config):
        aliyun = _make_provider("Aliyun", _ok("Aliyun"))
        tencent = _make_provider("Tencent", _ok("Tencent"))
        service = SmsService([aliyun, tencent], config)

        result = await service.send_via(request_, SmsProvider.TENCENT)

        assert result.provider == "Tencent"
        aliyun.send_sms.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_auto_enum_uses_default(self, request_, config):
        aliyun = _make_provider("Aliyun", _ok("Aliyun"))
        tencent = _make_provider("Tencent", _ok("Tencent"))
        service = SmsService([aliyun, tencent], config)

        result = await service.send_via(request_, SmsProvider.AUTO)

        assert result.provider == "Aliyun"

    @pytest.mark.asyncio
    async def test_no_failover_on_explicit_provider(self, request_, config):
        aliyun = _make_provider("Aliyun", _fail("Aliyun"))
        tencent = _make_provider("Tencent", _ok("Tencent"))
        service = SmsService([aliyun, tencent], config)

        result = await service.send_via(request_, "Aliyun")

        assert result.success is False
        tencent.send_sms.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_provider(self, request_, config):
        aliyun = _make_provider("Aliyun", _ok("Aliyun"))
        service = SmsService([aliyun], config)

        result = await service.send_via(request_, "NotExist")

        assert result.success is False
        assert result.standard_error == StandardErrorCode.PROVIDER_NOT_FOUND
        assert result.error_code == "PROVIDER_NOT_FOUND"
        assert result.provider == "NotExist"
        assert result.retryable is False
        aliyun.send_sms.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "   ", None])
    async def test_blank_provider_name(self, request_, config, name):
        aliyun = _make_provider("Aliyun", _ok("Aliyun"))
        service = SmsService([aliyun], config)

        result = await service.send_via(request_, name)

        assert result.success is False
        assert result.standard_error == StandardErrorCode.INVALID_PROVIDER_NAME
        aliyun.send_sms.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_padded_name_not_matched(self, request_, config):
        aliyun = _make_provider("Aliyun", _ok("Aliyun"))
        service = SmsService([aliyun], config)

        result = await service.send_via(request_, " aliyun ")

        assert result.standard_error == StandardErrorCode.PROVIDER_NOT_FOUND
        assert service.is_available(" aliyun ") is False
        aliyun.send_sms.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_provider_name_overwritten(self, request_, config):
        aliyun = _make_provider("Aliyun", _ok("something-else"))
        service = SmsService([aliyun], config)

        result = await service.send_via(request_, "aliyun")

        assert result.provider == "Aliyun"

    @pytest.mark.asyncio
    async def test_transport_exception_becomes_network_error(self, request_, config):
        aliyun = _make_provider("Aliyun", side_effect=httpx.ConnectError("connection refused"))
        service = SmsService([aliyun], config)

        result = await service.send_via(request_, "Aliyun")

        assert result.success is False
        assert result.error_code == "EXCEPTION"
        assert result.standard_error == StandardErrorCode.NETWORK_ERROR
        assert result.retryable is True
        assert result.provider == "Aliyun"

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_unknown(self, request_, config):
        aliyun = _make_provider("Aliyun", side_effect=KeyError("Code"))
        service = SmsService([aliyun], config)

        result = await service.send_via(request_, "Aliyun")

        assert result.standard_error == StandardErrorCode.UNKNOWN
        assert result.retryable is False

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, request_, config):
        aliyun = _make_provider("Aliyun", side_effect=asyncio.CancelledError())
        service = SmsService([aliyun], config)

        with pytest.raises(asyncio.CancelledError):
            await service.send(request_)


# =========================================================================
# None request
# =========================================================================


class TestNoneRequest:

    @pytest.mark.asyncio
    async def test_all_entry_points_reject_none(self, config):
        aliyun = _make_provider("Aliyun", _ok("Aliyun"))
        service = SmsService([aliyun], config)

        with pytest.raises(ValueError):
            await service.send(None)
        with pytest.raises(ValueError):
            await service.send_via(None, "Aliyun")
        with pytest.raises(ValueError):
            await service.send_via(None, SmsProvider.ALIYUN)

        aliyun.send_sms.assert_not_awaited()


# =========================================================================
# list_available_providers() / is_available()
# =========================================================================


class TestAvailability:

    def test_lists_registration_order(self, config):
        service = SmsService([_make_provider("Tencent"), _make_provider("Aliyun")], config)
        assert service.list_available_providers() == ["Tencent", "Aliyun"]

    def test_is_available_by_name_and_enum(self, config):
        service = SmsService([_make_provider("Aliyun"), _make_provider("Tencent")], config)

        assert service.is_available("Aliyun") is True
        assert service.is_available("tencent") is True
        assert service.is_available(SmsProvider.ALIYUN) is True
        assert service.is_available(SmsProvider.TENCENT) is True

    def test_unknown_provider_unavailable(self, config):
        service = SmsService([_make_provider("Aliyun")], config)

        assert service.is_available("NotExist") is False
        assert service.is_available(SmsProvider.TENCENT) is False
        assert service.is_available("") is False
        assert service.is_available(None) is False

    def test_auto_resolves_against_default(self):
        service = SmsService([_make_provider("Tencent")], SmsConfig(default_provider="Aliyun"))
        assert service.is_available(SmsProvider.AUTO) is False

        service = SmsService([_make_provider("Tencent")], SmsConfig(default_provider="Tencent"))
        assert service.is_available(SmsProvider.AUTO) is True

    def test_get_provider(self, config):
        aliyun = _make_provider("Aliyun")
        service = SmsService([aliyun], config)

        assert service.get_provider("ALIYUN") is aliyun
        assert service.get_provider("Tencent") is None
