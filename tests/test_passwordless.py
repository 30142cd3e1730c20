"""
Tests for strategies, post-verify actions and the Passwordless orchestrator.
"""

import logging
from datetime import timedelta

import pytest

from conftest import CapturingTransport, FailingTransport
from passwordless import (
    ByteGenerator,
    CallbackAction,
    CrockfordGenerator,
    DeleteAlways,
    DeleteOnSuccess,
    LogTransport,
    MemoryTokenStore,
    Passwordless,
    PINGenerator,
    PostVerifyError,
    RequestContext,
    SimpleStrategy,
    request_token,
    verify_token,
)
from passwordless.errors import (
    NotValidForContextError,
    TokenNotFoundError,
    UnknownStrategyError,
)


@pytest.fixture
def pw(memory_store, transport):
    pw = Passwordless(memory_store)
    pw.set_transport("email", transport, CrockfordGenerator(12), timedelta(minutes=30))
    return pw


class TestStrategy:
    """Test strategy composition."""

    @pytest.mark.asyncio
    async def test_simple_strategy_delegates(self, transport):
        strategy = SimpleStrategy(transport, ByteGenerator(b"x", 3), timedelta(minutes=5))
        assert await strategy.generate() == "xxx"
        assert strategy.ttl(None) == timedelta(minutes=5)
        assert strategy.is_valid(None)

        await strategy.send(None, "xxx", "alice", "alice@example.com")
        assert transport.sent == [("xxx", "alice", "alice@example.com")]

    def test_predicate(self, transport):
        strategy = SimpleStrategy(transport, PINGenerator(), timedelta(minutes=5),
                                  predicate=lambda ctx: ctx.get("channel") == "sms")
        assert strategy.is_valid(RequestContext(values={"channel": "sms"}))
        assert not strategy.is_valid(RequestContext(values={"channel": "web"}))
        assert not strategy.is_valid(None)


class TestPasswordless:
    """Test the orchestrator end to end on the memory store."""

    @pytest.mark.asyncio
    async def test_one_time_use(self, pw, transport):
        await pw.request_token(None, "email", "alice", "alice@example.com")
        token = transport.last_token
        assert transport.sent[0][1:] == ("alice", "alice@example.com")

        assert await pw.verify_token(None, "alice", token) is True
        with pytest.raises(TokenNotFoundError):
            await pw.verify_token(None, "alice", token)

    @pytest.mark.asyncio
    async def test_wrong_token_keeps_token(self, pw, transport):
        await pw.request_token(None, "email", "alice", "alice@example.com")
        assert await pw.verify_token(None, "alice", "wrong") is False
        assert await pw.verify_token(None, "alice", transport.last_token) is True

    @pytest.mark.asyncio
    async def test_new_request_supersedes(self, pw, transport):
        await pw.request_token(None, "email", "alice", "alice@example.com")
        first = transport.last_token
        await pw.request_token(None, "email", "alice", "alice@example.com")
        second = transport.last_token

        if first != second:
            assert await pw.verify_token(None, "alice", first) is False
        assert await pw.verify_token(None, "alice", second) is True

    @pytest.mark.asyncio
    async def test_unknown_strategy(self, pw):
        with pytest.raises(UnknownStrategyError) as exc_info:
            await pw.request_token(None, "carrier-pigeon", "alice", "alice")
        assert exc_info.value.name == "carrier-pigeon"

    @pytest.mark.asyncio
    async def test_strategy_not_valid_for_context(self, pw, memory_store):
        sms = CapturingTransport()
        pw.set_transport("sms", sms, PINGenerator(), timedelta(minutes=5),
                         predicate=lambda ctx: ctx.get("phone_verified", False))

        with pytest.raises(NotValidForContextError):
            await pw.request_token(RequestContext(), "sms", "alice", "+15550100")
        assert sms.sent == []
        assert await memory_store.exists(None, "alice") == (False, None)

        ctx = RequestContext(values={"phone_verified": True})
        await pw.request_token(ctx, "sms", "alice", "+15550100")
        assert len(sms.last_token) == 6

    @pytest.mark.asyncio
    async def test_list_strategies(self, pw):
        pw.set_transport("sms", CapturingTransport(), PINGenerator(), timedelta(minutes=5),
                         predicate=lambda ctx: ctx.get("phone_verified", False))

        assert set(pw.list_strategies(RequestContext())) == {"email"}
        assert set(pw.list_strategies(RequestContext(values={"phone_verified": True}))) == {"email", "sms"}

    @pytest.mark.asyncio
    async def test_set_strategy_replaces(self, pw, transport):
        strategy = SimpleStrategy(transport, PINGenerator(4), timedelta(minutes=1))
        pw.set_strategy("email", strategy)
        assert pw.get_strategy(None, "email") is strategy

    @pytest.mark.asyncio
    async def test_send_failure_leaves_token(self, memory_store, caplog):
        pw = Passwordless(memory_store)
        pw.set_transport("email", FailingTransport(), CrockfordGenerator(12), timedelta(minutes=30))

        with caplog.at_level(logging.WARNING, logger="passwordless.core.passwordless"):
            with pytest.raises(ConnectionError):
                await pw.request_token(None, "email", "alice", "alice@example.com")

        present, _ = await memory_store.exists(None, "alice")
        assert present
        assert "alice@example.com" not in caplog.text

    @pytest.mark.asyncio
    async def test_sanitize_via_strategy(self, pw, transport):
        await pw.request_token(None, "email", "alice", "alice@example.com")
        shouted = transport.last_token.upper()

        assert await pw.verify_token(None, "alice", shouted, strategy="email") is True

    @pytest.mark.asyncio
    async def test_verify_with_unknown_strategy(self, pw):
        with pytest.raises(UnknownStrategyError):
            await pw.verify_token(None, "alice", "tok", strategy="fax")

    @pytest.mark.asyncio
    async def test_log_transport(self, memory_store, caplog):
        pw = Passwordless(memory_store)
        pw.set_transport("log", LogTransport(), ByteGenerator(b"z", 4), timedelta(minutes=1))

        with caplog.at_level(logging.INFO, logger="passwordless.transport.base"):
            await pw.request_token(None, "log", "alice", "alice@example.com")
        assert "Token for alice: zzzz" in caplog.text

    @pytest.mark.asyncio
    async def test_close(self, fast_hasher):
        store = MemoryTokenStore(hasher=fast_hasher)
        pw = Passwordless(store)
        await pw.close()
        assert store.closed


class TestPostVerifyActions:
    """Test the post-verify action chain."""

    @pytest.mark.asyncio
    async def test_delete_always_allows_single_guess(self, memory_store):
        await memory_store.store(None, "tok", "alice", timedelta(minutes=5))
        assert await verify_token(None, memory_store, "alice", "wrong", DeleteAlways()) is False
        with pytest.raises(TokenNotFoundError):
            await verify_token(None, memory_store, "alice", "tok")

    @pytest.mark.asyncio
    async def test_delete_on_success_keeps_failed(self, memory_store):
        await memory_store.store(None, "tok", "alice", timedelta(minutes=5))
        assert await verify_token(None, memory_store, "alice", "wrong", DeleteOnSuccess()) is False
        assert await verify_token(None, memory_store, "alice", "tok", DeleteOnSuccess()) is True
        assert await memory_store.exists(None, "alice") == (False, None)

    @pytest.mark.asyncio
    async def test_actions_run_in_order(self, memory_store):
        calls = []

        def recorder(label):
            async def record(ctx, store, uid, token, valid):
                calls.append((label, uid, token, valid))
            return CallbackAction(record)

        await memory_store.store(None, "tok", "alice", timedelta(minutes=5))
        result = await verify_token(None, memory_store, "alice", "tok",
                                    recorder("first"), recorder("second"))

        assert result is True
        assert calls == [("first", "alice", "tok", True), ("second", "alice", "tok", True)]
        # Explicit actions replace the default chain.
        assert (await memory_store.exists(None, "alice"))[0]

    @pytest.mark.asyncio
    async def test_failing_action_short_circuits(self, memory_store):
        calls = []

        async def boom(ctx, store, uid, token, valid):
            raise RuntimeError("audit sink down")

        async def after(ctx, store, uid, token, valid):
            calls.append(uid)

        failing = CallbackAction(boom)
        await memory_store.store(None, "tok", "alice", timedelta(minutes=5))

        with pytest.raises(PostVerifyError) as exc_info:
            await verify_token(None, memory_store, "alice", "tok",
                               failing, CallbackAction(after))

        assert exc_info.value.valid is True
        assert exc_info.value.action is failing
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert calls == []

    @pytest.mark.asyncio
    async def test_failing_action_after_invalid_token(self, memory_store):
        async def boom(ctx, store, uid, token, valid):
            raise RuntimeError("audit sink down")

        await memory_store.store(None, "tok", "alice", timedelta(minutes=5))
        with pytest.raises(PostVerifyError) as exc_info:
            await verify_token(None, memory_store, "alice", "wrong", CallbackAction(boom))
        assert exc_info.value.valid is False

    @pytest.mark.asyncio
    async def test_not_found_skips_actions(self, memory_store):
        calls = []

        async def record(ctx, store, uid, token, valid):
            calls.append(valid)

        with pytest.raises(TokenNotFoundError):
            await verify_token(None, memory_store, "ghost", "tok", CallbackAction(record))
        assert calls == []

    @pytest.mark.asyncio
    async def test_module_level_request(self, memory_store, transport):
        strategy = SimpleStrategy(transport, CrockfordGenerator(10), timedelta(minutes=5))
        await request_token(None, memory_store, strategy, "bob", "bob@example.com")
        assert await verify_token(None, memory_store, "bob", transport.last_token) is True
