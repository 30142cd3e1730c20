"""
Tests for configuration, the store factory and shared utilities.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from passwordless import (
    Config,
    MemoryTokenStore,
    RedisTokenStore,
    RequestContext,
    SealedTokenStore,
    create_token_store,
)
from passwordless.common.utils import is_expired, mask_sensitive_data
from passwordless.errors import ConfigurationError, DeadlineExceededError, ErrorCode
from passwordless.util.config import parse_duration_string
from passwordless.util.encoding import url_safe_decode, url_safe_encode

SEALED_KEYS = {
    "signing_key": "abracadabrawizzyabracadabrawizzy",
    "auth_key": "authenticatorkey",
    "encryption_key": "theencryptionkey",
}


class TestConfig:
    """Test configuration loading and validation"""

    def test_defaults(self):
        """Test the default memory configuration"""
        config = Config()
        assert config.store_type == "memory"
        assert config.default_ttl == timedelta(minutes=30)
        assert config.sweep_interval == timedelta(minutes=1)
        assert config.validate()

    def test_duration_strings(self):
        config = Config(default_ttl="5m", sweep_interval=30)
        assert config.default_ttl == timedelta(minutes=5)
        assert config.sweep_interval == timedelta(seconds=30)

    def test_from_env(self, monkeypatch):
        """Test configuration from PASSWORDLESS_* variables"""
        monkeypatch.setenv("PASSWORDLESS_STORE_TYPE", "redis")
        monkeypatch.setenv("PASSWORDLESS_DEFAULT_TTL", "2h")
        monkeypatch.setenv("PASSWORDLESS_REDIS_PREFIX", "app:")

        config = Config.from_env()
        assert config.store_type == "redis"
        assert config.default_ttl == timedelta(hours=2)
        assert config.redis_prefix == "app:"

    def test_from_dict_ignores_unknown_keys(self):
        config = Config.from_dict({"store_type": "sealed", "colour": "blue", **SEALED_KEYS})
        assert config.store_type == "sealed"
        assert config.signing_key == "abracadabrawizzyabracadabrawizzy"

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "passwordless.json"
        path.write_text(json.dumps({"default_ttl": "10m", "envelope_name": "login"}))

        config = Config.from_file(str(path))
        assert config.default_ttl == timedelta(minutes=10)
        assert config.envelope_name == "login"

    def test_from_yaml_file(self, tmp_path):
        path = tmp_path / "passwordless.yaml"
        path.write_text("store_type: redis\nredis_url: redis://cache:6379/2\nsweep_interval: 15s\n")

        config = Config.from_file(str(path))
        assert config.store_type == "redis"
        assert config.redis_url == "redis://cache:6379/2"
        assert config.sweep_interval == timedelta(seconds=15)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_file(str(tmp_path / "nope.yaml"))

    def test_unsupported_file(self, tmp_path):
        path = tmp_path / "passwordless.ini"
        path.write_text("[passwordless]\n")
        with pytest.raises(ValueError):
            Config.from_file(str(path))

    @pytest.mark.parametrize("kwargs,key", [
        ({"store_type": "memcache"}, "store_type"),
        ({"default_ttl": timedelta(0)}, "default_ttl"),
        ({"sweep_interval": -5}, "sweep_interval"),
        ({"store_type": "sealed"}, "signing_key"),
        ({"store_type": "sealed", "signing_key": "abracadabrawizzyabracadabrawizzy"}, "auth_key"),
        ({"store_type": "redis", "redis_url": ""}, "redis_url"),
    ])
    def test_validate(self, kwargs, key):
        with pytest.raises(ConfigurationError) as exc_info:
            Config(**kwargs).validate()
        assert exc_info.value.config_key == key
        assert exc_info.value.error_code == ErrorCode.CONFIGURATION_ERROR


class TestCreateTokenStore:
    """Test the store factory"""

    @pytest.mark.asyncio
    async def test_memory(self, fast_hasher):
        store = create_token_store(Config(sweep_interval="2s"), hasher=fast_hasher)
        assert isinstance(store, MemoryTokenStore)
        await store.close()

    def test_sealed(self):
        store = create_token_store(Config(store_type="sealed", envelope_name="login", **SEALED_KEYS))
        assert isinstance(store, SealedTokenStore)
        assert store.name == "login"

    @pytest.mark.asyncio
    async def test_redis(self):
        store = create_token_store(Config(store_type="redis", redis_prefix="app:"))
        assert isinstance(store, RedisTokenStore)
        assert store.prefix == "app:"
        await store.close()

    def test_defaults_from_env(self, monkeypatch):
        monkeypatch.setenv("PASSWORDLESS_STORE_TYPE", "sealed")
        for key, value in SEALED_KEYS.items():
            monkeypatch.setenv(f"PASSWORDLESS_{key.upper()}", value)
        assert isinstance(create_token_store(), SealedTokenStore)

    def test_invalid(self):
        with pytest.raises(ConfigurationError):
            create_token_store(Config(store_type="sealed"))


class TestRequestContext:
    """Test request context deadlines"""

    def test_with_timeout_never_extends(self):
        ctx = RequestContext().with_timeout(1)
        assert ctx.with_timeout(60).deadline == ctx.deadline
        assert 0 < ctx.remaining() <= 1

    def test_no_deadline(self):
        ctx = RequestContext()
        assert ctx.remaining() is None
        ctx.check_deadline()

    @pytest.mark.asyncio
    async def test_bound_closes_coroutine_after_deadline(self):
        ran = []

        async def work():
            ran.append(True)

        ctx = RequestContext(deadline=datetime.now(timezone.utc) - timedelta(seconds=1))
        with pytest.raises(DeadlineExceededError):
            await ctx.bound(work())
        assert ran == []

    @pytest.mark.asyncio
    async def test_bound_returns_value(self):
        async def work():
            return 42

        assert await RequestContext().with_timeout(5).bound(work()) == 42


class TestUtilities:
    """Test shared helpers"""

    def test_parse_duration_string(self):
        assert parse_duration_string("30s") == timedelta(seconds=30)
        assert parse_duration_string("1.5h") == timedelta(minutes=90)
        assert parse_duration_string("1d") == timedelta(days=1)
        assert parse_duration_string("45") == timedelta(seconds=45)
        with pytest.raises(ValueError):
            parse_duration_string("soon")

    def test_is_expired(self):
        now = datetime.now(timezone.utc)
        assert is_expired(now - timedelta(seconds=1))
        assert is_expired(now, now=now)
        assert not is_expired(now + timedelta(minutes=1))

    def test_mask_sensitive_data(self):
        masked = mask_sensitive_data("alice@example.com")
        assert masked != "alice@example.com"
        assert "example" not in masked

    def test_strict_decode_rejects_non_canonical(self):
        encoded = url_safe_encode(b"\xff")
        assert url_safe_decode(encoded, strict=True) == b"\xff"
        # "_w" decodes to the same byte but leaves trailing bits set.
        assert encoded == "_w"
        assert url_safe_decode("_x") == b"\xff"
        with pytest.raises(ValueError):
            url_safe_decode("_x", strict=True)
