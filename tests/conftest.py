"""
Shared pytest fixtures for passwordless tests.

This module provides common fixtures including:
- A cheap argon2 hasher so store tests stay fast
- Memory, sealed and Redis-backed stores
- An in-memory async Redis stand-in and a capturing transport
"""

import asyncio
import time
from typing import Dict, List, Optional, Tuple

import pytest
import pytest_asyncio

from passwordless import (
    EnvelopeJar,
    MemoryTokenStore,
    RedisTokenStore,
    RequestContext,
    SealedTokenStore,
    TokenHasher,
    Transport,
)


class FakeRedis:
    """Dict-backed stand-in for the few redis.asyncio commands the store uses."""

    def __init__(self):
        self.data: Dict[str, Tuple[bytes, Optional[float]]] = {}
        self.closed = False

    def _live(self, key: str) -> Optional[Tuple[bytes, Optional[float]]]:
        entry = self.data.get(key)
        if entry is None:
            return None
        value, expires = entry
        if expires is not None and time.monotonic() >= expires:
            del self.data[key]
            return None
        return entry

    async def set(self, key, value, px=None):
        if isinstance(value, str):
            value = value.encode("utf-8")
        expires = time.monotonic() + px / 1000.0 if px else None
        self.data[key] = (value, expires)
        return True

    async def get(self, key):
        entry = self._live(key)
        return None if entry is None else entry[0]

    async def pttl(self, key):
        entry = self._live(key)
        if entry is None:
            return -2
        if entry[1] is None:
            return -1
        return max(0, int((entry[1] - time.monotonic()) * 1000))

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    async def aclose(self):
        self.closed = True


class CapturingTransport(Transport):
    """Records every token sent instead of delivering it."""

    def __init__(self):
        self.sent: List[Tuple[str, str, str]] = []

    async def send(self, ctx, token, uid, recipient):
        self.sent.append((token, uid, recipient))

    @property
    def last_token(self) -> str:
        return self.sent[-1][0]


class FailingTransport(Transport):
    """Fails every delivery."""

    async def send(self, ctx, token, uid, recipient):
        raise ConnectionError("mail server unreachable")


@pytest.fixture
def fast_hasher():
    """Argon2 hasher with minimal cost parameters."""
    return TokenHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest_asyncio.fixture
async def memory_store(fast_hasher):
    """Memory store with a short sweep interval."""
    store = MemoryTokenStore(sweep_interval=0.05, hasher=fast_hasher)
    await store.start()
    yield store
    await store.close()


@pytest.fixture
def sealed_store():
    return SealedTokenStore(
        signing_key=b"abracadabrawizzyabracadabrawizzy",
        auth_key=b"authenticatorkey",
        encryption_key=b"theencryptionkey",
    )


@pytest.fixture
def jar():
    return EnvelopeJar()


@pytest.fixture
def jar_ctx(jar):
    return RequestContext.for_envelope(jar)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def redis_store(fake_redis, fast_hasher):
    return RedisTokenStore(fake_redis, hasher=fast_hasher)


@pytest.fixture
def transport():
    return CapturingTransport()
