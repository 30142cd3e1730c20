"""
Redis-backed token store implementation for passwordless.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

Design Notes:
- Each uid maps to one key, ``{prefix}{uid}``, holding the argon2 hash of
  the token. Redis expires the key at the token's TTL, so a newer token for
  the same uid simply overwrites the older one.
- The adapter holds no lock and no per-token state; Redis serializes the
  commands. Connection errors from redis-py propagate unchanged.
- Every round trip is bounded by the request context's deadline.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple, Union

import redis.asyncio as redis

from ..common.utils import get_current_time
from ..context import RequestContext, ensure_context
from ..errors import TokenNotFoundError
from .base import TokenStore
from .hashing import TokenHasher

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "passwordless-token::"

# PTTL replies for a missing key and for a key without expiry.
PTTL_MISSING = -2
PTTL_PERSISTENT = -1


class RedisTokenStore(TokenStore):
    def __init__(
        self,
        client: "redis.Redis",
        prefix: str = DEFAULT_PREFIX,
        hasher: Optional[TokenHasher] = None,
    ):
        """
        Initialize Redis token store.

        Args:
            client: ``redis.asyncio`` client (or any client with the same
                ``set``/``get``/``pttl``/``delete`` coroutines)
            prefix: Key prefix
            hasher: Token hasher (defaults to Argon2id with standard cost)
        """
        self._client = client
        self.prefix = prefix
        self._hasher = hasher or TokenHasher()

    @classmethod
    def from_url(cls, url: str = "redis://localhost:6379/0", **kwargs) -> "RedisTokenStore":
        """Create a store with a client connected to ``url``."""
        return cls(redis.from_url(url), **kwargs)

    def _key(self, uid: str) -> str:
        return f"{self.prefix}{uid}"

    async def store(self, ctx: Optional[RequestContext], token: str, uid: str, ttl: timedelta) -> None:
        """Store the token hash with Redis-side expiry."""
        ctx = ensure_context(ctx)
        key = self._key(uid)
        ttl_ms = int(ttl.total_seconds() * 1000)
        if ttl_ms <= 0:
            # Already expired: the only observable effect is superseding the old token.
            await ctx.bound(self._client.delete(key))
            return

        hashed = await ctx.bound(self._hasher.hash(token))
        await ctx.bound(self._client.set(key, hashed, px=ttl_ms))
        logger.debug(f"Stored token for uid {uid}")

    async def exists(self, ctx: Optional[RequestContext], uid: str) -> Tuple[bool, Optional[datetime]]:
        """Check for a live token using the key's remaining TTL."""
        ctx = ensure_context(ctx)
        pttl = await ctx.bound(self._client.pttl(self._key(uid)))
        if pttl == PTTL_MISSING or pttl == 0:
            return False, None
        if pttl == PTTL_PERSISTENT:
            return True, None
        return True, get_current_time() + timedelta(milliseconds=pttl)

    async def verify(self, ctx: Optional[RequestContext], token: str, uid: str) -> bool:
        """Verify a token against the stored hash."""
        ctx = ensure_context(ctx)
        hashed: Union[bytes, str, None] = await ctx.bound(self._client.get(self._key(uid)))
        if hashed is None:
            raise TokenNotFoundError()
        if isinstance(hashed, bytes):
            hashed = hashed.decode("utf-8")
        return await ctx.bound(self._hasher.verify(token, hashed))

    async def delete(self, ctx: Optional[RequestContext], uid: str) -> None:
        """Remove the key for a uid."""
        ctx = ensure_context(ctx)
        await ctx.bound(self._client.delete(self._key(uid)))
        logger.debug(f"Deleted token for uid {uid}")

    async def close(self) -> None:
        """Close the underlying client."""
        await self._client.aclose()
        logger.info("Disconnected from Redis")
