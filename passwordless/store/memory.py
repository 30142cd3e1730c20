"""
In-memory token storage implementation for passwordless.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

This module provides a task-safe in-memory token store suitable for
development and single-instance deployments.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

from ..common.utils import get_current_time
from ..context import RequestContext, ensure_context
from ..errors import StoreClosedError, TokenNotFoundError
from .base import TokenRecord, TokenStore
from .hashing import TokenHasher

logger = logging.getLogger(__name__)


class MemoryTokenStore(TokenStore):
    """
    In-memory token store implementation.

    Records live in a dict keyed by uid and guarded by one lock. A sweep
    task removes expired records every ``sweep_interval`` seconds; records
    that expire between sweeps are still rejected by ``verify`` and
    ``exists``. Hashing is done outside the lock.
    """

    def __init__(self, sweep_interval: float = 60.0, hasher: Optional[TokenHasher] = None):
        """
        Initialize memory token store.

        Args:
            sweep_interval: Seconds between expiry sweeps
            hasher: Token hasher (defaults to Argon2id with standard cost)
        """
        if sweep_interval <= 0:
            raise ValueError("sweep_interval must be positive")
        self._records: Dict[str, TokenRecord] = {}
        self._lock = asyncio.Lock()
        self._hasher = hasher or TokenHasher()
        self._sweep_interval = sweep_interval
        self._sweep_task: Optional[asyncio.Task] = None
        self._shutdown = asyncio.Event()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def running(self) -> bool:
        """True while the sweep task is active."""
        return self._sweep_task is not None and not self._sweep_task.done()

    async def start(self) -> None:
        """Start the sweep task."""
        self._check_open()
        self._ensure_started()

    def _ensure_started(self) -> None:
        if self._sweep_task is None:
            self._sweep_task = asyncio.get_running_loop().create_task(self._sweep_loop())
            logger.info(f"Started memory token store with {self._sweep_interval}s sweep")

    async def close(self) -> None:
        """Stop the sweep task and drop all records. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._shutdown.set()
        if self._sweep_task is not None:
            await self._sweep_task
            self._sweep_task = None
        async with self._lock:
            self._records.clear()
        logger.info("Stopped memory token store")

    async def __aenter__(self) -> "MemoryTokenStore":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _sweep_loop(self) -> None:
        while not self._shutdown.is_set():
            try:
                await asyncio.wait_for(self._shutdown.wait(), timeout=self._sweep_interval)
            except asyncio.TimeoutError:
                pass
            if self._shutdown.is_set():
                break
            try:
                await self.cleanup()
            except Exception as e:
                logger.error(f"Error in expiry sweep: {e}")

    def _check_open(self) -> None:
        if self._closed:
            raise StoreClosedError()

    async def store(self, ctx: Optional[RequestContext], token: str, uid: str, ttl: timedelta) -> None:
        """Hash and store a token, replacing any previous token for the uid."""
        self._check_open()
        ctx = ensure_context(ctx)
        ctx.check_deadline()
        self._ensure_started()

        expires_at = get_current_time() + ttl
        hashed = await ctx.bound(self._hasher.hash(token))
        record = TokenRecord(uid=uid, hashed_token=hashed, expires_at=expires_at)
        async with self._lock:
            self._check_open()
            self._records[uid] = record
        logger.debug(f"Stored token for uid {uid}")

    async def exists(self, ctx: Optional[RequestContext], uid: str) -> Tuple[bool, Optional[datetime]]:
        """Check for a live token without consuming it."""
        self._check_open()
        ensure_context(ctx).check_deadline()

        async with self._lock:
            record = self._records.get(uid)
        if record is None or record.is_expired():
            return False, None
        return True, record.expires_at

    async def verify(self, ctx: Optional[RequestContext], token: str, uid: str) -> bool:
        """Verify a token: presence, then expiry, then the hash comparison."""
        self._check_open()
        ctx = ensure_context(ctx)
        ctx.check_deadline()

        async with self._lock:
            record = self._records.get(uid)
        if record is None:
            raise TokenNotFoundError()
        if record.is_expired():
            logger.debug(f"Token for uid {uid} is past expiry")
            raise TokenNotFoundError()
        return await ctx.bound(self._hasher.verify(token, record.hashed_token))

    async def delete(self, ctx: Optional[RequestContext], uid: str) -> None:
        """Remove the token for a uid."""
        self._check_open()
        ensure_context(ctx).check_deadline()

        async with self._lock:
            removed = self._records.pop(uid, None)
        if removed is not None:
            logger.debug(f"Deleted token for uid {uid}")

    async def cleanup(self) -> int:
        """Remove expired records from the store."""
        self._check_open()
        async with self._lock:
            now = get_current_time()
            expired = [uid for uid, record in self._records.items() if record.is_expired(now)]
            for uid in expired:
                del self._records[uid]

        if expired:
            logger.info(f"Swept {len(expired)} expired tokens")
        return len(expired)

    async def count_tokens(self) -> int:
        """Count records held, including expired ones not yet swept."""
        self._check_open()
        async with self._lock:
            return len(self._records)

