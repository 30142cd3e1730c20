"""
Token storage types and interfaces for passwordless.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

This module provides the store contract every backend implements and the
record type kept by backends that hold state server-side.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

from ..common.utils import is_expired
from ..context import RequestContext


@dataclass(frozen=True)
class TokenRecord:
    """
    A stored token bound to a uid.

    Only the hash of the token is kept; the plaintext is dropped as soon as
    the record is built.
    """

    uid: str
    hashed_token: str
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the record is past its expiry."""
        return is_expired(self.expires_at, now)


class TokenStore(ABC):
    """
    Abstract base class for token storage implementations.

    A store keeps at most one live token per uid: storing a token for a uid
    replaces whatever was stored for it before. All implementations must be
    safe for concurrent use from multiple tasks.
    """

    @abstractmethod
    async def store(self, ctx: Optional[RequestContext], token: str, uid: str, ttl: timedelta) -> None:
        """
        Store ``token`` for ``uid`` until ``now + ttl``.

        Args:
            ctx: Request context
            token: Plaintext token; never persisted as-is
            uid: User identifier
            ttl: Time-to-live
        """
        pass

    @abstractmethod
    async def exists(self, ctx: Optional[RequestContext], uid: str) -> Tuple[bool, Optional[datetime]]:
        """
        Check whether a live token exists for ``uid`` without consuming it.

        Returns:
            ``(True, expires_at)`` for a live token, ``(False, None)`` when
            the token is absent or already expired
        """
        pass

    @abstractmethod
    async def verify(self, ctx: Optional[RequestContext], token: str, uid: str) -> bool:
        """
        Verify ``token`` against the live token of ``uid``.

        Returns:
            True on match, False if a live token exists but differs

        Raises:
            TokenNotFoundError: If no live token exists; an expired token is
                reported exactly like a missing one
        """
        pass

    @abstractmethod
    async def delete(self, ctx: Optional[RequestContext], uid: str) -> None:
        """Remove the token of ``uid``; deleting a missing token is not an error."""
        pass

    async def close(self) -> None:
        """Close the token store and release resources"""
        pass
