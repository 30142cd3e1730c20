"""
Request context and per-request capabilities.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

A ``RequestContext`` travels with every store, strategy and transport call.
It carries the optional capabilities a stateless store needs to hand an
envelope back to the client (``ResponseSink``) and to read it again on the
next request (``RequestSource``), arbitrary values that strategy validity
predicates can inspect, and an optional deadline.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Awaitable, Dict, Optional, Tuple, TypeVar

from .common.utils import get_current_time, is_expired
from .errors import DeadlineExceededError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResponseSink(ABC):
    """Writes an opaque envelope into the response sent back to the client."""

    @abstractmethod
    def set_envelope(self, name: str, value: str, expires_at: datetime, max_age: int) -> None:
        """
        Emit an envelope.

        Args:
            name: Envelope name (for example a cookie name)
            value: Opaque envelope value
            expires_at: Absolute expiry of the envelope
            max_age: Lifetime in seconds; ``<= 0`` tells the holder to discard it
        """
        pass


class RequestSource(ABC):
    """Reads an opaque envelope presented by the client."""

    @abstractmethod
    def get_envelope(self, name: str) -> Optional[str]:
        """Return the named envelope, or None if the client sent none."""
        pass


class EnvelopeJar(ResponseSink, RequestSource):
    """
    In-memory holder implementing both capabilities.

    Behaves like a browser cookie jar: envelopes written with a non-positive
    ``max_age`` are discarded instead of stored. Useful for tests and for
    clients that keep the envelope between two calls.
    """

    def __init__(self):
        self._envelopes: Dict[str, Tuple[str, datetime]] = {}

    def set_envelope(self, name: str, value: str, expires_at: datetime, max_age: int) -> None:
        if max_age <= 0:
            self._envelopes.pop(name, None)
            return
        self._envelopes[name] = (value, expires_at)

    def get_envelope(self, name: str) -> Optional[str]:
        entry = self._envelopes.get(name)
        if entry is None:
            return None
        return entry[0]

    def put_raw(self, name: str, value: str) -> None:
        """Place an envelope as if the client presented it verbatim."""
        self._envelopes[name] = (value, get_current_time() + timedelta(days=1))

    def __contains__(self, name: str) -> bool:
        return name in self._envelopes


@dataclass
class RequestContext:
    """Per-request values and capabilities passed through every operation."""

    response_sink: Optional[ResponseSink] = None
    request_source: Optional[RequestSource] = None
    values: Dict[str, Any] = field(default_factory=dict)
    deadline: Optional[datetime] = None

    @classmethod
    def for_envelope(cls, jar: EnvelopeJar, **values: Any) -> "RequestContext":
        """Create a context that reads and writes envelopes through one jar."""
        return cls(response_sink=jar, request_source=jar, values=dict(values))

    def with_timeout(self, seconds: float) -> "RequestContext":
        """Return a copy whose deadline is ``seconds`` from now (never later than the current one)."""
        deadline = get_current_time() + timedelta(seconds=seconds)
        if self.deadline is not None and self.deadline < deadline:
            deadline = self.deadline
        return replace(self, deadline=deadline)

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, (self.deadline - get_current_time()).total_seconds())

    def check_deadline(self) -> None:
        """Raise DeadlineExceededError if the deadline has passed."""
        if self.deadline is not None and is_expired(self.deadline):
            raise DeadlineExceededError()

    async def bound(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` within the remaining time of the deadline."""
        try:
            self.check_deadline()
        except DeadlineExceededError:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise
        timeout = self.remaining()
        if timeout is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout)
        except asyncio.TimeoutError as e:
            logger.debug(f"Operation cancelled after {timeout:.3f}s deadline")
            raise DeadlineExceededError() from e


def ensure_context(ctx: Optional[RequestContext]) -> RequestContext:
    """Return ``ctx`` or an empty context when None was passed."""
    return ctx if ctx is not None else RequestContext()
