"""
Strategies bind a token generator, a transport and a TTL under one name.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

from abc import abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional

from .context import RequestContext
from .token.generator import TokenGenerator
from .transport.base import Transport

ContextPredicate = Callable[[RequestContext], bool]


class Strategy(TokenGenerator, Transport):
    """Defines what tokens to send to users and how to send them."""

    @abstractmethod
    def ttl(self, ctx: Optional[RequestContext]) -> timedelta:
        """Time-to-live of tokens generated by this strategy."""
        pass

    @abstractmethod
    def is_valid(self, ctx: Optional[RequestContext]) -> bool:
        """True if this strategy may be used with the current context."""
        pass


@dataclass(frozen=True)
class SimpleStrategy(Strategy):
    """
    Convenience strategy combining a transport, a generator and a TTL.

    Some transports are slower than others, so choose the TTL with the
    delivery mechanism in mind. Without a predicate the strategy is valid
    for every context.
    """

    transport: Transport
    generator: TokenGenerator
    token_ttl: timedelta
    predicate: Optional[ContextPredicate] = None

    async def generate(self, ctx: Optional[RequestContext] = None) -> str:
        return await self.generator.generate(ctx)

    async def sanitize(self, ctx: Optional[RequestContext], value: str) -> str:
        return await self.generator.sanitize(ctx, value)

    async def send(self, ctx: Optional[RequestContext], token: str, uid: str, recipient: str) -> None:
        await self.transport.send(ctx, token, uid, recipient)

    def ttl(self, ctx: Optional[RequestContext]) -> timedelta:
        return self.token_ttl

    def is_valid(self, ctx: Optional[RequestContext]) -> bool:
        if self.predicate is None:
            return True
        return bool(self.predicate(ctx if ctx is not None else RequestContext()))
