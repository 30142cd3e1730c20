"""
Main Passwordless orchestrator.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

import logging
from datetime import timedelta
from typing import Dict, Optional, Sequence

from ..common.utils import mask_sensitive_data
from ..context import RequestContext
from ..errors import NotValidForContextError, PostVerifyError, UnknownStrategyError
from ..store.base import TokenStore
from ..strategy import ContextPredicate, SimpleStrategy, Strategy
from ..token.generator import TokenGenerator
from ..transport.base import Transport
from .actions import DeleteOnSuccess, PostVerifyAction

logger = logging.getLogger(__name__)

DEFAULT_ACTIONS: Sequence[PostVerifyAction] = (DeleteOnSuccess(),)


async def request_token(ctx: Optional[RequestContext], store: TokenStore, strategy: Strategy,
                        uid: str, recipient: str) -> None:
    """
    Generate, store and deliver a token to ``recipient``.

    If delivery fails the stored token stays live; requesting a new token
    supersedes it.
    """
    token = await strategy.generate(ctx)
    await store.store(ctx, token, uid, strategy.ttl(ctx))
    try:
        await strategy.send(ctx, token, uid, recipient)
    except Exception as e:
        logger.warning(f"Delivery to {mask_sensitive_data(recipient)} failed for uid {uid}: {e}")
        raise


async def verify_token(ctx: Optional[RequestContext], store: TokenStore, uid: str, token: str,
                       *actions: PostVerifyAction) -> bool:
    """
    Check ``token`` against ``store`` and run the post-verify actions.

    Args:
        ctx: Request context
        store: Token store
        uid: User identifier
        token: Token presented by the user
        *actions: Actions to run after verification; ``DeleteOnSuccess``
            when none are given

    Returns:
        The verification result

    Raises:
        TokenNotFoundError: If no live token exists for ``uid``
        PostVerifyError: If an action fails; later actions are skipped and
            the verification result is kept on the error
    """
    valid = await store.verify(ctx, token, uid)
    for action in actions or DEFAULT_ACTIONS:
        try:
            await action(ctx, store, uid, token, valid)
        except Exception as e:
            logger.error(f"Post-verify action {action!r} failed for uid {uid}: {e}")
            raise PostVerifyError(valid, action, e) from e
    return valid


class Passwordless:
    """
    Holds a set of named strategies and the token store they share.

    Register strategies with ``set_strategy`` or ``set_transport`` during
    setup; registration is not meant to race with request traffic.

    Example:
        pw = Passwordless(MemoryTokenStore())
        pw.set_transport("email", LogTransport(), CrockfordGenerator(12), timedelta(minutes=30))
        await pw.request_token(ctx, "email", "alice", "alice@example.com")
        await pw.verify_token(ctx, "alice", token)
    """

    def __init__(self, store: TokenStore):
        self.store = store
        self.strategies: Dict[str, Strategy] = {}

    def set_strategy(self, name: str, strategy: Strategy) -> None:
        """Register a strategy under ``name``."""
        self.strategies[name] = strategy
        logger.debug(f"Registered strategy '{name}'")

    def set_transport(self, name: str, transport: Transport, generator: TokenGenerator,
                      ttl: timedelta, predicate: Optional[ContextPredicate] = None) -> None:
        """
        Register a transport and generator pair under ``name``.

        Tokens generated for this name are valid for ``ttl``; slower
        delivery mechanisms may need longer TTLs than others.
        """
        self.set_strategy(name, SimpleStrategy(transport, generator, ttl, predicate))

    def list_strategies(self, ctx: Optional[RequestContext]) -> Dict[str, Strategy]:
        """Return the strategies valid for ``ctx``, keyed by name."""
        return {name: s for name, s in self.strategies.items() if s.is_valid(ctx)}

    def get_strategy(self, ctx: Optional[RequestContext], name: str) -> Strategy:
        """
        Return the strategy registered under ``name``.

        Raises:
            UnknownStrategyError: If no such strategy is registered
            NotValidForContextError: If the strategy rejects ``ctx``
        """
        strategy = self.strategies.get(name)
        if strategy is None:
            raise UnknownStrategyError(name)
        if not strategy.is_valid(ctx):
            raise NotValidForContextError(name)
        return strategy

    async def request_token(self, ctx: Optional[RequestContext], strategy: str,
                            uid: str, recipient: str) -> None:
        """Generate and deliver a token to ``recipient`` using the named strategy."""
        s = self.get_strategy(ctx, strategy)
        await request_token(ctx, self.store, s, uid, recipient)
        logger.info(f"Issued token for uid {uid} via '{strategy}'")

    async def verify_token(self, ctx: Optional[RequestContext], uid: str, token: str,
                           *actions: PostVerifyAction, strategy: Optional[str] = None) -> bool:
        """
        Verify ``token`` for ``uid``.

        When ``strategy`` is given, the token is first passed through that
        strategy's sanitizer so user transcription errors still match.
        """
        if strategy is not None:
            token = await self.get_strategy(ctx, strategy).sanitize(ctx, token)
        return await verify_token(ctx, self.store, uid, token, *actions)

    async def close(self) -> None:
        """Close the underlying store."""
        await self.store.close()
