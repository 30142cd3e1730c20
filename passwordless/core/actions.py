"""
Post-verification actions.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

Actions run in order after a store has verified a token. The default chain
is ``[DeleteOnSuccess()]``, which makes every token single-use.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from ..context import RequestContext
from ..store.base import TokenStore

ActionCallback = Callable[[Optional[RequestContext], TokenStore, str, str, bool], Awaitable[None]]


class PostVerifyAction(ABC):
    """Runs after verification with the result of the check."""

    @abstractmethod
    async def __call__(self, ctx: Optional[RequestContext], store: TokenStore,
                       uid: str, token: str, valid: bool) -> None:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class DeleteOnSuccess(PostVerifyAction):
    """Delete the token once it has been verified successfully."""

    async def __call__(self, ctx, store, uid, token, valid):
        if valid:
            await store.delete(ctx, uid)


class DeleteAlways(PostVerifyAction):
    """Delete the token after any verification attempt, allowing a single guess."""

    async def __call__(self, ctx, store, uid, token, valid):
        await store.delete(ctx, uid)


class CallbackAction(PostVerifyAction):
    """Adapts an async callable to the action interface."""

    def __init__(self, callback: ActionCallback):
        self.callback = callback

    async def __call__(self, ctx, store, uid, token, valid):
        await self.callback(ctx, store, uid, token, valid)

    def __repr__(self) -> str:
        return f"CallbackAction({getattr(self.callback, '__name__', self.callback)!r})"
