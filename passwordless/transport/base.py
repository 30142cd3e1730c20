"""
Transport interface and a logging transport for development.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from ..context import RequestContext

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Sends a token to a named recipient."""

    @abstractmethod
    async def send(self, ctx: Optional[RequestContext], token: str, uid: str, recipient: str) -> None:
        """
        Deliver ``token`` for ``uid`` to ``recipient``.

        The recipient may be an email address, a phone number or anything
        else the transport understands. Failures are raised.
        """
        pass


def default_message(token: str, uid: str) -> str:
    return f"Token for {uid}: {token}"


class LogTransport(Transport):
    """Writes the message to the log instead of delivering it. For testing and debugging only."""

    def __init__(self, message_func: Callable[[str, str], str] = default_message,
                 level: int = logging.INFO):
        self.message_func = message_func
        self.level = level

    async def send(self, ctx: Optional[RequestContext], token: str, uid: str, recipient: str) -> None:
        logger.log(self.level, self.message_func(token, uid))
