"""
passwordless Python Package

One-time token authentication: generate short-lived tokens, deliver them out
of band and verify them once.
"""

__version__ = "0.1.0"

from .core.config import Config
from .core.passwordless import Passwordless, request_token, verify_token
from .core.actions import PostVerifyAction, DeleteOnSuccess, DeleteAlways, CallbackAction
from .context import RequestContext, ResponseSink, RequestSource, EnvelopeJar
from .strategy import Strategy, SimpleStrategy
from .token import TokenGenerator, ByteGenerator, CrockfordGenerator, PINGenerator
from .transport import Transport, LogTransport
from .store import (
    TokenStore,
    TokenHasher,
    MemoryTokenStore,
    SealedTokenStore,
    RedisTokenStore,
    create_token_store,
)
from .errors import (
    PasswordlessError,
    TokenNotFoundError,
    TokenNotValidError,
    InvalidEnvelopeError,
    UnknownStrategyError,
    NotValidForContextError,
    MissingResponseSinkError,
    MissingRequestSourceError,
    PostVerifyError,
)

__all__ = [
    "Config",
    "Passwordless",
    "request_token",
    "verify_token",
    "PostVerifyAction",
    "DeleteOnSuccess",
    "DeleteAlways",
    "CallbackAction",
    "RequestContext",
    "ResponseSink",
    "RequestSource",
    "EnvelopeJar",
    "Strategy",
    "SimpleStrategy",
    "TokenGenerator",
    "ByteGenerator",
    "CrockfordGenerator",
    "PINGenerator",
    "Transport",
    "LogTransport",
    "TokenStore",
    "TokenHasher",
    "MemoryTokenStore",
    "SealedTokenStore",
    "RedisTokenStore",
    "create_token_store",
    "PasswordlessError",
    "TokenNotFoundError",
    "TokenNotValidError",
    "InvalidEnvelopeError",
    "UnknownStrategyError",
    "NotValidForContextError",
    "MissingResponseSinkError",
    "MissingRequestSourceError",
    "PostVerifyError",
]
