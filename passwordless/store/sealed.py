"""
Stateless sealed token store for passwordless.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

The store keeps nothing server-side. ``store`` signs ``{uid, token, exp}``
as an HS256 JWT, encrypts the JWT with Fernet and hands the result to the
client through the context's response sink. ``verify`` reads it back from
the request source, authenticates, decrypts and compares.

Limitation: an envelope cannot be revoked before it expires. ``delete``
only asks the holder to discard it; a copy kept by the client stays valid
until its expiry. This is the price of needing no shared state between
instances.
"""

import base64
import hashlib
import hmac
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple, Union

import jwt
from cryptography.fernet import Fernet, InvalidToken

from ..common.utils import from_timestamp, get_current_time
from ..context import RequestContext, RequestSource, ResponseSink, ensure_context
from ..errors import (
    ConfigurationError,
    InvalidEnvelopeError,
    MissingRequestSourceError,
    MissingResponseSinkError,
    TokenHashError,
    TokenNotFoundError,
)
from ..util.encoding import url_safe_decode, url_safe_encode
from .base import TokenStore

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
MIN_KEY_SIZE = 16
# HS256 keys should be at least as long as the SHA-256 output.
MIN_SIGNING_KEY_SIZE = 32

KeyType = Union[str, bytes]


def _key_bytes(key: KeyType, name: str, min_size: int = MIN_KEY_SIZE) -> bytes:
    if isinstance(key, str):
        key = key.encode("utf-8")
    if not isinstance(key, bytes) or len(key) < min_size:
        raise ConfigurationError(f"{name} must be at least {min_size} bytes", config_key=name)
    return key


def _fernet_key(auth_key: bytes, encryption_key: bytes) -> bytes:
    # Fernet keys are a 16 byte HMAC key followed by a 16 byte AES key.
    signing = hashlib.sha256(auth_key).digest()[:16]
    encryption = hashlib.sha256(encryption_key).digest()[:16]
    return base64.urlsafe_b64encode(signing + encryption)


class SealedTokenStore(TokenStore):
    """
    Token store that seals each token into a client-held envelope.

    Args:
        signing_key: HMAC key for the inner JWT, at least 32 bytes
        auth_key: Key authenticating the encrypted envelope
        encryption_key: Key encrypting the envelope
        name: Envelope name used with the sink and source
    """

    def __init__(self, signing_key: KeyType, auth_key: KeyType, encryption_key: KeyType,
                 name: str = "passwordless"):
        self._signing_key = _key_bytes(signing_key, "signing_key", MIN_SIGNING_KEY_SIZE)
        self._fernet = Fernet(_fernet_key(
            _key_bytes(auth_key, "auth_key"),
            _key_bytes(encryption_key, "encryption_key"),
        ))
        self.name = name

    def _sink(self, ctx: RequestContext) -> ResponseSink:
        if ctx.response_sink is None:
            raise MissingResponseSinkError()
        return ctx.response_sink

    def _source(self, ctx: RequestContext) -> RequestSource:
        if ctx.request_source is None:
            raise MissingRequestSourceError()
        return ctx.request_source

    def seal(self, token: str, uid: str, expires_at: datetime) -> str:
        """
        Sign and encrypt an envelope for ``uid``.

        The expiry is rounded up to a whole second, so an envelope never
        expires before ``expires_at``.
        """
        claims = {
            "uid": uid,
            "token": token,
            "exp": math.ceil(expires_at.timestamp()),
        }
        try:
            signed = jwt.encode(claims, self._signing_key, algorithm=ALGORITHM)
            if isinstance(signed, bytes):
                signed = signed.decode("ascii")
            encrypted = self._fernet.encrypt(signed.encode("ascii"))
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            logger.error(f"Sealing envelope failed: {e}")
            raise TokenHashError(f"sealing envelope failed: {e}") from e
        return url_safe_encode(base64.urlsafe_b64decode(encrypted))

    def open(self, envelope: str) -> Dict[str, Any]:
        """
        Authenticate, decrypt and decode an envelope.

        Raises:
            TokenNotFoundError: If the envelope has expired
            InvalidEnvelopeError: If it was tampered with or is malformed
        """
        try:
            raw = url_safe_decode(envelope, strict=True)
            signed = self._fernet.decrypt(base64.urlsafe_b64encode(raw))
            claims = jwt.decode(
                signed,
                self._signing_key,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "uid", "token"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenNotFoundError()
        except (InvalidToken, jwt.InvalidTokenError, ValueError, TypeError) as e:
            logger.debug(f"Rejected envelope: {type(e).__name__}")
            raise InvalidEnvelopeError() from e

        if not isinstance(claims.get("uid"), str) or not isinstance(claims.get("token"), str):
            raise InvalidEnvelopeError("envelope claims have the wrong type")
        return claims

    async def store(self, ctx: Optional[RequestContext], token: str, uid: str, ttl: timedelta) -> None:
        """Seal the token and emit it through the response sink."""
        ctx = ensure_context(ctx)
        ctx.check_deadline()
        sink = self._sink(ctx)

        expires_at = get_current_time() + ttl
        envelope = self.seal(token, uid, expires_at)
        sink.set_envelope(self.name, envelope, expires_at, math.ceil(ttl.total_seconds()))
        logger.debug(f"Issued sealed envelope for uid {uid}")

    async def exists(self, ctx: Optional[RequestContext], uid: str) -> Tuple[bool, Optional[datetime]]:
        """Check the presented envelope belongs to ``uid`` and is live."""
        ctx = ensure_context(ctx)
        ctx.check_deadline()
        envelope = self._source(ctx).get_envelope(self.name)
        if envelope is None:
            return False, None

        try:
            claims = self.open(envelope)
        except TokenNotFoundError:
            return False, None
        if claims["uid"] != uid:
            return False, None
        return True, from_timestamp(claims["exp"])

    async def verify(self, ctx: Optional[RequestContext], token: str, uid: str) -> bool:
        """Verify the presented envelope holds ``token`` for ``uid``."""
        ctx = ensure_context(ctx)
        ctx.check_deadline()
        envelope = self._source(ctx).get_envelope(self.name)
        if envelope is None:
            raise TokenNotFoundError()

        claims = self.open(envelope)
        valid_uid = claims["uid"] == uid
        valid_token = hmac.compare_digest(claims["token"].encode("utf-8"), token.encode("utf-8"))
        return valid_uid and valid_token

    async def delete(self, ctx: Optional[RequestContext], uid: str) -> None:
        """Emit an already-expired replacement envelope."""
        ctx = ensure_context(ctx)
        ctx.check_deadline()
        sink = self._sink(ctx)

        now = get_current_time()
        sink.set_envelope(self.name, self.seal("", uid, now - timedelta(seconds=1)), now, 0)
        logger.debug(f"Cleared sealed envelope for uid {uid}")
