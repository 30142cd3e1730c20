"""
Token hashing for stores that keep tokens server-side.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from argon2 import PasswordHasher, Type
from argon2.exceptions import HashingError, InvalidHashError, VerificationError, VerifyMismatchError

from ..errors import TokenHashError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenHasher:
    """
    Argon2id token hashing.

    Hashes use the PHC string format (``$argon2id$v=19$m=...,t=...,p=...$salt$hash``)
    so the cost parameters travel with each hash and can be raised without
    breaking tokens already issued.

    ``hash`` and ``verify`` run the key derivation in the default executor
    so the event loop keeps serving other tasks meanwhile.
    """

    time_cost: int = 2
    memory_cost: int = 19456
    parallelism: int = 1
    hash_len: int = 32
    salt_len: int = 16
    _hasher: PasswordHasher = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_hasher", PasswordHasher(
            time_cost=self.time_cost,
            memory_cost=self.memory_cost,
            parallelism=self.parallelism,
            hash_len=self.hash_len,
            salt_len=self.salt_len,
            type=Type.ID,
        ))

    def hash_sync(self, token: str) -> str:
        """Return the encoded hash of ``token``."""
        try:
            return self._hasher.hash(token)
        except HashingError as e:
            logger.error(f"argon2 hashing failed: {e}")
            raise TokenHashError(f"hashing failed: {e}") from e

    def verify_sync(self, token: str, hashed: str) -> bool:
        """
        Check ``token`` against an encoded hash.

        Raises:
            TokenHashError: If ``hashed`` is malformed or verification fails
                for a reason other than a mismatch
        """
        try:
            return self._hasher.verify(hashed, token)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError, ValueError) as e:
            raise TokenHashError(f"malformed token hash: {e}") from e

    async def hash(self, token: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.hash_sync, token)

    async def verify(self, token: str, hashed: str) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.verify_sync, token, hashed)
