"""
Token generators for passwordless.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

Generators produce short random tokens from an alphabet and sanitize user
input so that minor transcription errors (``O`` typed for ``0``) still
verify.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Union

from ..context import RequestContext
from ..errors import AlphabetTooLargeError
from ..util.encoding import generate_random_bytes

logger = logging.getLogger(__name__)

CROCKFORD_ALPHABET = b"0123456789abcdefghjkmnpqrstvwxyz"
DIGITS = b"0123456789"

# Longest PIN that 8 random bytes (max 2**64 - 1, 20 digits) can fill.
MAX_PIN_LENGTH = 19


def rand_bytes(alphabet: bytes, length: int) -> bytes:
    """
    Return ``length`` symbols picked at random from ``alphabet``.

    A plain ``byte % c`` favours the first ``256 % c`` symbols. Each draw
    here adds a running reservoir to the raw byte before reducing, and the
    reservoir absorbs the remainder of the previous draw, which spreads
    that bias across the alphabet over repeated draws.

    Args:
        alphabet: Symbols to pick from (at most 256)
        length: Number of symbols

    Raises:
        AlphabetTooLargeError: If the alphabet has more than 256 symbols
        EntropyError: If the secure random source fails
    """
    c = len(alphabet)
    if c > 256:
        raise AlphabetTooLargeError(c)
    if c == 0:
        raise ValueError("alphabet must not be empty")
    if length < 0:
        raise ValueError("length must not be negative")

    raw = generate_random_bytes(length)
    out = bytearray(length)
    reservoir = 0
    for i, b in enumerate(raw):
        out[i] = alphabet[(reservoir + b) % c]
        reservoir += (c + (c - b % c) % c) % c
    return bytes(out)


def _translate(value: str, table: Dict[str, str]) -> str:
    return "".join(table.get(ch, ch) for ch in value)


_CONFUSABLE_ONE_ZERO = {"i": "1", "l": "1", "|": "1", "o": "0"}


class TokenGenerator(ABC):
    """Generates tokens and normalizes user-entered tokens."""

    @abstractmethod
    async def generate(self, ctx: Optional[RequestContext] = None) -> str:
        """Return a new random token."""
        pass

    @abstractmethod
    async def sanitize(self, ctx: Optional[RequestContext], value: str) -> str:
        """
        Map user input back to the form ``generate`` produces.

        Must be idempotent: ``sanitize(sanitize(x)) == sanitize(x)``.
        """
        pass


@dataclass(frozen=True)
class ByteGenerator(TokenGenerator):
    """Random tokens of ``length`` symbols from an arbitrary alphabet."""

    alphabet: Union[bytes, str]
    length: int

    def __post_init__(self):
        if isinstance(self.alphabet, str):
            try:
                encoded = self.alphabet.encode("latin-1")
            except UnicodeEncodeError as e:
                raise ValueError("alphabet must only contain single-byte (Latin-1) characters") from e
            object.__setattr__(self, "alphabet", encoded)

    async def generate(self, ctx: Optional[RequestContext] = None) -> str:
        return rand_bytes(self.alphabet, self.length).decode("latin-1")

    async def sanitize(self, ctx: Optional[RequestContext], value: str) -> str:
        return value


@dataclass(frozen=True)
class CrockfordGenerator(TokenGenerator):
    """
    Random tokens from Douglas Crockford's base32 alphabet.

    The alphabet leaves out letters that look like digits, and ``sanitize``
    folds the usual misreadings back: ``I``, ``L`` and ``|`` become ``1``,
    ``O`` becomes ``0``.
    """

    length: int

    async def generate(self, ctx: Optional[RequestContext] = None) -> str:
        return rand_bytes(CROCKFORD_ALPHABET, self.length).decode("ascii")

    async def sanitize(self, ctx: Optional[RequestContext], value: str) -> str:
        return _translate(value.lower(), _CONFUSABLE_ONE_ZERO)


@dataclass(frozen=True)
class PINGenerator(TokenGenerator):
    """
    Numeric PINs of ``length`` digits.

    Eight random bytes are read as an unsigned integer and reduced modulo
    ``10 ** length``. Because 2**64 is not a multiple of ``10 ** length`` the
    smallest ``2**64 % 10**length`` PIN values come up slightly more often;
    for a 6 digit PIN that is a relative excess of about 5e-14, accepted
    here rather than paying for rejection sampling.
    """

    length: int = 6

    def __post_init__(self):
        if not 1 <= self.length <= MAX_PIN_LENGTH:
            raise ValueError(f"PIN length must be between 1 and {MAX_PIN_LENGTH}")

    async def generate(self, ctx: Optional[RequestContext] = None) -> str:
        value = int.from_bytes(generate_random_bytes(8), "big") % (10 ** self.length)
        return str(value).zfill(self.length)

    async def sanitize(self, ctx: Optional[RequestContext], value: str) -> str:
        out = []
        for original in value:
            if original == "B":
                out.append("8")
            elif original == "b":
                out.append("6")
            else:
                lowered = original.lower()
                if lowered == "s":
                    out.append("5")
                else:
                    out.append(_CONFUSABLE_ONE_ZERO.get(lowered, lowered))
        return "".join(out)
