"""
Encoding and decoding utilities for passwordless.
Provides safe encoding/decoding functions and secure random bytes.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

import base64
import binascii
import secrets
from typing import Union

from ..errors import EntropyError


def url_safe_encode(data: Union[str, bytes]) -> str:
    """Encode data to URL-safe base64 string."""
    if isinstance(data, str):
        data = data.encode('utf-8')

    return base64.urlsafe_b64encode(data).decode('ascii').rstrip('=')


def url_safe_decode(encoded: str, strict: bool = False) -> bytes:
    """
    Decode URL-safe base64 string to bytes.

    With ``strict`` the input must be the canonical encoding of its own
    decoded bytes, so two different strings never decode to the same value.
    """
    # Add padding if needed
    padding = 4 - (len(encoded) % 4)
    padded = encoded + '=' * padding if padding != 4 else encoded

    try:
        decoded = base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid URL-safe base64 data: {e}")

    if strict and url_safe_encode(decoded) != encoded:
        raise ValueError("Non-canonical URL-safe base64 data")

    return decoded


def generate_random_bytes(length: int = 32) -> bytes:
    """Generate cryptographically secure random bytes."""
    try:
        return secrets.token_bytes(length)
    except (OSError, NotImplementedError) as e:
        raise EntropyError(f"secure random source unavailable: {e}") from e
