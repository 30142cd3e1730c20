# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package store provides the token store contract and its backends.

This package implements:
- The TokenStore contract shared by every backend
- Memory-based storage with a periodic expiry sweep
- A stateless sealed store keeping tokens in client-held envelopes
- Redis-based storage for multi-instance deployments
- Storage factory driven by configuration
"""

from .base import TokenRecord, TokenStore
from .hashing import TokenHasher
from .memory import MemoryTokenStore
from .sealed import SealedTokenStore
from .redis import RedisTokenStore
from .factory import create_token_store

__all__ = [
    # Core types
    'TokenRecord',
    'TokenStore',
    'TokenHasher',

    # Implementations
    'MemoryTokenStore',
    'SealedTokenStore',
    'RedisTokenStore',

    # Factory
    'create_token_store',
]
