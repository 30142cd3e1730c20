"""
Storage factory for passwordless.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

import logging
from typing import Optional

from ..core.config import Config
from .base import TokenStore
from .hashing import TokenHasher
from .memory import MemoryTokenStore
from .redis import RedisTokenStore
from .sealed import SealedTokenStore

logger = logging.getLogger(__name__)


def create_token_store(config: Optional[Config] = None, hasher: Optional[TokenHasher] = None) -> TokenStore:
    """
    Factory function to create token stores

    Args:
        config: Store configuration (defaults to ``Config.from_env()``)
        hasher: Token hasher for the memory and redis stores

    Returns:
        TokenStore instance

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    config = config or Config.from_env()
    config.validate()

    if config.store_type == "memory":
        store: TokenStore = MemoryTokenStore(
            sweep_interval=config.sweep_interval.total_seconds(),
            hasher=hasher,
        )
    elif config.store_type == "sealed":
        store = SealedTokenStore(
            signing_key=config.signing_key,
            auth_key=config.auth_key,
            encryption_key=config.encryption_key,
            name=config.envelope_name,
        )
    else:
        store = RedisTokenStore.from_url(config.redis_url, prefix=config.redis_prefix, hasher=hasher)

    logger.info(f"Created {config.store_type} token store")
    return store
