"""
Configuration module for passwordless.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

from dataclasses import dataclass, field, fields
from datetime import timedelta
from typing import Any, Dict, Optional

from ..errors import ConfigurationError
from ..util.config import get_config_value, load_config_file, parse_duration_string

STORE_TYPES = ("memory", "sealed", "redis")


@dataclass
class Config:
    """Configuration for the token store and default token lifetime"""
    store_type: str = "memory"
    default_ttl: timedelta = field(default_factory=lambda: timedelta(minutes=30))
    sweep_interval: timedelta = field(default_factory=lambda: timedelta(minutes=1))
    redis_url: str = "redis://localhost:6379/0"
    redis_prefix: str = "passwordless-token::"
    signing_key: Optional[str] = None
    auth_key: Optional[str] = None
    encryption_key: Optional[str] = None
    envelope_name: str = "passwordless"

    def __post_init__(self):
        self.default_ttl = parse_duration_string(self.default_ttl)
        self.sweep_interval = parse_duration_string(self.sweep_interval)

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from PASSWORDLESS_* environment variables"""
        return cls(
            store_type=get_config_value("store_type", "memory"),
            default_ttl=get_config_value("default_ttl", "30m"),
            sweep_interval=get_config_value("sweep_interval", "1m"),
            redis_url=get_config_value("redis_url", "redis://localhost:6379/0"),
            redis_prefix=get_config_value("redis_prefix", "passwordless-token::"),
            signing_key=get_config_value("signing_key"),
            auth_key=get_config_value("auth_key"),
            encryption_key=get_config_value("encryption_key"),
            envelope_name=get_config_value("envelope_name", "passwordless"),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create configuration from a mapping, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_file(cls, file_path: str) -> "Config":
        """Create configuration from a JSON or YAML file"""
        return cls.from_dict(load_config_file(file_path))

    def validate(self) -> bool:
        """Validate the configuration"""
        if self.store_type not in STORE_TYPES:
            raise ConfigurationError(
                f"store_type must be one of {', '.join(STORE_TYPES)}", config_key="store_type"
            )
        if self.default_ttl <= timedelta(0):
            raise ConfigurationError("default_ttl must be positive", config_key="default_ttl")
        if self.sweep_interval <= timedelta(0):
            raise ConfigurationError("sweep_interval must be positive", config_key="sweep_interval")
        if self.store_type == "sealed":
            for key in ("signing_key", "auth_key", "encryption_key"):
                if not getattr(self, key):
                    raise ConfigurationError(f"{key} is required for the sealed store", config_key=key)
        if self.store_type == "redis" and not self.redis_url:
            raise ConfigurationError("redis_url is required for the redis store", config_key="redis_url")
        return True
