"""
Configuration utilities for passwordless.
Provides environment lookup, duration parsing and config file loading.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

import json
import os
import re
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Union

import yaml


def get_config_value(key: str, default: Any = None, env_prefix: str = "PASSWORDLESS_") -> Any:
    """Get configuration value from environment or return default."""
    return os.environ.get(f"{env_prefix}{key.upper()}", default)


def parse_duration_string(duration_str: Union[str, int, float, timedelta]) -> timedelta:
    """
    Parse duration string like '30s', '5m', '2h', '1d' into timedelta.
    Bare numbers are taken as seconds.
    """
    if isinstance(duration_str, timedelta):
        return duration_str
    if isinstance(duration_str, (int, float)):
        return timedelta(seconds=duration_str)
    if not isinstance(duration_str, str):
        raise ValueError("Duration must be a string")

    duration_str = duration_str.strip().lower()

    # Pattern to match number followed by unit
    pattern = r'^(\d+(?:\.\d+)?)\s*([smhd]?)$'
    match = re.match(pattern, duration_str)

    if not match:
        raise ValueError(f"Invalid duration format: {duration_str}")

    value, unit = match.groups()
    value = float(value)

    if unit in ('s', ''):
        return timedelta(seconds=value)
    elif unit == 'm':
        return timedelta(minutes=value)
    elif unit == 'h':
        return timedelta(hours=value)
    else:
        return timedelta(days=value)


def load_config_file(file_path: str) -> Dict[str, Any]:
    """Load configuration from a file (JSON or YAML)."""
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    file_ext = Path(file_path).suffix.lower()

    with open(file_path, 'r', encoding='utf-8') as f:
        if file_ext in ['.json']:
            return json.load(f)
        elif file_ext in ['.yaml', '.yml']:
            return yaml.safe_load(f) or {}
        else:
            raise ValueError(f"Unsupported configuration file format: {file_ext}")
