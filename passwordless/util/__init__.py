# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Utility package providing encoding and configuration helpers.

This package includes:
- URL-safe base64 encoding with strict decoding for opaque envelopes
- Secure random byte generation
- Environment and duration parsing for configuration
"""

from .encoding import url_safe_encode, url_safe_decode, generate_random_bytes
from .config import get_config_value, parse_duration_string, load_config_file

__all__ = [
    "url_safe_encode",
    "url_safe_decode",
    "generate_random_bytes",
    "get_config_value",
    "parse_duration_string",
    "load_config_file",
]
