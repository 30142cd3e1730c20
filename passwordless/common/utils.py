"""
Common utilities and helper functions for passwordless.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

from datetime import datetime, timezone
from typing import Optional, Union


def get_current_time() -> datetime:
    """Get the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def from_timestamp(timestamp: Union[int, float]) -> datetime:
    """Convert seconds since the epoch to a UTC datetime."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def is_expired(expires_at: Union[int, float, datetime], now: Optional[datetime] = None) -> bool:
    """
    Check if an expiry time has passed.

    Args:
        expires_at: Expiry as a timestamp or datetime
        now: Reference time (defaults to the current time)

    Returns:
        True if expired, False otherwise
    """
    current_time = now or get_current_time()

    if isinstance(expires_at, (int, float)):
        expires_at = from_timestamp(expires_at)

    return current_time >= expires_at


def mask_sensitive_data(data: str, mask_char: str = "*", visible_chars: int = 4) -> str:
    """
    Mask sensitive data, showing only first and last few characters.

    Args:
        data: Data to mask
        mask_char: Character to use for masking
        visible_chars: Number of characters to show at start and end

    Returns:
        Masked string
    """
    if len(data) <= visible_chars * 2:
        return mask_char * len(data)

    visible_start = visible_chars // 2
    visible_end = visible_chars - visible_start

    masked_length = len(data) - visible_chars
    return data[:visible_start] + mask_char * masked_length + data[-visible_end:]
