"""
Shared utility functions for the digest application.
"""
from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    """
    Get current UTC datetime with timezone information.

    Returns:
        Current UTC datetime
    """
    return datetime.now(timezone.utc)


def clamp(value: int, low: int, high: int) -> int:
    """Clamp an integer to the closed range [low, high]."""
    return max(low, min(high, value))
