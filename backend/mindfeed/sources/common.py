"""
Common utilities for story source adapters.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Protocol

import httpx
from dateutil import parser as dateparser

from mindfeed.models import RawStory


class SourceAdapter(Protocol):
    """A per-source fetch-and-normalize unit.

    Implementations must never raise out of ``fetch``: absence of data is an
    empty list, because the collector has no per-source error channel.
    """

    name: str

    async def fetch(self, client: httpx.AsyncClient) -> List[RawStory]:
        ...


def make_story_id(prefix: str, text: str) -> str:
    """
    Generate a short, stable id for a story without a native one.

    Rolling ``h = h * 31 + unit`` hash over the UTF-16 code units of ``text``,
    wrapped to a signed 32-bit integer, rendered as the hex of its absolute value.

    Args:
        prefix: Namespace for the id, e.g. "rss"
        text: Canonical link, or title when there is no link

    Returns:
        "<prefix>-<hex>", or "<prefix>0" for empty input. The sentinel has
        no separator, so no hashed input can produce it.
    """
    if not text:
        return f"{prefix}0"

    # surrogatepass keeps lone surrogates hashable instead of raising
    encoded = text.encode("utf-16-le", "surrogatepass")
    value = 0
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        value = (value * 31 + unit) & 0xFFFFFFFF

    if value >= 0x80000000:
        value -= 0x100000000

    return f"{prefix}-{abs(value):x}"


def epoch_to_iso(seconds: Optional[float]) -> Optional[str]:
    """Convert epoch seconds to an ISO-8601 UTC instant with millisecond precision."""
    if seconds is None:
        return None
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_date(date_string: Optional[str]) -> Optional[str]:
    """
    Normalize a feed date string to ISO-8601 UTC.

    Args:
        date_string: Date in any format dateutil understands, or None

    Returns:
        ISO-8601 string, the input unchanged if it cannot be parsed, or None
    """
    if not date_string:
        return None

    # Shifting to UTC can leave the datetime range near year 1 or 9999
    try:
        parsed = dateparser.parse(date_string)
        if parsed.tzinfo:
            parsed = parsed.astimezone(timezone.utc)
        else:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    except (ValueError, OverflowError):
        return date_string


def clean_text(text: Optional[str]) -> str:
    """
    Clean and normalize text content.

    Args:
        text: Raw text string or None

    Returns:
        Cleaned text string, empty string if input is None
    """
    if not text:
        return ""
    return str(text).strip()
