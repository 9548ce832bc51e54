"""
File: mindfeed/models.py
Internal data structures used during collection/enrichment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union


JsonDict = Dict[str, Any]

# Hacker News ids arrive as ints, feed ids are hashed strings
StoryId = Union[str, int]


def story_key(story_id: StoryId) -> str:
    """Canonical string projection of a story id, used for every identity comparison."""
    return str(story_id).strip()


@dataclass(frozen=True)
class SourceConfig:
    """Static registry entry for one content origin."""

    name: str
    feed_url: Optional[str]  # None for the ranked API
    web_url: str


@dataclass(frozen=True)
class RawStory:
    """Unified representation of a story prior to enrichment."""

    id: StoryId
    title: str
    url: str
    source: str  # registry name, e.g. "Hacker News" or "Andrej Karpathy"
    author: Optional[str] = None
    publish_date: Optional[str] = None  # ISO-8601
    score: Optional[int] = None  # ranked API only

    @property
    def key(self) -> str:
        return story_key(self.id)


@dataclass(frozen=True)
class EnrichedStory(RawStory):
    """A RawStory plus the annotation fields set by the enrichment merge."""

    ai_summary: str = ""
    ai_abstract: str = ""
    relevance_score: int = 0  # [0, 100]
    recommendation_reason: str = ""
    tags: Tuple[str, ...] = field(default_factory=tuple)


__all__ = ["JsonDict", "StoryId", "story_key", "SourceConfig", "RawStory", "EnrichedStory"]
