"""Shared fixtures for the digest tests."""

from typing import Sequence

import pytest

from mindfeed.models import EnrichedStory, RawStory, SourceConfig


def make_raw(story_id, source="Hacker News", title=None, url=None) -> RawStory:
    return RawStory(
        id=story_id,
        title=title or f"Story {story_id}",
        url=url or f"https://example.com/{story_id}",
        source=source,
    )


def make_enriched(story_id, source="A", tags: Sequence[str] = (), relevance=50) -> EnrichedStory:
    return EnrichedStory(
        id=story_id,
        title=f"Story {story_id}",
        url=f"https://example.com/{story_id}",
        source=source,
        ai_summary="summary",
        ai_abstract="abstract",
        relevance_score=relevance,
        recommendation_reason="reason",
        tags=tuple(tags),
    )


@pytest.fixture
def registry():
    return [
        SourceConfig("A", "https://a.example/feed", "https://a.example/"),
        SourceConfig("B", "https://b.example/feed", "https://b.example/"),
        SourceConfig("C", "https://c.example/feed", "https://c.example/"),
    ]
