"""
Syndicated feed fetcher, via an rss2json-compatible feed-to-JSON bridge.
"""
from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from mindfeed.config import settings
from mindfeed.errors import SourceUnavailable
from mindfeed.models import JsonDict, RawStory, SourceConfig
from mindfeed.sources.common import clean_text, make_story_id, normalize_date

logger = logging.getLogger(__name__)


def story_from_entry(entry: JsonDict, source_name: str) -> Optional[RawStory]:
    """
    Map a bridge entry into a RawStory.

    Feed entries carry no numeric id, so the id is hashed from the link,
    falling back to the title.
    """
    link = clean_text(entry.get("link"))
    title = clean_text(entry.get("title"))
    if not link and not title:
        return None

    return RawStory(
        id=make_story_id("rss", link or title),
        title=title,
        url=link,
        source=source_name,
        author=clean_text(entry.get("author")) or None,
        publish_date=normalize_date(clean_text(entry.get("pubDate")) or None),
    )


class FeedFetcher:
    """Fetches one syndicated feed and keeps only its newest entries."""

    def __init__(
        self,
        config: SourceConfig,
        per_feed_limit: int | None = None,
        bridge_url: str | None = None,
    ):
        self.config = config
        self.name = config.name
        self.per_feed_limit = per_feed_limit if per_feed_limit is not None else settings.FEED_ITEM_LIMIT
        self.bridge_url = bridge_url or settings.FEED_BRIDGE_URL

    async def _fetch_entries(self, client: httpx.AsyncClient) -> List[JsonDict]:
        response = await client.get(self.bridge_url, params={"rss_url": self.config.feed_url})
        response.raise_for_status()
        data = response.json()

        if not isinstance(data, dict) or data.get("status") != "ok":
            status = data.get("status") if isinstance(data, dict) else None
            raise SourceUnavailable(self.name, f"bridge status {status!r}")
        items = data.get("items")
        if not isinstance(items, list):
            raise SourceUnavailable(self.name, "bridge items is not a list")
        return items

    async def fetch(self, client: httpx.AsyncClient) -> List[RawStory]:
        """
        Fetch the feed through the bridge.

        Args:
            client: Shared HTTP client

        Returns:
            Up to ``per_feed_limit`` RawStory objects, empty on any failure
        """
        try:
            entries = await self._fetch_entries(client)
        except (httpx.HTTPError, ValueError, SourceUnavailable) as e:
            logger.warning("Failed to fetch feed for %s: %s", self.name, e)
            return []

        stories: List[RawStory] = []
        for entry in entries:
            if len(stories) >= self.per_feed_limit:
                break
            if not isinstance(entry, dict):
                continue
            try:
                story = story_from_entry(entry, self.name)
            except (TypeError, ValueError, OverflowError) as e:
                logger.warning("Error processing feed entry for %s: %s", self.name, e)
                continue
            if story is not None:
                stories.append(story)

        return stories
