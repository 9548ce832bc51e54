"""
Hacker News top-stories fetcher.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional

import httpx

from mindfeed.config import HACKER_NEWS, settings
from mindfeed.errors import SourceUnavailable
from mindfeed.models import JsonDict, RawStory
from mindfeed.sources.common import clean_text, epoch_to_iso

logger = logging.getLogger(__name__)


def story_from_item(item: Any) -> Optional[RawStory]:
    """
    Map a Hacker News item into a RawStory.

    Args:
        item: Decoded item JSON (may be null for deleted items)

    Returns:
        RawStory, or None if the item is not a story with an external URL
    """
    if not isinstance(item, dict):
        return None
    if item.get("type") != "story" or not item.get("url"):
        return None

    return RawStory(
        # Prefixed so HN ids cannot collide with other sources
        id=f"hn-{item['id']}",
        title=clean_text(item.get("title")),
        url=item["url"],
        source=HACKER_NEWS.name,
        author=item.get("by"),
        publish_date=epoch_to_iso(item.get("time")),
        score=item.get("score"),
    )


class HackerNewsFetcher:
    """Fetches the current top stories from the Hacker News Firebase API."""

    name = HACKER_NEWS.name

    def __init__(self, limit: int | None = None, base_url: str | None = None):
        self.limit = limit if limit is not None else settings.HN_STORY_LIMIT
        self.base_url = (base_url or settings.HN_BASE_URL).rstrip("/")

    async def _get_json(self, client: httpx.AsyncClient, path: str) -> Any:
        response = await client.get(f"{self.base_url}/{path}")
        response.raise_for_status()
        return response.json()

    async def _fetch_top_ids(self, client: httpx.AsyncClient) -> List[int]:
        ids = await self._get_json(client, "topstories.json")
        if not isinstance(ids, list):
            raise SourceUnavailable(self.name, "top stories payload is not a list")
        return ids[: self.limit]

    async def _fetch_item(self, client: httpx.AsyncClient, item_id: int) -> Optional[JsonDict]:
        try:
            return await self._get_json(client, f"item/{item_id}.json")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Skipping Hacker News item %s: %s", item_id, e)
            return None

    async def fetch(self, client: httpx.AsyncClient) -> List[RawStory]:
        """
        Fetch the top stories.

        Args:
            client: Shared HTTP client

        Returns:
            List of RawStory objects, empty on failure
        """
        try:
            top_ids = await self._fetch_top_ids(client)
        except (httpx.HTTPError, ValueError, SourceUnavailable) as e:
            logger.error("Error fetching Hacker News top stories: %s", e)
            return []

        # Details are independent of each other; only the id list had to come first
        items = await asyncio.gather(*(self._fetch_item(client, item_id) for item_id in top_ids))

        stories: List[RawStory] = []
        for item in items:
            try:
                story = story_from_item(item)
            except (KeyError, TypeError, ValueError, OverflowError, OSError) as e:
                logger.warning("Error processing Hacker News item: %s", e)
                continue
            if story is not None:
                stories.append(story)

        return stories
