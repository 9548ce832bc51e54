"""
Story collection coordinator that aggregates from multiple sources.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import List, Optional, Sequence

import httpx

from mindfeed.config import BLOG_FEEDS, HTTP_HEADERS, settings
from mindfeed.models import RawStory
from mindfeed.sources.common import SourceAdapter
from mindfeed.sources.feeds import FeedFetcher
from mindfeed.sources.hacker_news import HackerNewsFetcher

logger = logging.getLogger(__name__)


def default_adapters() -> List[SourceAdapter]:
    """One Hacker News fetcher plus one fetcher per registered blog feed."""
    return [HackerNewsFetcher(), *(FeedFetcher(config) for config in BLOG_FEEDS)]


async def _run_adapters(adapters: Sequence[SourceAdapter], client: httpx.AsyncClient) -> List[RawStory]:
    # Wait for every adapter to settle, never just the first
    results = await asyncio.gather(
        *(adapter.fetch(client) for adapter in adapters),
        return_exceptions=True,
    )

    combined: List[RawStory] = []
    for adapter, result in zip(adapters, results):
        if isinstance(result, BaseException):
            logger.error("Source %s raised past its boundary: %r", adapter.name, result)
            continue
        logger.info("Source %s contributed %d stories", adapter.name, len(result))
        combined.extend(result)
    return combined


async def collect_stories(
    adapters: Optional[Sequence[SourceAdapter]] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
    rng: Optional[random.Random] = None,
) -> List[RawStory]:
    """
    Collect stories from every source concurrently.

    Args:
        adapters: Source adapters to run (defaults to the full registry)
        client: Shared HTTP client; one is created and closed here if omitted
        rng: Random source for the shuffle, injectable for deterministic tests

    Returns:
        All stories from all sources, in shuffled order
    """
    if adapters is None:
        adapters = default_adapters()

    if client is None:
        async with httpx.AsyncClient(headers=HTTP_HEADERS, timeout=settings.HTTP_TIMEOUT) as own_client:
            combined = await _run_adapters(adapters, own_client)
    else:
        combined = await _run_adapters(adapters, client)

    # Shuffle so no single source always lands on top
    (rng or random.Random()).shuffle(combined)

    logger.info("Collected %d stories from %d sources", len(combined), len(adapters))
    return combined
