"""Tests for the syndicated feed fetcher."""

import asyncio
from unittest.mock import patch

import httpx

from mindfeed.models import SourceConfig
from mindfeed.sources.common import make_story_id
from mindfeed.sources.feeds import FeedFetcher, story_from_entry

BRIDGE = "https://bridge.test/v1/api.json"
CONFIG = SourceConfig("Andrej Karpathy", "https://karpathy.github.io/feed.xml", "https://karpathy.github.io/")


def _entry(n, **overrides):
    entry = {
        "link": f"https://karpathy.github.io/post-{n}/",
        "title": f"Post {n}",
        "pubDate": "2024-01-0%d 12:00:00" % n,
        "author": "Andrej",
    }
    entry.update(overrides)
    return entry


def _fetch(response, per_feed_limit=2, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await FeedFetcher(CONFIG, per_feed_limit=per_feed_limit, bridge_url=BRIDGE).fetch(client)

    return asyncio.run(run())


class TestStoryFromEntry:
    """Tests for story_from_entry mapping."""

    def test_maps_fields(self):
        story = story_from_entry(_entry(1), "Andrej Karpathy")
        assert story.id == make_story_id("rss", "https://karpathy.github.io/post-1/")
        assert story.title == "Post 1"
        assert story.url == "https://karpathy.github.io/post-1/"
        assert story.source == "Andrej Karpathy"
        assert story.author == "Andrej"
        assert story.publish_date == "2024-01-01T12:00:00.000Z"
        assert story.score is None

    def test_id_falls_back_to_title(self):
        story = story_from_entry(_entry(1, link=""), "Blog")
        assert story.id == make_story_id("rss", "Post 1")

    def test_entry_without_link_or_title_skipped(self):
        assert story_from_entry({"pubDate": "2024-01-01"}, "Blog") is None

    def test_blank_author_is_none(self):
        assert story_from_entry(_entry(1, author=""), "Blog").author is None


class TestFeedFetcher:
    """Tests for FeedFetcher.fetch."""

    def test_caps_items_per_feed(self):
        stories = _fetch({"status": "ok", "items": [_entry(1), _entry(2), _entry(3)]})
        assert [s.title for s in stories] == ["Post 1", "Post 2"]

    def test_passes_feed_url_to_bridge(self):
        seen = []
        _fetch({"status": "ok", "items": []}, seen=seen)
        assert seen[0].url.params["rss_url"] == CONFIG.feed_url

    def test_skips_malformed_entries_without_using_cap(self):
        stories = _fetch({"status": "ok", "items": ["junk", {}, _entry(1), _entry(2)]})
        assert [s.title for s in stories] == ["Post 1", "Post 2"]

    def test_non_ok_status_returns_empty(self):
        assert _fetch({"status": "error", "message": "feed not found"}) == []

    def test_non_list_items_returns_empty(self):
        assert _fetch({"status": "ok", "items": None}) == []

    def test_http_error_returns_empty(self):
        assert _fetch(httpx.Response(500)) == []

    def test_network_error_returns_empty(self):
        assert _fetch(httpx.ConnectError("connection refused")) == []

    def test_invalid_json_returns_empty(self):
        assert _fetch(httpx.Response(200, content=b"not json")) == []

    def test_out_of_range_date_keeps_feed(self):
        items = [
            _entry(1, pubDate="0001-01-01T00:00:00+01:00"),
            _entry(2, pubDate="9999-12-31T23:59:59-01:00"),
            _entry(3, pubDate="2024-01-01"),
        ]
        stories = _fetch({"status": "ok", "items": items}, per_feed_limit=3)

        assert [s.title for s in stories] == ["Post 1", "Post 2", "Post 3"]
        assert stories[0].publish_date == "0001-01-01T00:00:00+01:00"
        assert stories[1].publish_date == "9999-12-31T23:59:59-01:00"
        assert stories[2].publish_date == "2024-01-01T00:00:00.000Z"

    def test_entry_mapping_error_skips_only_that_entry(self):
        with patch(
            "mindfeed.sources.feeds.story_from_entry",
            side_effect=[OverflowError("date value out of range"), story_from_entry(_entry(2), "Blog")],
        ):
            stories = _fetch({"status": "ok", "items": [_entry(1), _entry(2)]})
        assert [s.title for s in stories] == ["Post 2"]

    def test_non_object_payload_returns_empty(self):
        assert _fetch([1, 2, 3]) == []
