"""Tests for the Hacker News fetcher."""

import asyncio

import httpx

from mindfeed.sources.hacker_news import HackerNewsFetcher, story_from_item

BASE = "https://hn.test/v0"


def _story(item_id, **overrides):
    item = {
        "id": item_id,
        "type": "story",
        "title": f"Story {item_id}",
        "url": f"https://example.com/{item_id}",
        "by": "pg",
        "score": 100 + item_id,
        "time": 1700000000,
    }
    item.update(overrides)
    return item


def _client(routes, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if calls is not None:
            calls.append(path)
        if path not in routes:
            return httpx.Response(404)
        result = routes[path]
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, json=result)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _fetch(fetcher, client):
    async def run():
        async with client:
            return await fetcher.fetch(client)

    return asyncio.run(run())


class TestStoryFromItem:
    """Tests for story_from_item mapping."""

    def test_maps_fields(self):
        story = story_from_item(_story(42))
        assert story.id == "hn-42"
        assert story.title == "Story 42"
        assert story.url == "https://example.com/42"
        assert story.source == "Hacker News"
        assert story.author == "pg"
        assert story.score == 142
        assert story.publish_date == "2023-11-14T22:13:20.000Z"

    def test_rejects_non_story(self):
        assert story_from_item(_story(1, type="job")) is None

    def test_rejects_story_without_url(self):
        assert story_from_item(_story(1, url=None)) is None
        assert story_from_item({k: v for k, v in _story(1).items() if k != "url"}) is None

    def test_rejects_deleted_item(self):
        assert story_from_item(None) is None


class TestHackerNewsFetcher:
    """Tests for HackerNewsFetcher.fetch."""

    def test_fetches_top_stories_up_to_limit(self):
        routes = {"/v0/topstories.json": [1, 2, 3, 4]}
        routes.update({f"/v0/item/{i}.json": _story(i) for i in range(1, 5)})
        calls = []

        stories = _fetch(HackerNewsFetcher(limit=3, base_url=BASE), _client(routes, calls))

        assert [s.id for s in stories] == ["hn-1", "hn-2", "hn-3"]
        assert calls[0] == "/v0/topstories.json"
        assert "/v0/item/4.json" not in calls

    def test_filters_non_stories_and_missing_urls(self):
        routes = {
            "/v0/topstories.json": [1, 2, 3],
            "/v0/item/1.json": _story(1),
            "/v0/item/2.json": _story(2, type="poll"),
            "/v0/item/3.json": _story(3, url=""),
        }
        stories = _fetch(HackerNewsFetcher(limit=10, base_url=BASE), _client(routes))
        assert [s.id for s in stories] == ["hn-1"]

    def test_failed_detail_drops_only_that_item(self):
        routes = {
            "/v0/topstories.json": [1, 2],
            "/v0/item/1.json": httpx.Response(500),
            "/v0/item/2.json": _story(2),
        }
        stories = _fetch(HackerNewsFetcher(limit=10, base_url=BASE), _client(routes))
        assert [s.id for s in stories] == ["hn-2"]

    def test_failed_id_list_returns_empty(self):
        routes = {"/v0/topstories.json": httpx.Response(503)}
        assert _fetch(HackerNewsFetcher(base_url=BASE), _client(routes)) == []

    def test_malformed_id_list_returns_empty(self):
        routes = {"/v0/topstories.json": {"error": "nope"}}
        assert _fetch(HackerNewsFetcher(base_url=BASE), _client(routes)) == []

    def test_invalid_json_returns_empty(self):
        routes = {"/v0/topstories.json": httpx.Response(200, content=b"<html>")}
        assert _fetch(HackerNewsFetcher(base_url=BASE), _client(routes)) == []
