from __future__ import annotations

import aiohttp
import pytest
from fastapi.testclient import TestClient

from statewatch.api import dependencies
from statewatch.news import NewsFetcher, NewsItem, clean_description, newest_first, parse_feed

RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">
<channel>
  <title>Nation</title>
  <item>
    <title>Flood warning for Kelantan</title>
    <link>https://example.my/news/1</link>
    <description>&lt;p&gt;Heavy rain expected &amp;amp; rivers rising&lt;/p&gt;</description>
    <pubDate>Tue, 10 Jun 2025 08:00:00 +0800</pubDate>
    <category>Nation</category>
    <media:content url="https://example.my/img/1.jpg" medium="image"/>
  </item>
  <item>
    <title>Budget tabled</title>
    <link>https://example.my/news/2</link>
    <description>&lt;img src="https://example.my/img/2.jpg"/&gt;Parliament sits</description>
    <pubDate>Wed, 11 Jun 2025 09:30:00 +0800</pubDate>
  </item>
  <item>
    <title>No link here</title>
    <description>dropped</description>
  </item>
</channel>
</rss>
"""

ATOM = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>World</title>
  <entry>
    <title>Summit opens</title>
    <link rel="alternate" href="https://example.org/world/summit"/>
    <id>urn:uuid:1</id>
    <published>2025-06-12T01:00:00Z</published>
    <summary type="html">&lt;b&gt;Leaders&lt;/b&gt; gather</summary>
    <category term="World"/>
  </entry>
  <entry>
    <title>Entry with id only</title>
    <id>https://example.org/world/2</id>
    <updated>2025-06-09T12:00:00Z</updated>
  </entry>
</feed>
"""

FEEDS = {
    "bbc": "https://feeds.test/bbc",
    "thestar": "https://feeds.test/thestar",
    "bernama": "https://feeds.test/bernama",
}


def _item(title: str, pub_date: str) -> NewsItem:
    return NewsItem(title=title, description="", link=f"https://example.my/{title}", pub_date=pub_date, source="t")


@pytest.fixture
def fetcher(monkeypatch: pytest.MonkeyPatch) -> NewsFetcher:
    fetcher = NewsFetcher(feeds=FEEDS)
    documents = {"bbc": RSS, "thestar": ATOM}

    async def fake_fetch_xml(source: str) -> bytes:
        if source not in documents:
            raise aiohttp.ClientConnectionError("connection refused")
        return documents[source]

    monkeypatch.setattr(fetcher, "fetch_xml", fake_fetch_xml)
    return fetcher


def test_rss_items() -> None:
    items = parse_feed(RSS, "bbc")

    assert [i.title for i in items] == ["Flood warning for Kelantan", "Budget tabled"]
    first, second = items
    assert first.description == "Heavy rain expected & rivers rising"
    assert first.link == "https://example.my/news/1"
    assert first.pub_date == "Tue, 10 Jun 2025 08:00:00 +0800"
    assert first.image_url == "https://example.my/img/1.jpg"
    assert first.category == "Nation"
    assert first.source == "bbc"
    assert second.image_url == "https://example.my/img/2.jpg"
    assert second.description == "Parliament sits"
    assert second.category is None


def test_atom_entries() -> None:
    summit, by_id = parse_feed(ATOM, "thestar")

    assert summit.link == "https://example.org/world/summit"
    assert summit.description == "Leaders gather"
    assert summit.category == "World"
    assert summit.pub_date == "2025-06-12T01:00:00Z"
    assert by_id.link == "https://example.org/world/2"
    assert by_id.pub_date == "2025-06-09T12:00:00Z"
    assert by_id.description == ""


def test_items_per_feed_are_capped() -> None:
    assert len(parse_feed(RSS, "bbc", limit=1)) == 1


@pytest.mark.parametrize("document", [b"<rss><channel>", b"<html><body/></html>", b""])
def test_unusable_documents_give_no_items(document: bytes) -> None:
    assert parse_feed(document, "bbc") == []


def test_long_descriptions_are_cut() -> None:
    assert clean_description("x" * 250) == "x" * 200 + "..."
    assert clean_description("a&nbsp;b") == "a b"


def test_newest_first_puts_undated_last() -> None:
    items = [
        _item("old", "2024-01-01T00:00:00Z"),
        _item("undated", "sometime soon"),
        _item("new", "Wed, 11 Jun 2025 09:30:00 +0800"),
    ]
    assert [i.title for i in newest_first(items)] == ["new", "old", "undated"]


def test_known_sources_default_and_filter() -> None:
    fetcher = NewsFetcher(feeds=FEEDS)
    assert fetcher.known_sources() == ["thestar", "bernama", "bbc"]
    assert fetcher.known_sources(["bbc", "nope"]) == ["bbc"]


@pytest.mark.asyncio
async def test_fetch_merges_sources_and_skips_failures(fetcher: NewsFetcher) -> None:
    items = await fetcher.fetch()

    assert [i.title for i in items] == [
        "Summit opens", "Budget tabled", "Flood warning for Kelantan", "Entry with id only",
    ]
    assert {i.source for i in items} == {"bbc", "thestar"}


@pytest.mark.asyncio
async def test_fetch_limit(fetcher: NewsFetcher) -> None:
    items = await fetcher.fetch(["bbc"], limit=1)
    assert [i.title for i in items] == ["Budget tabled"]


@pytest.fixture
def news_client(app, fetcher: NewsFetcher) -> TestClient:
    app.dependency_overrides[dependencies.get_news_fetcher] = lambda: fetcher
    return TestClient(app)


def test_news_endpoint(news_client: TestClient) -> None:
    resp = news_client.get("/api/news", params={"sources": "bbc, nope"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert [n["title"] for n in body["news"]] == ["Budget tabled", "Flood warning for Kelantan"]
    assert body["news"][1]["image_url"] == "https://example.my/img/1.jpg"


def test_news_endpoint_only_failing_sources(news_client: TestClient) -> None:
    body = news_client.get("/api/news", params={"sources": "bernama"}).json()
    assert body["success"] is True
    assert body["news"] == []


def test_news_sources_endpoint(news_client: TestClient) -> None:
    body = news_client.get("/api/news/sources").json()
    assert body == {"sources": ["bbc", "thestar", "bernama"], "default": ["thestar", "bernama", "bbc"]}
