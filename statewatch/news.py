"""
News aggregation — Malaysian and international RSS 2.0 / Atom feeds.

Each configured source is fetched concurrently; a source that fails to
download or parse contributes no items. The merged list is sorted newest
first and capped.
"""
from __future__ import annotations

import asyncio
import datetime as dt
import html
import logging
import re
import xml.etree.ElementTree as ET
from typing import Iterable, Optional

import aiohttp
import pandas as pd
from pydantic import BaseModel

from statewatch.config import (
    DEFAULT_NEWS_SOURCES, NEWS_DESCRIPTION_CHARS, NEWS_FEEDS, NEWS_ITEMS_PER_FEED,
    NEWS_MAX_ITEMS, NEWS_TIMEOUT_SECONDS, NEWS_USER_AGENT,
)

logger = logging.getLogger(__name__)

ATOM = "{http://www.w3.org/2005/Atom}"
MEDIA = "{http://search.yahoo.com/mrss/}"
CONTENT = "{http://purl.org/rss/1.0/modules/content/}"

_TAG_RE = re.compile(r"<[^>]*>")
_IMG_RE = re.compile(r'<img[^>]+src="([^">]+)"')


class NewsItem(BaseModel):
    title: str
    description: str
    link: str
    pub_date: str
    source: str
    image_url: Optional[str] = None
    category: Optional[str] = None


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


def _text(elem: ET.Element, *tags: str) -> str:
    """Stripped text of the first listed child that has any."""
    for tag in tags:
        child = elem.find(tag)
        if child is not None and child.text and child.text.strip():
            return child.text.strip()
    return ""


def clean_description(raw: str, limit: int = NEWS_DESCRIPTION_CHARS) -> str:
    """Drop markup and entities, cut to ``limit`` characters."""
    text = html.unescape(_TAG_RE.sub("", raw)).replace("\xa0", " ").strip()
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def _image_url(item: ET.Element, raw_description: str) -> Optional[str]:
    for tag in (f"{MEDIA}content", f"{MEDIA}thumbnail", "enclosure"):
        child = item.find(tag)
        if child is not None and child.get("url"):
            return child.get("url")
    match = _IMG_RE.search(raw_description)
    return match.group(1) if match else None


def _rss_item(item: ET.Element, source: str) -> NewsItem:
    raw = _text(item, "description", f"{CONTENT}encoded")
    return NewsItem(
        title=_text(item, "title"),
        description=clean_description(raw),
        link=_text(item, "link", "guid"),
        pub_date=_text(item, "pubDate") or _now(),
        source=source,
        image_url=_image_url(item, raw),
        category=_text(item, "category") or None,
    )


def _atom_link(entry: ET.Element) -> str:
    links = [link for link in entry.findall(f"{ATOM}link") if link.get("href")]
    for link in links:
        if link.get("rel", "alternate") == "alternate":
            return link.get("href")
    if links:
        return links[0].get("href")
    return _text(entry, f"{ATOM}id")


def _atom_entry(entry: ET.Element, source: str) -> NewsItem:
    raw = _text(entry, f"{ATOM}summary", f"{ATOM}content")
    category = entry.find(f"{ATOM}category")
    return NewsItem(
        title=_text(entry, f"{ATOM}title"),
        description=clean_description(raw),
        link=_atom_link(entry),
        pub_date=_text(entry, f"{ATOM}published", f"{ATOM}updated") or _now(),
        source=source,
        image_url=_image_url(entry, raw),
        category=category.get("term") if category is not None else None,
    )


def parse_feed(xml: bytes | str, source: str, limit: int = NEWS_ITEMS_PER_FEED) -> list[NewsItem]:
    """First ``limit`` entries of an RSS 2.0 or Atom document.

    Entries without a title or link are dropped. A document that does not
    parse, or is neither format, yields no items.
    """
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as exc:
        logger.error(f"[news] Unparseable feed from {source}: {exc}")
        return []

    if root.tag == "rss":
        entries, parse_one = root.findall("./channel/item"), _rss_item
    elif root.tag == f"{ATOM}feed":
        entries, parse_one = root.findall(f"{ATOM}entry"), _atom_entry
    else:
        logger.warning(f"[news] {source}: unrecognised feed root <{root.tag}>")
        return []

    items = [parse_one(entry, source) for entry in entries[:limit]]
    return [item for item in items if item.title and item.link]


def newest_first(items: Iterable[NewsItem]) -> list[NewsItem]:
    """Sort by publication date, newest first. Undated items go last."""
    keyed = [(pd.to_datetime(item.pub_date, utc=True, errors="coerce"), item) for item in items]
    dated = sorted((pair for pair in keyed if not pd.isna(pair[0])), key=lambda pair: pair[0], reverse=True)
    undated = [item for ts, item in keyed if pd.isna(ts)]
    return [item for _, item in dated] + undated


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

class NewsFetcher:
    """Fetches the configured feeds over one shared aiohttp session."""

    def __init__(
        self,
        feeds: dict[str, str] | None = None,
        session: aiohttp.ClientSession | None = None,
        timeout: float = NEWS_TIMEOUT_SECONDS,
    ) -> None:
        self.feeds = dict(feeds or NEWS_FEEDS)
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers={"User-Agent": NEWS_USER_AGENT})
            self._owns_session = True
        return self._session

    def known_sources(self, sources: Optional[Iterable[str]] = None) -> list[str]:
        """Requested sources (default set when None) that have a feed URL."""
        requested = DEFAULT_NEWS_SOURCES if sources is None else sources
        return [source for source in requested if source in self.feeds]

    async def fetch_xml(self, source: str) -> bytes:
        url = self.feeds[source]
        async with self._get_session().get(url, timeout=self._timeout) as resp:
            resp.raise_for_status()
            return await resp.read()

    async def fetch_source(self, source: str) -> list[NewsItem]:
        try:
            xml = await self.fetch_xml(source)
        except Exception as exc:
            logger.error(f"[news] Error fetching {source}: {exc}")
            return []
        items = parse_feed(xml, source)
        logger.info(f"[news] {source}: {len(items)} items")
        return items

    async def fetch(self, sources: Optional[Iterable[str]] = None, limit: int = NEWS_MAX_ITEMS) -> list[NewsItem]:
        """Merged items from ``sources``, newest first, at most ``limit``."""
        batches = await asyncio.gather(*(self.fetch_source(s) for s in self.known_sources(sources)))
        return newest_first(item for batch in batches for item in batch)[:limit]

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
