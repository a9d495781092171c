"""Shared test fixtures for feedsync tests."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from feedsync.config import Config
from feedsync.models import ParsedFeed, ParsedItem
from feedsync.sqlite_store import SQLiteStore
from feedsync.store import MemoryStore

SAMPLE_RSS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/"
     xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Test Feed</title>
    <link>https://example.com</link>
    <description>A test RSS feed</description>
    <image>
      <title>Test Feed Logo</title>
      <url>https://example.com/logo.png</url>
    </image>
    <item>
      <title>First Article</title>
      <link>https://example.com/article-1</link>
      <description>&lt;p&gt;Description of the &lt;b&gt;first&lt;/b&gt; article&lt;/p&gt;</description>
      <media:thumbnail url="https://example.com/1.jpg"/>
      <pubDate>Fri, 13 Feb 2026 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Second Article</title>
      <link>https://example.com/article-2</link>
      <content:encoded><![CDATA[<div>Second <em>body</em><script>track()</script></div>]]></content:encoded>
      <enclosure url="https://example.com/2.png" type="image/png" length="100"/>
      <pubDate>Fri, 13 Feb 2026 09:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>"""

SAMPLE_ATOM_XML = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Test Atom Feed</title>
  <link href="https://example.com"/>
  <subtitle>A test Atom feed</subtitle>
  <entry>
    <title>Atom Entry 1</title>
    <link href="https://example.com/entry-1"/>
    <id>urn:uuid:entry-1</id>
    <summary>Summary of entry 1</summary>
    <updated>2026-02-13T10:00:00Z</updated>
  </entry>
</feed>"""

SAMPLE_MALFORMED_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Malformed Feed</title>
    <item>
      <title>Good Item</title>
      <link>https://example.com/good</link>
    </item>
    <item>
      <title>Bad Item</title>
      <!-- Missing closing tags intentionally -->
"""

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_parsed_feed(title: str, links: list[str], start: datetime = BASE_TIME) -> ParsedFeed:
    """A parsed feed whose items are one minute apart, newest first."""
    items = [
        ParsedItem(
            title=f"Item {link}",
            link=link,
            published=start - timedelta(minutes=i),
        )
        for i, link in enumerate(links)
    ]
    return ParsedFeed(title=title, items=items)


class FakeFetcher:
    """Stand-in for FeedFetcher that serves canned results per URL."""

    def __init__(self, responses: dict | None = None, delays: dict | None = None):
        self.responses = responses or {}
        self.delays = delays or {}
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch(self, url: str) -> ParsedFeed:
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(url, 0))
        finally:
            self.in_flight -= 1
        result = self.responses[url]
        if isinstance(result, BaseException):
            raise result
        return result

    async def preview(self, url: str, limit: int | None = None) -> ParsedFeed:
        parsed = await self.fetch(url)
        return ParsedFeed(title=parsed.title, items=parsed.items[: limit or 10])


@pytest.fixture
def config():
    return Config()


@pytest.fixture(params=["memory", "sqlite"])
def store(request):
    """Run store-dependent tests against both implementations."""
    if request.param == "memory":
        yield MemoryStore()
        return
    sqlite_store = SQLiteStore(":memory:")
    sqlite_store.connect()
    yield sqlite_store
    sqlite_store.close()


@pytest.fixture
def sample_rss_xml():
    """Sample valid RSS 2.0 XML."""
    return SAMPLE_RSS_XML


@pytest.fixture
def sample_atom_xml():
    """Sample valid Atom XML."""
    return SAMPLE_ATOM_XML


@pytest.fixture
def sample_malformed_xml():
    """Sample truncated RSS XML."""
    return SAMPLE_MALFORMED_XML
