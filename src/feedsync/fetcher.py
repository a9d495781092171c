"""HTTP retrieval of feed documents."""

import asyncio
import logging
from urllib.parse import urlparse

import httpx

from .config import Config
from .errors import (
    FeedError,
    FeedTimeoutError,
    InvalidURLError,
    NetworkError,
    NoConnectionError,
    NoDataError,
)
from .models import ParsedFeed
from .parser import FeedParser

logger = logging.getLogger(__name__)

ACCEPT = "application/rss+xml, application/atom+xml, application/xml;q=0.9, text/xml;q=0.9, */*;q=0.8"


class FeedFetcher:
    """Async fetcher that turns a feed URL into a :class:`ParsedFeed`.

    Designed for single-instance lifecycle: create once at startup and reuse
    for every sync pass so connections are pooled. The response body is fed
    to the parser as it streams in.
    """

    def __init__(self, config: Config, transport: httpx.AsyncBaseTransport | None = None):
        self._config = config
        if transport is None:
            # Connect retries give a briefly offline device a chance to come back.
            transport = httpx.AsyncHTTPTransport(retries=config.connect_retries)
        self._client = httpx.AsyncClient(
            timeout=config.request_timeout,
            follow_redirects=True,
            headers={"User-Agent": config.user_agent, "Accept": ACCEPT},
            transport=transport,
        )

    async def fetch(self, url: str) -> ParsedFeed:
        """Fetch and parse the feed at ``url``.

        Raises:
            FeedError: one of the subclasses in :mod:`feedsync.errors`.
            asyncio.CancelledError: if the calling task is cancelled.
        """
        validate_url(url)
        logger.debug("Fetching %s", url)

        try:
            parsed = await asyncio.wait_for(
                self._fetch(url), timeout=self._config.resource_timeout
            )
        except FeedError:
            raise
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise FeedTimeoutError() from e
        except httpx.ConnectError as e:
            raise NoConnectionError() from e
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise InvalidURLError(f"Invalid feed URL: {e}") from e
        except httpx.HTTPError as e:
            raise NetworkError(e) from e

        logger.debug("Parsed %d items from %s", len(parsed.items), url)
        return parsed

    async def _fetch(self, url: str) -> ParsedFeed:
        parser = FeedParser()
        async with self._client.stream("GET", url) as response:
            response.raise_for_status()
            async for chunk in response.aiter_bytes():
                parser.feed(chunk)

        if parser.is_empty:
            raise NoDataError()
        return parser.close()

    async def preview(self, url: str, limit: int | None = None) -> ParsedFeed:
        """Fetch a feed for display without persisting it, capping its items."""
        parsed = await self.fetch(url)
        limit = self._config.preview_limit if limit is None else max(1, limit)
        return ParsedFeed(title=parsed.title, items=parsed.items[:limit])

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()


def validate_url(url: str) -> None:
    """Validate that the URL is an absolute http(s) URL."""
    try:
        result = urlparse(url.strip())
    except ValueError as e:
        raise InvalidURLError() from e
    if result.scheme not in ("http", "https") or not result.netloc:
        raise InvalidURLError()
