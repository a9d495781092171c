"""MCP tool definitions for feedsync.

Each tool does exactly one thing. All exceptions are caught at the
tool boundary and returned as "Error: ..." strings so the MCP protocol
never sees an uncaught exception.
"""

import json
import logging

from fastmcp import FastMCP

from .catalog import CURATED_FEEDS, seed_defaults, subscribe_curated
from .dates import parse_date
from .fetcher import FeedFetcher
from .registry import FeedRegistry
from .store import FeedStore
from .sync import SyncEngine

logger = logging.getLogger(__name__)

MAX_ITEMS = 100


def _to_json(value) -> str:
    return json.dumps(value, ensure_ascii=False)


def _parse_bound(value: str | None, name: str):
    if value is None:
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"{name} is not a valid date: {value!r}")
    return parsed


def register_tools(
    mcp: FastMCP,
    store: FeedStore,
    registry: FeedRegistry,
    fetcher: FeedFetcher,
    engine: SyncEngine,
) -> None:
    """Register all feedsync tools on the given MCP server instance."""

    @mcp.tool()
    async def sync_feeds(category_id: str | None = None) -> str:
        """Refresh subscribed feeds now.

        Args:
            category_id: Only refresh the feeds of this category (default: all feeds).

        Returns a JSON object with the number of feeds refreshed and the list
        of per-feed errors. Paused feeds are skipped.
        """
        try:
            sources = store.list_sources(category_id)
            report = await engine.run_pass(sources=sources)
            refreshed = sum(1 for s in sources if not s.paused) - len(report)
            return _to_json({"refreshed": refreshed, "errors": report.to_list()})
        except Exception as e:
            logger.error("sync_feeds failed: %s", e, exc_info=True)
            return f"Error: {e}"

    @mcp.tool()
    async def refresh_feed(source_id: str) -> str:
        """Refresh a single feed, even if it is paused.

        Args:
            source_id: ID of the feed to refresh.

        Returns the updated feed object, or an error describing why the refresh failed.
        """
        try:
            source = registry.get_source(source_id)
            failure = await engine.refresh_source(source)
            if failure is not None:
                return f"Error: {failure.message}"
            return _to_json(registry.get_source(source_id).to_dict())
        except Exception as e:
            logger.error("refresh_feed failed: %s", e, exc_info=True)
            return f"Error: {e}"

    @mcp.tool()
    async def preview_feed(url: str, limit: int = 10) -> str:
        """Fetch a feed without subscribing to it.

        Args:
            url: Feed URL (RSS 2.0 or Atom).
            limit: Maximum number of items to return (default 10).

        Returns a JSON object with the feed title and its newest items.
        """
        try:
            parsed = await fetcher.preview(url, limit=limit)
            return _to_json(parsed.to_dict())
        except Exception as e:
            logger.error("preview_feed failed: %s", e, exc_info=True)
            return f"Error: {e}"

    @mcp.tool()
    async def subscribe_feed(
        url: str,
        nickname: str | None = None,
        category_id: str | None = None,
    ) -> str:
        """Subscribe to a feed and import its items.

        Args:
            url: Feed URL (RSS 2.0 or Atom).
            nickname: Optional display name overriding the feed title.
            category_id: Optional category to file the feed under.

        The feed stays subscribed even when the first fetch fails; the
        failure is then listed by list_sync_errors.
        """
        try:
            source = registry.subscribe(url, nickname=nickname, category_id=category_id)
            failure = await engine.refresh_source(source)
            result = registry.get_source(source.id).to_dict()
            if failure is not None:
                result["error"] = failure.message
            return _to_json(result)
        except Exception as e:
            logger.error("subscribe_feed failed: %s", e, exc_info=True)
            return f"Error: {e}"

    @mcp.tool()
    async def list_curated_feeds() -> str:
        """List the built-in catalog of recommended feeds.

        Each entry carries its name, description and URL, and whether it is
        already subscribed. Use preview_feed to look at an entry first.
        """
        try:
            result = []
            for feed in CURATED_FEEDS:
                d = feed.to_dict()
                d["subscribed"] = store.get_source_by_url(feed.url) is not None
                result.append(d)
            return _to_json(result)
        except Exception as e:
            logger.error("list_curated_feeds failed: %s", e, exc_info=True)
            return f"Error: {e}"

    @mcp.tool()
    async def subscribe_curated_feed(name_or_url: str, category_id: str | None = None) -> str:
        """Subscribe to a feed from the built-in catalog and import its items.

        Args:
            name_or_url: Catalog entry name (case-insensitive) or URL.
            category_id: Optional category to file the feed under.
        """
        try:
            source, failure = await subscribe_curated(registry, engine, name_or_url, category_id)
            result = source.to_dict()
            if failure is not None:
                result["error"] = failure.message
            return _to_json(result)
        except Exception as e:
            logger.error("subscribe_curated_feed failed: %s", e, exc_info=True)
            return f"Error: {e}"

    @mcp.tool()
    async def seed_default_feeds() -> str:
        """Create the default categories and feeds on an empty installation.

        Does nothing if any category exists. Returns a JSON object with the
        feeds created and the errors of their first refresh.
        """
        try:
            sources = await seed_defaults(registry, engine)
            # The seeding pass reports only the seeded feeds
            errors = engine.errors.to_list() if sources else []
            return _to_json(
                {
                    "seeded": bool(sources),
                    "feeds": [s.to_dict() for s in sources],
                    "errors": errors,
                }
            )
        except Exception as e:
            logger.error("seed_default_feeds failed: %s", e, exc_info=True)
            return f"Error: {e}"

    @mcp.tool()
    async def unsubscribe_feed(source_id: str) -> str:
        """Remove a feed and all of its stored items.

        Args:
            source_id: ID of the feed to remove.

        Returns "OK" on success or an error message.
        """
        try:
            if not registry.unsubscribe(source_id):
                return f"Error: Feed {source_id} not found"
            engine.dismiss_error(source_id)
            return "OK"
        except Exception as e:
            logger.error("unsubscribe_feed failed: %s", e, exc_info=True)
            return f"Error: {e}"

    @mcp.tool()
    async def update_feed(
        source_id: str,
        nickname: str | None = None,
        refresh_interval: int | None = None,
        category_id: str | None = None,
        paused: bool | None = None,
        notifications_enabled: bool | None = None,
        clear_category: bool = False,
        clear_refresh_interval: bool = False,
    ) -> str:
        """Change a feed's settings. Omitted arguments are left unchanged.

        Args:
            source_id: ID of the feed to update.
            nickname: New display name; an empty string clears it.
            refresh_interval: Custom refresh interval in seconds.
            category_id: Category to move the feed to.
            paused: Whether sync passes should skip the feed.
            notifications_enabled: Whether the feed should notify about new items.
            clear_category: Move the feed back to "uncategorized".
            clear_refresh_interval: Drop the custom interval and use the global default.
        """
        try:
            changes = {
                "nickname": nickname,
                "refresh_interval": refresh_interval,
                "category_id": category_id,
                "paused": paused,
                "notifications_enabled": notifications_enabled,
            }
            changes = {k: v for k, v in changes.items() if v is not None}
            if clear_category:
                changes["category_id"] = None
            if clear_refresh_interval:
                changes["refresh_interval"] = None
            source = registry.update_source(source_id, **changes)
            return _to_json(source.to_dict())
        except Exception as e:
            logger.error("update_feed failed: %s", e, exc_info=True)
            return f"Error: {e}"

    @mcp.tool()
    async def list_feeds(category_id: str | None = None) -> str:
        """List subscribed feeds with their stored item counts.

        Args:
            category_id: Only list feeds in this category.
        """
        try:
            result = []
            for source in registry.list_sources(category_id):
                d = source.to_dict()
                d["item_count"] = store.count_items(source.id)
                result.append(d)
            return _to_json(result)
        except Exception as e:
            logger.error("list_feeds failed: %s", e, exc_info=True)
            return f"Error: {e}"

    @mcp.tool()
    async def list_categories() -> str:
        """List categories in display order."""
        try:
            return _to_json([c.to_dict() for c in registry.list_categories()])
        except Exception as e:
            logger.error("list_categories failed: %s", e, exc_info=True)
            return f"Error: {e}"

    @mcp.tool()
    async def create_category(name: str, color: str = "#4ECDC4") -> str:
        """Create a category after the existing ones.

        Args:
            name: Category name.
            color: Display colour as a hex string.
        """
        try:
            return _to_json(registry.create_category(name, color).to_dict())
        except Exception as e:
            logger.error("create_category failed: %s", e, exc_info=True)
            return f"Error: {e}"

    @mcp.tool()
    async def delete_category(category_id: str) -> str:
        """Delete a category. Its feeds are kept and become uncategorized."""
        try:
            if not registry.delete_category(category_id):
                return f"Error: Category {category_id} not found"
            return "OK"
        except Exception as e:
            logger.error("delete_category failed: %s", e, exc_info=True)
            return f"Error: {e}"

    @mcp.tool()
    async def get_items(
        source_id: str | None = None,
        category_id: str | None = None,
        since: str | None = None,
        until: str | None = None,
        limit: int = 20,
    ) -> str:
        """Get stored items, newest first.

        Args:
            source_id: Only items of this feed.
            category_id: Only items of feeds in this category.
            since: ISO-8601 or RFC-822 date; only items published at or after it.
            until: ISO-8601 or RFC-822 date; only items published at or before it.
            limit: Maximum number of items to return (1-100, default 20).
        """
        try:
            items = store.list_items(
                source_id=source_id,
                category_id=category_id,
                since=_parse_bound(since, "since"),
                until=_parse_bound(until, "until"),
                limit=max(1, min(limit, MAX_ITEMS)),
            )
            return _to_json([i.to_dict() for i in items])
        except Exception as e:
            logger.error("get_items failed: %s", e, exc_info=True)
            return f"Error: {e}"

    @mcp.tool()
    async def list_sync_errors() -> str:
        """List feeds that failed during the latest sync pass."""
        try:
            return _to_json(engine.errors.to_list())
        except Exception as e:
            logger.error("list_sync_errors failed: %s", e, exc_info=True)
            return f"Error: {e}"

    @mcp.tool()
    async def dismiss_sync_error(source_id: str) -> str:
        """Dismiss the sync error reported for one feed.

        Returns "OK" whether or not an error was listed for the feed.
        """
        try:
            engine.dismiss_error(source_id)
            return "OK"
        except Exception as e:
            logger.error("dismiss_sync_error failed: %s", e, exc_info=True)
            return f"Error: {e}"
