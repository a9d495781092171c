"""Built-in feed catalog and first-run defaults.

The catalog lists well-known feeds a user can preview and subscribe to
without typing a URL. The defaults are the categories and feeds created
on an empty installation.
"""

import logging
from dataclasses import dataclass

from .models import FeedSource
from .registry import FeedRegistry
from .store import DuplicateFeedError
from .sync import SyncEngine, SyncError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CuratedFeed:
    """A recommended feed from the built-in catalog."""

    name: str
    description: str
    url: str

    def to_dict(self) -> dict:
        return {"name": self.name, "description": self.description, "url": self.url}


CURATED_FEEDS: tuple[CuratedFeed, ...] = (
    CuratedFeed("BBC News", "World news from the BBC", "http://feeds.bbci.co.uk/news/rss.xml"),
    CuratedFeed("Semafor", "Global news with diverse perspectives", "https://www.semafor.com/rss"),
    CuratedFeed("TechCrunch", "Technology news and analysis", "https://techcrunch.com/feed/"),
    CuratedFeed("The Verge", "Technology, science, and culture", "https://www.theverge.com/rss/index.xml"),
    CuratedFeed("Hacker News", "Tech news and discussions", "https://hnrss.org/frontpage"),
    CuratedFeed("NASA", "Space exploration news", "https://www.nasa.gov/rss/dyn/breaking_news.rss"),
    CuratedFeed("The Guardian", "International news and opinion", "https://www.theguardian.com/world/rss"),
    CuratedFeed("Wired", "Tech, science, and culture insights", "https://www.wired.com/feed/rss"),
    CuratedFeed("Ars Technica", "In-depth tech analysis", "https://feeds.arstechnica.com/arstechnica/index"),
    CuratedFeed("NPR News", "U.S. and world news", "https://feeds.npr.org/1001/rss.xml"),
    CuratedFeed("MIT Technology Review", "Emerging technology insights", "https://www.technologyreview.com/feed/"),
    CuratedFeed("The Atlantic", "Politics, culture, and ideas", "https://www.theatlantic.com/feed/all/"),
)

# (name, color), created in this order
DEFAULT_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("Technology", "#FF6B6B"),
    ("News", "#4ECDC4"),
    ("Science", "#45B7D1"),
    ("Design", "#F7B731"),
)

DEFAULT_FEEDS: dict[str, tuple[str, ...]] = {
    "Technology": (
        "https://feeds.arstechnica.com/arstechnica/index",
        "https://www.theverge.com/rss/index.xml",
    ),
    "News": (
        "https://feeds.bloomberg.com/markets/news.rss",
        "https://feeds.bbci.co.uk/news/rss.xml",
    ),
    "Science": (
        "https://www.nature.com/nature/current_issue/rss",
        "https://feeds.arstechnica.com/arstechnica/science",
    ),
    "Design": (
        "https://www.designernews.co/rss",
        "https://feeds.designmodo.com/designmodo/",
    ),
}


def find_curated_feed(key: str) -> CuratedFeed:
    """Look up a catalog entry by URL or by name (case-insensitive).

    Raises:
        LookupError: if no entry matches.
    """
    key = key.strip()
    for feed in CURATED_FEEDS:
        if feed.url == key or feed.name.casefold() == key.casefold():
            return feed
    raise LookupError(f"No catalog feed matches {key!r}")


async def subscribe_curated(
    registry: FeedRegistry,
    engine: SyncEngine,
    key: str,
    category_id: str | None = None,
) -> tuple[FeedSource, SyncError | None]:
    """Subscribe to a catalog feed, optionally into a category, and import its items.

    Returns the new source and the refresh failure, if any. The source is
    kept even when the first refresh fails.
    """
    feed = find_curated_feed(key)
    source = registry.subscribe(feed.url, category_id=category_id)
    failure = await engine.refresh_source(source)
    return registry.get_source(source.id), failure


async def seed_defaults(registry: FeedRegistry, engine: SyncEngine) -> list[FeedSource]:
    """Create the default categories and feeds on an empty installation.

    Does nothing once any category exists, so calling it again is harmless.
    Default feeds that are already subscribed are left where they are.
    The seeded feeds are refreshed in one pass; their failures end up in
    the engine's error report.

    Returns the sources created by this call.
    """
    if registry.list_categories():
        logger.debug("Categories already exist, skipping default seeding")
        return []

    sources = []
    for name, color in DEFAULT_CATEGORIES:
        category = registry.create_category(name, color)
        for url in DEFAULT_FEEDS.get(name, ()):
            try:
                sources.append(registry.subscribe(url, category_id=category.id))
            except DuplicateFeedError:
                logger.info("Default feed %s already subscribed, skipping", url)

    logger.info(
        "Seeded %d categories and %d feeds", len(DEFAULT_CATEGORIES), len(sources)
    )
    report = await engine.run_pass(sources=sources)
    if report:
        logger.warning("%d default feeds failed their first refresh", len(report))
    return [registry.get_source(s.id) for s in sources]
