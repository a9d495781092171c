"""feedsync: RSS/Atom fetching, normalisation and incremental sync."""

from .catalog import CURATED_FEEDS, CuratedFeed, find_curated_feed, seed_defaults, subscribe_curated
from .config import Config, load_config
from .errors import (
    FeedError,
    FeedTimeoutError,
    FetchCancelledError,
    InvalidURLError,
    NetworkError,
    NoConnectionError,
    NoDataError,
    ParsingError,
)
from .fetcher import FeedFetcher
from .models import Category, FeedItem, FeedSource, ParsedFeed, ParsedItem
from .parser import FeedParser, parse_feed
from .registry import FeedRegistry
from .sqlite_store import SQLiteStore
from .store import DuplicateFeedError, FeedStore, MemoryStore
from .sync import SyncEngine, SyncError, SyncErrorReport

__all__ = [
    "CURATED_FEEDS",
    "Category",
    "Config",
    "CuratedFeed",
    "DuplicateFeedError",
    "FeedError",
    "FeedFetcher",
    "FeedItem",
    "FeedParser",
    "FeedRegistry",
    "FeedSource",
    "FeedStore",
    "FeedTimeoutError",
    "FetchCancelledError",
    "InvalidURLError",
    "MemoryStore",
    "NetworkError",
    "NoConnectionError",
    "NoDataError",
    "ParsedFeed",
    "ParsedItem",
    "ParsingError",
    "SQLiteStore",
    "SyncEngine",
    "SyncError",
    "SyncErrorReport",
    "find_curated_feed",
    "load_config",
    "parse_feed",
    "seed_defaults",
    "subscribe_curated",
]

__version__ = "0.1.0"
