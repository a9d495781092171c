"""MCP server entry point for feedsync.

Runs FastMCP with Streamable HTTP transport so a presentation layer can
trigger sync passes, preview feeds and query stored items over HTTP.
"""

import asyncio
import logging
import sys

from fastmcp import FastMCP

from .config import load_config
from .fetcher import FeedFetcher
from .registry import FeedRegistry
from .sqlite_store import SQLiteStore
from .sync import SyncEngine
from .tools import register_tools

logging.basicConfig(
    stream=sys.stderr,
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
# One INFO line per HTTP request drowns out the sync summaries
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def main() -> None:
    """Run the feedsync MCP server."""
    config = load_config()
    store = SQLiteStore(config.database_path)
    store.connect()
    fetcher = FeedFetcher(config)
    engine = SyncEngine(store, fetcher, config)
    registry = FeedRegistry(store)

    mcp = FastMCP("feedsync")
    register_tools(mcp, store, registry, fetcher, engine)

    logger.info(
        "Starting feedsync MCP server on %s:%d (streamable-http), database %s",
        config.server_host,
        config.server_port,
        config.database_path,
    )
    try:
        # The server handles SIGINT/SIGTERM itself and returns once stopped.
        mcp.run(
            transport="streamable-http",
            host=config.server_host,
            port=config.server_port,
        )
    finally:
        logger.info("Server stopped, closing HTTP client and database")
        store.close()
        # The server's event loop has stopped, so the client is closed on a fresh one
        try:
            asyncio.run(fetcher.aclose())
        except RuntimeError as e:
            # Pooled connections still belong to the stopped loop
            logger.warning("Could not close HTTP client cleanly: %s", e)


if __name__ == "__main__":
    main()
