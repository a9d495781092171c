"""Concurrent synchronisation of feed sources into the store.

A sync pass fetches every targeted source concurrently, merges each
successful result into the store and records failures per source. One
source failing never aborts the pass or touches another source's state.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .config import Config
from .errors import FeedError, FetchCancelledError
from .fetcher import FeedFetcher
from .models import FeedItem, FeedSource, ParsedFeed
from .store import FeedStore

logger = logging.getLogger(__name__)


@dataclass
class SyncError:
    """The last error a source hit during the current pass."""

    source_id: str
    source_title: str
    source_url: str
    error: FeedError

    @property
    def message(self) -> str:
        return self.error.user_message

    def to_dict(self) -> dict:
        return {
            "source_id": self.source_id,
            "source_title": self.source_title,
            "source_url": self.source_url,
            "kind": self.error.kind,
            "message": self.message,
        }


class SyncErrorReport:
    """Per-source failures of the most recent pass, keyed by source id."""

    def __init__(self):
        self._errors: dict[str, SyncError] = {}

    def record(self, entry: SyncError) -> None:
        self._errors[entry.source_id] = entry

    def resolve(self, source_id: str) -> None:
        self._errors.pop(source_id, None)

    def dismiss(self, source_id: str) -> bool:
        """Remove one entry, as when the user closes its banner."""
        return self._errors.pop(source_id, None) is not None

    def clear(self) -> None:
        self._errors.clear()

    def get(self, source_id: str) -> SyncError | None:
        return self._errors.get(source_id)

    def to_list(self) -> list[dict]:
        return [entry.to_dict() for entry in self._errors.values()]

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._errors

    def __iter__(self):
        return iter(list(self._errors.values()))

    def __len__(self) -> int:
        return len(self._errors)


class SyncEngine:
    """Fetches sources concurrently and merges their items into the store.

    At most ``config.max_concurrent_fetches`` requests are in flight at once.
    Store writes are serialised; items are only written after the source's
    fetch and parse both succeeded.
    """

    def __init__(self, store: FeedStore, fetcher: FeedFetcher, config: Config):
        self._store = store
        self._fetcher = fetcher
        self._config = config
        self.errors = SyncErrorReport()
        self._fetch_slots = asyncio.Semaphore(config.max_concurrent_fetches)
        self._write_lock = asyncio.Lock()
        self._pass_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()
        self._syncing = False

    @property
    def is_syncing(self) -> bool:
        return self._syncing

    async def run_pass(
        self,
        category_id: str | None = None,
        sources: list[FeedSource] | None = None,
        timeout: float | None = None,
    ) -> SyncErrorReport:
        """Refresh all sources, one category's sources, or an explicit list.

        Paused sources are skipped. Fetches still running after ``timeout``
        seconds are cancelled and reported as cancelled. Passes never raise
        feed errors; they end up in the returned report.
        """
        async with self._pass_lock:
            if sources is None:
                sources = self._store.list_sources(category_id)
            active = [s for s in sources if not s.paused]

            self.errors.clear()
            self._syncing = True
            logger.info(
                "Sync pass started: %d feeds (%d paused)",
                len(active),
                len(sources) - len(active),
            )
            try:
                results = await self._run_tasks(active, timeout)
            finally:
                self._tasks = set()
                self._syncing = False

            for result in results:
                if isinstance(result, Exception):
                    raise result

            logger.info(
                "Sync pass complete: %d ok, %d failed",
                len(active) - len(self.errors),
                len(self.errors),
            )
            return self.errors

    async def _run_tasks(self, sources: list[FeedSource], timeout: float | None) -> list:
        if not sources:
            return []
        tasks = [asyncio.create_task(self._sync_source(source)) for source in sources]
        self._tasks = set(tasks)
        try:
            _, pending = await asyncio.wait(tasks, timeout=timeout)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        if pending:
            logger.warning("Sync pass timed out; cancelling %d fetches", len(pending))
            for task in pending:
                task.cancel()
        return await asyncio.gather(*tasks, return_exceptions=True)

    def cancel(self) -> int:
        """Cancel the running pass's in-flight fetches. Returns how many."""
        cancelled = 0
        for task in self._tasks:
            if not task.done():
                task.cancel()
                cancelled += 1
        return cancelled

    async def refresh_source(self, source: FeedSource) -> SyncError | None:
        """Fetch and merge one source outside of a pass.

        Only that source's error entry is updated. Returns the entry if the
        refresh failed.
        """
        await self._sync_source(source)
        return self.errors.get(source.id)

    async def _sync_source(self, source: FeedSource) -> None:
        try:
            async with self._fetch_slots:
                parsed = await self._fetcher.fetch(source.url)
            async with self._write_lock:
                if self._store.get_source(source.id) is None:
                    logger.info("Feed %s was removed during sync; discarding result", source.url)
                    return
                inserted = self.merge(source, parsed)
        except FeedError as e:
            self._record_failure(source, e)
            return
        except asyncio.CancelledError:
            self._record_failure(source, FetchCancelledError())
            raise

        self.errors.resolve(source.id)
        logger.info("Feed '%s': %d new items", source.display_name, inserted)

    def _record_failure(self, source: FeedSource, error: FeedError) -> None:
        logger.warning("Feed '%s' error: %s", source.display_name, error)
        self.errors.record(
            SyncError(
                source_id=source.id,
                source_title=source.display_name,
                source_url=source.url,
                error=error,
            )
        )

    def merge(self, source: FeedSource, parsed: ParsedFeed) -> int:
        """Merge a parsed feed into the store. Returns how many items were new.

        Only the first ``merge_prefix`` parsed items are considered and links
        already stored for the source are skipped, so merging the same
        payload twice changes nothing. Afterwards the source keeps only its
        ``retention_cap`` newest items.

        Raises:
            LookupError: if ``source`` is not in the store.
        """
        stored = self._store.get_source(source.id)
        if stored is None:
            raise LookupError(f"Feed {source.id} is not in the store")

        if parsed.title and stored.title != parsed.title:
            stored.title = parsed.title
        stored.last_refreshed_at = datetime.now(timezone.utc)
        self._store.update_source(stored)
        source.title = stored.title
        source.last_refreshed_at = stored.last_refreshed_at

        new_items = []
        seen: set[str] = set()
        for parsed_item in parsed.items[: self._config.merge_prefix]:
            link = parsed_item.link
            if link in seen or self._store.item_exists(stored.id, link):
                continue
            seen.add(link)
            new_items.append(
                FeedItem(
                    source_id=stored.id,
                    title=parsed_item.title,
                    link=link,
                    description=parsed_item.description,
                    image_url=parsed_item.image_url,
                    published=parsed_item.published,
                )
            )

        inserted = self._store.add_items(new_items) if new_items else 0
        self._prune(stored.id)
        return inserted

    def _prune(self, source_id: str) -> int:
        items = self._store.list_items(source_id=source_id)
        overflow = items[self._config.retention_cap :]
        if not overflow:
            return 0
        logger.debug("Pruning %d items from feed %s", len(overflow), source_id)
        return self._store.delete_items([item.id for item in overflow])

    def due_sources(self, now: datetime | None = None) -> list[FeedSource]:
        """Sources whose refresh interval has elapsed.

        Returns nothing while syncing is globally paused.
        """
        if self._config.sync_paused:
            return []
        now = now or datetime.now(timezone.utc)
        default = self._config.default_refresh_interval
        due = []
        for source in self._store.list_sources():
            if source.paused:
                continue
            interval = timedelta(seconds=source.effective_refresh_interval(default))
            if source.last_refreshed_at is None or now - source.last_refreshed_at >= interval:
                due.append(source)
        return due

    async def sync_due(self) -> SyncErrorReport:
        """Run a pass over the sources that are due for a refresh."""
        return await self.run_pass(sources=self.due_sources())

    def dismiss_error(self, source_id: str) -> bool:
        return self.errors.dismiss(source_id)
