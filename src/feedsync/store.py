"""Storage collaborator for sources, categories and items.

The sync engine only talks to the :class:`FeedStore` protocol. Two
implementations ship with the package: :class:`MemoryStore` here and
:class:`feedsync.sqlite_store.SQLiteStore` for persistence.
"""

from dataclasses import replace
from datetime import datetime
from typing import Protocol

from .models import Category, FeedItem, FeedSource


class DuplicateFeedError(ValueError):
    """Raised when a source URL is already subscribed."""


class FeedStore(Protocol):
    """Key-addressable store with fetch, insert and delete operations.

    ``list_items`` returns items newest first; items with the same
    ``published`` value keep their insertion order.
    """

    def add_category(self, category: Category) -> Category: ...

    def get_category(self, category_id: str) -> Category | None: ...

    def list_categories(self) -> list[Category]: ...

    def update_category(self, category: Category) -> None: ...

    def delete_category(self, category_id: str) -> bool: ...

    def add_source(self, source: FeedSource) -> FeedSource: ...

    def get_source(self, source_id: str) -> FeedSource | None: ...

    def get_source_by_url(self, url: str) -> FeedSource | None: ...

    def list_sources(self, category_id: str | None = None) -> list[FeedSource]: ...

    def update_source(self, source: FeedSource) -> None: ...

    def delete_source(self, source_id: str) -> bool: ...

    def item_exists(self, source_id: str, link: str) -> bool: ...

    def add_items(self, items: list[FeedItem]) -> int: ...

    def list_items(
        self,
        source_id: str | None = None,
        category_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> list[FeedItem]: ...

    def count_items(self, source_id: str) -> int: ...

    def delete_items(self, item_ids: list[str]) -> int: ...


class MemoryStore:
    """In-process :class:`FeedStore`. Returns copies, like a real store would."""

    def __init__(self):
        self._categories: dict[str, Category] = {}
        self._sources: dict[str, FeedSource] = {}
        self._items: dict[str, FeedItem] = {}

    # --- Categories ---

    def add_category(self, category: Category) -> Category:
        self._categories[category.id] = replace(category)
        return category

    def get_category(self, category_id: str) -> Category | None:
        category = self._categories.get(category_id)
        return replace(category) if category else None

    def list_categories(self) -> list[Category]:
        categories = sorted(self._categories.values(), key=lambda c: c.sort_order)
        return [replace(c) for c in categories]

    def update_category(self, category: Category) -> None:
        if category.id not in self._categories:
            raise LookupError(f"Unknown category {category.id}")
        self._categories[category.id] = replace(category)

    def delete_category(self, category_id: str) -> bool:
        """Delete a category; its sources become uncategorized."""
        if self._categories.pop(category_id, None) is None:
            return False
        for source in self._sources.values():
            if source.category_id == category_id:
                source.category_id = None
        return True

    # --- Sources ---

    def add_source(self, source: FeedSource) -> FeedSource:
        if self.get_source_by_url(source.url) is not None:
            raise DuplicateFeedError(f"Already subscribed to {source.url}")
        self._sources[source.id] = replace(source)
        return source

    def get_source(self, source_id: str) -> FeedSource | None:
        source = self._sources.get(source_id)
        return replace(source) if source else None

    def get_source_by_url(self, url: str) -> FeedSource | None:
        for source in self._sources.values():
            if source.url == url:
                return replace(source)
        return None

    def list_sources(self, category_id: str | None = None) -> list[FeedSource]:
        return [
            replace(s)
            for s in self._sources.values()
            if category_id is None or s.category_id == category_id
        ]

    def update_source(self, source: FeedSource) -> None:
        if source.id not in self._sources:
            raise LookupError(f"Unknown source {source.id}")
        self._sources[source.id] = replace(source)

    def delete_source(self, source_id: str) -> bool:
        """Delete a source and every item it owns."""
        if self._sources.pop(source_id, None) is None:
            return False
        self._items = {k: v for k, v in self._items.items() if v.source_id != source_id}
        return True

    # --- Items ---

    def item_exists(self, source_id: str, link: str) -> bool:
        return any(i.source_id == source_id and i.link == link for i in self._items.values())

    def add_items(self, items: list[FeedItem]) -> int:
        """Insert items, skipping (source, link) pairs already stored."""
        inserted = 0
        for item in items:
            if self.item_exists(item.source_id, item.link):
                continue
            self._items[item.id] = replace(item)
            inserted += 1
        return inserted

    def list_items(
        self,
        source_id: str | None = None,
        category_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> list[FeedItem]:
        source_ids = None
        if category_id is not None:
            source_ids = {s.id for s in self._sources.values() if s.category_id == category_id}

        matching = [
            i
            for i in self._items.values()
            if (source_id is None or i.source_id == source_id)
            and (source_ids is None or i.source_id in source_ids)
            and (since is None or i.published >= since)
            and (until is None or i.published <= until)
        ]
        # sorted() is stable with reverse=True, so ties keep insertion order.
        matching = sorted(matching, key=lambda i: i.published, reverse=True)
        if limit is not None:
            matching = matching[:limit]
        return [replace(i) for i in matching]

    def count_items(self, source_id: str) -> int:
        return sum(1 for i in self._items.values() if i.source_id == source_id)

    def delete_items(self, item_ids: list[str]) -> int:
        deleted = 0
        for item_id in item_ids:
            if self._items.pop(item_id, None) is not None:
                deleted += 1
        return deleted
