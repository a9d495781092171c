"""Subscription and category management on top of a FeedStore."""

import logging

from .fetcher import validate_url
from .models import Category, FeedSource
from .store import DuplicateFeedError, FeedStore

logger = logging.getLogger(__name__)

_UNSET = object()


class FeedRegistry:
    """Creates, edits and removes sources and categories."""

    def __init__(self, store: FeedStore):
        self._store = store

    # --- Sources ---

    def subscribe(
        self,
        url: str,
        nickname: str | None = None,
        category_id: str | None = None,
    ) -> FeedSource:
        """Register a new source with a placeholder title.

        The real title arrives with the first successful sync.

        Raises:
            InvalidURLError: if ``url`` is not an absolute http(s) URL.
            DuplicateFeedError: if ``url`` is already subscribed.
            LookupError: if ``category_id`` does not exist.
        """
        url = url.strip()
        validate_url(url)
        if self._store.get_source_by_url(url) is not None:
            raise DuplicateFeedError(f"Already subscribed to {url}")
        if category_id is not None:
            self._require_category(category_id)

        source = FeedSource(url=url, nickname=nickname or None, category_id=category_id)
        self._store.add_source(source)
        logger.info("Subscribed to %s", url)
        return source

    def get_source(self, source_id: str) -> FeedSource:
        source = self._store.get_source(source_id)
        if source is None:
            raise LookupError(f"Feed {source_id} not found")
        return source

    def update_source(
        self,
        source_id: str,
        nickname=_UNSET,
        refresh_interval=_UNSET,
        category_id=_UNSET,
        paused=_UNSET,
        notifications_enabled=_UNSET,
    ) -> FeedSource:
        """Change user-editable fields; arguments left out keep their value."""
        source = self.get_source(source_id)
        if nickname is not _UNSET:
            source.nickname = nickname or None
        if refresh_interval is not _UNSET:
            if refresh_interval is not None and refresh_interval <= 0:
                raise ValueError("refresh_interval must be positive")
            source.refresh_interval = refresh_interval
        if category_id is not _UNSET:
            if category_id is not None:
                self._require_category(category_id)
            source.category_id = category_id
        if paused is not _UNSET:
            source.paused = bool(paused)
        if notifications_enabled is not _UNSET:
            source.notifications_enabled = bool(notifications_enabled)
        self._store.update_source(source)
        return source

    def unsubscribe(self, source_id: str) -> bool:
        """Remove a source together with all of its items."""
        deleted = self._store.delete_source(source_id)
        if deleted:
            logger.info("Unsubscribed feed %s", source_id)
        return deleted

    def list_sources(self, category_id: str | None = None) -> list[FeedSource]:
        return self._store.list_sources(category_id)

    # --- Categories ---

    def create_category(self, name: str, color: str = "#4ECDC4") -> Category:
        """Append a category after the existing ones."""
        existing = self._store.list_categories()
        sort_order = max((c.sort_order for c in existing), default=-1) + 1
        category = Category(name=name, color=color, sort_order=sort_order)
        return self._store.add_category(category)

    def update_category(
        self, category_id: str, name: str | None = None, color: str | None = None
    ) -> Category:
        category = self._require_category(category_id)
        if name is not None:
            category.name = name
        if color is not None:
            category.color = color
        self._store.update_category(category)
        return category

    def delete_category(self, category_id: str) -> bool:
        """Delete a category; its feeds stay subscribed without a category."""
        return self._store.delete_category(category_id)

    def list_categories(self) -> list[Category]:
        return self._store.list_categories()

    def _require_category(self, category_id: str) -> Category:
        category = self._store.get_category(category_id)
        if category is None:
            raise LookupError(f"Category {category_id} not found")
        return category
