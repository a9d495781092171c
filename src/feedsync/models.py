"""Data models for feedsync."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime

PLACEHOLDER_TITLE = "Loading..."


def new_id() -> str:
    return uuid.uuid4().hex


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class Category:
    """Optional grouping of feed sources. Colour is opaque to the core."""

    name: str
    color: str = "#4ECDC4"
    sort_order: int = 0
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "sort_order": self.sort_order,
        }


@dataclass
class FeedSource:
    """A subscribed feed, identified by its URL."""

    url: str
    title: str = PLACEHOLDER_TITLE
    nickname: str | None = None
    refresh_interval: int | None = None
    category_id: str | None = None
    paused: bool = False
    notifications_enabled: bool = False
    last_refreshed_at: datetime | None = None
    id: str = field(default_factory=new_id)

    @property
    def display_name(self) -> str:
        return self.nickname or self.title

    def effective_refresh_interval(self, default: int) -> int:
        """Seconds between refreshes: the per-source override or ``default``."""
        return self.refresh_interval or default

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "nickname": self.nickname,
            "display_name": self.display_name,
            "refresh_interval": self.refresh_interval,
            "category_id": self.category_id,
            "paused": self.paused,
            "notifications_enabled": self.notifications_enabled,
            "last_refreshed_at": _isoformat(self.last_refreshed_at),
        }


@dataclass
class FeedItem:
    """One stored entry. ``(source_id, link)`` is unique."""

    source_id: str
    title: str
    link: str
    published: datetime
    description: str | None = None
    image_url: str | None = None
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "source_id": self.source_id,
            "title": self.title,
            "link": self.link,
            "description": self.description,
            "image_url": self.image_url,
            "published": _isoformat(self.published),
        }


@dataclass
class ParsedItem:
    """An entry as produced by the parser, before it is merged."""

    title: str
    link: str
    published: datetime
    description: str | None = None
    image_url: str | None = None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "link": self.link,
            "description": self.description,
            "image_url": self.image_url,
            "published": _isoformat(self.published),
        }


@dataclass
class ParsedFeed:
    """Result of parsing one feed document. Never persisted."""

    title: str
    items: list[ParsedItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "items": [item.to_dict() for item in self.items],
        }
