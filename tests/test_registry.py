"""Tests for registry.py: subscriptions and categories."""

import pytest

from feedsync.errors import InvalidURLError
from feedsync.models import PLACEHOLDER_TITLE
from feedsync.registry import FeedRegistry
from feedsync.store import DuplicateFeedError


@pytest.fixture
def registry(store):
    return FeedRegistry(store)


# --- Subscriptions ---


def test_subscribe_uses_placeholder_title(registry, store):
    source = registry.subscribe("  https://example.com/feed.xml ", nickname="Ex")

    stored = store.get_source(source.id)
    assert stored.url == "https://example.com/feed.xml"
    assert stored.title == PLACEHOLDER_TITLE
    assert stored.display_name == "Ex"
    assert stored.last_refreshed_at is None


def test_subscribe_empty_nickname_is_none(registry):
    source = registry.subscribe("https://example.com/feed.xml", nickname="")
    assert source.nickname is None
    assert source.display_name == PLACEHOLDER_TITLE


@pytest.mark.parametrize("url", ["example.com/feed", "ftp://example.com/feed", ""])
def test_subscribe_rejects_invalid_url(registry, store, url):
    with pytest.raises(InvalidURLError):
        registry.subscribe(url)
    assert store.list_sources() == []


def test_subscribe_rejects_duplicate(registry):
    registry.subscribe("https://example.com/feed.xml")
    with pytest.raises(DuplicateFeedError):
        registry.subscribe("https://example.com/feed.xml")


def test_subscribe_unknown_category(registry, store):
    with pytest.raises(LookupError):
        registry.subscribe("https://example.com/feed.xml", category_id="missing")
    assert store.list_sources() == []


def test_get_unknown_source(registry):
    with pytest.raises(LookupError, match="not found"):
        registry.get_source("missing")


def test_update_source_changes_only_given_fields(registry):
    category = registry.create_category("Tech")
    source = registry.subscribe("https://example.com/feed.xml", nickname="Ex")

    updated = registry.update_source(source.id, refresh_interval=900, category_id=category.id)

    assert updated.nickname == "Ex"
    assert updated.refresh_interval == 900
    assert updated.category_id == category.id
    assert registry.get_source(source.id) == updated


def test_update_source_can_clear_values(registry):
    category = registry.create_category("Tech")
    source = registry.subscribe(
        "https://example.com/feed.xml", nickname="Ex", category_id=category.id
    )

    updated = registry.update_source(source.id, nickname=None, category_id=None, paused=True)

    assert updated.nickname is None
    assert updated.category_id is None
    assert updated.paused is True


def test_update_source_rejects_bad_interval(registry):
    source = registry.subscribe("https://example.com/feed.xml")
    with pytest.raises(ValueError):
        registry.update_source(source.id, refresh_interval=0)


def test_update_source_unknown_category(registry):
    source = registry.subscribe("https://example.com/feed.xml")
    with pytest.raises(LookupError):
        registry.update_source(source.id, category_id="missing")


def test_unsubscribe(registry):
    source = registry.subscribe("https://example.com/feed.xml")

    assert registry.unsubscribe(source.id) is True
    assert registry.unsubscribe(source.id) is False
    assert registry.list_sources() == []


# --- Categories ---


def test_create_category_appends(registry):
    first = registry.create_category("News")
    second = registry.create_category("Tech", color="#123456")

    assert first.sort_order == 0
    assert second.sort_order == 1
    assert second.color == "#123456"
    assert [c.name for c in registry.list_categories()] == ["News", "Tech"]


def test_update_category(registry):
    category = registry.create_category("News")

    updated = registry.update_category(category.id, color="#000000")

    assert updated.name == "News"
    assert updated.color == "#000000"


def test_update_unknown_category(registry):
    with pytest.raises(LookupError):
        registry.update_category("missing", name="x")


def test_delete_category_keeps_feeds(registry):
    category = registry.create_category("News")
    source = registry.subscribe("https://example.com/feed.xml", category_id=category.id)

    assert registry.delete_category(category.id) is True
    assert registry.get_source(source.id).category_id is None
    assert registry.list_sources(category.id) == []
