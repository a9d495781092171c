"""Tests for the FeedStore implementations (memory and SQLite)."""

from datetime import timedelta

import pytest

from feedsync.models import Category, FeedItem, FeedSource
from feedsync.store import DuplicateFeedError

from conftest import BASE_TIME


def make_item(source: FeedSource, link: str, minutes_ago: int = 0, **kwargs) -> FeedItem:
    return FeedItem(
        source_id=source.id,
        title=kwargs.pop("title", f"Item {link}"),
        link=link,
        published=BASE_TIME - timedelta(minutes=minutes_ago),
        **kwargs,
    )


@pytest.fixture
def source(store):
    return store.add_source(FeedSource(url="https://example.com/feed.xml", title="Example"))


# --- Categories ---


def test_category_roundtrip(store):
    category = store.add_category(Category(name="Tech", color="#FF0000", sort_order=2))

    fetched = store.get_category(category.id)
    assert fetched == category
    assert store.get_category("missing") is None


def test_list_categories_by_sort_order(store):
    store.add_category(Category(name="B", sort_order=2))
    store.add_category(Category(name="A", sort_order=1))
    store.add_category(Category(name="C", sort_order=3))

    assert [c.name for c in store.list_categories()] == ["A", "B", "C"]


def test_update_category(store):
    category = store.add_category(Category(name="Old"))
    category.name = "New"
    store.update_category(category)

    assert store.get_category(category.id).name == "New"


def test_update_unknown_category_raises(store):
    with pytest.raises(LookupError):
        store.update_category(Category(name="Ghost"))


def test_delete_category_uncategorizes_sources(store):
    category = store.add_category(Category(name="News"))
    source = store.add_source(FeedSource(url="https://example.com/a", category_id=category.id))

    assert store.delete_category(category.id) is True
    assert store.delete_category(category.id) is False
    assert store.get_source(source.id).category_id is None


# --- Sources ---


def test_source_roundtrip(store):
    source = FeedSource(
        url="https://example.com/rss",
        title="Example",
        nickname="Ex",
        refresh_interval=600,
        paused=True,
        notifications_enabled=True,
        last_refreshed_at=BASE_TIME,
    )
    store.add_source(source)

    assert store.get_source(source.id) == source
    assert store.get_source_by_url("https://example.com/rss") == source
    assert store.get_source_by_url("https://example.com/other") is None


def test_duplicate_url_rejected(store, source):
    with pytest.raises(DuplicateFeedError):
        store.add_source(FeedSource(url=source.url))
    assert len(store.list_sources()) == 1


def test_list_sources_by_category(store):
    category = store.add_category(Category(name="Tech"))
    tech = store.add_source(FeedSource(url="https://example.com/tech", category_id=category.id))
    store.add_source(FeedSource(url="https://example.com/other"))

    assert [s.id for s in store.list_sources(category.id)] == [tech.id]
    assert len(store.list_sources()) == 2


def test_returned_sources_are_copies(store, source):
    fetched = store.get_source(source.id)
    fetched.title = "Changed locally"

    assert store.get_source(source.id).title == "Example"


def test_update_source(store, source):
    source.title = "Renamed"
    source.last_refreshed_at = BASE_TIME
    store.update_source(source)

    fetched = store.get_source(source.id)
    assert fetched.title == "Renamed"
    assert fetched.last_refreshed_at == BASE_TIME


def test_update_unknown_source_raises(store):
    with pytest.raises(LookupError):
        store.update_source(FeedSource(url="https://example.com/ghost"))


def test_delete_source_cascades_items(store, source):
    other = store.add_source(FeedSource(url="https://example.com/other"))
    store.add_items([make_item(source, "https://example.com/1"), make_item(other, "https://example.com/2")])

    assert store.delete_source(source.id) is True
    assert store.delete_source(source.id) is False
    assert store.count_items(source.id) == 0
    assert [i.link for i in store.list_items()] == ["https://example.com/2"]


# --- Items ---


def test_add_items_skips_existing_links(store, source):
    first = store.add_items([make_item(source, "https://example.com/1")])
    second = store.add_items(
        [make_item(source, "https://example.com/1"), make_item(source, "https://example.com/2")]
    )

    assert first == 1
    assert second == 1
    assert store.count_items(source.id) == 2
    assert store.item_exists(source.id, "https://example.com/1")
    assert not store.item_exists(source.id, "https://example.com/3")


def test_same_link_allowed_in_different_sources(store, source):
    other = store.add_source(FeedSource(url="https://example.com/other"))
    inserted = store.add_items(
        [make_item(source, "https://example.com/shared"), make_item(other, "https://example.com/shared")]
    )

    assert inserted == 2


def test_item_fields_roundtrip(store, source):
    item = make_item(
        source,
        "https://example.com/1",
        description="Body",
        image_url="https://example.com/1.jpg",
    )
    store.add_items([item])

    assert store.list_items(source.id) == [item]


def test_list_items_newest_first(store, source):
    store.add_items(
        [
            make_item(source, "https://example.com/old", minutes_ago=10),
            make_item(source, "https://example.com/new", minutes_ago=0),
            make_item(source, "https://example.com/mid", minutes_ago=5),
        ]
    )

    links = [i.link for i in store.list_items(source.id)]
    assert links == ["https://example.com/new", "https://example.com/mid", "https://example.com/old"]


def test_list_items_ties_keep_insertion_order(store, source):
    store.add_items([make_item(source, f"https://example.com/{n}") for n in range(5)])

    links = [i.link for i in store.list_items(source.id)]
    assert links == [f"https://example.com/{n}" for n in range(5)]


def test_list_items_time_window_and_limit(store, source):
    store.add_items([make_item(source, f"https://example.com/{n}", minutes_ago=n) for n in range(10)])

    window = store.list_items(
        source.id,
        since=BASE_TIME - timedelta(minutes=6),
        until=BASE_TIME - timedelta(minutes=2),
    )
    assert [i.link for i in window] == [f"https://example.com/{n}" for n in range(2, 7)]

    limited = store.list_items(source.id, limit=3)
    assert [i.link for i in limited] == [f"https://example.com/{n}" for n in range(3)]


def test_list_items_by_category(store):
    category = store.add_category(Category(name="Tech"))
    tech = store.add_source(FeedSource(url="https://example.com/tech", category_id=category.id))
    other = store.add_source(FeedSource(url="https://example.com/other"))
    store.add_items([make_item(tech, "https://example.com/t1"), make_item(other, "https://example.com/o1")])

    assert [i.link for i in store.list_items(category_id=category.id)] == ["https://example.com/t1"]


def test_delete_items(store, source):
    items = [make_item(source, f"https://example.com/{n}") for n in range(3)]
    store.add_items(items)

    assert store.delete_items([items[0].id, items[2].id, "missing"]) == 2
    assert store.delete_items([]) == 0
    assert [i.link for i in store.list_items(source.id)] == ["https://example.com/1"]
