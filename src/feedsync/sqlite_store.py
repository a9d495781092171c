"""SQLite implementation of the feed store."""

import sqlite3
from datetime import datetime, timezone

from .models import Category, FeedItem, FeedSource
from .store import DuplicateFeedError

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS categories (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    color TEXT NOT NULL,
    sort_order INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS sources (
    id TEXT PRIMARY KEY,
    url TEXT UNIQUE NOT NULL,
    title TEXT NOT NULL,
    nickname TEXT,
    refresh_interval INTEGER,
    category_id TEXT REFERENCES categories(id) ON DELETE SET NULL,
    paused INTEGER NOT NULL DEFAULT 0,
    notifications_enabled INTEGER NOT NULL DEFAULT 0,
    last_refreshed_at REAL
);

CREATE TABLE IF NOT EXISTS items (
    id TEXT PRIMARY KEY,
    source_id TEXT NOT NULL REFERENCES sources(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    link TEXT NOT NULL,
    description TEXT,
    image_url TEXT,
    published REAL NOT NULL,
    UNIQUE(source_id, link)
);

CREATE INDEX IF NOT EXISTS idx_items_source_id ON items(source_id);
CREATE INDEX IF NOT EXISTS idx_items_published ON items(published);
"""


class SQLiteStore:
    """SQLite-backed store for sources, categories and items."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Open database connection and initialize schema."""
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(SCHEMA_SQL)
        self._conn.commit()

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._conn

    # --- Category operations ---

    def add_category(self, category: Category) -> Category:
        self.conn.execute(
            "INSERT INTO categories (id, name, color, sort_order) VALUES (?, ?, ?, ?)",
            (category.id, category.name, category.color, category.sort_order),
        )
        self.conn.commit()
        return category

    def get_category(self, category_id: str) -> Category | None:
        row = self.conn.execute(
            "SELECT * FROM categories WHERE id = ?", (category_id,)
        ).fetchone()
        return _row_to_category(row) if row else None

    def list_categories(self) -> list[Category]:
        rows = self.conn.execute(
            "SELECT * FROM categories ORDER BY sort_order, rowid"
        ).fetchall()
        return [_row_to_category(r) for r in rows]

    def update_category(self, category: Category) -> None:
        cursor = self.conn.execute(
            "UPDATE categories SET name = ?, color = ?, sort_order = ? WHERE id = ?",
            (category.name, category.color, category.sort_order, category.id),
        )
        self.conn.commit()
        if cursor.rowcount == 0:
            raise LookupError(f"Unknown category {category.id}")

    def delete_category(self, category_id: str) -> bool:
        """Delete a category. Its sources are kept, uncategorized."""
        cursor = self.conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    # --- Source operations ---

    def add_source(self, source: FeedSource) -> FeedSource:
        try:
            self.conn.execute(
                """INSERT INTO sources (id, url, title, nickname, refresh_interval,
                   category_id, paused, notifications_enabled, last_refreshed_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    source.id,
                    source.url,
                    source.title,
                    source.nickname,
                    source.refresh_interval,
                    source.category_id,
                    int(source.paused),
                    int(source.notifications_enabled),
                    _dt_to_ts(source.last_refreshed_at),
                ),
            )
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            raise DuplicateFeedError(f"Already subscribed to {source.url}") from e
        self.conn.commit()
        return source

    def get_source(self, source_id: str) -> FeedSource | None:
        row = self.conn.execute("SELECT * FROM sources WHERE id = ?", (source_id,)).fetchone()
        return _row_to_source(row) if row else None

    def get_source_by_url(self, url: str) -> FeedSource | None:
        row = self.conn.execute("SELECT * FROM sources WHERE url = ?", (url,)).fetchone()
        return _row_to_source(row) if row else None

    def list_sources(self, category_id: str | None = None) -> list[FeedSource]:
        if category_id is None:
            rows = self.conn.execute("SELECT * FROM sources ORDER BY rowid").fetchall()
        else:
            rows = self.conn.execute(
                "SELECT * FROM sources WHERE category_id = ? ORDER BY rowid", (category_id,)
            ).fetchall()
        return [_row_to_source(r) for r in rows]

    def update_source(self, source: FeedSource) -> None:
        cursor = self.conn.execute(
            """UPDATE sources SET url = ?, title = ?, nickname = ?, refresh_interval = ?,
               category_id = ?, paused = ?, notifications_enabled = ?, last_refreshed_at = ?
               WHERE id = ?""",
            (
                source.url,
                source.title,
                source.nickname,
                source.refresh_interval,
                source.category_id,
                int(source.paused),
                int(source.notifications_enabled),
                _dt_to_ts(source.last_refreshed_at),
                source.id,
            ),
        )
        self.conn.commit()
        if cursor.rowcount == 0:
            raise LookupError(f"Unknown source {source.id}")

    def delete_source(self, source_id: str) -> bool:
        """Delete a source and its items (cascade). Returns True if deleted."""
        cursor = self.conn.execute("DELETE FROM sources WHERE id = ?", (source_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    # --- Item operations ---

    def item_exists(self, source_id: str, link: str) -> bool:
        row = self.conn.execute(
            "SELECT 1 FROM items WHERE source_id = ? AND link = ?", (source_id, link)
        ).fetchone()
        return row is not None

    def add_items(self, items: list[FeedItem]) -> int:
        """Bulk-insert items, skipping duplicates. Returns count of inserted items."""
        inserted = 0
        for item in items:
            try:
                self.conn.execute(
                    """INSERT INTO items (id, source_id, title, link, description,
                       image_url, published) VALUES (?, ?, ?, ?, ?, ?, ?)""",
                    (
                        item.id,
                        item.source_id,
                        item.title,
                        item.link,
                        item.description,
                        item.image_url,
                        _dt_to_ts(item.published),
                    ),
                )
                inserted += 1
            except sqlite3.IntegrityError:
                # Duplicate (source_id, link)
                continue
        self.conn.commit()
        return inserted

    def list_items(
        self,
        source_id: str | None = None,
        category_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> list[FeedItem]:
        query = "SELECT items.* FROM items JOIN sources ON items.source_id = sources.id WHERE 1=1"
        params: list = []

        if source_id is not None:
            query += " AND items.source_id = ?"
            params.append(source_id)
        if category_id is not None:
            query += " AND sources.category_id = ?"
            params.append(category_id)
        if since is not None:
            query += " AND items.published >= ?"
            params.append(_dt_to_ts(since))
        if until is not None:
            query += " AND items.published <= ?"
            params.append(_dt_to_ts(until))

        query += " ORDER BY items.published DESC, items.rowid ASC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        rows = self.conn.execute(query, params).fetchall()
        return [_row_to_item(r) for r in rows]

    def count_items(self, source_id: str) -> int:
        row = self.conn.execute(
            "SELECT COUNT(*) AS cnt FROM items WHERE source_id = ?", (source_id,)
        ).fetchone()
        return row["cnt"] if row else 0

    def delete_items(self, item_ids: list[str]) -> int:
        if not item_ids:
            return 0
        placeholders = ",".join("?" for _ in item_ids)
        cursor = self.conn.execute(
            f"DELETE FROM items WHERE id IN ({placeholders})", item_ids
        )
        self.conn.commit()
        return cursor.rowcount


# --- Helper functions ---


def _dt_to_ts(dt: datetime | None) -> float | None:
    """Store datetimes as POSIX timestamps so ORDER BY is chronological."""
    return dt.timestamp() if dt else None


def _ts_to_dt(ts: float | None) -> datetime | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def _row_to_category(row: sqlite3.Row) -> Category:
    return Category(
        id=row["id"],
        name=row["name"],
        color=row["color"],
        sort_order=row["sort_order"],
    )


def _row_to_source(row: sqlite3.Row) -> FeedSource:
    return FeedSource(
        id=row["id"],
        url=row["url"],
        title=row["title"],
        nickname=row["nickname"],
        refresh_interval=row["refresh_interval"],
        category_id=row["category_id"],
        paused=bool(row["paused"]),
        notifications_enabled=bool(row["notifications_enabled"]),
        last_refreshed_at=_ts_to_dt(row["last_refreshed_at"]),
    )


def _row_to_item(row: sqlite3.Row) -> FeedItem:
    return FeedItem(
        id=row["id"],
        source_id=row["source_id"],
        title=row["title"],
        link=row["link"],
        description=row["description"],
        image_url=row["image_url"],
        published=_ts_to_dt(row["published"]),
    )
