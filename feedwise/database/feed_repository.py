"""
Feed repository - CRUD operations for feeds.

Sync bookkeeping (last_synced_at, unread_count, has_new_content) is only
written through update_sync() and set_has_new_content(), which the ingestion
engine calls; user edits go through update().
"""

import sqlite3
from datetime import datetime

from ..dates import to_db
from ..exceptions import DuplicateFeedSubscription
from .connection import DatabaseConnection
from .converters import dump_tags, row_to_feed
from .models import DBFeed


class FeedRepository:
    """Repository for feed operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def add(
        self,
        owner_id: int,
        url: str,
        title: str,
        category: str | None = None,
        tags: list[str] | None = None,
        favicon_url: str | None = None,
    ) -> int:
        """Add a new feed. Returns feed ID."""
        with self._db.conn() as conn:
            try:
                cursor = conn.execute(
                    """INSERT INTO feeds (owner_id, url, title, category, tags, favicon_url)
                       VALUES (?, ?, ?, ?, ?, ?)""",
                    (owner_id, url, title, category, dump_tags(tags), favicon_url)
                )
            except sqlite3.IntegrityError as e:
                raise DuplicateFeedSubscription(f"Feed already exists: {e}", url=url) from e
            return cursor.lastrowid

    def get(self, feed_id: int, owner_id: int) -> DBFeed | None:
        """Get single feed by ID, scoped to its owner."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM feeds WHERE id = ? AND owner_id = ?",
                (feed_id, owner_id)
            ).fetchone()
            return row_to_feed(row) if row else None

    def get_by_url(self, owner_id: int, url: str) -> DBFeed | None:
        """Get feed by its source URL."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM feeds WHERE owner_id = ? AND url = ?",
                (owner_id, url)
            ).fetchone()
            return row_to_feed(row) if row else None

    def get_all(self, owner_id: int) -> list[DBFeed]:
        """Get all feeds of an owner ordered by title."""
        with self._db.conn() as conn:
            rows = conn.execute(
                "SELECT * FROM feeds WHERE owner_id = ? ORDER BY title COLLATE NOCASE",
                (owner_id,)
            ).fetchall()
            return [row_to_feed(row) for row in rows]

    def update(
        self,
        feed_id: int,
        owner_id: int,
        title: str | None = None,
        category: str | None = None,
        tags: list[str] | None = None,
    ):
        """Update feed details. None leaves a field unchanged."""
        with self._db.conn() as conn:
            if title:
                conn.execute(
                    "UPDATE feeds SET title = ? WHERE id = ? AND owner_id = ?",
                    (title, feed_id, owner_id)
                )
            if category:
                conn.execute(
                    "UPDATE feeds SET category = ? WHERE id = ? AND owner_id = ?",
                    (category, feed_id, owner_id)
                )
            if tags is not None:
                conn.execute(
                    "UPDATE feeds SET tags = ? WHERE id = ? AND owner_id = ?",
                    (dump_tags(tags), feed_id, owner_id)
                )

    def update_sync(self, feed_id: int, synced_at: datetime, new_articles: int):
        """Record a completed ingestion."""
        with self._db.conn() as conn:
            conn.execute(
                """UPDATE feeds SET
                   last_synced_at = ?,
                   unread_count = unread_count + ?,
                   has_new_content = FALSE
                   WHERE id = ?""",
                (to_db(synced_at), new_articles, feed_id)
            )

    def set_has_new_content(self, feed_id: int, has_new_content: bool = True):
        """Flag (or clear) pending upstream content."""
        with self._db.conn() as conn:
            conn.execute(
                "UPDATE feeds SET has_new_content = ? WHERE id = ?",
                (has_new_content, feed_id)
            )

    def delete(self, feed_id: int, owner_id: int):
        """Delete feed; its articles, saved-index rows and summaries cascade."""
        with self._db.conn() as conn:
            conn.execute(
                "DELETE FROM feeds WHERE id = ? AND owner_id = ?",
                (feed_id, owner_id)
            )
