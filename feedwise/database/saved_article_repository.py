"""
Repository for the saved-article index.

saved_articles is a materialized index over articles.is_saved that lets the
saved list be paged by save time. articles.is_saved is the source of truth;
toggle() writes both in one transaction and rebuild() repairs any drift.
"""

from ..dates import to_db, utc_now
from .connection import DatabaseConnection
from .converters import row_to_saved_article
from .models import DBSavedArticle


class SavedArticleRepository:
    """Repository for per-owner saved articles."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def get(self, owner_id: int, article_id: int) -> DBSavedArticle | None:
        """Get the index entry for an owner+article pair."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM saved_articles WHERE owner_id = ? AND article_id = ?",
                (owner_id, article_id)
            ).fetchone()
            return row_to_saved_article(row) if row else None

    def toggle(self, owner_id: int, article_id: int) -> bool | None:
        """
        Flip articles.is_saved and upsert/delete the index row atomically.

        Returns the new saved state, or None if the article does not exist.
        """
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT is_saved FROM articles WHERE id = ? AND owner_id = ?",
                (article_id, owner_id)
            ).fetchone()
            if not row:
                return None

            new_status = not bool(row["is_saved"])
            conn.execute(
                "UPDATE articles SET is_saved = ? WHERE id = ?",
                (new_status, article_id)
            )
            if new_status:
                conn.execute(
                    """
                    INSERT INTO saved_articles (owner_id, article_id, saved_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(owner_id, article_id) DO NOTHING
                    """,
                    (owner_id, article_id, to_db(utc_now()))
                )
            else:
                conn.execute(
                    "DELETE FROM saved_articles WHERE owner_id = ? AND article_id = ?",
                    (owner_id, article_id)
                )
            return new_status

    def get_page(self, owner_id: int, limit: int = 20, offset: int = 0) -> list[DBSavedArticle]:
        """Get index entries ordered by most recently saved."""
        with self._db.conn() as conn:
            rows = conn.execute(
                """
                SELECT * FROM saved_articles
                WHERE owner_id = ?
                ORDER BY saved_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (owner_id, limit, offset)
            ).fetchall()
            return [row_to_saved_article(row) for row in rows]

    def count(self, owner_id: int) -> int:
        """Count saved articles of an owner."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS cnt FROM saved_articles WHERE owner_id = ?",
                (owner_id,)
            ).fetchone()
            return row["cnt"]

    def rebuild(self, owner_id: int) -> tuple[int, int]:
        """
        Reconcile the index with articles.is_saved.

        Returns (created, removed) counts.
        """
        with self._db.conn() as conn:
            created = conn.execute(
                """
                INSERT INTO saved_articles (owner_id, article_id, saved_at)
                SELECT owner_id, id, ?
                FROM articles
                WHERE owner_id = ? AND is_saved = TRUE
                ON CONFLICT(owner_id, article_id) DO NOTHING
                """,
                (to_db(utc_now()), owner_id)
            ).rowcount
            removed = conn.execute(
                """
                DELETE FROM saved_articles
                WHERE owner_id = ?
                  AND article_id NOT IN (
                      SELECT id FROM articles WHERE owner_id = ? AND is_saved = TRUE
                  )
                """,
                (owner_id, owner_id)
            ).rowcount
            return created, removed
