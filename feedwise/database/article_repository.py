"""
Article repository - CRUD operations for articles.
"""

from ..dates import to_db
from ..normalizer import ArticleDraft
from .connection import DatabaseConnection
from .converters import dump_tags, row_to_article
from .models import DBArticle

DEFAULT_RELEVANCE = 0.5


class ArticleRepository:
    """Repository for article operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def add_many(
        self,
        owner_id: int,
        feed_id: int,
        drafts: list[ArticleDraft],
        relevance_score: float = DEFAULT_RELEVANCE,
    ) -> list[int]:
        """
        Insert new articles in one transaction.

        Rows that collide with an existing (owner_id, url) are skipped by the
        UNIQUE index. Returns the IDs of rows actually inserted.
        """
        inserted: list[int] = []
        with self._db.conn() as conn:
            for draft in drafts:
                cursor = conn.execute(
                    """INSERT OR IGNORE INTO articles
                       (owner_id, feed_id, url, title, description, author, published_at,
                        tags, image_url, is_read, is_saved, relevance_score)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, FALSE, FALSE, ?)""",
                    (owner_id, feed_id, draft.url, draft.title, draft.description,
                     draft.author, to_db(draft.published_at), dump_tags(draft.tags),
                     draft.image_url, relevance_score)
                )
                if cursor.rowcount == 1:
                    inserted.append(cursor.lastrowid)
        return inserted

    def get(self, article_id: int, owner_id: int) -> DBArticle | None:
        """Get single article by ID, scoped to its owner."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM articles WHERE id = ? AND owner_id = ?",
                (article_id, owner_id)
            ).fetchone()
            return row_to_article(row) if row else None

    def get_by_url(self, owner_id: int, url: str) -> DBArticle | None:
        """Get article by its dedup key."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM articles WHERE owner_id = ? AND url = ?",
                (owner_id, url)
            ).fetchone()
            return row_to_article(row) if row else None

    def existing_urls(
        self,
        owner_id: int,
        urls: list[str],
        feed_id: int | None = None,
    ) -> set[str]:
        """Return the subset of urls already stored for this owner (and feed)."""
        if not urls:
            return set()
        placeholders = ",".join("?" * len(urls))
        query = f"SELECT url FROM articles WHERE owner_id = ? AND url IN ({placeholders})"
        params: list = [owner_id, *urls]
        if feed_id is not None:
            query += " AND feed_id = ?"
            params.append(feed_id)
        with self._db.conn() as conn:
            rows = conn.execute(query, params).fetchall()
            return {row["url"] for row in rows}

    def _filters(
        self,
        owner_id: int,
        feed_id: int | None,
        tags: list[str] | None,
        is_read: bool | None,
        is_saved: bool | None = None,
    ) -> tuple[str, list]:
        where = "owner_id = ?"
        params: list = [owner_id]
        if feed_id is not None:
            where += " AND feed_id = ?"
            params.append(feed_id)
        # Articles must carry ALL requested tags
        for tag in tags or []:
            where += " AND EXISTS (SELECT 1 FROM json_each(articles.tags) WHERE value = ?)"
            params.append(tag)
        if is_read is not None:
            where += " AND is_read = ?"
            params.append(is_read)
        if is_saved is not None:
            where += " AND is_saved = ?"
            params.append(is_saved)
        return where, params

    def get_many(
        self,
        owner_id: int,
        feed_id: int | None = None,
        tags: list[str] | None = None,
        is_read: bool | None = None,
        is_saved: bool | None = None,
        limit: int | None = 50,
        offset: int = 0,
    ) -> list[DBArticle]:
        """Get articles with optional filters, newest first. limit=None returns all."""
        where, params = self._filters(owner_id, feed_id, tags, is_read, is_saved)
        query = f"SELECT * FROM articles WHERE {where} ORDER BY published_at DESC, id DESC"
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])
        with self._db.conn() as conn:
            rows = conn.execute(query, params).fetchall()
            return [row_to_article(row) for row in rows]

    def count(
        self,
        owner_id: int,
        feed_id: int | None = None,
        tags: list[str] | None = None,
        is_read: bool | None = None,
        is_saved: bool | None = None,
    ) -> int:
        """Count articles matching the same filters as get_many()."""
        where, params = self._filters(owner_id, feed_id, tags, is_read, is_saved)
        with self._db.conn() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) AS cnt FROM articles WHERE {where}", params
            ).fetchone()
            return row["cnt"]

    def get_by_ids(self, owner_id: int, article_ids: list[int]) -> dict[int, DBArticle]:
        """Get several articles keyed by ID."""
        if not article_ids:
            return {}
        placeholders = ",".join("?" * len(article_ids))
        with self._db.conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM articles WHERE owner_id = ? AND id IN ({placeholders})",
                [owner_id, *article_ids]
            ).fetchall()
            return {row["id"]: row_to_article(row) for row in rows}

    def mark_read(self, article_id: int, owner_id: int, is_read: bool = True) -> bool:
        """
        Set the read flag and keep the feed's unread counter in step.

        Returns True if the flag actually changed.
        """
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT feed_id, is_read FROM articles WHERE id = ? AND owner_id = ?",
                (article_id, owner_id)
            ).fetchone()
            if not row or bool(row["is_read"]) == is_read:
                return False
            conn.execute(
                "UPDATE articles SET is_read = ? WHERE id = ?",
                (is_read, article_id)
            )
            conn.execute(
                "UPDATE feeds SET unread_count = MAX(0, unread_count + ?) WHERE id = ?",
                (-1 if is_read else 1, row["feed_id"])
            )
            return True

    def update_tags(self, article_id: int, owner_id: int, tags: list[str]):
        """Replace an article's tags."""
        with self._db.conn() as conn:
            conn.execute(
                "UPDATE articles SET tags = ? WHERE id = ? AND owner_id = ?",
                (dump_tags(tags), article_id, owner_id)
            )
