"""
Summary repository - cache of generated article summaries.
"""

from .connection import DatabaseConnection
from .converters import row_to_summary
from .models import DBArticleSummary


class SummaryRepository:
    """Repository for cached article summaries."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def get(self, owner_id: int, article_id: int) -> DBArticleSummary | None:
        """Get a cached summary."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM article_summaries WHERE owner_id = ? AND article_id = ?",
                (owner_id, article_id)
            ).fetchone()
            return row_to_summary(row) if row else None

    def find_or_create(self, owner_id: int, article_id: int, summary: str) -> DBArticleSummary:
        """
        Store a summary unless one already exists, and return the stored one.

        Summaries are immutable once written, so a concurrent writer that got
        there first wins.
        """
        with self._db.conn() as conn:
            conn.execute(
                """INSERT INTO article_summaries (owner_id, article_id, summary)
                   VALUES (?, ?, ?)
                   ON CONFLICT(owner_id, article_id) DO NOTHING""",
                (owner_id, article_id, summary)
            )
            row = conn.execute(
                "SELECT * FROM article_summaries WHERE owner_id = ? AND article_id = ?",
                (owner_id, article_id)
            ).fetchone()
            return row_to_summary(row)
