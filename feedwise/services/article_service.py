"""
Article service: business logic for article operations.

Handles listing with relevance ranking, read/saved state, tags and
summaries.
"""

import logging
from typing import TYPE_CHECKING

from fastapi import HTTPException

from ..database import Database
from ..database.models import DBSavedArticle
from ..dates import utc_now
from ..exceptions import require_article
from ..scoring import ScoredArticle, rank_articles, score_article
from .feed_service import clean_tags

if TYPE_CHECKING:
    from ..summarizer import Summarizer

logger = logging.getLogger(__name__)

SORT_RELEVANCE = "relevance"
SORT_NEWEST = "newest"


class ArticleService:
    """Service for article-related business logic."""

    def __init__(
        self,
        db: Database,
        summarizer: "Summarizer | None" = None,
    ):
        self.db = db
        self.summarizer = summarizer

    # ─────────────────────────────────────────────────────────────
    # Listing & Filtering
    # ─────────────────────────────────────────────────────────────

    def list_articles(
        self,
        user_id: int,
        feed_id: int | None = None,
        tags: list[str] | None = None,
        is_read: bool | None = None,
        saved: bool | None = None,
        sort_by: str = SORT_RELEVANCE,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[ScoredArticle], int]:
        """
        Get a page of articles with scores.

        Relevance order depends on every article in the filtered set, so the
        whole set is scored and then sliced; newest order pages in SQL.

        Returns:
            (page of scored articles, total matching articles)
        """
        tags = clean_tags(tags) or None
        owner_tags = self.db.get_tags(user_id)
        now = utc_now()

        if sort_by == SORT_RELEVANCE:
            articles = self.db.get_articles(
                user_id, feed_id=feed_id, tags=tags, is_read=is_read, is_saved=saved, limit=None
            )
            ranked = rank_articles(articles, owner_tags, now)
            return ranked[offset:offset + limit], len(ranked)

        articles = self.db.get_articles(
            user_id, feed_id=feed_id, tags=tags, is_read=is_read, is_saved=saved,
            limit=limit, offset=offset,
        )
        total = self.db.articles.count(user_id, feed_id=feed_id, tags=tags, is_read=is_read, is_saved=saved)
        # Scores still reflect current state, but order stays by date
        scored = {s.article.id: s for s in rank_articles(articles, owner_tags, now)}
        return [scored[a.id] for a in articles], total

    def list_saved(
        self,
        user_id: int,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[tuple[ScoredArticle, DBSavedArticle]], int]:
        """Page saved articles by most recent save, read through the saved index."""
        entries = self.db.saved.get_page(user_id, limit=limit, offset=offset)
        articles = self.db.articles.get_by_ids(user_id, [e.article_id for e in entries])
        tag_names = self._tag_names(user_id)
        now = utc_now()
        page = [
            (ScoredArticle(articles[e.article_id], score_article(articles[e.article_id], tag_names, now)), e)
            for e in entries
            if e.article_id in articles
        ]
        return page, self.db.saved.count(user_id)

    def get_article(self, user_id: int, article_id: int) -> ScoredArticle:
        """Single article with its score computed against the owner's current tags."""
        article = require_article(self.db.get_article(article_id, user_id), article_id)
        return ScoredArticle(article, score_article(article, self._tag_names(user_id), utc_now()))

    def _tag_names(self, user_id: int) -> list[str]:
        return [t.name for t in self.db.get_tags(user_id)]

    # ─────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────

    def mark_read(self, user_id: int, article_id: int, is_read: bool = True) -> ScoredArticle:
        """Set the read flag; the feed's unread count follows."""
        require_article(self.db.get_article(article_id, user_id), article_id)
        self.db.mark_read(article_id, user_id, is_read)
        return self.get_article(user_id, article_id)

    def toggle_saved(self, user_id: int, article_id: int) -> bool:
        """Flip the saved flag and its index entry together. Returns the new state."""
        new_state = self.db.toggle_saved(article_id, user_id)
        return require_article(new_state, article_id)

    def update_tags(self, user_id: int, article_id: int, tags: list[str]) -> ScoredArticle:
        require_article(self.db.get_article(article_id, user_id), article_id)
        self.db.update_article_tags(article_id, user_id, clean_tags(tags))
        return self.get_article(user_id, article_id)

    def rebuild_saved_index(self, user_id: int) -> tuple[int, int]:
        """Repair the saved index from articles.is_saved. Returns (created, removed)."""
        created, removed = self.db.rebuild_saved_index(user_id)
        if created or removed:
            logger.warning(f"Saved index for owner {user_id} repaired: {created} added, {removed} removed")
        return created, removed

    # ─────────────────────────────────────────────────────────────
    # Summaries
    # ─────────────────────────────────────────────────────────────

    async def get_summary(self, user_id: int, article_id: int) -> tuple[str, bool]:
        """
        Return the article summary, generating and storing it on first request.

        Returns:
            (summary text, whether it came from the cache)
        """
        article = require_article(self.db.get_article(article_id, user_id), article_id)

        cached = self.db.get_summary(user_id, article_id)
        if cached:
            return cached.summary, True

        if not self.summarizer:
            raise HTTPException(status_code=503, detail="Summarization unavailable")

        result = await self.summarizer.summarize_async(article.title, article.description)
        if result.degraded:
            logger.info(f"Summary for article {article_id} produced by fallback path")

        # A concurrent request may have stored one first; keep that one
        stored = self.db.find_or_create_summary(user_id, article_id, result.text)
        return stored.summary, False
