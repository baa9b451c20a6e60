"""
Database facade - provides unified access to all repositories.

Callers may use the repositories directly (db.articles, db.feeds, ...) or the
delegating methods below, which cover the operations the ingestion engine and
services need.
"""

from datetime import datetime
from pathlib import Path

from ..normalizer import ArticleDraft
from .connection import DatabaseConnection
from .article_repository import ArticleRepository
from .feed_repository import FeedRepository
from .saved_article_repository import SavedArticleRepository
from .summary_repository import SummaryRepository
from .tag_repository import TagRepository
from .models import DBArticle, DBArticleSummary, DBFeed, DBTag


class Database:
    """Unified database access facade."""

    def __init__(self, db_path: Path):
        self._connection = DatabaseConnection(db_path)

        # Initialize repositories
        self.articles = ArticleRepository(self._connection)
        self.feeds = FeedRepository(self._connection)
        self.saved = SavedArticleRepository(self._connection)
        self.summaries = SummaryRepository(self._connection)
        self.tags = TagRepository(self._connection)

    # ─────────────────────────────────────────────────────────────
    # Feed operations (delegated to FeedRepository)
    # ─────────────────────────────────────────────────────────────

    def add_feed(
        self,
        owner_id: int,
        url: str,
        title: str,
        category: str | None = None,
        tags: list[str] | None = None,
        favicon_url: str | None = None,
    ) -> int:
        return self.feeds.add(owner_id, url, title, category, tags, favicon_url)

    def get_feed(self, feed_id: int, owner_id: int) -> DBFeed | None:
        return self.feeds.get(feed_id, owner_id)

    def get_feed_by_url(self, owner_id: int, url: str) -> DBFeed | None:
        return self.feeds.get_by_url(owner_id, url)

    def get_feeds(self, owner_id: int) -> list[DBFeed]:
        return self.feeds.get_all(owner_id)

    def update_feed(
        self,
        feed_id: int,
        owner_id: int,
        title: str | None = None,
        category: str | None = None,
        tags: list[str] | None = None,
    ):
        return self.feeds.update(feed_id, owner_id, title, category, tags)

    def update_feed_sync(self, feed_id: int, synced_at: datetime, new_articles: int):
        return self.feeds.update_sync(feed_id, synced_at, new_articles)

    def set_feed_has_new_content(self, feed_id: int, has_new_content: bool = True):
        return self.feeds.set_has_new_content(feed_id, has_new_content)

    def delete_feed(self, feed_id: int, owner_id: int):
        return self.feeds.delete(feed_id, owner_id)

    # ─────────────────────────────────────────────────────────────
    # Article operations (delegated to ArticleRepository)
    # ─────────────────────────────────────────────────────────────

    def insert_articles(self, owner_id: int, feed_id: int, drafts: list[ArticleDraft]) -> list[int]:
        return self.articles.add_many(owner_id, feed_id, drafts)

    def get_article(self, article_id: int, owner_id: int) -> DBArticle | None:
        return self.articles.get(article_id, owner_id)

    def get_article_by_url(self, owner_id: int, url: str) -> DBArticle | None:
        return self.articles.get_by_url(owner_id, url)

    def get_existing_article_urls(
        self,
        owner_id: int,
        urls: list[str],
        feed_id: int | None = None,
    ) -> set[str]:
        return self.articles.existing_urls(owner_id, urls, feed_id)

    def get_articles(
        self,
        owner_id: int,
        feed_id: int | None = None,
        tags: list[str] | None = None,
        is_read: bool | None = None,
        is_saved: bool | None = None,
        limit: int | None = 50,
        offset: int = 0,
    ) -> list[DBArticle]:
        return self.articles.get_many(owner_id, feed_id, tags, is_read, is_saved, limit, offset)

    def mark_read(self, article_id: int, owner_id: int, is_read: bool = True) -> bool:
        return self.articles.mark_read(article_id, owner_id, is_read)

    def update_article_tags(self, article_id: int, owner_id: int, tags: list[str]):
        return self.articles.update_tags(article_id, owner_id, tags)

    # ─────────────────────────────────────────────────────────────
    # Saved index (delegated to SavedArticleRepository)
    # ─────────────────────────────────────────────────────────────

    def toggle_saved(self, article_id: int, owner_id: int) -> bool | None:
        return self.saved.toggle(owner_id, article_id)

    def rebuild_saved_index(self, owner_id: int) -> tuple[int, int]:
        return self.saved.rebuild(owner_id)

    # ─────────────────────────────────────────────────────────────
    # Tags (delegated to TagRepository)
    # ─────────────────────────────────────────────────────────────

    def get_tags(self, owner_id: int) -> list[DBTag]:
        return self.tags.get_all(owner_id)

    # ─────────────────────────────────────────────────────────────
    # Summaries (delegated to SummaryRepository)
    # ─────────────────────────────────────────────────────────────

    def get_summary(self, owner_id: int, article_id: int) -> DBArticleSummary | None:
        return self.summaries.get(owner_id, article_id)

    def find_or_create_summary(self, owner_id: int, article_id: int, summary: str) -> DBArticleSummary:
        return self.summaries.find_or_create(owner_id, article_id, summary)
