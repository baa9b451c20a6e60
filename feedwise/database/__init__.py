"""
Database module - SQLite operations for feeds, articles and tags.

Uses repository pattern for better separation of concerns.
"""

from .connection import DatabaseConnection
from .models import DBArticle, DBArticleSummary, DBFeed, DBSavedArticle, DBTag
from .article_repository import ArticleRepository
from .feed_repository import FeedRepository
from .saved_article_repository import SavedArticleRepository
from .summary_repository import SummaryRepository
from .tag_repository import TagRepository
from .database import Database

__all__ = [
    "Database",
    "DatabaseConnection",
    "DBArticle",
    "DBArticleSummary",
    "DBFeed",
    "DBSavedArticle",
    "DBTag",
    "ArticleRepository",
    "FeedRepository",
    "SavedArticleRepository",
    "SummaryRepository",
    "TagRepository",
]
