"""
Database models - dataclasses for database entities.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class DBFeed:
    id: int
    owner_id: int
    url: str
    title: str
    category: str | None
    favicon_url: str | None = None
    tags: list[str] = field(default_factory=list)
    last_synced_at: datetime | None = None
    unread_count: int = 0
    has_new_content: bool = False


@dataclass
class DBArticle:
    id: int
    owner_id: int
    feed_id: int
    url: str
    title: str
    description: str
    author: str
    published_at: datetime
    tags: list[str] = field(default_factory=list)
    image_url: str = ""
    is_read: bool = False
    is_saved: bool = False
    relevance_score: float = 0.5
    created_at: datetime | None = None


@dataclass
class DBSavedArticle:
    article_id: int
    owner_id: int
    saved_at: datetime


@dataclass
class DBTag:
    id: int
    owner_id: int
    name: str
    color: str


@dataclass
class DBArticleSummary:
    article_id: int
    owner_id: int
    summary: str
    created_at: datetime | None = None
