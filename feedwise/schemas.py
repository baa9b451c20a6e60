"""
Pydantic models for API request/response validation.
"""

from pydantic import BaseModel, Field, field_validator

from .database import DBArticle, DBFeed, DBTag
from .scoring import ScoredArticle


# ─────────────────────────────────────────────────────────────
# Article Schemas
# ─────────────────────────────────────────────────────────────

class ArticleResponse(BaseModel):
    """Article for list and detail views."""
    id: int
    feed_id: int
    url: str
    title: str
    description: str
    author: str
    published_at: str
    tags: list[str]
    image_url: str
    is_read: bool
    is_saved: bool
    relevance_score: float

    @classmethod
    def from_db(cls, article: DBArticle, score: float) -> "ArticleResponse":
        return cls(
            id=article.id,
            feed_id=article.feed_id,
            url=article.url,
            title=article.title,
            description=article.description,
            author=article.author,
            published_at=article.published_at.isoformat(),
            tags=article.tags,
            image_url=article.image_url,
            is_read=article.is_read,
            is_saved=article.is_saved,
            relevance_score=score,
        )

    @classmethod
    def from_scored(cls, scored: ScoredArticle) -> "ArticleResponse":
        return cls.from_db(scored.article, scored.score)


class ArticleListResponse(BaseModel):
    """A page of articles."""
    articles: list[ArticleResponse]
    total: int
    limit: int
    offset: int


class SavedArticleResponse(BaseModel):
    """Saved article with the time it was saved."""
    article: ArticleResponse
    saved_at: str


class SavedArticleListResponse(BaseModel):
    items: list[SavedArticleResponse]
    total: int
    limit: int
    offset: int


class SaveToggleResponse(BaseModel):
    id: int
    is_saved: bool


class UpdateArticleTagsRequest(BaseModel):
    """Replace an article's tags."""
    tags: list[str]


class SummaryResponse(BaseModel):
    article_id: int
    summary: str
    cached: bool = False


class RebuildSavedIndexResponse(BaseModel):
    created: int
    removed: int


# ─────────────────────────────────────────────────────────────
# Feed Schemas
# ─────────────────────────────────────────────────────────────

class FeedResponse(BaseModel):
    """Feed for list view."""
    id: int
    url: str
    title: str
    favicon_url: str | None
    category: str | None
    tags: list[str]
    unread_count: int
    last_synced_at: str | None
    has_new_content: bool

    @classmethod
    def from_db(cls, feed: DBFeed) -> "FeedResponse":
        return cls(
            id=feed.id,
            url=feed.url,
            title=feed.title,
            favicon_url=feed.favicon_url,
            category=feed.category,
            tags=feed.tags,
            unread_count=feed.unread_count,
            last_synced_at=feed.last_synced_at.isoformat() if feed.last_synced_at else None,
            has_new_content=feed.has_new_content,
        )


class AddFeedRequest(BaseModel):
    """Request to subscribe to a feed."""
    url: str = Field(min_length=1)
    title: str | None = None
    category: str | None = None
    tags: list[str] = Field(default_factory=list)


class UpdateFeedRequest(BaseModel):
    """Request to update a feed."""
    title: str | None = None
    category: str | None = None
    tags: list[str] | None = None


class IngestResponse(BaseModel):
    """Result of refreshing one feed."""
    feed: FeedResponse
    new_article_count: int


class RefreshAllResponse(BaseModel):
    """Result of refreshing every feed."""
    feeds: list[FeedResponse]
    new_article_count: int
    errors: dict[int, str]


class NewContentResponse(BaseModel):
    feed_id: int
    has_new_content: bool


# ─────────────────────────────────────────────────────────────
# Tag Schemas
# ─────────────────────────────────────────────────────────────

class TagResponse(BaseModel):
    id: int
    name: str
    color: str

    @classmethod
    def from_db(cls, tag: DBTag) -> "TagResponse":
        return cls(id=tag.id, name=tag.name, color=tag.color)


def _tag_name(value: str | None) -> str | None:
    """Strip a tag name; names that are blank after stripping are rejected."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("Tag name must not be blank")
    return value


class CreateTagRequest(BaseModel):
    name: str = Field(min_length=1, max_length=64)
    color: str | None = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _tag_name(value)


class UpdateTagRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=64)
    color: str | None = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str | None) -> str | None:
        return _tag_name(value)


class ScanArticlesRequest(BaseModel):
    """Apply a tag to every article mentioning it."""
    tag_name: str = Field(min_length=1, max_length=64)

    @field_validator("tag_name")
    @classmethod
    def check_tag_name(cls, value: str) -> str:
        return _tag_name(value)


class ScanArticlesResponse(BaseModel):
    tag: TagResponse
    tagged_article_ids: list[int]
    newly_tagged: int
