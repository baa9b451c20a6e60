"""
Domain exceptions and lookup helpers.

Every error raised by the ingestion pipeline or the repositories derives from
FeedWiseError and carries enough context (feed id, url) for operator logs.
The HTTP layer maps them to status codes with generic messages; see
register_exception_handlers().
"""

import logging
from typing import TypeVar

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FeedWiseError(Exception):
    """Base class for domain errors."""

    status_code = 500
    public_message = "Server error"

    def __init__(
        self,
        message: str = "",
        feed_id: int | None = None,
        url: str | None = None,
    ):
        super().__init__(message or self.public_message)
        self.feed_id = feed_id
        self.url = url

    def context(self) -> str:
        """Operator-facing description including feed id and url."""
        parts = [str(self)]
        if self.feed_id is not None:
            parts.append(f"feed_id={self.feed_id}")
        if self.url:
            parts.append(f"url={self.url}")
        return " ".join(parts)


class FeedUnreachable(FeedWiseError):
    """Network failure or timeout while fetching a feed. Retry by re-triggering."""

    status_code = 502
    public_message = "Feed could not be reached"


class FeedUnparsable(FeedWiseError):
    """The fetched document is not a valid RSS/Atom feed."""

    status_code = 400
    public_message = "Invalid feed URL or format"


class InvalidFeedSource(FeedWiseError):
    """Ingestion failed because the parser could not produce items."""

    status_code = 400
    public_message = "Error refreshing feed"

    def __init__(
        self,
        cause: FeedWiseError,
        feed_id: int | None = None,
        url: str | None = None,
    ):
        super().__init__(str(cause), feed_id=feed_id, url=url or cause.url)
        self.cause = cause
        self.retryable = isinstance(cause, FeedUnreachable)
        if self.retryable:
            self.status_code = FeedUnreachable.status_code


class DuplicateFeedSubscription(FeedWiseError):
    status_code = 400
    public_message = "Feed already exists"


class FeedNotFound(FeedWiseError):
    status_code = 404
    public_message = "Feed not found"


class ArticleNotFound(FeedWiseError):
    status_code = 404
    public_message = "Article not found"


class TagNotFound(FeedWiseError):
    status_code = 404
    public_message = "Tag not found"


class DuplicateTag(FeedWiseError):
    status_code = 400
    public_message = "Another tag with this name already exists"


class SummaryGenerationDegraded(FeedWiseError):
    """
    The primary summarizer failed and the fallback heuristic was used.

    Never raised to callers; constructed for logging only.
    """

    public_message = "Summary generated with fallback heuristic"


def require_resource(resource: T | None, error: FeedWiseError) -> T:
    """
    Raise the given error if resource is None, otherwise return the resource.

    Usage:
        feed = require_resource(db.get_feed(id, owner_id), FeedNotFound(feed_id=id))
    """
    if resource is None:
        raise error
    return resource


def require_article(article: T | None, article_id: int | None = None) -> T:
    """Raise ArticleNotFound if article is None."""
    if article is None:
        raise ArticleNotFound(f"Article {article_id} not found")
    return article


def require_feed(feed: T | None, feed_id: int | None = None) -> T:
    """Raise FeedNotFound if feed is None."""
    return require_resource(feed, FeedNotFound(f"Feed {feed_id} not found", feed_id=feed_id))


def require_tag(tag: T | None, tag_id: int | None = None) -> T:
    """Raise TagNotFound if tag is None."""
    return require_resource(tag, TagNotFound(f"Tag {tag_id} not found"))


async def feedwise_error_handler(request: Request, exc: FeedWiseError) -> JSONResponse:
    """Log the full context and answer with a generic message."""
    if exc.status_code >= 500:
        logger.error(f"[{exc.status_code}] {exc.context()} - {request.method} {request.url.path}")
    else:
        logger.warning(f"[{exc.status_code}] {exc.context()} - {request.method} {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.public_message},
    )


def register_exception_handlers(app: FastAPI):
    """Attach domain error handling to a FastAPI app."""
    app.add_exception_handler(FeedWiseError, feedwise_error_handler)
