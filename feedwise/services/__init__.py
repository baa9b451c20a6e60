"""
Service layer for business logic.

Services encapsulate business logic, keeping routes as thin HTTP adapters.
Each service receives its dependencies via constructor injection.

Usage in routes:
    from ..services import ArticleServiceDep

    @router.get("/articles")
    async def list_articles(
        service: ArticleServiceDep,
        user_id: Annotated[int, Depends(get_current_user)]
    ):
        return service.list_articles(user_id)
"""

from typing import Annotated

from fastapi import Depends

from ..config import state, get_db
from ..database import Database

from .article_service import ArticleService
from .feed_service import FeedService
from .tag_service import TagService

__all__ = [
    # Services
    "ArticleService",
    "FeedService",
    "TagService",
    # Dependency factories
    "get_article_service",
    "get_feed_service",
    "get_tag_service",
    # Type aliases for dependency injection
    "ArticleServiceDep",
    "FeedServiceDep",
    "TagServiceDep",
]


def get_article_service(db: Annotated[Database, Depends(get_db)]) -> ArticleService:
    """Dependency to get ArticleService instance."""
    return ArticleService(
        db=db,
        summarizer=state.summarizer,
    )


def get_feed_service(db: Annotated[Database, Depends(get_db)]) -> FeedService:
    """Dependency to get FeedService instance."""
    return FeedService(
        db=db,
        ingestion=state.ingestion,
    )


def get_tag_service(db: Annotated[Database, Depends(get_db)]) -> TagService:
    """Dependency to get TagService instance."""
    return TagService(db=db)


ArticleServiceDep = Annotated[ArticleService, Depends(get_article_service)]
FeedServiceDep = Annotated[FeedService, Depends(get_feed_service)]
TagServiceDep = Annotated[TagService, Depends(get_tag_service)]
