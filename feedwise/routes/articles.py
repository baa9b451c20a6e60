"""
Article routes: listing, read/saved state, tags and summaries.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ..auth import get_current_user, verify_api_key
from ..schemas import (
    ArticleListResponse,
    ArticleResponse,
    RebuildSavedIndexResponse,
    SavedArticleListResponse,
    SavedArticleResponse,
    SaveToggleResponse,
    SummaryResponse,
    UpdateArticleTagsRequest,
)
from ..services import ArticleServiceDep

router = APIRouter(
    prefix="/articles",
    tags=["articles"],
    dependencies=[Depends(verify_api_key)]
)

UserId = Annotated[int, Depends(get_current_user)]


# ─────────────────────────────────────────────────────────────
# Listing (static paths first)
# ─────────────────────────────────────────────────────────────

@router.get("")
async def list_articles(
    service: ArticleServiceDep,
    user_id: UserId,
    feed_id: int | None = None,
    tags: Annotated[list[str] | None, Query()] = None,
    is_read: bool | None = None,
    saved: bool | None = None,
    sort: str = Query(default="relevance", pattern="^(relevance|newest)$"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> ArticleListResponse:
    """
    Get articles, optionally filtered by feed, tags or state.

    Args:
        tags: Repeat the parameter to require several tags (all must match)
        sort: 'relevance' ranks by score with date tie-break, 'newest' by date
    """
    page, total = service.list_articles(
        user_id,
        feed_id=feed_id,
        tags=tags,
        is_read=is_read,
        saved=saved,
        sort_by=sort,
        limit=limit,
        offset=offset,
    )
    return ArticleListResponse(
        articles=[ArticleResponse.from_scored(s) for s in page],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/saved")
async def list_saved(
    service: ArticleServiceDep,
    user_id: UserId,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> SavedArticleListResponse:
    """Saved articles, most recently saved first."""
    page, total = service.list_saved(user_id, limit=limit, offset=offset)
    return SavedArticleListResponse(
        items=[
            SavedArticleResponse(
                article=ArticleResponse.from_scored(scored),
                saved_at=entry.saved_at.isoformat(),
            )
            for scored, entry in page
        ],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post("/saved/rebuild")
async def rebuild_saved_index(service: ArticleServiceDep, user_id: UserId) -> RebuildSavedIndexResponse:
    """Reconcile the saved index with the articles' saved flags."""
    created, removed = service.rebuild_saved_index(user_id)
    return RebuildSavedIndexResponse(created=created, removed=removed)


# ─────────────────────────────────────────────────────────────
# Single Article
# ─────────────────────────────────────────────────────────────

@router.get("/{article_id}")
async def get_article(article_id: int, service: ArticleServiceDep, user_id: UserId) -> ArticleResponse:
    return ArticleResponse.from_scored(service.get_article(user_id, article_id))


@router.put("/{article_id}/read")
async def mark_read(article_id: int, service: ArticleServiceDep, user_id: UserId) -> ArticleResponse:
    return ArticleResponse.from_scored(service.mark_read(user_id, article_id, True))


@router.put("/{article_id}/unread")
async def mark_unread(article_id: int, service: ArticleServiceDep, user_id: UserId) -> ArticleResponse:
    return ArticleResponse.from_scored(service.mark_read(user_id, article_id, False))


@router.put("/{article_id}/save")
async def toggle_save(article_id: int, service: ArticleServiceDep, user_id: UserId) -> SaveToggleResponse:
    """Toggle the saved state."""
    is_saved = service.toggle_saved(user_id, article_id)
    return SaveToggleResponse(id=article_id, is_saved=is_saved)


@router.put("/{article_id}/tags")
async def update_tags(
    article_id: int,
    request: UpdateArticleTagsRequest,
    service: ArticleServiceDep,
    user_id: UserId,
) -> ArticleResponse:
    return ArticleResponse.from_scored(service.update_tags(user_id, article_id, request.tags))


@router.get("/{article_id}/summary")
async def get_summary(article_id: int, service: ArticleServiceDep, user_id: UserId) -> SummaryResponse:
    """Extractive summary, generated on first request and cached."""
    summary, cached = await service.get_summary(user_id, article_id)
    return SummaryResponse(article_id=article_id, summary=summary, cached=cached)
