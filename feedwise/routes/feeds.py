"""
Feed routes: subscription management, refresh and new-content probe.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from ..auth import get_current_user, verify_api_key
from ..schemas import (
    AddFeedRequest,
    FeedResponse,
    IngestResponse,
    NewContentResponse,
    RefreshAllResponse,
    UpdateFeedRequest,
)
from ..services import FeedServiceDep

router = APIRouter(
    prefix="/feeds",
    tags=["feeds"],
    dependencies=[Depends(verify_api_key)]
)

UserId = Annotated[int, Depends(get_current_user)]


# ─────────────────────────────────────────────────────────────
# Feed Management
# ─────────────────────────────────────────────────────────────

@router.get("")
async def list_feeds(service: FeedServiceDep, user_id: UserId) -> list[FeedResponse]:
    """List all subscribed feeds."""
    return [FeedResponse.from_db(f) for f in service.list_feeds(user_id)]


@router.post("", status_code=201)
async def add_feed(
    request: AddFeedRequest,
    service: FeedServiceDep,
    user_id: UserId,
) -> IngestResponse:
    """Subscribe to a new feed and ingest its current items."""
    result = await service.subscribe(
        user_id,
        request.url,
        title=request.title,
        category=request.category,
        tags=request.tags,
    )
    return IngestResponse(
        feed=FeedResponse.from_db(result.feed),
        new_article_count=result.new_article_count,
    )


# ─────────────────────────────────────────────────────────────
# Refresh (static paths first)
# ─────────────────────────────────────────────────────────────

@router.post("/refresh")
async def refresh_all(service: FeedServiceDep, user_id: UserId) -> RefreshAllResponse:
    """Refresh every feed; failed feeds are listed in errors."""
    batch = await service.refresh_all(user_id)
    return RefreshAllResponse(
        feeds=[FeedResponse.from_db(r.feed) for r in batch.results],
        new_article_count=batch.new_article_count,
        errors=batch.errors,
    )


@router.get("/{feed_id}")
async def get_feed(feed_id: int, service: FeedServiceDep, user_id: UserId) -> FeedResponse:
    return FeedResponse.from_db(service.get_feed(user_id, feed_id))


@router.put("/{feed_id}")
async def update_feed(
    feed_id: int,
    request: UpdateFeedRequest,
    service: FeedServiceDep,
    user_id: UserId,
) -> FeedResponse:
    """Update a feed's title, category or tags."""
    feed = service.update_feed(
        user_id,
        feed_id,
        title=request.title,
        category=request.category,
        tags=request.tags,
    )
    return FeedResponse.from_db(feed)


@router.delete("/{feed_id}")
async def remove_feed(feed_id: int, service: FeedServiceDep, user_id: UserId) -> dict:
    """Unsubscribe from a feed and delete its articles."""
    service.unsubscribe(user_id, feed_id)
    return {"success": True}


@router.post("/{feed_id}/refresh")
async def refresh_feed(feed_id: int, service: FeedServiceDep, user_id: UserId) -> IngestResponse:
    """Fetch a feed now and store new articles."""
    result = await service.refresh_feed(user_id, feed_id)
    return IngestResponse(
        feed=FeedResponse.from_db(result.feed),
        new_article_count=result.new_article_count,
    )


@router.get("/{feed_id}/has-new-content")
async def has_new_content(feed_id: int, service: FeedServiceDep, user_id: UserId) -> NewContentResponse:
    """Cheap check for items not yet ingested."""
    found = await service.has_new_content(user_id, feed_id)
    return NewContentResponse(feed_id=feed_id, has_new_content=found)
