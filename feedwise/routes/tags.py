"""
Tag routes: CRUD and retroactive tagging.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from ..auth import get_current_user, verify_api_key
from ..schemas import (
    CreateTagRequest,
    ScanArticlesRequest,
    ScanArticlesResponse,
    TagResponse,
    UpdateTagRequest,
)
from ..services import TagServiceDep

router = APIRouter(
    prefix="/tags",
    tags=["tags"],
    dependencies=[Depends(verify_api_key)]
)

UserId = Annotated[int, Depends(get_current_user)]


@router.get("")
async def list_tags(service: TagServiceDep, user_id: UserId) -> list[TagResponse]:
    return [TagResponse.from_db(t) for t in service.list_tags(user_id)]


@router.post("", status_code=201)
async def create_tag(request: CreateTagRequest, service: TagServiceDep, user_id: UserId) -> TagResponse:
    return TagResponse.from_db(service.create_tag(user_id, request.name, request.color))


@router.post("/scan-articles")
async def scan_articles(
    request: ScanArticlesRequest,
    service: TagServiceDep,
    user_id: UserId,
) -> ScanArticlesResponse:
    """Tag every article whose title or description mentions the tag."""
    tag, matched, newly_tagged = service.scan_articles(user_id, request.tag_name)
    return ScanArticlesResponse(
        tag=TagResponse.from_db(tag),
        tagged_article_ids=matched,
        newly_tagged=newly_tagged,
    )


@router.get("/{tag_id}")
async def get_tag(tag_id: int, service: TagServiceDep, user_id: UserId) -> TagResponse:
    return TagResponse.from_db(service.get_tag(user_id, tag_id))


@router.put("/{tag_id}")
async def update_tag(
    tag_id: int,
    request: UpdateTagRequest,
    service: TagServiceDep,
    user_id: UserId,
) -> TagResponse:
    return TagResponse.from_db(service.update_tag(user_id, tag_id, request.name, request.color))


@router.delete("/{tag_id}")
async def delete_tag(tag_id: int, service: TagServiceDep, user_id: UserId) -> dict:
    service.delete_tag(user_id, tag_id)
    return {"success": True}
