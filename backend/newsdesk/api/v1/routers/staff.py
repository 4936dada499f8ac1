# newsdesk/api/v1/routers/staff.py
"""
Staff content management. Reads here are unfiltered: staff see drafts,
archived items and full premium bodies.
"""
from fastapi import APIRouter, Depends, Path, status

from newsdesk.api.v1.deps import get_content_service, require_staff
from newsdesk.schemas.news import NewsCreateIn, NewsOut, NewsUpdateIn
from newsdesk.services.content import ContentService
from newsdesk.storage.records import AccountProfile

router = APIRouter(prefix="/staff/news", tags=["staff"], dependencies=[Depends(require_staff)])


def _out(item) -> dict:
    return NewsOut.from_record(item).model_dump(mode="json")


@router.get("")
async def list_all_news(content: ContentService = Depends(get_content_service)):
    return {"success": True, "data": [_out(n) for n in await content.list_all()]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_news(
    body: NewsCreateIn,
    staff: AccountProfile = Depends(require_staff),
    content: ContentService = Depends(get_content_service),
):
    """
    Create a news item authored by the caller.

    Items created directly as "published" get their publishedAt stamped now.
    """
    return {"success": True, "data": _out(await content.create(staff, body))}


@router.get("/{news_id}")
async def get_news(news_id: int = Path(..., ge=1), content: ContentService = Depends(get_content_service)):
    return {"success": True, "data": _out(await content.get(news_id))}


@router.patch("/{news_id}")
async def update_news(
    body: NewsUpdateIn,
    news_id: int = Path(..., ge=1),
    content: ContentService = Depends(get_content_service),
):
    """
    Partial update. Status transitions are free-form; publishedAt is set the
    first time the item becomes "published" and is never changed afterwards.
    """
    return {"success": True, "data": _out(await content.update(news_id, body))}


@router.delete("/{news_id}")
async def delete_news(news_id: int = Path(..., ge=1), content: ContentService = Depends(get_content_service)):
    await content.delete(news_id)
    return {"success": True, "data": {"ok": True}}
