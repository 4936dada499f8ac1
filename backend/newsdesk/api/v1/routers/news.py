# newsdesk/api/v1/routers/news.py
"""
Public news reads. Every response goes through the visibility filter:
drafts and archived items never leave this router, and premium items are
listed only for premium accounts.
"""
from fastapi import APIRouter, Depends, Path, Query

from newsdesk.api.v1.deps import get_optional_account, get_storage
from newsdesk.core.errors import ValidationFailure
from newsdesk.services.visibility import visible_detail, visible_list
from newsdesk.storage.base import Storage
from newsdesk.storage.records import AccountProfile

router = APIRouter(prefix="/news", tags=["news"])


@router.get("")
async def list_news(
    viewer: AccountProfile | None = Depends(get_optional_account),
    storage: Storage = Depends(get_storage),
):
    return {"success": True, "data": visible_list(await storage.list_news(), viewer)}


@router.get("/live")
async def live_news(
    viewer: AccountProfile | None = Depends(get_optional_account),
    storage: Storage = Depends(get_storage),
):
    return {"success": True, "data": visible_list(await storage.list_live_news(), viewer)}


@router.get("/search")
async def search_news(
    q: str = Query(default="", description="Substring of title, content or summary"),
    viewer: AccountProfile | None = Depends(get_optional_account),
    storage: Storage = Depends(get_storage),
):
    """Case-insensitive substring search. An empty query is a 400."""
    query = q.strip()
    if not query:
        raise ValidationFailure("Search query is required", details=[{"field": "q", "message": "required"}])
    return {"success": True, "data": visible_list(await storage.search_news(query), viewer)}


@router.get("/category/{category}")
async def news_by_category(
    category: str,
    viewer: AccountProfile | None = Depends(get_optional_account),
    storage: Storage = Depends(get_storage),
):
    return {"success": True, "data": visible_list(await storage.list_news_by_category(category), viewer)}


@router.get("/region/{region}")
async def news_by_region(
    region: str,
    viewer: AccountProfile | None = Depends(get_optional_account),
    storage: Storage = Depends(get_storage),
):
    return {"success": True, "data": visible_list(await storage.list_news_by_region(region), viewer)}


@router.get("/{news_id}")
async def news_detail(
    news_id: int = Path(..., ge=1),
    viewer: AccountProfile | None = Depends(get_optional_account),
    storage: Storage = Depends(get_storage),
):
    """
    Single item for public readers.

    Returns the full item, or for premium content read by a non-premium
    caller a teaser with the body replaced. Missing and unpublished items
    both answer 404 NEWS_NOT_FOUND. Non-numeric ids are rejected by FastAPI
    (422) before storage is touched.
    """
    return {"success": True, "data": visible_detail(await storage.get_news(news_id), viewer)}
