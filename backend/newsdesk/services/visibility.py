"""
Content visibility filter for public (non-staff) read paths.

Rules:
  1. Anything not `published` is invisible: dropped from lists, 404 on detail.
  2. Published, not premium: returned in full.
  3. Published premium: full for an authenticated premium account. Anyone
     else gets a teaser on detail (content replaced, other fields kept) and
     nothing in lists, so list views only show what the caller can read.

Missing and hidden items produce the same NotFound so status is not leaked.
Staff and admin management views do not go through this module.
"""
from typing import Iterable

from newsdesk.core.errors import NotFound
from newsdesk.schemas.news import NewsOut
from newsdesk.storage.records import AccountProfile, NewsItem

PREMIUM_PLACEHOLDER = "This is premium content. Subscribe to access the full article."


def has_premium_access(viewer: AccountProfile | None) -> bool:
    return viewer is not None and viewer.is_premium


def is_public(item: NewsItem) -> bool:
    return item.status == "published"


def can_read_full(item: NewsItem, viewer: AccountProfile | None) -> bool:
    return is_public(item) and (not item.is_premium or has_premium_access(viewer))


def visible_list(items: Iterable[NewsItem], viewer: AccountProfile | None) -> list[dict]:
    """Public list projection: only items the viewer can read in full."""
    return [
        NewsOut.from_record(item, isPremiumContent=item.is_premium).model_dump(mode="json")
        for item in items
        if can_read_full(item, viewer)
    ]


def visible_detail(item: NewsItem | None, viewer: AccountProfile | None) -> dict:
    """Public detail projection: full item, premium teaser, or NotFound."""
    if item is None or not is_public(item):
        raise NotFound("News not found", code="NEWS_NOT_FOUND")
    if can_read_full(item, viewer):
        return NewsOut.from_record(item, isPremiumContent=item.is_premium).model_dump(mode="json")
    teaser = NewsOut.from_record(item, isPremiumContent=True)
    teaser.content = PREMIUM_PLACEHOLDER
    return teaser.model_dump(mode="json")
