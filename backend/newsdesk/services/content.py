"""
Staff-side content management.

Owns the publish bookkeeping: `published_at` is stamped the first time an
item enters `published` and is never cleared or moved afterwards, whatever
later edits do to the status. Status transitions are otherwise free-form.
"""
import logging

from newsdesk.core.errors import NotFound
from newsdesk.schemas.news import NewsCreateIn, NewsUpdateIn
from newsdesk.storage.base import Storage
from newsdesk.storage.records import AccountProfile, NewsItem, utc_now

from .messaging import TelegramNotifier

logger = logging.getLogger(__name__)

# API field name -> record field name
_FIELD_MAP = {
    "title": "title",
    "content": "content",
    "summary": "summary",
    "category": "category",
    "region": "region",
    "imageUrl": "image_url",
    "isLive": "is_live",
    "isPremium": "is_premium",
    "status": "status",
}
_NULLABLE = {"summary", "region", "image_url"}


def _record_fields(payload: dict) -> dict:
    fields = {}
    for key, value in payload.items():
        name = _FIELD_MAP[key]
        if value is None and name not in _NULLABLE:
            continue  # null on a required field means "leave unchanged"
        fields[name] = value
    return fields


class ContentService:
    def __init__(self, storage: Storage, notifier: TelegramNotifier):
        self.storage = storage
        self.notifier = notifier

    async def get(self, news_id: int) -> NewsItem:
        item = await self.storage.get_news(news_id)
        if item is None:
            raise NotFound("News not found", code="NEWS_NOT_FOUND")
        return item

    async def list_all(self) -> list[NewsItem]:
        return await self.storage.list_news()

    async def create(self, author: AccountProfile, data: NewsCreateIn) -> NewsItem:
        fields = _record_fields(data.model_dump())
        if fields.get("status") == "published":
            fields["published_at"] = utc_now()
        item = await self.storage.create_news(author_id=author.id, **fields)
        logger.info("[content] news=%s created by %s status=%s", item.id, author.id, item.status)
        if item.published_at is not None:
            await self._announce(item)
        return item

    async def update(self, news_id: int, data: NewsUpdateIn) -> NewsItem:
        current = await self.get(news_id)
        changes = _record_fields(data.model_dump(exclude_unset=True))
        first_publish = changes.get("status") == "published" and current.published_at is None
        if first_publish:
            changes["published_at"] = utc_now()
        item = await self.storage.update_news(news_id, **changes)
        if item is None:  # deleted concurrently
            raise NotFound("News not found", code="NEWS_NOT_FOUND")
        if first_publish:
            await self._announce(item)
        return item

    async def delete(self, news_id: int) -> None:
        if not await self.storage.delete_news(news_id):
            raise NotFound("News not found", code="NEWS_NOT_FOUND")
        logger.info("[content] news=%s deleted", news_id)

    async def _announce(self, item: NewsItem) -> None:
        # Notification problems never undo the publish
        try:
            await self.notifier.notify_staff(f"Published: {item.title} (#{item.id})")
            if item.is_premium:
                sent = await self.notifier.notify_premium_subscribers(self.storage, item)
                logger.info("[content] news=%s premium notifications sent=%s", item.id, sent)
        except Exception as exc:  # noqa: BLE001 - notifications are best effort
            logger.warning("[content] publish notification for news=%s failed", item.id, exc_info=exc)
