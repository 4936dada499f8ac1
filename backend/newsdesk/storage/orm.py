"""
Tortoise ORM storage adapter (durable).

Requires Tortoise to be initialised (see core.db). Unique constraints live in
the database schema; IntegrityError is translated to DuplicateRecord.
"""
import uuid
from typing import Any

from tortoise.exceptions import IntegrityError
from tortoise.expressions import Q

from newsdesk import models as orm
from newsdesk.core.db import close_db

from .base import DuplicateRecord, Storage
from .records import Account, NewsItem, Subscription, SupportTicket


def _valid_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def _duplicate(exc: IntegrityError) -> DuplicateRecord:
    text = str(exc).lower()
    for field in ("username", "email", "telegram_id", "event_id", "external_ref"):
        if field in text:
            return DuplicateRecord(field)
    return DuplicateRecord("unknown")


def _account(row: orm.User) -> Account:
    return Account(
        id=str(row.id),
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        role=row.role,
        is_premium=row.is_premium,
        telegram_id=row.telegram_id,
        locale=row.locale,
        country=row.country,
        city=row.city,
        stripe_customer_id=row.stripe_customer_id,
        stripe_subscription_id=row.stripe_subscription_id,
        created_at=row.created_at,
    )


def _news(row: orm.News) -> NewsItem:
    return NewsItem(
        id=row.id,
        title=row.title,
        content=row.content,
        summary=row.summary,
        category=row.category,
        region=row.region,
        image_url=row.image_url,
        is_live=row.is_live,
        is_premium=row.is_premium,
        status=row.status,
        author_id=row.author_id,
        published_at=row.published_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _subscription(row: orm.Subscription) -> Subscription:
    return Subscription(
        id=row.id,
        account_id=str(row.user_id),
        plan=row.plan,
        status=row.status,
        start_date=row.start_date,
        end_date=row.end_date,
        external_ref=row.external_ref,
        created_at=row.created_at,
    )


def _ticket(row: orm.SupportTicket) -> SupportTicket:
    return SupportTicket(
        id=row.id,
        account_id=str(row.user_id),
        subject=row.subject,
        message=row.message,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _owner_fields(fields: dict[str, Any]) -> dict[str, Any]:
    data = dict(fields)
    if "account_id" in data:
        data["user_id"] = data.pop("account_id")
    return data


class TortoiseStorage(Storage):
    name = "tortoise"

    # -------- accounts --------
    async def _account_taken(self, username: str | None, email: str | None, exclude: str | None = None) -> None:
        if username:
            qs = orm.User.filter(username__iexact=username)
            if exclude:
                qs = qs.exclude(id=exclude)
            if await qs.exists():
                raise DuplicateRecord("username")
        if email:
            qs = orm.User.filter(email__iexact=email)
            if exclude:
                qs = qs.exclude(id=exclude)
            if await qs.exists():
                raise DuplicateRecord("email")

    async def get_account(self, account_id: str) -> Account | None:
        if not _valid_uuid(account_id):
            return None
        row = await orm.User.get_or_none(id=account_id)
        return _account(row) if row else None

    async def get_account_by_username(self, username: str) -> Account | None:
        row = await orm.User.filter(username__iexact=username).first()
        return _account(row) if row else None

    async def get_account_by_email(self, email: str) -> Account | None:
        row = await orm.User.filter(email__iexact=email).first()
        return _account(row) if row else None

    async def get_account_by_telegram_id(self, telegram_id: str) -> Account | None:
        row = await orm.User.get_or_none(telegram_id=telegram_id)
        return _account(row) if row else None

    async def get_account_by_stripe_customer(self, customer_id: str) -> Account | None:
        row = await orm.User.filter(stripe_customer_id=customer_id).first()
        return _account(row) if row else None

    async def create_account(self, **fields: Any) -> Account:
        await self._account_taken(fields.get("username"), fields.get("email"))
        try:
            row = await orm.User.create(**fields)
        except IntegrityError as exc:
            raise _duplicate(exc) from exc
        return _account(row)

    async def update_account(self, account_id: str, **changes: Any) -> Account | None:
        if not _valid_uuid(account_id):
            return None
        row = await orm.User.get_or_none(id=account_id)
        if row is None:
            return None
        await self._account_taken(changes.get("username"), changes.get("email"), exclude=account_id)
        row.update_from_dict(changes)
        try:
            await row.save()
        except IntegrityError as exc:
            raise _duplicate(exc) from exc
        return _account(row)

    async def delete_account(self, account_id: str) -> bool:
        if not _valid_uuid(account_id):
            return False
        return await orm.User.filter(id=account_id).delete() > 0

    async def list_accounts(self, query: str | None = None) -> list[Account]:
        qs = orm.User.all().order_by("-created_at")
        if query:
            qs = qs.filter(Q(username__icontains=query) | Q(email__icontains=query))
        return [_account(r) for r in await qs]

    async def count_accounts(self, role: str | None = None) -> int:
        qs = orm.User.all()
        if role is not None:
            qs = qs.filter(role=role)
        return await qs.count()

    # -------- news --------
    async def get_news(self, news_id: int) -> NewsItem | None:
        row = await orm.News.get_or_none(id=news_id)
        return _news(row) if row else None

    async def create_news(self, **fields: Any) -> NewsItem:
        row = await orm.News.create(**fields)
        return _news(row)

    async def update_news(self, news_id: int, **changes: Any) -> NewsItem | None:
        row = await orm.News.get_or_none(id=news_id)
        if row is None:
            return None
        row.update_from_dict(changes)
        await row.save()  # auto_now refreshes updated_at
        return _news(row)

    async def delete_news(self, news_id: int) -> bool:
        return await orm.News.filter(id=news_id).delete() > 0

    async def _news_list(self, qs) -> list[NewsItem]:
        return [_news(r) for r in await qs.order_by("-created_at", "-id")]

    async def list_news(self) -> list[NewsItem]:
        return await self._news_list(orm.News.all())

    async def list_news_by_category(self, category: str) -> list[NewsItem]:
        return await self._news_list(orm.News.filter(category__iexact=category))

    async def list_news_by_region(self, region: str) -> list[NewsItem]:
        return await self._news_list(orm.News.filter(region__iexact=region))

    async def list_live_news(self) -> list[NewsItem]:
        return await self._news_list(orm.News.filter(is_live=True))

    async def search_news(self, query: str) -> list[NewsItem]:
        return await self._news_list(
            orm.News.filter(
                Q(title__icontains=query) | Q(content__icontains=query) | Q(summary__icontains=query)
            )
        )

    # -------- subscriptions --------
    async def get_subscription(self, subscription_id: int) -> Subscription | None:
        row = await orm.Subscription.get_or_none(id=subscription_id)
        return _subscription(row) if row else None

    async def get_subscription_by_ref(self, external_ref: str) -> Subscription | None:
        row = await orm.Subscription.get_or_none(external_ref=external_ref)
        return _subscription(row) if row else None

    async def create_subscription(self, **fields: Any) -> Subscription:
        try:
            row = await orm.Subscription.create(**_owner_fields(fields))
        except IntegrityError as exc:
            raise _duplicate(exc) from exc
        return _subscription(row)

    async def update_subscription(self, subscription_id: int, **changes: Any) -> Subscription | None:
        row = await orm.Subscription.get_or_none(id=subscription_id)
        if row is None:
            return None
        row.update_from_dict(_owner_fields(changes))
        await row.save()
        return _subscription(row)

    async def list_subscriptions(self, account_id: str) -> list[Subscription]:
        if not _valid_uuid(account_id):
            return []
        rows = await orm.Subscription.filter(user_id=account_id).order_by("id")
        return [_subscription(r) for r in rows]

    # -------- support tickets --------
    async def get_ticket(self, ticket_id: int) -> SupportTicket | None:
        row = await orm.SupportTicket.get_or_none(id=ticket_id)
        return _ticket(row) if row else None

    async def create_ticket(self, **fields: Any) -> SupportTicket:
        row = await orm.SupportTicket.create(**_owner_fields(fields))
        return _ticket(row)

    async def update_ticket(self, ticket_id: int, **changes: Any) -> SupportTicket | None:
        row = await orm.SupportTicket.get_or_none(id=ticket_id)
        if row is None:
            return None
        row.update_from_dict(_owner_fields(changes))
        await row.save()
        return _ticket(row)

    async def list_tickets(self, account_id: str | None = None) -> list[SupportTicket]:
        qs = orm.SupportTicket.all()
        if account_id is not None:
            if not _valid_uuid(account_id):
                return []
            qs = qs.filter(user_id=account_id)
        return [_ticket(r) for r in await qs.order_by("-created_at", "-id")]

    # -------- payment webhook ledger --------
    async def record_event(self, event_id: str) -> bool:
        try:
            await orm.ProcessedEvent.create(event_id=event_id)
        except IntegrityError:
            return False
        return True

    async def forget_event(self, event_id: str) -> None:
        await orm.ProcessedEvent.filter(event_id=event_id).delete()

    async def close(self) -> None:
        await close_db()
