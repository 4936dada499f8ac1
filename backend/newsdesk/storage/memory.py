"""
In-memory storage adapter.

Process-local maps keyed by id. Each method runs without awaiting in the
middle, so a uniqueness check and the write that follows it cannot interleave
with another request on the same event loop.
"""
import itertools
import uuid
from typing import Any

from .base import DuplicateRecord, Storage
from .records import Account, NewsItem, Subscription, SupportTicket, utc_now


def _fold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


class MemoryStorage(Storage):
    name = "memory"

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._news: dict[int, NewsItem] = {}
        self._subscriptions: dict[int, Subscription] = {}
        self._tickets: dict[int, SupportTicket] = {}
        self._events: set[str] = set()
        self._news_ids = itertools.count(1)
        self._subscription_ids = itertools.count(1)
        self._ticket_ids = itertools.count(1)

    # -------- accounts --------
    def _check_account_unique(self, candidate: Account) -> None:
        for other in self._accounts.values():
            if other.id == candidate.id:
                continue
            if _fold(other.username) == _fold(candidate.username):
                raise DuplicateRecord("username")
            if _fold(other.email) == _fold(candidate.email):
                raise DuplicateRecord("email")
            if candidate.telegram_id and other.telegram_id == candidate.telegram_id:
                raise DuplicateRecord("telegram_id")

    async def get_account(self, account_id: str) -> Account | None:
        return self._accounts.get(str(account_id))

    async def get_account_by_username(self, username: str) -> Account | None:
        key = _fold(username)
        return next((a for a in self._accounts.values() if _fold(a.username) == key), None)

    async def get_account_by_email(self, email: str) -> Account | None:
        key = _fold(email)
        return next((a for a in self._accounts.values() if _fold(a.email) == key), None)

    async def get_account_by_telegram_id(self, telegram_id: str) -> Account | None:
        return next((a for a in self._accounts.values() if a.telegram_id == telegram_id), None)

    async def get_account_by_stripe_customer(self, customer_id: str) -> Account | None:
        return next((a for a in self._accounts.values() if a.stripe_customer_id == customer_id), None)

    async def create_account(self, **fields: Any) -> Account:
        account = Account(id=str(uuid.uuid4()), created_at=utc_now(), **fields)
        self._check_account_unique(account)
        self._accounts[account.id] = account
        return account

    async def update_account(self, account_id: str, **changes: Any) -> Account | None:
        current = self._accounts.get(str(account_id))
        if current is None:
            return None
        updated = current.model_copy(update=changes)
        self._check_account_unique(updated)
        self._accounts[updated.id] = updated
        return updated

    async def delete_account(self, account_id: str) -> bool:
        return self._accounts.pop(str(account_id), None) is not None

    async def list_accounts(self, query: str | None = None) -> list[Account]:
        rows = list(self._accounts.values())
        if query:
            q = query.casefold()
            rows = [a for a in rows if q in a.username.casefold() or q in a.email.casefold()]
        return sorted(rows, key=lambda a: a.created_at, reverse=True)

    async def count_accounts(self, role: str | None = None) -> int:
        return sum(1 for a in self._accounts.values() if role is None or a.role == role)

    # -------- news --------
    def _sorted_news(self, rows) -> list[NewsItem]:
        return sorted(rows, key=lambda n: (n.created_at, n.id), reverse=True)

    async def get_news(self, news_id: int) -> NewsItem | None:
        return self._news.get(news_id)

    async def create_news(self, **fields: Any) -> NewsItem:
        now = utc_now()
        item = NewsItem(id=next(self._news_ids), created_at=now, updated_at=now, **fields)
        self._news[item.id] = item
        return item

    async def update_news(self, news_id: int, **changes: Any) -> NewsItem | None:
        current = self._news.get(news_id)
        if current is None:
            return None
        updated = current.model_copy(update={**changes, "updated_at": utc_now()})
        self._news[news_id] = updated
        return updated

    async def delete_news(self, news_id: int) -> bool:
        return self._news.pop(news_id, None) is not None

    async def list_news(self) -> list[NewsItem]:
        return self._sorted_news(self._news.values())

    async def list_news_by_category(self, category: str) -> list[NewsItem]:
        key = category.casefold()
        return self._sorted_news(n for n in self._news.values() if n.category.casefold() == key)

    async def list_news_by_region(self, region: str) -> list[NewsItem]:
        key = region.casefold()
        return self._sorted_news(n for n in self._news.values() if _fold(n.region) == key)

    async def list_live_news(self) -> list[NewsItem]:
        return self._sorted_news(n for n in self._news.values() if n.is_live)

    async def search_news(self, query: str) -> list[NewsItem]:
        q = query.casefold()

        def _hit(n: NewsItem) -> bool:
            return q in n.title.casefold() or q in n.content.casefold() or q in (n.summary or "").casefold()

        return self._sorted_news(n for n in self._news.values() if _hit(n))

    # -------- subscriptions --------
    async def get_subscription(self, subscription_id: int) -> Subscription | None:
        return self._subscriptions.get(subscription_id)

    async def get_subscription_by_ref(self, external_ref: str) -> Subscription | None:
        return next((s for s in self._subscriptions.values() if s.external_ref == external_ref), None)

    async def create_subscription(self, **fields: Any) -> Subscription:
        sub = Subscription(id=next(self._subscription_ids), created_at=utc_now(), **fields)
        self._subscriptions[sub.id] = sub
        return sub

    async def update_subscription(self, subscription_id: int, **changes: Any) -> Subscription | None:
        current = self._subscriptions.get(subscription_id)
        if current is None:
            return None
        updated = current.model_copy(update=changes)
        self._subscriptions[subscription_id] = updated
        return updated

    async def list_subscriptions(self, account_id: str) -> list[Subscription]:
        return [s for s in self._subscriptions.values() if s.account_id == str(account_id)]

    # -------- support tickets --------
    async def get_ticket(self, ticket_id: int) -> SupportTicket | None:
        return self._tickets.get(ticket_id)

    async def create_ticket(self, **fields: Any) -> SupportTicket:
        now = utc_now()
        ticket = SupportTicket(id=next(self._ticket_ids), created_at=now, updated_at=now, **fields)
        self._tickets[ticket.id] = ticket
        return ticket

    async def update_ticket(self, ticket_id: int, **changes: Any) -> SupportTicket | None:
        current = self._tickets.get(ticket_id)
        if current is None:
            return None
        updated = current.model_copy(update={**changes, "updated_at": utc_now()})
        self._tickets[ticket_id] = updated
        return updated

    async def list_tickets(self, account_id: str | None = None) -> list[SupportTicket]:
        rows = [t for t in self._tickets.values() if account_id is None or t.account_id == str(account_id)]
        return sorted(rows, key=lambda t: (t.created_at, t.id), reverse=True)

    # -------- payment webhook ledger --------
    async def record_event(self, event_id: str) -> bool:
        if event_id in self._events:
            return False
        self._events.add(event_id)
        return True

    async def forget_event(self, event_id: str) -> None:
        self._events.discard(event_id)
