"""
Persistence interface.

Every adapter must make an update visible to the next read in the same
process and must enforce the uniqueness rules itself (username, email,
telegram id, processed webhook event id), raising DuplicateRecord instead of
relying on callers' check-then-act lookups.
"""
from abc import ABC, abstractmethod
from collections import Counter
from typing import Any

from .records import Account, NewsItem, Subscription, SupportTicket


class DuplicateRecord(Exception):
    """A write would break a uniqueness rule; `field` names the rule."""

    def __init__(self, field: str):
        super().__init__(f"duplicate {field}")
        self.field = field


class Storage(ABC):
    name: str = "abstract"

    # -------- accounts --------
    @abstractmethod
    async def get_account(self, account_id: str) -> Account | None: ...

    @abstractmethod
    async def get_account_by_username(self, username: str) -> Account | None:
        """Case-insensitive lookup."""

    @abstractmethod
    async def get_account_by_email(self, email: str) -> Account | None:
        """Case-insensitive lookup."""

    @abstractmethod
    async def get_account_by_telegram_id(self, telegram_id: str) -> Account | None: ...

    @abstractmethod
    async def get_account_by_stripe_customer(self, customer_id: str) -> Account | None: ...

    @abstractmethod
    async def create_account(self, **fields: Any) -> Account: ...

    @abstractmethod
    async def update_account(self, account_id: str, **changes: Any) -> Account | None: ...

    @abstractmethod
    async def delete_account(self, account_id: str) -> bool: ...

    @abstractmethod
    async def list_accounts(self, query: str | None = None) -> list[Account]:
        """Newest first; `query` is a substring match on username/email."""

    @abstractmethod
    async def count_accounts(self, role: str | None = None) -> int: ...

    # -------- news --------
    @abstractmethod
    async def get_news(self, news_id: int) -> NewsItem | None: ...

    @abstractmethod
    async def create_news(self, **fields: Any) -> NewsItem: ...

    @abstractmethod
    async def update_news(self, news_id: int, **changes: Any) -> NewsItem | None:
        """Applies `changes` and refreshes updated_at."""

    @abstractmethod
    async def delete_news(self, news_id: int) -> bool: ...

    @abstractmethod
    async def list_news(self) -> list[NewsItem]:
        """All items regardless of status, newest first."""

    @abstractmethod
    async def list_news_by_category(self, category: str) -> list[NewsItem]: ...

    @abstractmethod
    async def list_news_by_region(self, region: str) -> list[NewsItem]: ...

    @abstractmethod
    async def list_live_news(self) -> list[NewsItem]: ...

    @abstractmethod
    async def search_news(self, query: str) -> list[NewsItem]:
        """Case-insensitive substring over title, content and summary."""

    # -------- subscriptions --------
    @abstractmethod
    async def get_subscription(self, subscription_id: int) -> Subscription | None: ...

    @abstractmethod
    async def get_subscription_by_ref(self, external_ref: str) -> Subscription | None: ...

    @abstractmethod
    async def create_subscription(self, **fields: Any) -> Subscription: ...

    @abstractmethod
    async def update_subscription(self, subscription_id: int, **changes: Any) -> Subscription | None: ...

    @abstractmethod
    async def list_subscriptions(self, account_id: str) -> list[Subscription]: ...

    # -------- support tickets --------
    @abstractmethod
    async def get_ticket(self, ticket_id: int) -> SupportTicket | None: ...

    @abstractmethod
    async def create_ticket(self, **fields: Any) -> SupportTicket: ...

    @abstractmethod
    async def update_ticket(self, ticket_id: int, **changes: Any) -> SupportTicket | None: ...

    @abstractmethod
    async def list_tickets(self, account_id: str | None = None) -> list[SupportTicket]: ...

    # -------- payment webhook ledger --------
    @abstractmethod
    async def record_event(self, event_id: str) -> bool:
        """Remember an event id; False if it had already been recorded."""

    @abstractmethod
    async def forget_event(self, event_id: str) -> None:
        """Drop a recorded event id so a redelivery is applied again."""

    # -------- analytics --------
    async def user_stats(self) -> dict:
        accounts = await self.list_accounts()
        by_country = Counter(a.country for a in accounts if a.country)
        by_language = Counter(a.locale for a in accounts if a.locale)
        return {
            "total": len(accounts),
            "premium": sum(1 for a in accounts if a.is_premium),
            "byCountry": dict(by_country),
            "byLanguage": dict(by_language),
        }

    async def news_stats(self) -> dict:
        items = await self.list_news()
        return {
            "total": len(items),
            "byCategory": dict(Counter(n.category for n in items)),
            "byRegion": dict(Counter(n.region for n in items if n.region)),
            "byStatus": dict(Counter(n.status for n in items)),
        }

    async def close(self) -> None:
        return None
