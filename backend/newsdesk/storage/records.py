"""
Plain records returned by every storage adapter.

Handlers and services only see these, never ORM rows, so the in-memory and
Tortoise adapters are interchangeable.
"""
import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel

Role = Literal["reader", "staff", "admin"]
NewsStatus = Literal["draft", "published", "archived"]
TicketStatus = Literal["open", "in_progress", "closed"]

ROLES: tuple[str, ...] = ("reader", "staff", "admin")


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class AccountProfile(BaseModel):
    """Account without credentials: what request handlers receive as the caller's identity."""
    id: str
    username: str
    email: str
    role: Role = "reader"
    is_premium: bool = False
    telegram_id: Optional[str] = None
    locale: str = "english"
    country: Optional[str] = None
    city: Optional[str] = None
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    created_at: dt.datetime


class Account(AccountProfile):
    password_hash: str

    def public(self) -> AccountProfile:
        return AccountProfile.model_validate(self.model_dump(exclude={"password_hash"}))


class NewsItem(BaseModel):
    id: int
    title: str
    content: str
    summary: Optional[str] = None
    category: str
    region: Optional[str] = None
    image_url: Optional[str] = None
    is_live: bool = False
    is_premium: bool = False
    status: NewsStatus = "draft"
    author_id: str
    published_at: Optional[dt.datetime] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class Subscription(BaseModel):
    id: int
    account_id: str
    plan: str
    status: str  # "active" / "canceled" / "expired" (other Stripe states stored as-is)
    start_date: dt.datetime
    end_date: dt.datetime
    external_ref: Optional[str] = None  # Stripe subscription id
    created_at: dt.datetime


class SupportTicket(BaseModel):
    id: int
    account_id: str
    subject: str
    message: str
    status: TicketStatus = "open"
    created_at: dt.datetime
    updated_at: dt.datetime
