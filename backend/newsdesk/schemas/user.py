"""
Pydantic schemas for the reader's own profile, support tickets and billing.
"""
import datetime as dt
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

class ProfileUpdateIn(BaseModel):
    """
    Fields an account may change on itself.
    Role and premium flag are deliberately absent.
    """
    username: Optional[str] = Field(default=None, min_length=3, max_length=64)
    email: Optional[EmailStr] = None
    locale: Optional[str] = Field(default=None, max_length=32)
    country: Optional[str] = Field(default=None, max_length=64)
    city: Optional[str] = Field(default=None, max_length=64)

class LinkTelegramIn(BaseModel):
    telegramId: str = Field(min_length=1, max_length=64)

class TicketCreateIn(BaseModel):
    subject: str = Field(min_length=1, max_length=256)
    message: str = Field(min_length=1, max_length=8000)

class TicketOut(BaseModel):
    id: int
    accountId: str
    subject: str
    message: str
    status: str
    createdAt: dt.datetime
    updatedAt: dt.datetime

    @classmethod
    def from_record(cls, ticket) -> "TicketOut":
        return cls(
            id=ticket.id,
            accountId=ticket.account_id,
            subject=ticket.subject,
            message=ticket.message,
            status=ticket.status,
            createdAt=ticket.created_at,
            updatedAt=ticket.updated_at,
        )

class SubscriptionOut(BaseModel):
    id: int
    plan: str
    status: str
    startDate: dt.datetime
    endDate: dt.datetime

    @classmethod
    def from_record(cls, sub) -> "SubscriptionOut":
        return cls(id=sub.id, plan=sub.plan, status=sub.status, startDate=sub.start_date, endDate=sub.end_date)

class CheckoutIn(BaseModel):
    priceId: str = Field(min_length=1)
