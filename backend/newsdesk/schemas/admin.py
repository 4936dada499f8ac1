"""
Pydantic schemas for admin back-office endpoints.
Defines request/response models for account management, support ticket
triage and Telegram broadcasts.
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Literal

from .auth import AccountOut

# ========== Common return model ==========
class AdminAccountListOut(BaseModel):
    """
    Response model for paginated account list endpoint.
    """
    items: List[AccountOut]  # List of account objects
    offset: int  # Pagination offset (number of items skipped)
    limit: int  # Maximum number of items per page
    total: int  # Total number of accounts matching the query


class AdminAccountDetailOut(BaseModel):
    account: AccountOut


# ========== Input model ==========
class AdminAccountCreateIn(BaseModel):
    """
    Request model for admin-initiated account creation.
    Unlike self-registration, the role can be assigned.
    """
    username: str = Field(min_length=3, max_length=64)
    email: EmailStr
    password: str = Field(min_length=6, max_length=256)
    role: Literal["reader", "staff", "admin"] = "reader"
    isPremium: bool = False
    locale: Optional[str] = Field(default=None, max_length=32)
    country: Optional[str] = Field(default=None, max_length=64)
    city: Optional[str] = Field(default=None, max_length=64)


class AdminAccountUpdateIn(BaseModel):
    """
    Request model for updating any account field.
    All fields are optional - only provided fields will be updated.
    """
    username: Optional[str] = Field(default=None, min_length=3, max_length=64)
    email: Optional[EmailStr] = None
    role: Optional[Literal["reader", "staff", "admin"]] = None  # Cannot demote self or the last admin
    isPremium: Optional[bool] = None
    telegramId: Optional[str] = Field(default=None, max_length=64)
    locale: Optional[str] = Field(default=None, max_length=32)
    country: Optional[str] = Field(default=None, max_length=64)
    city: Optional[str] = Field(default=None, max_length=64)


class AdminResetPasswordIn(BaseModel):
    """
    Request model for admin-initiated password reset.
    """
    newPassword: str = Field(min_length=6)  # New password (minimum 6 characters)


class TicketUpdateIn(BaseModel):
    status: Optional[Literal["open", "in_progress", "closed"]] = None
    reply: Optional[str] = Field(default=None, min_length=1, max_length=4000)  # Sent through the support bot


class BroadcastIn(BaseModel):
    message: str = Field(min_length=1, max_length=4000)
    country: Optional[str] = None  # Restrict to accounts in this country
