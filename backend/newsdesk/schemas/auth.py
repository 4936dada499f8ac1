"""
Pydantic schemas for authentication endpoints.
Defines the three login forms (reader, staff, admin), registration and the
public account projection.
"""
import datetime as dt
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

class ReaderLoginIn(BaseModel):
    """Reader login form: email + password."""
    email: EmailStr
    password: str = Field(min_length=1)

class StaffLoginIn(BaseModel):
    """Staff login form: staffId is the account username."""
    staffId: str = Field(min_length=1)
    password: str = Field(min_length=1)

class AdminLoginIn(BaseModel):
    """Admin login form: adminId is the account username; securityKey is the shared admin secret."""
    adminId: str = Field(min_length=1)
    password: str = Field(min_length=1)
    securityKey: str

class RegisterIn(BaseModel):
    """
    Self-registration form.
    Role is not accepted here: registered accounts are always readers.
    """
    username: str = Field(min_length=3, max_length=64)
    email: EmailStr
    password: str = Field(min_length=6, max_length=256)
    locale: Optional[str] = Field(default=None, max_length=32)
    country: Optional[str] = Field(default=None, max_length=64)
    city: Optional[str] = Field(default=None, max_length=64)

class ChangePasswordIn(BaseModel):
    currentPassword: str
    newPassword: str = Field(min_length=6, max_length=256)

class AccountOut(BaseModel):
    """
    Account information returned to clients.
    Never contains the password hash.
    """
    id: str
    username: str
    email: str
    role: str
    isPremium: bool
    telegramId: Optional[str] = None
    locale: str
    country: Optional[str] = None
    city: Optional[str] = None
    createdAt: dt.datetime

    @classmethod
    def from_record(cls, account) -> "AccountOut":
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            role=account.role,
            isPremium=account.is_premium,
            telegramId=account.telegram_id,
            locale=account.locale,
            country=account.country,
            city=account.city,
            createdAt=account.created_at,
        )
