"""
Database model for accounts.
Represents a reader, staff or admin account: credentials, profile fields,
role-based access control and the billing/messaging links.
"""
import uuid
from tortoise import fields, models

class User(models.Model):
    """
    Account database model.

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Username and email are unique; lookups compare case-insensitively and
      email is stored lower-cased
    - Role determines access level ("reader", "staff" or "admin")
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key: unique account identifier
    username = fields.CharField(max_length=256, unique=True, index=True)  # Login name for staff/admin forms
    email = fields.CharField(max_length=256, unique=True, index=True)  # Login name for readers
    password_hash = fields.CharField(max_length=255)  # Argon2 hash, never plain text
    role = fields.CharField(max_length=16, default="reader")  # "reader", "staff" or "admin"
    is_premium = fields.BooleanField(default=False)  # Written by admin edits and billing reconciliation only
    telegram_id = fields.CharField(max_length=64, unique=True, null=True)  # Linked Telegram chat id
    locale = fields.CharField(max_length=32, default="english")
    country = fields.CharField(max_length=64, null=True)
    city = fields.CharField(max_length=64, null=True)
    stripe_customer_id = fields.CharField(max_length=64, null=True, index=True)
    stripe_subscription_id = fields.CharField(max_length=64, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)  # Timestamp when account was created

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"  # Database table name
