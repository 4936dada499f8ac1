# newsdesk/core/bootstrap.py
"""
Bootstrap module for application initialization.
Handles initial setup tasks such as creating default admin account on first startup.
"""
import os
import logging

from newsdesk.core.security import hash_password
from newsdesk.storage.base import Storage

logger = logging.getLogger("uvicorn.error")

async def ensure_default_admin(storage: Storage):
    """
    If no admin exists yet, create a default admin based on environment variables.
    Only takes effect under the following conditions:
      - Currently no account with role="admin"
      - And ADMIN_PASSWORD is set (to avoid using default weak password)
    Environment variables:
      ADMIN_USERNAME (default: "admin")
      ADMIN_EMAIL    (default: "admin@example.com")
      ADMIN_PASSWORD (required, otherwise won't create)

    Returns the created account, or None when nothing was created.
    """
    if await storage.count_accounts(role="admin") > 0:
        return None  # Skip creation if admin already exists

    admin_password = os.getenv("ADMIN_PASSWORD")
    if not admin_password:
        logger.warning("[bootstrap] No admin present, but ADMIN_PASSWORD not set -> skip creating default admin.")
        return None

    admin_username = os.getenv("ADMIN_USERNAME", "admin")
    admin_email = os.getenv("ADMIN_EMAIL", "admin@example.com").lower()
    if await storage.get_account_by_email(admin_email):
        logger.warning("[bootstrap] ADMIN_EMAIL %s already belongs to a non-admin account -> skip.", admin_email)
        return None

    # If username is already taken (someone registered "admin" as a reader), pick a non-conflicting name
    base_username = admin_username
    suffix = 1
    while await storage.get_account_by_username(admin_username):
        suffix += 1
        admin_username = f"{base_username}{suffix}"

    account = await storage.create_account(
        username=admin_username,
        email=admin_email,
        password_hash=hash_password(admin_password),
        role="admin",
    )
    logger.warning("[bootstrap] Created default admin -> username=%s email=%s id=%s",
                   account.username, account.email, account.id)
    return account
