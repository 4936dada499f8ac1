"""
Account management: admin back-office operations, the owner's own profile
edits and Telegram linking.

Owners can only touch profile fields; role and premium flag change through
admin edits (and billing reconciliation, see services.payments).
"""
import logging

from newsdesk.core.errors import ConflictFailure, NotFound, ValidationFailure
from newsdesk.core.security import hash_password
from newsdesk.schemas.admin import AdminAccountCreateIn, AdminAccountUpdateIn
from newsdesk.schemas.user import ProfileUpdateIn
from newsdesk.storage.base import DuplicateRecord, Storage
from newsdesk.storage.records import Account, AccountProfile

from .auth import AuthService
from .messaging import TelegramNotifier

logger = logging.getLogger(__name__)

_ADMIN_FIELDS = {
    "username": "username",
    "email": "email",
    "role": "role",
    "isPremium": "is_premium",
    "telegramId": "telegram_id",
    "locale": "locale",
    "country": "country",
    "city": "city",
}
_PROFILE_FIELDS = {k: _ADMIN_FIELDS[k] for k in ("username", "email", "locale", "country", "city")}
_NULLABLE = {"telegram_id", "country", "city"}


def _changes(payload: dict, mapping: dict[str, str]) -> dict:
    changes = {}
    for key, value in payload.items():
        name = mapping[key]
        if value is None and name not in _NULLABLE:
            continue
        if name == "email":
            value = str(value).lower()
        elif name == "username":
            value = value.strip()
        elif name == "telegram_id" and value is not None:
            # blank unlinks
            value = value.strip() or None
        changes[name] = value
    return changes


class AccountService:
    def __init__(self, storage: Storage, auth: AuthService, notifier: TelegramNotifier):
        self.storage = storage
        self.auth = auth
        self.notifier = notifier

    async def get(self, account_id: str) -> Account:
        account = await self.storage.get_account(account_id)
        if account is None:
            raise NotFound("User not found", code="USER_NOT_FOUND")
        return account

    async def list(self, query: str | None, offset: int, limit: int) -> tuple[list[Account], int]:
        rows = await self.storage.list_accounts(query)
        return rows[offset:offset + limit], len(rows)

    async def _save(self, account_id: str, changes: dict) -> Account:
        try:
            account = await self.storage.update_account(account_id, **changes)
        except DuplicateRecord as exc:
            raise ConflictFailure.for_field(exc.field) from exc
        if account is None:
            raise NotFound("User not found", code="USER_NOT_FOUND")
        return account

    async def create(self, data: AdminAccountCreateIn) -> AccountProfile:
        """Admin-initiated creation; unlike registration the role is assignable."""
        try:
            account = await self.storage.create_account(
                username=data.username.strip(),
                email=str(data.email).lower(),
                password_hash=hash_password(data.password),
                role=data.role,
                is_premium=data.isPremium,
                locale=data.locale or "english",
                country=data.country,
                city=data.city,
            )
        except DuplicateRecord as exc:
            raise ConflictFailure.for_field(exc.field) from exc
        logger.info("[accounts] admin created account=%s role=%s", account.id, account.role)
        return account.public()

    async def admin_update(self, admin: AccountProfile, account_id: str, data: AdminAccountUpdateIn) -> AccountProfile:
        current = await self.get(account_id)
        changes = _changes(data.model_dump(exclude_unset=True), _ADMIN_FIELDS)

        # Role guards: cannot demote self; cannot demote the last admin
        new_role = changes.get("role")
        if new_role and new_role != current.role and current.role == "admin":
            if admin.id == current.id:
                raise ValidationFailure("Cannot demote yourself", code="CANNOT_DEMOTE_SELF")
            if await self.storage.count_accounts(role="admin") <= 1:
                raise ValidationFailure("Cannot demote the last admin", code="LAST_ADMIN_FORBIDDEN")

        account = await self._save(account_id, changes)
        logger.info("[accounts] admin %s updated account=%s fields=%s", admin.id, account_id, sorted(changes))
        return account.public()

    async def delete(self, admin: AccountProfile, account_id: str) -> None:
        """Delete an account and every live session it holds."""
        account = await self.get(account_id)
        if admin.id == account.id:
            raise ValidationFailure("Cannot delete yourself", code="CANNOT_DELETE_SELF")
        if account.role == "admin" and await self.storage.count_accounts(role="admin") <= 1:
            raise ValidationFailure("Cannot delete the last admin", code="LAST_ADMIN_FORBIDDEN")
        if not await self.storage.delete_account(account_id):
            raise NotFound("User not found", code="USER_NOT_FOUND")
        dropped = await self.auth.destroy_account_sessions(account_id)
        logger.info("[accounts] admin %s deleted account=%s sessions_dropped=%s", admin.id, account_id, dropped)

    async def reset_password(self, account_id: str, new_password: str) -> None:
        await self._save(account_id, {"password_hash": hash_password(new_password)})

    async def update_profile(self, account: AccountProfile, data: ProfileUpdateIn) -> AccountProfile:
        changes = _changes(data.model_dump(exclude_unset=True), _PROFILE_FIELDS)
        return (await self._save(account.id, changes)).public()

    async def link_telegram(self, account: AccountProfile, telegram_id: str) -> AccountProfile:
        telegram_id = telegram_id.strip()
        if not telegram_id:
            raise ValidationFailure("Telegram ID is required", details=[{"field": "telegramId", "message": "required"}])
        holder = await self.storage.get_account_by_telegram_id(telegram_id)
        if holder is not None and holder.id != account.id:
            raise ConflictFailure.for_field("telegram_id")
        linked = (await self._save(account.id, {"telegram_id": telegram_id})).public()
        if not await self.notifier.welcome(linked):
            logger.info("[accounts] welcome message not delivered for account=%s", account.id)
        return linked
