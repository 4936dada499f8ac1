"""
Authentication service.

Three credential strategies (reader, staff, admin) share one interface and
never fall through to each other. Every failure raises the same AuthFailure so
a client cannot tell a missing account from a wrong password or a wrong role.
"""
import datetime as dt
import logging
from abc import ABC, abstractmethod
from functools import lru_cache

from newsdesk.core.errors import AuthFailure, ConflictFailure, ValidationFailure
from newsdesk.core.security import (
    create_session_token,
    decode_session_token,
    hash_password,
    secrets_match,
    verify_password,
)
from newsdesk.schemas.auth import AdminLoginIn, ReaderLoginIn, RegisterIn, StaffLoginIn
from newsdesk.storage.base import DuplicateRecord, Storage
from newsdesk.storage.records import Account, AccountProfile

from .sessions import Session, SessionStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Verified against when no account matched, so both paths pay for one hash
    return hash_password("newsdesk-timing-equaliser")


def _password_ok(account: Account | None, password: str) -> bool:
    if account is None:
        verify_password(password, _dummy_hash())
        return False
    return verify_password(password, account.password_hash)


class CredentialStrategy(ABC):
    name: str = ""

    @abstractmethod
    async def authenticate(self, storage: Storage, credentials) -> Account:
        """Return the matching account or raise AuthFailure."""


class ReaderStrategy(CredentialStrategy):
    """Email + password. Any role may sign in through this form."""
    name = "reader"

    async def authenticate(self, storage: Storage, credentials: ReaderLoginIn) -> Account:
        account = await storage.get_account_by_email(credentials.email)
        if not _password_ok(account, credentials.password):
            raise AuthFailure()
        return account


class StaffStrategy(CredentialStrategy):
    """Staff id (username) + password; the account must be exactly `staff`."""
    name = "staff"

    async def authenticate(self, storage: Storage, credentials: StaffLoginIn) -> Account:
        account = await storage.get_account_by_username(credentials.staffId)
        password_ok = _password_ok(account, credentials.password)
        if not password_ok or account.role != "staff":
            raise AuthFailure()
        return account


class AdminStrategy(CredentialStrategy):
    """
    Admin id (username) + password + shared security key.

    The key is compared before any storage lookup, so a request with a bad key
    learns nothing about which admin ids exist.
    """
    name = "admin"

    def __init__(self, security_key: str):
        self._security_key = security_key

    async def authenticate(self, storage: Storage, credentials: AdminLoginIn) -> Account:
        if not secrets_match(credentials.securityKey, self._security_key):
            raise AuthFailure()
        account = await storage.get_account_by_username(credentials.adminId)
        password_ok = _password_ok(account, credentials.password)
        if not password_ok or account.role != "admin":
            raise AuthFailure()
        return account


class AuthService:
    def __init__(
        self,
        storage: Storage,
        sessions: SessionStore,
        *,
        admin_security_key: str,
        session_ttl: dt.timedelta,
    ):
        self.storage = storage
        self.sessions = sessions
        self.session_ttl = session_ttl
        self.strategies: dict[str, CredentialStrategy] = {
            s.name: s
            for s in (ReaderStrategy(), StaffStrategy(), AdminStrategy(admin_security_key))
        }

    async def authenticate(self, strategy: str, credentials) -> AccountProfile:
        """Run exactly one strategy; unknown strategy names are a programming error."""
        try:
            impl = self.strategies[strategy]
        except KeyError:
            raise ValueError(f"unknown credential strategy: {strategy}") from None
        try:
            account = await impl.authenticate(self.storage, credentials)
        except AuthFailure:
            logger.info("[auth] %s login rejected", strategy)
            raise
        logger.info("[auth] %s login ok account=%s", strategy, account.id)
        return account.public()

    async def issue_session(self, account: AccountProfile) -> tuple[Session, str]:
        """Create a server-side session holding only the account id; return it with the signed client token."""
        session = await self.sessions.create(account.id, self.session_ttl)
        return session, create_session_token(session.token, session.expires_at)

    async def current_identity(self, token: str | None) -> AccountProfile | None:
        """
        Resolve a client token to the live account.

        The account is re-read on every call, so deletions and role changes
        made after login take effect on the next request.
        """
        if not token:
            return None
        session_id = decode_session_token(token)
        if session_id is None:
            return None
        session = await self.sessions.get(session_id)
        if session is None:
            return None
        account = await self.storage.get_account(session.account_id)
        if account is None:
            await self.sessions.delete(session_id)
            return None
        return account.public()

    async def destroy_session(self, token: str | None) -> None:
        """Idempotent: unknown, expired or already destroyed tokens are ignored."""
        session_id = decode_session_token(token) if token else None
        if session_id:
            await self.sessions.delete(session_id)

    async def destroy_account_sessions(self, account_id: str) -> int:
        return await self.sessions.delete_for_account(account_id)

    async def register(self, data: RegisterIn) -> tuple[AccountProfile, str]:
        """
        Self-registration. Always creates a reader and logs it in.

        The account is committed before the session is issued; if issuing
        fails the account stays and the client has to log in explicitly.
        """
        email = str(data.email).lower()
        username = data.username.strip()
        if not username:
            raise ValidationFailure(details=[{"field": "username", "message": "username required"}])
        if await self.storage.get_account_by_email(email):
            raise ConflictFailure.for_field("email")
        if await self.storage.get_account_by_username(username):
            raise ConflictFailure.for_field("username")
        try:
            account = await self.storage.create_account(
                username=username,
                email=email,
                password_hash=hash_password(data.password),
                role="reader",
                locale=data.locale or "english",
                country=data.country,
                city=data.city,
            )
        except DuplicateRecord as exc:
            raise ConflictFailure.for_field(exc.field) from exc
        logger.info("[auth] registered reader account=%s", account.id)
        profile = account.public()
        _, token = await self.issue_session(profile)
        return profile, token

    async def change_password(self, account_id: str, current: str, new: str) -> None:
        account = await self.storage.get_account(account_id)
        if account is None or not verify_password(current, account.password_hash):
            raise AuthFailure()
        await self.storage.update_account(account_id, password_hash=hash_password(new))
