"""
Unit tests for services.auth: credential strategies, sessions and registration.
"""
import datetime as dt

import pytest

from newsdesk.core.errors import AuthFailure, ConflictFailure
from newsdesk.core.security import hash_password
from newsdesk.schemas.auth import AdminLoginIn, ReaderLoginIn, RegisterIn, StaffLoginIn
from newsdesk.services.auth import AuthService
from newsdesk.services.sessions import MemorySessionStore
from newsdesk.storage.memory import MemoryStorage

pytestmark = pytest.mark.asyncio

SECURITY_KEY = "unit-admin-key"


class CountingStorage(MemoryStorage):
    """Memory storage that records every account lookup."""

    def __init__(self):
        super().__init__()
        self.calls = 0

    async def get_account_by_username(self, username):
        self.calls += 1
        return await super().get_account_by_username(username)

    async def get_account_by_email(self, email):
        self.calls += 1
        return await super().get_account_by_email(email)

    async def get_account(self, account_id):
        self.calls += 1
        return await super().get_account(account_id)


@pytest.fixture
def storage():
    return CountingStorage()


@pytest.fixture
def auth(storage):
    return AuthService(
        storage,
        MemorySessionStore(),
        admin_security_key=SECURITY_KEY,
        session_ttl=dt.timedelta(minutes=30),
    )


async def _account(storage, username, role, password="Secret#1"):
    return await storage.create_account(
        username=username,
        email=f"{username}@example.com",
        password_hash=hash_password(password),
        role=role,
    )


class TestReaderStrategy:
    async def test_reader_login_succeeds(self, auth, storage):
        created = await _account(storage, "alice", "reader")
        account = await auth.authenticate("reader", ReaderLoginIn(email="alice@example.com", password="Secret#1"))
        assert account.id == created.id
        assert not hasattr(account, "password_hash")

    async def test_email_lookup_is_case_insensitive(self, auth, storage):
        await _account(storage, "alice", "reader")
        account = await auth.authenticate("reader", ReaderLoginIn(email="ALICE@Example.com", password="Secret#1"))
        assert account.username == "alice"

    async def test_unknown_email_and_wrong_password_look_the_same(self, auth, storage):
        await _account(storage, "alice", "reader")
        with pytest.raises(AuthFailure) as missing:
            await auth.authenticate("reader", ReaderLoginIn(email="nobody@example.com", password="Secret#1"))
        with pytest.raises(AuthFailure) as wrong:
            await auth.authenticate("reader", ReaderLoginIn(email="alice@example.com", password="nope"))
        assert missing.value.to_detail() == wrong.value.to_detail()

    async def test_any_role_may_use_reader_form(self, auth, storage):
        await _account(storage, "sam", "staff")
        account = await auth.authenticate("reader", ReaderLoginIn(email="sam@example.com", password="Secret#1"))
        assert account.role == "staff"


class TestStaffStrategy:
    async def test_staff_login_succeeds(self, auth, storage):
        await _account(storage, "sam", "staff")
        account = await auth.authenticate("staff", StaffLoginIn(staffId="sam", password="Secret#1"))
        assert account.role == "staff"

    @pytest.mark.parametrize("role", ["reader", "admin"])
    async def test_other_roles_are_rejected(self, auth, storage, role):
        await _account(storage, "someone", role)
        with pytest.raises(AuthFailure):
            await auth.authenticate("staff", StaffLoginIn(staffId="someone", password="Secret#1"))


class TestAdminStrategy:
    async def test_admin_login_succeeds(self, auth, storage):
        await _account(storage, "root", "admin")
        creds = AdminLoginIn(adminId="root", password="Secret#1", securityKey=SECURITY_KEY)
        account = await auth.authenticate("admin", creds)
        assert account.role == "admin"

    async def test_bad_security_key_rejects_without_storage_calls(self, auth, storage):
        await _account(storage, "root", "admin")
        storage.calls = 0
        creds = AdminLoginIn(adminId="root", password="Secret#1", securityKey="wrong-key")
        with pytest.raises(AuthFailure):
            await auth.authenticate("admin", creds)
        assert storage.calls == 0

    async def test_staff_account_cannot_use_admin_form(self, auth, storage):
        await _account(storage, "sam", "staff")
        creds = AdminLoginIn(adminId="sam", password="Secret#1", securityKey=SECURITY_KEY)
        with pytest.raises(AuthFailure):
            await auth.authenticate("admin", creds)


async def test_unknown_strategy_is_a_programming_error(auth):
    with pytest.raises(ValueError):
        await auth.authenticate("superuser", ReaderLoginIn(email="a@example.com", password="x"))


class TestSessions:
    async def test_issue_and_resolve(self, auth, storage):
        created = await _account(storage, "alice", "reader")
        _, token = await auth.issue_session(created.public())
        identity = await auth.current_identity(token)
        assert identity is not None
        assert identity.id == created.id

    async def test_identity_reflects_live_account(self, auth, storage):
        created = await _account(storage, "alice", "reader")
        _, token = await auth.issue_session(created.public())
        await storage.update_account(created.id, is_premium=True)
        identity = await auth.current_identity(token)
        assert identity.is_premium is True

    async def test_deleted_account_no_longer_resolves(self, auth, storage):
        created = await _account(storage, "alice", "reader")
        _, token = await auth.issue_session(created.public())
        await storage.delete_account(created.id)
        assert await auth.current_identity(token) is None

    async def test_destroy_session_is_idempotent(self, auth, storage):
        created = await _account(storage, "alice", "reader")
        _, token = await auth.issue_session(created.public())
        await auth.destroy_session(token)
        await auth.destroy_session(token)
        await auth.destroy_session("garbage")
        await auth.destroy_session(None)
        assert await auth.current_identity(token) is None

    async def test_expired_session_does_not_resolve(self, storage):
        short = AuthService(
            storage,
            MemorySessionStore(),
            admin_security_key=SECURITY_KEY,
            session_ttl=dt.timedelta(seconds=-1),
        )
        created = await _account(storage, "alice", "reader")
        _, token = await short.issue_session(created.public())
        assert await short.current_identity(token) is None

    async def test_destroy_account_sessions(self, auth, storage):
        created = await _account(storage, "alice", "reader")
        _, t1 = await auth.issue_session(created.public())
        _, t2 = await auth.issue_session(created.public())
        assert await auth.destroy_account_sessions(created.id) == 2
        assert await auth.current_identity(t1) is None
        assert await auth.current_identity(t2) is None


class TestRegister:
    async def test_register_creates_reader_and_session(self, auth, storage):
        data = RegisterIn(username="alice", email="Alice@X.com", password="secret1")
        account, token = await auth.register(data)
        assert account.role == "reader"
        assert account.email == "alice@x.com"
        assert (await auth.current_identity(token)).id == account.id

    async def test_duplicate_email_is_a_conflict_and_creates_nothing(self, auth, storage):
        await auth.register(RegisterIn(username="alice", email="alice@x.com", password="secret1"))
        before = await storage.count_accounts()
        with pytest.raises(ConflictFailure) as exc:
            await auth.register(RegisterIn(username="alice2", email="ALICE@x.com", password="secret1"))
        assert exc.value.code == "EMAIL_EXISTS"
        assert await storage.count_accounts() == before

    async def test_duplicate_username_is_a_conflict(self, auth):
        await auth.register(RegisterIn(username="alice", email="alice@x.com", password="secret1"))
        with pytest.raises(ConflictFailure) as exc:
            await auth.register(RegisterIn(username="Alice", email="other@x.com", password="secret1"))
        assert exc.value.code == "USERNAME_EXISTS"


class TestChangePassword:
    async def test_requires_current_password(self, auth, storage):
        created = await _account(storage, "alice", "reader")
        with pytest.raises(AuthFailure):
            await auth.change_password(created.id, "wrong", "NewSecret#2")
        await auth.change_password(created.id, "Secret#1", "NewSecret#2")
        account = await auth.authenticate("reader", ReaderLoginIn(email="alice@example.com", password="NewSecret#2"))
        assert account.id == created.id
