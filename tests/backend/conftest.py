import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from newsdesk.config import settings
from newsdesk.core.security import hash_password
from newsdesk.main import app, build_state
from newsdesk.services.messaging import TelegramNotifier
from newsdesk.services.payments import StripeGateway
from newsdesk.services.sessions import MemorySessionStore
from newsdesk.storage.memory import MemoryStorage

TEST_WEBHOOK_SECRET = "whsec_test_secret"


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def notifier():
    """Notifier with every bot disabled; no request ever leaves the process."""
    return TelegramNotifier()


@pytest_asyncio.fixture
async def client(storage, notifier):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with fresh in-memory state.
    """
    build_state(
        app,
        storage=storage,
        sessions=MemorySessionStore(),
        notifier=notifier,
        payments_gateway=StripeGateway(api_key=None, webhook_secret=TEST_WEBHOOK_SECRET),
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest.fixture
def create_account(storage):
    """
    Factory fixture to create accounts directly in storage, bypassing registration.
    """

    async def _create_account(role: str = "reader", password: str = "Passw0rd!", **fields):
        name = fields.pop("username", f"{role}_{uuid.uuid4().hex[:6]}")
        account = await storage.create_account(
            username=name,
            email=fields.pop("email", f"{name}@example.com"),
            password_hash=hash_password(password),
            role=role,
            **fields,
        )
        return account, password

    return _create_account


@pytest.fixture
def login_headers(client):
    """
    Log in through the matching endpoint for the account's role and return Bearer headers.
    """

    async def _login(account, password: str) -> dict[str, str]:
        if account.role == "admin":
            resp = await client.post(
                "/api/v1/auth/admin/login",
                json={"adminId": account.username, "password": password, "securityKey": settings.admin_security_key},
            )
        elif account.role == "staff":
            resp = await client.post(
                "/api/v1/auth/staff/login",
                json={"staffId": account.username, "password": password},
            )
        else:
            resp = await client.post("/api/v1/auth/login", json={"email": account.email, "password": password})
        assert resp.status_code == 200, resp.text
        # Keep the cookie jar empty so each test controls which identity is used
        client.cookies.clear()
        return {"Authorization": f"Bearer {resp.json()['data']['sessionToken']}"}

    return _login
