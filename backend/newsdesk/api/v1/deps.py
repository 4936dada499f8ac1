# newsdesk/api/v1/deps.py
from fastapi import Depends, Header, Request

from newsdesk.config import settings
from newsdesk.services.accounts import AccountService
from newsdesk.services.auth import AuthService
from newsdesk.services.authz import check_authenticated, check_role
from newsdesk.services.content import ContentService
from newsdesk.services.messaging import TelegramNotifier
from newsdesk.services.payments import StripeGateway
from newsdesk.storage.base import Storage
from newsdesk.storage.records import ROLES, AccountProfile


# ---------- app state accessors (populated by main.build_state) ----------
def get_storage(request: Request) -> Storage:
    return request.app.state.storage

def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth

def get_account_service(request: Request) -> AccountService:
    return request.app.state.accounts

def get_content_service(request: Request) -> ContentService:
    return request.app.state.content

def get_notifier(request: Request) -> TelegramNotifier:
    return request.app.state.notifier

def get_payments(request: Request) -> StripeGateway:
    return request.app.state.payments


def extract_token(request: Request, authorization: str | None) -> str | None:
    """Bearer header first, then the HttpOnly session cookie."""
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    if not token:
        token = request.cookies.get(settings.session_cookie_name)
    return token or None


async def get_optional_account(
    request: Request,
    authorization: str | None = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> AccountProfile | None:
    """
    FastAPI dependency resolving the caller's identity, or None for anonymous.

    Public read routes use this: an invalid or expired token is treated the
    same as no token at all.
    """
    return await auth.current_identity(extract_token(request, authorization))


async def get_current_account(
    account: AccountProfile | None = Depends(get_optional_account),
) -> AccountProfile:
    """
    FastAPI dependency requiring an authenticated caller.

    Raises:
        Unauthenticated (401 AUTH_REQUIRED): no token, bad token, expired
            session or the account no longer exists.
    """
    return check_authenticated(account)


def require_role(role: str):
    """
    Build a dependency admitting only callers whose role is exactly `role`.

    Usage:
        @router.get("/admin/users", dependencies=[Depends(require_role("admin"))])
    """
    if role not in ROLES:
        raise ValueError(f"unknown role: {role}")

    async def _dependency(account: AccountProfile | None = Depends(get_optional_account)) -> AccountProfile:
        return check_role(account, role)

    return _dependency


require_authenticated = get_current_account
require_staff = require_role("staff")
require_admin = require_role("admin")
