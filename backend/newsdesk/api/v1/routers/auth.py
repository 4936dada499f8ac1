# newsdesk/api/v1/routers/auth.py
from fastapi import APIRouter, Depends, Header, Request, Response, status

from newsdesk.api.v1.deps import extract_token, get_auth_service, get_current_account
from newsdesk.config import settings
from newsdesk.schemas.auth import (
    AccountOut,
    AdminLoginIn,
    ChangePasswordIn,
    ReaderLoginIn,
    RegisterIn,
    StaffLoginIn,
)
from newsdesk.services.auth import AuthService
from newsdesk.storage.records import AccountProfile

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_ttl_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


async def _login(auth: AuthService, strategy: str, credentials, response: Response) -> dict:
    account = await auth.authenticate(strategy, credentials)
    _, token = await auth.issue_session(account)
    _set_session_cookie(response, token)
    return {"success": True, "data": {"user": AccountOut.from_record(account).model_dump(mode="json"),
                                      "sessionToken": token}}


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterIn, response: Response, auth: AuthService = Depends(get_auth_service)):
    """
    Register a new reader account and log it in.

    The role is always "reader"; staff and admin accounts are created from the
    admin back office. Email is stored lower-cased.

    Returns:
        dict: {"success": True, "data": {"user", "sessionToken"}}; the token
        is also set as the HttpOnly session cookie.

    Raises:
        ConflictFailure (409): EMAIL_EXISTS / USERNAME_EXISTS
    """
    account, token = await auth.register(body)
    _set_session_cookie(response, token)
    return {"success": True, "data": {"user": AccountOut.from_record(account).model_dump(mode="json"),
                                      "sessionToken": token}}


@router.post("/login")
async def login(body: ReaderLoginIn, response: Response, auth: AuthService = Depends(get_auth_service)):
    """
    Reader login with email + password.

    Raises:
        AuthFailure (401 AUTH_INVALID_CREDENTIALS): the message is the same
            whether the email is unknown or the password is wrong.
    """
    return await _login(auth, "reader", body, response)


@router.post("/staff/login")
async def staff_login(body: StaffLoginIn, response: Response, auth: AuthService = Depends(get_auth_service)):
    """Staff login: staffId (username) + password. Only accounts with role "staff" succeed."""
    return await _login(auth, "staff", body, response)


@router.post("/admin/login")
async def admin_login(body: AdminLoginIn, response: Response, auth: AuthService = Depends(get_auth_service)):
    """Admin login: adminId (username) + password + the shared security key."""
    return await _login(auth, "admin", body, response)


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    authorization: str | None = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Destroy the caller's session and clear the cookie.

    Always succeeds, even when no session was present.
    """
    await auth.destroy_session(extract_token(request, authorization))
    response.delete_cookie(settings.session_cookie_name)
    return {"success": True}


@router.get("/me")
async def me(account: AccountProfile = Depends(get_current_account)):
    return {"success": True, "data": AccountOut.from_record(account).model_dump(mode="json")}


@router.post("/change-password")
async def change_password(
    body: ChangePasswordIn,
    account: AccountProfile = Depends(get_current_account),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Change the caller's own password. The current password is required.

    Raises:
        AuthFailure (401): current password is wrong
    """
    await auth.change_password(account.id, body.currentPassword, body.newPassword)
    return {"success": True, "data": {"ok": True}}
