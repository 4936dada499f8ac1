# newsdesk/api/v1/routers/admin.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, status

from newsdesk.api.v1.deps import (
    get_account_service,
    get_notifier,
    get_storage,
    require_admin,
)
from newsdesk.core.errors import NotFound
from newsdesk.schemas.admin import (
    AdminAccountCreateIn,
    AdminAccountDetailOut,
    AdminAccountListOut,
    AdminAccountUpdateIn,
    AdminResetPasswordIn,
    BroadcastIn,
    TicketUpdateIn,
)
from newsdesk.schemas.auth import AccountOut
from newsdesk.schemas.user import TicketOut
from newsdesk.services.accounts import AccountService
from newsdesk.services.messaging import TelegramNotifier
from newsdesk.storage.base import Storage
from newsdesk.storage.records import AccountProfile

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# ==============================================================================
# I. Account Management Interface
#     Prefix: /api/v1/admin/users
# ==============================================================================
@router.get("/users", response_model=AdminAccountListOut)
async def list_users(
    q: str | None = Query(default=None, description="Fuzzy search by username/email"),
    offset: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    accounts: AccountService = Depends(get_account_service),
):
    """
    Get paginated list of all accounts (admin only), newest first.

    Args:
        q: Optional search query for fuzzy matching username or email
        offset: Number of items to skip (for pagination)
        limit: Maximum number of items to return (1-100)

    Returns:
        AdminAccountListOut: {"items", "offset", "limit", "total"}
    """
    rows, total = await accounts.list(q, offset, limit)
    items = [AccountOut.from_record(a) for a in rows]
    return {"items": items, "offset": offset, "limit": limit, "total": total}


@router.get("/users/{user_id}", response_model=AdminAccountDetailOut)
async def get_user_detail(user_id: str, accounts: AccountService = Depends(get_account_service)):
    account = await accounts.get(user_id)
    return {"account": AccountOut.from_record(account)}


@router.post("/users", response_model=AdminAccountDetailOut, status_code=status.HTTP_201_CREATED)
async def create_user(body: AdminAccountCreateIn, accounts: AccountService = Depends(get_account_service)):
    """
    Create an account with any role (admin only).

    Raises:
        ConflictFailure (409): USERNAME_EXISTS / EMAIL_EXISTS
    """
    account = await accounts.create(body)
    return {"account": AccountOut.from_record(account)}


@router.patch("/users/{user_id}", response_model=AdminAccountDetailOut)
async def update_user(
    user_id: str,
    body: AdminAccountUpdateIn,
    admin: AccountProfile = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
):
    """
    Update any field of an account, including role and premium status.

    Raises:
        NotFound (404): USER_NOT_FOUND
        ValidationFailure (400): CANNOT_DEMOTE_SELF / LAST_ADMIN_FORBIDDEN
        ConflictFailure (409): USERNAME_EXISTS / EMAIL_EXISTS / TELEGRAM_ID_EXISTS
    """
    account = await accounts.admin_update(admin, user_id, body)
    return {"account": AccountOut.from_record(account)}


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    admin: AccountProfile = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
):
    """
    Delete an account. Its live sessions stop resolving immediately.

    Raises:
        NotFound (404): USER_NOT_FOUND
        ValidationFailure (400): CANNOT_DELETE_SELF / LAST_ADMIN_FORBIDDEN
    """
    await accounts.delete(admin, user_id)
    return {"success": True, "data": {"ok": True}}


@router.post("/users/{user_id}/reset-password")
async def reset_user_password(
    user_id: str,
    body: AdminResetPasswordIn,
    accounts: AccountService = Depends(get_account_service),
):
    await accounts.reset_password(user_id, body.newPassword)
    return {"success": True, "data": {"ok": True}}


# ==============================================================================
# II. Support Tickets
# ==============================================================================
@router.get("/support/tickets")
async def list_tickets(storage: Storage = Depends(get_storage)):
    tickets = await storage.list_tickets()
    return {"success": True, "data": [TicketOut.from_record(t).model_dump(mode="json") for t in tickets]}


@router.patch("/support/tickets/{ticket_id}")
async def update_ticket(
    body: TicketUpdateIn,
    ticket_id: int = Path(..., ge=1),
    storage: Storage = Depends(get_storage),
    notifier: TelegramNotifier = Depends(get_notifier),
):
    """
    Change a ticket's status and/or reply to its owner through the support bot.

    Returns:
        dict: data.ticket plus data.replySent (False when no reply was given,
        the owner has no linked Telegram id, or delivery failed)
    """
    ticket = await storage.get_ticket(ticket_id)
    if ticket is None:
        raise NotFound("Ticket not found", code="TICKET_NOT_FOUND")
    if body.status is not None:
        ticket = await storage.update_ticket(ticket_id, status=body.status)

    reply_sent = False
    if body.reply:
        owner = await storage.get_account(ticket.account_id)
        if owner is not None:
            reply_sent = await notifier.reply_to_ticket(owner.public(), ticket, body.reply)
    return {"success": True, "data": {"ticket": TicketOut.from_record(ticket).model_dump(mode="json"),
                                      "replySent": reply_sent}}


# ==============================================================================
# III. Analytics & Broadcast
# ==============================================================================
@router.get("/analytics")
async def analytics(storage: Storage = Depends(get_storage)):
    return {"success": True, "data": {"users": await storage.user_stats(), "news": await storage.news_stats()}}


@router.post("/telegram/broadcast")
async def broadcast(
    body: BroadcastIn,
    storage: Storage = Depends(get_storage),
    notifier: TelegramNotifier = Depends(get_notifier),
):
    """Send a message through the news bot to every linked account, optionally one country only."""
    sent = await notifier.broadcast(storage, body.message, body.country)
    return {"success": True, "data": {"sent": sent}}
