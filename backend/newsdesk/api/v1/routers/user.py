# newsdesk/api/v1/routers/user.py
from fastapi import APIRouter, Depends, status

from newsdesk.api.v1.deps import get_account_service, get_current_account, get_storage
from newsdesk.schemas.auth import AccountOut
from newsdesk.schemas.user import (
    LinkTelegramIn,
    ProfileUpdateIn,
    SubscriptionOut,
    TicketCreateIn,
    TicketOut,
)
from newsdesk.services.accounts import AccountService
from newsdesk.storage.base import Storage
from newsdesk.storage.records import AccountProfile

router = APIRouter(tags=["user"])


@router.patch("/user/profile")
async def update_profile(
    body: ProfileUpdateIn,
    account: AccountProfile = Depends(get_current_account),
    accounts: AccountService = Depends(get_account_service),
):
    """
    Update the caller's own profile.

    Only username, email, locale, country and city are accepted; role and
    premium status are not client-settable.

    Raises:
        ConflictFailure (409): USERNAME_EXISTS / EMAIL_EXISTS
    """
    updated = await accounts.update_profile(account, body)
    return {"success": True, "data": AccountOut.from_record(updated).model_dump(mode="json")}


@router.post("/user/link-telegram")
async def link_telegram(
    body: LinkTelegramIn,
    account: AccountProfile = Depends(get_current_account),
    accounts: AccountService = Depends(get_account_service),
):
    """Link a Telegram chat id; a welcome message is sent when the main bot is configured."""
    updated = await accounts.link_telegram(account, body.telegramId)
    return {"success": True, "data": AccountOut.from_record(updated).model_dump(mode="json")}


@router.get("/user/subscription")
async def my_subscriptions(
    account: AccountProfile = Depends(get_current_account),
    storage: Storage = Depends(get_storage),
):
    subs = await storage.list_subscriptions(account.id)
    return {
        "success": True,
        "data": {
            "isPremium": account.is_premium,
            "subscriptions": [SubscriptionOut.from_record(s).model_dump(mode="json") for s in subs],
        },
    }


# ---------- support tickets (owner side) ----------
@router.post("/support/tickets", status_code=status.HTTP_201_CREATED)
async def create_ticket(
    body: TicketCreateIn,
    account: AccountProfile = Depends(get_current_account),
    storage: Storage = Depends(get_storage),
):
    ticket = await storage.create_ticket(account_id=account.id, subject=body.subject, message=body.message)
    return {"success": True, "data": TicketOut.from_record(ticket).model_dump(mode="json")}


@router.get("/support/tickets")
async def my_tickets(
    account: AccountProfile = Depends(get_current_account),
    storage: Storage = Depends(get_storage),
):
    tickets = await storage.list_tickets(account.id)
    return {"success": True, "data": [TicketOut.from_record(t).model_dump(mode="json") for t in tickets]}
