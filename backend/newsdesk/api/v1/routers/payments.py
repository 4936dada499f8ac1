# newsdesk/api/v1/routers/payments.py
from fastapi import APIRouter, Depends, Header, Request

from newsdesk.api.v1.deps import get_current_account, get_payments, get_storage
from newsdesk.config import settings
from newsdesk.schemas.user import CheckoutIn
from newsdesk.services.payments import StripeGateway
from newsdesk.storage.base import Storage
from newsdesk.storage.records import AccountProfile

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/checkout")
async def create_checkout(
    body: CheckoutIn,
    request: Request,
    account: AccountProfile = Depends(get_current_account),
    payments: StripeGateway = Depends(get_payments),
    storage: Storage = Depends(get_storage),
):
    """
    Start a Stripe subscription checkout for the caller.

    Returns:
        dict: {"success": True, "data": {"url": <Stripe hosted checkout URL>}}

    Raises:
        FeatureDisabled (503 PAYMENTS_DISABLED): Stripe is not configured
        CollaboratorError (502): Stripe rejected the request
    """
    origin = request.headers.get("origin") or settings.CORS_ORIGINS[0]
    url = await payments.create_checkout(storage, account, body.priceId, origin)
    return {"success": True, "data": {"url": url}}


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None, alias="Stripe-Signature"),
    payments: StripeGateway = Depends(get_payments),
    storage: Storage = Depends(get_storage),
):
    """
    Stripe webhook receiver.

    The signature is checked over the raw body before anything is parsed.
    Redelivered events are acknowledged without being applied twice.
    """
    payload = await request.body()
    event = payments.verify_event(payload, stripe_signature)
    outcome = await payments.apply_event(storage, event)
    return {"received": True, "outcome": outcome}
