"""
Stripe billing: checkout session creation and webhook reconciliation.

Webhook flow:
  1. Verify the Stripe-Signature header against the raw body (before parsing),
     rejecting signatures older than the replay window
  2. Drop events whose id was already processed
  3. Upsert the local Subscription keyed by the Stripe subscription id
  4. Recompute the account's premium flag from its subscriptions

The premium flag is only ever written here and by admin edits.
"""
import datetime as dt
import json
import logging

import stripe
from starlette.concurrency import run_in_threadpool

from newsdesk.config import Settings
from newsdesk.core.errors import CollaboratorError, FeatureDisabled, ValidationFailure
from newsdesk.storage.base import Storage
from newsdesk.storage.records import Account, AccountProfile

logger = logging.getLogger(__name__)

SUBSCRIPTION_EVENTS = (
    "customer.subscription.created",
    "customer.subscription.updated",
    "customer.subscription.deleted",
)
# Stripe states that grant premium access
_ACTIVE_STATES = {"active", "trialing"}


def _ts(value) -> dt.datetime | None:
    if value is None:
        return None
    return dt.datetime.fromtimestamp(int(value), tz=dt.timezone.utc)


class StripeGateway:
    def __init__(
        self,
        api_key: str | None,
        webhook_secret: str | None,
        tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE,
    ):
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        # seconds a signed delivery stays valid
        self.tolerance = tolerance

    @classmethod
    def from_settings(cls, settings: Settings) -> "StripeGateway":
        gateway = cls(settings.stripe_secret_key, settings.stripe_webhook_secret)
        if not gateway.enabled:
            logger.warning("[payments] STRIPE_SECRET_KEY not set; checkout is disabled")
        return gateway

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    # ---------- checkout ----------
    async def create_checkout(self, storage: Storage, account: AccountProfile, price_id: str, origin: str) -> str:
        """Create (once) the Stripe customer for `account` and a subscription Checkout Session; return its URL."""
        if not self.enabled:
            raise FeatureDisabled("Payments are not configured", code="PAYMENTS_DISABLED")
        try:
            customer_id = account.stripe_customer_id
            if not customer_id:
                customer = await run_in_threadpool(
                    stripe.Customer.create,
                    email=account.email,
                    name=account.username,
                    metadata={"account_id": account.id},
                    api_key=self.api_key,
                )
                customer_id = customer["id"]
                await storage.update_account(account.id, stripe_customer_id=customer_id)
            session = await run_in_threadpool(
                stripe.checkout.Session.create,
                mode="subscription",
                customer=customer_id,
                line_items=[{"price": price_id, "quantity": 1}],
                success_url=f"{origin}/subscription?status=success",
                cancel_url=f"{origin}/subscription?status=cancelled",
                metadata={"account_id": account.id},
                api_key=self.api_key,
            )
        except stripe.StripeError as exc:
            logger.warning("[payments] checkout failed for account=%s: %s", account.id, type(exc).__name__)
            raise CollaboratorError("Payment provider error", code="PAYMENT_PROVIDER_ERROR") from exc
        logger.info("[payments] checkout session created for account=%s", account.id)
        return session["url"]

    # ---------- webhook ----------
    def verify_event(self, payload: bytes, signature: str | None) -> dict:
        """Check the signature over the raw body, then parse it. Raises ValidationFailure."""
        if not self.webhook_secret:
            raise FeatureDisabled("Payments webhook is not configured", code="PAYMENTS_DISABLED")
        if not signature:
            raise ValidationFailure("Missing Stripe-Signature header", code="INVALID_SIGNATURE")
        try:
            text = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(text, signature, self.webhook_secret, tolerance=self.tolerance)
            event = json.loads(text)
        except UnicodeDecodeError as exc:
            raise ValidationFailure("Invalid payload", code="INVALID_PAYLOAD") from exc
        except stripe.SignatureVerificationError as exc:
            logger.warning("[payments] webhook signature rejected")
            raise ValidationFailure("Invalid signature", code="INVALID_SIGNATURE") from exc
        except ValueError as exc:
            raise ValidationFailure("Invalid payload", code="INVALID_PAYLOAD") from exc
        if not isinstance(event, dict) or not event.get("id") or not event.get("type"):
            raise ValidationFailure("Invalid payload", code="INVALID_PAYLOAD")
        return event

    async def apply_event(self, storage: Storage, event: dict) -> str:
        """
        Reconcile one verified event. Returns "duplicate", "ignored" or "processed".

        Redelivered event ids are acknowledged without touching anything. If
        applying fails the id is forgotten again, so Stripe's retry is applied.
        """
        obj = (event.get("data") or {}).get("object") or {}
        if event["type"] in SUBSCRIPTION_EVENTS and not obj.get("id"):
            raise ValidationFailure("Subscription event without an object id", code="INVALID_PAYLOAD")

        if not await storage.record_event(event["id"]):
            logger.info("[payments] event %s already processed", event["id"])
            return "duplicate"
        try:
            return await self._apply(storage, event, obj)
        except Exception:
            await storage.forget_event(event["id"])
            logger.warning("[payments] event %s failed; left open for redelivery", event["id"])
            raise

    async def _apply(self, storage: Storage, event: dict, obj: dict) -> str:
        if event["type"] not in SUBSCRIPTION_EVENTS:
            return "ignored"

        account = await self._account_for(storage, obj)
        if account is None:
            logger.warning("[payments] event %s: no account for customer=%s", event["id"], obj.get("customer"))
            return "ignored"

        await self._upsert_subscription(storage, account, obj, deleted=event["type"].endswith(".deleted"))
        premium = await self.reconcile_premium(storage, account.id)
        logger.info("[payments] event %s (%s) account=%s premium=%s", event["id"], event["type"], account.id, premium)
        return "processed"

    async def _account_for(self, storage: Storage, obj: dict) -> Account | None:
        customer = obj.get("customer")
        if customer:
            account = await storage.get_account_by_stripe_customer(customer)
            if account is not None:
                return account
        account_id = (obj.get("metadata") or {}).get("account_id")
        if account_id:
            return await storage.get_account(account_id)
        return None

    async def _upsert_subscription(self, storage: Storage, account: Account, obj: dict, *, deleted: bool) -> None:
        items = (obj.get("items") or {}).get("data") or [{}]
        first = items[0]
        price = first.get("price") or {}
        # Newer API versions carry the billing period on the item instead of the subscription
        start = _ts(obj.get("current_period_start") or first.get("current_period_start")) or _ts(obj.get("created"))
        end = _ts(obj.get("current_period_end") or first.get("current_period_end")) or start
        status = "canceled" if deleted else ("active" if obj.get("status") in _ACTIVE_STATES else obj.get("status", "expired"))
        fields = {
            "plan": price.get("nickname") or (price.get("recurring") or {}).get("interval", "monthly"),
            "status": status,
            "start_date": start or dt.datetime.now(dt.timezone.utc),
            "end_date": end or dt.datetime.now(dt.timezone.utc),
        }

        existing = await storage.get_subscription_by_ref(obj["id"])
        if existing is None:
            await storage.create_subscription(account_id=account.id, external_ref=obj["id"], **fields)
        else:
            await storage.update_subscription(existing.id, **fields)
        await storage.update_account(
            account.id,
            stripe_customer_id=obj.get("customer") or account.stripe_customer_id,
            stripe_subscription_id=None if deleted else obj["id"],
        )

    async def reconcile_premium(self, storage: Storage, account_id: str) -> bool:
        subs = await storage.list_subscriptions(account_id)
        premium = any(s.status == "active" for s in subs)
        await storage.update_account(account_id, is_premium=premium)
        return premium
