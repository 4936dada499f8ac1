"""
Unit tests for services.payments: webhook verification and reconciliation.
"""
import hashlib
import hmac
import json
import time

import pytest
import pytest_asyncio

from newsdesk.core.errors import FeatureDisabled, ValidationFailure
from newsdesk.services.payments import StripeGateway
from newsdesk.storage.memory import MemoryStorage

SECRET = "whsec_unit"


def sign(payload: bytes, secret: str = SECRET, ts: int | None = None) -> str:
    ts = int(time.time()) if ts is None else ts
    mac = hmac.new(secret.encode(), f"{ts}.".encode() + payload, hashlib.sha256).hexdigest()
    return f"t={ts},v1={mac}"


def subscription_event(event_id, kind="created", status="active", sub_id="sub_1", customer="cus_1"):
    now = int(time.time())
    return {
        "id": event_id,
        "type": f"customer.subscription.{kind}",
        "data": {
            "object": {
                "id": sub_id,
                "customer": customer,
                "status": status,
                "items": {"data": [{
                    "price": {"nickname": "monthly"},
                    "current_period_start": now,
                    "current_period_end": now + 30 * 86400,
                }]},
            }
        },
    }


class FlakyStorage(MemoryStorage):
    """Memory storage whose first subscription insert fails."""

    def __init__(self):
        super().__init__()
        self.failures = 1

    async def create_subscription(self, **fields):
        if self.failures:
            self.failures -= 1
            raise RuntimeError("database unavailable")
        return await super().create_subscription(**fields)


@pytest.fixture
def gateway():
    return StripeGateway(api_key=None, webhook_secret=SECRET)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest_asyncio.fixture
async def reader(storage):
    return await storage.create_account(
        username="alice", email="alice@example.com", password_hash="x", stripe_customer_id="cus_1",
    )


class TestVerifyEvent:
    def test_valid_signature(self, gateway):
        payload = json.dumps(subscription_event("evt_1")).encode()
        event = gateway.verify_event(payload, sign(payload))
        assert event["id"] == "evt_1"

    def test_bad_signature_is_rejected(self, gateway):
        payload = json.dumps(subscription_event("evt_1")).encode()
        with pytest.raises(ValidationFailure) as exc:
            gateway.verify_event(payload, sign(payload, secret="whsec_other"))
        assert exc.value.code == "INVALID_SIGNATURE"

    def test_tampered_body_is_rejected(self, gateway):
        payload = json.dumps(subscription_event("evt_1")).encode()
        header = sign(payload)
        with pytest.raises(ValidationFailure):
            gateway.verify_event(payload.replace(b"active", b"paused"), header)

    def test_stale_signature_is_rejected(self, gateway):
        payload = json.dumps(subscription_event("evt_old")).encode()
        week_ago = int(time.time()) - 7 * 86400
        with pytest.raises(ValidationFailure) as exc:
            gateway.verify_event(payload, sign(payload, ts=week_ago))
        assert exc.value.code == "INVALID_SIGNATURE"

    def test_missing_header(self, gateway):
        with pytest.raises(ValidationFailure):
            gateway.verify_event(b"{}", None)

    def test_unconfigured_webhook(self):
        with pytest.raises(FeatureDisabled):
            StripeGateway(api_key=None, webhook_secret=None).verify_event(b"{}", "t=1,v1=x")


@pytest.mark.asyncio
class TestApplyEvent:
    async def test_active_subscription_grants_premium(self, gateway, storage, reader):
        assert await gateway.apply_event(storage, subscription_event("evt_1")) == "processed"
        account = await storage.get_account(reader.id)
        assert account.is_premium is True
        assert account.stripe_subscription_id == "sub_1"
        subs = await storage.list_subscriptions(reader.id)
        assert [(s.plan, s.status, s.external_ref) for s in subs] == [("monthly", "active", "sub_1")]

    async def test_redelivered_event_is_applied_once(self, gateway, storage, reader):
        event = subscription_event("evt_1")
        await gateway.apply_event(storage, event)
        await storage.update_account(reader.id, is_premium=False)  # e.g. admin override after delivery
        assert await gateway.apply_event(storage, event) == "duplicate"
        assert (await storage.get_account(reader.id)).is_premium is False
        assert len(await storage.list_subscriptions(reader.id)) == 1

    async def test_deleted_subscription_revokes_premium(self, gateway, storage, reader):
        await gateway.apply_event(storage, subscription_event("evt_1"))
        await gateway.apply_event(storage, subscription_event("evt_2", kind="deleted", status="canceled"))
        account = await storage.get_account(reader.id)
        assert account.is_premium is False
        assert account.stripe_subscription_id is None
        subs = await storage.list_subscriptions(reader.id)
        assert len(subs) == 1
        assert subs[0].status == "canceled"

    async def test_other_active_subscription_keeps_premium(self, gateway, storage, reader):
        await gateway.apply_event(storage, subscription_event("evt_1", sub_id="sub_1"))
        await gateway.apply_event(storage, subscription_event("evt_2", sub_id="sub_2"))
        await gateway.apply_event(storage, subscription_event("evt_3", kind="deleted", sub_id="sub_1"))
        assert (await storage.get_account(reader.id)).is_premium is True

    async def test_unknown_customer_is_ignored(self, gateway, storage, reader):
        outcome = await gateway.apply_event(storage, subscription_event("evt_1", customer="cus_unknown"))
        assert outcome == "ignored"
        assert (await storage.get_account(reader.id)).is_premium is False

    async def test_unrelated_event_type_is_ignored(self, gateway, storage):
        event = {"id": "evt_9", "type": "invoice.paid", "data": {"object": {}}}
        assert await gateway.apply_event(storage, event) == "ignored"

    async def test_failed_event_is_applied_on_redelivery(self, gateway):
        storage = FlakyStorage()
        reader = await storage.create_account(
            username="alice", email="alice@example.com", password_hash="x", stripe_customer_id="cus_1",
        )
        event = subscription_event("evt_1")
        with pytest.raises(RuntimeError):
            await gateway.apply_event(storage, event)

        assert await gateway.apply_event(storage, event) == "processed"
        assert (await storage.get_account(reader.id)).is_premium is True
        assert [s.external_ref for s in await storage.list_subscriptions(reader.id)] == ["sub_1"]
        assert await gateway.apply_event(storage, event) == "duplicate"

    async def test_subscription_event_without_object_id_records_nothing(self, gateway, storage, reader):
        event = subscription_event("evt_1")
        del event["data"]["object"]["id"]
        with pytest.raises(ValidationFailure) as exc:
            await gateway.apply_event(storage, event)
        assert exc.value.code == "INVALID_PAYLOAD"
        assert await storage.record_event("evt_1") is True
        assert await storage.list_subscriptions(reader.id) == []


@pytest.mark.asyncio
async def test_checkout_disabled_without_api_key(gateway, storage, reader):
    with pytest.raises(FeatureDisabled) as exc:
        await gateway.create_checkout(storage, reader.public(), "price_1", "http://localhost:5173")
    assert exc.value.code == "PAYMENTS_DISABLED"
