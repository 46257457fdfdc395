"""Tests for the payment provider webhook and billing mirror."""
import json
import time

import pytest
from httpx import AsyncClient

from eventphoto.db.enums import Role
from eventphoto.db.models import Invoice, Payment, Subscription, SubscriptionPlan
from eventphoto.services import billing_service

SECRET = "whsec_test"

PRICE = {
    "id": "price_pro_monthly",
    "nickname": "Pro",
    "unit_amount": 4900,
    "currency": "EUR",
    "recurring": {"interval": "month"},
    "metadata": {"features": "face matching, 500 GB storage", "description": "For studios"},
}


@pytest.fixture
def customer_org(db, test_org):
    test_org.stripe_customer_id = "cus_123"
    db.commit()
    return test_org


def _signed_headers(body: bytes, timestamp: int | None = None, secret: str = SECRET) -> dict:
    ts = int(time.time()) if timestamp is None else timestamp
    signature = billing_service.compute_signature(body, ts, secret)
    return {"Stripe-Signature": f"t={ts},v1={signature}", "Content-Type": "application/json"}


async def _deliver(client: AsyncClient, event: dict, **kwargs):
    body = json.dumps(event).encode()
    return await client.post("/webhooks/billing", content=body, headers=_signed_headers(body, **kwargs))


def _subscription_event(event_type="customer.subscription.created", status="active"):
    return {
        "type": event_type,
        "data": {
            "object": {
                "id": "sub_1",
                "customer": "cus_123",
                "status": status,
                "current_period_start": 1767225600,
                "current_period_end": 1769904000,
                "cancel_at_period_end": False,
                "items": {"data": [{"price": PRICE}]},
            }
        },
    }


# =============================================================================
# Signature verification
# =============================================================================

def test_verify_signature_accepts_any_matching_v1():
    body = b'{"type":"ping"}'
    good = billing_service.compute_signature(body, 1000, SECRET)

    assert billing_service.verify_signature(body, f"t=1000,v1=deadbeef,v1={good}", SECRET, 300, now=1100)


@pytest.mark.parametrize(
    "header",
    [None, "", "v1=abc", "t=notanumber,v1=abc", "t=1000", "t=1000,v1=deadbeef"],
)
def test_verify_signature_rejects_malformed(header):
    assert not billing_service.verify_signature(b"{}", header, SECRET, 300, now=1000)


def test_verify_signature_rejects_stale_timestamp():
    body = b"{}"
    signature = billing_service.compute_signature(body, 1000, SECRET)

    assert not billing_service.verify_signature(body, f"t=1000,v1={signature}", SECRET, 300, now=1301)


@pytest.mark.asyncio
async def test_webhook_rejects_bad_signature(client: AsyncClient, db, customer_org):
    body = json.dumps(_subscription_event()).encode()

    wrong_secret = await client.post(
        "/webhooks/billing", content=body, headers=_signed_headers(body, secret="whsec_other")
    )
    stale = await _deliver(client, _subscription_event(), timestamp=int(time.time()) - 3600)

    assert wrong_secret.status_code == 400
    assert stale.status_code == 400
    assert db.query(Subscription).count() == 0


@pytest.mark.asyncio
async def test_webhook_rejects_invalid_json(client: AsyncClient):
    body = b"not json"
    response = await client.post("/webhooks/billing", content=body, headers=_signed_headers(body))

    assert response.status_code == 400


# =============================================================================
# Projections
# =============================================================================

@pytest.mark.asyncio
async def test_price_event_creates_plan(client: AsyncClient, db):
    response = await _deliver(client, {"type": "price.created", "data": {"object": PRICE}})

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "applied": True}
    plan = db.query(SubscriptionPlan).one()
    assert plan.name == "Pro"
    assert plan.price == 4900
    assert plan.currency == "eur"
    assert plan.features == ["face matching", "500 GB storage"]


@pytest.mark.asyncio
async def test_subscription_lifecycle(client: AsyncClient, db, customer_org):
    created = await _deliver(client, _subscription_event())
    db.refresh(customer_org)
    status_after_create = customer_org.subscription_status

    deleted = await _deliver(client, _subscription_event("customer.subscription.deleted", status="active"))
    db.refresh(customer_org)

    assert created.json()["applied"] is True
    assert deleted.json()["applied"] is True
    assert status_after_create == "ACTIVE"
    assert customer_org.subscription_status == "CANCELED"
    subscription = db.query(Subscription).one()
    assert subscription.status == "CANCELED"
    assert subscription.plan.stripe_price_id == "price_pro_monthly"


@pytest.mark.asyncio
async def test_unknown_customer_is_acknowledged(client: AsyncClient, db, test_org):
    response = await _deliver(client, _subscription_event())

    assert response.status_code == 200
    assert response.json()["applied"] is False
    assert db.query(Subscription).count() == 0


@pytest.mark.asyncio
async def test_unhandled_event_type_is_acknowledged(client: AsyncClient):
    response = await _deliver(client, {"type": "customer.created", "data": {"object": {"id": "cus_9"}}})

    assert response.status_code == 200
    assert response.json()["applied"] is False


@pytest.mark.asyncio
async def test_invoice_and_charge(client: AsyncClient, db, customer_org):
    await _deliver(
        client,
        {
            "type": "invoice.paid",
            "data": {
                "object": {
                    "id": "in_1",
                    "customer": "cus_123",
                    "amount_due": 4900,
                    "amount_paid": 4900,
                    "currency": "eur",
                    "status": "paid",
                    "invoice_pdf": "https://pay.photos.io/in_1.pdf",
                }
            },
        },
    )
    await _deliver(
        client,
        {
            "type": "charge.succeeded",
            "data": {
                "object": {
                    "id": "ch_1",
                    "customer": {"id": "cus_123"},
                    "invoice": "in_1",
                    "amount": 4900,
                    "currency": "eur",
                }
            },
        },
    )

    invoice = db.query(Invoice).one()
    payment = db.query(Payment).one()
    assert invoice.status == "PAID"
    assert invoice.org_id == customer_org.id
    assert payment.status == "SUCCEEDED"
    assert payment.invoice_id == invoice.id


@pytest.mark.asyncio
async def test_redelivered_event_does_not_duplicate(client: AsyncClient, db, customer_org):
    await _deliver(client, _subscription_event())
    await _deliver(client, _subscription_event(status="past_due"))

    subscription = db.query(Subscription).one()
    assert subscription.status == "PAST_DUE"
    assert db.query(SubscriptionPlan).count() == 1


@pytest.mark.asyncio
async def test_malformed_subscription_items_are_acknowledged(client: AsyncClient, db, customer_org):
    event = _subscription_event()
    event["data"]["object"]["items"] = {"data": ["price_pro_monthly"]}

    response = await _deliver(client, event)

    assert response.status_code == 200
    assert response.json()["applied"] is False
    assert db.query(Subscription).count() == 0


@pytest.mark.asyncio
async def test_malformed_fields_roll_back_partial_writes(client: AsyncClient, db, customer_org):
    event = _subscription_event()
    event["data"]["object"]["current_period_end"] = "next month"

    response = await _deliver(client, event)

    assert response.status_code == 200
    assert response.json()["applied"] is False
    db.expire_all()
    assert db.query(SubscriptionPlan).count() == 0
    assert db.query(Subscription).count() == 0
    assert customer_org.subscription_status is None


@pytest.mark.asyncio
async def test_non_numeric_invoice_amount_is_acknowledged(client: AsyncClient, db, customer_org):
    response = await _deliver(
        client,
        {
            "type": "invoice.paid",
            "data": {
                "object": {
                    "id": "in_2",
                    "customer": "cus_123",
                    "amount_due": "forty-nine",
                    "currency": "eur",
                    "status": "paid",
                }
            },
        },
    )

    assert response.status_code == 200
    assert response.json()["applied"] is False
    assert db.query(Invoice).count() == 0


# =============================================================================
# Read endpoint
# =============================================================================

@pytest.mark.asyncio
async def test_get_subscription(authed_client: AsyncClient, client: AsyncClient, customer_org):
    empty = await authed_client.get("/billing/subscription")
    await _deliver(client, _subscription_event())
    current = await authed_client.get("/billing/subscription")

    assert empty.json() == {"subscription_status": None, "subscription": None}
    data = current.json()
    assert data["subscription_status"] == "ACTIVE"
    assert data["subscription"]["plan"]["name"] == "Pro"


@pytest.mark.asyncio
async def test_subscription_requires_admin(client_factory, user_factory, auth_factory, test_org):
    editor = user_factory(test_org, Role.ORGANIZATION_EDITOR)
    async with client_factory(auth_factory(editor, test_org).token) as c:
        response = await c.get("/billing/subscription")

    assert response.status_code == 403
