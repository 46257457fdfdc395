"""
Payment provider mirror.

Inbound provider notifications (Stripe-style events) are verified and
projected onto SubscriptionPlan, Subscription, Invoice and Payment rows.
The latest notification wins; there is no transition checking.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import time
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from eventphoto.db.enums import InvoiceStatus, PaymentStatus, SubscriptionStatus
from eventphoto.db.models import Invoice, Organization, Payment, Subscription, SubscriptionPlan
from eventphoto.services import org_service

logger = logging.getLogger(__name__)

SIGNATURE_SCHEME = "v1"


# =============================================================================
# Signature verification
# =============================================================================

def _parse_signature_header(header: str) -> tuple[int | None, list[str]]:
    timestamp = None
    signatures: list[str] = []
    for item in header.split(","):
        key, _, value = item.strip().partition("=")
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError:
                return None, []
        elif key == SIGNATURE_SCHEME and value:
            signatures.append(value)
    return timestamp, signatures


def compute_signature(payload: bytes, timestamp: int, secret: str) -> str:
    signed = str(timestamp).encode("utf-8") + b"." + payload
    return hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()


def verify_signature(
    payload: bytes,
    header: str | None,
    secret: str,
    tolerance_seconds: int,
    now: float | None = None,
) -> bool:
    """
    Verify a `t=<unix>,v1=<hex>` signature header.

    The HMAC-SHA256 covers "<t>.<raw body>". Timestamps outside the
    tolerance window are rejected to limit replays.
    """
    if not header or not secret:
        return False
    timestamp, signatures = _parse_signature_header(header)
    if timestamp is None or not signatures:
        return False
    current = time.time() if now is None else now
    if abs(current - timestamp) > tolerance_seconds:
        return False
    expected = compute_signature(payload, timestamp, secret)
    return any(hmac.compare_digest(expected, sig) for sig in signatures)


# =============================================================================
# Helpers
# =============================================================================

def _from_unix(value: Any) -> datetime | None:
    if value in (None, ""):
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _ref_id(value: Any) -> str | None:
    """Provider references arrive either as an id string or an expanded object."""
    if isinstance(value, dict):
        return value.get("id")
    return value


def _resolve_org(db: Session, customer: Any, event_type: str) -> Organization | None:
    customer_id = _ref_id(customer)
    org = org_service.get_org_by_stripe_customer(db, customer_id) if customer_id else None
    if org is None:
        logger.warning("Billing event %s for unknown customer ignored", event_type)
    return org


def _coerce_status(enum_cls, raw: str | None, event_type: str):
    try:
        return enum_cls((raw or "").upper())
    except ValueError:
        logger.warning("Billing event %s has unrecognised status %r", event_type, raw)
        return None


# =============================================================================
# Projections
# =============================================================================

def upsert_plan(db: Session, price: dict) -> SubscriptionPlan:
    """Create or refresh the plan for a provider price object."""
    plan = (
        db.query(SubscriptionPlan)
        .filter(SubscriptionPlan.stripe_price_id == price["id"])
        .first()
    )
    if plan is None:
        plan = SubscriptionPlan(stripe_price_id=price["id"])
        db.add(plan)

    product = price.get("product")
    metadata = price.get("metadata") or {}
    product_name = product.get("name") if isinstance(product, dict) else None
    features = metadata.get("features") or ""

    plan.name = price.get("nickname") or product_name or price["id"]
    plan.description = metadata.get("description")
    plan.features = [f.strip() for f in features.split(",") if f.strip()]
    plan.price = int(price.get("unit_amount") or 0)
    plan.currency = (price.get("currency") or "usd").lower()
    plan.interval = (price.get("recurring") or {}).get("interval") or "month"
    plan.is_active = bool(price.get("active", True))
    db.flush()
    return plan


def _plan_for_subscription(db: Session, obj: dict) -> SubscriptionPlan | None:
    items = (obj.get("items") or {}).get("data") or []
    if not items:
        return None
    price = items[0].get("price") or {}
    if not price.get("id"):
        return None
    return upsert_plan(db, price)


def upsert_subscription(db: Session, obj: dict, event_type: str) -> Subscription | None:
    org = _resolve_org(db, obj.get("customer"), event_type)
    if org is None:
        return None

    status = _coerce_status(SubscriptionStatus, obj.get("status"), event_type)
    if event_type == "customer.subscription.deleted":
        status = SubscriptionStatus.CANCELED
    if status is None:
        return None

    subscription = (
        db.query(Subscription)
        .filter(Subscription.stripe_subscription_id == obj["id"])
        .first()
    )
    plan = _plan_for_subscription(db, obj)
    if subscription is None:
        if plan is None:
            logger.warning("Billing event %s without a price ignored", event_type)
            return None
        subscription = Subscription(org_id=org.id, stripe_subscription_id=obj["id"], plan_id=plan.id)
        db.add(subscription)
    elif plan is not None:
        subscription.plan_id = plan.id

    subscription.status = status.value
    subscription.current_period_start = _from_unix(obj.get("current_period_start"))
    subscription.current_period_end = _from_unix(obj.get("current_period_end"))
    subscription.cancel_at_period_end = bool(obj.get("cancel_at_period_end"))
    org.subscription_status = status.value
    db.flush()
    return subscription


def upsert_invoice(db: Session, obj: dict, event_type: str) -> Invoice | None:
    org = _resolve_org(db, obj.get("customer"), event_type)
    if org is None:
        return None
    status = _coerce_status(InvoiceStatus, obj.get("status"), event_type)
    if status is None:
        return None

    invoice = db.query(Invoice).filter(Invoice.stripe_invoice_id == obj["id"]).first()
    if invoice is None:
        invoice = Invoice(org_id=org.id, stripe_invoice_id=obj["id"])
        db.add(invoice)
    invoice.amount_due = int(obj.get("amount_due") or 0)
    invoice.amount_paid = int(obj.get("amount_paid") or 0)
    invoice.currency = (obj.get("currency") or "usd").lower()
    invoice.status = status.value
    invoice.invoice_pdf_url = obj.get("invoice_pdf")
    db.flush()
    return invoice


def upsert_payment(db: Session, obj: dict, event_type: str) -> Payment | None:
    org = _resolve_org(db, obj.get("customer"), event_type)
    if org is None:
        return None
    status = _coerce_status(PaymentStatus, event_type.rsplit(".", 1)[-1], event_type)
    if status is None:
        return None

    payment = db.query(Payment).filter(Payment.stripe_charge_id == obj["id"]).first()
    if payment is None:
        payment = Payment(org_id=org.id, stripe_charge_id=obj["id"])
        db.add(payment)

    invoice_ref = _ref_id(obj.get("invoice"))
    if invoice_ref:
        invoice = db.query(Invoice).filter(Invoice.stripe_invoice_id == invoice_ref).first()
        payment.invoice_id = invoice.id if invoice else None
    payment.amount = int(obj.get("amount") or 0)
    payment.currency = (obj.get("currency") or "usd").lower()
    payment.status = status.value
    db.flush()
    return payment


def handle_event(db: Session, event: dict) -> bool:
    """
    Apply one verified notification. Returns True when something was written.

    Unknown event types and unknown customers are acknowledged and ignored.
    A payload whose fields have the wrong shape is rolled back and ignored.
    """
    try:
        return _dispatch_event(db, event)
    except (AttributeError, KeyError, TypeError, ValueError):
        db.rollback()
        logger.warning("Malformed billing event %s ignored", event.get("type"), exc_info=True)
        return False


def _dispatch_event(db: Session, event: dict) -> bool:
    event_type = event.get("type") or ""
    obj = (event.get("data") or {}).get("object") or {}
    if not obj.get("id"):
        logger.warning("Billing event %s without object id ignored", event_type)
        return False

    if event_type in ("price.created", "price.updated"):
        result = upsert_plan(db, obj)
    elif event_type.startswith("customer.subscription."):
        result = upsert_subscription(db, obj, event_type)
    elif event_type.startswith("invoice."):
        result = upsert_invoice(db, obj, event_type)
    elif event_type in ("charge.succeeded", "charge.failed", "charge.pending"):
        result = upsert_payment(db, obj, event_type)
    else:
        logger.info("Billing event %s not handled", event_type)
        return False

    db.commit()
    return result is not None


def get_current_subscription(db: Session, org_id: UUID) -> Subscription | None:
    return (
        db.query(Subscription)
        .filter(Subscription.org_id == org_id)
        .order_by(Subscription.updated_at.desc(), Subscription.created_at.desc())
        .first()
    )
