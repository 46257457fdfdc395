"""Billing read endpoints (mirror of the payment provider)."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventphoto.core.deps import get_db, require_admin
from eventphoto.schemas.auth import UserSession
from eventphoto.schemas.billing import SubscriptionRead, SubscriptionSummary
from eventphoto.services import billing_service, org_service

router = APIRouter(prefix="/billing", tags=["billing"])


@router.get("/subscription", response_model=SubscriptionSummary)
def get_subscription(
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_admin),
):
    org = org_service.get_org(db, session.org_id)
    subscription = billing_service.get_current_subscription(db, session.org_id)
    return SubscriptionSummary(
        subscription_status=org.subscription_status,
        subscription=SubscriptionRead.model_validate(subscription) if subscription else None,
    )
