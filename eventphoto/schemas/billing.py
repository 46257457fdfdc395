"""Billing mirror schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class PlanRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    name: str
    description: str | None
    features: list
    price: int
    currency: str
    interval: str


class SubscriptionRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    status: str
    current_period_start: datetime | None
    current_period_end: datetime | None
    cancel_at_period_end: bool
    plan: PlanRead


class SubscriptionSummary(BaseModel):
    subscription_status: str | None
    subscription: SubscriptionRead | None
