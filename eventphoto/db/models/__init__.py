"""SQLAlchemy ORM models."""

from eventphoto.db.models.auth import Organization, OrganizationUser, User
from eventphoto.db.models.billing import Invoice, Payment, Subscription, SubscriptionPlan
from eventphoto.db.models.consent import ConsentLog
from eventphoto.db.models.events import Event, EventCategory, Participant
from eventphoto.db.models.photos import (
    DetectedFace,
    EventPhoto,
    FaceMatchingTask,
    PhotoParticipantMatch,
)

__all__ = [
    "ConsentLog",
    "DetectedFace",
    "Event",
    "EventCategory",
    "EventPhoto",
    "FaceMatchingTask",
    "Invoice",
    "Organization",
    "OrganizationUser",
    "Participant",
    "Payment",
    "PhotoParticipantMatch",
    "Subscription",
    "SubscriptionPlan",
    "User",
]
