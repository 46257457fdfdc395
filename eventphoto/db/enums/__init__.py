"""Enum definitions for application constants."""

from eventphoto.db.enums.auth import Role
from eventphoto.db.enums.billing import (
    InvoiceStatus,
    PaymentStatus,
    SubscriptionStatus,
)
from eventphoto.db.enums.consent import ConsentAction, ConsentType
from eventphoto.db.enums.defaults import (
    DEFAULT_EVENT_STATUS,
    DEFAULT_REGISTRATION_STATUS,
    DEFAULT_REVIEW_STATUS,
    DEFAULT_TASK_STATUS,
)
from eventphoto.db.enums.events import EventStatus
from eventphoto.db.enums.permissions import (
    ROLES_CAN_MANAGE_EVENTS,
    ROLES_CAN_MANAGE_ORG,
    ROLES_CAN_VIEW_EVENTS,
)
from eventphoto.db.enums.photos import FaceMatchingStatus, ReviewStatus


def enum_check(column: str, enum_cls) -> str:
    """Build a CHECK constraint expression restricting a column to an enum's values."""
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


__all__ = [
    "ConsentAction",
    "ConsentType",
    "DEFAULT_EVENT_STATUS",
    "DEFAULT_REGISTRATION_STATUS",
    "DEFAULT_REVIEW_STATUS",
    "DEFAULT_TASK_STATUS",
    "EventStatus",
    "FaceMatchingStatus",
    "InvoiceStatus",
    "PaymentStatus",
    "ROLES_CAN_MANAGE_EVENTS",
    "ROLES_CAN_MANAGE_ORG",
    "ROLES_CAN_VIEW_EVENTS",
    "ReviewStatus",
    "Role",
    "SubscriptionStatus",
    "enum_check",
]
