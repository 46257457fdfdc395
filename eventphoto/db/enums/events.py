"""Event-related enums."""

from enum import Enum


class EventStatus(str, Enum):
    """
    Lifecycle status of an event.

    Nominal order: draft → upcoming → active → completed → archived.
    Owners may assign any value (see core.state_machines).
    """

    DRAFT = "DRAFT"
    UPCOMING = "UPCOMING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"
