"""Auth-related enums."""

from enum import Enum


class Role(str, Enum):
    """
    User roles.

    - ORGANIZATION_ADMIN: Full control of the organization, its events and billing
    - ORGANIZATION_EDITOR: Manages events, photos and participants
    - ORGANIZATION_VIEWER: Read-only access to the organization's events
    - INDIVIDUAL_USER: Attendee account without organization access
    """

    ORGANIZATION_ADMIN = "ORGANIZATION_ADMIN"
    ORGANIZATION_EDITOR = "ORGANIZATION_EDITOR"
    ORGANIZATION_VIEWER = "ORGANIZATION_VIEWER"
    INDIVIDUAL_USER = "INDIVIDUAL_USER"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_
