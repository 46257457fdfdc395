"""Photo and face matching enums."""

from enum import Enum


class ReviewStatus(str, Enum):
    """Moderation status of an uploaded photo."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class FaceMatchingStatus(str, Enum):
    """
    Status of a face matching task.

    Workflow: pending → processing → completed/failed
    Advanced by the external compute service reporting back.
    """

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
