"""Centralized defaults for enums."""

from eventphoto.db.enums.events import EventStatus
from eventphoto.db.enums.photos import FaceMatchingStatus, ReviewStatus


DEFAULT_EVENT_STATUS: EventStatus = EventStatus.DRAFT
DEFAULT_REVIEW_STATUS: ReviewStatus = ReviewStatus.PENDING
DEFAULT_TASK_STATUS: FaceMatchingStatus = FaceMatchingStatus.PENDING
DEFAULT_REGISTRATION_STATUS = "Invited"
