"""
Legal status transitions.

Event status is assigned freely by its owners. Photo review and face
matching tasks follow the tables below; payment mirror rows take whatever
the provider last reported and are not checked here.
"""

from eventphoto.core.exceptions import InvalidTransition
from eventphoto.db.enums import EventStatus, FaceMatchingStatus, ReviewStatus


EVENT_TRANSITIONS: dict[EventStatus, set[EventStatus]] = {
    status: set(EventStatus) for status in EventStatus
}

REVIEW_TRANSITIONS: dict[ReviewStatus, set[ReviewStatus]] = {
    ReviewStatus.PENDING: {ReviewStatus.APPROVED, ReviewStatus.REJECTED},
    ReviewStatus.APPROVED: set(),
    ReviewStatus.REJECTED: set(),
}

TASK_TRANSITIONS: dict[FaceMatchingStatus, set[FaceMatchingStatus]] = {
    FaceMatchingStatus.PENDING: {FaceMatchingStatus.PROCESSING, FaceMatchingStatus.FAILED},
    FaceMatchingStatus.PROCESSING: {FaceMatchingStatus.COMPLETED, FaceMatchingStatus.FAILED},
    FaceMatchingStatus.COMPLETED: set(),
    FaceMatchingStatus.FAILED: set(),
}

TERMINAL_TASK_STATUSES = {FaceMatchingStatus.COMPLETED, FaceMatchingStatus.FAILED}


def can_transition(table: dict, current, target) -> bool:
    return target in table.get(current, set())


def check_event_transition(current: str, target: str) -> EventStatus:
    target_status = EventStatus(target)
    if not can_transition(EVENT_TRANSITIONS, EventStatus(current), target_status):
        raise InvalidTransition("event", current, target)
    return target_status


def check_review_transition(current: str, target: str) -> ReviewStatus:
    target_status = ReviewStatus(target)
    if not can_transition(REVIEW_TRANSITIONS, ReviewStatus(current), target_status):
        raise InvalidTransition("photo", current, target)
    return target_status


def check_task_transition(current: str, target: str) -> bool:
    """
    Validate a face matching task status report.

    Returns False when the report repeats the current status (a redelivered
    callback), True when the status should change.

    Raises:
        InvalidTransition: target is not reachable from current
    """
    current_status = FaceMatchingStatus(current)
    target_status = FaceMatchingStatus(target)
    if current_status == target_status:
        return False
    if not can_transition(TASK_TRANSITIONS, current_status, target_status):
        raise InvalidTransition("face matching task", current, target)
    return True
