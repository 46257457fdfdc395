"""Event service - events and event categories, always scoped by org_id."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventphoto.core.exceptions import (
    NotFound,
    PreconditionFailed,
    UpstreamFailure,
    ValidationFailed,
)
from eventphoto.core.state_machines import check_event_transition
from eventphoto.core.structured_logging import build_log_context
from eventphoto.db.enums import DEFAULT_EVENT_STATUS, EventStatus
from eventphoto.db.models import Event, EventCategory, EventPhoto, Participant
from eventphoto.schemas.event import EventForm
from eventphoto.services.storage_service import StorageBackend
from eventphoto.utils.datetime_parsing import parse_datetime
from eventphoto.utils.normalization import normalize_text

logger = logging.getLogger(__name__)

EVENT_NOT_FOUND = "Event not found"


# =============================================================================
# Validation
# =============================================================================

def _parse_category_id(db: Session, org_id: UUID, raw: str | None, errors: dict) -> UUID | None:
    raw = normalize_text(raw)
    if raw is None:
        return None
    try:
        category_id = UUID(raw)
    except ValueError:
        errors["category_id"] = "Invalid category"
        return None
    exists = (
        db.query(EventCategory.id)
        .filter(EventCategory.id == category_id, EventCategory.org_id == org_id)
        .first()
    )
    if not exists:
        errors["category_id"] = "Invalid category"
        return None
    return category_id


def _validate_form(db: Session, org_id: UUID, form: EventForm) -> dict:
    """Check every field and return cleaned column values, or raise with all errors."""
    errors: dict[str, str] = {}

    name = normalize_text(form.name)
    if not name:
        errors["name"] = "Event name is required"
    elif len(name) > 255:
        errors["name"] = "Event name must be at most 255 characters"

    date_start = parse_datetime(form.date_start)
    if not normalize_text(form.date_start):
        errors["date_start"] = "Start date is required"
    elif date_start is None:
        errors["date_start"] = "Invalid start date"

    date_end = None
    if normalize_text(form.date_end):
        date_end = parse_datetime(form.date_end)
        if date_end is None:
            errors["date_end"] = "Invalid end date"
        elif date_start is not None and date_end < date_start:
            errors["date_end"] = "End date must be on or after the start date"

    status = None
    if normalize_text(form.status):
        try:
            status = EventStatus(form.status.strip().upper())
        except ValueError:
            errors["status"] = "Invalid status"

    category_id = _parse_category_id(db, org_id, form.category_id, errors)

    if errors:
        raise ValidationFailed(errors=errors, values=form.submitted_values())

    return {
        "name": name,
        "description": normalize_text(form.description),
        "date_start": date_start,
        "date_end": date_end,
        "location_name": normalize_text(form.location_name),
        "location_address": normalize_text(form.location_address),
        "category_id": category_id,
        "status": status,
        "is_public": bool(form.is_public),
    }


# =============================================================================
# Events
# =============================================================================

def get_event(db: Session, org_id: UUID, event_id: UUID) -> Event:
    """
    Fetch an event owned by org_id.

    Raises:
        NotFound: missing, or owned by another organization (same message)
    """
    event = (
        db.query(Event)
        .filter(Event.id == event_id, Event.org_id == org_id)
        .first()
    )
    if not event:
        raise NotFound(EVENT_NOT_FOUND)
    return event


def list_events(db: Session, org_id: UUID) -> list[Event]:
    return (
        db.query(Event)
        .filter(Event.org_id == org_id)
        .order_by(Event.date_start.desc(), Event.created_at.desc())
        .all()
    )


def get_event_counts(db: Session, event_id: UUID) -> tuple[int, int]:
    """(photo_count, participant_count)"""
    photo_count = (
        db.query(func.count(EventPhoto.id)).filter(EventPhoto.event_id == event_id).scalar()
    )
    participant_count = (
        db.query(func.count(Participant.id)).filter(Participant.event_id == event_id).scalar()
    )
    return photo_count or 0, participant_count or 0


def create_event(db: Session, org_id: UUID, form: EventForm) -> Event:
    values = _validate_form(db, org_id, form)
    status = values.pop("status") or DEFAULT_EVENT_STATUS
    event = Event(org_id=org_id, status=status.value, **values)
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Event created", extra=build_log_context(org_id=org_id, event_id=event.id))
    return event


def update_event(db: Session, org_id: UUID, event_id: UUID, form: EventForm) -> Event:
    """
    Overwrite every editable field from the form.

    Optional fields left out of the form are cleared and is_public falls back
    to False. Status is kept when not submitted.
    """
    event = get_event(db, org_id, event_id)
    values = _validate_form(db, org_id, form)

    status = values.pop("status")
    if status is not None:
        event.status = check_event_transition(event.status, status.value).value

    for field, value in values.items():
        setattr(event, field, value)

    db.commit()
    db.refresh(event)
    logger.info("Event updated", extra=build_log_context(org_id=org_id, event_id=event.id))
    return event


def delete_event(
    db: Session,
    org_id: UUID,
    event_id: UUID,
    *,
    confirm: bool,
    storage: StorageBackend | None = None,
) -> None:
    """
    Irreversibly delete an event and everything under it.

    The store cascades participants, photos (with faces and matches) and
    matching tasks; consent logs keep their rows with event_id cleared.
    Stored photo files are removed afterwards; a failure there is logged
    and does not undo the deletion.

    Raises:
        NotFound: event not in this organization
        PreconditionFailed: confirm is not True
    """
    event = get_event(db, org_id, event_id)
    if confirm is not True:
        raise PreconditionFailed("Deleting an event must be confirmed")

    photo_urls = [
        url
        for (url,) in db.query(EventPhoto.image_url).filter(EventPhoto.event_id == event.id).all()
    ]

    db.delete(event)
    db.commit()
    log_context = build_log_context(org_id=org_id, event_id=event_id)
    logger.info("Event deleted", extra=log_context)

    if storage is None:
        return
    for url in photo_urls:
        try:
            storage.delete(url)
        except UpstreamFailure:
            logger.warning("Stored photo left behind after event delete", extra=log_context)


# =============================================================================
# Categories
# =============================================================================

def list_categories(db: Session, org_id: UUID) -> list[EventCategory]:
    return (
        db.query(EventCategory)
        .filter(EventCategory.org_id == org_id)
        .order_by(EventCategory.name.asc())
        .all()
    )


def create_category(db: Session, org_id: UUID, name: str) -> EventCategory:
    cleaned = normalize_text(name)
    if not cleaned:
        raise ValidationFailed(errors={"name": "Category name is required"}, values={"name": name})
    category = EventCategory(org_id=org_id, name=cleaned)
    db.add(category)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationFailed(
            errors={"name": "A category with this name already exists"},
            values={"name": name},
        )
    db.refresh(category)
    return category


def delete_category(db: Session, org_id: UUID, category_id: UUID) -> None:
    """Events in the category are kept; the store clears their category_id."""
    category = (
        db.query(EventCategory)
        .filter(EventCategory.id == category_id, EventCategory.org_id == org_id)
        .first()
    )
    if not category:
        raise NotFound("Category not found")
    db.delete(category)
    db.commit()
