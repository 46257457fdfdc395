"""Participant service - people tracked against an event."""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventphoto.core.exceptions import DuplicateEmail, NotFound, ValidationFailed
from eventphoto.core.structured_logging import build_log_context
from eventphoto.db.enums import DEFAULT_REGISTRATION_STATUS
from eventphoto.db.models import Event, Participant
from eventphoto.schemas.participant import ParticipantForm, ParticipantUpdate
from eventphoto.services import event_service
from eventphoto.utils.normalization import is_valid_email, normalize_email, normalize_text

logger = logging.getLogger(__name__)


def get_participant(db: Session, org_id: UUID, event_id: UUID, participant_id: UUID) -> Participant:
    participant = (
        db.query(Participant)
        .join(Event, Event.id == Participant.event_id)
        .filter(
            Participant.id == participant_id,
            Participant.event_id == event_id,
            Event.org_id == org_id,
        )
        .first()
    )
    if not participant:
        raise NotFound("Participant not found")
    return participant


def list_participants(db: Session, org_id: UUID, event_id: UUID) -> list[Participant]:
    event = event_service.get_event(db, org_id, event_id)
    return (
        db.query(Participant)
        .filter(Participant.event_id == event.id)
        .order_by(Participant.name.asc())
        .all()
    )


def _flush_or_duplicate(db: Session, values: dict) -> None:
    # (event_id, email) is unique in the store; a concurrent twin loses here
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise DuplicateEmail(values=values)


def create_participant(db: Session, org_id: UUID, event_id: UUID, form: ParticipantForm) -> Participant:
    """
    Add a participant to an event.

    Raises:
        NotFound: event not in this organization
        ValidationFailed: name missing or email malformed
        DuplicateEmail: email already used in this event
    """
    event = event_service.get_event(db, org_id, event_id)
    values = form.submitted_values()
    errors: dict[str, str] = {}

    name = normalize_text(form.name)
    if not name:
        errors["name"] = "Name is required"

    email = normalize_email(form.email)
    if not email:
        errors["email"] = "Email is required"
    elif not is_valid_email(email):
        errors["email"] = "Invalid email address"

    if errors:
        raise ValidationFailed(errors=errors, values=values)

    participant = Participant(
        event_id=event.id,
        name=name,
        email=email,
        registration_status=normalize_text(form.registration_status) or DEFAULT_REGISTRATION_STATUS,
        consent_status=bool(form.consent_status),
        reference_photo_url=normalize_text(form.reference_photo_url),
    )
    db.add(participant)
    _flush_or_duplicate(db, values)
    db.commit()
    db.refresh(participant)
    logger.info(
        "Participant added",
        extra=build_log_context(org_id=org_id, event_id=event.id),
    )
    return participant


def update_participant(
    db: Session,
    org_id: UUID,
    event_id: UUID,
    participant_id: UUID,
    data: ParticipantUpdate,
) -> Participant:
    participant = get_participant(db, org_id, event_id, participant_id)
    changes = data.model_dump(exclude_unset=True)
    errors: dict[str, str] = {}

    if "name" in changes:
        name = normalize_text(changes["name"])
        if not name:
            errors["name"] = "Name is required"
        changes["name"] = name
    if "email" in changes:
        email = normalize_email(changes["email"])
        if not email or not is_valid_email(email):
            errors["email"] = "Invalid email address"
        changes["email"] = email
    if "registration_status" in changes:
        changes["registration_status"] = (
            normalize_text(changes["registration_status"]) or DEFAULT_REGISTRATION_STATUS
        )
    if "consent_status" in changes:
        changes["consent_status"] = bool(changes["consent_status"])
    if "reference_photo_url" in changes:
        changes["reference_photo_url"] = normalize_text(changes["reference_photo_url"])

    if errors:
        raise ValidationFailed(errors=errors, values=data.model_dump(exclude_unset=True))

    for field, value in changes.items():
        setattr(participant, field, value)

    _flush_or_duplicate(db, data.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(participant)
    return participant


def delete_participant(db: Session, org_id: UUID, event_id: UUID, participant_id: UUID) -> None:
    """Matches go with the participant; consent logs keep their rows."""
    participant = get_participant(db, org_id, event_id, participant_id)
    db.delete(participant)
    db.commit()
    logger.info("Participant removed", extra=build_log_context(org_id=org_id, event_id=event_id))
