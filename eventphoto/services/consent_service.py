"""Consent service - append-only log of consent grants and revocations."""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from eventphoto.core.exceptions import NotFound
from eventphoto.db.enums import ConsentAction, ConsentType
from eventphoto.db.models import ConsentLog, Event, Participant
from eventphoto.schemas.consent import ConsentCreate
from eventphoto.services import membership_service

logger = logging.getLogger(__name__)


def _visible_event(db: Session, user_id: UUID, org_ids: list[UUID], event_id: UUID) -> Event:
    """An event of one of the user's organizations, or one they take part in."""
    event = db.get(Event, event_id)
    if event is not None:
        if event.org_id in org_ids:
            return event
        linked = (
            db.query(Participant.id)
            .filter(Participant.event_id == event.id, Participant.user_id == user_id)
            .first()
        )
        if linked:
            return event
    raise NotFound("Event not found")


def _visible_participant(
    db: Session, user_id: UUID, org_ids: list[UUID], participant_id: UUID
) -> Participant:
    participant = db.get(Participant, participant_id)
    if participant is not None:
        if participant.user_id == user_id or participant.event.org_id in org_ids:
            return participant
    raise NotFound("Participant not found")


def record_consent(
    db: Session,
    user_id: UUID,
    data: ConsentCreate,
    details: str | None = None,
) -> ConsentLog:
    """
    Append a consent record for the user.

    A FACIAL_RECOGNITION grant or revocation for a participant linked to the
    user also updates that participant's consent_status.

    Raises:
        NotFound: referenced event/participant is not visible to the user
    """
    org_ids = membership_service.get_org_ids_for_user(db, user_id)

    event_id = None
    if data.event_id is not None:
        event_id = _visible_event(db, user_id, org_ids, data.event_id).id

    participant = None
    if data.participant_id is not None:
        participant = _visible_participant(db, user_id, org_ids, data.participant_id)
        if event_id is not None and participant.event_id != event_id:
            raise NotFound("Participant not found")

    log = ConsentLog(
        user_id=user_id,
        event_id=event_id,
        participant_id=participant.id if participant else None,
        consent_type=data.consent_type.value,
        action=data.action.value,
        details=details if details is not None else data.details,
    )
    db.add(log)

    if (
        participant is not None
        and participant.user_id == user_id
        and data.consent_type == ConsentType.FACIAL_RECOGNITION
    ):
        participant.consent_status = data.action == ConsentAction.GRANTED

    db.commit()
    db.refresh(log)
    logger.info(
        "Consent %s recorded",
        data.action.value,
        extra={"user_id": str(user_id)},
    )
    return log


def list_consents(db: Session, user_id: UUID) -> list[ConsentLog]:
    return (
        db.query(ConsentLog)
        .filter(ConsentLog.user_id == user_id)
        .order_by(ConsentLog.timestamp.desc(), ConsentLog.id)
        .all()
    )
