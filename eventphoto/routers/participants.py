"""Participant endpoints, nested under an event."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from eventphoto.core.deps import get_db, require_csrf_header, require_editor, require_viewer
from eventphoto.schemas.auth import UserSession
from eventphoto.schemas.participant import ParticipantForm, ParticipantRead, ParticipantUpdate
from eventphoto.services import participant_service

router = APIRouter(prefix="/events/{event_id}/participants", tags=["participants"])


@router.get("", response_model=list[ParticipantRead])
def list_participants(
    event_id: UUID,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_viewer),
):
    return participant_service.list_participants(db, session.org_id, event_id)


@router.post(
    "",
    response_model=ParticipantRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_participant(
    event_id: UUID,
    body: ParticipantForm,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_editor),
):
    return participant_service.create_participant(db, session.org_id, event_id, body)


@router.get("/{participant_id}", response_model=ParticipantRead)
def get_participant(
    event_id: UUID,
    participant_id: UUID,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_viewer),
):
    return participant_service.get_participant(db, session.org_id, event_id, participant_id)


@router.patch(
    "/{participant_id}",
    response_model=ParticipantRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_participant(
    event_id: UUID,
    participant_id: UUID,
    body: ParticipantUpdate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_editor),
):
    return participant_service.update_participant(
        db, session.org_id, event_id, participant_id, body
    )


@router.delete(
    "/{participant_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_participant(
    event_id: UUID,
    participant_id: UUID,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_editor),
):
    participant_service.delete_participant(db, session.org_id, event_id, participant_id)
    return Response(status_code=204)
