"""Face matching endpoints (tenant side). The compute callback lives in webhooks."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eventphoto.core.deps import (
    get_compute,
    get_db,
    require_csrf_header,
    require_editor,
    require_viewer,
)
from eventphoto.schemas.auth import UserSession
from eventphoto.schemas.photo import FaceMatchingTaskRead, MatchRead
from eventphoto.services import face_matching_service
from eventphoto.services.compute_service import ComputeTrigger

router = APIRouter(prefix="/events/{event_id}", tags=["face-matching"])


@router.post(
    "/face-matching",
    response_model=FaceMatchingTaskRead,
    status_code=202,
    dependencies=[Depends(require_csrf_header)],
)
def initiate_face_matching(
    event_id: UUID,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_editor),
    compute: ComputeTrigger = Depends(get_compute),
):
    """Start matching the event's photos against its participants."""
    return face_matching_service.initiate_face_matching(
        db,
        org_id=session.org_id,
        event_id=event_id,
        user_id=session.user_id,
        compute=compute,
    )


@router.get("/face-matching/{task_id}", response_model=FaceMatchingTaskRead)
def get_face_matching_task(
    event_id: UUID,
    task_id: UUID,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_viewer),
):
    return face_matching_service.get_task(db, session.org_id, event_id, task_id)


@router.get("/matches", response_model=list[MatchRead])
def list_matches(
    event_id: UUID,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_viewer),
):
    return face_matching_service.list_matches(db, session.org_id, event_id)
