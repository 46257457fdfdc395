"""Event and event category endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from eventphoto.core.deps import (
    get_db,
    get_storage,
    require_csrf_header,
    require_editor,
    require_viewer,
)
from eventphoto.schemas.auth import UserSession
from eventphoto.schemas.event import (
    CategoryCreate,
    CategoryRead,
    EventDetail,
    EventForm,
    EventRead,
)
from eventphoto.services import event_service
from eventphoto.services.storage_service import StorageBackend

router = APIRouter(tags=["events"])


# =============================================================================
# Events
# =============================================================================

@router.get("/events", response_model=list[EventRead])
def list_events(
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_viewer),
):
    """Events of the caller's organization, latest start first."""
    return event_service.list_events(db, session.org_id)


@router.post(
    "/events",
    response_model=EventRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_event(
    body: EventForm,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_editor),
):
    return event_service.create_event(db, session.org_id, body)


@router.get("/events/{event_id}", response_model=EventDetail)
def get_event(
    event_id: UUID,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_viewer),
):
    event = event_service.get_event(db, session.org_id, event_id)
    photo_count, participant_count = event_service.get_event_counts(db, event.id)
    detail = EventDetail.model_validate(event)
    detail.photo_count = photo_count
    detail.participant_count = participant_count
    return detail


@router.put(
    "/events/{event_id}",
    response_model=EventRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_event(
    event_id: UUID,
    body: EventForm,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_editor),
):
    return event_service.update_event(db, session.org_id, event_id, body)


@router.delete(
    "/events/{event_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_event(
    event_id: UUID,
    confirm: bool = Query(False),
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_editor),
    storage: StorageBackend = Depends(get_storage),
):
    """Irreversible: removes participants, photos and matching tasks. Requires ?confirm=true."""
    event_service.delete_event(db, session.org_id, event_id, confirm=confirm, storage=storage)
    return Response(status_code=204)


# =============================================================================
# Categories
# =============================================================================

@router.get("/event-categories", response_model=list[CategoryRead])
def list_categories(
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_viewer),
):
    return event_service.list_categories(db, session.org_id)


@router.post(
    "/event-categories",
    response_model=CategoryRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_category(
    body: CategoryCreate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_editor),
):
    return event_service.create_category(db, session.org_id, body.name)


@router.delete(
    "/event-categories/{category_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_category(
    category_id: UUID,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_editor),
):
    event_service.delete_category(db, session.org_id, category_id)
    return Response(status_code=204)
