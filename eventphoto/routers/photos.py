"""Photo endpoints: upload, list, moderation, removal."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, Request, Response, UploadFile
from sqlalchemy.orm import Session

from eventphoto.core.config import settings
from eventphoto.core.deps import (
    get_db,
    get_storage,
    require_csrf_header,
    require_editor,
    require_viewer,
)
from eventphoto.core.exceptions import ValidationFailed
from eventphoto.schemas.auth import UserSession
from eventphoto.schemas.photo import PhotoRead, PhotoReview
from eventphoto.services import photo_service
from eventphoto.services.storage_service import StorageBackend
from eventphoto.utils.file_upload import content_length_exceeds_limit, read_upload_limited

router = APIRouter(prefix="/events/{event_id}/photos", tags=["photos"])


@router.get("", response_model=list[PhotoRead])
def list_photos(
    event_id: UUID,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_viewer),
):
    """Photos of an event, newest first."""
    return photo_service.list_photos(db, session.org_id, event_id)


@router.post(
    "",
    response_model=PhotoRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
async def upload_photo(
    request: Request,
    event_id: UUID,
    file: Annotated[UploadFile, File()],
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_editor),
    storage: StorageBackend = Depends(get_storage),
):
    """
    Upload a photo (multipart field "file").

    The photo starts PENDING review and private.
    """
    max_bytes = settings.max_upload_bytes
    if content_length_exceeds_limit(request.headers.get("content-length"), max_size_bytes=max_bytes):
        raise ValidationFailed(
            errors={"file": f"File size exceeds {settings.MAX_UPLOAD_MB} MB limit"},
            values={"filename": file.filename, "content_type": file.content_type},
        )

    data = await read_upload_limited(file, max_bytes)
    return photo_service.upload_photo(
        db,
        org_id=session.org_id,
        event_id=event_id,
        user_id=session.user_id,
        data=data,
        content_type=file.content_type,
        filename=file.filename,
        storage=storage,
    )


@router.get("/{photo_id}", response_model=PhotoRead)
def get_photo(
    event_id: UUID,
    photo_id: UUID,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_viewer),
):
    return photo_service.get_photo(db, session.org_id, event_id, photo_id)


@router.delete(
    "/{photo_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_photo(
    event_id: UUID,
    photo_id: UUID,
    confirm: bool = Query(False),
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_editor),
    storage: StorageBackend = Depends(get_storage),
):
    photo_service.delete_photo(
        db, session.org_id, event_id, photo_id, confirm=confirm, storage=storage
    )
    return Response(status_code=204)


@router.post(
    "/{photo_id}/review",
    response_model=PhotoRead,
    dependencies=[Depends(require_csrf_header)],
)
def review_photo(
    event_id: UUID,
    photo_id: UUID,
    body: PhotoReview,
    db: Session = Depends(get_db),
    session: UserSession = Depends(require_editor),
):
    return photo_service.review_photo(
        db, session.org_id, event_id, photo_id, body.review_status, body.is_public
    )
