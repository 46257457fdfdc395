"""
Photo service - upload, moderation and removal of event photos.

Photo bytes live in the storage backend and rows in the database, and the
two cannot share a transaction. Upload stores first and compensates with a
storage delete if the row cannot be written. Delete removes the row first
and treats a failed storage delete as a leaked file (logged, not raised).
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from eventphoto.core.config import settings
from eventphoto.core.exceptions import NotFound, PreconditionFailed, UpstreamFailure, ValidationFailed
from eventphoto.core.state_machines import check_review_transition
from eventphoto.core.structured_logging import build_log_context
from eventphoto.db.enums import DEFAULT_REVIEW_STATUS, ReviewStatus
from eventphoto.db.models import Event, EventPhoto
from eventphoto.services import event_service
from eventphoto.services.storage_service import CONTENT_TYPE_EXTENSIONS, StorageBackend

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = set(CONTENT_TYPE_EXTENSIONS)


def validate_photo(content_type: str | None, size: int, filename: str | None = None) -> None:
    """
    Check an upload against the image allow-list and the size limit.

    Raises:
        ValidationFailed: on the "file" field
    """
    values = {"filename": filename, "content_type": content_type, "size": size}
    if size == 0:
        raise ValidationFailed(errors={"file": "File is empty"}, values=values)
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationFailed(
            errors={"file": f"Content type '{content_type}' not allowed"}, values=values
        )
    if size > settings.max_upload_bytes:
        raise ValidationFailed(
            errors={"file": f"File size exceeds {settings.MAX_UPLOAD_MB} MB limit"},
            values=values,
        )


def get_photo(db: Session, org_id: UUID, event_id: UUID, photo_id: UUID) -> EventPhoto:
    photo = (
        db.query(EventPhoto)
        .join(Event, Event.id == EventPhoto.event_id)
        .filter(
            EventPhoto.id == photo_id,
            EventPhoto.event_id == event_id,
            Event.org_id == org_id,
        )
        .first()
    )
    if not photo:
        raise NotFound("Photo not found")
    return photo


def list_photos(db: Session, org_id: UUID, event_id: UUID) -> list[EventPhoto]:
    event = event_service.get_event(db, org_id, event_id)
    return (
        db.query(EventPhoto)
        .filter(EventPhoto.event_id == event.id)
        .order_by(EventPhoto.upload_time.desc(), EventPhoto.created_at.desc())
        .all()
    )


def upload_photo(
    db: Session,
    *,
    org_id: UUID,
    event_id: UUID,
    user_id: UUID,
    data: bytes,
    content_type: str | None,
    filename: str | None,
    storage: StorageBackend,
) -> EventPhoto:
    """
    Store a photo and record it (PENDING review, private).

    Raises:
        NotFound: event not in this organization
        ValidationFailed: empty file, disallowed type or too large
        UpstreamFailure: storage backend failed; nothing was recorded
    """
    event = event_service.get_event(db, org_id, event_id)
    validate_photo(content_type, len(data), filename)

    log_context = build_log_context(user_id=user_id, org_id=org_id, event_id=event.id)
    url = storage.upload(data, f"events/{event.id}/photos", content_type)

    try:
        photo = EventPhoto(
            event_id=event.id,
            uploader_user_id=user_id,
            image_url=url,
            review_status=DEFAULT_REVIEW_STATUS.value,
            is_public=False,
            photo_metadata={
                "filename": filename,
                "content_type": content_type,
                "size": len(data),
            },
        )
        db.add(photo)
        db.commit()
    except Exception:
        db.rollback()
        try:
            storage.delete(url)
        except UpstreamFailure:
            logger.exception("Stored photo left behind after failed insert", extra=log_context)
        raise

    db.refresh(photo)
    logger.info("Photo uploaded", extra=log_context)
    return photo


def delete_photo(
    db: Session,
    org_id: UUID,
    event_id: UUID,
    photo_id: UUID,
    *,
    confirm: bool,
    storage: StorageBackend,
) -> None:
    """
    Remove a photo row, then its stored file.

    Raises:
        NotFound: photo not in this event/organization
        PreconditionFailed: confirm is not True
    """
    photo = get_photo(db, org_id, event_id, photo_id)
    if confirm is not True:
        raise PreconditionFailed("Deleting a photo must be confirmed")

    url = photo.image_url
    db.delete(photo)
    db.commit()

    log_context = build_log_context(org_id=org_id, event_id=event_id)
    try:
        storage.delete(url)
    except UpstreamFailure:
        logger.warning("Stored photo left behind after photo delete", extra=log_context)
    logger.info("Photo deleted", extra=log_context)


def review_photo(
    db: Session,
    org_id: UUID,
    event_id: UUID,
    photo_id: UUID,
    review_status: str,
    is_public: bool | None = None,
) -> EventPhoto:
    """
    Approve or reject a PENDING photo.

    Only approved photos may be made public.

    Raises:
        InvalidTransition: photo already reviewed
    """
    photo = get_photo(db, org_id, event_id, photo_id)
    target = check_review_transition(photo.review_status, review_status)
    photo.review_status = target.value
    if is_public is not None:
        photo.is_public = bool(is_public) and target == ReviewStatus.APPROVED
    db.commit()
    db.refresh(photo)
    return photo
