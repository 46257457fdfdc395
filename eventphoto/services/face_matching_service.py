"""
Face matching service.

initiate_face_matching records a PENDING task and hands it to the compute
trigger. The compute service reports progress through report_result, which
advances the task state machine and records faces and matches.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from eventphoto.core.exceptions import NotFound, PreconditionFailed, UpstreamFailure, ValidationFailed
from eventphoto.core.state_machines import TERMINAL_TASK_STATUSES, check_task_transition
from eventphoto.core.structured_logging import build_log_context
from eventphoto.db.enums import DEFAULT_TASK_STATUS, FaceMatchingStatus
from eventphoto.db.models import (
    DetectedFace,
    Event,
    EventPhoto,
    FaceMatchingTask,
    Participant,
    PhotoParticipantMatch,
)
from eventphoto.schemas.photo import FaceMatchingResult
from eventphoto.services import event_service
from eventphoto.services.compute_service import ComputeTrigger

logger = logging.getLogger(__name__)


def get_task(db: Session, org_id: UUID, event_id: UUID, task_id: UUID) -> FaceMatchingTask:
    task = (
        db.query(FaceMatchingTask)
        .join(Event, Event.id == FaceMatchingTask.event_id)
        .filter(
            FaceMatchingTask.id == task_id,
            FaceMatchingTask.event_id == event_id,
            Event.org_id == org_id,
        )
        .first()
    )
    if not task:
        raise NotFound("Face matching task not found")
    return task


def list_matches(db: Session, org_id: UUID, event_id: UUID) -> list[PhotoParticipantMatch]:
    event = event_service.get_event(db, org_id, event_id)
    return (
        db.query(PhotoParticipantMatch)
        .join(EventPhoto, EventPhoto.id == PhotoParticipantMatch.photo_id)
        .filter(EventPhoto.event_id == event.id)
        .order_by(PhotoParticipantMatch.confidence.desc())
        .all()
    )


def initiate_face_matching(
    db: Session,
    *,
    org_id: UUID,
    event_id: UUID,
    user_id: UUID | None,
    compute: ComputeTrigger,
) -> FaceMatchingTask:
    """
    Create a task and submit it to the compute service.

    Raises:
        NotFound: event not in this organization
        PreconditionFailed: the event has no photos or no participants
        UpstreamFailure: submission failed; the task is left FAILED
    """
    event = event_service.get_event(db, org_id, event_id)

    photo_count = (
        db.query(func.count(EventPhoto.id)).filter(EventPhoto.event_id == event.id).scalar()
    )
    if not photo_count:
        raise PreconditionFailed("Event has no photos to match")
    participant_count = (
        db.query(func.count(Participant.id)).filter(Participant.event_id == event.id).scalar()
    )
    if not participant_count:
        raise PreconditionFailed("Event has no participants to match")

    task = FaceMatchingTask(
        event_id=event.id,
        requested_by_user_id=user_id,
        status=DEFAULT_TASK_STATUS.value,
    )
    db.add(task)
    db.commit()
    db.refresh(task)

    log_context = build_log_context(user_id=user_id, org_id=org_id, event_id=event.id, task_id=task.id)
    try:
        compute.submit_face_matching(event.id, task.id)
    except UpstreamFailure as e:
        task.status = FaceMatchingStatus.FAILED.value
        task.error_message = e.message
        task.completed_at = datetime.now(timezone.utc)
        db.commit()
        logger.warning("Face matching submission failed", extra=log_context)
        raise

    logger.info("Face matching task submitted", extra=log_context)
    return task


def _ids_in_event(db: Session, model, ids: set[UUID], event_id: UUID) -> set[UUID]:
    if not ids:
        return set()
    rows = db.query(model.id).filter(model.id.in_(ids), model.event_id == event_id).all()
    return {row.id for row in rows}


def _check_result_references(db: Session, task: FaceMatchingTask, result: FaceMatchingResult) -> None:
    photo_ids = {face.photo_id for face in result.faces} | {m.photo_id for m in result.matches}
    participant_ids = {m.participant_id for m in result.matches}

    errors: dict[str, str] = {}
    if photo_ids - _ids_in_event(db, EventPhoto, photo_ids, task.event_id):
        errors["photo_id"] = "Photo does not belong to this task's event"
    if participant_ids - _ids_in_event(db, Participant, participant_ids, task.event_id):
        errors["participant_id"] = "Participant does not belong to this task's event"
    if errors:
        raise ValidationFailed(errors=errors, values=result.model_dump(mode="json"))


def _upsert_matches(db: Session, result: FaceMatchingResult) -> int:
    # Last report for a pair wins; the store keeps one row per pair
    latest = {(m.photo_id, m.participant_id): m.confidence for m in result.matches}
    now = datetime.now(timezone.utc)
    for (photo_id, participant_id), confidence in latest.items():
        match = (
            db.query(PhotoParticipantMatch)
            .filter(
                PhotoParticipantMatch.photo_id == photo_id,
                PhotoParticipantMatch.participant_id == participant_id,
            )
            .first()
        )
        if match:
            match.confidence = confidence
            match.matched_at = now
        else:
            db.add(
                PhotoParticipantMatch(
                    photo_id=photo_id,
                    participant_id=participant_id,
                    confidence=confidence,
                    matched_at=now,
                )
            )
    return len(latest)


def report_result(db: Session, task_id: UUID, result: FaceMatchingResult) -> FaceMatchingTask:
    """
    Apply a status report from the compute service.

    Repeating the task's current status changes nothing, so redelivered
    callbacks are harmless.

    Raises:
        NotFound: unknown task
        InvalidTransition: status not reachable from the current one
        ValidationFailed: result references photos/participants of another event
    """
    task = db.get(FaceMatchingTask, task_id)
    if not task:
        raise NotFound("Face matching task not found")

    log_context = build_log_context(event_id=task.event_id, task_id=task.id)
    if not check_task_transition(task.status, result.status.value):
        logger.info("Duplicate face matching report ignored", extra=log_context)
        return task

    _check_result_references(db, task, result)

    now = datetime.now(timezone.utc)
    task.status = result.status.value
    if result.external_job_id:
        task.external_job_id = result.external_job_id
    if result.status == FaceMatchingStatus.PROCESSING:
        task.started_at = now
    if result.status in TERMINAL_TASK_STATUSES:
        task.completed_at = now
    if result.status == FaceMatchingStatus.FAILED:
        task.error_message = result.error_message or "Face matching failed"

    for face in result.faces:
        db.add(
            DetectedFace(
                photo_id=face.photo_id,
                box_x=face.x,
                box_y=face.y,
                box_width=face.width,
                box_height=face.height,
            )
        )
    match_count = _upsert_matches(db, result)

    db.commit()
    db.refresh(task)
    logger.info(
        "Face matching task now %s (%d matches reported)",
        task.status,
        match_count,
        extra=log_context,
    )
    return task
