"""SQLAlchemy ORM models for photos, detected faces and face matching."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    LargeBinary,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventphoto.db.base import Base
from eventphoto.db.enums import (
    DEFAULT_REVIEW_STATUS,
    DEFAULT_TASK_STATUS,
    FaceMatchingStatus,
    ReviewStatus,
    enum_check,
)

if TYPE_CHECKING:
    from eventphoto.db.models import Event, Participant, User


class EventPhoto(Base):
    """
    A photo uploaded to an event.

    The binary lives in the storage backend; image_url is the reference
    returned by StorageBackend.upload. Photos start PENDING review and private.
    """

    __tablename__ = "event_photos"
    __table_args__ = (
        Index("idx_event_photos_event_upload_time", "event_id", "upload_time"),
        Index("idx_event_photos_uploader", "uploader_user_id"),
        CheckConstraint(
            enum_check("review_status", ReviewStatus), name="ck_event_photos_review_status_valid"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    uploader_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    image_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    thumbnail_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    upload_time: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    review_status: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_REVIEW_STATUS.value, nullable=False
    )
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # "metadata" is reserved on declarative classes
    photo_metadata: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    event: Mapped["Event"] = relationship(back_populates="photos")
    uploader: Mapped["User"] = relationship()
    faces: Mapped[list["DetectedFace"]] = relationship(
        back_populates="photo", cascade="all, delete-orphan", passive_deletes=True
    )
    matches: Mapped[list["PhotoParticipantMatch"]] = relationship(
        back_populates="photo", cascade="all, delete-orphan", passive_deletes=True
    )


class DetectedFace(Base):
    """A face found in a photo by the compute service."""

    __tablename__ = "detected_faces"
    __table_args__ = (Index("idx_detected_faces_photo_id", "photo_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    photo_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("event_photos.id", ondelete="CASCADE"), nullable=False
    )
    # Bounding box, relative to the original image
    box_x: Mapped[float] = mapped_column(Float, nullable=False)
    box_y: Mapped[float] = mapped_column(Float, nullable=False)
    box_width: Mapped[float] = mapped_column(Float, nullable=False)
    box_height: Mapped[float] = mapped_column(Float, nullable=False)
    descriptor: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    photo: Mapped["EventPhoto"] = relationship(back_populates="faces")


class PhotoParticipantMatch(Base):
    """
    A participant recognised in a photo.

    At most one row per (photo, participant) pair.
    """

    __tablename__ = "photo_participant_matches"
    __table_args__ = (
        UniqueConstraint("photo_id", "participant_id", name="uq_photo_participant_match"),
        Index("idx_photo_participant_matches_participant", "participant_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    photo_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("event_photos.id", ondelete="CASCADE"), nullable=False
    )
    participant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False
    )
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    matched_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    photo: Mapped["EventPhoto"] = relationship(back_populates="matches")
    participant: Mapped["Participant"] = relationship(back_populates="matches")


class FaceMatchingTask(Base):
    """
    A face matching job submitted to the external compute service.

    Created PENDING; later states are reported back through the
    compute callback webhook.
    """

    __tablename__ = "face_matching_tasks"
    __table_args__ = (
        Index("idx_face_matching_tasks_event", "event_id", "created_at"),
        CheckConstraint(
            enum_check("status", FaceMatchingStatus), name="ck_face_matching_tasks_status_valid"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    requested_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_TASK_STATUS.value, nullable=False
    )
    started_at: Mapped[datetime | None] = mapped_column(nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    external_job_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    event: Mapped["Event"] = relationship(back_populates="matching_tasks")
