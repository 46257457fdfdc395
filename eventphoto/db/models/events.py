"""SQLAlchemy ORM models for events, categories and participants."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventphoto.db.base import Base
from eventphoto.db.enums import DEFAULT_EVENT_STATUS, DEFAULT_REGISTRATION_STATUS, EventStatus, enum_check

if TYPE_CHECKING:
    from eventphoto.db.models import (
        EventPhoto,
        FaceMatchingTask,
        Organization,
        PhotoParticipantMatch,
        User,
    )


class EventCategory(Base):
    """Optional per-organization label for events. Deleting it un-labels events."""

    __tablename__ = "event_categories"
    __table_args__ = (
        UniqueConstraint("org_id", "name", name="uq_event_categories_org_name"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    organization: Mapped["Organization"] = relationship(back_populates="categories")
    events: Mapped[list["Event"]] = relationship(back_populates="category", passive_deletes=True)


class Event(Base):
    """
    A photographed event owned by one organization.

    Deleting an event removes its participants, photos (with faces and
    matches) and matching tasks. Consent log rows survive with event_id NULL.
    """

    __tablename__ = "events"
    __table_args__ = (
        Index("idx_events_org_date_start", "org_id", "date_start"),
        CheckConstraint(enum_check("status", EventStatus), name="ck_events_status_valid"),
        CheckConstraint(
            "date_end IS NULL OR date_end >= date_start", name="ck_events_date_range"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    category_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("event_categories.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_start: Mapped[datetime] = mapped_column(nullable=False)
    date_end: Mapped[datetime | None] = mapped_column(nullable=True)
    location_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    location_address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_EVENT_STATUS.value, nullable=False
    )
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    organization: Mapped["Organization"] = relationship(back_populates="events")
    category: Mapped["EventCategory | None"] = relationship(back_populates="events")
    participants: Mapped[list["Participant"]] = relationship(
        back_populates="event", cascade="all, delete-orphan", passive_deletes=True
    )
    photos: Mapped[list["EventPhoto"]] = relationship(
        back_populates="event", cascade="all, delete-orphan", passive_deletes=True
    )
    matching_tasks: Mapped[list["FaceMatchingTask"]] = relationship(
        back_populates="event", cascade="all, delete-orphan", passive_deletes=True
    )


class Participant(Base):
    """
    A person tracked against an event for face matching.

    Optionally linked to a registered user; the link is cleared if that user
    is deleted. Email is unique per event at the store level.
    """

    __tablename__ = "participants"
    __table_args__ = (
        UniqueConstraint("event_id", "email", name="uq_participants_event_email"),
        Index("idx_participants_user_id", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    registration_status: Mapped[str] = mapped_column(
        String(50), default=DEFAULT_REGISTRATION_STATUS, nullable=False
    )
    consent_status: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reference_photo_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    event: Mapped["Event"] = relationship(back_populates="participants")
    user: Mapped["User | None"] = relationship()
    matches: Mapped[list["PhotoParticipantMatch"]] = relationship(
        back_populates="participant", cascade="all, delete-orphan", passive_deletes=True
    )
