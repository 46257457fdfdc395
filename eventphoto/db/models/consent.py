"""SQLAlchemy ORM model for the consent audit trail."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from eventphoto.db.base import Base
from eventphoto.db.enums import ConsentAction, ConsentType, enum_check


class ConsentLog(Base):
    """
    Immutable record of a consent grant or revocation.

    Rows outlive the event and participant they mention: those references
    are nulled on delete, never cascaded. No code path updates or deletes
    a row directly.
    """

    __tablename__ = "consent_logs"
    __table_args__ = (
        Index("idx_consent_logs_user_timestamp", "user_id", "timestamp"),
        Index("idx_consent_logs_event_id", "event_id"),
        CheckConstraint(enum_check("consent_type", ConsentType), name="ck_consent_logs_type_valid"),
        CheckConstraint(enum_check("action", ConsentAction), name="ck_consent_logs_action_valid"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    event_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("events.id", ondelete="SET NULL"), nullable=True
    )
    participant_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("participants.id", ondelete="SET NULL"), nullable=True
    )
    consent_type: Mapped[str] = mapped_column(String(30), nullable=False)
    action: Mapped[str] = mapped_column(String(10), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)  # policy version, IP, ...
