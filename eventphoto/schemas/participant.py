"""Participant schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel


class ParticipantForm(BaseModel):
    name: str | None = None
    email: str | None = None
    registration_status: str | None = None
    consent_status: bool | None = None
    reference_photo_url: str | None = None

    def submitted_values(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class ParticipantUpdate(BaseModel):
    """Partial update; only fields that were sent are applied."""

    name: str | None = None
    email: str | None = None
    registration_status: str | None = None
    consent_status: bool | None = None
    reference_photo_url: str | None = None


class ParticipantRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    event_id: UUID
    user_id: UUID | None
    name: str
    email: str
    registration_status: str
    consent_status: bool
    reference_photo_url: str | None
    created_at: datetime
