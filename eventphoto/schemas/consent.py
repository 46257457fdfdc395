"""Consent log schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from eventphoto.db.enums import ConsentAction, ConsentType


class ConsentCreate(BaseModel):
    consent_type: ConsentType
    action: ConsentAction
    event_id: UUID | None = None
    participant_id: UUID | None = None
    details: str | None = Field(default=None, max_length=2000)


class ConsentRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    user_id: UUID
    event_id: UUID | None
    participant_id: UUID | None
    consent_type: str
    action: str
    timestamp: datetime
    details: str | None
