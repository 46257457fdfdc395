"""Event and category schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class EventForm(BaseModel):
    """
    Submitted event fields.

    Values are kept loose so the service can report every field problem at
    once and echo the submission back.
    """

    name: str | None = None
    description: str | None = None
    date_start: str | None = None
    date_end: str | None = None
    location_name: str | None = None
    location_address: str | None = None
    category_id: str | None = None
    status: str | None = None
    is_public: bool = False

    def submitted_values(self) -> dict[str, Any]:
        return self.model_dump()


class EventRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    org_id: UUID
    category_id: UUID | None
    name: str
    description: str | None
    date_start: datetime
    date_end: datetime | None
    location_name: str | None
    location_address: str | None
    status: str
    is_public: bool
    created_at: datetime
    updated_at: datetime


class EventDetail(EventRead):
    photo_count: int = 0
    participant_count: int = 0


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class CategoryRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    name: str
