"""Photo and face matching schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from eventphoto.db.enums import FaceMatchingStatus


class PhotoRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    event_id: UUID
    uploader_user_id: UUID
    image_url: str
    thumbnail_url: str | None
    upload_time: datetime
    review_status: str
    is_public: bool


class PhotoReview(BaseModel):
    review_status: Literal["APPROVED", "REJECTED"]
    is_public: bool | None = None


class FaceMatchingTaskRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    event_id: UUID
    status: str
    started_at: datetime | None
    completed_at: datetime | None
    external_job_id: str | None
    error_message: str | None
    created_at: datetime


class MatchRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    photo_id: UUID
    participant_id: UUID
    confidence: float
    matched_at: datetime


# =============================================================================
# Compute callback payload
# =============================================================================

class DetectedFaceIn(BaseModel):
    photo_id: UUID
    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)


class MatchIn(BaseModel):
    photo_id: UUID
    participant_id: UUID
    confidence: float = Field(ge=0, le=1)


class FaceMatchingResult(BaseModel):
    """Body posted by the compute service when a task changes state."""

    status: FaceMatchingStatus
    external_job_id: str | None = None
    error_message: str | None = None
    faces: list[DetectedFaceIn] = Field(default_factory=list)
    matches: list[MatchIn] = Field(default_factory=list)
