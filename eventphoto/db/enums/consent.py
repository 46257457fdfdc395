"""Consent audit enums."""

from enum import Enum


class ConsentType(str, Enum):
    """Data-processing purposes a user can consent to."""

    PHOTO_STORAGE = "PHOTO_STORAGE"
    FACIAL_RECOGNITION = "FACIAL_RECOGNITION"
    DATA_SHARING = "DATA_SHARING"


class ConsentAction(str, Enum):
    GRANTED = "GRANTED"
    REVOKED = "REVOKED"
