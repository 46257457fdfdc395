"""Datetime parsing helpers for form input."""

from __future__ import annotations

from datetime import datetime, timezone

DATETIME_FORMATS: list[str] = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M",
    "%Y-%m-%d",
    "%Y/%m/%d",
]


def parse_datetime(raw_value: str | datetime | None) -> datetime | None:
    """
    Parse a submitted datetime into an aware UTC value.

    Accepts ISO 8601 (with or without offset, "Z" allowed) and a few common
    formats. Naive values are taken as UTC. Returns None when the input is
    empty or unparseable.
    """
    if raw_value is None:
        return None
    if isinstance(raw_value, datetime):
        dt = raw_value
    else:
        value = raw_value.strip()
        if not value:
            return None
        dt = _parse_string(value)
        if dt is None:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _parse_string(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None
