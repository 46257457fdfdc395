"""Helpers for safe upload size checks."""

from __future__ import annotations

from fastapi import UploadFile


MULTIPART_OVERHEAD_BYTES = 64 * 1024


def content_length_exceeds_limit(
    content_length_header: str | None,
    *,
    max_size_bytes: int,
    overhead_bytes: int = MULTIPART_OVERHEAD_BYTES,
) -> bool:
    """Return True when Content-Length clearly exceeds the allowed file size."""
    if not content_length_header:
        return False
    try:
        content_length = int(content_length_header)
    except (TypeError, ValueError):
        return False
    return content_length > (max_size_bytes + overhead_bytes)


async def read_upload_limited(file: UploadFile, max_size_bytes: int) -> bytes:
    """
    Read an upload, stopping one byte past the limit.

    The caller compares len(result) with the limit; an oversized file never
    gets loaded in full.
    """
    return await file.read(max_size_bytes + 1)
