"""
Bounded reads of multipart uploads.

Uploads are read in chunks and rejected as soon as they pass the size
cap, so an oversized body is never held in memory whole.
"""

import logging

from fastapi import UploadFile

from zipparents.errors import ValidationFailedError
from zipparents.profiles.constants import PROFILE_PHOTO_MAX_SIZE

logger = logging.getLogger(__name__)

# Chunk size for reading uploads (64 KB)
CHUNK_SIZE_BYTES = 64 * 1024


def too_large_message(max_size: int) -> str:
    return f"Image must be less than {max_size // (1024 * 1024)}MB"


async def read_upload(
    file: UploadFile,
    field: str = "photo",
    max_size: int = PROFILE_PHOTO_MAX_SIZE,
) -> bytes:
    """
    Read an uploaded file, at most `max_size` bytes.

    Raises ValidationFailedError keyed by `field` once the upload passes
    the cap. Whatever was read so far is dropped.
    """
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(CHUNK_SIZE_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > max_size:
            logger.info(f"Upload {file.filename!r} rejected: over {max_size} bytes")
            raise ValidationFailedError({field: too_large_message(max_size)})
        chunks.append(chunk)
    return b"".join(chunks)
