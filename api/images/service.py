"""
Image upload "service layer".

- Validate uploads (extension + content type)
- Read file bytes with a size limit
- Store under a random, unique file name in UPLOAD_DIR
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path

from fastapi import HTTPException, UploadFile

from core import config

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png"}

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5 MiB

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredImage:
    filename: str
    content_type: str | None
    size_bytes: int


def upload_dir() -> Path:
    return Path(config.env_str("UPLOAD_DIR", "uploads"))


def max_upload_bytes() -> int:
    return config.env_int("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)


def _file_ext(filename: str) -> str:
    return Path(filename).suffix.lower()


def validate_upload(file: UploadFile) -> str:
    """
    Return the normalized file extension if this upload is acceptable.
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="No image file provided.")

    ext = _file_ext(file.filename)
    content_type = (file.content_type or "").lower()
    if ext not in ALLOWED_EXTENSIONS or content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Only JPEG and PNG images are allowed.",
        )
    return ext


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Max is {max_bytes} bytes.",
            )

    return bytes(buf)


def _unique_name(ext: str) -> str:
    return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}{ext}"


async def store_upload(file: UploadFile) -> StoredImage:
    ext = validate_upload(file)
    data = await read_upload_bytes(file, max_bytes=max_upload_bytes())
    if not data:
        raise HTTPException(status_code=400, detail="No image file provided.")

    target_dir = upload_dir()
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / _unique_name(ext)
    path.write_bytes(data)

    logger.info("image_stored name=%s size_bytes=%s", path.name, len(data))
    return StoredImage(
        filename=path.name,
        content_type=file.content_type,
        size_bytes=len(data),
    )
