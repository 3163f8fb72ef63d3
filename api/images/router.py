"""
FastAPI router for image uploads.

Stored files are served by the static mount at /uploads (see `api/main.py`).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Request, UploadFile

from auth import dependencies as auth_dependencies

from . import service

router = APIRouter(prefix="/images")


@router.post("/upload")
async def upload_image(
    request: Request,
    image: UploadFile = File(...),
    _: int = Depends(auth_dependencies.get_actor_id),
) -> dict:
    stored = await service.store_upload(image)
    image_url = str(request.base_url).rstrip("/") + f"/uploads/{stored.filename}"
    return {
        "image_url": image_url,
        "filename": stored.filename,
        "content_type": stored.content_type,
        "size_bytes": stored.size_bytes,
    }
