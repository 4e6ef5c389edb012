import base64
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from watermark_app import store
from watermark_app.compositor import JPEG, PNG, apply_watermark
from watermark_app.config import Settings
from watermark_app.deps import get_current_user, get_db, get_settings
from watermark_app.errors import ValidationError
from watermark_app.models import User
from watermark_app.overlay import render_overlay

logger = logging.getLogger(__name__)

router = APIRouter()

# Constants
ACCEPTED_TYPES = {PNG, JPEG}
MAX_PREVIEW_DIMENSION = 100_000


@dataclass
class UploadedFile:
    name: str
    mime_type: str
    size_bytes: int
    content: bytes


class WatermarkTextIn(BaseModel):
    text: Optional[str] = None


def output_name(name: str, mime_type: str) -> str:
    """Replace the last extension of ``name`` with the one for ``mime_type``"""
    stem = re.sub(r"\.[^.]+$", "", name)
    return stem + (".png" if mime_type == PNG else ".jpg")


async def read_uploads(files: List[UploadFile], max_size: int) -> List[UploadedFile]:
    """Validate every file before any of them is processed"""
    uploads = []
    for file in files:
        if file.content_type not in ACCEPTED_TYPES:
            raise ValidationError(f"Invalid file type: {file.content_type}. Accepted: PNG, JPEG")

        if file.size is not None and file.size > max_size:
            raise ValidationError(f"File {file.filename} exceeds {max_size // (1024 * 1024)} MB limit")

        contents = await file.read()
        if len(contents) > max_size:
            raise ValidationError(f"File {file.filename} exceeds {max_size // (1024 * 1024)} MB limit")

        uploads.append(UploadedFile(
            name=file.filename or "image",
            mime_type=file.content_type,
            size_bytes=len(contents),
            content=contents,
        ))
    return uploads


@router.post("/watermark")
async def watermark_images(
    files: Optional[List[UploadFile]] = File(None),
    watermarkTextId: Optional[str] = Form(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Watermark a batch of PNG/JPEG images"""
    if not files:
        raise ValidationError("No files provided")

    uploads = await read_uploads(files, settings.max_file_size)
    text = store.resolve_text(db, user, watermarkTextId, settings.default_text_suffix)
    logger.info("Watermarking %d file(s) for user %s", len(uploads), user.id)

    results = []
    for upload in uploads:
        processed = await run_in_threadpool(apply_watermark, upload.content, upload.mime_type, text)
        results.append({
            "name": output_name(upload.name, upload.mime_type),
            "data": base64.b64encode(processed).decode("ascii"),
            "mimeType": upload.mime_type,
        })

    return {"images": results}


@router.get("/watermark/overlay")
async def watermark_overlay(
    width: int = Query(..., gt=0, le=MAX_PREVIEW_DIMENSION),
    height: int = Query(..., gt=0, le=MAX_PREVIEW_DIMENSION),
    watermarkTextId: Optional[str] = Query(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Overlay markup for the client-side live preview"""
    text = store.resolve_text(db, user, watermarkTextId, settings.default_text_suffix)
    return Response(content=render_overlay(width, height, text), media_type="image/svg+xml")


@router.get("/watermark-texts")
async def list_watermark_texts(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [row.to_dict() for row in store.list_texts(db, user.id)]


@router.post("/watermark-texts", status_code=201)
async def create_watermark_text(
    body: WatermarkTextIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return store.create_text(db, user.id, body.text).to_dict()


@router.delete("/watermark-texts/{text_id}")
async def delete_watermark_text(
    text_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    store.delete_text(db, text_id, user.id)
    return {"ok": True}
