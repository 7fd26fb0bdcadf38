from __future__ import annotations

import secrets

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from ..filesystem import get_filesystem_info
from ..infrastructure import cloudinary
from ..models import SeedRequest
from ..observability.logging import get_logger
from ..services import seed
from ..settings import settings

router = APIRouter(tags=["admin-tools"])
log = get_logger("admin_tools")


@router.post("/upload")
async def upload_media(file: UploadFile | None = File(default=None), folder: str | None = Form(default=None)):
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")

    data = await file.read()
    content_type = file.content_type or "application/octet-stream"
    # Each upload function applies its own default folder.
    options = {"folder": folder} if folder else {}
    upload = cloudinary.upload_video if content_type.startswith("video/") else cloudinary.upload_image
    try:
        result = await run_in_threadpool(upload, data, content_type=content_type, **options)
    except cloudinary.CloudinaryNotConfigured as e:
        raise HTTPException(status_code=503, detail=str(e))
    except cloudinary.CloudinaryError as e:
        log.error("admin_upload_failed", filename=file.filename, error=str(e))
        raise HTTPException(status_code=502, detail="Upload failed")

    return {
        "url": result.secure_url,
        "public_id": result.public_id,
        "width": result.width,
        "height": result.height,
    }


@router.post("/seed")
def seed_database(body: SeedRequest):
    expected = str(settings.seed_secret or "")
    provided = str(body.secret or "")
    if not expected or not provided or not secrets.compare_digest(expected.encode("utf-8"), provided.encode("utf-8")):
        log.info("seed_rejected")
        raise HTTPException(status_code=401, detail="Invalid seed secret")

    seeded = seed.seed_database()
    return {"message": "Database seeded successfully", "seeded": seeded}


@router.get("/filesystem-status")
def filesystem_status():
    return {"success": True, "filesystem": get_filesystem_info()}
