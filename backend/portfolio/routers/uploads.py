from __future__ import annotations

from fastapi import APIRouter, File, HTTPException, UploadFile

from ..services import local_uploads

router = APIRouter(tags=["uploads"])


@router.post("/image")
async def upload_image(file: UploadFile | None = File(default=None)):
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")
    data = await file.read()
    return local_uploads.save_image(file.filename or "upload", file.content_type, data)
