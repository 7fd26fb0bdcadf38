"""
Admin CRUD for videos and photos.

Both resources expose the same four operations, so the routers are built by
one factory with the resource's repository and payload models.

No ``from __future__ import annotations`` here: FastAPI must see the body
model classes, which are closure variables, not module globals.
"""

from fastapi import APIRouter, HTTPException, Query

from ..models import PhotoCreate, PhotoUpdate, VideoCreate, VideoUpdate
from ..observability.logging import get_logger
from ..services.media_repo import MediaRepository, photos, videos

log = get_logger("admin_media")


def build_media_router(
    *,
    repo: MediaRepository,
    singular: str,
    plural: str,
    create_model: type[VideoCreate] | type[PhotoCreate],
    update_model: type[VideoUpdate] | type[PhotoUpdate],
) -> APIRouter:
    router = APIRouter(tags=[f"admin-{plural}"])
    label = singular.capitalize()

    @router.get("")
    def list_items():
        items = repo.list()
        log.info("admin_media_listed", collection=plural, count=len(items))
        return {plural: items}

    @router.post("", status_code=201)
    def create_item(body: create_model):  # type: ignore[valid-type]
        return {singular: repo.create(body.model_dump())}

    @router.put("")
    def update_item(body: update_model):  # type: ignore[valid-type]
        item_id = str(body.id or "").strip()
        if not item_id:
            raise HTTPException(status_code=400, detail=f"{label} ID is required")
        updated = repo.update(item_id, body.model_dump(exclude_unset=True))
        if updated is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return {singular: updated}

    @router.delete("")
    def delete_item(id: str | None = Query(default=None)):
        if not id:
            raise HTTPException(status_code=400, detail=f"{label} ID is required")
        if repo.delete(id) is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return {"message": f"{label} deleted successfully"}

    return router


videos_router = build_media_router(
    repo=videos, singular="video", plural="videos", create_model=VideoCreate, update_model=VideoUpdate
)
photos_router = build_media_router(
    repo=photos, singular="photo", plural="photos", create_model=PhotoCreate, update_model=PhotoUpdate
)
