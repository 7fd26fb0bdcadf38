from __future__ import annotations

from fastapi import APIRouter, HTTPException
from fastapi.responses import ORJSONResponse

from ..filesystem import FilesystemError
from ..models import ReviewSubmit
from ..observability.logging import get_logger
from ..services import projects_repo, public_cache, reviews_repo, seed, site_content_repo
from ..services.media_repo import photos, videos
from ..storage import StorageError, StorageValidation

router = APIRouter(tags=["public"])

log = get_logger("public")

SETTINGS_CACHE_CONTROL = "public, max-age=60"
REVIEWS_CACHE_CONTROL = "public, max-age=30, stale-while-revalidate=60"
STALE_CACHE_CONTROL = "public, max-age=10"


@router.get("/videos")
def public_videos():
    try:
        items = videos.list(published_only=True)
    except StorageError as e:
        log.warning("public_videos_fallback", error=str(e))
        items = []
    return {"videos": items or seed.fallback_videos()}


@router.get("/photos")
def public_photos():
    try:
        items = photos.list(published_only=True)
    except StorageError as e:
        log.warning("public_photos_fallback", error=str(e))
        items = []
    return {"photos": items or seed.fallback_photos()}


@router.get("/about")
def public_about():
    try:
        doc = site_content_repo.get_about()
    except StorageError as e:
        log.warning("public_about_fallback", error=str(e))
        doc = None
    return doc or seed.seed_about()


@router.get("/contact")
def public_contact():
    try:
        doc = site_content_repo.get_contact()
    except StorageError as e:
        log.warning("public_contact_fallback", error=str(e))
        doc = None
    return doc or seed.seed_contact()


@router.get("/settings")
def public_settings():
    try:
        values = site_content_repo.public_settings(site_content_repo.get_settings())
    except StorageError as e:
        log.warning("public_settings_fallback", error=str(e))
        values = dict(site_content_repo.DEFAULT_SETTINGS)
    return ORJSONResponse({"settings": values}, headers={"Cache-Control": SETTINGS_CACHE_CONTROL})


def _reviews_enabled() -> bool:
    cached = public_cache.get(public_cache.REVIEWS_SETTINGS_KEY, "medium")
    if cached is None:
        cached = site_content_repo.reviews_enabled()
        public_cache.put(public_cache.REVIEWS_SETTINGS_KEY, cached, "medium")
    return bool(cached)


@router.get("/reviews")
def public_reviews(page: str = "1", limit: str = "10"):
    page_n, limit_n = reviews_repo.clamp_page(page, limit)
    key = public_cache.reviews_page_key(page_n, limit_n)

    try:
        if not _reviews_enabled():
            return ORJSONResponse(
                {"reviews": [], "message": "Reviews are currently disabled"},
                headers={"Cache-Control": SETTINGS_CACHE_CONTROL},
            )

        cached = public_cache.get(key)
        if cached is not None:
            return ORJSONResponse(cached, headers={"Cache-Control": REVIEWS_CACHE_CONTROL, "X-Cache": "HIT"})

        body = reviews_repo.list_approved_page(page_n, limit_n)
        public_cache.put(key, body)
        return ORJSONResponse(body, headers={"Cache-Control": REVIEWS_CACHE_CONTROL, "X-Cache": "MISS"})
    except StorageError as e:
        log.warning("public_reviews_read_failed", error=str(e))
        stale = public_cache.get_stale(key)
        if stale is not None:
            return ORJSONResponse(stale, headers={"Cache-Control": STALE_CACHE_CONTROL, "X-Cache": "STALE"})
        # The frontend shows sample reviews when the list is empty.
        return ORJSONResponse(reviews_repo.empty_page(), headers={"Cache-Control": STALE_CACHE_CONTROL})


@router.post("/reviews", status_code=201)
def submit_review(body: ReviewSubmit):
    if not site_content_repo.reviews_enabled():
        raise HTTPException(status_code=403, detail="Review submissions are currently disabled")
    try:
        review = reviews_repo.submit_review(body.model_dump())
    except StorageValidation as e:
        raise HTTPException(status_code=400, detail=e.message)
    # New reviews are pending, so cached public pages stay valid.
    return {
        "message": "Review submitted successfully. It will be visible after admin approval.",
        "review": {"id": review["id"], "name": review["name"]},
    }


@router.get("/projects")
def public_projects():
    try:
        return {"projects": projects_repo.list_projects()}
    except FilesystemError as e:
        log.error("public_projects_read_failed", code=e.code, error=e.message)
        raise HTTPException(status_code=500, detail="Failed to load projects")
