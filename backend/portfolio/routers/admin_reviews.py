from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from ..models import ReviewBulkAction, ReviewUpdate
from ..observability.logging import get_logger
from ..services import public_cache, reviews_repo

router = APIRouter(tags=["admin-reviews"])
log = get_logger("admin_reviews")


def _invalidate_public_reviews() -> None:
    removed = public_cache.invalidate(public_cache.REVIEWS_PREFIX)
    log.info("public_reviews_cache_invalidated", removed=removed)


@router.get("")
def list_reviews(status: str | None = Query(default=None)):
    reviews = reviews_repo.list_reviews(status)
    return {"reviews": reviews, "stats": reviews_repo.review_stats(reviews)}


@router.put("")
def update_review(body: ReviewUpdate):
    review_id = str(body.id or "").strip()
    if not review_id:
        raise HTTPException(status_code=400, detail="Review ID is required")
    review = reviews_repo.update_review(review_id, body.model_dump(exclude_unset=True))
    _invalidate_public_reviews()
    return {"review": review}


@router.delete("")
def delete_review(id: str | None = Query(default=None)):
    if not id:
        raise HTTPException(status_code=400, detail="Review ID is required")
    reviews_repo.delete_review(id)
    _invalidate_public_reviews()
    return {"message": "Review deleted successfully"}


@router.post("")
def bulk_action(body: ReviewBulkAction):
    action = str(body.action or "")
    if action not in reviews_repo.BULK_ACTIONS:
        raise HTTPException(status_code=400, detail='Invalid action. Use "approve" or "reject"')
    if not body.ids:
        raise HTTPException(status_code=400, detail="Review IDs array is required")

    modified = reviews_repo.bulk_set_status(body.ids, action)
    _invalidate_public_reviews()
    return {"message": f"Successfully {action}d {modified} review(s)", "modifiedCount": modified}
