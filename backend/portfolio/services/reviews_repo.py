from __future__ import annotations

import math
import secrets
from typing import Any

from ..models import REVIEW_STATUSES
from ..observability.logging import get_logger
from ..storage import COLLECTIONS, Collection, StorageError, StorageNotFound, StorageValidation, get_database
from .timeutil import now_iso, now_ms

log = get_logger("reviews_repo")

REVIEW_TEXT_MIN = 10
REVIEW_TEXT_MAX = 2000
PAGE_LIMIT_MAX = 50

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

BULK_ACTIONS = {"approve": "approved", "reject": "rejected"}

NEWEST_FIRST = [("created_at", -1)]


def _coll() -> Collection:
    return get_database().collection(COLLECTIONS.REVIEWS)


def new_review_id() -> str:
    suffix = "".join(secrets.choice(_BASE36) for _ in range(7))
    return f"review-{now_ms()}-{suffix}"


def _invalid(message: str) -> StorageValidation:
    return StorageValidation(message=message, collection=COLLECTIONS.REVIEWS)



def list_reviews(status: str | None = None) -> list[dict[str, Any]]:
    # Unknown status values list everything.
    filter = {"status": status} if status in REVIEW_STATUSES else None
    return _coll().find(filter, sort=NEWEST_FIRST)


def review_stats(reviews: list[dict[str, Any]]) -> dict[str, int]:
    return {
        "pending": sum(1 for r in reviews if r.get("status") == "pending"),
        "approved": sum(1 for r in reviews if r.get("status") == "approved"),
        "rejected": sum(1 for r in reviews if r.get("status") == "rejected"),
        "total": len(reviews),
    }


def _parse_rating(value: Any) -> int:
    try:
        rating = int(value)
    except (TypeError, ValueError):
        raise _invalid("Rating must be between 1 and 5") from None
    if rating < 1 or rating > 5:
        raise _invalid("Rating must be between 1 and 5")
    return rating


def submit_review(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Validate and store a public submission as ``pending``.

    Raises:
        StorageValidation: a required field is missing or out of range.
    """
    name = str(payload.get("name") or "").strip()
    profession = str(payload.get("profession") or "").strip()
    text = str(payload.get("review_text") or "").strip()
    if not name or not profession or not text:
        raise _invalid("Name, profession, and review text are required")
    if len(text) < REVIEW_TEXT_MIN:
        raise _invalid(f"Review text must be at least {REVIEW_TEXT_MIN} characters long")
    if len(text) > REVIEW_TEXT_MAX:
        raise _invalid(f"Review text must be less than {REVIEW_TEXT_MAX} characters")

    rating = payload.get("rating")
    now = now_iso()
    review: dict[str, Any] = {
        "id": new_review_id(),
        "name": name,
        "profession": profession,
        "photo_url": str(payload.get("photo_url") or "").strip() or None,
        "review_text": text,
        "rating": _parse_rating(rating) if rating not in (None, "") else None,
        "status": "pending",
        "created_at": now,
        "updated_at": now,
    }
    _coll().insert_one(review)
    log.info("review_submitted", review_id=review["id"])
    return review


def update_review(id: str, updates: dict[str, Any]) -> dict[str, Any]:
    status = updates.get("status")
    if status is not None and status not in REVIEW_STATUSES:
        raise _invalid("Invalid status value")

    fields = {k: v for k, v in updates.items() if k not in ("id", "created_at") and v is not None}
    fields["updated_at"] = now_iso()

    coll = _coll()
    res = coll.update_one({"id": id}, {"$set": fields})
    if res.matched_count == 0:
        raise StorageNotFound(message="Review not found", operation="UpdateOne", collection=COLLECTIONS.REVIEWS)
    log.info("review_updated", review_id=id, status=status)
    return coll.find_one({"id": id}) or {}


def delete_review(id: str) -> None:
    res = _coll().delete_one({"id": id})
    if res.deleted_count == 0:
        raise StorageNotFound(message="Review not found", operation="DeleteOne", collection=COLLECTIONS.REVIEWS)
    log.info("review_deleted", review_id=id)


def bulk_set_status(ids: list[str], action: str) -> int:
    """
    Approve or reject many reviews. Ids that fail are logged and skipped.

    Returns the number of reviews modified.
    """
    new_status = BULK_ACTIONS.get(action)
    if new_status is None:
        raise _invalid('Invalid action. Use "approve" or "reject"')

    coll = _coll()
    now = now_iso()
    modified = 0
    for review_id in ids:
        try:
            res = coll.update_one({"id": review_id}, {"$set": {"status": new_status, "updated_at": now}})
        except StorageError as e:
            log.warning("review_bulk_update_failed", review_id=review_id, error=str(e))
            continue
        modified += res.modified_count
    log.info("review_bulk_status", action=action, requested=len(ids), modified=modified)
    return modified


def clamp_page(page: Any, limit: Any) -> tuple[int, int]:
    try:
        p = int(page)
    except (TypeError, ValueError):
        p = 1
    try:
        n = int(limit)
    except (TypeError, ValueError):
        n = 10
    return max(1, p), max(1, min(PAGE_LIMIT_MAX, n))


def list_approved_page(page: Any = 1, limit: Any = 10) -> dict[str, Any]:
    page, limit = clamp_page(page, limit)
    approved = _coll().find({"status": "approved"}, sort=NEWEST_FIRST)
    total = len(approved)
    skip = (page - 1) * limit
    items = approved[skip : skip + limit]
    return {
        "reviews": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "totalCount": total,
            "totalPages": math.ceil(total / limit) if total else 0,
            "hasMore": skip + len(items) < total,
        },
    }


def empty_page() -> dict[str, Any]:
    return {
        "reviews": [],
        "pagination": {"page": 1, "limit": 10, "totalCount": 0, "totalPages": 0, "hasMore": False},
    }
