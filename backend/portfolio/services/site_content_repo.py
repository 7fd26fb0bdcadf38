from __future__ import annotations

from typing import Any

from ..models import ABOUT_DOC_ID, CONTACT_DOC_ID, SETTINGS_DOC_ID
from ..observability.logging import get_logger
from ..storage import COLLECTIONS, StorageValidation, get_database
from .timeutil import now_iso

log = get_logger("site_content_repo")

DEFAULT_SETTINGS: dict[str, bool] = {"lightWaveEffect": True, "reviewsEnabled": True}
SETTINGS_KEYS = ("lightWaveEffect", "reviewsEnabled")

ABOUT_FIELDS = ("profile", "skills", "software", "achievements")
CONTACT_FIELDS = ("contact", "social", "availability")


def _get_single(collection: str, doc_id: str) -> dict[str, Any] | None:
    return get_database().collection(collection).find_one({"docId": doc_id})


def _save_single(collection: str, doc_id: str, fields: dict[str, Any]) -> dict[str, Any]:
    # Absent sections keep their stored value.
    updates = {k: v for k, v in fields.items() if v is not None}
    updates["updatedAt"] = now_iso()
    coll = get_database().collection(collection)
    coll.update_one({"docId": doc_id}, {"$set": updates}, upsert=True)
    log.info("site_content_saved", collection=collection, fields=sorted(k for k in updates if k != "updatedAt"))
    return coll.find_one({"docId": doc_id}) or {"docId": doc_id, **updates}


def get_about() -> dict[str, Any] | None:
    return _get_single(COLLECTIONS.ABOUT, ABOUT_DOC_ID)


def save_about(data: dict[str, Any]) -> dict[str, Any]:
    return _save_single(COLLECTIONS.ABOUT, ABOUT_DOC_ID, {k: data.get(k) for k in ABOUT_FIELDS})


def get_contact() -> dict[str, Any] | None:
    return _get_single(COLLECTIONS.CONTACT, CONTACT_DOC_ID)


def save_contact(data: dict[str, Any]) -> dict[str, Any]:
    return _save_single(COLLECTIONS.CONTACT, CONTACT_DOC_ID, {k: data.get(k) for k in CONTACT_FIELDS})


def public_settings(doc: dict[str, Any] | None) -> dict[str, bool]:
    if not doc:
        return dict(DEFAULT_SETTINGS)
    out: dict[str, bool] = {}
    for key in SETTINGS_KEYS:
        value = doc.get(key)
        out[key] = value if isinstance(value, bool) else DEFAULT_SETTINGS[key]
    return out


def get_settings() -> dict[str, Any]:
    doc = _get_single(COLLECTIONS.SETTINGS, SETTINGS_DOC_ID)
    if not doc:
        return dict(DEFAULT_SETTINGS)
    return {**doc, **public_settings(doc)}


def reviews_enabled() -> bool:
    return get_settings()["reviewsEnabled"]


def update_settings(data: dict[str, Any]) -> dict[str, Any]:
    """Apply the boolean flags present in ``data``; anything else is ignored."""
    updates = {k: data[k] for k in SETTINGS_KEYS if isinstance(data.get(k), bool)}
    if not updates:
        raise StorageValidation(message="No valid settings provided", collection=COLLECTIONS.SETTINGS)
    _save_single(COLLECTIONS.SETTINGS, SETTINGS_DOC_ID, updates)
    return get_settings()
