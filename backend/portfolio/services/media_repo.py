"""
Videos and photos.

Both collections share one shape (title, description, year, media url,
thumbnail, category, publish flag, display order), so one repository class
serves both with a different collection and id prefix.
"""

from __future__ import annotations

from typing import Any

from ..observability.logging import get_logger
from ..storage import COLLECTIONS, Collection, get_database
from .timeutil import now_iso, now_ms

log = get_logger("media_repo")

LIST_SORT = [("order", 1), ("createdAt", -1)]


class MediaRepository:
    def __init__(self, collection_name: str, id_prefix: str):
        self.collection_name = collection_name
        self.id_prefix = id_prefix

    def _coll(self) -> Collection:
        return get_database().collection(self.collection_name)

    def new_id(self) -> str:
        count = self._coll().count_documents()
        return f"{self.id_prefix}-{count + 1:03d}-{now_ms()}"

    def list(self, *, published_only: bool = False) -> list[dict[str, Any]]:
        filter = {"isPublished": True} if published_only else None
        return self._coll().find(filter, sort=LIST_SORT)

    def get(self, id: str) -> dict[str, Any] | None:
        return self._coll().find_one({"id": id})

    def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        now = now_iso()
        doc = {
            **payload,
            "id": self.new_id(),
            "isPublished": bool(payload.get("isPublished", True)),
            "order": int(payload.get("order") or 0),
            "createdAt": now,
            "updatedAt": now,
        }
        created = self._coll().insert_one(doc)
        log.info("media_created", collection=self.collection_name, id=doc["id"])
        return created

    def update(self, id: str, updates: dict[str, Any]) -> dict[str, Any] | None:
        fields = {k: v for k, v in updates.items() if k not in ("id", "createdAt")}
        fields["updatedAt"] = now_iso()
        res = self._coll().update_one({"id": id}, {"$set": fields})
        if res.matched_count == 0:
            return None
        log.info("media_updated", collection=self.collection_name, id=id)
        return self.get(id)

    def delete(self, id: str) -> dict[str, Any] | None:
        existing = self.get(id)
        if existing is None:
            return None
        self._coll().delete_one({"id": id})
        log.info("media_deleted", collection=self.collection_name, id=id)
        return existing

    def seed(self, items: list[dict[str, Any]]) -> int:
        """Insert ``items`` only when the collection is empty. Returns rows inserted."""
        coll = self._coll()
        if coll.count_documents() > 0:
            return 0
        now = now_iso()
        for index, item in enumerate(items):
            coll.insert_one(
                {
                    **item,
                    "isPublished": True,
                    "order": index,
                    "createdAt": item.get("createdAt") or now,
                    "updatedAt": now,
                }
            )
        log.info("media_seeded", collection=self.collection_name, count=len(items))
        return len(items)


videos = MediaRepository(COLLECTIONS.VIDEOS, "video")
photos = MediaRepository(COLLECTIONS.PHOTOS, "photo")
