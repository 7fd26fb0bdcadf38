from __future__ import annotations

import copy
from functools import lru_cache
from pathlib import Path
from typing import Any

from ..filesystem import read_json_file
from ..observability.logging import get_logger
from ..storage import COLLECTIONS, get_database
from . import media_repo, site_content_repo, users_repo

log = get_logger("seed")

SEED_DIR = Path(__file__).resolve().parents[1] / "seed_data"


@lru_cache(maxsize=8)
def _load(name: str) -> Any:
    return read_json_file(SEED_DIR / f"{name}.json")


def seed_videos() -> list[dict[str, Any]]:
    return copy.deepcopy(_load("videos").get("videos") or [])


def seed_photos() -> list[dict[str, Any]]:
    return copy.deepcopy(_load("photos").get("photos") or [])


def seed_about() -> dict[str, Any]:
    return copy.deepcopy(_load("about"))


def seed_contact() -> dict[str, Any]:
    return copy.deepcopy(_load("contact"))


def _with_publish_defaults(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [{**item, "isPublished": True, "order": i} for i, item in enumerate(items)]


def fallback_videos() -> list[dict[str, Any]]:
    return _with_publish_defaults(seed_videos())


def fallback_photos() -> list[dict[str, Any]]:
    return _with_publish_defaults(seed_photos())


def seed_database() -> dict[str, bool]:
    """
    Create the admin user when configured, and fill every empty collection
    from the bundled seed data. Returns which collections were seeded.
    """
    db = get_database()
    users_repo.ensure_admin_user()

    seeded = {
        "videos": media_repo.videos.seed(seed_videos()) > 0,
        "photos": media_repo.photos.seed(seed_photos()) > 0,
        "about": False,
        "contact": False,
    }

    if db.collection(COLLECTIONS.ABOUT).count_documents() == 0:
        site_content_repo.save_about(seed_about())
        seeded["about"] = True
    if db.collection(COLLECTIONS.CONTACT).count_documents() == 0:
        site_content_repo.save_contact(seed_contact())
        seeded["contact"] = True

    log.info("database_seeded", **seeded)
    return seeded
