from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

from ..observability.logging import get_logger
from ..settings import settings
from ..storage import StorageNotFound, StorageValidation
from ..storage.json_file import JsonFileStore, next_project_id
from .timeutil import now_iso

log = get_logger("projects_repo")

YOUTUBE_URL = re.compile(
    r"^(https?://)?(www\.)?(youtube\.com/(watch\?v=|embed/|v/)|youtu\.be/)[a-zA-Z0-9_-]{11}(\?\S*)?$"
)

EDITABLE_FIELDS = ("title", "description", "video", "images", "url")


@lru_cache(maxsize=1)
def store() -> JsonFileStore:
    return JsonFileStore(settings.data_file_path)


def _invalid(message: str) -> StorageValidation:
    return StorageValidation(message=message, collection="projects")


def _check_video(video: Any) -> None:
    if video and not YOUTUBE_URL.match(str(video)):
        raise _invalid("Invalid YouTube URL")


def list_projects() -> list[dict[str, Any]]:
    return store().list_projects()


def get_project(id: int) -> dict[str, Any] | None:
    for p in store().list_projects():
        if p.get("id") == id:
            return p
    return None


def create_project(payload: dict[str, Any]) -> dict[str, Any]:
    title = str(payload.get("title") or "").strip()
    description = str(payload.get("description") or "").strip()
    if not title or not description:
        raise _invalid("Title and description are required")
    _check_video(payload.get("video"))

    def _apply(data: dict[str, Any]) -> dict[str, Any]:
        now = now_iso()
        project = {
            "id": next_project_id(data["projects"]),
            "title": title,
            "description": description,
            "video": payload.get("video") or None,
            "images": list(payload.get("images") or []),
            "url": payload.get("url") or None,
            "createdAt": now,
            "updatedAt": now,
        }
        data["projects"].append(project)
        return project

    project = store().mutate(_apply)
    log.info("project_created", project_id=project["id"])
    return project


def update_project(id: int, updates: dict[str, Any]) -> dict[str, Any]:
    _check_video(updates.get("video"))
    fields = {k: updates[k] for k in EDITABLE_FIELDS if k in updates and updates[k] is not None}

    def _apply(data: dict[str, Any]) -> dict[str, Any]:
        for i, p in enumerate(data["projects"]):
            if p.get("id") == id:
                data["projects"][i] = {**p, **fields, "id": id, "updatedAt": now_iso()}
                return data["projects"][i]
        raise StorageNotFound(message="Project not found", operation="UpdateOne", collection="projects")

    project = store().mutate(_apply)
    log.info("project_updated", project_id=id)
    return project


def delete_project(id: int) -> None:
    def _apply(data: dict[str, Any]) -> None:
        before = len(data["projects"])
        data["projects"] = [p for p in data["projects"] if p.get("id") != id]
        if len(data["projects"]) == before:
            raise StorageNotFound(message="Project not found", operation="DeleteOne", collection="projects")

    store().mutate(_apply)
    log.info("project_deleted", project_id=id)
