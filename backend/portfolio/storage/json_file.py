from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from ..filesystem import FilesystemError, read_json_file, write_json_file
from ..observability.logging import get_logger

log = get_logger("json_file_store")

# One lock for every store in the process: two stores may point at one file.
_write_lock = threading.Lock()


class JsonFileStore:
    """
    Projects persisted in one JSON document: ``{"projects": [...]}``.

    Reads parse the file every time. Read-modify-write cycles run under a
    process-wide lock; there is no cross-process coordination.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def read(self) -> dict[str, Any]:
        try:
            data = read_json_file(self.path)
        except FilesystemError as e:
            if e.code == "ENOENT":
                return {"projects": []}
            raise
        if not isinstance(data, dict):
            data = {}
        projects = data.get("projects")
        data["projects"] = projects if isinstance(projects, list) else []
        return data

    def list_projects(self) -> list[dict[str, Any]]:
        return list(self.read()["projects"])

    def mutate(self, fn):
        """
        Apply ``fn(data)`` under the write lock and persist the result.

        ``fn`` mutates the loaded data in place and returns a value that is
        passed back to the caller.
        """
        with _write_lock:
            data = self.read()
            result = fn(data)
            write_json_file(self.path, data)
            return result


def next_project_id(projects: list[dict[str, Any]]) -> int:
    ids = [int(p["id"]) for p in projects if isinstance(p.get("id"), int)]
    return max(ids) + 1 if ids else 1
