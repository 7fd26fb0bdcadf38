from __future__ import annotations

import threading

from ..observability.logging import get_logger
from ..settings import settings
from .base import Database

log = get_logger("storage")

_db: Database | None = None
_lock = threading.Lock()


def get_database() -> Database:
    """Process-wide database for the backend named by STORAGE_BACKEND."""
    global _db
    with _lock:
        if _db is not None:
            return _db
        backend = settings.normalized_storage_backend
        if backend == "postgres":
            from .postgres import PostgresDatabase

            _db = PostgresDatabase()
        else:
            from .mongodb import MongoDatabase

            _db = MongoDatabase()
        log.info("storage_backend_selected", backend=backend)
        return _db


def close_database() -> None:
    global _db
    with _lock:
        if _db is not None:
            _db.close()
            _db = None
