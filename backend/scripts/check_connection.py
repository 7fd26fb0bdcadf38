#!/usr/bin/env python3
"""
Verify that the configured storage backend is reachable.

Exits 0 when the database answers a ping, 1 otherwise.

Usage:
    STORAGE_BACKEND=postgres python backend/scripts/check_connection.py
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from portfolio.observability.logging import configure_logging, get_logger
from portfolio.settings import settings
from portfolio.storage import StorageError, close_database, get_database
from portfolio.storage.mongodb import validate_mongodb_uri

log = get_logger("check_connection")


def main() -> int:
    configure_logging(level="INFO")
    backend = settings.normalized_storage_backend

    if backend == "mongodb":
        problem = validate_mongodb_uri(settings.mongodb_uri)
        if problem:
            log.error("connection_check_failed", backend=backend, error=problem)
            return 1
    elif not settings.storage_configured():
        log.error("connection_check_failed", backend=backend, error="PGHOST, PGUSER and PGDATABASE are required")
        return 1

    db = get_database()
    try:
        ok = db.ping()
        collections = db.list_collection_names() if ok else []
    except StorageError as e:
        log.error("connection_check_failed", backend=backend, error=e.message)
        return 1
    finally:
        close_database()

    if not ok:
        log.error("connection_check_failed", backend=backend)
        return 1
    log.info("connection_check_ok", backend=backend, collections=collections)
    return 0


if __name__ == "__main__":
    sys.exit(main())
