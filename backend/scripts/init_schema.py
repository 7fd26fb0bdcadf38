#!/usr/bin/env python3
"""
Create the PostgreSQL / Aurora DSQL tables and indexes.

Every statement uses IF NOT EXISTS, so re-running is harmless.

Usage:
    python backend/scripts/init_schema.py
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from portfolio.observability.logging import configure_logging, get_logger
from portfolio.settings import settings
from portfolio.storage import StorageError
from portfolio.storage.postgres import close_pool, create_tables

log = get_logger("init_schema")


def main() -> int:
    configure_logging(level="INFO")
    if not (settings.pg_host and settings.pg_user and settings.pg_database):
        log.error("init_schema_not_configured", missing="PGHOST/PGUSER/PGDATABASE")
        return 1
    try:
        create_tables()
    except StorageError as e:
        log.error("init_schema_failed", error=e.message, operation=e.operation)
        return 1
    finally:
        close_pool()
    log.info("init_schema_done", host=settings.pg_host, dsql=settings.is_dsql)
    return 0


if __name__ == "__main__":
    sys.exit(main())
