#!/usr/bin/env python3
"""
Copy every collection from one storage backend to the other.

Documents whose key already exists in the target are left alone, so the
script can be re-run after a partial migration.

Usage:
    python backend/scripts/migrate_storage.py --from mongodb --to postgres [--dry-run]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from portfolio.observability.logging import configure_logging, get_logger
from portfolio.storage import COLLECTIONS, Database, StorageError
from portfolio.storage.mongodb import MongoDatabase
from portfolio.storage.postgres import PostgresDatabase, create_tables

log = get_logger("migrate_storage")

KEY_FIELDS: dict[str, str] = {
    COLLECTIONS.VIDEOS: "id",
    COLLECTIONS.PHOTOS: "id",
    COLLECTIONS.REVIEWS: "id",
    COLLECTIONS.ABOUT: "docId",
    COLLECTIONS.CONTACT: "docId",
    COLLECTIONS.SETTINGS: "docId",
    COLLECTIONS.USERS: "email",
}


def _open(backend: str) -> Database:
    if backend == "postgres":
        return PostgresDatabase()
    return MongoDatabase()


def migrate_collection(source: Database, target: Database, name: str, *, dry_run: bool = False) -> dict[str, Any]:
    key_field = KEY_FIELDS[name]
    src = source.collection(name)
    dst = target.collection(name)

    copied = 0
    skipped = 0
    errors: list[str] = []
    for doc in src.find():
        key = doc.get(key_field)
        if not key:
            skipped += 1
            continue
        if dst.find_one({key_field: key}) is not None:
            skipped += 1
            continue
        if dry_run:
            copied += 1
            continue
        try:
            dst.insert_one(doc)
            copied += 1
        except StorageError as e:
            errors.append(f"{key}: {e.message}")

    return {"collection": name, "copied": copied, "skipped": skipped, "errors": errors}


def main() -> int:
    parser = argparse.ArgumentParser(description="Copy portfolio data between storage backends")
    parser.add_argument("--from", dest="source", choices=["mongodb", "postgres"], default="mongodb")
    parser.add_argument("--to", dest="target", choices=["mongodb", "postgres"], default="postgres")
    parser.add_argument("--dry-run", action="store_true", help="Count documents without writing")
    parser.add_argument("--skip-schema", action="store_true", help="Do not create PostgreSQL tables first")
    args = parser.parse_args()

    configure_logging(level="INFO")

    if args.source == args.target:
        parser.error("--from and --to must name different backends")

    source = _open(args.source)
    target = _open(args.target)
    failed = False
    try:
        if args.target == "postgres" and not args.skip_schema and not args.dry_run:
            create_tables()

        for name in COLLECTIONS.ALL:
            result = migrate_collection(source, target, name, dry_run=args.dry_run)
            log.info("collection_migrated", dry_run=args.dry_run, **result)
            if result["errors"]:
                failed = True
    except StorageError as e:
        log.error("migration_failed", error=e.message, operation=e.operation, collection=e.collection)
        failed = True
    finally:
        source.close()
        target.close()

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
