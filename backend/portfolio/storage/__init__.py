"""Storage layer.

Two interchangeable backends (MongoDB, PostgreSQL/Aurora DSQL) behind one
MongoDB-shaped collection interface, plus a JSON file store for projects.
"""

from __future__ import annotations

from .base import COLLECTIONS, Collection, Database, DeleteResult, UpdateResult
from .database import close_database, get_database
from .errors import (
    StorageConflict,
    StorageError,
    StorageInternal,
    StorageNotFound,
    StorageUnavailable,
    StorageValidation,
)

__all__ = [
    "COLLECTIONS",
    "Collection",
    "Database",
    "DeleteResult",
    "UpdateResult",
    "close_database",
    "get_database",
    "StorageConflict",
    "StorageError",
    "StorageInternal",
    "StorageNotFound",
    "StorageUnavailable",
    "StorageValidation",
]
