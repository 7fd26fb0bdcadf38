"""
Backend-neutral storage interface.

Both backends expose the same MongoDB-shaped collection API so service code
never needs to know which database is active.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

Filter = dict[str, Any]
Sort = list[tuple[str, int]]


class COLLECTIONS:
    ABOUT = "about"
    PHOTOS = "photos"
    VIDEOS = "videos"
    CONTACT = "contact"
    REVIEWS = "reviews"
    SETTINGS = "settings"
    USERS = "users"

    ALL = ("about", "photos", "videos", "contact", "reviews", "settings", "users")


@dataclass(slots=True)
class UpdateResult:
    matched_count: int
    modified_count: int
    upserted: bool = False


@dataclass(slots=True)
class DeleteResult:
    deleted_count: int


def set_fields(update: dict[str, Any]) -> dict[str, Any]:
    """Extract the ``$set`` document; only ``$set`` updates are supported."""
    if not isinstance(update, dict):
        raise ValueError("update must be a dict")
    unknown = [k for k in update if k != "$set"]
    if unknown:
        raise ValueError(f"Unsupported update operators: {', '.join(sorted(unknown))}")
    fields = update.get("$set") or {}
    if not isinstance(fields, dict):
        raise ValueError("$set must be a dict")
    return dict(fields)


class Collection(ABC):
    """A named set of documents."""

    name: str

    @abstractmethod
    def find(self, filter: Filter | None = None, *, sort: Sort | None = None) -> list[dict[str, Any]]:
        """Documents whose fields equal every value in ``filter``."""

    @abstractmethod
    def find_one(self, filter: Filter) -> dict[str, Any] | None:
        """First matching document, or None."""

    @abstractmethod
    def insert_one(self, document: dict[str, Any]) -> dict[str, Any]:
        """Insert and return the stored document."""

    @abstractmethod
    def update_one(
        self, filter: Filter, update: dict[str, Any], *, upsert: bool = False
    ) -> UpdateResult:
        """Apply a ``{"$set": {...}}`` update to the first match."""

    @abstractmethod
    def delete_one(self, filter: Filter) -> DeleteResult:
        """Delete the first match."""

    @abstractmethod
    def count_documents(self, filter: Filter | None = None) -> int:
        """Number of matching documents."""


class Database(ABC):
    backend: str

    @abstractmethod
    def collection(self, name: str) -> Collection:
        pass

    @abstractmethod
    def ping(self) -> bool:
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    def list_collection_names(self) -> list[str]:
        return list(COLLECTIONS.ALL)
