from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class StorageError(Exception):
    """Base error for database operations on either backend.

    Caught by a FastAPI exception handler and rendered into RFC7807
    problem-details responses.
    """

    message: str
    operation: str | None = None
    collection: str | None = None
    key: dict[str, Any] | None = None
    retryable: bool = False
    cause: Exception | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class StorageNotFound(StorageError):
    pass


@dataclass(slots=True)
class StorageConflict(StorageError):
    pass


@dataclass(slots=True)
class StorageValidation(StorageError):
    pass


@dataclass(slots=True)
class StorageUnavailable(StorageError):
    pass


@dataclass(slots=True)
class StorageInternal(StorageError):
    pass
