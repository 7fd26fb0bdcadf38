from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import Any

# Settings are read once at import time, so the environment must be ready first.
_TMP = Path(tempfile.mkdtemp(prefix="portfolio-tests-"))
os.environ["NODE_ENV"] = "test"
os.environ["STORAGE_BACKEND"] = "mongodb"
os.environ["MONGODB_URI"] = "mongodb://localhost:27017"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["ADMIN_EMAIL"] = "admin@example.com"
os.environ["ADMIN_PASSWORD"] = "correct-horse-battery"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SEED_SECRET"] = "seed-me"
os.environ["UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ["DATA_FILE_PATH"] = str(_TMP / "data.json")
for _name in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET", "OTEL_ENABLED"):
    os.environ.pop(_name, None)

# Ensure `backend/` is on sys.path so `import portfolio.*` works in tests.
BACKEND_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_DIR))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from portfolio.storage import (  # noqa: E402
    COLLECTIONS,
    Collection,
    Database,
    DeleteResult,
    StorageValidation,
    UpdateResult,
)
from portfolio.storage.base import set_fields  # noqa: E402


def _matches(doc: dict[str, Any], filter: dict[str, Any] | None) -> bool:
    return all(doc.get(k) == v for k, v in (filter or {}).items())


def _sort_key(value: Any) -> tuple[bool, Any]:
    return (value is None, value if value is not None else 0)


class FakeCollection(Collection):
    """In-memory collection with the same contract as the real backends."""

    def __init__(self, name: str):
        self.name = name
        self.docs: list[dict[str, Any]] = []
        self.fail_with: Exception | None = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def find(self, filter=None, *, sort=None):
        self._check()
        found = [dict(d) for d in self.docs if _matches(d, filter)]
        for field, direction in reversed(sort or []):
            found.sort(key=lambda d, f=field: _sort_key(d.get(f)), reverse=int(direction) < 0)
        return found

    def find_one(self, filter):
        self._check()
        for d in self.docs:
            if _matches(d, filter):
                return dict(d)
        return None

    def insert_one(self, document):
        self._check()
        self.docs.append(dict(document))
        return dict(document)

    def update_one(self, filter, update, *, upsert=False):
        self._check()
        try:
            fields = set_fields(update)
        except ValueError as e:
            raise StorageValidation(message=str(e), collection=self.name) from e
        for d in self.docs:
            if _matches(d, filter):
                d.update(fields)
                return UpdateResult(matched_count=1, modified_count=1)
        if upsert:
            self.docs.append({**(filter or {}), **fields})
            return UpdateResult(matched_count=0, modified_count=0, upserted=True)
        return UpdateResult(matched_count=0, modified_count=0)

    def delete_one(self, filter):
        self._check()
        for i, d in enumerate(self.docs):
            if _matches(d, filter):
                del self.docs[i]
                return DeleteResult(deleted_count=1)
        return DeleteResult(deleted_count=0)

    def count_documents(self, filter=None):
        self._check()
        return sum(1 for d in self.docs if _matches(d, filter))


class FakeDatabase(Database):
    backend = "fake"

    def __init__(self):
        self.collections = {name: FakeCollection(name) for name in COLLECTIONS.ALL}
        self.healthy = True

    def collection(self, name: str) -> FakeCollection:
        return self.collections[name]

    def ping(self) -> bool:
        return self.healthy

    def close(self) -> None:
        pass


@pytest.fixture
def db(monkeypatch) -> FakeDatabase:
    import portfolio.storage.database as database

    fake = FakeDatabase()
    monkeypatch.setattr(database, "_db", fake)
    return fake


@pytest.fixture(autouse=True)
def _fresh_state(monkeypatch, tmp_path):
    from portfolio.services import projects_repo, public_cache
    from portfolio.settings import settings

    public_cache.clear()
    monkeypatch.setattr(settings, "data_file_path", str(tmp_path / "data.json"))
    projects_repo.store.cache_clear()
    yield
    projects_repo.store.cache_clear()
    public_cache.clear()


@pytest.fixture
def client(db) -> TestClient:
    from portfolio.main import create_app

    return TestClient(create_app())


@pytest.fixture
def auth_headers() -> dict[str, str]:
    from portfolio.auth.tokens import generate_token

    return {"Authorization": f"Bearer {generate_token('admin@example.com')}"}
