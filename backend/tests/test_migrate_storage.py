from __future__ import annotations

import importlib.util
from pathlib import Path

from conftest import FakeDatabase

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "migrate_storage.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("migrate_storage", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_migration_copies_missing_documents_only():
    migrate = _load_script()
    source, target = FakeDatabase(), FakeDatabase()
    source.collection("videos").insert_one({"id": "video-001", "title": "A"})
    source.collection("videos").insert_one({"id": "video-002", "title": "B"})
    source.collection("videos").insert_one({"title": "no key"})
    target.collection("videos").insert_one({"id": "video-001", "title": "already there"})

    result = migrate.migrate_collection(source, target, "videos")
    assert result == {"collection": "videos", "copied": 1, "skipped": 2, "errors": []}
    titles = sorted(d["title"] for d in target.collection("videos").docs)
    assert titles == ["B", "already there"]


def test_single_documents_are_keyed_by_doc_id():
    migrate = _load_script()
    source, target = FakeDatabase(), FakeDatabase()
    source.collection("settings").insert_one({"docId": "main", "reviewsEnabled": False})

    assert migrate.migrate_collection(source, target, "settings")["copied"] == 1
    assert migrate.migrate_collection(source, target, "settings")["skipped"] == 1
    assert target.collection("settings").docs == [{"docId": "main", "reviewsEnabled": False}]


def test_dry_run_writes_nothing():
    migrate = _load_script()
    source, target = FakeDatabase(), FakeDatabase()
    source.collection("users").insert_one({"email": "admin@example.com", "passwordHash": "x"})

    assert migrate.migrate_collection(source, target, "users", dry_run=True)["copied"] == 1
    assert target.collection("users").docs == []
