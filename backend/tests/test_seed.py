from __future__ import annotations

from portfolio.models import AboutData, ContactData, Photo, Video
from portfolio.services import seed


def test_bundled_seed_data_is_valid():
    for v in seed.seed_videos():
        Video.model_validate(v)
    for p in seed.seed_photos():
        Photo.model_validate(p)
    AboutData.model_validate(seed.seed_about())
    ContactData.model_validate(seed.seed_contact())


def test_seed_copies_are_independent():
    seed.seed_about()["profile"]["name"] = "changed"
    assert seed.seed_about()["profile"]["name"] != "changed"


def test_seed_requires_secret(client, db):
    r = client.post("/api/admin/seed", json={"secret": "wrong"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid seed secret"
    assert client.post("/api/admin/seed", json={}).status_code == 401
    assert db.collection("videos").docs == []


def test_seed_rejects_non_ascii_secret(client, db):
    r = client.post("/api/admin/seed", json={"secret": "sécret"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid seed secret"
    assert db.collection("videos").docs == []


def test_seed_rejected_when_secret_not_configured(client, db, monkeypatch):
    from portfolio.settings import settings

    monkeypatch.setattr(settings, "seed_secret", None)
    assert client.post("/api/admin/seed", json={"secret": ""}).status_code == 401


def test_seed_fills_empty_collections_once(client, db):
    r = client.post("/api/admin/seed", json={"secret": "seed-me"})
    assert r.status_code == 200
    assert r.json()["seeded"] == {"videos": True, "photos": True, "about": True, "contact": True}
    assert len(db.collection("videos").docs) == 3
    assert [p["order"] for p in db.collection("photos").docs] == [0, 1, 2]
    assert db.collection("about").docs[0]["docId"] == "about-data"
    assert db.collection("users").docs[0]["email"] == "admin@example.com"

    again = client.post("/api/admin/seed", json={"secret": "seed-me"}).json()
    assert again["seeded"] == {"videos": False, "photos": False, "about": False, "contact": False}
    assert len(db.collection("videos").docs) == 3


def test_filesystem_status_requires_auth(client, auth_headers):
    assert client.get("/api/admin/filesystem-status").status_code == 401
    body = client.get("/api/admin/filesystem-status", headers=auth_headers).json()
    assert body["success"] is True
    assert "isWritable" in body["filesystem"]
