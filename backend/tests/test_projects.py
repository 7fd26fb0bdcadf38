from __future__ import annotations

import errno
import json

from portfolio import filesystem
from portfolio.settings import settings

PROJECT = {
    "title": "Brand film",
    "description": "Two-minute film for a coffee roaster.",
    "video": "https://youtu.be/aqz-KE-bpKQ",
    "images": ["/static/images/1-still.jpg"],
}


def test_projects_require_auth(client):
    assert client.post("/api/projects", json=PROJECT).status_code == 401


def test_create_and_list_projects(client, auth_headers):
    r = client.post("/api/projects", json=PROJECT, headers=auth_headers)
    assert r.status_code == 201
    project = r.json()["project"]
    assert project["id"] == 1
    assert project["url"] is None

    r = client.post("/api/projects", json={**PROJECT, "title": "Second", "video": None}, headers=auth_headers)
    assert r.json()["project"]["id"] == 2

    projects = client.get("/api/public/projects").json()["projects"]
    assert [p["title"] for p in projects] == ["Brand film", "Second"]

    with open(settings.data_file_path, encoding="utf-8") as f:
        assert len(json.load(f)["projects"]) == 2


def test_public_projects_empty_when_file_missing(client):
    assert client.get("/api/public/projects").json() == {"projects": []}


def test_create_project_validation(client, auth_headers):
    r = client.post("/api/projects", json={"title": "Only title"}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Title and description are required"

    r = client.post("/api/projects", json={**PROJECT, "video": "https://vimeo.com/123"}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid YouTube URL"


def test_update_project(client, auth_headers):
    client.post("/api/projects", json=PROJECT, headers=auth_headers)

    r = client.put("/api/projects", json={"id": 1, "title": "Renamed"}, headers=auth_headers)
    assert r.status_code == 200
    project = r.json()["project"]
    assert project["title"] == "Renamed"
    assert project["description"] == PROJECT["description"]

    assert client.put("/api/projects", json={"title": "x"}, headers=auth_headers).status_code == 400
    r = client.put("/api/projects", json={"id": 9, "title": "x"}, headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["detail"] == "Project not found"


def test_delete_project(client, auth_headers):
    client.post("/api/projects", json=PROJECT, headers=auth_headers)

    assert client.delete("/api/projects?id=abc", headers=auth_headers).json()["detail"] == "Invalid project ID"
    assert client.delete("/api/projects", headers=auth_headers).status_code == 400
    assert client.delete("/api/projects?id=1", headers=auth_headers).status_code == 200
    assert client.delete("/api/projects?id=1", headers=auth_headers).status_code == 404
    assert client.get("/api/public/projects").json() == {"projects": []}


def test_read_only_filesystem_is_503_with_help(client, auth_headers, monkeypatch):
    def _read_only(*args, **kwargs):
        raise OSError(errno.EROFS, "Read-only file system")

    monkeypatch.setattr(filesystem.tempfile, "mkstemp", _read_only)
    r = client.post("/api/projects", json=PROJECT, headers=auth_headers)
    assert r.status_code == 503
    body = r.json()
    assert body["title"] == "Cannot save data: Filesystem is read-only"
    assert body["extensions"]["code"] == "EROFS"
    assert body["extensions"]["helpMessage"] == filesystem.READ_ONLY_HELP


def test_corrupt_data_file_fails_public_read(client):
    with open(settings.data_file_path, "w", encoding="utf-8") as f:
        f.write("{not json")
    r = client.get("/api/public/projects")
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to load projects"


def test_get_project_by_id(client, auth_headers):
    from portfolio.services import projects_repo

    client.post("/api/projects", json=PROJECT, headers=auth_headers)
    assert projects_repo.get_project(1)["title"] == "Brand film"
    assert projects_repo.get_project(2) is None
