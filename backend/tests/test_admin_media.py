from __future__ import annotations

import pytest

VIDEO = {
    "title": "  Showreel  ",
    "description": "Best of the year",
    "year": 2024,
    "video_url": "https://www.youtube.com/watch?v=aqz-KE-bpKQ",
    "thumbnail_url": "https://example.com/thumb.jpg",
    "duration": "2:45",
    "category": "Showreel",
}

PHOTO = {
    "title": "Harbour",
    "description": "Boats at dawn",
    "year": 2023,
    "image_url": "https://example.com/harbour.jpg",
    "thumbnail_url": "https://example.com/harbour-thumb.jpg",
    "category": "Landscape",
    "location": "Marseille",
}


def test_create_video_assigns_id_and_defaults(client, auth_headers):
    r = client.post("/api/admin/videos", json=VIDEO, headers=auth_headers)
    assert r.status_code == 201
    video = r.json()["video"]
    assert video["id"].startswith("video-001-")
    assert video["title"] == "Showreel"
    assert video["isPublished"] is True
    assert video["order"] == 0
    assert video["createdAt"] == video["updatedAt"]
    assert video["createdAt"].endswith("Z")


def test_create_video_requires_every_field(client, auth_headers):
    body = {**VIDEO, "duration": "   "}
    r = client.post("/api/admin/videos", json=body, headers=auth_headers)
    assert r.status_code == 422


def test_list_is_ordered_and_includes_unpublished(client, auth_headers):
    client.post("/api/admin/videos", json={**VIDEO, "title": "B", "order": 2}, headers=auth_headers)
    client.post("/api/admin/videos", json={**VIDEO, "title": "A", "order": 1, "isPublished": False}, headers=auth_headers)

    r = client.get("/api/admin/videos", headers=auth_headers)
    assert r.status_code == 200
    assert [v["title"] for v in r.json()["videos"]] == ["A", "B"]


def test_update_video(client, auth_headers):
    created = client.post("/api/admin/videos", json=VIDEO, headers=auth_headers).json()["video"]

    r = client.put(
        "/api/admin/videos",
        json={"id": created["id"], "title": "Renamed", "createdAt": "1999-01-01T00:00:00.000Z"},
        headers=auth_headers,
    )
    assert r.status_code == 200
    video = r.json()["video"]
    assert video["title"] == "Renamed"
    assert video["createdAt"] == created["createdAt"]
    assert video["description"] == VIDEO["description"]


@pytest.mark.parametrize(
    "body,status,detail",
    [
        ({"title": "x"}, 400, "Video ID is required"),
        ({"id": "video-999", "title": "x"}, 404, "Video not found"),
    ],
)
def test_update_video_errors(client, auth_headers, body, status, detail):
    r = client.put("/api/admin/videos", json=body, headers=auth_headers)
    assert r.status_code == status
    assert r.json()["detail"] == detail


def test_delete_photo(client, auth_headers, db):
    created = client.post("/api/admin/photos", json=PHOTO, headers=auth_headers).json()["photo"]
    assert created["id"].startswith("photo-001-")

    r = client.delete(f"/api/admin/photos?id={created['id']}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"message": "Photo deleted successfully"}
    assert db.collection("photos").docs == []

    r = client.delete(f"/api/admin/photos?id={created['id']}", headers=auth_headers)
    assert r.status_code == 404

    r = client.delete("/api/admin/photos", headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Photo ID is required"


def test_public_lists_only_published(client, auth_headers):
    client.post("/api/admin/photos", json={**PHOTO, "title": "Shown"}, headers=auth_headers)
    client.post("/api/admin/photos", json={**PHOTO, "title": "Hidden", "isPublished": False}, headers=auth_headers)

    r = client.get("/api/public/photos")
    assert r.status_code == 200
    assert [p["title"] for p in r.json()["photos"]] == ["Shown"]


def test_public_media_falls_back_to_seed_data(client, db):
    r = client.get("/api/public/videos")
    assert r.status_code == 200
    videos = r.json()["videos"]
    assert len(videos) == 3
    assert all(v["isPublished"] for v in videos)

    from portfolio.storage import StorageUnavailable

    db.collection("photos").fail_with = StorageUnavailable(message="down")
    r = client.get("/api/public/photos")
    assert r.status_code == 200
    assert len(r.json()["photos"]) == 3
