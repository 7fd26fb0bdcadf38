from __future__ import annotations

PROFILE = {
    "name": "Alex Martin",
    "title": "Director",
    "bio": "Short films and commercials.",
    "photo_url": "",
    "experience_years": 6,
    "location": "Lyon",
}


def test_public_about_and_contact_fall_back_to_seed(client):
    about = client.get("/api/public/about").json()
    assert about["profile"]["name"]
    assert about["software"]

    contact = client.get("/api/public/contact").json()
    assert contact["contact"]["email"] == "contact@example.com"


def test_save_about_upserts_single_document(client, db, auth_headers):
    r = client.post("/api/admin/about", json={"profile": PROFILE, "skills": []}, headers=auth_headers)
    assert r.status_code == 200
    about = r.json()["about"]
    assert about["docId"] == "about-data"
    assert about["profile"]["name"] == "Alex Martin"

    r = client.put(
        "/api/admin/about",
        json={"achievements": [{"year": 2022, "title": "Jury prize", "event": "Short Film Days"}]},
        headers=auth_headers,
    )
    assert r.status_code == 200
    docs = db.collection("about").docs
    assert len(docs) == 1
    # Sections not sent keep their stored value.
    assert docs[0]["profile"]["name"] == "Alex Martin"
    assert docs[0]["achievements"][0]["title"] == "Jury prize"

    assert client.get("/api/public/about").json()["profile"]["name"] == "Alex Martin"
    assert client.get("/api/admin/about", headers=auth_headers).json()["about"]["docId"] == "about-data"


def test_save_about_rejects_out_of_range_software_level(client, auth_headers):
    r = client.put(
        "/api/admin/about",
        json={"software": [{"name": "Resolve", "level": 120, "icon": "davinci"}]},
        headers=auth_headers,
    )
    assert r.status_code == 422


def test_save_contact(client, db, auth_headers):
    body = {
        "contact": {"email": "hello@example.com", "phone": "", "location": "Lyon"},
        "social": [{"name": "Vimeo", "url": "https://vimeo.com/alex", "icon": "vimeo"}],
        "availability": {"status": "busy", "message": "Booked until spring"},
    }
    r = client.put("/api/admin/contact", json=body, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["contact"]["docId"] == "contact-data"

    public = client.get("/api/public/contact").json()
    assert public["availability"]["status"] == "busy"
    assert public["social"][0]["url"] == "https://vimeo.com/alex"


def test_admin_settings_default_then_update(client, auth_headers):
    r = client.get("/api/admin/settings", headers=auth_headers)
    assert r.json() == {"settings": {"lightWaveEffect": True, "reviewsEnabled": True}}

    r = client.put("/api/admin/settings", json={"lightWaveEffect": False}, headers=auth_headers)
    assert r.status_code == 200
    settings = r.json()["settings"]
    assert settings["lightWaveEffect"] is False
    assert settings["reviewsEnabled"] is True

    r = client.get("/api/public/settings")
    assert r.headers["Cache-Control"] == "public, max-age=60"
    assert r.json() == {"settings": {"lightWaveEffect": False, "reviewsEnabled": True}}


def test_admin_settings_ignores_non_boolean_values(client, auth_headers):
    r = client.put("/api/admin/settings", json={"reviewsEnabled": "no", "other": True}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "No valid settings provided"


def test_disabling_reviews_takes_effect_on_cached_public_reads(client, db, auth_headers):
    assert "pagination" in client.get("/api/public/reviews").json()

    client.put("/api/admin/settings", json={"reviewsEnabled": False}, headers=auth_headers)
    assert client.get("/api/public/reviews").json()["message"] == "Reviews are currently disabled"


def test_public_settings_default_when_database_down(client, db):
    from portfolio.storage import StorageUnavailable

    db.collection("settings").fail_with = StorageUnavailable(message="down")
    r = client.get("/api/public/settings")
    assert r.status_code == 200
    assert r.json() == {"settings": {"lightWaveEffect": True, "reviewsEnabled": True}}
