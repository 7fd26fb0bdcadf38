from __future__ import annotations

import time

from jose import jwt

from portfolio.auth import passwords, tokens
from portfolio.middleware.auth import is_protected_path


def test_extract_token_requires_exact_bearer_scheme():
    assert tokens.extract_token("Bearer abc") == "abc"
    assert tokens.extract_token("bearer abc") is None
    assert tokens.extract_token("Bearer") is None
    assert tokens.extract_token("Bearer a b") is None
    assert tokens.extract_token(None) is None


def test_generated_token_verifies():
    payload = tokens.verify_token(tokens.generate_token("admin@example.com"))
    assert payload is not None
    assert payload.email == "admin@example.com"
    assert payload.exp - payload.iat == 24 * 3600


def test_expired_or_foreign_tokens_are_rejected():
    now = int(time.time())
    expired = jwt.encode(
        {"email": "admin@example.com", "iat": now - 7200, "exp": now - 3600},
        "test-jwt-secret",
        algorithm="HS256",
    )
    foreign = jwt.encode({"email": "admin@example.com"}, "another-secret", algorithm="HS256")
    assert tokens.verify_token(expired) is None
    assert tokens.verify_token(foreign) is None
    assert tokens.verify_token("not-a-jwt") is None


def test_password_hash_round_trip_and_long_passwords():
    h = passwords.hash_password("x" * 100)
    assert passwords.verify_password("x" * 100, h)
    assert not passwords.verify_password("y" * 100, h)
    assert not passwords.verify_password("anything", "not-a-bcrypt-hash")
    assert not passwords.verify_password("anything", None)


def test_protected_paths():
    assert is_protected_path("/api/admin/videos")
    assert is_protected_path("/api/admin/filesystem-status")
    assert is_protected_path("/api/upload/image")
    assert is_protected_path("/api/projects")
    assert not is_protected_path("/api/admin/login")
    assert not is_protected_path("/api/admin/validate-token")
    assert not is_protected_path("/api/admin/seed")
    assert not is_protected_path("/api/public/projects")


def test_missing_and_invalid_tokens_get_distinct_messages(client):
    r = client.get("/api/admin/reviews")
    assert r.status_code == 401
    assert r.json()["detail"] == tokens.MISSING_TOKEN_MESSAGE

    r = client.get("/api/admin/reviews", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
    assert r.json()["detail"] == tokens.INVALID_TOKEN_MESSAGE


def test_cors_preflight_is_not_blocked_by_auth(client):
    r = client.options(
        "/api/admin/videos",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"},
    )
    assert r.status_code == 200
    assert r.headers.get("access-control-allow-origin") == "http://localhost:3000"


def test_login_creates_admin_from_environment(client, db):
    r = client.post("/api/admin/login", json={"email": "admin@example.com", "password": "correct-horse-battery"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["email"] == "admin@example.com"
    assert tokens.verify_token(body["token"]).email == "admin@example.com"

    users = db.collection("users").docs
    assert len(users) == 1
    assert users[0]["role"] == "admin"
    assert users[0]["passwordHash"] != "correct-horse-battery"


def test_login_rejects_bad_credentials(client):
    r = client.post("/api/admin/login", json={"email": "admin@example.com", "password": "wrong"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid email or password"

    r = client.post("/api/admin/login", json={"email": "someone@example.com", "password": "correct-horse-battery"})
    assert r.status_code == 401


def test_login_requires_both_fields(client):
    r = client.post("/api/admin/login", json={"email": "admin@example.com"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Email and password are required"


def test_admin_password_change_in_environment_is_synced(client, db, monkeypatch):
    from portfolio.settings import settings

    assert client.post(
        "/api/admin/login", json={"email": "admin@example.com", "password": "correct-horse-battery"}
    ).status_code == 200

    monkeypatch.setattr(settings, "admin_password", "new-password-123")
    assert client.post(
        "/api/admin/login", json={"email": "admin@example.com", "password": "correct-horse-battery"}
    ).status_code == 401
    assert client.post(
        "/api/admin/login", json={"email": "admin@example.com", "password": "new-password-123"}
    ).status_code == 200
    assert len(db.collection("users").docs) == 1


def test_admin_email_change_rekeys_user(client, db, monkeypatch):
    from portfolio.settings import settings

    client.post("/api/admin/login", json={"email": "admin@example.com", "password": "correct-horse-battery"})
    monkeypatch.setattr(settings, "admin_email", "Owner@Example.com")

    r = client.post("/api/admin/login", json={"email": "owner@example.com", "password": "correct-horse-battery"})
    assert r.status_code == 200
    assert [u["email"] for u in db.collection("users").docs] == ["owner@example.com"]


def test_validate_token(client, auth_headers):
    r = client.post("/api/admin/validate-token", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"valid": True, "email": "admin@example.com"}

    r = client.post("/api/admin/validate-token", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401
    assert r.json() == {"valid": False, "error": "Invalid or expired token"}
