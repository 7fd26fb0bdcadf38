from __future__ import annotations


def test_root_banner(client):
    body = client.get("/").json()
    assert body["message"] == "Portfolio CMS API"
    assert body["status"] == "running"
    assert body["storage"] == "mongodb"


def test_health_ok_when_database_answers(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "healthy"
    assert body["database"]["connected"] is True
    assert body["database"]["status"] == "connected"
    assert body["checks"] == {"configured": True, "connection": True}


def test_health_503_when_ping_fails(client, db):
    db.healthy = False
    r = client.get("/api/health")
    assert r.status_code == 503
    body = r.json()
    assert body["status"] == "unhealthy"
    assert body["database"]["status"] == "disconnected"


def test_health_503_when_storage_not_configured(client, monkeypatch):
    from portfolio.settings import settings

    monkeypatch.setattr(settings, "mongodb_uri", None)
    r = client.get("/api/health")
    assert r.status_code == 503
    assert r.json()["database"]["status"] == "misconfigured"
