from __future__ import annotations

import time

from fastapi import APIRouter
from fastapi.responses import ORJSONResponse

from .. import __version__
from ..observability.logging import get_logger
from ..services.timeutil import now_iso
from ..settings import settings
from ..storage import StorageError, get_database

router = APIRouter(tags=["health"])

log = get_logger("health")

_STARTED_AT = time.monotonic()


@router.get("/")
def root():
    return {
        "message": "Portfolio CMS API",
        "version": __version__,
        "status": "running",
        "environment": settings.normalized_environment,
        "storage": settings.normalized_storage_backend,
    }


@router.get("/api/health")
def health():
    backend = settings.normalized_storage_backend
    body = {
        "status": "healthy",
        "timestamp": now_iso(),
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
        "environment": settings.normalized_environment,
        "database": {"backend": backend, "status": "unknown", "connected": False, "responseTime": 0},
        "checks": {"configured": settings.storage_configured(), "connection": False},
    }

    if not body["checks"]["configured"]:
        body["status"] = "unhealthy"
        body["database"]["status"] = "misconfigured"
        log.error("health_storage_not_configured", backend=backend)
        return ORJSONResponse(body, status_code=503)

    start = time.perf_counter()
    try:
        connected = get_database().ping()
    except StorageError as e:
        connected = False
        body["database"]["status"] = f"error: {e.message}"
    body["database"]["responseTime"] = round((time.perf_counter() - start) * 1000.0, 2)
    body["database"]["connected"] = connected
    body["checks"]["connection"] = connected

    if not connected:
        body["status"] = "unhealthy"
        if body["database"]["status"] == "unknown":
            body["database"]["status"] = "disconnected"
        log.error("health_check_failed", backend=backend)
        return ORJSONResponse(body, status_code=503)

    body["database"]["status"] = "connected"
    return ORJSONResponse(body, status_code=200)
