"""
RFC7807 ``application/problem+json`` error bodies.

Every error the API returns (auth denials, validation failures, storage and
filesystem errors, unknown routes) goes through ``problem_response`` so the
admin panel can rely on one shape: ``type``, ``title``, ``status``, plus
``detail``, ``instance``, ``requestId``, ``errors`` and ``extensions`` when
they have a value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

from fastapi import Request
from fastapi.responses import ORJSONResponse

from .settings import get_settings

PROBLEM_JSON = "application/problem+json"


def default_title(status_code: int) -> str:
    code = int(status_code)
    if code >= 500:
        return "Service Unavailable" if code == 503 else "Internal Server Error"
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return "Error"


def _request_id(request: Request) -> str | None:
    rid = getattr(getattr(request, "state", None), "request_id", None) or request.headers.get("x-request-id")
    return str(rid) if rid else None


@dataclass
class Problem:
    status: int
    title: str | None = None
    detail: str | None = None
    type: str = "about:blank"
    instance: str | None = None
    request_id: str | None = None
    errors: list[dict[str, Any]] = field(default_factory=list)
    extensions: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "type": self.type or "about:blank",
            "title": self.title or default_title(self.status),
            "status": self.status,
        }
        optional = {
            "detail": str(self.detail) if self.detail else None,
            "instance": self.instance,
            "requestId": self.request_id,
            "errors": self.errors,
            # Extension members sit under one key and never shadow the standard fields.
            "extensions": self.extensions,
        }
        body.update({k: v for k, v in optional.items() if v})
        return body


def problem_payload(
    *,
    request: Request,
    status_code: int,
    title: str | None = None,
    detail: str | None = None,
    type: str = "about:blank",
    instance: str | None = None,
    errors: list[dict[str, Any]] | None = None,
    extensions: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return Problem(
        status=int(status_code),
        title=title,
        detail=detail,
        type=type,
        instance=instance or str(getattr(request.url, "path", "") or "") or None,
        request_id=_request_id(request),
        errors=list(errors or []),
        extensions=dict(extensions or {}),
    ).to_dict()


def problem_response(
    *,
    request: Request,
    status_code: int,
    title: str | None = None,
    detail: str | None = None,
    type: str = "about:blank",
    instance: str | None = None,
    errors: list[dict[str, Any]] | None = None,
    extensions: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> ORJSONResponse:
    status_code = int(status_code)
    if status_code >= 500 and get_settings().is_production:
        detail = None

    content = problem_payload(
        request=request,
        status_code=status_code,
        title=title,
        detail=detail,
        type=type,
        instance=instance,
        errors=errors,
        extensions=extensions,
    )
    return ORJSONResponse(content=content, status_code=status_code, media_type=PROBLEM_JSON, headers=headers)
