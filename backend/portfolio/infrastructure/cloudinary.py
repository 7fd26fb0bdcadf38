"""
Cloudinary upload API client.

Uses signed uploads: the signature is the SHA-1 of the sorted request
parameters followed by the API secret.
"""

from __future__ import annotations

import base64
import hashlib
import time
from dataclasses import dataclass
from typing import Any, Literal

import httpx

from ..observability.logging import get_logger
from ..settings import settings

log = get_logger("cloudinary")

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"

ResourceType = Literal["image", "video"]

# Parameters Cloudinary excludes from the signature.
_UNSIGNED_PARAMS = frozenset({"file", "api_key", "resource_type", "cloud_name"})


class CloudinaryNotConfigured(RuntimeError):
    pass


class CloudinaryError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class UploadResult:
    public_id: str
    secure_url: str
    format: str | None
    width: int | None
    height: int | None


def _credentials() -> tuple[str, str, str]:
    cloud = str(settings.cloudinary_cloud_name or "").strip()
    key = str(settings.cloudinary_api_key or "").strip()
    secret = str(settings.cloudinary_api_secret or "").strip()
    if not cloud or not key or not secret:
        raise CloudinaryNotConfigured("Cloudinary is not configured")
    return cloud, key, secret


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    to_sign = "&".join(
        f"{k}={params[k]}"
        for k in sorted(params)
        if k not in _UNSIGNED_PARAMS and params[k] not in (None, "")
    )
    return hashlib.sha1((to_sign + api_secret).encode("utf-8")).hexdigest()


def _http_client() -> httpx.Client:
    return httpx.Client(timeout=60.0)


def _post(resource_type: ResourceType, action: str, params: dict[str, Any]) -> dict[str, Any]:
    cloud, key, secret = _credentials()
    body = {**params, "timestamp": int(time.time())}
    body["signature"] = sign_params(body, secret)
    body["api_key"] = key

    url = f"{CLOUDINARY_API_BASE}/{cloud}/{resource_type}/{action}"
    try:
        with _http_client() as client:
            resp = client.post(url, data=body)
    except httpx.HTTPError as e:
        log.error("cloudinary_request_failed", action=action, error=str(e))
        raise CloudinaryError(f"Cloudinary request failed: {e}") from e

    if resp.status_code >= 400:
        try:
            message = str((resp.json().get("error") or {}).get("message") or resp.text)
        except ValueError:
            message = resp.text
        log.error("cloudinary_error", action=action, status_code=resp.status_code, error=message)
        raise CloudinaryError(message or "Cloudinary request failed", status_code=resp.status_code)
    return resp.json()


def _data_uri(data: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def _upload(data: bytes, content_type: str, folder: str, resource_type: ResourceType) -> UploadResult:
    result = _post(resource_type, "upload", {"file": _data_uri(data, content_type), "folder": folder})
    log.info("cloudinary_uploaded", public_id=result.get("public_id"), resource_type=resource_type)
    return UploadResult(
        public_id=str(result.get("public_id") or ""),
        secure_url=str(result.get("secure_url") or ""),
        format=result.get("format"),
        width=result.get("width"),
        height=result.get("height"),
    )


def upload_image(data: bytes, *, content_type: str = "image/jpeg", folder: str = "portfolio") -> UploadResult:
    return _upload(data, content_type, folder, "image")


def upload_video(data: bytes, *, content_type: str = "video/mp4", folder: str = "portfolio/videos") -> UploadResult:
    return _upload(data, content_type, folder, "video")


def delete_asset(public_id: str, resource_type: ResourceType = "image") -> dict[str, Any]:
    return _post(resource_type, "destroy", {"public_id": public_id})
