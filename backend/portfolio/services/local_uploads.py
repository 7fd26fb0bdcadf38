from __future__ import annotations

import errno
import re
from pathlib import Path
from typing import Any

from ..filesystem import FilesystemError, READ_ONLY_HELP
from ..observability.logging import get_logger
from ..settings import settings
from ..storage import StorageValidation
from .timeutil import now_ms

log = get_logger("local_uploads")

STATIC_URL_PREFIX = "/static/images"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def upload_dir() -> Path:
    return Path(settings.upload_dir)


def sanitize_filename(name: str) -> str:
    return _UNSAFE_CHARS.sub("_", name or "upload")


def save_image(filename: str, content_type: str | None, data: bytes) -> dict[str, Any]:
    if not str(content_type or "").startswith("image/"):
        raise StorageValidation(message="File must be an image", operation="Upload")

    stored_name = f"{now_ms()}-{sanitize_filename(filename)}"
    target_dir = upload_dir()
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / stored_name).write_bytes(data)
    except OSError as e:
        log.error("local_upload_failed", filename=stored_name, error=str(e))
        if e.errno == errno.EROFS:
            raise FilesystemError(
                "Filesystem is read-only", code="EROFS", help_message=READ_ONLY_HELP, is_read_only=True
            ) from e
        raise FilesystemError(
            f"Failed to write upload: {stored_name}",
            code="EACCES" if e.errno in (errno.EACCES, errno.EPERM) else "EIO",
            help_message="The application could not write to the upload directory.",
        ) from e

    url = f"{STATIC_URL_PREFIX}/{stored_name}"
    log.info("local_upload_saved", url=url, size=len(data))
    return {"url": url, "filename": stored_name, "size": len(data), "type": content_type}
