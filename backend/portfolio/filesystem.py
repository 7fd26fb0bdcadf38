"""
Local filesystem access for JSON data files and uploads.

Serverless deployments usually mount the code read-only, so write failures
carry a ``code`` and a ``help_message`` that the API surfaces to the admin.
"""

from __future__ import annotations

import errno
import json
import os
import tempfile
import time
from pathlib import Path
from typing import Any

from .observability.logging import get_logger
from .settings import settings

log = get_logger("filesystem")

READ_ONLY_HELP = (
    "The filesystem is read-only (common in serverless environments). "
    "To persist data in production, use a database or external storage service. "
    "Local development works fine, but production deployments require persistent storage."
)


class FilesystemError(Exception):
    def __init__(
        self,
        message: str,
        *,
        code: str,
        help_message: str | None = None,
        is_read_only: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.help_message = help_message
        self.is_read_only = is_read_only


def is_filesystem_writable(directory: str | os.PathLike[str] | None = None) -> bool:
    target = Path(directory) if directory is not None else Path.cwd()
    probe = target / f".write-test-{int(time.time() * 1000)}"
    try:
        probe.write_text("test", encoding="utf-8")
        probe.unlink()
        return True
    except OSError:
        log.warning("filesystem_read_only", path=str(target))
        return False


def read_json_file(path: str | os.PathLike[str]) -> Any:
    p = Path(path)
    try:
        content = p.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise FilesystemError(
            f"File not found: {p}",
            code="ENOENT",
            help_message=f"The file {p.name} does not exist. Please ensure it is present in your deployment.",
        ) from e
    except PermissionError as e:
        raise FilesystemError(
            f"Permission denied reading file: {p}",
            code="EACCES",
            help_message="The application does not have permission to read this file.",
        ) from e

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        log.error("json_parse_failed", path=str(p), error=str(e))
        raise FilesystemError(
            f"Invalid JSON in file: {p}",
            code="INVALID_JSON",
            help_message="The file contains invalid JSON syntax. Please check for missing commas, quotes, or brackets.",
        ) from e


def write_json_file(path: str | os.PathLike[str], data: Any) -> None:
    """Write ``data`` as indented JSON, atomically (temp file + replace)."""
    p = Path(path)
    directory = p.parent if str(p.parent) else Path(".")
    content = json.dumps(data, indent=2, ensure_ascii=False)

    tmp_name: str | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{p.name}.", suffix=".tmp", dir=directory)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, p)
        tmp_name = None
    except OSError as e:
        if e.errno == errno.EROFS:
            log.error("filesystem_write_read_only", path=str(p))
            raise FilesystemError(
                "Filesystem is read-only", code="EROFS", help_message=READ_ONLY_HELP, is_read_only=True
            ) from e
        if e.errno in (errno.EACCES, errno.EPERM):
            raise FilesystemError(
                f"Permission denied writing to file: {p}",
                code="EACCES",
                help_message="The application does not have permission to write to this file or directory.",
            ) from e
        if e.errno == errno.ENOENT:
            raise FilesystemError(
                f"Directory not found: {directory}",
                code="ENOENT",
                help_message="The parent directory does not exist. Please ensure the directory structure is correct.",
            ) from e
        raise
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass

    log.info("json_file_written", path=str(p), size=len(content))


def get_filesystem_info() -> dict[str, Any]:
    cwd_writable = is_filesystem_writable(Path.cwd())
    tmp_writable = is_filesystem_writable(tempfile.gettempdir())
    info: dict[str, Any] = {
        "environment": settings.normalized_environment,
        "isProduction": settings.is_production,
        "isWritable": cwd_writable,
        "cwdWritable": cwd_writable,
        "tmpWritable": tmp_writable,
    }
    if settings.is_production and not cwd_writable:
        info["warning"] = (
            "Filesystem is read-only in production. "
            "Data persistence requires a database or external storage service."
        )
    return info
