from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from . import __version__
from .filesystem import FilesystemError
from .middleware import (
    AccessLogMiddleware,
    AuthMiddleware,
    NormalizePathMiddleware,
    RequestContextMiddleware,
    ReviewSubmitRateLimitMiddleware,
)
from .middleware.cors import build_allowed_origin_regex, build_allowed_origins
from .observability.logging import configure_logging, get_logger
from .observability.otel import configure_otel, instrument_app
from .problem_details import problem_response
from .routers.admin_auth import router as admin_auth_router
from .routers.admin_content import about_router, contact_router, settings_router
from .routers.admin_media import photos_router, videos_router
from .routers.admin_reviews import router as admin_reviews_router
from .routers.admin_tools import router as admin_tools_router
from .routers.health import router as health_router
from .routers.projects import router as projects_router
from .routers.public import router as public_router
from .routers.uploads import router as uploads_router
from .services.local_uploads import STATIC_URL_PREFIX
from .settings import settings
from .storage import (
    StorageConflict,
    StorageError,
    StorageNotFound,
    StorageUnavailable,
    StorageValidation,
    close_database,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_database()


def create_app() -> FastAPI:
    configure_logging(level="INFO")
    log = get_logger("startup")

    # No-op unless OTEL_ENABLED=true.
    configure_otel(settings)

    app = FastAPI(
        title="Portfolio CMS API",
        version=__version__,
        default_response_class=ORJSONResponse,
        redirect_slashes=False,
        lifespan=lifespan,
    )

    allowed_origins = build_allowed_origins(
        frontend_base_url=settings.frontend_base_url,
        frontend_url=settings.frontend_url,
        frontend_urls=settings.frontend_urls,
    )

    log.info("app_starting", settings=settings.to_log_safe_dict())

    # Last added is outermost. Auth runs inside CORS so denials still get CORS headers.
    app.add_middleware(AuthMiddleware)
    app.add_middleware(ReviewSubmitRateLimitMiddleware)
    app.add_middleware(AccessLogMiddleware, exclude_paths={"/", "/api/health"})
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_origin_regex=build_allowed_origin_regex(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "X-Request-Id"],
        expose_headers=["X-Cache", "X-Request-Id", "Retry-After"],
        max_age=3000,
    )
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(NormalizePathMiddleware)

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StorageError, _storage_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(FilesystemError, _filesystem_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_exception_handler)

    app.include_router(health_router)
    app.include_router(public_router, prefix="/api/public")
    app.include_router(admin_auth_router, prefix="/api/admin")
    app.include_router(videos_router, prefix="/api/admin/videos")
    app.include_router(photos_router, prefix="/api/admin/photos")
    app.include_router(admin_reviews_router, prefix="/api/admin/reviews")
    app.include_router(about_router, prefix="/api/admin/about")
    app.include_router(contact_router, prefix="/api/admin/contact")
    app.include_router(settings_router, prefix="/api/admin/settings")
    app.include_router(admin_tools_router, prefix="/api/admin")
    app.include_router(projects_router, prefix="/api/projects")
    app.include_router(uploads_router, prefix="/api/upload")

    _mount_uploads(app, log)

    instrument_app(app, settings)

    return app


def _mount_uploads(app: FastAPI, log) -> None:
    upload_dir = Path(settings.upload_dir)
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        log.warning("upload_dir_unavailable", upload_dir=str(upload_dir), error=str(e))
    if not upload_dir.is_dir():
        return
    app.mount(STATIC_URL_PREFIX, StaticFiles(directory=str(upload_dir)), name="uploads")


def _storage_error_handler(request: Request, exc: StorageError) -> Response:
    status_code = 500
    title = "Storage Error"

    if isinstance(exc, StorageValidation):
        status_code = 400
        title = "Bad Request"
    elif isinstance(exc, StorageNotFound):
        status_code = 404
        title = "Not Found"
    elif isinstance(exc, StorageConflict):
        status_code = 409
        title = "Conflict"
    elif isinstance(exc, StorageUnavailable):
        status_code = 503
        title = "Service Unavailable"

    if status_code >= 500:
        get_logger("storage").error(
            "storage_error",
            error=exc.message,
            operation=exc.operation,
            collection=exc.collection,
            path=request.url.path,
        )

    extensions = {
        "operation": exc.operation,
        "collection": exc.collection,
        "retryable": bool(exc.retryable),
    }
    return problem_response(
        request=request,
        status_code=status_code,
        title=title,
        detail=exc.message,
        extensions={k: v for k, v in extensions.items() if v is not None},
    )


def _filesystem_error_handler(request: Request, exc: FilesystemError) -> Response:
    status_code = 503 if exc.is_read_only else 500
    get_logger("filesystem").error("filesystem_error", code=exc.code, error=exc.message, path=request.url.path)
    extensions = {"code": exc.code, "helpMessage": exc.help_message}
    return problem_response(
        request=request,
        status_code=status_code,
        title="Cannot save data: Filesystem is read-only" if exc.is_read_only else "Filesystem Error",
        detail=exc.message,
        extensions={k: v for k, v in extensions.items() if v is not None},
    )


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    status_code = int(getattr(exc, "status_code", 500) or 500)
    detail = getattr(exc, "detail", None)

    title: str | None = None
    extensions: dict | None = None
    safe_detail: str | None = None

    if isinstance(detail, dict):
        extensions = detail
        msg = detail.get("message")
        if isinstance(msg, str) and msg.strip():
            safe_detail = msg.strip()
    elif detail is not None:
        safe_detail = str(detail)

    if status_code == 404:
        title = "Not Found"
        # Unmatched routes carry Starlette's generic detail.
        if not safe_detail or safe_detail == "Not Found":
            safe_detail = "Route not found"

    return problem_response(
        request=request,
        status_code=status_code,
        title=title,
        detail=safe_detail,
        extensions=extensions,
        headers=getattr(exc, "headers", None),
    )


def _validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    errors: list[dict[str, object]] = []
    for e in exc.errors():
        loc = e.get("loc") or ()
        errors.append(
            {
                "location": list(loc) if isinstance(loc, (list, tuple)) else [],
                "path": ".".join(str(x) for x in loc if x != "body"),
                "message": e.get("msg", "Invalid value"),
                "type": e.get("type"),
            }
        )
    return problem_response(
        request=request,
        status_code=422,
        title="Validation Failed",
        detail="Request validation failed",
        errors=errors,
    )


def _unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    user = getattr(request.state, "user", None)
    get_logger("unhandled").exception(
        "unhandled_exception",
        http_method=request.method.upper(),
        path=request.url.path,
        admin=bool(user),
    )
    return problem_response(
        request=request,
        status_code=500,
        title="Internal Server Error",
        detail=str(exc) or None,
    )


app = create_app()
