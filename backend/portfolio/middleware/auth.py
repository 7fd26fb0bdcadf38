from __future__ import annotations

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..auth.tokens import AuthError, authenticate_header
from ..observability.logging import get_logger
from ..problem_details import problem_response

PROTECTED_PREFIXES = ("/api/admin/", "/api/upload/")

# Admin endpoints that check credentials themselves.
PUBLIC_ADMIN_PATHS = frozenset(
    {
        "/api/admin/login",
        "/api/admin/validate-token",
        "/api/admin/seed",
    }
)


def is_protected_path(path: str) -> bool:
    if path in PUBLIC_ADMIN_PATHS:
        return False
    if path == "/api/projects" or path.startswith("/api/projects/"):
        return True
    return path.startswith(PROTECTED_PREFIXES)


def require_admin(request: Request) -> None:
    # CORS preflight carries no credentials.
    if request.method.upper() == "OPTIONS":
        return
    if not is_protected_path(request.url.path):
        return
    request.state.user = authenticate_header(request.headers.get("authorization"))


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Bearer-token gate for the admin API.

    Added before CORSMiddleware so CORS headers wrap auth failures too.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            require_admin(request)
        except AuthError as e:
            get_logger("auth_middleware").info(
                "auth_middleware_denied",
                status_code=e.status_code,
                path=request.url.path,
            )
            return problem_response(
                request=request,
                status_code=e.status_code,
                title="Unauthorized",
                detail=e.message,
            )
        return await call_next(request)
