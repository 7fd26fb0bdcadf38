from __future__ import annotations

import time
from dataclasses import dataclass

from jose import JWTError, jwt

from ..observability.logging import get_logger
from ..settings import settings

log = get_logger("auth_tokens")

ALGORITHM = "HS256"

# Development-only signing key; production refuses to start without JWT_SECRET.
_DEV_SECRET = "dev-secret-change-this-in-production"

MISSING_TOKEN_MESSAGE = "Authentication required. Please provide a valid token."
INVALID_TOKEN_MESSAGE = "Invalid or expired token. Please login again."


@dataclass
class TokenPayload:
    email: str
    iat: int | None = None
    exp: int | None = None


class AuthError(Exception):
    def __init__(self, message: str, *, status_code: int = 401):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _secret() -> str:
    return str(settings.jwt_secret or _DEV_SECRET)


def generate_token(email: str) -> str:
    now = int(time.time())
    hours = max(1, int(settings.jwt_expires_hours or 24))
    claims = {"email": email, "iat": now, "exp": now + hours * 3600}
    return jwt.encode(claims, _secret(), algorithm=ALGORITHM)


def verify_token(token: str) -> TokenPayload | None:
    if not token:
        return None
    try:
        claims = jwt.decode(token, _secret(), algorithms=[ALGORITHM])
    except JWTError as e:
        log.info("token_verification_failed", error=str(e))
        return None

    email = claims.get("email")
    if not isinstance(email, str) or not email:
        return None
    return TokenPayload(email=email, iat=claims.get("iat"), exp=claims.get("exp"))


def extract_token(authorization: str | None) -> str | None:
    """Token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None
    parts = str(authorization).split(" ")
    if len(parts) == 2 and parts[0] == "Bearer" and parts[1]:
        return parts[1]
    return None


def authenticate_header(authorization: str | None) -> TokenPayload:
    token = extract_token(authorization)
    if not token:
        raise AuthError(MISSING_TOKEN_MESSAGE)
    payload = verify_token(token)
    if payload is None:
        raise AuthError(INVALID_TOKEN_MESSAGE)
    return payload
