from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import ORJSONResponse

from ..auth.tokens import AuthError, authenticate_header, generate_token
from ..models import LoginRequest
from ..observability.logging import get_logger, mask_email
from ..services import users_repo

router = APIRouter(tags=["admin-auth"])
log = get_logger("admin_auth")


@router.post("/login")
def login(body: LoginRequest):
    email = str(body.email or "").strip()
    password = body.password or ""
    if not email or not password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    user = users_repo.authenticate(email, password)
    if user is None:
        log.info("admin_login_failed", email=mask_email(email))
        raise HTTPException(status_code=401, detail="Invalid email or password")

    log.info("admin_login_succeeded", email=mask_email(user.email))
    return {"success": True, "token": generate_token(user.email), "email": user.email}


@router.post("/validate-token")
def validate_token(request: Request):
    try:
        payload = authenticate_header(request.headers.get("authorization"))
    except AuthError:
        return ORJSONResponse({"valid": False, "error": "Invalid or expired token"}, status_code=401)
    return {"valid": True, "email": payload.email}
