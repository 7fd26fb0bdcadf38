from __future__ import annotations

from typing import Any

from ..auth.passwords import hash_password, verify_password
from ..models import AdminUser
from ..observability.logging import get_logger, mask_email
from ..settings import settings
from ..storage import COLLECTIONS, Collection, StorageError, get_database
from .timeutil import now_iso

log = get_logger("users_repo")


def _coll() -> Collection:
    return get_database().collection(COLLECTIONS.USERS)


def _normalize_email(email: str | None) -> str:
    return str(email or "").strip().lower()


def get_user(email: str) -> dict[str, Any] | None:
    return _coll().find_one({"email": _normalize_email(email)})


def ensure_admin_user() -> dict[str, Any] | None:
    """
    Keep the stored admin in line with ADMIN_EMAIL / ADMIN_PASSWORD.

    Creates the admin when no admin exists; rewrites the email and password
    hash when either differs from the environment. Storage failures are
    logged and swallowed so login can still report its own error.
    """
    email = _normalize_email(settings.admin_email)
    password = settings.admin_password
    if not email or not password:
        return None

    try:
        coll = _coll()
        admin = coll.find_one({"role": "admin"})
        now = now_iso()
        if admin is None:
            doc = AdminUser(
                email=email,
                passwordHash=hash_password(password),
                name=settings.admin_name,
                createdAt=now,
                updatedAt=now,
            ).model_dump()
            created = coll.insert_one(doc)
            log.info("admin_user_created", email=mask_email(email))
            return created

        stale_email = admin.get("email") != email
        stale_password = not verify_password(password, admin.get("passwordHash"))
        if not stale_email and not stale_password:
            return admin

        if stale_email:
            # The email is the key on the relational backend, so re-key the row.
            coll.delete_one({"email": admin.get("email")})
            doc = {
                **admin,
                "email": email,
                "passwordHash": hash_password(password) if stale_password else admin.get("passwordHash"),
                "updatedAt": now,
            }
            coll.insert_one(doc)
        else:
            coll.update_one({"email": email}, {"$set": {"passwordHash": hash_password(password), "updatedAt": now}})
        log.info(
            "admin_user_synced",
            email=mask_email(email),
            email_changed=stale_email,
            password_changed=stale_password,
        )
        return get_user(email)
    except StorageError as e:
        log.error("admin_user_sync_failed", error=str(e), operation=e.operation)
        return None


def authenticate(email: str, password: str) -> AdminUser | None:
    ensure_admin_user()
    doc = get_user(email)
    if not doc:
        log.info("login_unknown_email", email=mask_email(email))
        return None
    if not verify_password(password, doc.get("passwordHash")):
        log.info("login_bad_password", email=mask_email(email))
        return None
    return AdminUser.model_validate(doc)
