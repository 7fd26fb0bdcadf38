from __future__ import annotations

import bcrypt

from ..settings import settings

# bcrypt only uses the first 72 bytes; newer releases reject longer input.
_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_BYTES]


def hash_password(password: str) -> str:
    rounds = max(4, min(31, int(settings.bcrypt_rounds or 12)))
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode(password), str(password_hash).encode("utf-8"))
    except ValueError:
        # Malformed or non-bcrypt hash.
        return False
