"""
In-process cache for public read endpoints.

Fresh entries live in a ``TTLCache`` per lifetime class. Every value put is
also kept in an ``LRUCache`` so a request that fails against the database
can still serve the last good response.
"""

from __future__ import annotations

import threading
from typing import Any, Literal

from cachetools import LRUCache, TTLCache

from ..settings import settings

Lifetime = Literal["short", "medium"]

REVIEWS_PREFIX = "public:reviews"
REVIEWS_SETTINGS_KEY = "public:reviews:settings"

_lock = threading.Lock()
_fresh: dict[str, TTLCache[str, Any]] = {}
_stale: LRUCache[str, Any] = LRUCache(maxsize=512)


def _bucket(lifetime: Lifetime) -> TTLCache[str, Any]:
    cache = _fresh.get(lifetime)
    if cache is None:
        ttl = settings.public_cache_short_ttl if lifetime == "short" else settings.public_cache_medium_ttl
        cache = TTLCache(maxsize=512, ttl=max(1, int(ttl)))
        _fresh[lifetime] = cache
    return cache


def reviews_page_key(page: int, limit: int) -> str:
    return f"{REVIEWS_PREFIX}:{page}:{limit}"


def get(key: str, lifetime: Lifetime = "short") -> Any | None:
    with _lock:
        return _bucket(lifetime).get(key)


def get_stale(key: str) -> Any | None:
    with _lock:
        return _stale.get(key)


def put(key: str, value: Any, lifetime: Lifetime = "short") -> None:
    with _lock:
        _bucket(lifetime)[key] = value
        _stale[key] = value


def invalidate(prefix: str) -> int:
    """Drop fresh and stale entries whose key starts with ``prefix``."""
    removed = 0
    with _lock:
        for cache in (*_fresh.values(), _stale):
            for key in [k for k in list(cache.keys()) if k.startswith(prefix)]:
                cache.pop(key, None)
                removed += 1
    return removed


def clear() -> None:
    with _lock:
        _fresh.clear()
        _stale.clear()
