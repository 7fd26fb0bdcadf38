from __future__ import annotations

from portfolio.middleware.cors import build_allowed_origin_regex, build_allowed_origins
from portfolio.services import public_cache


def test_invalidate_drops_fresh_and_stale_entries_by_prefix():
    public_cache.put(public_cache.reviews_page_key(1, 10), {"reviews": []})
    public_cache.put(public_cache.REVIEWS_SETTINGS_KEY, True, "medium")
    public_cache.put("public:other", 1)

    assert public_cache.invalidate(public_cache.REVIEWS_PREFIX) == 4
    assert public_cache.get(public_cache.reviews_page_key(1, 10)) is None
    assert public_cache.get_stale(public_cache.reviews_page_key(1, 10)) is None
    assert public_cache.get(public_cache.REVIEWS_SETTINGS_KEY, "medium") is None
    assert public_cache.get("public:other") == 1


def test_allowed_origins_merge_env_values():
    origins = build_allowed_origins(
        frontend_base_url="https://portfolio.example.com/",
        frontend_url="https://www.example.com",
        frontend_urls="https://a.example.com, https://b.example.com/ ,",
    )
    assert origins == sorted(
        {
            "http://localhost:3000",
            "http://localhost:3001",
            "https://portfolio.example.com",
            "https://www.example.com",
            "https://a.example.com",
            "https://b.example.com",
        }
    )


def test_vercel_preview_origins_allowed(client):
    import re

    assert re.match(build_allowed_origin_regex(), "https://portfolio-git-main-alex.vercel.app")
    assert not re.match(build_allowed_origin_regex(), "https://evil.example.com")

    r = client.get("/api/public/settings", headers={"Origin": "https://my-preview.vercel.app"})
    assert r.headers.get("access-control-allow-origin") == "https://my-preview.vercel.app"
