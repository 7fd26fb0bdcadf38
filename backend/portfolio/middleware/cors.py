from __future__ import annotations


def build_allowed_origins(*, frontend_base_url: str, frontend_url: str | None, frontend_urls: str | None) -> list[str]:
    allowed: set[str] = {
        "http://localhost:3000",
        "http://localhost:3001",
    }

    if frontend_base_url:
        allowed.add(frontend_base_url.rstrip("/"))

    # FRONTEND_URLS is comma-separated.
    for v in (frontend_url, frontend_urls):
        if not v:
            continue
        for origin in (s.strip().rstrip("/") for s in str(v).split(",")):
            if origin:
                allowed.add(origin)

    return sorted(allowed)


def build_allowed_origin_regex() -> str:
    """Vercel preview deployments of the portfolio frontend."""
    return r"^https://[a-z0-9-]+\.vercel\.app$"
