from __future__ import annotations

import secrets

from fastapi import HTTPException, Request

from film_browser.config import settings

_OPEN_PATHS = frozenset({"/healthz", "/docs", "/openapi.json"})


def _presented_key(request: Request) -> str:
    key = request.headers.get("X-API-KEY")
    if key:
        return key
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer":
        return token.strip()
    return ""


async def verify_api_key(request: Request) -> None:
    """Dependency that guards the API when FILM_BROWSER_API_KEY is set.

    Accepts the key as ``X-API-KEY`` or as an ``Authorization: Bearer``
    token; health and docs stay open.
    """
    if not settings.API_KEY:
        return  # auth disabled
    if request.url.path in _OPEN_PATHS:
        return
    if not secrets.compare_digest(
        _presented_key(request).encode(), settings.API_KEY.encode()
    ):
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
