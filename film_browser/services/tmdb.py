"""TMDB v3 REST client.

Returns raw JSON; narrowing into typed records happens in the caches.
Every failure is raised as a ``CatalogError`` subclass with a message fit
to show a user.
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

from film_browser.config import settings
from film_browser.errors import (
    AuthError,
    CatalogError,
    InvalidPayloadError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    UpstreamServerError,
)

log = logging.getLogger(__name__)


def _status_error(resp: httpx.Response) -> CatalogError:
    status = resp.status_code
    if status == 401:
        return AuthError("Invalid API key. Please check your TMDB API configuration.")
    if status == 404:
        return NotFoundError("Resource not found.")
    if status == 429:
        return RateLimitError("Too many requests. Please try again later.")
    if status >= 500:
        return UpstreamServerError("TMDB server error. Please try again later.")

    message = None
    try:
        body = resp.json()
        if isinstance(body, dict):
            message = body.get("status_message")
    except ValueError:
        pass
    return CatalogError(message or f"HTTP {status}: {resp.reason_phrase}")


class TmdbGateway:
    """Remote catalog gateway backed by a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str | None = None,
        api_key: str | None = None,
    ) -> None:
        self._client = client
        self._base_url = (base_url or settings.TMDB_BASE_URL).rstrip("/")
        self._api_key = settings.TMDB_API_KEY if api_key is None else api_key

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
        }

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        url = f"{self._base_url}{path}"
        try:
            resp = await self._client.get(url, params=params, headers=self._headers())
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            err = _status_error(e.response)
            log.error("TMDB API error on %s: %s", path, err)
            raise err from e
        except httpx.RequestError as e:
            log.error("TMDB request to %s failed: %s", path, e)
            raise NetworkError("Network error. Please check your connection.") from e

        log.debug("TMDB %s %s", resp.status_code, path)
        try:
            return resp.json()
        except ValueError as e:
            raise InvalidPayloadError("Invalid response format from TMDB API") from e

    # ---- Public API --------------------------------------------------------

    async def list_category(self, category: str, page: int = 1) -> Any:
        """Fetch one page of a movie listing (``popular``, ``top_rated`` ...)."""
        return await self._get(
            f"/movie/{category}",
            {
                "language": settings.TMDB_LANGUAGE,
                "page": page,
                "region": settings.TMDB_REGION,
            },
        )

    async def get_detail(self, item_id: int) -> Any:
        return await self._get(
            f"/movie/{item_id}",
            {
                "language": settings.TMDB_LANGUAGE,
                "append_to_response": "credits,videos,similar",
            },
        )

    async def search(self, query: str, page: int = 1) -> Any:
        return await self._get(
            "/search/movie",
            {
                "query": query,
                "language": settings.TMDB_LANGUAGE,
                "page": page,
                "include_adult": "false",
            },
        )
