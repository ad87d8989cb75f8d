from __future__ import annotations

import httpx
import pytest

from conftest import listing, movie
from film_browser.errors import (
    AuthError,
    CatalogError,
    InvalidPayloadError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    UpstreamServerError,
)
from film_browser.services.tmdb import TmdbGateway

BASE = "https://tmdb.test/3"


def _gateway(handler) -> TmdbGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TmdbGateway(client, base_url=BASE, api_key="token-123")


@pytest.mark.asyncio
async def test_list_category_sends_bearer_and_params() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=listing(movie(1)))

    payload = await _gateway(handler).list_category("top_rated", page=2)

    assert payload["results"][0]["id"] == 1
    req = seen[0]
    assert req.url.path == "/3/movie/top_rated"
    assert req.url.params["page"] == "2"
    assert req.url.params["region"] == "US"
    assert req.headers["Authorization"] == "Bearer token-123"


@pytest.mark.asyncio
async def test_get_detail_appends_related_blocks() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": 550, "title": "Fight Club"})

    data = await _gateway(handler).get_detail(550)

    assert data["title"] == "Fight Club"
    assert seen[0].url.path == "/3/movie/550"
    assert seen[0].url.params["append_to_response"] == "credits,videos,similar"


@pytest.mark.asyncio
async def test_search_excludes_adult_results() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=listing())

    await _gateway(handler).search("alien")

    assert seen[0].url.path == "/3/search/movie"
    assert seen[0].url.params["query"] == "alien"
    assert seen[0].url.params["include_adult"] == "false"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, error_type",
    [
        (401, AuthError),
        (404, NotFoundError),
        (429, RateLimitError),
        (500, UpstreamServerError),
        (503, UpstreamServerError),
    ],
)
async def test_status_codes_map_to_error_kinds(status, error_type) -> None:
    gateway = _gateway(lambda request: httpx.Response(status, json={}))
    with pytest.raises(error_type):
        await gateway.get_detail(1)


@pytest.mark.asyncio
async def test_other_status_uses_status_message() -> None:
    gateway = _gateway(
        lambda request: httpx.Response(422, json={"status_message": "Invalid page."})
    )
    with pytest.raises(CatalogError, match="Invalid page."):
        await gateway.list_category("popular", page=0)


@pytest.mark.asyncio
async def test_transport_failure_is_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError, match="Network error"):
        await _gateway(handler).list_category("popular")


@pytest.mark.asyncio
async def test_non_json_body_is_invalid_payload() -> None:
    gateway = _gateway(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(InvalidPayloadError):
        await gateway.list_category("popular")
