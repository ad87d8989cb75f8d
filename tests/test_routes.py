from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import listing, movie
from film_browser.config import settings
from film_browser.errors import NotFoundError, UpstreamServerError
from film_browser.main import create_app


@pytest.fixture
def client(gateway, backend, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "")
    app = create_app(gateway=gateway, backend=backend, background_refresh=False)
    with TestClient(app) as c:
        yield c


def test_category_is_fetched_once_while_fresh(client, gateway) -> None:
    gateway.listings["popular"] = [listing(movie(1), movie(2))]

    first = client.get("/api/categories/popular").json()
    second = client.get("/api/categories/popular").json()

    assert first["status"] == "ready"
    assert [m["id"] for m in first["items"]] == [1, 2]
    assert second == first
    assert gateway.calls == [("list_category", "popular", 1)]


def test_refresh_flag_forces_refetch(client, gateway) -> None:
    gateway.listings["popular"] = [
        listing(movie(1)),
        UpstreamServerError("TMDB server error. Please try again later."),
    ]
    client.get("/api/categories/popular")

    body = client.get("/api/categories/popular", params={"refresh": True}).json()

    assert body["status"] == "failed"
    assert body["error_kind"] == "UpstreamServerError"
    assert [m["id"] for m in body["items"]] == [1]


def test_unknown_category_is_404(client, gateway) -> None:
    assert client.get("/api/categories/upcoming").status_code == 404
    assert gateway.calls == []


def test_movie_detail_and_bad_id(client, gateway) -> None:
    gateway.details[550] = [{"id": 550, "title": "Fight Club"}]

    body = client.get("/api/movies/550").json()
    assert body["status"] == "ready"
    assert body["data"]["title"] == "Fight Club"

    resp = client.get("/api/movies/abc")
    assert resp.status_code == 422
    assert gateway.calls == [("get_detail", 550)]


def test_search_maps_gateway_errors(client, gateway) -> None:
    gateway.searches["dune"] = [listing({"id": 1, "title": "Dune"})]
    gateway.searches["missing"] = [NotFoundError("Resource not found.")]

    ok = client.get("/api/search", params={"q": "dune"}).json()
    assert [r["id"] for r in ok["results"]] == [1]
    assert client.get("/api/search", params={"q": "missing"}).status_code == 404


def test_wishlist_endpoints(client, backend) -> None:
    assert client.get("/api/wishlist/7").json() == {"id": 7, "in_wishlist": False}

    added = client.post("/api/wishlist", json=movie(7)).json()
    assert added["added"] is True
    assert added["count"] == 1
    again = client.post("/api/wishlist", json=movie(7)).json()
    assert again["added"] is False
    assert again["count"] == 1
    assert client.get("/api/wishlist/7").json()["in_wishlist"] is True

    removed = client.delete("/api/wishlist/7").json()
    assert removed == {"removed": True, "items": [], "count": 0}

    client.post("/api/wishlist", json=movie(8))
    assert client.delete("/api/wishlist").json() == {"items": [], "count": 0}
    assert backend.read(settings.WISHLIST_STORAGE_KEY) == "[]"


def test_healthz_reports_cache_state(client, gateway) -> None:
    gateway.listings["popular"] = [listing(movie(1))]
    client.get("/api/categories/popular")

    body = client.get("/healthz").json()
    assert body["status"] == "ok"
    assert body["cache_timestamps"]["popular"] is not None
    assert body["cache_timestamps"]["top_rated"] is None
    assert body["wishlist_count"] == 0


def test_api_key_required_when_configured(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "API_KEY", "secret")
    assert client.get("/api/wishlist").status_code == 401
    assert client.get("/api/wishlist", headers={"X-API-KEY": "secret"}).status_code == 200
    assert client.get("/healthz").status_code == 200


def test_api_key_accepted_as_bearer_token(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "API_KEY", "secret")
    ok = client.get("/api/wishlist", headers={"Authorization": "Bearer secret"})
    bad = client.get("/api/wishlist", headers={"Authorization": "Bearer nope"})
    assert ok.status_code == 200
    assert bad.status_code == 401


def test_non_ascii_api_key_is_rejected_not_crashed(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "API_KEY", "secret")
    resp = client.get("/api/wishlist", headers={"X-API-KEY": "clé".encode("utf-8")})
    assert resp.status_code == 401
