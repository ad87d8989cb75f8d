from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from film_browser.cache import FetchStatus
from film_browser.config import settings
from film_browser.deps import get_store
from film_browser.errors import (
    CatalogError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from film_browser.models import validate_item_id
from film_browser.staleness import is_stale
from film_browser.store import Store

router = APIRouter(prefix="/api")


@router.get("/categories/{category}")
async def get_category(
    category: str, refresh: bool = False, store: Store = Depends(get_store)
):
    if category not in store.categories.keys():
        raise HTTPException(status_code=404, detail=f"Unknown category: {category}")
    entry = store.categories.get(category)
    # A pending fetch will land on its own; don't stack another one.
    if entry.status != FetchStatus.PENDING and (
        refresh or is_stale(entry.last_fetched_at, settings.CACHE_TTL_LISTING)
    ):
        entry = await store.fetch_category(category)
    return entry


@router.get("/movies/{movie_id}")
async def get_movie(movie_id: str, store: Store = Depends(get_store)):
    try:
        item_id = validate_item_id(movie_id)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    view = store.details.get(item_id)
    if view.status != FetchStatus.PENDING and is_stale(
        view.last_fetched_at, settings.CACHE_TTL_DETAIL
    ):
        view = await store.fetch_detail(item_id)
    return view


@router.get("/search")
async def search(q: str = "", page: int = 1, store: Store = Depends(get_store)):
    try:
        results = await store.search(q, page)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RateLimitError as e:
        raise HTTPException(status_code=429, detail=str(e))
    except CatalogError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"query": q.strip(), "page": page, "results": results}
