from __future__ import annotations

from fastapi import APIRouter, Depends

from film_browser.deps import get_store
from film_browser.models import ItemSummary
from film_browser.store import Store

router = APIRouter(prefix="/api")


def _listing(store: Store) -> dict:
    items = store.wishlist.items
    return {"items": items, "count": len(items)}


@router.get("/wishlist")
async def get_wishlist(store: Store = Depends(get_store)):
    return _listing(store)


@router.post("/wishlist")
async def add_to_wishlist(item: ItemSummary, store: Store = Depends(get_store)):
    added = store.add_to_wishlist(item)
    return {"added": added, **_listing(store)}


@router.get("/wishlist/{item_id}")
async def wishlist_contains(item_id: int, store: Store = Depends(get_store)):
    return {"id": item_id, "in_wishlist": store.wishlist.contains(item_id)}


@router.delete("/wishlist/{item_id}")
async def remove_from_wishlist(item_id: int, store: Store = Depends(get_store)):
    removed = store.remove_from_wishlist(item_id)
    return {"removed": removed, **_listing(store)}


@router.delete("/wishlist")
async def clear_wishlist(store: Store = Depends(get_store)):
    store.clear_wishlist()
    return _listing(store)
