from __future__ import annotations

import time

from fastapi import APIRouter, Depends

from film_browser.deps import get_store
from film_browser.store import Store

router = APIRouter()

_start_time = time.time()
_VERSION = "0.1.0"


@router.get("/healthz")
async def healthz(store: Store = Depends(get_store)):
    return {
        "status": "ok",
        "version": _VERSION,
        "uptime_seconds": round(time.time() - _start_time),
        "cache_timestamps": store.categories.timestamps(),
        "cache_errors": store.categories.errors(),
        "wishlist_count": len(store.wishlist),
    }
