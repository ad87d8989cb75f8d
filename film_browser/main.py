"""Film Browser: movie catalog cache and wishlist API."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI

from film_browser.auth import verify_api_key
from film_browser.config import Settings, settings
from film_browser.routes import health
from film_browser.routes import movies as movie_routes
from film_browser.routes import wishlist as wishlist_routes
from film_browser.services.tmdb import TmdbGateway
from film_browser.staleness import is_stale
from film_browser.storage import JsonFileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from film_browser.store import SearchGateway, Store

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("film_browser")


async def _refresh_loop(
    store: Store,
    key: str,
    interval: int,
    initial_delay: float = 0.0,
):
    """Background refresh: fetch *key* whenever its listing has gone stale."""
    if initial_delay:
        await asyncio.sleep(initial_delay)
    while True:
        entry = store.categories.get(key)
        if is_stale(entry.last_fetched_at, settings.CACHE_TTL_LISTING):
            # fetch_category records failures on the entry itself
            entry = await store.fetch_category(key)
            log.debug("Refreshed %s: %s", key, entry.status.value)
        await asyncio.sleep(interval)


def _default_backend() -> KeyValueStore:
    if settings.WISHLIST_PATH:
        return JsonFileKeyValueStore(settings.WISHLIST_PATH)
    return MemoryKeyValueStore()


def create_app(
    gateway: SearchGateway | None = None,
    backend: KeyValueStore | None = None,
    background_refresh: bool = True,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Settings.validate()

        client = None
        gw = gateway
        if gw is None:
            client = httpx.AsyncClient(timeout=httpx.Timeout(settings.TMDB_TIMEOUT))
            gw = TmdbGateway(client)

        store = Store.open(gw, backend if backend is not None else _default_backend())
        app.state.store = store

        tasks: list[asyncio.Task] = []
        if background_refresh and settings.REFRESH_LISTINGS > 0:
            # Stagger startup slightly so not everything hits at t=0
            tasks = [
                asyncio.create_task(
                    _refresh_loop(store, key, settings.REFRESH_LISTINGS, initial_delay=i)
                )
                for i, key in enumerate(store.categories.keys())
            ]

        log.info(
            "Film Browser started: %d background jobs, %d wishlist items",
            len(tasks),
            len(store.wishlist),
        )
        yield

        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if client is not None:
            await client.aclose()
        log.info("Film Browser shutdown complete")

    app = FastAPI(
        title="Film Browser",
        version="0.1.0",
        lifespan=lifespan,
        dependencies=[Depends(verify_api_key)],
    )

    app.include_router(health.router)
    app.include_router(movie_routes.router)
    app.include_router(wishlist_routes.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "film_browser.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level="info",
    )
