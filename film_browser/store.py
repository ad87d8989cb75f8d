"""Process-wide state, built explicitly and handed to whoever needs it."""
from __future__ import annotations

import logging
import time
from typing import Any, Iterable, Protocol

from film_browser.cache import (
    CATEGORY_KEYS,
    CatalogGateway,
    CategoryCache,
    CategoryCacheEntry,
    Clock,
    DetailCache,
    DetailView,
)
from film_browser.models import SEARCH_FIELDS, ItemSummary, narrow_summaries
from film_browser.storage import KeyValueStore
from film_browser.wishlist import WishlistStore

log = logging.getLogger(__name__)


class SearchGateway(CatalogGateway, Protocol):
    async def search(self, query: str, page: int = 1) -> Any: ...


class Store:
    def __init__(
        self,
        gateway: SearchGateway,
        backend: KeyValueStore,
        *,
        categories: Iterable[str] = CATEGORY_KEYS,
        clock: Clock = time.time,
        wishlist_key: str | None = None,
    ) -> None:
        self.gateway = gateway
        self.categories = CategoryCache(gateway, categories, clock=clock)
        self.details = DetailCache(gateway, clock=clock)
        self.wishlist = WishlistStore(backend, key=wishlist_key)

    @classmethod
    def open(cls, gateway: SearchGateway, backend: KeyValueStore, **kwargs: Any) -> Store:
        """Build a store and hydrate its wishlist from *backend*."""
        store = cls(gateway, backend, **kwargs)
        store.wishlist.hydrate()
        return store

    # ---- Catalog -----------------------------------------------------------

    async def fetch_category(self, key: str, page: int = 1) -> CategoryCacheEntry:
        return await self.categories.fetch_category(key, page)

    async def fetch_detail(self, item_id: Any) -> DetailView:
        return await self.details.fetch_detail(item_id)

    async def search(self, query: str, page: int = 1) -> list[ItemSummary]:
        """Uncached title search; gateway errors propagate."""
        query = query.strip()
        if not query:
            return []
        payload = await self.gateway.search(query, page)
        results = payload.get("results") if isinstance(payload, dict) else None
        items = narrow_summaries(results, SEARCH_FIELDS)
        log.debug("Found %d movies for query %r", len(items), query)
        return items

    # ---- Wishlist ----------------------------------------------------------

    def add_to_wishlist(self, item: ItemSummary | dict) -> bool:
        return self.wishlist.add(item)

    def remove_from_wishlist(self, item_id: int | str) -> bool:
        return self.wishlist.remove(item_id)

    def clear_wishlist(self) -> None:
        self.wishlist.clear()
