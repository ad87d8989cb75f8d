from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Callable, Iterable, Protocol

from pydantic import BaseModel, Field

from film_browser.errors import ValidationError
from film_browser.models import (
    ItemDetail,
    ItemSummary,
    narrow_detail,
    narrow_summaries,
    validate_item_id,
)

log = logging.getLogger(__name__)

CATEGORY_KEYS = ("popular", "top_rated", "now_playing")

Clock = Callable[[], float]


class CatalogGateway(Protocol):
    async def list_category(self, category: str, page: int = 1) -> Any: ...

    async def get_detail(self, item_id: int) -> Any: ...


class FetchStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class CategoryCacheEntry(BaseModel):
    """Typed snapshot for a single category key."""

    items: list[ItemSummary] = Field(default_factory=list)
    last_fetched_at: float | None = None
    status: FetchStatus = FetchStatus.IDLE
    error_message: str | None = None
    error_kind: str | None = None


class DetailCacheEntry(BaseModel):
    data: ItemDetail
    fetched_at: float


class DetailFetchState(BaseModel):
    status: FetchStatus = FetchStatus.PENDING
    error_message: str | None = None
    error_kind: str | None = None


class DetailView(BaseModel):
    """What a consumer sees for one item id."""

    data: ItemDetail | None = None
    status: FetchStatus = FetchStatus.IDLE
    error_message: str | None = None
    error_kind: str | None = None
    last_fetched_at: float | None = None


def _results(payload: Any) -> Any:
    if isinstance(payload, dict):
        return payload.get("results")
    return None


class CategoryCache:
    """Per-category listings for a single-worker async app.

    Every key stores a ``CategoryCacheEntry`` whose status moves
    idle -> pending -> ready | failed.  A failed fetch keeps whatever
    items and timestamp the last success left behind.

    Concurrent fetches for one key are not de-duplicated: each one writes
    its result when it completes, so the last to *finish* wins.
    """

    def __init__(
        self,
        gateway: CatalogGateway,
        categories: Iterable[str] = CATEGORY_KEYS,
        clock: Clock = time.time,
    ) -> None:
        self._gateway = gateway
        self._clock = clock
        self._store: dict[str, CategoryCacheEntry] = {
            key: CategoryCacheEntry() for key in categories
        }

    def _entry(self, key: str) -> CategoryCacheEntry:
        entry = self._store.get(key)
        if entry is None:
            raise ValidationError(f"Unknown category: {key!r}")
        return entry

    def get(self, key: str) -> CategoryCacheEntry:
        return self._entry(key).model_copy(deep=True)

    async def fetch_category(self, key: str, page: int = 1) -> CategoryCacheEntry:
        entry = self._entry(key)
        entry.status = FetchStatus.PENDING
        entry.error_message = None
        entry.error_kind = None

        try:
            payload = await self._gateway.list_category(key, page)
            items = narrow_summaries(_results(payload))
        except asyncio.CancelledError:
            log.warning("Fetch %s cancelled", key)
            entry.status = FetchStatus.FAILED
            entry.error_message = "Fetch cancelled"
            entry.error_kind = "CancelledError"
            raise
        except Exception as e:
            log.warning("Fetch %s failed: %s", key, e)
            entry.status = FetchStatus.FAILED
            entry.error_message = str(e) or f"Failed to fetch {key} movies"
            entry.error_kind = type(e).__name__
            return self.get(key)

        entry.items = items
        entry.status = FetchStatus.READY
        entry.last_fetched_at = self._clock()
        log.debug("Fetched %d %s movies", len(items), key)
        return self.get(key)

    def keys(self) -> list[str]:
        return list(self._store.keys())

    def timestamps(self) -> dict[str, float | None]:
        """Return {key: last_fetched_at} for every category."""
        return {k: v.last_fetched_at for k, v in self._store.items()}

    def errors(self) -> dict[str, str | None]:
        """Return {key: error_message} for every category."""
        return {k: v.error_message for k, v in self._store.items()}


class DetailCache:
    """Per-item detail records keyed by item id.

    Records and fetch states live in separate maps so a pending or failed
    fetch never removes the last good record for that id.
    """

    def __init__(self, gateway: CatalogGateway, clock: Clock = time.time) -> None:
        self._gateway = gateway
        self._clock = clock
        self._entries: dict[int, DetailCacheEntry] = {}
        self._states: dict[int, DetailFetchState] = {}

    def get(self, item_id: int) -> DetailView:
        entry = self._entries.get(item_id)
        state = self._states.get(item_id)
        view = DetailView()
        if entry is not None:
            view.data = entry.data.model_copy(deep=True)
            view.last_fetched_at = entry.fetched_at
        if state is not None:
            view.status = state.status
            view.error_message = state.error_message
            view.error_kind = state.error_kind
        return view

    async def fetch_detail(self, raw_id: Any) -> DetailView:
        # Raises before the gateway is touched.
        item_id = validate_item_id(raw_id)
        self._states[item_id] = DetailFetchState(status=FetchStatus.PENDING)

        try:
            raw = await self._gateway.get_detail(item_id)
            detail = narrow_detail(raw)
        except asyncio.CancelledError:
            log.warning("Fetch detail %d cancelled", item_id)
            self._states[item_id] = DetailFetchState(
                status=FetchStatus.FAILED,
                error_message="Fetch cancelled",
                error_kind="CancelledError",
            )
            raise
        except Exception as e:
            log.warning("Fetch detail %d failed: %s", item_id, e)
            self._states[item_id] = DetailFetchState(
                status=FetchStatus.FAILED,
                error_message=str(e) or "Failed to fetch movie details",
                error_kind=type(e).__name__,
            )
            return self.get(item_id)

        self._entries[item_id] = DetailCacheEntry(
            data=detail, fetched_at=self._clock()
        )
        self._states[item_id] = DetailFetchState(status=FetchStatus.READY)
        log.debug("Fetched details for: %s", detail.title)
        return self.get(item_id)

    def ids(self) -> list[int]:
        return list(self._states.keys())
