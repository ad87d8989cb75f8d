from __future__ import annotations

import asyncio
from typing import Any

import pytest

from film_browser.storage import MemoryKeyValueStore


def movie(item_id: int, title: str | None = None, **extra: Any) -> dict:
    raw = {
        "id": item_id,
        "title": title or f"Movie {item_id}",
        "overview": f"Overview {item_id}",
        "release_date": "2024-01-01",
        "vote_average": 7.5,
    }
    raw.update(extra)
    return raw


def listing(*movies: dict) -> dict:
    return {"page": 1, "results": list(movies), "total_pages": 1, "total_results": len(movies)}


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeGateway:
    """Scripted gateway.

    Each key maps to a list of responses consumed in call order; the last
    one is reused once the list runs dry.  A response may be a value, an
    exception to raise, or a future to await first.
    """

    def __init__(self) -> None:
        self.listings: dict[str, list] = {}
        self.details: dict[int, list] = {}
        self.searches: dict[str, list] = {}
        self.calls: list[tuple] = []

    @staticmethod
    async def _resolve(script: list) -> Any:
        result = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(result, asyncio.Future):
            result = await result
        if isinstance(result, BaseException):
            raise result
        return result

    async def list_category(self, category: str, page: int = 1) -> Any:
        self.calls.append(("list_category", category, page))
        return await self._resolve(self.listings[category])

    async def get_detail(self, item_id: int) -> Any:
        self.calls.append(("get_detail", item_id))
        return await self._resolve(self.details[item_id])

    async def search(self, query: str, page: int = 1) -> Any:
        self.calls.append(("search", query, page))
        return await self._resolve(self.searches[query])


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()
