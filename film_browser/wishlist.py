"""User wishlist: an insertion-ordered, id-unique set of movie summaries.

The whole collection is written to the key-value backend after every
mutation and read back once, at start-up, by ``hydrate()``.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Iterator

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from film_browser.config import settings
from film_browser.errors import StorageError, ValidationError
from film_browser.models import ItemDetail, ItemSummary, validate_item_id
from film_browser.storage import KeyValueStore

log = logging.getLogger(__name__)

_ITEMS = TypeAdapter(list[ItemSummary])


def _as_summary(item: Any) -> ItemSummary:
    if isinstance(item, ItemDetail):
        return item.summary()
    if isinstance(item, ItemSummary):
        return item.model_copy(deep=True)
    try:
        return ItemSummary.model_validate(item)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid wishlist item: {e}") from e


class WishlistStore:
    """Single-threaded store; add/remove/clear each persist synchronously.

    An embedding that mutates from several threads must serialise the
    read-modify-persist sequence of each mutation behind one lock.
    """

    def __init__(
        self,
        backend: KeyValueStore,
        key: str | None = None,
    ) -> None:
        self._backend = backend
        self._key = key or settings.WISHLIST_STORAGE_KEY
        self._items: list[ItemSummary] = []
        self._ids: set[int] = set()
        self._hydrated = False

    @property
    def items(self) -> list[ItemSummary]:
        return [i.model_copy(deep=True) for i in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ItemSummary]:
        return iter(self.items)

    def contains(self, item_id: int | str) -> bool:
        try:
            return validate_item_id(item_id) in self._ids
        except ValidationError:
            return False

    def add(self, item: ItemSummary | dict) -> bool:
        """Append *item* unless its id is already present.

        Returns True when the collection changed.
        """
        summary = _as_summary(item)
        added = summary.id not in self._ids
        if added:
            self._items.append(summary)
            self._ids.add(summary.id)
        self._persist()
        return added

    def remove(self, item_id: int | str) -> bool:
        item_id = validate_item_id(item_id)
        removed = item_id in self._ids
        if removed:
            self._items = [i for i in self._items if i.id != item_id]
            self._ids.discard(item_id)
        self._persist()
        return removed

    def clear(self) -> None:
        self._items = []
        self._ids = set()
        self._persist()

    def hydrate(self) -> None:
        """Replace the collection with the persisted one.

        Any read or parse failure leaves the collection empty and is
        logged, never raised.
        """
        if self._hydrated:
            raise RuntimeError("wishlist already hydrated")
        self._hydrated = True

        try:
            items = self._load()
        except StorageError as e:
            log.error("Error loading wishlist, starting empty: %s", e)
            items = []

        self._items = []
        self._ids = set()
        for item in items:
            if item.id in self._ids:
                continue
            self._items.append(item)
            self._ids.add(item.id)
        log.info("Wishlist hydrated with %d items", len(self._items))

    def _load(self) -> list[ItemSummary]:
        try:
            blob = self._backend.read(self._key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Wishlist storage unavailable: {e}") from e
        if blob is None:
            return []
        try:
            return _ITEMS.validate_json(blob)
        except PydanticValidationError as e:
            raise StorageError(f"Corrupt wishlist data: {e}") from e

    def _persist(self) -> None:
        blob = json.dumps([i.model_dump(mode="json") for i in self._items])
        try:
            self._backend.write(self._key, blob)
        except Exception as e:
            log.error("Error saving wishlist: %s", e)
