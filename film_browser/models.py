"""Catalog entities and the narrowing applied to raw gateway payloads.

Everything the gateway returns is duck-typed JSON.  It is validated here,
once, into ``ItemSummary`` / ``ItemDetail`` before it can reach a cache.
"""
from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from film_browser.errors import InvalidPayloadError, ValidationError

log = logging.getLogger(__name__)

# Fields that must be present and non-empty for a record to be kept.
LISTING_FIELDS = ("id", "title", "overview", "release_date")
SEARCH_FIELDS = ("id", "title")
DETAIL_FIELDS = ("id", "title")


class _Record(BaseModel):
    """TMDB sends null for blank fields; a null falls back to the default."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class ItemSummary(_Record):
    """One movie as it appears in a listing or in the wishlist.

    Only ``id`` is required here; which other fields must be filled in
    depends on where the record came from (see ``narrow_summaries``).
    """

    id: int
    title: str = ""
    overview: str = ""
    poster_path: str | None = None
    backdrop_path: str | None = None
    release_date: str = ""
    vote_average: float = 0.0
    vote_count: int = 0
    adult: bool = False
    original_language: str = ""
    original_title: str = ""
    popularity: float = 0.0
    video: bool = False
    genre_ids: list[int] = Field(default_factory=list)


class Genre(_Record):
    id: int
    name: str


class ProductionCompany(_Record):
    id: int
    name: str
    logo_path: str | None = None
    origin_country: str = ""


class ProductionCountry(_Record):
    iso_3166_1: str
    name: str


class SpokenLanguage(_Record):
    english_name: str = ""
    iso_639_1: str
    name: str = ""


class ItemDetail(ItemSummary):
    """Full detail record, including the appended credits/videos/similar."""

    runtime: int | None = None
    genres: list[Genre] = Field(default_factory=list)
    production_companies: list[ProductionCompany] = Field(default_factory=list)
    production_countries: list[ProductionCountry] = Field(default_factory=list)
    spoken_languages: list[SpokenLanguage] = Field(default_factory=list)
    budget: int = 0
    revenue: int = 0
    status: str = ""
    tagline: str | None = None
    homepage: str | None = None
    imdb_id: str | None = None
    credits: dict[str, Any] | None = None
    videos: dict[str, Any] | None = None
    similar: dict[str, Any] | None = None

    def summary(self) -> ItemSummary:
        return ItemSummary.model_validate(
            self.model_dump(include=set(ItemSummary.model_fields))
        )


def _missing(raw: dict, required: tuple[str, ...]) -> list[str]:
    return [f for f in required if not raw.get(f)]


def narrow_summaries(
    results: Any, required: tuple[str, ...] = LISTING_FIELDS
) -> list[ItemSummary]:
    """Validate a raw ``results`` list into unique, well-formed summaries.

    Records lacking a required field, or failing model validation, are
    dropped rather than failing the whole list.  Duplicate ids keep the
    first occurrence so API order is preserved.
    """
    if not isinstance(results, list):
        raise InvalidPayloadError("Invalid response format from TMDB API")

    items: list[ItemSummary] = []
    seen: set[int] = set()
    for i, raw in enumerate(results):
        if not isinstance(raw, dict):
            log.debug("Result %d is not an object, skipping", i)
            continue
        missing = _missing(raw, required)
        if missing:
            log.debug("Result %d missing %s, skipping", i, ", ".join(missing))
            continue
        try:
            item = ItemSummary.model_validate(raw)
        except PydanticValidationError as e:
            log.debug("Result %d failed validation, skipping: %s", i, e)
            continue
        if item.id in seen:
            continue
        seen.add(item.id)
        items.append(item)
    return items


def narrow_detail(raw: Any) -> ItemDetail:
    """Accept a detail record as long as it carries an id and a title."""
    if not isinstance(raw, dict) or _missing(raw, DETAIL_FIELDS):
        raise InvalidPayloadError("Invalid movie data received from TMDB API")
    try:
        return ItemDetail.model_validate(raw)
    except PydanticValidationError as e:
        raise InvalidPayloadError(
            "Invalid movie data received from TMDB API"
        ) from e


def validate_item_id(raw: Any) -> int:
    """Return *raw* as a positive integer id or raise ``ValidationError``."""
    if isinstance(raw, bool):
        raise ValidationError("Invalid movie ID provided")
    if isinstance(raw, int):
        item_id = raw
    elif isinstance(raw, str) and raw.strip().isascii() and raw.strip().isdigit():
        item_id = int(raw.strip())
    else:
        raise ValidationError("Invalid movie ID provided")
    if item_id <= 0:
        raise ValidationError("Invalid movie ID provided")
    return item_id
