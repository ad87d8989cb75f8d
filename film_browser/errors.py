"""Error taxonomy shared by the caches, the gateway and the wishlist."""
from __future__ import annotations


class FilmBrowserError(Exception):
    """Root of every error raised inside film_browser."""


class ValidationError(FilmBrowserError, ValueError):
    """Malformed input rejected before any gateway call."""


class CatalogError(FilmBrowserError):
    """The remote catalog could not produce the requested data."""


class AuthError(CatalogError):
    pass


class NotFoundError(CatalogError):
    pass


class RateLimitError(CatalogError):
    pass


class UpstreamServerError(CatalogError):
    pass


class NetworkError(CatalogError):
    pass


class InvalidPayloadError(CatalogError):
    """The catalog answered, but not with a usable record or list."""


class StorageError(FilmBrowserError):
    """The durable key-value store could not be read, parsed or written."""
