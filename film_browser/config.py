from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger(__name__)

_PLACEHOLDER_KEYS = ("", "your_tmdb_api_key_here")


def _env(primary: str, *fallbacks: str, default: str = "") -> str:
    """Read env var with fallback aliases."""
    val = os.getenv(primary)
    if val is not None:
        return val
    for fb in fallbacks:
        val = os.getenv(fb)
        if val is not None:
            return val
    return default


class Settings:
    # --- Auth / Server ---
    API_KEY: str = os.getenv("FILM_BROWSER_API_KEY", "")
    HOST: str = os.getenv("FILM_BROWSER_HOST", "127.0.0.1")
    PORT: int = int(os.getenv("FILM_BROWSER_PORT", "8100"))

    # --- TMDB (v3 API, bearer token) ---
    TMDB_API_KEY: str = _env("TMDB_API_KEY", "TMDB_TOKEN")
    TMDB_BASE_URL: str = os.getenv("TMDB_BASE_URL", "https://api.themoviedb.org/3")
    TMDB_TIMEOUT: float = float(os.getenv("TMDB_TIMEOUT", "10"))
    TMDB_LANGUAGE: str = os.getenv("TMDB_LANGUAGE", "en-US")
    TMDB_REGION: str = os.getenv("TMDB_REGION", "US")

    # --- Wishlist persistence ---
    WISHLIST_PATH: str = os.getenv("WISHLIST_PATH", "data/storage.json")
    WISHLIST_STORAGE_KEY: str = os.getenv("WISHLIST_STORAGE_KEY", "film-browser-wishlist")

    # --- Cache lifetimes (seconds) ---
    CACHE_TTL_LISTING: int = int(os.getenv("CACHE_TTL_LISTING", "300"))
    CACHE_TTL_DETAIL: int = int(os.getenv("CACHE_TTL_DETAIL", "600"))

    # --- Background listing refresh interval (seconds, 0 disables) ---
    REFRESH_LISTINGS: int = int(os.getenv("REFRESH_LISTINGS", "60"))

    @classmethod
    def validate(cls) -> None:
        """Log warnings for missing or placeholder env vars."""
        fatal = False
        if cls.TMDB_API_KEY in _PLACEHOLDER_KEYS:
            log.warning(
                "TMDB_API_KEY is not configured: every catalog fetch will fail with an auth error"
            )
        if not cls.WISHLIST_PATH:
            log.warning("WISHLIST_PATH is empty: wishlist will not survive restarts")
        if not cls.TMDB_BASE_URL:
            log.error("TMDB_BASE_URL is not set: cannot reach the catalog")
            fatal = True
        if fatal:
            sys.exit(1)


settings = Settings()
