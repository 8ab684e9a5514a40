"""Application settings loaded from environment variables.

Uses Pydantic Settings v2 for validated, type-safe configuration.
Environment lookups happen exclusively through this module — never call
``os.getenv`` directly elsewhere in the codebase.  The settings object is
built once at process start and passed down explicitly to the allow-list
gate and the content transformers.

Usage::

    from page_fetcher.config.settings import get_settings

    settings = get_settings()
    if settings.allow_list_enabled:
        ...
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide configuration backed by environment variables and an optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    # ------------------------------------------------------------------
    # Allow-list gate
    # ------------------------------------------------------------------

    dnlist_check: str = Field(default="Disable", validation_alias="DNListCheck")
    """Allow-list gate switch.  ``"Enable"`` (case-insensitive) restricts
    fetches to hosts on the remote allow list; any other value disables the
    gate.  Disabled by default."""

    allow_list_url: str = "https://extension.biggo.com/api/eclist.php"
    """Remote source of the allow-list patterns.  The JSON document must hold
    a ``data.tw`` mapping of key to ``{"ptn": "<regex>", ...}`` entries."""

    allow_list_cache_file: str = "dnlist.cache.json"
    """Path of the whole-file JSON cache holding the last refreshed list."""

    allow_list_timeout: float = Field(default=30.0, gt=0)
    """Timeout in seconds for the remote allow-list refresh request."""

    # ------------------------------------------------------------------
    # Application behaviour
    # ------------------------------------------------------------------

    log_level: str = "INFO"
    """Logging verbosity.  One of: DEBUG, INFO, WARNING, ERROR, CRITICAL."""

    @property
    def allow_list_enabled(self) -> bool:
        """``True`` when the allow-list gate must be consulted before fetching."""
        return self.dnlist_check.strip().lower() == "enable"


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings singleton.

    Uses ``functools.lru_cache`` so that Pydantic Settings reads the environment
    and .env file exactly once per process lifetime.  In tests, call
    ``get_settings.cache_clear()`` after patching environment variables.

    Returns:
        Settings: The validated, immutable settings object.
    """
    return Settings()
