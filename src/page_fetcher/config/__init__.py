"""Configuration package for page-fetcher.

Re-exports the settings symbols so that callers can write::

    from page_fetcher.config import get_settings
"""

from __future__ import annotations

from page_fetcher.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
