"""Allow-list gate backed by a time-bounded JSON cache file.

The allow list is a sequence of hostname regular expressions maintained by a
remote service.  It is cached in a single JSON file::

    {"updatedAt": 1718000000000, "entries": [{"ptn": "rakuten\\.com\\.tw"}, ...]}

A cache older than :data:`~page_fetcher.scraper.config.ALLOW_LIST_TTL_MS`
is refreshed synchronously from the remote source (via ``httpx``) and the
fresh copy is persisted before use.  The file is always rewritten whole.

Concurrent callers may each refresh an expired cache; the refresh fully
overwrites the file, so the duplicates are harmless.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import tempfile
import time
import urllib.parse
from pathlib import Path

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from page_fetcher.config.settings import Settings
from page_fetcher.core.exceptions import AllowListRefreshError
from page_fetcher.scraper.config import ALLOW_LIST_TTL_MS

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Cache models
# ---------------------------------------------------------------------------


class AllowListEntry(BaseModel):
    """One permitted-hostname pattern (regular expression source)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    ptn: str


class AllowListCache(BaseModel):
    """Persisted allow list with its refresh timestamp (epoch milliseconds)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    updated_at: int = Field(alias="updatedAt")
    entries: tuple[AllowListEntry, ...] = ()

    def is_valid(self, now_ms: int) -> bool:
        """Return ``True`` while the cache is no older than the TTL."""
        return now_ms - self.updated_at <= ALLOW_LIST_TTL_MS


def _now_ms() -> int:
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# Hostname helpers
# ---------------------------------------------------------------------------


def normalize_hostname(url: str) -> str:
    """Return the hostname of ``url`` without a leading ``www.`` label.

    ``https://www.rakuten.com.tw/x`` and ``https://rakuten.com.tw`` both
    normalise to ``rakuten.com.tw``.
    """
    hostname = urllib.parse.urlparse(url).hostname or ""
    return re.sub(r"^www\.", "", hostname)


def matches_any(hostname: str, entries: tuple[AllowListEntry, ...]) -> bool:
    """Return ``True`` if any entry pattern is found in ``hostname``.

    Matching is a case-insensitive regular-expression *search*, not a full
    match.  Patterns that fail to compile are skipped.
    """
    for entry in entries:
        try:
            if re.search(entry.ptn, hostname, re.IGNORECASE):
                return True
        except re.error as exc:
            logger.warning("scraper: skipping invalid allow-list pattern %r: %s", entry.ptn, exc)
    return False


# ---------------------------------------------------------------------------
# Cache file I/O
# ---------------------------------------------------------------------------


def _read_cache_file(path: Path) -> AllowListCache | None:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError:
        return None
    try:
        return AllowListCache.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as exc:
        logger.warning("scraper: ignoring unreadable allow-list cache %s: %s", path, exc)
        return None


def _write_cache_file(path: Path, cache: AllowListCache) -> None:
    payload = json.dumps(cache.model_dump(by_alias=True, mode="json"))
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(payload)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


async def load_cache(path: Path) -> AllowListCache | None:
    """Load the persisted cache, or ``None`` if missing or unreadable."""
    return await asyncio.to_thread(_read_cache_file, path)


# ---------------------------------------------------------------------------
# Remote refresh
# ---------------------------------------------------------------------------


def _parse_remote_entries(payload: object) -> tuple[AllowListEntry, ...]:
    """Extract entries from the remote ``{"data": {"tw": {key: {...}}}}`` document."""
    if not isinstance(payload, dict):
        raise ValueError("allow-list document is not a JSON object")
    data = payload.get("data")
    if not isinstance(data, dict) or "tw" not in data:
        raise ValueError("allow-list document has no data.tw section")
    raw_entries = data["tw"]
    if isinstance(raw_entries, dict):
        values = list(raw_entries.values())
    elif isinstance(raw_entries, list):
        values = raw_entries
    else:
        raise ValueError("allow-list document has no data.tw entries")
    return tuple(AllowListEntry.model_validate(value) for value in values)


async def update_cache(
    settings: Settings,
    *,
    client: httpx.AsyncClient | None = None,
) -> AllowListCache:
    """Fetch the remote allow list, persist it, and return the fresh cache.

    Args:
        settings: Source URL, cache path and timeout.
        client: Optional shared :class:`httpx.AsyncClient`.  A short-lived
            client is created when omitted.

    Raises:
        AllowListRefreshError: The remote source was unreachable, returned an
            HTTP error, or returned a document without entries.
    """
    source_url = settings.allow_list_url
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.allow_list_timeout) as own_client:
                response = await own_client.get(source_url)
        else:
            response = await client.get(source_url, timeout=settings.allow_list_timeout)
        response.raise_for_status()
        entries = _parse_remote_entries(response.json())
    except httpx.HTTPError as exc:
        raise AllowListRefreshError(
            f"Failed to refresh allow list from {source_url}: {exc}",
            source_url=source_url,
        ) from exc
    except (ValueError, ValidationError) as exc:
        raise AllowListRefreshError(
            f"Invalid allow list received from {source_url}: {exc}",
            source_url=source_url,
        ) from exc

    cache = AllowListCache(updated_at=_now_ms(), entries=entries)
    path = Path(settings.allow_list_cache_file)
    try:
        await asyncio.to_thread(_write_cache_file, path, cache)
    except OSError as exc:
        logger.warning("scraper: could not persist allow-list cache %s: %s", path, exc)
    logger.info("scraper: allow list refreshed (%d entries)", len(entries))
    return cache


async def get_valid_cache(
    settings: Settings,
    *,
    client: httpx.AsyncClient | None = None,
) -> AllowListCache:
    """Return a cache no older than the TTL, refreshing it if needed.

    When the refresh fails but an expired cache is present, the stale copy
    is used.  With no cache at all the refresh error propagates.
    """
    cache = await load_cache(Path(settings.allow_list_cache_file))
    if cache is not None and cache.is_valid(_now_ms()):
        return cache

    try:
        return await update_cache(settings, client=client)
    except AllowListRefreshError as exc:
        if cache is None:
            raise
        logger.warning("scraper: using stale allow-list cache: %s", exc)
        return cache


async def is_allowed(
    url: str,
    *,
    settings: Settings,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """Return ``True`` if the host of ``url`` matches the allow list.

    Args:
        url: Absolute URL whose host is checked.
        settings: Allow-list source and cache location.
        client: Optional shared :class:`httpx.AsyncClient` for the refresh.

    Raises:
        AllowListRefreshError: No cache exists and the refresh failed.
    """
    hostname = normalize_hostname(url)
    cache = await get_valid_cache(settings, client=client)
    allowed = matches_any(hostname, cache.entries)
    logger.debug("scraper: allow-list check host=%s allowed=%s", hostname, allowed)
    return allowed
