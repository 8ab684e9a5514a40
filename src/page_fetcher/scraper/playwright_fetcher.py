"""Playwright-based headless browser fetcher with bounded retries and redirects.

Every attempt runs in a fresh, isolated browser session (new Chromium
instance, new context, new page) that is closed on every exit path, so no
cookies or cache carry over between retries or between calls.

Per call::

    gate check ──► attempt 0 ──► attempt 1 ──► attempt 2 ──► FetchExhaustedError
                     │  fail: sleep 1 s  │  fail: sleep 2 s  │
                     └──── success ──────┴──── success ──────┴──► FetchResult

Navigation waits only for the response to start arriving
(``wait_until="commit"``) with a timeout growing linearly with the attempt
index, then pauses briefly so script-driven content can render.

Install Playwright and download the Chromium browser binary::

    pip install playwright>=1.48
    playwright install chromium
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Mapping

from playwright.async_api import Route, async_playwright

from page_fetcher.config.settings import Settings
from page_fetcher.core.exceptions import (
    FetchAttemptError,
    FetchExhaustedError,
    GateRejectionError,
    error_message,
)
from page_fetcher.core.schemas import FetchRequest
from page_fetcher.scraper import allow_list
from page_fetcher.scraper.config import (
    BASE_TIMEOUT_MS,
    BROWSER_LAUNCH_TIMEOUT_MS,
    MAX_REDIRECTS,
    MAX_RETRIES,
    RETRY_BACKOFF_SECONDS,
    SETTLE_DELAY_MS,
    USER_AGENT,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result dataclass
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FetchResult:
    """Result of one successful fetch attempt.

    Attributes:
        content: Serialised page markup (``page.content()``).
        content_type: ``content-type`` header of the main response, or ``""``.
    """

    content: str
    content_type: str


# ---------------------------------------------------------------------------
# Redirect limiting
# ---------------------------------------------------------------------------


class RedirectGuard:
    """Route handler counting redirected navigation requests of one attempt.

    Once more than ``max_redirects`` redirected navigations have been seen,
    the offending request is aborted with ``"failed"``; the navigation then
    errors and the attempt fails.  Every other request continues unmodified.
    """

    def __init__(self, max_redirects: int = MAX_REDIRECTS) -> None:
        self.max_redirects = max_redirects
        self.count = 0

    @property
    def exceeded(self) -> bool:
        return self.count > self.max_redirects

    async def __call__(self, route: Route) -> None:
        request = route.request
        if request.is_navigation_request() and request.redirected_from is not None:
            self.count += 1
            logger.info(
                "scraper: redirect #%d: %s -> %s",
                self.count,
                request.redirected_from.url,
                request.url,
            )
            if self.exceeded:
                logger.error(
                    "scraper: redirect limit (%d) exceeded, aborting request", self.max_redirects
                )
                await route.abort("failed")
                return
        await route.continue_()


# ---------------------------------------------------------------------------
# Single attempt
# ---------------------------------------------------------------------------


def navigation_timeout_ms(attempt: int) -> int:
    """Navigation timeout of the 0-based ``attempt``."""
    return BASE_TIMEOUT_MS * (attempt + 1)


def backoff_seconds(attempt: int) -> float:
    """Delay after the failed 0-based ``attempt`` before the next one."""
    return RETRY_BACKOFF_SECONDS * (attempt + 1)


async def _fetch_once(
    url: str,
    headers: Mapping[str, str] | None,
    attempt: int,
) -> FetchResult:
    """Run one complete browser-session lifecycle against ``url``.

    Raises:
        FetchAttemptError: No response, or an HTTP status of 400 or above.
        playwright.async_api.Error: Launch failure, navigation timeout, or a
            request aborted by the redirect guard.
    """
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True, timeout=BROWSER_LAUNCH_TIMEOUT_MS)
        try:
            context = await browser.new_context(
                user_agent=USER_AGENT,
                extra_http_headers=dict(headers) if headers else None,
            )
            page = await context.new_page()
            await page.route("**/*", RedirectGuard(MAX_REDIRECTS))

            response = await page.goto(
                url,
                wait_until="commit",
                timeout=navigation_timeout_ms(attempt),
            )
            if response is None:
                raise FetchAttemptError("No response received")
            if response.status >= 400:
                raise FetchAttemptError(
                    f"HTTP error: {response.status}", status_code=response.status
                )

            await page.wait_for_timeout(SETTLE_DELAY_MS)

            content_type = response.headers.get("content-type", "")
            content = await page.content()
            return FetchResult(content=content, content_type=content_type)
        finally:
            await browser.close()


# ---------------------------------------------------------------------------
# Public fetch function
# ---------------------------------------------------------------------------


async def fetch_page(request: FetchRequest, *, settings: Settings) -> FetchResult:
    """Fetch ``request.url`` through a headless browser with bounded retries.

    Performs the following steps:

    1. **Allow-list gate** — when ``settings.allow_list_enabled``, rejects
       hosts that are not on the allow list before any browser starts.
       A failing allow-list refresh propagates as-is (not retried).
    2. **Attempts** — up to ``MAX_RETRIES + 1`` isolated browser sessions,
       with a linearly growing navigation timeout and linear backoff between
       attempts.

    Args:
        request: Target URL and optional extra headers.
        settings: Process settings (allow-list gate state and source).

    Returns:
        A :class:`FetchResult` from the first successful attempt.

    Raises:
        GateRejectionError: The host is not on the allow list.
        AllowListRefreshError: The allow list could not be loaded.
        FetchExhaustedError: Every attempt failed; wraps the last error.
    """
    url = request.url

    if settings.allow_list_enabled:
        if not await allow_list.is_allowed(url, settings=settings):
            logger.info("scraper: allow list rejects %s", url)
            raise GateRejectionError(url)

    total_attempts = MAX_RETRIES + 1
    last_error: BaseException | None = None

    for attempt in range(total_attempts):
        try:
            logger.info("scraper: attempt %d/%d fetching %s", attempt + 1, total_attempts, url)
            return await _fetch_once(url, request.headers, attempt)
        except Exception as exc:  # noqa: BLE001
            last_error = exc
            logger.warning(
                "scraper: attempt %d/%d failed for %s: %s",
                attempt + 1,
                total_attempts,
                url,
                error_message(exc),
            )
            if attempt < MAX_RETRIES:
                delay = backoff_seconds(attempt)
                logger.info("scraper: retrying %s in %.1fs", url, delay)
                await asyncio.sleep(delay)

    raise FetchExhaustedError(url, total_attempts, last_error)
