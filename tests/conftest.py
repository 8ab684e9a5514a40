"""Shared pytest fixtures for page-fetcher tests.

Fixture summary
---------------
settings         : Settings with the allow-list gate disabled and a tmp cache file.
gated_settings   : Same, with the allow-list gate enabled.
make_response    : Builder for mocked Playwright responses.
fake_playwright  : Factory building a mocked ``async_playwright`` driver.
no_sleep         : Patches the retry backoff sleep and records its delays.

No test launches a real browser or reaches the network: the Playwright
driver is replaced with ``unittest.mock`` objects and httpx calls are
intercepted with ``respx``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from page_fetcher.config.settings import Settings

ALLOW_LIST_URL = "https://allowlist.test/api/eclist.php"


def _make_settings(tmp_path: Path, dnlist_check: str) -> Settings:
    return Settings(
        _env_file=None,
        dnlist_check=dnlist_check,
        allow_list_url=ALLOW_LIST_URL,
        allow_list_cache_file=str(tmp_path / "dnlist.cache.json"),
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return _make_settings(tmp_path, "Disable")


@pytest.fixture
def gated_settings(tmp_path: Path) -> Settings:
    return _make_settings(tmp_path, "Enable")


# ---------------------------------------------------------------------------
# Fake Playwright driver
# ---------------------------------------------------------------------------


def _make_response(
    status: int = 200, content_type: str | None = "text/html; charset=utf-8"
) -> MagicMock:
    """Build a mocked Playwright ``Response``."""
    response = MagicMock()
    response.status = status
    response.headers = {"content-type": content_type} if content_type else {}
    return response


@pytest.fixture
def make_response():
    """Return the mocked-response builder: ``make_response(404)``."""
    return _make_response


@dataclass
class FakePlaywright:
    """Mocked ``async_playwright`` factory plus handles on the mocks it returns.

    Every launch returns the same ``browser`` / ``page`` mocks, so call
    counts accumulate across attempts.
    """

    factory: MagicMock
    chromium: MagicMock
    browser: MagicMock
    context: MagicMock
    page: MagicMock


def _build_fake_playwright(goto: Any, content: str) -> FakePlaywright:
    page = MagicMock()
    page.route = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.content = AsyncMock(return_value=content)
    if isinstance(goto, (list, BaseException)):
        page.goto = AsyncMock(side_effect=goto)
    else:
        page.goto = AsyncMock(return_value=goto)

    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    chromium = MagicMock()
    chromium.launch = AsyncMock(return_value=browser)

    driver = MagicMock()
    driver.chromium = chromium

    manager = MagicMock()
    manager.__aenter__ = AsyncMock(return_value=driver)
    manager.__aexit__ = AsyncMock(return_value=False)

    factory = MagicMock(return_value=manager)
    return FakePlaywright(
        factory=factory,
        chromium=chromium,
        browser=browser,
        context=context,
        page=page,
    )


@pytest.fixture
def fake_playwright():
    """Return a function installing a mocked Playwright driver.

    Usage::

        fake = fake_playwright(goto=make_response(404))
        fake = fake_playwright(goto=[RuntimeError("boom"), make_response()])

    ``goto`` is the value (or list of values / exceptions) returned by
    ``page.goto``.  The patch stays active until the test ends.
    """
    patchers = []

    def _install(
        goto: Any = None, content: str = "<html><body>ok</body></html>"
    ) -> FakePlaywright:
        fake = _build_fake_playwright(_make_response() if goto is None else goto, content)
        patcher = patch(
            "page_fetcher.scraper.playwright_fetcher.async_playwright", fake.factory
        )
        patcher.start()
        patchers.append(patcher)
        return fake

    yield _install

    for patcher in patchers:
        patcher.stop()


@pytest.fixture
def no_sleep():
    """Patch the retry backoff sleep; yields the mock for delay assertions."""
    with patch(
        "page_fetcher.scraper.playwright_fetcher.asyncio.sleep", new_callable=AsyncMock
    ) as mock_sleep:
        yield mock_sleep
