"""Public fetch operations returning uniform result envelopes.

Each operation runs the bounded browser fetch, maps the fetched markup to
its output representation, and converts any raised exception into an error
envelope.  No exception crosses this boundary.

==================  =========================================================
``fetch_html``      raw page markup
``fetch_txt``       body text without scripts/styles, whitespace collapsed
``fetch_json``      JSON payload re-serialised compactly
``fetch_markdown``  main-content Markdown (never an error once fetched)
==================  =========================================================
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from page_fetcher.config.settings import Settings
from page_fetcher.core.exceptions import error_message
from page_fetcher.core.schemas import FetchRequest, ResultEnvelope
from page_fetcher.scraper.content_extractor import (
    extract_json,
    extract_markdown,
    extract_text,
)
from page_fetcher.scraper.playwright_fetcher import FetchResult, fetch_page

logger = logging.getLogger(__name__)

Operation = Callable[..., Awaitable[ResultEnvelope]]


async def _run(
    name: str,
    request: FetchRequest,
    settings: Settings,
    transform: Callable[[FetchResult], str],
) -> ResultEnvelope:
    try:
        result = await fetch_page(request, settings=settings)
        text = transform(result)
    except Exception as exc:  # noqa: BLE001
        message = error_message(exc)
        logger.warning("scraper: %s failed for %s: %s", name, request.url, message)
        return ResultEnvelope.failure(message)
    return ResultEnvelope.success(text)


async def fetch_html(request: FetchRequest, *, settings: Settings) -> ResultEnvelope:
    """Return the raw page markup of ``request.url``."""
    return await _run("fetch_html", request, settings, lambda result: result.content)


async def fetch_txt(request: FetchRequest, *, settings: Settings) -> ResultEnvelope:
    """Return the visible body text of ``request.url``."""
    return await _run("fetch_txt", request, settings, lambda result: extract_text(result.content))


async def fetch_json(request: FetchRequest, *, settings: Settings) -> ResultEnvelope:
    """Return the JSON document served at ``request.url``.

    The error envelope reads ``"Response is not valid JSON"`` when the page
    does not hold a JSON payload.
    """
    return await _run(
        "fetch_json",
        request,
        settings,
        lambda result: extract_json(result.content, result.content_type),
    )


async def fetch_markdown(request: FetchRequest, *, settings: Settings) -> ResultEnvelope:
    """Return the main content of ``request.url`` as cleaned Markdown."""
    return await _run(
        "fetch_markdown",
        request,
        settings,
        lambda result: extract_markdown(result.content, request.url),
    )


#: Operations by tool name.
OPERATIONS: dict[str, Operation] = {
    "fetch_html": fetch_html,
    "fetch_txt": fetch_txt,
    "fetch_json": fetch_json,
    "fetch_markdown": fetch_markdown,
}
