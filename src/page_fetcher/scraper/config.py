"""Constants and policy parameters for the browser fetcher.

These values are fixed policy, not caller-configurable.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Retry policy
# ---------------------------------------------------------------------------

#: Maximum number of retries after the first attempt (3 attempts in total).
MAX_RETRIES: int = 2

#: Base navigation timeout (milliseconds).  Attempt ``n`` (0-based) waits at
#: most ``BASE_TIMEOUT_MS * (n + 1)``.
BASE_TIMEOUT_MS: int = 10_000

#: Linear backoff unit (seconds).  After failed attempt ``n`` the fetcher
#: sleeps ``RETRY_BACKOFF_SECONDS * (n + 1)``.
RETRY_BACKOFF_SECONDS: float = 1.0

#: Maximum number of navigation redirects followed within one attempt.
MAX_REDIRECTS: int = 3

# ---------------------------------------------------------------------------
# Browser session
# ---------------------------------------------------------------------------

#: Timeout for launching the Chromium process (milliseconds).
BROWSER_LAUNCH_TIMEOUT_MS: int = 30_000

#: Pause after navigation commit so deferred scripts can populate the page.
SETTLE_DELAY_MS: int = 2_000

#: User-agent string of every browser context.
USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

# ---------------------------------------------------------------------------
# Allow list
# ---------------------------------------------------------------------------

#: Maximum age of the allow-list cache file before a refresh (milliseconds).
ALLOW_LIST_TTL_MS: int = 30 * 60 * 1000  # 30 minutes

# ---------------------------------------------------------------------------
# Content extraction
# ---------------------------------------------------------------------------

#: Elements removed from the full document before the Markdown fallback.
FALLBACK_STRIP_TAGS: tuple[str, ...] = ("script", "style", "noscript", "iframe", "svg")

#: Error message of a JSON retrieval whose payload does not parse.
INVALID_JSON_MESSAGE: str = "Response is not valid JSON"
