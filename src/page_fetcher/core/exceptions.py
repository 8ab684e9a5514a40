"""Application-wide exception hierarchy for page-fetcher.

All custom exceptions subclass ``PageFetcherError``, enabling consistent
conversion into error result envelopes at the boundary of every public
fetch operation.

Hierarchy::

    PageFetcherError
    ├── GateRejectionError
    ├── AllowListRefreshError
    ├── FetchAttemptError        (status_code: int | None)
    ├── FetchExhaustedError      (url, attempts, last_error)
    ├── ContentParseError
    └── ToolExecutionError
"""

from __future__ import annotations

#: Message used whenever an exception carries no usable text.
UNKNOWN_ERROR_MESSAGE = "Unknown error"


def error_message(exc: BaseException | None) -> str:
    """Return the human-readable message of ``exc``.

    Falls back to ``"Unknown error"`` when ``exc`` is ``None`` or its string
    form is empty.
    """
    if exc is None:
        return UNKNOWN_ERROR_MESSAGE
    return str(exc) or UNKNOWN_ERROR_MESSAGE


class PageFetcherError(Exception):
    """Base class for all page-fetcher exceptions.

    All application-specific exceptions inherit from this class so that
    callers can catch the entire hierarchy with a single ``except`` clause
    when needed.
    """


# ---------------------------------------------------------------------------
# Allow-list exceptions
# ---------------------------------------------------------------------------


class GateRejectionError(PageFetcherError):
    """Raised when the allow-list gate rejects the target host.

    Raised before any browser session is opened; no retry is attempted.

    Args:
        url: The rejected URL (kept for logging).
    """

    MESSAGE = "Not a EC site. Fetch Tools only crawler EC Site."

    def __init__(self, url: str | None = None) -> None:
        super().__init__(self.MESSAGE)
        self.url = url


class AllowListRefreshError(PageFetcherError):
    """Raised when the remote allow list cannot be fetched or parsed.

    Args:
        message: Human-readable description of the failure.
        source_url: URL of the remote allow-list source.
    """

    def __init__(self, message: str, source_url: str | None = None) -> None:
        super().__init__(message)
        self.source_url = source_url


# ---------------------------------------------------------------------------
# Fetch exceptions
# ---------------------------------------------------------------------------


class FetchAttemptError(PageFetcherError):
    """Raised inside a single navigation attempt (HTTP error, no response).

    Never surfaced directly: the retry loop records it and, once the retry
    budget is spent, wraps the last one into :class:`FetchExhaustedError`.

    Args:
        message: Human-readable description of the failure.
        status_code: HTTP status of the response, when one was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FetchExhaustedError(PageFetcherError):
    """Raised after every attempt of the bounded fetch procedure failed.

    Args:
        url: Target URL.
        attempts: Total number of attempts performed.
        last_error: The exception raised by the final attempt, if any.
    """

    def __init__(
        self,
        url: str,
        attempts: int,
        last_error: BaseException | None = None,
    ) -> None:
        super().__init__(
            f"Failed to fetch {url} after {attempts} attempts: "
            f"{error_message(last_error)}"
        )
        self.url = url
        self.attempts = attempts
        self.last_error = last_error


# ---------------------------------------------------------------------------
# Content exceptions
# ---------------------------------------------------------------------------


class ContentParseError(PageFetcherError):
    """Raised when fetched content cannot be parsed into the requested format."""


# ---------------------------------------------------------------------------
# Tool server exceptions
# ---------------------------------------------------------------------------


class ToolExecutionError(PageFetcherError):
    """Raised by the MCP tool handler to report an error envelope.

    The MCP server layer turns any exception raised by a tool handler into a
    ``CallToolResult`` with ``isError=True`` whose text is the exception
    message.
    """
