"""Pydantic schemas for tool input validation and result envelopes.

Sub-modules:
    fetch — FetchRequest, TextContent, ResultEnvelope
"""

from __future__ import annotations

from page_fetcher.core.schemas.fetch import FetchRequest, ResultEnvelope, TextContent

__all__ = [
    "FetchRequest",
    "ResultEnvelope",
    "TextContent",
]
