"""Pydantic request/result schemas for the fetch operations.

``FetchRequest`` is the validated input of every public operation (and of
every MCP tool call).  ``ResultEnvelope`` is the only shape ever returned to
a caller, on success and on failure alike.
"""

from __future__ import annotations

import urllib.parse
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FetchRequest(BaseModel):
    """Input of a single fetch operation.

    Attributes:
        url: Absolute ``http``/``https`` URL of the resource to fetch.
        headers: Optional extra HTTP headers sent with every request of the
            browser context.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    headers: Optional[Dict[str, str]] = None

    @field_validator("url")
    @classmethod
    def _require_absolute_url(cls, value: str) -> str:
        value = value.strip()
        parsed = urllib.parse.urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"url must be an absolute http(s) URL, got {value!r}")
        return value


class TextContent(BaseModel):
    """A single text content block of a result envelope."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ResultEnvelope(BaseModel):
    """Uniform result of every public fetch operation.

    Serialise with ``model_dump(by_alias=True)`` to obtain the camel-case
    ``isError`` key expected by tool-invocation clients.

    Attributes:
        content: Exactly one text block.
        is_error: ``True`` when the block carries an error message.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content: List[TextContent]
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def success(cls, text: str) -> "ResultEnvelope":
        return cls(content=[TextContent(text=text)], is_error=False)

    @classmethod
    def failure(cls, message: str) -> "ResultEnvelope":
        return cls(content=[TextContent(text=message)], is_error=True)

    @property
    def text(self) -> str:
        """Text of the single content block."""
        return self.content[0].text
