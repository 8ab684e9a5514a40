"""MCP stdio server exposing the fetch operations as tools.

Run with the ``page-fetcher-mcp`` console script (or
``python -m page_fetcher.server``).  Example client configuration::

    {
      "mcpServers": {
        "page-fetcher": {
          "command": "page-fetcher-mcp",
          "env": {"DNListCheck": "Enable"}
        }
      }
    }

Every tool takes ``{"url": "<absolute URL>", "headers": {...}}``.  A tool
whose operation returns an error envelope raises :class:`ToolExecutionError`
so the MCP layer answers with ``isError: true`` and the same message.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Any

import mcp.server.stdio
import mcp.types as types
import structlog
from mcp.server import InitializationOptions, NotificationOptions, Server

from page_fetcher import __version__
from page_fetcher.config.settings import Settings, get_settings
from page_fetcher.core.exceptions import ToolExecutionError
from page_fetcher.core.logging_config import configure_logging, tool_call_id_var
from page_fetcher.core.schemas import FetchRequest
from page_fetcher.scraper.service import OPERATIONS

logger = structlog.get_logger(__name__)

SERVER_NAME = "page-fetcher"

_TOOL_DESCRIPTIONS: dict[str, tuple[str, str]] = {
    "fetch_html": (
        "Fetch a website and return its rendered HTML content",
        "The URL of the website to fetch",
    ),
    "fetch_markdown": (
        "Fetch content from a website and convert it to Markdown format",
        "The URL of the website to fetch",
    ),
    "fetch_txt": (
        "Fetch and return plain text content from a website (HTML tags removed)",
        "The URL of the website to fetch",
    ),
    "fetch_json": (
        "Fetch and return JSON content from a URL",
        "The URL of the JSON resource to fetch",
    ),
}


def list_tools() -> list[types.Tool]:
    """Return the tool definitions of every registered operation."""
    tools = []
    for name, (description, url_description) in _TOOL_DESCRIPTIONS.items():
        tools.append(
            types.Tool(
                name=name,
                description=description,
                inputSchema={
                    "type": "object",
                    "properties": {
                        "url": {"type": "string", "description": url_description},
                        "headers": {
                            "type": "object",
                            "description": "Optional request headers",
                            "additionalProperties": {"type": "string"},
                        },
                    },
                    "required": ["url"],
                },
            )
        )
    return tools


async def call_tool(
    name: str,
    arguments: dict[str, Any] | None,
    *,
    settings: Settings,
) -> list[types.TextContent]:
    """Validate ``arguments``, run the named operation and unwrap its envelope.

    Raises:
        ValueError: Unknown tool name.
        pydantic.ValidationError: ``arguments`` is not a valid fetch request.
        ToolExecutionError: The operation returned an error envelope.
    """
    operation = OPERATIONS.get(name)
    if operation is None:
        raise ValueError("Tool not found")

    request = FetchRequest.model_validate(arguments or {})
    token = tool_call_id_var.set(uuid.uuid4().hex)
    try:
        logger.info("tool_called", tool=name, url=request.url)
        envelope = await operation(request, settings=settings)
    finally:
        tool_call_id_var.reset(token)

    if envelope.is_error:
        raise ToolExecutionError(envelope.text)
    return [types.TextContent(type="text", text=envelope.text)]


def build_server(settings: Settings) -> Server:
    """Create the low-level MCP server with the fetch tools registered."""
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return list_tools()

    @server.call_tool()
    async def handle_call_tool(
        name: str, arguments: dict[str, Any] | None
    ) -> list[types.TextContent]:
        return await call_tool(name, arguments, settings=settings)

    return server


async def serve(settings: Settings) -> None:
    """Run the MCP server over stdin/stdout until the client disconnects."""
    server = build_server(settings)
    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name=SERVER_NAME,
                server_version=__version__,
                capabilities=server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )


def main() -> None:
    """Console-script entry point."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        "server_starting",
        server=SERVER_NAME,
        version=__version__,
        dnlist_check=settings.dnlist_check,
        allow_list_gate="enabled" if settings.allow_list_enabled else "disabled",
        allow_list_gate_default="disabled",
    )
    asyncio.run(serve(settings))


if __name__ == "__main__":
    main()
