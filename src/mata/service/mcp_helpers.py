"""Client side of the Mata MCP server.

The CLI and the Flask API never touch the stores directly; they call the
server's tools through these helpers.
"""

import asyncio
import json
import logging
from typing import Any

from fastmcp import Client as MCPClient

logger = logging.getLogger(__name__)


async def call_mcp_tool(
    server_url: str, tool_name: str, params: dict[str, Any] | None = None
) -> Any:
    """Invoke one tool on the Mata server and return its decoded payload.

    Args:
        server_url: SSE endpoint of the server, e.g. "http://localhost:8001/sse"
        tool_name: Tool to invoke, e.g. "add_document"
        params: Tool arguments

    Returns:
        Whatever the tool returned, decoded by extract_mcp_result

    Raises:
        Exception: Connection failures and tool errors are not caught here
    """
    async with MCPClient(server_url) as client:
        raw = await client.call_tool(tool_name, params or {})
    return extract_mcp_result(raw)


def extract_mcp_result(result: Any) -> Any:
    """Decode a CallToolResult.

    Mata tools return JSON, which arrives as the text of the first content
    item. An empty content list means the tool returned nothing. Objects
    without a content attribute are passed through.
    """
    content = getattr(result, "content", None)
    if content is None:
        return result
    if not isinstance(content, list):
        return content
    if len(content) == 0:
        return None

    payload = getattr(content[0], "text", None)
    if not isinstance(payload, str):
        return payload
    try:
        return json.loads(payload)
    except json.JSONDecodeError:
        return payload


def _server_name(client: MCPClient) -> str | None:
    info = getattr(client.initialize_result, "serverInfo", None)
    return info.name if info else None


async def check_mcp_server(url: str, timeout: float = 5.0) -> dict[str, Any]:
    """Report whether the Mata server answers and which tools it offers.

    Never raises: failures are described in the returned dict.

    Returns:
        dict with 'url' and 'status' ("connected" or "failed"), plus 'tools'
        and 'server_name' when connected or 'error' when not
    """
    status: dict[str, Any] = {"url": url}
    try:
        async with asyncio.timeout(timeout):
            async with MCPClient(url) as client:
                tools = await client.list_tools() or []
                status.update(
                    status="connected",
                    tools=[tool.name for tool in tools],
                    server_name=_server_name(client),
                )
    except TimeoutError:
        logger.warning(f"⚠️ Mata server at {url} did not answer within {timeout}s")
        status.update(status="failed", error=f"Connection timeout ({timeout}s)")
    except Exception as e:
        logger.warning(f"⚠️ Mata server at {url} is unreachable: {e}")
        status.update(status="failed", error=str(e))
    return status


def run_async(coro: Any) -> Any:
    """Drive a coroutine from synchronous code such as a Flask view."""
    with asyncio.Runner() as runner:
        return runner.run(coro)
