"""Helper functions for CLI commands."""

import asyncio
from datetime import datetime

import click

from mata.constants import CONTENT_PREVIEW_LENGTH
from mata.service.mcp_helpers import check_mcp_server


def ensure_server_available(url: str) -> None:
    """Check that the MCP server answers.

    Raises:
        click.Abort: If the server cannot be reached
    """
    status = asyncio.run(check_mcp_server(url))
    if status["status"] == "connected":
        return

    click.echo(f"✗ Error: Cannot reach the Mata MCP server at {url}", err=True)
    click.echo(f"  {status.get('error', 'unknown error')}", err=True)
    click.echo("\nStart it first with:", err=True)
    click.echo("  mata-server", err=True)
    raise click.Abort()


def _preview(content: str, max_length: int) -> str:
    content = " ".join(content.split())
    return content[:max_length] + "..." if len(content) > max_length else content


def format_search_result(index: int, result: dict, max_length: int = CONTENT_PREVIEW_LENGTH) -> str:
    """Format a knowledge base hit for display.

    Args:
        index: Result number (1-based)
        result: Hit with score, source, type, chunk_index, content and page_number
        max_length: Maximum content length before truncation

    Returns:
        Formatted string for display
    """
    location = f"{result['source']} - chunk #{result.get('chunk_index')}"
    if result.get("page_number") is not None:
        location += f", page {result['page_number']}"

    lines = [
        f"{index}. [{location}] ({result.get('type', 'text')}, score: {result.get('score', 0.0):.4f})",
        f"   {_preview(result['content'], max_length)}",
        "",
    ]
    return "\n".join(lines)


def format_message_result(
    index: int, result: dict, max_length: int = CONTENT_PREVIEW_LENGTH
) -> str:
    """Format a chat search hit for display."""
    when = datetime.fromtimestamp(result["timestamp"] / 1000).strftime("%Y-%m-%d %H:%M")
    lines = [
        f"{index}. [chat {result['chat_id']} - {result['role']} @ {when}] "
        f"(score: {result.get('score', 0.0):.4f})",
        f"   {_preview(result['content'], max_length)}",
        "",
    ]
    return "\n".join(lines)
