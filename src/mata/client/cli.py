"""Command-line interface for Mata using Click.

Every command talks to the running Mata MCP server, which owns the
in-memory knowledge base and chat index.
"""

import asyncio
from pathlib import Path

import click
from dotenv import load_dotenv

from mata.client.cli_helpers import (
    ensure_server_available,
    format_message_result,
    format_search_result,
)
from mata.client.ingest import SUPPORTED_EXTENSIONS, load_document_payloads
from mata.config import ServiceConfig
from mata.service.mcp_helpers import call_mcp_tool

# Load environment variables
load_dotenv()


@click.command()
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)
@click.option(
    "--recursive/--no-recursive",
    default=False,
    help="Also ingest files in subdirectories",
)
def ingest(directory: Path, recursive: bool) -> None:
    """Ingest text, markdown, source code and PDF files from DIRECTORY.

    Example:
        mata-ingest docs/
        mata-ingest src/ --recursive
    """
    url = ServiceConfig.get_mcp_url()
    ensure_server_available(url)

    pattern = "**/*" if recursive else "*"
    files = sorted(
        p for p in directory.glob(pattern)
        if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS
    )

    if not files:
        click.echo(f"No supported files found in '{directory}'")
        return

    click.echo(f"Found {len(files)} file(s)\n")

    total_stored = 0
    total_failed = 0
    for path in files:
        try:
            payloads = load_document_payloads(path)
            for payload in payloads:
                result = asyncio.run(call_mcp_tool(url, "add_document", payload))
                total_stored += result.get("stored", 0)
                total_failed += result.get("failed", 0) + result.get("rejected", 0)
                if not result.get("success"):
                    click.echo(f"  ✗ {path.name}: {result.get('message')}", err=True)
            click.echo(f"  ✓ Ingested {path.name}")
        except Exception as e:
            click.echo(f"  ✗ Error processing {path.name}: {e}", err=True)

    click.echo(f"\n✓ Ingestion complete! Stored {total_stored} chunks.")
    if total_failed:
        click.echo(
            f"⚠️  {total_failed} chunk(s) were not stored and are not searchable. "
            "Check that the embedding model is available and matches the configured "
            "dimensions, then ingest again.",
            err=True,
        )


@click.command()
@click.argument("query", type=str)
@click.option("--limit", type=int, default=None, help="Maximum number of results")
@click.option("--threshold", type=float, default=None, help="Minimum similarity score")
@click.option(
    "--type",
    "doc_type",
    type=click.Choice(["text", "markdown", "code"]),
    default=None,
    help="Only return chunks of this type",
)
@click.option("--source", type=str, default=None, help="Only return chunks from this source")
@click.option("--prompt", "show_prompt", is_flag=True, default=False, help="Print the RAG prompt")
def query(
    query: str,
    limit: int | None,
    threshold: float | None,
    doc_type: str | None,
    source: str | None,
    show_prompt: bool,
) -> None:
    """Search the knowledge base for chunks similar to QUERY.

    Example:
        mata-query "how is authentication handled?"
        mata-query "rate limit" --limit 3 --type markdown --prompt
    """
    url = ServiceConfig.get_mcp_url()
    ensure_server_available(url)

    click.echo(f"🔍 Searching for: '{query}'\n")
    params = {
        "query": query,
        "limit": limit,
        "threshold": threshold,
        "source": source,
        "doc_type": doc_type,
    }

    try:
        if show_prompt:
            response = asyncio.run(call_mcp_tool(url, "build_context_prompt", params))
            results = response["sources"]
        else:
            results = asyncio.run(call_mcp_tool(url, "query_knowledge_base", params))
    except Exception as e:
        click.echo(f"✗ Error: {e}", err=True)
        raise click.Abort()

    if not results:
        click.echo("No results found.")
    else:
        click.echo(f"✅ Found {len(results)} result(s):\n")
        for i, result in enumerate(results, 1):
            click.echo(format_search_result(i, result))

    if show_prompt:
        click.echo("Prompt:")
        click.echo(response["prompt"])


@click.command()
@click.argument("query", type=str)
@click.option("--limit", type=int, default=5, help="Number of messages to return (default: 5)")
def search_chats(query: str, limit: int) -> None:
    """Search past chat messages for QUERY.

    Example:
        mata-search-chats "docker compose"
    """
    url = ServiceConfig.get_mcp_url()
    ensure_server_available(url)

    try:
        results = asyncio.run(
            call_mcp_tool(url, "search_messages", {"query": query, "limit": limit})
        )
    except Exception as e:
        click.echo(f"✗ Error: {e}", err=True)
        raise click.Abort()

    if not results:
        click.echo("No matching messages.")
        return

    click.echo(f"✅ Found {len(results)} message(s):\n")
    for i, result in enumerate(results, 1):
        click.echo(format_message_result(i, result))


@click.command()
def stats() -> None:
    """Show knowledge base and chat index statistics.

    Example:
        mata-stats
    """
    url = ServiceConfig.get_mcp_url()
    ensure_server_available(url)

    data = asyncio.run(call_mcp_tool(url, "knowledge_base_stats"))
    store = data["vector_store"]
    chats = data["chat_index"]

    click.echo(f"📊 Knowledge base: {store['total_documents']} chunk(s)")
    for doc_type, count in sorted(store["type_distribution"].items()):
        click.echo(f"   • {doc_type}: {count}")
    click.echo(f"   Embedding model: {data['embedding_model']} ({store['dimensions']} dims)")
    click.echo(
        f"💬 Chat index: {chats['total_documents']} message(s), {chats['total_tokens']} token(s)"
    )


@click.command()
@click.option("--yes", "-y", is_flag=True, default=False, help="Skip confirmation prompt")
def clear(yes: bool) -> None:
    """Remove every document from the knowledge base.

    Chat history and its search index are not affected.

    Example:
        mata-clear
        mata-clear --yes
    """
    url = ServiceConfig.get_mcp_url()
    ensure_server_available(url)

    if not yes and not click.confirm(
        "⚠️  This removes every ingested document. Proceed?", default=False
    ):
        click.echo("Cancelled.")
        return

    asyncio.run(call_mcp_tool(url, "clear_knowledge_base"))
    click.echo("✓ Knowledge base cleared.")


if __name__ == "__main__":
    ingest()
