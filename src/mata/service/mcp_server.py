"""FastMCP server exposing the knowledge base and chat search as tools.

The server process owns one AppContext for its lifetime. The vector store
lives only in memory, so documents must be ingested again after a restart;
the chat index is rebuilt from chat storage on startup.
"""

import logging
import os
from typing import Any

from dotenv import load_dotenv
from fastmcp import FastMCP

from mata.config import ServiceConfig
from mata.context import AppContext, create_context
from mata.errors import EmbeddingError, ValidationError
from mata.rag.models import ChatMessage, Document, DocumentMetadata, MetadataFilter, now_ms
from mata.storage.chat_storage import SqliteChatStorage, rebuild_index

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()

mcp = FastMCP("Mata Knowledge Base")

_context: AppContext | None = None


def get_context() -> AppContext:
    """Return the server's context, creating it from the environment on first use."""
    global _context
    if _context is None:
        _context = create_context()
    return _context


def set_context(context: AppContext | None) -> None:
    global _context
    _context = context


def format_result(document: Document, score: float) -> dict[str, Any]:
    """Flatten a retrieved document into a JSON-friendly dict."""
    metadata = document.metadata
    return {
        "id": document.id,
        "content": document.content,
        "source": metadata.source,
        "type": metadata.type,
        "title": metadata.title,
        "page_number": metadata.page_number,
        "chunk_index": metadata.chunk_index,
        "score": score,
    }


def build_filter(
    source: str | None = None, doc_type: str | None = None, title: str | None = None
) -> MetadataFilter | None:
    metadata_filter = MetadataFilter(source=source, type=doc_type, title=title)
    return None if metadata_filter.is_empty() else metadata_filter


# =============================================================================
# Tool implementations (take the context explicitly so they can be tested)
# =============================================================================


async def add_document_impl(
    context: AppContext,
    content: str,
    source: str,
    doc_type: str = "text",
    title: str | None = None,
    page_number: int | None = None,
) -> dict[str, Any]:
    metadata = DocumentMetadata(source=source, title=title, page_number=page_number)
    try:
        result = await context.retrieval.add_document(content, metadata, doc_type)
    except ValidationError as e:
        error_msg = f"Validation error: {e}"
        logger.error(f"❌ MCP Tool: {error_msg}")
        return {
            "success": False,
            "chunks": 0,
            "stored": 0,
            "failed": 0,
            "failed_ids": [],
            "rejected": 0,
            "message": error_msg,
        }

    failed = result.failed
    message = f"Stored {result.stored} of {len(result.outcomes)} chunks from {source}"
    if failed:
        message += f"; {len(failed)} chunks could not be embedded and are not searchable"
    if result.rejected:
        message += (
            f"; {result.rejected} embedded chunks were rejected by the vector store "
            f"(expected {context.store.options.dimensions}-dimensional embeddings)"
        )
    return {
        "success": result.stored > 0 or not result.outcomes,
        "chunks": len(result.outcomes),
        "stored": result.stored,
        "failed": len(failed),
        "failed_ids": [outcome.document.id for outcome in failed],
        "rejected": result.rejected,
        "message": message,
    }


async def query_knowledge_base_impl(
    context: AppContext,
    query: str,
    limit: int | None = None,
    threshold: float | None = None,
    source: str | None = None,
    doc_type: str | None = None,
    title: str | None = None,
) -> list[dict[str, Any]]:
    try:
        result = await context.retrieval.query(
            query,
            limit=limit,
            threshold=threshold,
            filter_metadata=build_filter(source, doc_type, title),
        )
    except (EmbeddingError, ValidationError) as e:
        error_msg = f"{type(e).__name__}: {e}"
        logger.error(f"❌ MCP Tool: {error_msg}")
        raise ValueError(error_msg) from e

    return [format_result(doc, score) for doc, score in zip(result.documents, result.scores)]


async def build_context_prompt_impl(
    context: AppContext,
    query: str,
    limit: int | None = None,
    threshold: float | None = None,
    source: str | None = None,
    doc_type: str | None = None,
) -> dict[str, Any]:
    try:
        result = await context.retrieval.query(
            query,
            limit=limit,
            threshold=threshold,
            filter_metadata=build_filter(source, doc_type),
        )
    except (EmbeddingError, ValidationError) as e:
        error_msg = f"{type(e).__name__}: {e}"
        logger.error(f"❌ MCP Tool: {error_msg}")
        raise ValueError(error_msg) from e

    return {
        "prompt": context.retrieval.generate_prompt(query, result.documents),
        "sources": [
            format_result(doc, score) for doc, score in zip(result.documents, result.scores)
        ],
    }


def index_message_impl(
    context: AppContext,
    message_id: str,
    chat_id: str,
    role: str,
    content: str,
    timestamp: int | None = None,
) -> dict[str, Any]:
    message = ChatMessage(
        id=message_id,
        chat_id=chat_id,
        role=role,
        content=content,
        timestamp=timestamp if timestamp is not None else now_ms(),
    )
    try:
        entry = context.chat_index.add_to_index(message)
    except ValidationError as e:
        return {"success": False, "message": str(e)}
    return {"success": True, "message_id": entry.id, "tokens": len(entry.tokens)}


def search_messages_impl(context: AppContext, query: str, limit: int = 5) -> list[dict[str, Any]]:
    return [
        {**result.message.to_dict(), "score": result.score}
        for result in context.chat_index.search(query, limit)
    ]


def stats_impl(context: AppContext) -> dict[str, Any]:
    return {
        **context.retrieval.get_stats(),
        "chat_index": context.chat_index.get_stats(),
        "embedding_model": context.embeddings.model_name,
    }


# =============================================================================
# MCP tools
# =============================================================================


@mcp.tool()
async def add_document(
    content: str,
    source: str,
    doc_type: str = "text",
    title: str | None = None,
    page_number: int | None = None,
) -> dict[str, Any]:
    """
    Adds content to the knowledge base. The content is chunked according to
    doc_type ("text", "markdown" or "code"), embedded and stored.

    Chunks that fail to embed are reported in 'failed' and 'failed_ids' and
    are not searchable.

    Args:
        content: Raw text, markdown or source code
        source: Where the content came from (e.g., a filename)
        doc_type: "text", "markdown" or "code"
        title: Optional title stored with each chunk
        page_number: Optional page number stored with each chunk
    """
    logger.info(f"📥 MCP Tool add_document: source='{source}', type={doc_type}")
    return await add_document_impl(
        get_context(), content, source, doc_type, title=title, page_number=page_number
    )


@mcp.tool()
async def query_knowledge_base(
    query: str,
    limit: int | None = None,
    threshold: float | None = None,
    source: str | None = None,
    doc_type: str | None = None,
    title: str | None = None,
) -> list[dict[str, Any]]:
    """
    Searches the knowledge base for chunks semantically similar to the query.
    Use this tool to find information to answer a user's question.

    Args:
        query: The search query text
        limit: Maximum number of results (default: server setting)
        threshold: Minimum similarity score for results
        source: Only return chunks from this source
        doc_type: Only return chunks of this type
        title: Only return chunks with this title
    """
    logger.debug(f"MCP Tool query_knowledge_base: query='{query[:100]}', limit={limit}")
    return await query_knowledge_base_impl(
        get_context(), query, limit, threshold, source=source, doc_type=doc_type, title=title
    )


@mcp.tool()
async def build_context_prompt(
    query: str,
    limit: int | None = None,
    threshold: float | None = None,
    source: str | None = None,
    doc_type: str | None = None,
) -> dict[str, Any]:
    """
    Retrieves context for the query and wraps it in the answering prompt.
    The prompt instructs the model to answer only from the context.

    Returns:
        dict with 'prompt' and the 'sources' used to build it
    """
    logger.info(f"🧩 MCP Tool build_context_prompt: query='{query[:100]}'")
    return await build_context_prompt_impl(
        get_context(), query, limit, threshold, source=source, doc_type=doc_type
    )


@mcp.tool()
async def clear_knowledge_base() -> dict[str, Any]:
    """Removes every document from the knowledge base."""
    get_context().retrieval.clear_knowledge_base()
    return {"success": True, "message": "Knowledge base cleared"}


@mcp.tool()
async def knowledge_base_stats() -> dict[str, Any]:
    """Returns document counts for the knowledge base and the chat index."""
    return stats_impl(get_context())


@mcp.tool()
async def index_message(
    message_id: str,
    chat_id: str,
    role: str,
    content: str,
    timestamp: int | None = None,
) -> dict[str, Any]:
    """
    Adds a committed chat message to the chat search index.

    Args:
        message_id: Id of the message in chat storage
        chat_id: Id of the chat the message belongs to
        role: "user", "assistant" or "error"
        content: Message text
        timestamp: Epoch milliseconds (default: now)
    """
    return index_message_impl(get_context(), message_id, chat_id, role, content, timestamp)


@mcp.tool()
async def remove_message(message_id: str) -> dict[str, Any]:
    """Removes one message from the chat search index."""
    removed = get_context().chat_index.remove_from_index(message_id)
    return {"success": removed, "message_id": message_id}


@mcp.tool()
async def clear_chat_index(chat_id: str | None = None) -> dict[str, Any]:
    """
    Removes a chat's messages from the chat search index, or every message
    when chat_id is omitted.
    """
    index = get_context().chat_index
    if chat_id is None:
        index.clear_all()
        return {"success": True, "removed": None}
    return {"success": True, "removed": index.clear_chat(chat_id)}


@mcp.tool()
async def search_messages(query: str, limit: int = 5) -> list[dict[str, Any]]:
    """
    Searches past chat messages by keyword relevance (TF-IDF).

    Args:
        query: Words to look for
        limit: Maximum number of messages to return (default: 5)
    """
    return search_messages_impl(get_context(), query, limit)


def bootstrap_chat_index(context: AppContext) -> int:
    """Index every stored chat message, if the chat database exists."""
    db_path = ServiceConfig.get_chat_db_path()
    if not db_path.exists():
        logger.info(f"ℹ️ No chat database at {db_path}; chat index starts empty")
        return 0
    return rebuild_index(context.chat_index, SqliteChatStorage(db_path))


def main() -> None:
    """Entry point for the MCP server command-line interface."""
    logger.info("🚀 Starting Mata MCP Server...")
    context = get_context()
    bootstrap_chat_index(context)
    host, port = ServiceConfig.get_mcp_bind()
    mcp.run(transport="sse", host=host, port=port)


if __name__ == "__main__":
    main()
