"""Retrieval engine: chunking, embedding, vector search and chat search.

Usage:
    from mata.rag import DocumentProcessor, VectorStore, RetrievalService, ChatIndex
"""

from mata.rag.chat_index import ChatIndex, tokenize
from mata.rag.chunker import DocumentProcessor
from mata.rag.embeddings import EmbeddingService
from mata.rag.models import (
    ChatMessage,
    Document,
    DocumentMetadata,
    EmbeddingOutcome,
    IndexEntry,
    IngestionResult,
    MessageSearchResult,
    MetadataFilter,
    RAGResult,
    SearchResult,
)
from mata.rag.service import KnowledgeItem, RetrievalService
from mata.rag.utils import cosine_similarity
from mata.rag.vector_store import VectorStore

__all__ = [
    # Components
    "DocumentProcessor",
    "EmbeddingService",
    "VectorStore",
    "RetrievalService",
    "ChatIndex",
    # Models
    "ChatMessage",
    "Document",
    "DocumentMetadata",
    "EmbeddingOutcome",
    "IndexEntry",
    "IngestionResult",
    "KnowledgeItem",
    "MessageSearchResult",
    "MetadataFilter",
    "RAGResult",
    "SearchResult",
    # Utils
    "cosine_similarity",
    "tokenize",
]
