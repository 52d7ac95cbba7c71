"""Retrieval service: ingestion, querying and prompt assembly."""

import logging
from dataclasses import dataclass, field
from typing import Any

from mata.errors import ValidationError
from mata.rag.chunker import DocumentProcessor
from mata.rag.embeddings import EmbeddingService
from mata.rag.models import (
    DOCUMENT_TYPES,
    Document,
    DocumentMetadata,
    IngestionResult,
    MetadataFilter,
    RAGResult,
)
from mata.rag.vector_store import VectorStore

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
Context information is below.
---------------------
{context}
---------------------
Given the context information and no prior knowledge, answer the following query:
{query}

If the context doesn't contain relevant information to answer the query, say so. Do not make up information that is not supported by the context.
"""


@dataclass
class KnowledgeItem:
    """One piece of content for bulk ingestion."""

    content: str
    type: str = "text"
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)


def format_context(documents: list[Document]) -> str:
    """Render documents as the context block of the prompt."""
    blocks = []
    for doc in documents:
        source = f" (from {doc.metadata.source})" if doc.metadata.source else ""
        blocks.append(f"---\n{doc.content}{source}\n")
    return "\n".join(blocks)


class RetrievalService:
    """Orchestrates chunking, embedding and vector search.

    The prompt produced by generate_prompt is consumed by an external
    generation step and must keep its instructions: answer from the
    context only, and say so when the context is insufficient.
    """

    def __init__(
        self,
        processor: DocumentProcessor,
        embeddings: EmbeddingService,
        store: VectorStore,
    ) -> None:
        self.processor = processor
        self.embeddings = embeddings
        self.store = store

    def _chunk(self, content: str, metadata: DocumentMetadata, doc_type: str) -> list[Document]:
        if doc_type == "markdown":
            return self.processor.process_markdown(content, metadata)
        if doc_type == "code":
            return self.processor.process_source_code(content, metadata)
        if doc_type == "text":
            return self.processor.process_text(content, metadata)
        raise ValidationError(
            f"Unknown document type '{doc_type}', expected one of {', '.join(DOCUMENT_TYPES)}"
        )

    async def add_document(
        self,
        content: str,
        metadata: DocumentMetadata | None = None,
        doc_type: str = "text",
    ) -> IngestionResult:
        """Chunk, embed and store a piece of content.

        Chunks whose embedding fails are returned in result.failed and are
        not stored, so they cannot be retrieved until ingested again.

        Args:
            content: Raw text, markdown or source code
            metadata: Source metadata for every chunk
            doc_type: "text", "markdown" or "code"

        Returns:
            IngestionResult: Per-chunk outcomes and the number of stored chunks

        Raises:
            ValidationError: If doc_type is unknown
        """
        documents = self._chunk(content, metadata or DocumentMetadata(), doc_type)
        outcomes = await self.embeddings.embed_documents(documents)
        stored = self.store.add_documents([outcome.document for outcome in outcomes if outcome.ok])

        result = IngestionResult(outcomes=outcomes, stored=stored)
        source = metadata.source if metadata else "unknown"
        if result.failed:
            logger.warning(
                f"⚠️ {len(result.failed)} of {len(documents)} chunks from {source} "
                "could not be embedded and were not stored"
            )
        if result.rejected:
            logger.warning(
                f"⚠️ Vector store rejected {result.rejected} embedded chunks from {source}"
            )
        logger.info(f"📥 Stored {stored} chunks from {source} ({doc_type})")
        return result

    async def query(
        self,
        query: str,
        limit: int | None = None,
        threshold: float | None = None,
        filter_metadata: MetadataFilter | None = None,
    ) -> RAGResult:
        """Find the documents most relevant to a query.

        Args:
            query: Natural-language query
            limit: Maximum number of hits (default: the store's max_results)
            threshold: Extra minimum score, applied after the store's own threshold
            filter_metadata: Keep only hits whose metadata matches

        Returns:
            RAGResult: Ranked documents with their scores

        Raises:
            EmbeddingError: If the query cannot be embedded
            ValidationError: If the query embedding has the wrong dimensions
        """
        query_embedding = await self.embeddings.embed_query(query)
        results = self.store.search(query_embedding, limit)

        if filter_metadata is not None:
            allowed_ids = {doc.id for doc in self.store.search_by_metadata(filter_metadata)}
            results = [r for r in results if r.document.id in allowed_ids]

        if threshold is not None:
            results = [r for r in results if r.score >= threshold]

        logger.info(f"🔍 Query matched {len(results)} documents")
        return RAGResult(
            documents=[r.document for r in results],
            scores=[r.score for r in results],
        )

    def generate_prompt(self, query: str, documents: list[Document]) -> str:
        """Wrap retrieved documents and the query in the answering template."""
        return PROMPT_TEMPLATE.format(context=format_context(documents), query=query)

    async def add_knowledge_base(self, items: list[KnowledgeItem]) -> list[IngestionResult]:
        """Ingest several items one after another."""
        results = []
        for item in items:
            results.append(await self.add_document(item.content, item.metadata, item.type))
        return results

    def clear_knowledge_base(self) -> None:
        self.store.clear()

    def get_stats(self) -> dict[str, Any]:
        return {"vector_store": self.store.get_stats()}
