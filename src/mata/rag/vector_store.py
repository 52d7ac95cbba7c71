"""In-memory vector store with exact cosine similarity search."""

import logging
import threading
from collections import Counter
from typing import Any

from mata.config import VectorStoreOptions
from mata.errors import ValidationError
from mata.rag.models import Document, MetadataFilter, SearchResult
from mata.rag.utils import cosine_similarity

logger = logging.getLogger(__name__)


class VectorStore:
    """Holds embedded Documents in memory and searches them by linear scan.

    Every stored embedding has exactly `options.dimensions` entries. All
    reads and writes go through a lock so a scan never observes a
    half-applied mutation.
    """

    def __init__(self, options: VectorStoreOptions | None = None) -> None:
        self.options = options or VectorStoreOptions()
        self._documents: list[Document] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)

    def _rejection_reason(self, document: Document) -> str | None:
        if document.embedding is None:
            return "missing embedding"
        if len(document.embedding) != self.options.dimensions:
            return (
                f"embedding has {len(document.embedding)} dimensions, "
                f"expected {self.options.dimensions}"
            )
        return None

    def add_documents(self, documents: list[Document], strict: bool = False) -> int:
        """Store every document with a valid embedding.

        Args:
            documents: Documents to store
            strict: Raise instead of skipping when any document is invalid

        Returns:
            int: Number of documents accepted

        Raises:
            ValidationError: If strict and a document lacks a valid embedding.
                Nothing is stored in that case.
        """
        accepted = []
        for doc in documents:
            reason = self._rejection_reason(doc)
            if reason is None:
                accepted.append(doc)
                continue
            if strict:
                raise ValidationError(f"Document {doc.id} rejected: {reason}")
            logger.warning(f"⚠️ Skipping document {doc.id}: {reason}")

        with self._lock:
            self._documents.extend(accepted)

        logger.debug(f"Stored {len(accepted)} of {len(documents)} documents")
        return len(accepted)

    def search(self, query_embedding: list[float], limit: int | None = None) -> list[SearchResult]:
        """Find the stored documents most similar to a query embedding.

        Args:
            query_embedding: Vector of length options.dimensions
            limit: Maximum number of results (default: options.max_results)

        Returns:
            list[SearchResult]: Hits scoring at least the similarity threshold,
                best first; equal scores keep insertion order

        Raises:
            ValidationError: If the query has the wrong dimensions or limit is negative
        """
        if len(query_embedding) != self.options.dimensions:
            raise ValidationError(
                f"Query embedding has {len(query_embedding)} dimensions, "
                f"expected {self.options.dimensions}"
            )
        if limit is None:
            limit = self.options.max_results
        if limit < 0:
            raise ValidationError(f"limit must not be negative, got {limit}")

        threshold = self.options.similarity_threshold
        results = []
        with self._lock:
            for doc in self._documents:
                if doc.embedding is None:
                    continue
                score = cosine_similarity(query_embedding, doc.embedding)
                if score >= threshold:
                    results.append(SearchResult(document=doc, score=score))

        # list.sort is stable, so ties stay in insertion order
        results.sort(key=lambda result: result.score, reverse=True)
        return results[:limit]

    def search_by_metadata(self, metadata_filter: MetadataFilter) -> list[Document]:
        """Return documents whose metadata matches every field set on the filter."""
        with self._lock:
            return [doc for doc in self._documents if metadata_filter.matches(doc.metadata)]

    def get(self, document_id: str) -> Document | None:
        with self._lock:
            for doc in self._documents:
                if doc.id == document_id:
                    return doc
        return None

    def delete(self, document_id: str) -> bool:
        """Remove a document by id. Returns True if it was present."""
        with self._lock:
            before = len(self._documents)
            self._documents = [doc for doc in self._documents if doc.id != document_id]
            return len(self._documents) < before

    def clear(self) -> None:
        with self._lock:
            self._documents = []
        logger.info("🗑️ Vector store cleared")

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            distribution = Counter(doc.metadata.type for doc in self._documents)
            total = len(self._documents)
        return {
            "total_documents": total,
            "type_distribution": dict(distribution),
            "dimensions": self.options.dimensions,
        }
