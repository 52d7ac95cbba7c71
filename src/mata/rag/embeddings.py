"""Embedding of documents and queries on top of an embedding backend."""

import asyncio
import logging

from mata.constants import DEFAULT_EMBEDDING_CONCURRENCY
from mata.errors import ValidationError
from mata.llm.base import EmbeddingBackend
from mata.rag.models import Document, EmbeddingOutcome

logger = logging.getLogger(__name__)


class EmbeddingService:
    """Embeds documents and queries with a single embedding model.

    Batch embedding tolerates partial failure: a document whose embedding
    fails is reported in its EmbeddingOutcome and the rest of the batch
    carries on. Query embedding failures propagate to the caller.
    """

    def __init__(
        self,
        backend: EmbeddingBackend,
        model_name: str,
        concurrency: int = DEFAULT_EMBEDDING_CONCURRENCY,
    ) -> None:
        if concurrency <= 0:
            raise ValidationError(f"concurrency must be positive, got {concurrency}")
        self.backend = backend
        self.model_name = model_name
        self.concurrency = concurrency

    def set_model(self, model_name: str) -> None:
        logger.info(f"🔁 Switching embedding model: {self.model_name} -> {model_name}")
        self.model_name = model_name

    async def generate_embedding(self, text: str) -> list[float]:
        return await self.backend.generate_embedding(self.model_name, text)

    async def embed_documents(self, documents: list[Document]) -> list[EmbeddingOutcome]:
        """Embed each document, at most `concurrency` requests at a time.

        Args:
            documents: Documents to embed

        Returns:
            list[EmbeddingOutcome]: One outcome per input document, in input order
        """
        semaphore = asyncio.Semaphore(self.concurrency)

        async def embed_one(doc: Document) -> EmbeddingOutcome:
            async with semaphore:
                try:
                    embedding = await self.generate_embedding(doc.content)
                except Exception as e:
                    logger.error(f"❌ Failed to embed document {doc.id}: {e!r}")
                    return EmbeddingOutcome(document=doc, error=str(e))
            return EmbeddingOutcome(document=doc.with_embedding(embedding))

        outcomes = await asyncio.gather(*(embed_one(doc) for doc in documents))

        failed = sum(1 for outcome in outcomes if not outcome.ok)
        logger.info(
            f"✅ Embedded {len(outcomes) - failed} of {len(outcomes)} documents "
            f"with {self.model_name}"
        )
        return list(outcomes)

    async def embed_query(self, query: str) -> list[float]:
        """Embed a search query. Errors propagate."""
        return await self.generate_embedding(query)
