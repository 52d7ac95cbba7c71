"""Application context: one explicitly owned set of engine components."""

import logging
from dataclasses import dataclass

from mata.config import ProcessingOptions, ServiceConfig, VectorStoreOptions
from mata.llm import get_llm_service
from mata.llm.base import EmbeddingBackend
from mata.rag.chat_index import ChatIndex
from mata.rag.chunker import DocumentProcessor
from mata.rag.embeddings import EmbeddingService
from mata.rag.service import RetrievalService
from mata.rag.vector_store import VectorStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """The vector store, chat index and services of one application session.

    Each context owns its stores; two contexts never share state.
    """

    store: VectorStore
    chat_index: ChatIndex
    embeddings: EmbeddingService
    retrieval: RetrievalService


def create_context(
    backend: EmbeddingBackend | None = None,
    vector_options: VectorStoreOptions | None = None,
    processing_options: ProcessingOptions | None = None,
    model_name: str | None = None,
    concurrency: int | None = None,
) -> AppContext:
    """Build a fresh context, filling unset arguments from the environment.

    Args:
        backend: Embedding backend (default: from get_llm_service())
        vector_options: Vector store settings (default: VectorStoreOptions.from_env())
        processing_options: Chunker settings (default: ProcessingOptions.from_env())
        model_name: Embedding model (default: ServiceConfig.get_embedding_model())
        concurrency: Parallel embedding requests (default: from EMBEDDING_CONCURRENCY)

    Returns:
        AppContext: Components wired together with empty stores
    """
    if backend is None:
        backend = get_llm_service()
    if vector_options is None:
        vector_options = VectorStoreOptions.from_env()
    if processing_options is None:
        processing_options = ProcessingOptions.from_env()
    if model_name is None:
        model_name = ServiceConfig.get_embedding_model()
    if concurrency is None:
        concurrency = ServiceConfig.get_embedding_concurrency()

    store = VectorStore(vector_options)
    embeddings = EmbeddingService(backend, model_name, concurrency=concurrency)
    retrieval = RetrievalService(DocumentProcessor(processing_options), embeddings, store)

    logger.info(
        f"🔧 Context ready: model={model_name}, dimensions={vector_options.dimensions}, "
        f"threshold={vector_options.similarity_threshold}"
    )
    return AppContext(
        store=store,
        chat_index=ChatIndex(),
        embeddings=embeddings,
        retrieval=retrieval,
    )
