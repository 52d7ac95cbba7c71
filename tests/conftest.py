"""Pytest configuration and shared fixtures for the test suite."""

from unittest.mock import AsyncMock

import pytest
import requests

from mata.config import ProcessingOptions, VectorStoreOptions
from mata.context import create_context
from mata.rag.models import Document, DocumentMetadata

# Keywords mapped onto the axes of the 3-dimensional test embeddings
KEYWORD_AXES = ("auth", "rate", "python")


# Service availability checks
def ollama_available() -> bool:
    """Check if Ollama server is running and accessible.

    Returns:
        True if Ollama is available, False otherwise
    """
    try:
        response = requests.get("http://localhost:11434/api/tags", timeout=2)
        return response.status_code == 200
    except requests.RequestException:
        return False


def keyword_embedding(text: str) -> list[float]:
    """Embed text as keyword counts along KEYWORD_AXES."""
    lowered = text.lower()
    return [float(lowered.count(keyword)) for keyword in KEYWORD_AXES]


@pytest.fixture
def keyword_backend():
    """Provide a mock embedding backend that embeds by keyword counts.

    Returns:
        AsyncMock with a generate_embedding(model_name, text) coroutine
    """
    backend = AsyncMock()
    backend.generate_embedding = AsyncMock(
        side_effect=lambda model_name, text: keyword_embedding(text)
    )
    return backend


@pytest.fixture
def small_vector_options() -> VectorStoreOptions:
    """3-dimensional store options used across tests."""
    return VectorStoreOptions(dimensions=3, similarity_threshold=0.5, max_results=5)


@pytest.fixture
def app_context(keyword_backend, small_vector_options):
    """Provide an isolated AppContext backed by the keyword backend."""
    return create_context(
        backend=keyword_backend,
        vector_options=small_vector_options,
        processing_options=ProcessingOptions(chunk_size=200, chunk_overlap=20),
        model_name="test-embed",
        concurrency=2,
    )


@pytest.fixture
def ollama_service():
    """Provide OllamaService instance, skip if Ollama not available."""
    if not ollama_available():
        pytest.skip("Ollama server not running on localhost:11434")

    from mata.llm import OllamaService

    return OllamaService(host="http://localhost:11434")


@pytest.fixture
def make_document():
    """Factory fixture to create embedded test documents.

    Returns:
        Function that creates a Document with custom parameters
    """

    def _make(
        embedding: list[float] | None,
        content: str = "Test chunk text",
        source: str = "test.txt",
        doc_type: str = "text",
        title: str | None = None,
        doc_id: str | None = None,
    ) -> Document:
        metadata = DocumentMetadata(source=source, type=doc_type, title=title, chunk_index=0)
        kwargs = {"id": doc_id} if doc_id else {}
        return Document(content=content, metadata=metadata, embedding=embedding, **kwargs)

    return _make
