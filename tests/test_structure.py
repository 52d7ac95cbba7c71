"""Tests for the mata package structure."""


def test_package_imports():
    """The package exposes its version."""
    import mata

    assert mata.__version__ == "0.1.0"


def test_subpackages():
    import mata.client
    import mata.llm
    import mata.rag
    import mata.service
    import mata.storage

    assert mata.rag.VectorStore is not None
    assert mata.llm.get_llm_service is not None
    assert mata.storage.rebuild_index is not None


def test_error_hierarchy():
    from mata.errors import (
        EmbeddingConnectionError,
        EmbeddingError,
        MalformedResponseError,
        MataError,
        ValidationError,
    )

    assert issubclass(ValidationError, ValueError)
    assert issubclass(EmbeddingConnectionError, EmbeddingError)
    assert issubclass(EmbeddingConnectionError, ConnectionError)
    assert issubclass(MalformedResponseError, EmbeddingError)
    assert issubclass(EmbeddingError, MataError)
