"""Base protocol and helpers for embedding backends."""

import logging
import numbers
from typing import Any, Protocol

from mata.errors import MalformedResponseError

logger = logging.getLogger(__name__)


class EmbeddingBackend(Protocol):
    """Protocol defining the interface for embedding backends.

    Implementations talk to a model server and turn text into a fixed-length
    vector. They raise EmbeddingConnectionError when the server cannot be
    reached and MalformedResponseError when it answers without a vector.
    """

    async def generate_embedding(self, model_name: str, text: str) -> list[float]:
        """Generate an embedding for a single text.

        Args:
            model_name: Embedding model to use (e.g., "llama2")
            text: Text to embed

        Returns:
            list[float]: The embedding vector
        """
        ...


def to_vector(values: Any, backend: str) -> list[float]:
    """Validate a raw embedding payload and convert it to a list of floats.

    Args:
        values: The vector as returned by the backend
        backend: Backend name, used in the error message

    Returns:
        list[float]: The validated vector

    Raises:
        MalformedResponseError: If values is not a non-empty sequence of numbers
    """
    if not isinstance(values, (list, tuple)) or not values:
        raise MalformedResponseError(f"{backend} response did not contain an embedding vector")
    if not all(isinstance(v, numbers.Real) and not isinstance(v, bool) for v in values):
        raise MalformedResponseError(f"{backend} embedding contains non-numeric values")
    return [float(v) for v in values]
