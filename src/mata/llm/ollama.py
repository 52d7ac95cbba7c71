"""Ollama embedding backend."""

import logging

import httpx
import ollama

from mata.errors import EmbeddingConnectionError, EmbeddingError, MalformedResponseError
from mata.llm.base import to_vector

logger = logging.getLogger(__name__)


class OllamaService:
    """Ollama embedding backend.

    This service uses the Ollama API to embed text with locally served models.
    """

    def __init__(self, host: str) -> None:
        """Initialize the Ollama service.

        Args:
            host: The Ollama server host URL (e.g., "http://localhost:11434")
        """
        self.host = host
        logger.info(f"🤖 Initializing OllamaService: host={host}")
        self.client = ollama.AsyncClient(host=host)

    async def generate_embedding(self, model_name: str, text: str) -> list[float]:
        """Generate an embedding for a text using Ollama.

        Args:
            model_name: Embedding model served by Ollama
            text: Text to embed

        Returns:
            list[float]: The embedding vector

        Raises:
            EmbeddingConnectionError: If the Ollama server is unreachable
            MalformedResponseError: If the response has no embedding
            EmbeddingError: If Ollama reports any other error or the request
                fails in transport (timeouts, dropped connections)
        """
        try:
            response = await self.client.embed(model=model_name, input=text)
        except ollama.ResponseError as e:
            raise EmbeddingError(f"Ollama error ({e.status_code}): {e.error}") from e
        except (ConnectionError, httpx.ConnectError) as e:
            raise EmbeddingConnectionError(f"Cannot reach Ollama at {self.host}: {e}") from e
        except httpx.HTTPError as e:
            raise EmbeddingError(f"Ollama request to {self.host} failed: {e!r}") from e

        try:
            embeddings = response["embeddings"]
        except (KeyError, TypeError) as e:
            raise MalformedResponseError("Ollama response has no 'embeddings' field") from e
        if not embeddings:
            raise MalformedResponseError("Ollama response has no embeddings")

        return to_vector(embeddings[0], "Ollama")
