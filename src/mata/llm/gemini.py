"""Google Gemini embedding backend."""

import logging

import httpx
from google import genai
from google.genai import errors as genai_errors

from mata.errors import EmbeddingConnectionError, EmbeddingError, MalformedResponseError
from mata.llm.base import to_vector

logger = logging.getLogger(__name__)


class GeminiService:
    """Google Gemini embedding backend.

    The API key is automatically retrieved from the GEMINI_API_KEY environment variable.
    """

    def __init__(self) -> None:
        logger.info("🤖 Initializing GeminiService")
        # The client gets the API key from the GEMINI_API_KEY environment variable
        self.client = genai.Client()

    async def generate_embedding(self, model_name: str, text: str) -> list[float]:
        """Generate an embedding for a text using Gemini.

        Args:
            model_name: Gemini embedding model (e.g., "text-embedding-004")
            text: Text to embed

        Returns:
            list[float]: The embedding vector

        Raises:
            EmbeddingConnectionError: If the Gemini API is unreachable
            MalformedResponseError: If the response has no embeddings
            EmbeddingError: On API errors and other transport failures
        """
        try:
            response = await self.client.aio.models.embed_content(
                model=model_name, contents=[text]
            )
        except genai_errors.APIError as e:
            raise EmbeddingError(f"Gemini error ({e.code}): {e.message}") from e
        except httpx.ConnectError as e:
            raise EmbeddingConnectionError(f"Cannot reach Gemini: {e}") from e
        except httpx.HTTPError as e:
            raise EmbeddingError(f"Gemini request failed: {e!r}") from e

        if not response.embeddings:
            raise MalformedResponseError("Gemini response has no embeddings")

        return to_vector(response.embeddings[0].values, "Gemini")
