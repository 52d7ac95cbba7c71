"""Configuration for the retrieval engine and its services."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from mata.constants import (
    DEFAULT_CHAT_DB_PATH,
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_EMBEDDING_BACKEND,
    DEFAULT_EMBEDDING_CONCURRENCY,
    DEFAULT_EMBEDDING_DIMENSIONS,
    DEFAULT_LOCAL_MCP_URL,
    DEFAULT_MAX_RESULTS,
    DEFAULT_MCP_HOST,
    DEFAULT_MCP_PORT,
    DEFAULT_OLLAMA_HOST,
    DEFAULT_SIMILARITY_THRESHOLD,
    get_embedding_model,
)
from mata.errors import ValidationError

# Load environment variables
load_dotenv()


@dataclass(frozen=True)
class VectorStoreOptions:
    """Settings for a VectorStore.

    Attributes:
        dimensions: Required length of every stored and queried embedding
        similarity_threshold: Minimum cosine similarity for a search hit
        max_results: Result count used when search() is called without a limit
    """

    dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    max_results: int = DEFAULT_MAX_RESULTS

    def __post_init__(self) -> None:
        if self.dimensions <= 0:
            raise ValidationError(f"dimensions must be positive, got {self.dimensions}")
        if not -1.0 <= self.similarity_threshold <= 1.0:
            raise ValidationError(
                f"similarity_threshold must be within [-1, 1], got {self.similarity_threshold}"
            )
        if self.max_results <= 0:
            raise ValidationError(f"max_results must be positive, got {self.max_results}")

    @classmethod
    def from_env(cls) -> "VectorStoreOptions":
        """Build options from EMBEDDING_DIMENSIONS, SIMILARITY_THRESHOLD and MAX_RESULTS."""
        return cls(
            dimensions=int(os.getenv("EMBEDDING_DIMENSIONS", str(DEFAULT_EMBEDDING_DIMENSIONS))),
            similarity_threshold=float(
                os.getenv("SIMILARITY_THRESHOLD", str(DEFAULT_SIMILARITY_THRESHOLD))
            ),
            max_results=int(os.getenv("MAX_RESULTS", str(DEFAULT_MAX_RESULTS))),
        )


@dataclass(frozen=True)
class ProcessingOptions:
    """Settings for the chunker.

    Attributes:
        chunk_size: Soft upper bound on chunk length, in characters
        chunk_overlap: Characters of the previous chunk prepended to the next one
        include_metadata: Copy title and page number onto each chunk
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP
    include_metadata: bool = True

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValidationError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.chunk_overlap < 0:
            raise ValidationError(f"chunk_overlap must not be negative, got {self.chunk_overlap}")

    @classmethod
    def from_env(cls) -> "ProcessingOptions":
        """Build options from CHUNK_SIZE and CHUNK_OVERLAP."""
        return cls(
            chunk_size=int(os.getenv("CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE))),
            chunk_overlap=int(os.getenv("CHUNK_OVERLAP", str(DEFAULT_CHUNK_OVERLAP))),
        )


class ServiceConfig:
    """Configuration class for backend and service connection details."""

    @staticmethod
    def get_llm_service() -> str:
        """Get the embedding backend name (default: ollama)."""
        return os.getenv("LLM_SERVICE", DEFAULT_EMBEDDING_BACKEND)

    @staticmethod
    def get_ollama_host() -> str:
        """Get the Ollama server URL (default: http://localhost:11434)."""
        return os.getenv("OLLAMA_HOST", DEFAULT_OLLAMA_HOST)

    @staticmethod
    def get_embedding_model() -> str:
        """Get the embedding model for the configured backend."""
        return get_embedding_model(ServiceConfig.get_llm_service())

    @staticmethod
    def get_embedding_concurrency() -> int:
        """Get the maximum number of parallel embedding requests per batch."""
        return int(os.getenv("EMBEDDING_CONCURRENCY", str(DEFAULT_EMBEDDING_CONCURRENCY)))

    @staticmethod
    def get_chat_db_path() -> Path:
        """Get the path of the desktop app's chat database."""
        return Path(os.getenv("CHAT_DB_PATH", DEFAULT_CHAT_DB_PATH))

    @staticmethod
    def get_mcp_url() -> str:
        """Get the URL clients use to reach the MCP server."""
        return os.getenv("LOCAL_MCP_SERVER_URL", DEFAULT_LOCAL_MCP_URL)

    @staticmethod
    def get_mcp_bind() -> tuple[str, int]:
        """Get the (host, port) pair the MCP server listens on."""
        return os.getenv("MCP_HOST", DEFAULT_MCP_HOST), int(
            os.getenv("MCP_PORT", str(DEFAULT_MCP_PORT))
        )
