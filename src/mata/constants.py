"""Defaults for Mata.

Every tunable has an environment variable read in mata.config; the values
here apply when that variable is unset.
"""

import os

# --- Chunking -------------------------------------------------------------
DEFAULT_CHUNK_SIZE = 1000  # characters
DEFAULT_CHUNK_OVERLAP = 200  # characters of the previous chunk repeated

# --- Vector search --------------------------------------------------------
DEFAULT_EMBEDDING_DIMENSIONS = 4096  # output size of llama2 embeddings
DEFAULT_SIMILARITY_THRESHOLD = 0.7
DEFAULT_MAX_RESULTS = 5
DEFAULT_EMBEDDING_CONCURRENCY = 4  # in-flight embedding requests per batch

# --- Chat search ----------------------------------------------------------
DEFAULT_CHAT_SEARCH_LIMIT = 5
INDEXABLE_ROLES = ("user", "assistant", "error")

# --- Clients --------------------------------------------------------------
MAX_UPLOAD_SIZE_BYTES = 50 * 1024 * 1024
CONTENT_PREVIEW_LENGTH = 200  # characters of a hit shown by the CLI

# --- Endpoints and paths --------------------------------------------------
DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_MCP_HOST = "0.0.0.0"
DEFAULT_MCP_PORT = 8001
DEFAULT_LOCAL_MCP_URL = f"http://localhost:{DEFAULT_MCP_PORT}/sse"
DEFAULT_CHAT_DB_PATH = os.path.join(os.path.expanduser("~"), ".mata", "chats.db")

# --- Embedding models -----------------------------------------------------
DEFAULT_EMBEDDING_BACKEND = "ollama"
EMBEDDING_DEFAULTS = {
    "ollama": "llama2",
    "gemini": "text-embedding-004",
}


def get_embedding_model(service: str | None = None) -> str:
    """Resolve the embedding model name.

    EMBEDDING_MODEL wins when set. Otherwise the default for `service` is
    used (LLM_SERVICE when service is None); unknown backends fall back to
    the Ollama default.
    """
    override = os.getenv("EMBEDDING_MODEL")
    if override:
        return override
    backend = service or os.getenv("LLM_SERVICE", DEFAULT_EMBEDDING_BACKEND)
    return EMBEDDING_DEFAULTS.get(backend, EMBEDDING_DEFAULTS[DEFAULT_EMBEDDING_BACKEND])
