"""Construction of the configured embedding backend."""

import logging

from mata.config import ServiceConfig
from mata.llm.base import EmbeddingBackend
from mata.llm.gemini import GeminiService
from mata.llm.ollama import OllamaService

logger = logging.getLogger(__name__)


def get_llm_service(config: dict | None = None) -> EmbeddingBackend:
    """Build the embedding backend named by config or the environment.

    Args:
        config: Optional overrides. 'service' selects "ollama" or "gemini"
            (default: LLM_SERVICE); 'host' sets the Ollama URL
            (default: OLLAMA_HOST)

    Returns:
        EmbeddingBackend: A ready backend instance

    Raises:
        ValueError: If the service name is not supported
    """
    config = config or {}
    service = config.get("service") or ServiceConfig.get_llm_service()

    if service == "ollama":
        return OllamaService(host=config.get("host") or ServiceConfig.get_ollama_host())
    if service == "gemini":
        return GeminiService()

    raise ValueError(f"Unsupported service type: {service}")
