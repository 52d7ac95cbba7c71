"""Embedding backend abstraction layer for mata.

This package provides a unified interface for embedding providers:
- OllamaService: Local embeddings via Ollama
- GeminiService: Google Gemini API

All services implement the EmbeddingBackend protocol.

Usage:
    from mata.llm import get_llm_service

    # Create backend from environment config
    backend = get_llm_service()

    # Or with explicit config
    backend = get_llm_service({"service": "ollama", "host": "http://localhost:11434"})
"""

from mata.llm.base import EmbeddingBackend
from mata.llm.factory import get_llm_service
from mata.llm.gemini import GeminiService
from mata.llm.ollama import OllamaService

__all__ = [
    "EmbeddingBackend",
    "OllamaService",
    "GeminiService",
    "get_llm_service",
]
