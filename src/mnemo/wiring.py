"""Composition root: the single place where adapters are wired together.

Call ``build_memory_service()`` to get a fully-constructed service with real
adapters. No ad-hoc construction elsewhere.
"""

from __future__ import annotations

from .adapters.base_embedder import BaseEmbedder
from .adapters.fastembed_provider import FastEmbedProvider
from .adapters.ollama_embedder import OllamaEmbedder
from .adapters.openai_embedder import OpenAIEmbedder
from .adapters.qdrant_vector_store import QdrantVectorStore
from .config.runtime import EmbeddingProviderName, MnemoSettings, get_settings
from .services.memory_service import MemoryService


def build_embedding_provider(settings: MnemoSettings | None = None) -> BaseEmbedder:
    """Construct the embedder selected by ``embedding_provider``."""
    settings = settings or get_settings()
    timeout = settings.request_timeout_seconds
    if settings.embedding_provider == EmbeddingProviderName.openai:
        return OpenAIEmbedder(
            api_key=settings.openai_api_key,
            model=settings.embedding_model_id,
            base_url=settings.openai_base_url,
            organization=settings.openai_organization,
            project=settings.openai_project,
            dimensions=settings.openai_dimensions,
            timeout=timeout,
        )
    if settings.embedding_provider == EmbeddingProviderName.ollama:
        return OllamaEmbedder(
            base_url=settings.ollama_base_url,
            model=settings.embedding_model_id,
            timeout=timeout,
        )
    return FastEmbedProvider(model_id=settings.embedding_model_id, timeout=timeout)


def build_memory_service(settings: MnemoSettings | None = None) -> MemoryService:
    """Construct a MemoryService with real adapters."""
    settings = settings or get_settings()
    return MemoryService(
        vector_store=QdrantVectorStore(settings),
        embedding_provider=build_embedding_provider(settings),
        default_collection=settings.default_collection,
        validate_dimensions=settings.validate_dimensions,
        max_batch_size=settings.max_batch_size,
        embedding_dimension=settings.openai_dimensions or settings.embedding_dimension,
    )
