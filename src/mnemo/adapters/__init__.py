"""Concrete adapter implementations."""

from .base_embedder import BaseEmbedder, EmbedBatchResult, HttpEmbedder
from .fastembed_provider import FastEmbedProvider
from .ollama_embedder import OllamaEmbedder
from .openai_embedder import OpenAIEmbedder
from .qdrant_vector_store import QdrantVectorStore

__all__ = [
    "BaseEmbedder",
    "EmbedBatchResult",
    "FastEmbedProvider",
    "HttpEmbedder",
    "OllamaEmbedder",
    "OpenAIEmbedder",
    "QdrantVectorStore",
]
