"""Pydantic-based runtime settings.

Loads from ``MNEMO_``-prefixed environment variables (with optional .env file).
Invalid values fail fast on first access.
"""

from __future__ import annotations

import uuid
from enum import Enum
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class EmbeddingProviderName(str, Enum):
    fastembed = "fastembed"
    openai = "openai"
    ollama = "ollama"


class MnemoSettings(BaseSettings):
    """All configuration for the SDK, CLI and MCP server, validated at startup."""

    model_config = {"env_prefix": "MNEMO_", "env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # --- Qdrant ---
    qdrant_url: str = Field(default="http://localhost:6333", description="Qdrant server URL")
    qdrant_api_key: str | None = Field(default=None, description="Qdrant API key (cloud deployments)")
    default_collection: str = Field(default="default", min_length=1, description="Collection used when none is given")

    # --- Embeddings ---
    embedding_provider: EmbeddingProviderName = Field(
        default=EmbeddingProviderName.fastembed,
        description="Which embedding backend to use: 'fastembed', 'openai' or 'ollama'",
    )
    embedding_model_id: str = Field(
        default="BAAI/bge-small-en-v1.5",
        description="Embedding model identifier",
    )
    embedding_dimension: int = Field(default=384, ge=1, description="Embedding vector dimension")

    # --- OpenAI ---
    openai_api_key: str | None = Field(default=None, description="OpenAI API key")
    openai_base_url: str = Field(default="https://api.openai.com/v1", description="OpenAI API base URL")
    openai_organization: str | None = Field(default=None, description="OpenAI-Organization header")
    openai_project: str | None = Field(default=None, description="OpenAI-Project header")
    openai_dimensions: int | None = Field(default=None, description="Requested output dimensions")

    # --- Ollama ---
    ollama_base_url: str = Field(default="http://localhost:11434", description="Ollama server URL")

    # --- ID namespace ---
    memory_id_namespace: uuid.UUID = Field(
        default=uuid.UUID("6f1c2d9e-4b7a-5e3f-9a1d-2c8b7e6f5a40"),
        description="UUID namespace for deterministic point ID generation",
    )

    # --- Limits ---
    max_top_k: int = Field(default=1000, ge=1, le=10000, description="Upper bound applied to search top_k")
    max_batch_size: int = Field(default=100, ge=1, le=10000, description="Maximum records per upsert request")
    validate_dimensions: bool = Field(default=True, description="Reject non-finite vector components")
    request_timeout_seconds: float = Field(default=30.0, gt=0, description="Per-request timeout")

    # --- Logging ---
    log_level: str = Field(default="INFO", description="Root log level for the MCP server and CLI")

    @field_validator("qdrant_url", "openai_base_url", "ollama_base_url")
    @classmethod
    def _http_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"expected an http(s) URL, got {v!r}")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {v!r}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> MnemoSettings:
    """Return the singleton MnemoSettings (cached after first call)."""
    return MnemoSettings()
