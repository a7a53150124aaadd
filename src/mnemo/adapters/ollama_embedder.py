"""Adapter: Ollama embeddings over httpx (local or remote server)."""

from __future__ import annotations

from typing import Any

import httpx

from ..ports.embedding import (
    EmbedderAuthenticationError,
    EmbedderConnectionError,
    EmbedderModelError,
    EmbedderValidationError,
)
from .base_embedder import HttpEmbedder

OLLAMA_DEFAULT_BASE_URL = "http://localhost:11434"

OLLAMA_EMBEDDING_MODELS: dict[str, dict[str, Any]] = {
    "nomic-embed-text": {"dimensions": 768, "max_tokens": 8192},
    "mxbai-embed-large": {"dimensions": 1024, "max_tokens": 512},
    "all-minilm": {"dimensions": 384, "max_tokens": 256},
}


class OllamaEmbedder(HttpEmbedder):
    """Concrete EmbeddingProvider backed by an Ollama server."""

    provider_name = "ollama"
    default_model = "nomic-embed-text"

    def __init__(
        self,
        base_url: str = OLLAMA_DEFAULT_BASE_URL,
        model: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(base_url, model=model, timeout=timeout, transport=transport)

    def _perform_embed(self, text: str) -> list[float]:
        data = self._request("POST", "/api/embeddings", {"model": self.model, "prompt": text})
        embedding = data.get("embedding") if isinstance(data, dict) else None
        if not isinstance(embedding, list):
            raise EmbedderModelError("Invalid embedding response format from Ollama", self.provider_name, self.model)
        return embedding

    def _raise_for_status(self, response: httpx.Response) -> None:
        message = str(self._error_body(response).get("error") or response.reason_phrase or "Unknown error")
        status = response.status_code

        if status == 400:
            raise EmbedderValidationError(f"Bad request: {message}", self.provider_name)
        if status == 401:
            raise EmbedderAuthenticationError(f"Authentication failed: {message}", self.provider_name)
        if status == 404 and "model" in message.lower():
            raise EmbedderModelError(
                f"Model not found: {self.model}. Make sure the model is pulled in Ollama.",
                self.provider_name,
                self.model,
            )
        if status == 404:
            raise EmbedderConnectionError(f"Endpoint not found: {message}", self.provider_name)
        if status >= 500:
            raise EmbedderConnectionError(f"Server error: {message}", self.provider_name)
        raise EmbedderConnectionError(f"HTTP {status}: {message}", self.provider_name)

    def list_models(self) -> list[dict[str, Any]]:
        data = self._request("GET", "/api/tags")
        return list(data.get("models") or []) if isinstance(data, dict) else []

    def is_model_available(self, model: str | None = None) -> bool:
        target = model or self.model
        # Ollama reports pulled models with a tag, e.g. "nomic-embed-text:latest".
        return any(m.get("name") in (target, f"{target}:latest") for m in self.list_models())

    def health_check(self) -> dict[str, Any]:
        """Return the server version payload; raises EmbedderConnectionError if unreachable."""
        return self._request("GET", "/api/version")

    def model_dimensions(self) -> int | None:
        specs = OLLAMA_EMBEDDING_MODELS.get(self.model)
        return specs["dimensions"] if specs else None

    def info(self) -> dict[str, Any]:
        return {**super().info(), "expected_dimensions": self.model_dimensions()}
