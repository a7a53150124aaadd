"""Adapter: OpenAI embeddings API over httpx."""

from __future__ import annotations

import os
from typing import Any

import httpx

from ..ports.embedding import (
    EmbedderAuthenticationError,
    EmbedderConnectionError,
    EmbedderModelError,
    EmbedderRateLimitError,
    EmbedderValidationError,
)
from .base_embedder import HttpEmbedder

OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
OPENAI_DEFAULT_TIMEOUT_SECONDS = 60.0

OPENAI_EMBEDDING_MODELS: dict[str, dict[str, Any]] = {
    "text-embedding-3-small": {"dimensions": 1536, "max_tokens": 8191, "supports_dimensions": True},
    "text-embedding-3-large": {"dimensions": 3072, "max_tokens": 8191, "supports_dimensions": True},
    "text-embedding-ada-002": {"dimensions": 1536, "max_tokens": 8191, "supports_dimensions": False},
}


class OpenAIEmbedder(HttpEmbedder):
    """Concrete EmbeddingProvider backed by the OpenAI ``/embeddings`` endpoint."""

    provider_name = "openai"
    default_model = "text-embedding-3-small"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str = OPENAI_DEFAULT_BASE_URL,
        organization: str | None = None,
        project: str | None = None,
        dimensions: int | None = None,
        timeout: float = OPENAI_DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise EmbedderValidationError(
                "OpenAI API key is required. Pass api_key or set OPENAI_API_KEY.",
                self.provider_name,
            )
        headers = {"Authorization": f"Bearer {api_key}"}
        if organization:
            headers["OpenAI-Organization"] = organization
        if project:
            headers["OpenAI-Project"] = project

        super().__init__(base_url, model=model, timeout=timeout, headers=headers, transport=transport)
        self.organization = organization
        self.project = project
        self.dimensions = dimensions

        if dimensions is not None:
            specs = self.model_specs()
            if specs is not None and not specs["supports_dimensions"]:
                raise EmbedderValidationError(
                    f"Model {self.model} does not support custom dimensions", self.provider_name
                )
            if dimensions <= 0:
                raise EmbedderValidationError("Dimensions must be a positive number", self.provider_name)

    def _perform_embed(self, text: str) -> list[float]:
        body: dict[str, Any] = {"input": text, "model": self.model, "encoding_format": "float"}
        if self.dimensions is not None:
            body["dimensions"] = self.dimensions
        data = self._request("POST", "/embeddings", body)

        items = data.get("data") if isinstance(data, dict) else None
        if not isinstance(items, list) or not items:
            raise EmbedderModelError("Invalid embedding response format from OpenAI", self.provider_name, self.model)
        embedding = items[0].get("embedding") if isinstance(items[0], dict) else None
        if not isinstance(embedding, list):
            raise EmbedderModelError("Invalid embedding data format from OpenAI", self.provider_name, self.model)
        return embedding

    def _raise_for_status(self, response: httpx.Response) -> None:
        error = self._error_body(response).get("error") or {}
        if not isinstance(error, dict):
            error = {"message": str(error)}
        message = error.get("message") or response.reason_phrase or "Unknown error"
        status = response.status_code

        if status == 400:
            raise EmbedderValidationError(f"Bad request: {message}", self.provider_name, error)
        if status == 401:
            raise EmbedderAuthenticationError(
                f"Authentication failed: {message}. Check your API key.", self.provider_name
            )
        if status == 403:
            raise EmbedderAuthenticationError(
                f"Forbidden: {message}. Check your API permissions.", self.provider_name
            )
        if status == 404 and "model" in message.lower():
            raise EmbedderModelError(
                f"Model not found: {self.model}. Available models: {', '.join(OPENAI_EMBEDDING_MODELS)}",
                self.provider_name,
                self.model,
            )
        if status == 429:
            raise EmbedderRateLimitError(
                f"Rate limit exceeded: {message}",
                self.provider_name,
                retry_after=_retry_after_seconds(response.headers),
            )
        if status >= 500:
            raise EmbedderConnectionError(f"Server error: {message}", self.provider_name)
        if status == 404:
            raise EmbedderConnectionError(f"Endpoint not found: {message}", self.provider_name)
        raise EmbedderConnectionError(f"HTTP {status}: {message}", self.provider_name)

    def list_models(self) -> list[dict[str, Any]]:
        data = self._request("GET", "/models")
        return list(data.get("data") or []) if isinstance(data, dict) else []

    def model_specs(self) -> dict[str, Any] | None:
        return OPENAI_EMBEDDING_MODELS.get(self.model)

    def model_dimensions(self) -> int | None:
        specs = self.model_specs()
        return self.dimensions or (specs["dimensions"] if specs else None)

    def info(self) -> dict[str, Any]:
        return {
            **super().info(),
            "organization": self.organization,
            "project": self.project,
            "dimensions": self.dimensions,
            "expected_dimensions": self.model_dimensions(),
        }


def _retry_after_seconds(headers: httpx.Headers) -> int | None:
    value = headers.get("retry-after")
    if value is None:
        return None
    try:
        return max(0, int(float(value)))
    except ValueError:
        return None
