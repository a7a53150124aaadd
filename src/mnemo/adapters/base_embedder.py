"""Shared behavior for embedding providers.

``BaseEmbedder`` owns input/output validation and error wrapping so that
concrete providers only implement ``_perform_embed``. ``HttpEmbedder`` adds
a lazily created ``httpx.Client`` and transport-level error mapping for the
remote providers.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import urlparse

import httpx
from pydantic import BaseModel, Field

from ..ports.embedding import (
    EmbedderConnectionError,
    EmbedderError,
    EmbedderModelError,
    EmbedderValidationError,
)

_LOGGER = logging.getLogger(__name__)

MAX_INPUT_CHARS = 100_000
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_BATCH_SIZE = 10


class EmbedBatchResult(BaseModel):
    """Outcome of ``embed_batch``; lists are aligned with the input texts."""

    embeddings: list[list[float] | None] = Field(default_factory=list)
    errors: list[str | None] = Field(default_factory=list)
    success_count: int = 0
    failure_count: int = 0


class BaseEmbedder(ABC):
    """Base class for embedding providers."""

    provider_name = "base"
    default_model = ""

    def __init__(self, model: str | None = None, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.model = model or self.default_model
        self.timeout = timeout
        self._validate_config()

    def _validate_config(self) -> None:
        if self.timeout is None or self.timeout <= 0:
            raise EmbedderValidationError("Timeout must be greater than 0", self.provider_name)
        if not self.model or not self.model.strip():
            raise EmbedderValidationError("Model name cannot be empty", self.provider_name)

    @abstractmethod
    def _perform_embed(self, text: str) -> list[float]:
        """Return the raw embedding for one validated text."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def embed(self, text: str) -> list[float]:
        try:
            self._validate_input(text)
            result = self._perform_embed(text)
            self._validate_output(result)
            return [float(v) for v in result]
        except EmbedderError:
            raise
        except Exception as exc:
            raise EmbedderError(f"Embedding failed: {exc}", self.provider_name, exc) from exc

    def embed_batch(self, texts: list[str], batch_size: int = DEFAULT_BATCH_SIZE) -> EmbedBatchResult:
        """Embed each text in turn, collecting failures instead of raising."""
        if not texts:
            raise EmbedderValidationError("Texts list cannot be empty", self.provider_name)
        if batch_size < 1:
            raise EmbedderValidationError("Batch size must be at least 1", self.provider_name)

        result = EmbedBatchResult()
        for start in range(0, len(texts), batch_size):
            batch = texts[start:start + batch_size]
            _LOGGER.debug(
                "embed_batch_chunk",
                extra={"provider": self.provider_name, "offset": start, "size": len(batch)},
            )
            for text in batch:
                try:
                    embedding = self.embed(text)
                except EmbedderError as exc:
                    result.embeddings.append(None)
                    result.errors.append(exc.message)
                    result.failure_count += 1
                else:
                    result.embeddings.append(embedding)
                    result.errors.append(None)
                    result.success_count += 1
        return result

    def info(self) -> dict[str, Any]:
        return {"provider": self.provider_name, "model": self.model, "timeout": self.timeout}

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate_input(self, text: Any) -> None:
        if not isinstance(text, str):
            raise EmbedderValidationError("Input must be a string", self.provider_name)
        if not text.strip():
            raise EmbedderValidationError("Input text cannot be empty", self.provider_name)
        if len(text) > MAX_INPUT_CHARS:
            raise EmbedderValidationError(
                "Input text is too long (max 100,000 characters)", self.provider_name
            )

    def _validate_output(self, embedding: Any) -> None:
        if not isinstance(embedding, (list, tuple)):
            raise EmbedderError("Embedding result must be a list", self.provider_name)
        if not embedding:
            raise EmbedderError("Embedding result cannot be empty", self.provider_name)
        for value in embedding:
            if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
                raise EmbedderError("Embedding result must contain only valid numbers", self.provider_name)


class HttpEmbedder(BaseEmbedder):
    """BaseEmbedder for providers reached over HTTP with a JSON API."""

    def __init__(
        self,
        base_url: str,
        model: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(model=model, timeout=timeout)
        self.base_url = base_url.rstrip("/")
        parsed = urlparse(self.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise EmbedderValidationError(
                f"Invalid {self.provider_name} base URL: {base_url}", self.provider_name
            )
        self._headers = {"Content-Type": "application/json", **(headers or {})}
        self._transport = transport
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                headers=self._headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        """Send a request and return the decoded JSON body.

        Non-2xx responses go through ``_raise_for_status``.
        """
        try:
            response = self._get_client().request(method, path, json=payload)
        except httpx.TimeoutException as exc:
            raise EmbedderConnectionError(
                f"Request timed out after {self.timeout}s", self.provider_name, exc
            ) from exc
        except httpx.TransportError as exc:
            raise EmbedderConnectionError(
                f"Failed to connect to {self.provider_name} at {self.base_url}", self.provider_name, exc
            ) from exc

        if response.is_error:
            self._raise_for_status(response)
        try:
            return response.json()
        except ValueError as exc:
            raise EmbedderModelError(
                f"Invalid JSON response from {self.provider_name}", self.provider_name, self.model
            ) from exc

    @abstractmethod
    def _raise_for_status(self, response: httpx.Response) -> None:
        """Raise the EmbedderError matching an error response."""

    @staticmethod
    def _error_body(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    def info(self) -> dict[str, Any]:
        return {**super().info(), "base_url": self.base_url}
