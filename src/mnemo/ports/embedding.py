"""Port: embedding provider, and the errors providers raise."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Generate a vector embedding from text."""

    def embed(self, text: str) -> list[float]: ...


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class EmbedderError(Exception):
    """Base error for embedding operations."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        cause: object | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.cause = cause


class EmbedderValidationError(EmbedderError):
    """Bad input or configuration; never worth retrying."""


class EmbedderConnectionError(EmbedderError):
    """Provider unreachable, timed out, or failed server-side."""


class EmbedderAuthenticationError(EmbedderError):
    """Missing or rejected credentials."""


class EmbedderRateLimitError(EmbedderError):
    def __init__(
        self,
        message: str,
        provider: str | None = None,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(message, provider)
        self.retry_after = retry_after


class EmbedderModelError(EmbedderError):
    def __init__(
        self,
        message: str,
        provider: str | None = None,
        model: str | None = None,
    ) -> None:
        super().__init__(message, provider)
        self.model = model
