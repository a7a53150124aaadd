"""Port interfaces (Protocols).

Application services depend only on these, never on concrete adapters.
No Qdrant, fastembed, or HTTP client imports allowed here.
"""

from .embedding import (
    EmbedderAuthenticationError,
    EmbedderConnectionError,
    EmbedderError,
    EmbedderModelError,
    EmbedderRateLimitError,
    EmbedderValidationError,
    EmbeddingProvider,
)
from .vector_store import (
    QueryFilter,
    VectorStoreAuthenticationError,
    VectorStoreConnectionError,
    VectorStoreError,
    VectorStorePort,
    VectorStoreValidationError,
)

__all__ = [
    "EmbedderAuthenticationError",
    "EmbedderConnectionError",
    "EmbedderError",
    "EmbedderModelError",
    "EmbedderRateLimitError",
    "EmbedderValidationError",
    "EmbeddingProvider",
    "QueryFilter",
    "VectorStoreAuthenticationError",
    "VectorStoreConnectionError",
    "VectorStoreError",
    "VectorStorePort",
    "VectorStoreValidationError",
]
