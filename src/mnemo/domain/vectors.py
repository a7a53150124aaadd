"""Plain-Python helpers for embedding vectors."""

from __future__ import annotations

import math
from collections.abc import Sequence

from ..ports.embedding import EmbedderError


def validate_embedding_dimensions(embeddings: Sequence[Sequence[float]]) -> None:
    """Raise if the embeddings do not all share the first one's length."""
    if not embeddings:
        return
    expected = len(embeddings[0])
    for index, embedding in enumerate(embeddings[1:], start=1):
        if len(embedding) != expected:
            raise EmbedderError(
                f"Inconsistent embedding dimensions: expected {expected}, "
                f"got {len(embedding)} at index {index}"
            )


def normalize_embedding(embedding: Sequence[float]) -> list[float]:
    """Scale to unit length; a zero vector is returned unchanged."""
    magnitude = math.sqrt(sum(v * v for v in embedding))
    if magnitude == 0:
        return list(embedding)
    return [v / magnitude for v in embedding]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) != len(b):
        raise EmbedderError("Embeddings must have the same dimensions for similarity calculation")
    dot = sum(x * y for x, y in zip(a, b))
    magnitude_a = math.sqrt(sum(x * x for x in a))
    magnitude_b = math.sqrt(sum(y * y for y in b))
    if magnitude_a == 0 or magnitude_b == 0:
        return 0.0
    return dot / (magnitude_a * magnitude_b)
