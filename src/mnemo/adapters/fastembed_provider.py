"""Adapter: FastEmbed-based EmbeddingProvider."""

from __future__ import annotations

from fastembed import TextEmbedding

from .base_embedder import BaseEmbedder


class FastEmbedProvider(BaseEmbedder):
    """Concrete EmbeddingProvider backed by a local fastembed model."""

    provider_name = "fastembed"
    default_model = "BAAI/bge-small-en-v1.5"

    def __init__(self, model_id: str | None = None, timeout: float = 30.0) -> None:
        super().__init__(model=model_id, timeout=timeout)
        self._model: TextEmbedding | None = None

    def _get_model(self) -> TextEmbedding:
        if self._model is None:
            self._model = TextEmbedding(model_name=self.model)
        return self._model

    def _perform_embed(self, text: str) -> list[float]:
        vector_iter = self._get_model().embed([text])
        return next(vector_iter).tolist()
