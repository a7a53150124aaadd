"""Configuration package."""

from .runtime import EmbeddingProviderName, MnemoSettings, get_settings

__all__ = ["EmbeddingProviderName", "MnemoSettings", "get_settings"]
