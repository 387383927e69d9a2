"""Embedding and completion capability interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Embedder(ABC):
    """Embedder interface used by ingestion and question answering."""

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Embed one text. Raises `EmbeddingUnavailable` on any failure."""


class Completer(ABC):
    """Text completion interface used for answers and summaries."""

    @abstractmethod
    def complete(self, prompt: str) -> str:
        """Complete one prompt. Raises `CompletionUnavailable` on any failure."""
