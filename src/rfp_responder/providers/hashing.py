"""Offline providers used when no AI backend is configured."""

from __future__ import annotations

from hashlib import blake2b
from math import sqrt

from rfp_responder.errors import CompletionUnavailable
from rfp_responder.providers.base import Completer, Embedder

NOT_CONFIGURED_MESSAGE = (
    "AI service not configured. Please configure your AI provider in settings."
)


class HashingEmbedder(Embedder):
    """Offline embedder used when no AI provider key is configured.

    Each whitespace token is hashed into one signed bucket and the vector is
    L2-normalized, so knowledge ingest and search keep working without a
    network. The vectors are not comparable with provider embeddings, so a
    knowledge base built offline must be re-ingested once a key is set.
    """

    def __init__(self, dimension: int = 256) -> None:
        self.dimension = dimension

    def embed(self, text: str) -> list[float]:
        vector = [0.0] * self.dimension
        for token in text.lower().split():
            bucket, sign = self._bucket(token)
            vector[bucket] += sign

        norm = sqrt(sum(value * value for value in vector))
        return [value / norm for value in vector] if norm else vector

    def _bucket(self, token: str) -> tuple[int, float]:
        digest = blake2b(token.encode("utf-8"), digest_size=8).digest()
        bucket = int.from_bytes(digest[:4], "little") % self.dimension
        return bucket, (-1.0 if digest[4] & 1 else 1.0)


class UnconfiguredCompleter(Completer):
    """Completer that always fails, driving the orchestrator's fallback paths."""

    def __init__(self, message: str = NOT_CONFIGURED_MESSAGE) -> None:
        self.message = message

    def complete(self, prompt: str) -> str:
        raise CompletionUnavailable(self.message)
