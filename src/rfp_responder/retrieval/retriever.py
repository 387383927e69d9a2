"""Exhaustive cosine-similarity retriever over the knowledge store."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from rfp_responder.config import RetrievalConfig
from rfp_responder.errors import DimensionMismatch
from rfp_responder.retrieval.knowledge_store import KnowledgeStore
from rfp_responder.retrieval.similarity import cosine_similarity
from rfp_responder.types import RetrievedMatch

logger = logging.getLogger(__name__)


class Retriever:
    """Ranks every stored chunk against a query embedding.

    Ranking is a stable descending sort, so chunks with equal scores keep
    the store's insertion order and results are reproducible.
    """

    def __init__(
        self,
        store: KnowledgeStore,
        config: RetrievalConfig | None = None,
    ) -> None:
        self.store = store
        self.config = config or RetrievalConfig()

    def retrieve(
        self,
        query_embedding: Sequence[float],
        top_k: int | None = None,
    ) -> list[RetrievedMatch]:
        limit = self.config.top_k if top_k is None else top_k
        if limit < 0:
            raise ValueError("top_k must not be negative")
        if limit == 0:
            return []

        candidates = self.store.all_chunks_with_source()
        try:
            scored = [
                RetrievedMatch(
                    chunk_id=chunk.id,
                    chunk_text=chunk.text,
                    score=cosine_similarity(query_embedding, chunk.embedding),
                    source_file_name=source,
                )
                for chunk, source in candidates
            ]
        except DimensionMismatch:
            self.store.mark_requires_reembedding()
            raise

        ranked = sorted(scored, key=lambda item: item.score, reverse=True)
        logger.debug("Ranked %d chunks, returning top %d", len(ranked), limit)
        return ranked[:limit]
