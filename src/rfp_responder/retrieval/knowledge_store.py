"""Knowledge store: ingested reference documents and their chunk embeddings."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from rfp_responder.config import ChunkingConfig
from rfp_responder.errors import EmbeddingUnavailable
from rfp_responder.ingest.chunker import SentenceChunker
from rfp_responder.obs.progress import ProgressSink, Timer, report
from rfp_responder.storage.codec import decode_entries, encode_entries
from rfp_responder.storage.kv import KeyValueStore
from rfp_responder.types import Chunk, KnowledgeEntry, ProcessingStatus, new_id

logger = logging.getLogger(__name__)

EmbedFn = Callable[[str], list[float]]

KNOWLEDGEBASE_KEY = "knowledgebase"

# Uploading, Extracting Text, Generating Embeddings, Indexing, Finalizing.
_INGEST_STEPS = 5


class KnowledgeStore:
    """Owns every `KnowledgeEntry` and exposes a flattened chunk view.

    Ingestion is all-or-nothing. Every embedding is computed before the
    entry is inserted, so readers never observe a partially embedded entry.
    Inserts and deletes take a single writer lock, and readers copy the
    entry list under the same lock.

    When a `KeyValueStore` backend is given, entries are loaded from it
    lazily and saved after each mutation.
    """

    def __init__(
        self,
        backend: KeyValueStore | None = None,
        *,
        chunker: SentenceChunker | None = None,
        config: ChunkingConfig | None = None,
    ) -> None:
        self.config = config or ChunkingConfig()
        self.chunker = chunker or SentenceChunker(self.config)
        self._backend = backend
        self._entries: dict[str, KnowledgeEntry] = {}
        self._loaded = backend is None
        self._lock = threading.Lock()
        self.requires_reembedding = False

    def ingest(
        self,
        file_name: str,
        raw_text: str,
        embed_fn: EmbedFn,
        *,
        size_bytes: int | None = None,
        progress: ProgressSink | None = None,
    ) -> KnowledgeEntry:
        """Chunk, embed and record one source document.

        Args:
            file_name: Name of the uploaded source file.
            raw_text: Extracted plain text of the document.
            embed_fn: External embedding call, one invocation per text.
            size_bytes: Original upload size. Defaults to the UTF-8 size of
                `raw_text`.
            progress: Optional sink for ingestion checkpoints.

        Raises:
            EmbeddingUnavailable: any embedding call failed. The store is
                left unchanged.
        """

        entry_id = new_id()
        report(
            progress,
            "Generating Embeddings",
            2,
            _INGEST_STEPS,
            "Creating document embedding...",
        )

        with Timer() as timer:
            document_embedding = _embed(
                embed_fn, raw_text[: self.config.embed_char_budget]
            )
            spans = self.chunker.chunk_spans(raw_text)
            report(
                progress,
                "Indexing",
                3,
                _INGEST_STEPS,
                f"Generating embeddings for {len(spans)} chunks...",
            )

            chunks: list[Chunk] = []
            for i, span in enumerate(spans):
                report(
                    progress,
                    "Indexing",
                    3,
                    _INGEST_STEPS,
                    f"Processing chunk {i + 1} of {len(spans)}...",
                )
                chunks.append(
                    Chunk(
                        id=new_id(),
                        entry_id=entry_id,
                        index=i,
                        text=span.text,
                        embedding=_embed(embed_fn, span.text),
                        start_position=span.start,
                        end_position=span.end,
                    )
                )
        logger.debug(
            "Embedded %s (%d chunks) in %.1f ms", file_name, len(chunks), timer.elapsed_ms
        )

        entry = KnowledgeEntry(
            id=entry_id,
            file_name=file_name,
            original_text=raw_text,
            original_embedding=document_embedding,
            chunks=chunks,
            size_bytes=(
                size_bytes if size_bytes is not None else len(raw_text.encode("utf-8"))
            ),
        )

        report(progress, "Finalizing", 4, _INGEST_STEPS, "Saving to knowledgebase...")
        with self._lock:
            self._ensure_loaded()
            self._entries[entry.id] = entry
            try:
                self._save()
            except Exception:
                del self._entries[entry.id]
                raise

        logger.info("Added %s with %d chunks to knowledgebase", file_name, len(chunks))
        report(
            progress,
            "Complete",
            _INGEST_STEPS,
            _INGEST_STEPS,
            f"Added {file_name} with {len(chunks)} chunks to knowledgebase.",
            ProcessingStatus.COMPLETED,
        )
        return entry

    def list_entries(self) -> list[KnowledgeEntry]:
        with self._lock:
            self._ensure_loaded()
            return list(self._entries.values())

    def get(self, entry_id: str) -> KnowledgeEntry:
        with self._lock:
            self._ensure_loaded()
            entry = self._entries.get(entry_id)
        if entry is None:
            raise KeyError(f"Knowledge entry not found: {entry_id}")
        return entry

    def delete(self, entry_id: str) -> None:
        """Remove an entry and its chunks. Unknown ids are ignored."""
        with self._lock:
            self._ensure_loaded()
            removed = self._entries.pop(entry_id, None)
            if removed is None:
                return
            try:
                self._save()
            except Exception:
                self._entries[entry_id] = removed
                raise
        logger.info("Deleted knowledge entry %s (%s)", entry_id, removed.file_name)

    def all_chunks_with_source(self) -> list[tuple[Chunk, str]]:
        """Snapshot of every chunk paired with its source file name."""
        entries = self.list_entries()
        return [(chunk, entry.file_name) for entry in entries for chunk in entry.chunks]

    def mark_requires_reembedding(self) -> None:
        if not self.requires_reembedding:
            logger.warning(
                "Knowledge store embeddings are incompatible with the current "
                "embedding provider; documents must be re-ingested"
            )
        self.requires_reembedding = True

    def __len__(self) -> int:
        return len(self.list_entries())

    def _ensure_loaded(self) -> None:
        if self._loaded or self._backend is None:
            return
        # A failing read leaves the store unloaded so the next access retries.
        payload = self._backend.get(KNOWLEDGEBASE_KEY)
        if payload is None:
            self._loaded = True
            return
        try:
            entries = decode_entries(payload)
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Discarding unreadable knowledgebase payload: %s", exc)
            self._loaded = True
            return
        self._entries = {entry.id: entry for entry in entries}
        self._loaded = True
        logger.info("Loaded %d knowledge entries", len(self._entries))

    def _save(self) -> None:
        if self._backend is None:
            return
        self._backend.set(KNOWLEDGEBASE_KEY, encode_entries(list(self._entries.values())))


def _embed(embed_fn: EmbedFn, text: str) -> list[float]:
    try:
        return list(embed_fn(text))
    except EmbeddingUnavailable:
        raise
    except Exception as exc:
        raise EmbeddingUnavailable(f"Embedding request failed: {exc}") from exc
