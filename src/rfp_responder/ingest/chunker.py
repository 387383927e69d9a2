"""Sentence-aligned chunking implementation."""

from __future__ import annotations

import re
from dataclasses import dataclass

from rfp_responder.config import ChunkingConfig

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")


@dataclass(frozen=True, slots=True)
class ChunkSpan:
    """Chunk text plus its character offsets in the source text."""

    text: str
    start: int
    end: int


@dataclass(slots=True)
class _ChunkState:
    sentences: list[str]
    length: int
    start: int
    end: int


class SentenceChunker:
    """Packs whole sentences into chunks of bounded character length.

    Sentences are never split. A buffer of sentences grows until the next
    sentence would push it past `max_chunk_chars`, then it is flushed as a
    chunk and the sentence starts a new buffer. The limit is a soft target:
    a sentence that is longer than the limit on its own becomes a single
    oversize chunk rather than being cut mid-sentence.
    """

    def __init__(self, config: ChunkingConfig | None = None) -> None:
        self.config = config or ChunkingConfig()

    def chunk(self, text: str, max_chunk_chars: int | None = None) -> list[str]:
        """Split `text` into trimmed, non-empty chunk texts in document order."""

        return [span.text for span in self.chunk_spans(text, max_chunk_chars)]

    def chunk_spans(
        self, text: str, max_chunk_chars: int | None = None
    ) -> list[ChunkSpan]:
        """Chunk `text` and report where each chunk sits in the source.

        Args:
            text: Raw document text.
            max_chunk_chars: Soft chunk length limit. Defaults to the config.

        Returns:
            Ordered `ChunkSpan` objects. `start`/`end` bracket the first and
            last sentence of each chunk in `text`.
        """

        limit = (
            self.config.max_chunk_chars if max_chunk_chars is None else max_chunk_chars
        )
        if limit < 1:
            raise ValueError("max_chunk_chars must be positive")

        output: list[ChunkSpan] = []
        state: _ChunkState | None = None

        for sentence, start, end in self._split_sentences(text):
            # Buffer length counts the separating space after each sentence.
            if state is not None and state.length + len(sentence) > limit:
                output.append(self._finalize(state))
                state = None

            if state is None:
                state = _ChunkState(sentences=[], length=0, start=start, end=end)
            state.sentences.append(sentence)
            state.length += len(sentence) + 1
            state.end = end

        if state is not None:
            output.append(self._finalize(state))
        return output

    @staticmethod
    def _finalize(state: _ChunkState) -> ChunkSpan:
        return ChunkSpan(
            text=" ".join(state.sentences).strip(),
            start=state.start,
            end=state.end,
        )

    @staticmethod
    def _split_sentences(text: str) -> list[tuple[str, int, int]]:
        sentences: list[tuple[str, int, int]] = []
        cursor = 0
        for part in _SENTENCE_SPLIT.split(text):
            stripped = part.strip()
            if not stripped:
                cursor += len(part)
                continue
            start = text.find(stripped, cursor)
            end = start + len(stripped)
            sentences.append((stripped, start, end))
            cursor = end
        return sentences
