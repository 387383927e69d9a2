"""Exception taxonomy for ingestion, retrieval and answering."""

from __future__ import annotations


class RfpResponderError(Exception):
    """Base class for all responder errors."""


class ProviderError(RfpResponderError):
    """A remote AI provider call failed (transport, auth, model or timeout)."""


class EmbeddingUnavailable(ProviderError):
    """The embedding provider could not produce a vector."""


class CompletionUnavailable(ProviderError):
    """The completion provider could not produce text."""


class DimensionMismatch(RfpResponderError, ValueError):
    """Two embeddings of different lengths were compared.

    This usually means the embedding model changed while the knowledge store
    still holds vectors from the previous one.
    """

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Embedding dimension mismatch: expected {expected}, got {actual}"
        )
        self.expected = expected
        self.actual = actual


class UnsupportedFileType(RfpResponderError, ValueError):
    """No text extractor is registered for the file's extension."""

    def __init__(self, file_name: str) -> None:
        super().__init__(
            f"File type not supported: {file_name!r}. Please upload a PDF or DOCX file."
        )
        self.file_name = file_name
