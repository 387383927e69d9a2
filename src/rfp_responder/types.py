"""Shared domain models."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProcessingStatus(str, Enum):
    """Lifecycle of a single question or of a whole processing run."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class Chunk:
    """A sentence-aligned span of a knowledge document with its embedding."""

    id: str
    entry_id: str
    index: int
    text: str
    embedding: list[float]
    start_position: int | None = None
    end_position: int | None = None


@dataclass(slots=True)
class KnowledgeEntry:
    """One ingested source file, its whole-document embedding and its chunks."""

    id: str
    file_name: str
    original_text: str
    original_embedding: list[float]
    chunks: list[Chunk] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    size_bytes: int = 0


@dataclass(frozen=True, slots=True)
class RetrievedMatch:
    """A knowledge chunk scored against a query embedding."""

    chunk_id: str
    chunk_text: str
    score: float
    source_file_name: str


@dataclass(slots=True)
class AnsweredQuestion:
    """A detected RFP question and the answer drafted for it."""

    index: int
    question_text: str
    embedding: list[float] = field(default_factory=list)
    generated_answer: str = ""
    edited_answer: str = ""
    context: list[RetrievedMatch] = field(default_factory=list)
    confidence: float = 0.0
    status: ProcessingStatus = ProcessingStatus.PENDING

    @property
    def answer(self) -> str:
        """The reviewer's edit when present, else the generated draft."""
        return self.edited_answer or self.generated_answer or ""


@dataclass(slots=True)
class ProcessingProgress:
    """Progress checkpoint reported to a caller-supplied sink."""

    stage: str
    current: int
    total: int
    message: str = ""
    status: ProcessingStatus = ProcessingStatus.IN_PROGRESS

    @property
    def percent_complete(self) -> float:
        if self.total <= 0:
            return 0.0
        return (self.current / self.total) * 100.0


@dataclass(slots=True)
class RfpResult:
    """Outcome of processing one RFP document."""

    file_name: str
    questions: list[AnsweredQuestion]
    summary: str
    cancelled: bool = False


@dataclass(slots=True)
class ResponseDocument:
    """Abstract response document handed to a document writer."""

    title: str
    generated_at: datetime
    summary: str
    questions: list[AnsweredQuestion]
