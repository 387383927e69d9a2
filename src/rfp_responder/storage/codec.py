"""JSON codecs for persisted knowledge entries and answered questions."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from typing import Any

from rfp_responder.types import (
    AnsweredQuestion,
    Chunk,
    KnowledgeEntry,
    ProcessingStatus,
    RetrievedMatch,
)


def encode_entries(entries: list[KnowledgeEntry]) -> bytes:
    return dumps([entry_to_dict(entry) for entry in entries])


def decode_entries(payload: bytes) -> list[KnowledgeEntry]:
    raw = json.loads(payload.decode("utf-8"))
    if not isinstance(raw, list):
        raise ValueError("knowledge payload must be a JSON list")
    return [entry_from_dict(item) for item in raw]


def entry_to_dict(entry: KnowledgeEntry) -> dict[str, Any]:
    data = asdict(entry)
    data["created_at"] = entry.created_at.isoformat()
    return data


def entry_from_dict(data: dict[str, Any]) -> KnowledgeEntry:
    return KnowledgeEntry(
        id=str(data["id"]),
        file_name=str(data["file_name"]),
        original_text=str(data.get("original_text", "")),
        original_embedding=[float(v) for v in data.get("original_embedding", [])],
        chunks=[_chunk_from_dict(item) for item in data.get("chunks", [])],
        created_at=datetime.fromisoformat(data["created_at"]),
        size_bytes=int(data.get("size_bytes", 0)),
    )


def question_to_dict(question: AnsweredQuestion) -> dict[str, Any]:
    data = asdict(question)
    data["status"] = question.status.value
    return data


def question_from_dict(data: dict[str, Any]) -> AnsweredQuestion:
    return AnsweredQuestion(
        index=int(data["index"]),
        question_text=str(data["question_text"]),
        embedding=[float(v) for v in data.get("embedding", [])],
        generated_answer=str(data.get("generated_answer", "")),
        edited_answer=str(data.get("edited_answer", "")),
        context=[RetrievedMatch(**item) for item in data.get("context", [])],
        confidence=float(data.get("confidence", 0.0)),
        status=ProcessingStatus(data.get("status", ProcessingStatus.PENDING.value)),
    )


def _chunk_from_dict(data: dict[str, Any]) -> Chunk:
    return Chunk(
        id=str(data["id"]),
        entry_id=str(data["entry_id"]),
        index=int(data["index"]),
        text=str(data["text"]),
        embedding=[float(v) for v in data.get("embedding", [])],
        start_position=data.get("start_position"),
        end_position=data.get("end_position"),
    )


def dumps(payload: Any) -> bytes:
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")
