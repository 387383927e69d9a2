"""FastAPI entrypoint for knowledge, RFP processing, review and export endpoints."""

from __future__ import annotations

import logging
import os
from dataclasses import asdict
from datetime import datetime
from typing import Any

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel, Field

from rfp_responder.assembly.assembler import ResponseAssembler
from rfp_responder.assembly.docx_writer import DOCX_MEDIA_TYPE, DocxResponseWriter
from rfp_responder.config import AIProviderSettings, OrchestrationConfig
from rfp_responder.detection.detector import QuestionDetector
from rfp_responder.errors import DimensionMismatch, EmbeddingUnavailable, UnsupportedFileType
from rfp_responder.ingest.parser import ParserRegistry
from rfp_responder.obs.progress import ProgressRecorder
from rfp_responder.orchestrator.answering import AnswerOrchestrator
from rfp_responder.providers.openai_provider import create_completer, create_embedder
from rfp_responder.retrieval.knowledge_store import KnowledgeStore
from rfp_responder.retrieval.retriever import Retriever
from rfp_responder.session.state import RfpSession
from rfp_responder.storage.codec import question_to_dict
from rfp_responder.storage.kv import InMemoryKeyValueStore, KeyValueStore, SqliteKeyValueStore
from rfp_responder.types import AnsweredQuestion, KnowledgeEntry

logging.basicConfig(level=os.getenv("RFP_LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)


def _create_backend() -> KeyValueStore:
    db_path = os.getenv("RFP_DB_PATH")
    if not db_path:
        return InMemoryKeyValueStore()
    return SqliteKeyValueStore(db_path)


class SearchRequest(BaseModel):
    query: str = Field(min_length=1)
    top_k: int = Field(default=5, ge=1, le=20)


class AnswerUpdateRequest(BaseModel):
    answer: str


app = FastAPI(title="RFP Responder", version="0.1.0")

_settings = AIProviderSettings.from_env()
_backend = _create_backend()
_parser_registry = ParserRegistry()
_embedder = create_embedder(_settings)
_completer = create_completer(_settings)
_store = KnowledgeStore(_backend)
_retriever = Retriever(_store)
_orchestrator = AnswerOrchestrator(
    retriever=_retriever,
    embedder=_embedder,
    completer=_completer,
    detector=QuestionDetector(),
    parser_registry=_parser_registry,
    config=OrchestrationConfig(),
)
_session = RfpSession(_backend)
_assembler = ResponseAssembler()
_writer = DocxResponseWriter()


@app.get("/health")
def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "ai_configured": _settings.is_configured,
        "provider": _settings.provider,
        "knowledge_entries": len(_store),
        "requires_reembedding": _store.requires_reembedding,
    }


@app.post("/knowledge")
def upload_knowledge(file: UploadFile = File(...)) -> dict[str, Any]:
    file_name = file.filename or "upload"
    data = file.file.read()
    recorder = ProgressRecorder()
    try:
        text = _parser_registry.extract(data, file_name)
        entry = _store.ingest(
            file_name,
            text,
            _embedder.embed,
            size_bytes=len(data),
            progress=recorder,
        )
    except UnsupportedFileType as exc:
        raise HTTPException(status_code=415, detail=str(exc)) from exc
    except EmbeddingUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return {**_entry_summary(entry), "progress": [asdict(e) for e in recorder.events]}


@app.get("/knowledge")
def list_knowledge() -> dict[str, Any]:
    return {"items": [_entry_summary(entry) for entry in _store.list_entries()]}


@app.get("/knowledge/{entry_id}")
def knowledge_detail(entry_id: str) -> dict[str, Any]:
    try:
        entry = _store.get(entry_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {
        **_entry_summary(entry),
        "chunks": [
            {
                "id": chunk.id,
                "index": chunk.index,
                "text": chunk.text,
                "start_position": chunk.start_position,
                "end_position": chunk.end_position,
            }
            for chunk in entry.chunks
        ],
    }


@app.delete("/knowledge/{entry_id}")
def delete_knowledge(entry_id: str) -> dict[str, Any]:
    _store.delete(entry_id)
    return {"deleted": entry_id}


@app.post("/knowledge/search")
def search_knowledge(request: SearchRequest) -> dict[str, Any]:
    try:
        embedding = _embedder.embed(request.query)
        matches = _retriever.retrieve(embedding, request.top_k)
    except EmbeddingUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except DimensionMismatch as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"items": [asdict(match) for match in matches]}


@app.post("/rfp")
def process_rfp(
    file: UploadFile = File(...),
    project_name: str = Form(default=""),
) -> dict[str, Any]:
    file_name = file.filename or "upload"
    data = file.file.read()
    recorder = ProgressRecorder()
    try:
        result = _orchestrator.process_file(data, file_name, progress=recorder)
    except UnsupportedFileType as exc:
        raise HTTPException(status_code=415, detail=str(exc)) from exc
    except DimensionMismatch as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    _session.replace(result, project_name=project_name or _default_project_name(file_name))
    return {
        **_session_payload(),
        "cancelled": result.cancelled,
        "progress": [asdict(e) for e in recorder.events],
    }


@app.get("/rfp")
def rfp_state() -> dict[str, Any]:
    return _session_payload()


@app.put("/rfp/questions/{index}")
def update_answer(index: int, request: AnswerUpdateRequest) -> dict[str, Any]:
    try:
        question = _session.update_answer(index, request.answer)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _question_payload(question)


@app.post("/rfp/questions/{index}/regenerate")
def regenerate_answer(index: int) -> dict[str, Any]:
    try:
        current = _session.get_question(index)
        question = _orchestrator.regenerate(current)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except DimensionMismatch as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    _session.put_question(question)
    return _question_payload(question)


@app.post("/rfp/summary")
def regenerate_summary() -> dict[str, Any]:
    if not _session.has_questions:
        raise HTTPException(status_code=404, detail="No RFP data available.")
    _session.set_summary(_orchestrator.summarize(_session.questions))
    return {"summary": _session.summary}


@app.get("/rfp/export")
def export_rfp() -> Response:
    if not _session.has_questions:
        raise HTTPException(
            status_code=404,
            detail="No RFP data available. Please process an RFP document first.",
        )
    try:
        document = _assembler.assemble(
            _session.questions,
            _session.summary,
            title=_session.project_name or None,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    payload = _writer.write(document)
    file_name = (
        f"{(_session.project_name or 'RFP').replace(' ', '_')}"
        f"_Response_{datetime.now():%Y%m%d}.docx"
    )
    return Response(
        content=payload,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


def _default_project_name(file_name: str) -> str:
    stem = file_name.rsplit(".", 1)[0]
    return stem or "RFP Response"


def _entry_summary(entry: KnowledgeEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "file_name": entry.file_name,
        "chunk_count": len(entry.chunks),
        "size_bytes": entry.size_bytes,
        "created_at": entry.created_at.isoformat(),
    }


def _question_payload(question: AnsweredQuestion) -> dict[str, Any]:
    payload = question_to_dict(question)
    payload.pop("embedding", None)
    payload["answer"] = question.answer
    return payload


def _session_payload() -> dict[str, Any]:
    return {
        "project_name": _session.project_name,
        "file_name": _session.file_name,
        "summary": _session.summary,
        "questions": [_question_payload(question) for question in _session.questions],
    }
