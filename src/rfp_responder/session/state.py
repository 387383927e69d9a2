"""Reviewable state of the RFP currently being answered."""

from __future__ import annotations

import json
import logging
import threading

from rfp_responder.storage.codec import dumps, question_from_dict, question_to_dict
from rfp_responder.storage.kv import InMemoryKeyValueStore, KeyValueStore
from rfp_responder.types import AnsweredQuestion, RfpResult

logger = logging.getLogger(__name__)

STATE_KEY = "rfp_state"


class RfpSession:
    """Holds the processed questions, summary and project metadata.

    Reviewers edit answers here between processing and export. The state is
    written through to the key-value backend after each change.
    """

    def __init__(self, backend: KeyValueStore | None = None) -> None:
        self._backend = backend or InMemoryKeyValueStore()
        self._lock = threading.Lock()
        self.project_name = ""
        self.file_name = ""
        self.summary = ""
        self.questions: list[AnsweredQuestion] = []
        self._load()

    @property
    def has_questions(self) -> bool:
        return bool(self.questions)

    def replace(self, result: RfpResult, *, project_name: str = "") -> None:
        with self._lock:
            self.project_name = project_name
            self.file_name = result.file_name
            self.summary = result.summary
            self.questions = list(result.questions)
            self._save()

    def get_question(self, index: int) -> AnsweredQuestion:
        for question in self.questions:
            if question.index == index:
                return question
        raise KeyError(f"Question not found: {index}")

    def update_answer(self, index: int, answer: str) -> AnsweredQuestion:
        with self._lock:
            question = self.get_question(index)
            question.edited_answer = answer
            self._save()
        return question

    def put_question(self, question: AnsweredQuestion) -> None:
        with self._lock:
            self.get_question(question.index)
            self.questions = [
                question if existing.index == question.index else existing
                for existing in self.questions
            ]
            self._save()

    def set_summary(self, summary: str) -> None:
        with self._lock:
            self.summary = summary
            self._save()

    def clear(self) -> None:
        with self._lock:
            self.project_name = ""
            self.file_name = ""
            self.summary = ""
            self.questions = []
            self._backend.delete(STATE_KEY)

    def _save(self) -> None:
        payload = {
            "project_name": self.project_name,
            "file_name": self.file_name,
            "summary": self.summary,
            "questions": [question_to_dict(question) for question in self.questions],
        }
        self._backend.set(STATE_KEY, dumps(payload))

    def _load(self) -> None:
        payload = self._backend.get(STATE_KEY)
        if payload is None:
            return
        try:
            data = json.loads(payload.decode("utf-8"))
            questions = [question_from_dict(item) for item in data.get("questions", [])]
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Discarding unreadable RFP session state: %s", exc)
            return
        self.project_name = str(data.get("project_name", ""))
        self.file_name = str(data.get("file_name", ""))
        self.summary = str(data.get("summary", ""))
        self.questions = questions
        logger.info("Loaded RFP session with %d questions", len(questions))
