"""Builds the abstract response document from answered questions."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime

from rfp_responder.config import AssemblyConfig
from rfp_responder.types import (
    AnsweredQuestion,
    ProcessingStatus,
    ResponseDocument,
    utc_now,
)

_UNFINISHED = (ProcessingStatus.PENDING, ProcessingStatus.IN_PROGRESS)


class ResponseAssembler:
    """Pure transformation from answered questions to a `ResponseDocument`."""

    def __init__(self, config: AssemblyConfig | None = None) -> None:
        self.config = config or AssemblyConfig()

    def assemble(
        self,
        questions: Sequence[AnsweredQuestion],
        summary: str,
        *,
        title: str | None = None,
        generated_at: datetime | None = None,
    ) -> ResponseDocument:
        """Assemble the response document.

        Each question's answer resolves to the reviewer's edit, then the
        generated draft, then an empty string.

        Raises:
            ValueError: indices are not 1..n in order, or a question has not
                finished processing.
        """

        for position, question in enumerate(questions, start=1):
            if question.index != position:
                raise ValueError(
                    f"Question indices must be contiguous from 1: expected {position}, "
                    f"got {question.index}"
                )
            if question.status in _UNFINISHED:
                raise ValueError(
                    f"Question {question.index} has not finished processing "
                    f"(status={question.status.value})"
                )

        return ResponseDocument(
            title=title or self.config.title,
            generated_at=generated_at or utc_now(),
            summary=summary or "",
            questions=[
                replace(question, edited_answer=question.answer) for question in questions
            ],
        )
