from datetime import datetime, timezone

import pytest

from rfp_responder.assembly.assembler import ResponseAssembler
from rfp_responder.config import AssemblyConfig
from rfp_responder.types import AnsweredQuestion, ProcessingStatus


def _question(index: int, generated: str = "", edited: str = "", status=ProcessingStatus.COMPLETED):
    return AnsweredQuestion(
        index=index,
        question_text=f"Question {index}?",
        generated_answer=generated,
        edited_answer=edited,
        status=status,
    )


def test_answer_precedence_edit_then_generated_then_empty() -> None:
    questions = [
        _question(1, generated="Draft one", edited="Reviewed one"),
        _question(2, generated="Draft two"),
        _question(3, status=ProcessingStatus.FAILED),
    ]

    document = ResponseAssembler().assemble(questions, "Summary text")

    assert [q.answer for q in document.questions] == ["Reviewed one", "Draft two", ""]
    assert [q.edited_answer for q in document.questions] == ["Reviewed one", "Draft two", ""]
    assert document.summary == "Summary text"
    assert document.title == "RFP Response"


def test_assembly_is_deterministic_and_does_not_mutate_input() -> None:
    questions = [_question(1, generated="Draft")]
    generated_at = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)
    assembler = ResponseAssembler(AssemblyConfig(title="Acme Bid"))

    first = assembler.assemble(questions, "S", generated_at=generated_at)
    second = assembler.assemble(questions, "S", generated_at=generated_at)

    assert first == second
    assert first.title == "Acme Bid"
    assert questions[0].edited_answer == ""


def test_title_override() -> None:
    document = ResponseAssembler().assemble([], "", title="City Network Upgrade")

    assert document.title == "City Network Upgrade"
    assert document.questions == []


def test_non_contiguous_indices_are_rejected() -> None:
    with pytest.raises(ValueError):
        ResponseAssembler().assemble([_question(1), _question(3)], "")


def test_unfinished_questions_are_rejected() -> None:
    with pytest.raises(ValueError):
        ResponseAssembler().assemble([_question(1, status=ProcessingStatus.IN_PROGRESS)], "")
