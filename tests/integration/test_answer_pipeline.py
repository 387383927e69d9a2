import pytest

from rfp_responder.errors import CompletionUnavailable, DimensionMismatch, EmbeddingUnavailable
from rfp_responder.obs.progress import ProgressRecorder
from rfp_responder.orchestrator.answering import AnswerOrchestrator, CancellationToken
from rfp_responder.orchestrator.prompts import NO_CONTEXT_MESSAGE, fallback_summary
from rfp_responder.providers.base import Completer, Embedder
from rfp_responder.providers.hashing import HashingEmbedder
from rfp_responder.retrieval.knowledge_store import KnowledgeStore
from rfp_responder.retrieval.retriever import Retriever
from rfp_responder.types import ProcessingStatus

RFP_TEXT = (
    "1. What services do you offer?\n"
    "2. How much does it cost?\n"
    "3. Describe your data security controls.\n"
)


class ScriptedCompleter(Completer):
    """Answers from the prompt and fails on selected calls."""

    def __init__(
        self, fail_on: set[int] | None = None, summary: str = "Executive summary."
    ) -> None:
        self.fail_on = fail_on or set()
        self.summary = summary
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if len(self.prompts) in self.fail_on:
            raise CompletionUnavailable("model overloaded")
        if "executive summary" in prompt:
            return self.summary
        question = prompt.split("QUESTION:\n", 1)[1].split("\n", 1)[0]
        return f"Answer to: {question}"


class UnitEmbedder(Embedder):
    def embed(self, text: str) -> list[float]:
        return [1.0, 0.0]


def _orchestrator(completer: Completer, embedder: Embedder | None = None, store=None):
    store = store if store is not None else KnowledgeStore()
    return AnswerOrchestrator(
        retriever=Retriever(store),
        embedder=embedder or HashingEmbedder(),
        completer=completer,
    )


def test_failure_on_one_question_does_not_abort_batch() -> None:
    completer = ScriptedCompleter(fail_on={2})

    result = _orchestrator(completer).process_text(RFP_TEXT, file_name="rfp.txt")

    assert [q.index for q in result.questions] == [1, 2, 3]
    assert [q.status for q in result.questions] == [
        ProcessingStatus.COMPLETED,
        ProcessingStatus.FAILED,
        ProcessingStatus.COMPLETED,
    ]
    assert result.questions[0].generated_answer == "Answer to: What services do you offer?"
    assert result.questions[2].generated_answer.startswith("Answer to: Describe")
    failed = result.questions[1]
    assert failed.generated_answer == "Unable to generate answer: model overloaded"
    assert failed.edited_answer == failed.generated_answer
    assert result.summary == "Executive summary."
    assert not result.cancelled


def test_summary_failure_uses_fallback_with_question_count() -> None:
    completer = ScriptedCompleter(fail_on={4})

    result = _orchestrator(completer).process_text(RFP_TEXT)

    assert result.summary == fallback_summary(3)
    assert "all 3 questions" in result.summary


def test_summary_prompt_contains_current_answers() -> None:
    completer = ScriptedCompleter()

    _orchestrator(completer).process_text(RFP_TEXT)

    summary_prompt = completer.prompts[-1]
    expected = "Q: What services do you offer?\nA: Answer to: What services do you offer?"
    assert expected in summary_prompt


def test_empty_store_prompts_state_no_context() -> None:
    completer = ScriptedCompleter()

    result = _orchestrator(completer).process_text("What is your experience?")

    assert NO_CONTEXT_MESSAGE in completer.prompts[0]
    assert result.questions[0].context == []
    assert result.questions[0].confidence == 0.0


def test_no_questions_is_an_empty_result() -> None:
    completer = ScriptedCompleter()
    recorder = ProgressRecorder()

    result = _orchestrator(completer).process_text("The vendor shall comply.", progress=recorder)

    assert result.questions == []
    assert result.summary == ""
    assert completer.prompts == []
    assert recorder.latest is not None
    assert recorder.latest.status is ProcessingStatus.COMPLETED


def test_context_and_confidence_come_from_knowledge_store() -> None:
    store = KnowledgeStore()
    store.ingest(
        "profile.txt",
        "We build software. We test it well. We ship it fast.",
        UnitEmbedder().embed,
    )
    completer = ScriptedCompleter()

    result = _orchestrator(completer, UnitEmbedder(), store).process_text(
        "What is your delivery approach?"
    )

    question = result.questions[0]
    assert question.status is ProcessingStatus.COMPLETED
    assert question.confidence == 1.0
    assert [m.source_file_name for m in question.context] == ["profile.txt"]
    assert "We build software. We test it well. We ship it fast." in completer.prompts[0]


def test_cancellation_stops_before_next_question() -> None:
    token = CancellationToken()
    recorder = ProgressRecorder()

    class CancellingCompleter(ScriptedCompleter):
        def complete(self, prompt: str) -> str:
            token.cancel()
            return super().complete(prompt)

    completer = CancellingCompleter()
    result = _orchestrator(completer).process_text(RFP_TEXT, progress=recorder, cancel=token)

    assert result.cancelled
    assert [q.index for q in result.questions] == [1]
    assert result.summary == ""
    assert len(completer.prompts) == 1
    assert recorder.latest is not None
    assert recorder.latest.stage == "Cancelled"


def test_progress_stages_in_pipeline_order() -> None:
    recorder = ProgressRecorder()

    _orchestrator(ScriptedCompleter()).process_file(
        RFP_TEXT.encode("utf-8"), "rfp.txt", progress=recorder
    )

    stages = recorder.stages()
    assert stages[:3] == ["Uploading", "Extracting Text", "Detecting Questions"]
    assert stages[3:6] == ["Generating Embeddings", "Retrieving Context", "Generating Answers"]
    assert stages[-2:] == ["Generating Summary", "Complete"]


def test_regenerate_discards_reviewer_edit() -> None:
    orchestrator = _orchestrator(ScriptedCompleter())
    question = orchestrator.answer_question(1, "What is your experience?")
    question.edited_answer = "Reviewer text"

    regenerated = orchestrator.regenerate(question)

    assert regenerated.index == 1
    assert regenerated.answer == "Answer to: What is your experience?"


def test_dimension_mismatch_aborts_processing() -> None:
    store = KnowledgeStore()
    store.ingest("old.txt", "Embedded with a different model.", UnitEmbedder().embed)

    with pytest.raises(DimensionMismatch):
        _orchestrator(ScriptedCompleter(), HashingEmbedder(), store).process_text(
            "What is your experience?"
        )
    assert store.requires_reembedding


def test_embedding_failure_on_one_question_does_not_abort_batch() -> None:
    class FailingSecondEmbedder(Embedder):
        def __init__(self) -> None:
            self.calls = 0

        def embed(self, text: str) -> list[float]:
            self.calls += 1
            if self.calls == 2:
                raise EmbeddingUnavailable("embedding service unreachable")
            return [1.0, 0.0]

    completer = ScriptedCompleter()

    result = _orchestrator(completer, FailingSecondEmbedder()).process_text(RFP_TEXT)

    assert [q.index for q in result.questions] == [1, 2, 3]
    assert [q.status for q in result.questions] == [
        ProcessingStatus.COMPLETED,
        ProcessingStatus.FAILED,
        ProcessingStatus.COMPLETED,
    ]
    notice = result.questions[1].generated_answer
    assert notice == "Unable to generate answer: embedding service unreachable"
    answer_prompts = [p for p in completer.prompts if "QUESTION:\n" in p]
    assert len(answer_prompts) == 2
    assert not any("How much does it cost?" in p for p in answer_prompts)


def test_regenerate_reports_single_question_progress() -> None:
    recorder = ProgressRecorder()
    orchestrator = _orchestrator(ScriptedCompleter())
    question = orchestrator.answer_question(3, "What is your experience?", total=5)

    orchestrator.regenerate(question, progress=recorder)

    assert {(e.current, e.total) for e in recorder.events} == {(1, 1)}
    assert all("question 1 of 1" in e.message for e in recorder.events)
