"""Per-question RAG answering and whole-document summary orchestration."""

from __future__ import annotations

import logging
import threading

from rfp_responder.config import OrchestrationConfig
from rfp_responder.detection.detector import QuestionDetector
from rfp_responder.errors import DimensionMismatch
from rfp_responder.ingest.parser import ParserRegistry
from rfp_responder.obs.progress import ProgressSink, Timer, report
from rfp_responder.orchestrator.prompts import (
    build_answer_prompt,
    build_summary_prompt,
    fallback_summary,
)
from rfp_responder.providers.base import Completer, Embedder
from rfp_responder.retrieval.retriever import Retriever
from rfp_responder.types import AnsweredQuestion, ProcessingStatus, RfpResult

logger = logging.getLogger(__name__)

# Uploading, Extracting Text, Detecting Questions, Generating Embeddings,
# Retrieving Context, Generating Answers, Generating Summary.
_RFP_STEPS = 7


class CancellationToken:
    """Cooperative cancellation flag checked between questions."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class AnswerOrchestrator:
    """Drives detection, retrieval and generation for one RFP document.

    Each question moves through `pending -> in_progress -> completed|failed`.
    External calls are issued one at a time, in question order. A failed
    question keeps its position and carries a plain-language notice instead
    of an answer. A failed summary falls back to a canned one. Only
    `DimensionMismatch`, which means the knowledge store is incompatible with
    the current embedder, aborts the run.
    """

    def __init__(
        self,
        *,
        retriever: Retriever,
        embedder: Embedder,
        completer: Completer,
        detector: QuestionDetector | None = None,
        parser_registry: ParserRegistry | None = None,
        config: OrchestrationConfig | None = None,
    ) -> None:
        self.retriever = retriever
        self.embedder = embedder
        self.completer = completer
        self.detector = detector or QuestionDetector()
        self.parser_registry = parser_registry or ParserRegistry()
        self.config = config or OrchestrationConfig()

    def process_file(
        self,
        data: bytes,
        file_name: str,
        *,
        progress: ProgressSink | None = None,
        cancel: CancellationToken | None = None,
    ) -> RfpResult:
        """Extract text from an uploaded RFP file and process it.

        Raises:
            UnsupportedFileType: the extension has no registered extractor.
        """

        report(
            progress, "Uploading", 0, _RFP_STEPS, f"File {file_name} uploaded successfully."
        )
        report(progress, "Extracting Text", 1, _RFP_STEPS, f"Processing {file_name}...")
        text = self.parser_registry.extract(data, file_name)
        return self.process_text(text, file_name=file_name, progress=progress, cancel=cancel)

    def process_text(
        self,
        raw_text: str,
        *,
        file_name: str = "",
        progress: ProgressSink | None = None,
        cancel: CancellationToken | None = None,
    ) -> RfpResult:
        """Detect questions in `raw_text`, answer each one and summarize.

        Returns:
            An `RfpResult` whose questions are in detection order with
            1-based contiguous indices. No detected questions is a valid,
            empty result with an empty summary.
        """

        report(
            progress,
            "Detecting Questions",
            2,
            _RFP_STEPS,
            "Analyzing document for questions...",
        )
        detected = self.detector.detect(raw_text)
        logger.info("Detected %d questions in %s", len(detected), file_name or "<text>")

        if not detected:
            report(
                progress,
                "Complete",
                _RFP_STEPS,
                _RFP_STEPS,
                "No questions detected in the document.",
                ProcessingStatus.COMPLETED,
            )
            return RfpResult(file_name=file_name, questions=[], summary="")

        total = len(detected)
        questions: list[AnsweredQuestion] = []
        for i, text in enumerate(detected, start=1):
            if cancel is not None and cancel.cancelled:
                logger.info("Processing cancelled after %d of %d questions", i - 1, total)
                report(
                    progress,
                    "Cancelled",
                    i - 1,
                    total,
                    f"Processing cancelled after {i - 1} of {total} questions.",
                    ProcessingStatus.FAILED,
                )
                return RfpResult(
                    file_name=file_name, questions=questions, summary="", cancelled=True
                )
            questions.append(self.answer_question(i, text, total=total, progress=progress))

        summary = self.summarize(questions, progress=progress)

        failed = sum(1 for q in questions if q.status is ProcessingStatus.FAILED)
        report(
            progress,
            "Complete",
            _RFP_STEPS,
            _RFP_STEPS,
            f"Processed {total} questions ({failed} failed).",
            ProcessingStatus.COMPLETED,
        )
        return RfpResult(file_name=file_name, questions=questions, summary=summary)

    def answer_question(
        self,
        index: int,
        text: str,
        *,
        total: int | None = None,
        progress: ProgressSink | None = None,
    ) -> AnsweredQuestion:
        """Run embed -> retrieve -> prompt -> complete for one question."""

        question = AnsweredQuestion(index=index, question_text=text)
        self._run(question, index, total or index, progress)
        return question

    def regenerate(
        self,
        question: AnsweredQuestion,
        *,
        progress: ProgressSink | None = None,
    ) -> AnsweredQuestion:
        """Re-draft one question, discarding any reviewer edit.

        Progress is reported as a single-item run.
        """

        redrafted = AnsweredQuestion(index=question.index, question_text=question.question_text)
        self._run(redrafted, 1, 1, progress)
        return redrafted

    def summarize(
        self,
        questions: list[AnsweredQuestion],
        *,
        progress: ProgressSink | None = None,
    ) -> str:
        report(progress, "Generating Summary", 6, _RFP_STEPS, "Writing executive summary...")
        prompt = build_summary_prompt(questions)
        try:
            with Timer() as timer:
                summary = self.completer.complete(prompt).strip()
        except Exception as exc:
            logger.warning("Summary generation failed, using fallback summary: %s", exc)
            return fallback_summary(len(questions))
        logger.debug("Generated summary in %.1f ms", timer.elapsed_ms)
        return summary or fallback_summary(len(questions))

    def _run(
        self,
        question: AnsweredQuestion,
        current: int,
        total: int,
        progress: ProgressSink | None,
    ) -> None:
        i = question.index
        question.status = ProcessingStatus.IN_PROGRESS
        try:
            with Timer() as timer:
                report(
                    progress,
                    "Generating Embeddings",
                    current,
                    total,
                    f"Embedding question {current} of {total}...",
                )
                question.embedding = self.embedder.embed(question.question_text)

                report(
                    progress,
                    "Retrieving Context",
                    current,
                    total,
                    f"Finding relevant context for question {current} of {total}...",
                )
                question.context = self.retriever.retrieve(
                    question.embedding, self.config.top_k
                )
                question.confidence = (
                    sum(match.score for match in question.context) / len(question.context)
                    if question.context
                    else 0.0
                )

                report(
                    progress,
                    "Generating Answers",
                    current,
                    total,
                    f"Generating answer for question {current} of {total}...",
                )
                prompt = build_answer_prompt(question.question_text, question.context)
                answer = self.completer.complete(prompt)
        except DimensionMismatch:
            question.status = ProcessingStatus.FAILED
            raise
        except Exception as exc:
            logger.warning("Question %d failed: %s", i, exc)
            reason = str(exc) or type(exc).__name__
            notice = f"{self.config.failure_notice_prefix}: {reason}"
            question.generated_answer = notice
            question.edited_answer = notice
            question.status = ProcessingStatus.FAILED
            return

        logger.debug("Answered question %d in %.1f ms", i, timer.elapsed_ms)
        question.generated_answer = answer
        question.edited_answer = answer
        question.status = ProcessingStatus.COMPLETED
