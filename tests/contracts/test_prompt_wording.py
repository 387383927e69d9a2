from rfp_responder.orchestrator.prompts import (
    NO_CONTEXT_MESSAGE,
    build_answer_prompt,
    build_summary_prompt,
    fallback_summary,
)
from rfp_responder.types import AnsweredQuestion, RetrievedMatch


def _match(text: str) -> RetrievedMatch:
    return RetrievedMatch(
        chunk_id=text[:4], chunk_text=text, score=0.8, source_file_name="kb.txt"
    )


def test_answer_prompt_joins_context_with_blank_lines() -> None:
    prompt = build_answer_prompt(
        "How is data protected?",
        [_match("Data is encrypted at rest."), _match("Keys rotate quarterly.")],
    )

    assert "CONTEXT:\nData is encrypted at rest.\n\nKeys rotate quarterly.\n" in prompt
    assert "QUESTION:\nHow is data protected?" in prompt
    assert "suitable for an RFP submission" in prompt
    assert NO_CONTEXT_MESSAGE not in prompt


def test_answer_prompt_states_missing_context() -> None:
    prompt = build_answer_prompt("How is data protected?", [])

    assert f"CONTEXT:\n{NO_CONTEXT_MESSAGE}" in prompt


def test_summary_prompt_requests_short_executive_summary() -> None:
    questions = [
        AnsweredQuestion(index=1, question_text="What do you offer?", generated_answer="Draft"),
        AnsweredQuestion(
            index=2,
            question_text="Who is on the team?",
            generated_answer="Draft",
            edited_answer="Edited",
        ),
    ]

    prompt = build_summary_prompt(questions)

    assert "capabilities" in prompt
    assert "strengths" in prompt
    assert "enthusiasm" in prompt
    assert "2-3 paragraphs" in prompt
    assert "Q: What do you offer?\nA: Draft\n\nQ: Who is on the team?\nA: Edited" in prompt


def test_fallback_summary_states_question_count() -> None:
    summary = fallback_summary(12)

    assert "all 12 questions" in summary
    assert summary.startswith("Thank you for the opportunity")
