"""Prompt templates for answer drafting and the executive summary."""

from __future__ import annotations

from collections.abc import Sequence

from langchain_core.prompts import PromptTemplate

from rfp_responder.types import AnsweredQuestion, RetrievedMatch

NO_CONTEXT_MESSAGE = "No relevant context available in the knowledgebase."

_ANSWER_TEMPLATE = PromptTemplate.from_template(
    """
You are an expert RFP response writer. Based on the following context from our knowledge base,
provide a professional, accurate, and comprehensive answer to the question.

CONTEXT:
{context}

QUESTION:
{question}

Provide a clear, professional response suitable for an RFP submission.
If the context doesn't contain enough information, indicate what additional details might be needed.
""".strip()
)

_SUMMARY_TEMPLATE = PromptTemplate.from_template(
    """
You are an expert RFP response writer. Based on the following questions and answers
from an RFP response, write a professional executive summary that:

1. Introduces the responding organization's capabilities
2. Highlights key strengths demonstrated in the responses
3. Expresses enthusiasm for the opportunity
4. Is concise (2-3 paragraphs maximum)

QUESTIONS AND ANSWERS:
{qa_text}

Write the executive summary now:
""".strip()
)

_FALLBACK_SUMMARY = (
    "Thank you for the opportunity to respond to this Request for Proposal. "
    "We have carefully reviewed all {count} questions and have provided "
    "comprehensive responses that demonstrate our capabilities and commitment to "
    "delivering exceptional results. We look forward to discussing our proposal "
    "in further detail."
)


def build_answer_prompt(question: str, context: Sequence[RetrievedMatch]) -> str:
    context_text = (
        "\n\n".join(match.chunk_text for match in context)
        if context
        else NO_CONTEXT_MESSAGE
    )
    return _ANSWER_TEMPLATE.format(context=context_text, question=question)


def build_summary_prompt(questions: Sequence[AnsweredQuestion]) -> str:
    qa_text = "\n\n".join(
        f"Q: {question.question_text}\nA: {question.answer}" for question in questions
    )
    return _SUMMARY_TEMPLATE.format(qa_text=qa_text)


def fallback_summary(question_count: int) -> str:
    return _FALLBACK_SUMMARY.format(count=question_count)
