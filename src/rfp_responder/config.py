"""Configuration models for the RFP responder."""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_QUESTION_STARTERS: tuple[str, ...] = (
    "what",
    "how",
    "why",
    "when",
    "where",
    "who",
    "which",
    "can",
    "could",
    "would",
    "will",
    "do",
    "does",
    "is",
    "are",
    "describe",
    "explain",
    "provide",
)

DEFAULT_QUESTION_PATTERNS: tuple[str, ...] = (
    # Numbered questions: "1. What is your experience?"
    r"^\d+[.)]\s+.+\?$",
    # Capitalized sentence with no terminal punctuation before the "?"
    r"^[A-Z][^.!]*\?$",
    # Imperative requests
    r"(?:please|kindly)\s+(?:describe|explain|provide|list|detail|outline)",
)

# Symbol-font substitutes (G, l, n, o, O) and real bullet glyphs.
DEFAULT_BULLET_GLYPHS = "GlnoO•●○◦▪▸►"


class ChunkingConfig(BaseModel):
    """Configures sentence-aligned chunking and document embedding limits."""

    max_chunk_chars: int = Field(default=250, ge=1)
    embed_char_budget: int = Field(default=8000, ge=1)


class RetrievalConfig(BaseModel):
    """Configures similarity retrieval."""

    top_k: int = Field(default=5, ge=1)


class DetectionConfig(BaseModel):
    """Configures the question detection heuristics."""

    min_question_length: int = Field(default=10, ge=1)
    question_starters: tuple[str, ...] = DEFAULT_QUESTION_STARTERS
    patterns: tuple[str, ...] = DEFAULT_QUESTION_PATTERNS
    bullet_glyphs: str = DEFAULT_BULLET_GLYPHS
    # Number of leading words scanned for a starter, first word included.
    starter_window: int = Field(default=3, ge=1)


class OrchestrationConfig(BaseModel):
    """Configures per-question answering and summary generation."""

    top_k: int = Field(default=5, ge=1)
    failure_notice_prefix: str = "Unable to generate answer"


class AssemblyConfig(BaseModel):
    """Configures the abstract response document."""

    title: str = Field(default="RFP Response", min_length=1)


class AIProviderSettings(BaseModel):
    """Connection settings for the embedding and completion provider."""

    provider: Literal["openai", "azure_openai"] = "openai"
    api_key: str | None = None
    endpoint: str | None = None
    api_version: str | None = None
    embedding_model: str = "text-embedding-ada-002"
    completion_model: str = "gpt-4"
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=60.0, gt=0.0)
    max_retries: int = Field(default=2, ge=0)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls) -> "AIProviderSettings":
        provider = os.getenv("RFP_AI_PROVIDER", "openai").strip().lower()
        if provider == "azure_openai":
            api_key = os.getenv("AZURE_OPENAI_API_KEY") or os.getenv("OPENAI_API_KEY")
        else:
            api_key = os.getenv("OPENAI_API_KEY")
        return cls(
            provider=provider,  # type: ignore[arg-type]
            api_key=api_key or None,
            endpoint=os.getenv("AZURE_OPENAI_ENDPOINT") or None,
            api_version=os.getenv("OPENAI_API_VERSION") or None,
            embedding_model=os.getenv("RFP_EMBEDDING_MODEL", "text-embedding-ada-002"),
            completion_model=os.getenv("RFP_COMPLETION_MODEL", "gpt-4"),
        )
