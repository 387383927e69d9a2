"""LangChain-backed OpenAI and Azure OpenAI providers.

Callers only see `Embedder` and `Completer`. The provider type is resolved
here, once, when the clients are constructed.
"""

from __future__ import annotations

import logging
from typing import Any

from langchain_core.embeddings import Embeddings
from langchain_core.language_models import BaseChatModel

from rfp_responder.config import AIProviderSettings
from rfp_responder.errors import CompletionUnavailable, EmbeddingUnavailable
from rfp_responder.providers.base import Completer, Embedder
from rfp_responder.providers.hashing import HashingEmbedder, UnconfiguredCompleter

logger = logging.getLogger(__name__)


class LangChainEmbedder(Embedder):
    """Adapts any LangChain `Embeddings` model to the `Embedder` contract."""

    def __init__(self, embeddings: Embeddings) -> None:
        self._embeddings = embeddings

    def embed(self, text: str) -> list[float]:
        try:
            vector = self._embeddings.embed_query(text)
        except Exception as exc:
            raise EmbeddingUnavailable(f"Embedding request failed: {exc}") from exc
        if not vector:
            raise EmbeddingUnavailable("Embedding provider returned an empty vector")
        return [float(value) for value in vector]


class LangChainCompleter(Completer):
    """Adapts any LangChain chat model to the `Completer` contract."""

    def __init__(self, llm: BaseChatModel) -> None:
        self._llm = llm

    def complete(self, prompt: str) -> str:
        try:
            response = self._llm.invoke(prompt)
        except Exception as exc:
            raise CompletionUnavailable(f"Completion request failed: {exc}") from exc
        return _message_text(response)


def create_embedder(settings: AIProviderSettings) -> Embedder:
    """Build the embedder for `settings`, or an offline one if unconfigured."""

    if not settings.is_configured:
        logger.warning("No AI provider API key configured; using hashing embedder")
        return HashingEmbedder()

    if settings.provider == "azure_openai":
        from langchain_openai import AzureOpenAIEmbeddings

        embeddings: Embeddings = AzureOpenAIEmbeddings(
            azure_deployment=settings.embedding_model,
            azure_endpoint=settings.endpoint,
            api_key=settings.api_key,
            api_version=settings.api_version,
            timeout=settings.timeout_seconds,
            max_retries=settings.max_retries,
        )
    else:
        from langchain_openai import OpenAIEmbeddings

        embeddings = OpenAIEmbeddings(
            model=settings.embedding_model,
            api_key=settings.api_key,
            timeout=settings.timeout_seconds,
            max_retries=settings.max_retries,
        )
    return LangChainEmbedder(embeddings)


def create_completer(settings: AIProviderSettings) -> Completer:
    """Build the completer for `settings`, or a failing one if unconfigured."""

    if not settings.is_configured:
        logger.warning("No AI provider API key configured; completions are disabled")
        return UnconfiguredCompleter()

    if settings.provider == "azure_openai":
        from langchain_openai import AzureChatOpenAI

        llm: BaseChatModel = AzureChatOpenAI(
            azure_deployment=settings.completion_model,
            azure_endpoint=settings.endpoint,
            api_key=settings.api_key,
            api_version=settings.api_version,
            temperature=settings.temperature,
            timeout=settings.timeout_seconds,
            max_retries=settings.max_retries,
        )
    else:
        from langchain_openai import ChatOpenAI

        llm = ChatOpenAI(
            model=settings.completion_model,
            api_key=settings.api_key,
            temperature=settings.temperature,
            timeout=settings.timeout_seconds,
            max_retries=settings.max_retries,
        )
    return LangChainCompleter(llm)


def _message_text(message: Any) -> str:
    content = getattr(message, "content", message)
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict) and "text" in item:
                parts.append(str(item["text"]))
            else:
                parts.append(str(item))
        return " ".join(parts).strip()
    return str(content or "")
