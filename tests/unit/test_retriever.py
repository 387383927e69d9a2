import pytest

from rfp_responder.config import RetrievalConfig
from rfp_responder.retrieval.knowledge_store import KnowledgeStore
from rfp_responder.retrieval.retriever import Retriever


def _store_with(vectors: dict[str, list[float]]) -> KnowledgeStore:
    store = KnowledgeStore()
    for name, vector in vectors.items():
        store.ingest(f"{name}.txt", f"Content of {name}.", lambda _text, v=vector: v)
    return store


def test_empty_store_returns_no_matches() -> None:
    assert Retriever(KnowledgeStore()).retrieve([1.0, 0.0]) == []


def test_results_sorted_descending_and_limited() -> None:
    store = _store_with(
        {
            "low": [0.0, 1.0],
            "high": [1.0, 0.0],
            "mid": [1.0, 1.0],
        }
    )

    matches = Retriever(store).retrieve([1.0, 0.0], top_k=2)

    assert [m.source_file_name for m in matches] == ["high.txt", "mid.txt"]
    assert matches[0].score >= matches[1].score


def test_result_length_is_min_of_top_k_and_chunk_count() -> None:
    store = _store_with({"a": [1.0, 0.0], "b": [0.5, 0.5]})
    retriever = Retriever(store, RetrievalConfig(top_k=5))

    assert len(retriever.retrieve([1.0, 0.0])) == 2
    assert len(retriever.retrieve([1.0, 0.0], top_k=1)) == 1


def test_ties_keep_insertion_order() -> None:
    store = _store_with({"first": [1.0, 0.0], "second": [2.0, 0.0], "third": [3.0, 0.0]})

    matches = Retriever(store).retrieve([1.0, 0.0])

    assert [m.source_file_name for m in matches] == ["first.txt", "second.txt", "third.txt"]


def test_zero_and_negative_top_k() -> None:
    retriever = Retriever(_store_with({"a": [1.0, 0.0]}))

    assert retriever.retrieve([1.0, 0.0], top_k=0) == []
    with pytest.raises(ValueError):
        retriever.retrieve([1.0, 0.0], top_k=-1)
