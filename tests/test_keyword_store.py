# tests/test_keyword_store.py

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from voicerag.domain.models import Chunk
from voicerag.infrastructure.embedding_engine import LengthEmbeddingEngine
from voicerag.infrastructure.keyword_store import KeywordStore, calculate_relevance
from voicerag.infrastructure.text_tokenizer import STOPWORDS, extract_keywords


def _make_chunk(chunk_id: str, content: str, file_name: str = "doc.txt", page: int = 1) -> Chunk:
    return Chunk(chunk_id=chunk_id, content=content, file_name=file_name, page_number=page)


# ── Keyword extraction ────────────────────────────────────────────────────────

def test_extract_keywords_strips_punctuation_and_stopwords():
    assert extract_keywords("Reset your password. Use the portal.") == [
        "reset", "your", "password", "use", "portal",
    ]


def test_extract_keywords_drops_short_tokens_and_dedupes():
    assert extract_keywords("Hello, World! It's an AI. hello WORLD") == ["hello", "world", "its"]


def test_extract_keywords_empty_text():
    assert extract_keywords("") == []
    assert extract_keywords("the and of it") == []


def test_stopword_set_is_the_fixed_english_list():
    assert len(STOPWORDS) == 49
    assert {"the", "would", "them"} <= STOPWORDS


# ── Relevance ─────────────────────────────────────────────────────────────────

def test_relevance_is_normalized_overlap():
    chunk_keywords = frozenset({"password", "portal", "reset"})
    assert calculate_relevance(["password", "portal", "vacation"], chunk_keywords) == pytest.approx(2 / 3)
    assert calculate_relevance(["password"], chunk_keywords) == 1.0


def test_relevance_of_empty_query_is_zero():
    assert calculate_relevance([], frozenset({"password"})) == 0.0


# ── Indexing ──────────────────────────────────────────────────────────────────

def test_reindexing_same_id_keeps_one_entry_with_latest_content():
    store = KeywordStore()
    store.index_chunks([_make_chunk("a", "original vacation policy")])
    store.index_chunks([_make_chunk("a", "updated password policy")])

    assert store.size == 1
    entry = store.get("a")
    assert entry.chunk.content == "updated password policy"
    assert entry.keywords == frozenset({"updated", "password", "policy"})


def test_entries_carry_placeholder_embedding_when_configured():
    store = KeywordStore(embedding_engine=LengthEmbeddingEngine())
    store.index_chunks([_make_chunk("a", "Reset your password")])

    embedding = store.get("a").embedding
    assert embedding.shape == (1536,)
    assert embedding[:3] == pytest.approx([0.5, 0.4, 0.8])
    assert not np.any(embedding[3:])


def test_entries_have_no_embedding_without_engine():
    store = KeywordStore()
    store.index_chunks([_make_chunk("a", "Reset your password")])
    assert store.get("a").embedding is None


def test_remove_document_drops_only_its_chunks():
    store = KeywordStore()
    store.index_chunks([
        _make_chunk("a.txt_chunk_1", "alpha text", file_name="a.txt"),
        _make_chunk("a.txt_chunk_2", "alpha more", file_name="a.txt"),
        _make_chunk("b.txt_chunk_1", "beta text", file_name="b.txt"),
    ])

    removed = store.remove_document("a.txt")

    assert removed == 2
    assert len(store) == 1
    assert "b.txt_chunk_1" in store


def test_clear_empties_store():
    store = KeywordStore()
    store.index_chunks([_make_chunk("a", "alpha")])
    store.clear()
    assert store.size == 0


# ── Search ────────────────────────────────────────────────────────────────────

def _vpn_store() -> KeywordStore:
    store = KeywordStore()
    store.index_chunks([
        _make_chunk("c1", "Install the VPN client from the portal"),
        _make_chunk("c2", "The VPN client connects after install"),
        _make_chunk("c3", "VPN access requires manager approval"),
        _make_chunk("c4", "Vacation requests need two weeks notice"),
    ])
    return store


def test_search_returns_min_of_top_k_and_positive_matches():
    store = _vpn_store()
    assert len(store.search("vpn", top_k=2)) == 2
    assert len(store.search("vpn", top_k=10)) == 3


def test_search_results_sorted_descending():
    results = _vpn_store().search("install vpn client", top_k=5)
    scores = [r.relevance for r in results]

    assert scores == sorted(scores, reverse=True)
    assert results[-1].chunk.chunk_id == "c3"
    assert results[-1].relevance == pytest.approx(1 / 3)


def test_disjoint_keywords_never_returned():
    results = _vpn_store().search("vacation weeks", top_k=10)
    assert [r.chunk.chunk_id for r in results] == ["c4"]


def test_query_without_matches_returns_empty():
    assert _vpn_store().search("quarterly revenue", top_k=5) == []


def test_ties_keep_insertion_order():
    store = KeywordStore()
    store.index_chunks([
        _make_chunk("first", "password reset"),
        _make_chunk("second", "password change"),
        _make_chunk("third", "password expiry"),
    ])
    # Overwriting keeps the original slot.
    store.index_chunks([_make_chunk("first", "password reset again")])

    results = store.search("password", top_k=5)
    assert [r.chunk.chunk_id for r in results] == ["first", "second", "third"]


def test_result_source_names_file_and_page():
    store = KeywordStore()
    store.index_chunks([_make_chunk("p", "Reset your password", file_name="policy.txt", page=3)])

    result = store.search("password")[0]
    assert result.source == "policy.txt (Page 3)"
    assert result.content == "Reset your password"
    assert result.relevance == 1.0


def test_search_rejects_top_k_below_one():
    with pytest.raises(ValueError, match="top_k"):
        _vpn_store().search("vpn", top_k=0)


def test_concurrent_indexing_and_search():
    store = KeywordStore()

    def _index(worker: int) -> None:
        for i in range(50):
            store.index_chunks([_make_chunk(f"w{worker}_c{i}", f"password policy section {i}")])

    def _search(_: int) -> int:
        hits = 0
        for _ in range(50):
            results = store.search("password policy", top_k=3)
            assert all(r.relevance == 1.0 for r in results)
            hits += len(results)
        return hits

    with ThreadPoolExecutor(max_workers=8) as executor:
        writers = [executor.submit(_index, worker) for worker in range(4)]
        readers = [executor.submit(_search, reader) for reader in range(4)]
        for future in writers + readers:
            future.result()

    assert store.size == 200
    assert len(store.search("password", top_k=500)) == 200
