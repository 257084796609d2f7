# voicerag/infrastructure/keyword_store.py

import logging
import threading
from typing import Dict, Iterable, List, Optional

from voicerag.domain.interfaces import EmbeddingPort, IndexStorePort
from voicerag.domain.models import Chunk, IndexEntry, ScoredChunk
from voicerag.infrastructure.text_tokenizer import extract_keywords


logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 5


def calculate_relevance(query_keywords: Iterable[str], chunk_keywords: frozenset) -> float:
    """
    Normalized overlap: |query ∩ chunk| / max(|query|, 1), in [0, 1].
    """
    query_keywords = list(query_keywords)
    matched = sum(1 for keyword in query_keywords if keyword in chunk_keywords)
    return matched / max(len(query_keywords), 1)


class KeywordStore(IndexStorePort):
    """
    In-memory keyword index keyed by chunk id.

    Indexing:
        chunk text → extract_keywords() → frozenset, plus an optional vector
        from the embedding extension point. Re-indexing an id overwrites it.

    Search:
        query → extract_keywords() (same rule) → overlap score per entry →
        drop zero scores → stable sort, descending → first top_k.
        Ties keep index insertion order; an overwritten id keeps the position
        it was first inserted at.

    Writes are serialized by a lock. Searches work on a snapshot of the
    entries and may observe an ingestion that is still in progress.
    """

    def __init__(self, embedding_engine: Optional[EmbeddingPort] = None):
        self._entries: Dict[str, IndexEntry] = {}
        self._embedding_engine = embedding_engine
        self._lock = threading.RLock()

    # ─── IndexStorePort: Core Interface ──────────────────────────────────────

    def index_chunks(self, chunks: List[Chunk]) -> None:
        with self._lock:
            for chunk in chunks:
                self._entries[chunk.chunk_id] = IndexEntry(
                    chunk=chunk,
                    keywords=frozenset(extract_keywords(chunk.content)),
                    embedding=self._embed(chunk.content),
                )
            total = len(self._entries)

        logger.info("[KeywordStore] Indexed %d chunk(s). Total in store: %d", len(chunks), total)

    def search(self, query: str, top_k: int = DEFAULT_TOP_K) -> List[ScoredChunk]:
        if top_k < 1:
            raise ValueError(f"top_k must be at least 1, got {top_k}.")

        query_keywords = extract_keywords(query)
        logger.debug("[KeywordStore] Query keywords: %s", query_keywords)

        scored: List[ScoredChunk] = []
        for entry in self._snapshot():
            relevance = calculate_relevance(query_keywords, entry.keywords)
            if relevance > 0:
                scored.append(ScoredChunk(chunk=entry.chunk, relevance=relevance))

        scored.sort(key=lambda result: result.relevance, reverse=True)
        return scored[:top_k]

    def remove_document(self, file_name: str) -> int:
        with self._lock:
            stale_ids = [
                chunk_id
                for chunk_id, entry in self._entries.items()
                if entry.chunk.file_name == file_name
            ]
            for chunk_id in stale_ids:
                del self._entries[chunk_id]

        if stale_ids:
            logger.info("[KeywordStore] Removed %d chunk(s) of '%s'.", len(stale_ids), file_name)
        return len(stale_ids)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    @property
    def size(self) -> int:
        return len(self._entries)

    # ─── Lookup ───────────────────────────────────────────────────────────────

    def get(self, chunk_id: str) -> Optional[IndexEntry]:
        return self._entries.get(chunk_id)

    def __len__(self) -> int:
        return self.size

    def __contains__(self, chunk_id: object) -> bool:
        return chunk_id in self._entries

    # ─── Private ──────────────────────────────────────────────────────────────

    def _snapshot(self) -> List[IndexEntry]:
        with self._lock:
            return list(self._entries.values())

    def _embed(self, text: str):
        if self._embedding_engine is None:
            return None
        return self._embedding_engine.embed(text)
