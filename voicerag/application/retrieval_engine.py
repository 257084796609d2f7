# voicerag/application/retrieval_engine.py

import logging
import threading
from typing import Dict, List, Optional

from voicerag.domain.interfaces import ChunkerPort, EmbeddingPort, IndexStorePort
from voicerag.domain.models import ChunkMetadata, Document, IndexStats, ScoredChunk
from voicerag.infrastructure.document_registry import DocumentRegistry, make_preview
from voicerag.infrastructure.keyword_store import DEFAULT_TOP_K, KeywordStore
from voicerag.infrastructure.sentence_chunker import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    SentenceChunker,
)


logger = logging.getLogger(__name__)


class RetrievalEngine:
    """
    Owns the chunker, the keyword index and the document registry.

    Constructed once by a composition root (main.py, api.py) and handed to
    whatever needs it. Nothing outside the engine mutates the index.
    """

    def __init__(
        self,
        chunker: ChunkerPort,
        index_store: IndexStorePort,
        registry: DocumentRegistry,
    ):
        self._chunker = chunker
        self._index_store = index_store
        self._registry = registry
        self._documents: Dict[str, Document] = {}
        self._write_lock = threading.Lock()

    @classmethod
    def create(
        cls,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
        replace_on_reingest: bool = True,
        embedding_engine: Optional[EmbeddingPort] = None,
    ) -> "RetrievalEngine":
        return cls(
            chunker=SentenceChunker(chunk_size=chunk_size, chunk_overlap=chunk_overlap),
            index_store=KeywordStore(embedding_engine=embedding_engine),
            registry=DocumentRegistry(replace_on_reingest=replace_on_reingest),
        )

    # ─── Ingestion ────────────────────────────────────────────────────────────

    def add_document(self, document: Document) -> int:
        """
        Chunk, index and record one extracted document.
        Returns the number of chunks produced.
        """
        metadata = ChunkMetadata(
            file_name=document.file_name,
            file_type=document.file_type,
            processed_at=document.processed_at,
        )
        chunks = self._chunker.chunk(document.raw_content, metadata)

        with self._write_lock:
            if self._registry.replace_on_reingest:
                self._index_store.remove_document(document.file_name)
            self._index_store.index_chunks(chunks)
            self._registry.record_document(
                file_name=document.file_name,
                chunk_count=len(chunks),
                content_preview=make_preview(document.raw_content),
                file_type=document.file_type,
            )
            self._documents[document.file_name] = document

        logger.info("[RetrievalEngine] Indexed '%s': %d chunk(s)", document.file_name, len(chunks))
        return len(chunks)

    def reset(self) -> None:
        with self._write_lock:
            self._index_store.clear()
            self._registry.clear()
            self._documents.clear()
        logger.info("[RetrievalEngine] Index cleared.")

    # ─── Queries ──────────────────────────────────────────────────────────────

    def search(self, query: str, top_k: int = DEFAULT_TOP_K) -> List[ScoredChunk]:
        return self._index_store.search(query, top_k)

    def get_stats(self) -> IndexStats:
        return self._registry.get_stats(total_chunks=self._index_store.size)

    def get_document(self, file_name: str) -> Optional[Document]:
        return self._documents.get(file_name)

    @property
    def registry(self) -> DocumentRegistry:
        return self._registry

    @property
    def index_store(self) -> IndexStorePort:
        return self._index_store
