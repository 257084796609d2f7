# voicerag/application/rag_service.py

import asyncio
import logging
from typing import Iterable, List, Optional

from voicerag.application.ingestion_service import IngestionPipeline
from voicerag.application.retrieval_engine import RetrievalEngine
from voicerag.application.search_tool import (
    SearchError,
    SearchNoResults,
    SearchOutcome,
    build_outcome,
)
from voicerag.config import Settings
from voicerag.domain.interfaces import DocumentSourcePort
from voicerag.domain.models import IndexStats, RawDocument, ScoredChunk
from voicerag.infrastructure.embedding_engine import LengthEmbeddingEngine
from voicerag.infrastructure.keyword_store import DEFAULT_TOP_K


logger = logging.getLogger(__name__)


class RAGService:
    """
    Orchestrates the engine for the conversation layer.

    Lifecycle:
    - initialize() clears the index and ingests everything the document
      source offers. Concurrent callers share one in-flight run; once it has
      finished, initialize() just returns the current stats
    - search() before initialize() triggers it lazily
    - reinitialize() waits for any in-flight run, then starts exactly one new
      run; overlapping reinitialize() callers share that run

    A failed initialization is logged and still counts as initialized, with
    whatever made it into the index.
    """

    def __init__(
        self,
        engine: RetrievalEngine,
        pipeline: IngestionPipeline,
        source: Optional[DocumentSourcePort] = None,
    ):
        self._engine = engine
        self._pipeline = pipeline
        self._source = source
        self._initialized = False
        self._init_task: Optional[asyncio.Task] = None
        self._reinit_task: Optional[asyncio.Task] = None

    @property
    def engine(self) -> RetrievalEngine:
        return self._engine

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def is_ready(self) -> bool:
        return self._initialized and self._engine.get_stats().total_chunks > 0

    # ─── Lifecycle ────────────────────────────────────────────────────────────

    async def initialize(self) -> IndexStats:
        if self._initialized:
            return self._engine.get_stats()

        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._run_initialization())

        return await asyncio.shield(self._init_task)

    async def reinitialize(self) -> IndexStats:
        if self._reinit_task is None:
            self._reinit_task = asyncio.ensure_future(self._run_reinitialization())

        return await asyncio.shield(self._reinit_task)

    async def _run_reinitialization(self) -> IndexStats:
        try:
            if self._init_task is not None:
                await asyncio.shield(self._init_task)
            self._initialized = False
            return await self.initialize()
        finally:
            self._reinit_task = None

    async def _run_initialization(self) -> IndexStats:
        logger.info("[RAGService] Initializing RAG system...")
        try:
            self._engine.reset()
            if self._source is not None:
                await self._pipeline.ingest_from_source(self._source)
            else:
                logger.info("[RAGService] No document source configured; starting empty.")
        except Exception:
            logger.exception("[RAGService] Initialization failed; continuing with a partial index.")

        stats = self._engine.get_stats()
        self._initialized = True
        self._init_task = None
        logger.info(
            "[RAGService] ✓ Ready: %d documents, %d chunks",
            stats.total_documents, stats.total_chunks,
        )
        return stats

    # ─── Ingestion ────────────────────────────────────────────────────────────

    async def ingest_uploads(self, raw_documents: Iterable[RawDocument]) -> IndexStats:
        """
        Ingest caller-supplied documents. Waits for initialization first so a
        later initialization cannot wipe the upload.
        """
        await self.initialize()
        batch = list(raw_documents)
        logger.info("[RAGService] Processing %d uploaded file(s)...", len(batch))
        return await asyncio.to_thread(self._pipeline.ingest, batch)

    # ─── Queries ──────────────────────────────────────────────────────────────

    async def search(self, query: str, top_k: int = DEFAULT_TOP_K) -> List[ScoredChunk]:
        if not self._initialized:
            await self.initialize()

        logger.info('[RAGService] Searching for: "%s"', query)
        results = self._engine.search(query, top_k)
        logger.info("[RAGService] Found %d relevant chunk(s)", len(results))
        return results

    async def search_documents(self, query: str, top_k: int = DEFAULT_TOP_K) -> SearchOutcome:
        """
        Tool-invocation entry point. Never raises: failures come back as
        SearchError, an empty ranking as SearchNoResults.
        """
        try:
            results = await self.search(query, int(top_k))
        except Exception as error:
            logger.exception("[RAGService] Search failed for %r", query)
            return SearchError(message=str(error) or error.__class__.__name__)

        outcome = build_outcome(query, results)
        if isinstance(outcome, SearchNoResults):
            logger.warning("[RAGService] No relevant documents found for query: %s", query)
        return outcome

    def get_stats(self) -> IndexStats:
        return self._engine.get_stats()


def build_rag_service(
    settings: Settings,
    source: Optional[DocumentSourcePort] = None,
) -> RAGService:
    """Wire engine, pipeline and service from settings."""
    embedding_engine = (
        LengthEmbeddingEngine(dimension=settings.embedding_dimension)
        if settings.use_placeholder_embeddings
        else None
    )
    engine = RetrievalEngine.create(
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
        replace_on_reingest=settings.replace_on_reingest,
        embedding_engine=embedding_engine,
    )
    pipeline = IngestionPipeline(engine, fetch_concurrency=settings.fetch_concurrency)
    return RAGService(engine=engine, pipeline=pipeline, source=source)
