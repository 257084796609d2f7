# voicerag/application/ingestion_service.py

import asyncio
import logging
from typing import Iterable, List, Optional

from voicerag.application.retrieval_engine import RetrievalEngine
from voicerag.domain.errors import ExtractionError
from voicerag.domain.interfaces import DocumentSourcePort
from voicerag.domain.models import Document, IndexStats, RawDocument
from voicerag.infrastructure.text_extractor import (
    SUPPORTED_EXTENSIONS,
    TextExtractor,
    detect_file_type,
    is_supported,
)


logger = logging.getLogger(__name__)

DEFAULT_FETCH_CONCURRENCY = 4


class IngestionPipeline:
    """
    Raw documents → text extraction → RetrievalEngine.add_document().

    Partial-failure semantics: an unsupported, empty or unreadable document
    is logged and skipped; the rest of the batch always goes through.
    """

    def __init__(
        self,
        engine: RetrievalEngine,
        extractor: Optional[TextExtractor] = None,
        fetch_concurrency: int = DEFAULT_FETCH_CONCURRENCY,
    ):
        if fetch_concurrency < 1:
            raise ValueError(f"fetch_concurrency must be at least 1, got {fetch_concurrency}.")
        self._engine = engine
        self._extractor = extractor or TextExtractor()
        self._fetch_concurrency = fetch_concurrency

    def ingest(self, raw_documents: Iterable[RawDocument]) -> IndexStats:
        processed = 0
        skipped = 0

        for raw in raw_documents:
            if self.ingest_one(raw):
                processed += 1
            else:
                skipped += 1

        stats = self._engine.get_stats()
        logger.info(
            "[Ingestion] Batch complete: %d processed, %d skipped. "
            "Stats: %d documents, %d chunks",
            processed, skipped, stats.total_documents, stats.total_chunks,
        )
        return stats

    def ingest_one(self, raw: RawDocument) -> bool:
        """Returns True when the document made it into the index."""
        if not is_supported(raw.file_name):
            logger.warning(
                "[Ingestion] ⚠ Unsupported file type: '%s' (supported: %s)",
                raw.file_name, ", ".join(sorted(SUPPORTED_EXTENSIONS)),
            )
            return False

        try:
            text = self._extractor.extract(raw.file_name, raw.content)
        except ExtractionError as error:
            logger.warning("[Ingestion] ⚠ %s", error.message)
            return False
        except Exception:
            logger.exception("[Ingestion] ⚠ Failed to extract '%s'", raw.file_name)
            return False

        if not text or not text.strip():
            logger.warning("[Ingestion] ⚠ No content extracted from '%s'", raw.file_name)
            return False

        document = Document(
            file_name=raw.file_name,
            file_type=detect_file_type(raw.file_name),
            raw_content=text,
        )
        try:
            self._engine.add_document(document)
        except Exception:
            logger.exception("[Ingestion] ⚠ Failed to index '%s'", raw.file_name)
            return False

        logger.info("[Ingestion] Processed '%s' (%d characters)", raw.file_name, len(text))
        return True

    async def ingest_from_source(self, source: DocumentSourcePort) -> IndexStats:
        """
        Discover → fetch concurrently → ingest sequentially in discovery order.
        """
        names = await source.discover()
        candidates: List[str] = []
        for name in names:
            if is_supported(name):
                candidates.append(name)
            else:
                logger.warning("[Ingestion] ⚠ Skipping unsupported file from source: '%s'", name)

        if not candidates:
            logger.info(
                "[Ingestion] No documents to ingest. Add files to the assets folder "
                "or upload them (supported: %s)",
                ", ".join(sorted(SUPPORTED_EXTENSIONS)),
            )
            return self._engine.get_stats()

        semaphore = asyncio.Semaphore(self._fetch_concurrency)

        async def _fetch(name: str) -> Optional[RawDocument]:
            async with semaphore:
                try:
                    data = await source.fetch(name)
                except Exception:
                    logger.exception("[Ingestion] ⚠ Error fetching '%s'", name)
                    return None
            if data is None:
                return None
            return RawDocument(file_name=name, content=data)

        fetched = await asyncio.gather(*(_fetch(name) for name in candidates))
        batch = [raw for raw in fetched if raw is not None]
        logger.info("[Ingestion] Fetched %d of %d document(s).", len(batch), len(candidates))

        return await asyncio.to_thread(self.ingest, batch)
