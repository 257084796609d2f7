# tests/test_ingestion_service.py

from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from voicerag.application.ingestion_service import IngestionPipeline
from voicerag.application.retrieval_engine import RetrievalEngine
from voicerag.domain.interfaces import DocumentSourcePort
from voicerag.domain.models import RawDocument
from voicerag.infrastructure.text_extractor import TextExtractor


class FakeSource(DocumentSourcePort):
    """In-memory source; names without content simulate failed fetches."""

    def __init__(self, names: List[str], files: Dict[str, bytes]):
        self.names = names
        self.files = files
        self.fetched: List[str] = []

    async def discover(self) -> List[str]:
        return list(self.names)

    async def fetch(self, file_name: str) -> Optional[bytes]:
        self.fetched.append(file_name)
        return self.files.get(file_name)


@pytest.fixture
def engine():
    return RetrievalEngine.create()


def test_policy_document_end_to_end(engine):
    pipeline = IngestionPipeline(engine)

    stats = pipeline.ingest([RawDocument("policy.txt", b"Reset your password. Use the portal.")])

    assert stats.total_documents == 1
    assert stats.total_chunks == 1
    assert engine.search("password")[0].source == "policy.txt (Page 1)"


def test_one_failing_document_does_not_abort_the_batch(engine):
    real = TextExtractor()
    extractor = MagicMock(spec=TextExtractor)

    def _extract(file_name, content):
        if file_name == "broken.txt":
            raise RuntimeError("disk on fire")
        return real.extract(file_name, content)

    extractor.extract.side_effect = _extract
    pipeline = IngestionPipeline(engine, extractor=extractor)

    stats = pipeline.ingest([
        RawDocument("a.txt", b"Vacation requests need notice."),
        RawDocument("broken.txt", b"whatever"),
        RawDocument("c.txt", b"Expense reports are due monthly."),
    ])

    assert stats.total_documents == 2
    assert [d.file_name for d in stats.documents] == ["a.txt", "c.txt"]


def test_corrupted_pdf_is_skipped(engine):
    stats = IngestionPipeline(engine).ingest([
        RawDocument("broken.pdf", b"not really a pdf"),
        RawDocument("notes.txt", b"Quarterly planning notes."),
    ])

    assert [d.file_name for d in stats.documents] == ["notes.txt"]


def test_unsupported_file_never_reaches_extractor(engine):
    extractor = MagicMock(spec=TextExtractor)
    pipeline = IngestionPipeline(engine, extractor=extractor)

    assert pipeline.ingest_one(RawDocument("logo.png", b"\x89PNG")) is False
    extractor.extract.assert_not_called()


def test_empty_document_is_skipped(engine):
    pipeline = IngestionPipeline(engine)

    assert pipeline.ingest_one(RawDocument("blank.txt", b"   \n ")) is False
    assert engine.get_stats().total_documents == 0


def test_empty_batch_reports_zeros(engine):
    stats = IngestionPipeline(engine).ingest([])
    assert (stats.total_documents, stats.total_chunks) == (0, 0)


def test_invalid_fetch_concurrency_raises(engine):
    with pytest.raises(ValueError):
        IngestionPipeline(engine, fetch_concurrency=0)


@pytest.mark.asyncio
async def test_ingest_from_source_keeps_discovery_order(engine):
    source = FakeSource(
        names=["b.txt", "logo.png", "missing.txt", "a.txt"],
        files={
            "a.txt": b"Alpha handbook section.",
            "b.txt": b"Beta handbook section.",
        },
    )

    stats = await IngestionPipeline(engine, fetch_concurrency=2).ingest_from_source(source)

    assert [d.file_name for d in stats.documents] == ["b.txt", "a.txt"]
    assert "logo.png" not in source.fetched
    assert sorted(source.fetched) == ["a.txt", "b.txt", "missing.txt"]


@pytest.mark.asyncio
async def test_ingest_from_empty_source(engine):
    stats = await IngestionPipeline(engine).ingest_from_source(FakeSource([], {}))
    assert stats.total_documents == 0
