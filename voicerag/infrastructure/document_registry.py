# voicerag/infrastructure/document_registry.py

import logging
import threading
from typing import List, Optional

from voicerag.domain.models import (
    DocumentRecord,
    DocumentSummary,
    FileType,
    IndexStats,
)


logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 200
PREVIEW_SUFFIX = "..."


def make_preview(raw_content: str) -> str:
    return raw_content[:PREVIEW_LENGTH] + PREVIEW_SUFFIX


class DocumentRegistry:
    """
    Per-document bookkeeping for display and stats. Never consulted when
    scoring.

    replace_on_reingest=True  → one record per file name, latest wins
    replace_on_reingest=False → every ingestion appends a record, so the same
                                file name is counted once per ingestion
    """

    def __init__(self, replace_on_reingest: bool = True):
        self._replace_on_reingest = replace_on_reingest
        self._records: List[DocumentRecord] = []
        self._lock = threading.Lock()

    @property
    def replace_on_reingest(self) -> bool:
        return self._replace_on_reingest

    def record_document(
        self,
        file_name: str,
        chunk_count: int,
        content_preview: str,
        file_type: FileType = FileType.UNKNOWN,
    ) -> DocumentRecord:
        record = DocumentRecord(
            file_name=file_name,
            chunk_count=chunk_count,
            content_preview=content_preview,
            file_type=file_type,
        )
        with self._lock:
            if self._replace_on_reingest:
                self._records = [r for r in self._records if r.file_name != file_name]
            self._records.append(record)
        return record

    def get_document(self, file_name: str) -> Optional[DocumentRecord]:
        """Most recent record for a file name."""
        for record in reversed(self._records):
            if record.file_name == file_name:
                return record
        return None

    def list_documents(self) -> List[DocumentRecord]:
        return list(self._records)

    def get_stats(self, total_chunks: int) -> IndexStats:
        records = self.list_documents()
        return IndexStats(
            total_documents=len(records),
            total_chunks=total_chunks,
            documents=[
                DocumentSummary(file_name=r.file_name, chunk_count=r.chunk_count)
                for r in records
            ],
        )

    def clear(self) -> None:
        with self._lock:
            self._records = []
