# voicerag/domain/models.py

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union
import numpy as np


class FileType(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    DOC = "doc"
    TXT = "txt"
    UNKNOWN = "unknown"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RawDocument:
    """
    A document as handed to the ingestion pipeline: a file name plus either
    raw bytes (fetched or uploaded) or already-decoded text.
    """
    file_name: str
    content: Union[bytes, str]


@dataclass(frozen=True)
class Document:
    """
    A successfully extracted document. Replaced, never merged, when the same
    file name is ingested again.
    """
    file_name: str
    file_type: FileType
    raw_content: str
    processed_at: datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class ChunkMetadata:
    file_name: str
    file_type: FileType = FileType.UNKNOWN
    processed_at: datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class Chunk:
    """
    A bounded passage of a document, the unit of indexing and retrieval.
    """
    chunk_id: str
    content: str
    file_name: str
    page_number: int = 1
    chunk_index: int = 1
    file_type: FileType = FileType.UNKNOWN
    processed_at: datetime = field(default_factory=_utc_now, compare=False)


@dataclass
class IndexEntry:
    chunk: Chunk
    keywords: frozenset
    embedding: Optional[np.ndarray] = field(default=None, repr=False)


@dataclass
class ScoredChunk:
    """
    Represents a ranked search result returned to the caller.
    """
    chunk: Chunk
    relevance: float

    @property
    def content(self) -> str:
        return self.chunk.content

    @property
    def source(self) -> str:
        return f"{self.chunk.file_name} (Page {self.chunk.page_number})"

    def __repr__(self) -> str:
        preview = self.chunk.content[:80].replace("\n", " ")
        return (
            f"ScoredChunk(relevance={self.relevance:.4f}, "
            f"source='{self.source}', "
            f"preview='{preview}...')"
        )


@dataclass(frozen=True)
class DocumentRecord:
    """Display-only bookkeeping for an ingested document."""
    file_name: str
    chunk_count: int
    content_preview: str
    file_type: FileType = FileType.UNKNOWN
    processed_at: datetime = field(default_factory=_utc_now, compare=False)


@dataclass(frozen=True)
class DocumentSummary:
    file_name: str
    chunk_count: int


@dataclass(frozen=True)
class IndexStats:
    total_documents: int = 0
    total_chunks: int = 0
    documents: List[DocumentSummary] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalDocuments": self.total_documents,
            "totalChunks": self.total_chunks,
            "documents": [
                {"fileName": doc.file_name, "chunks": doc.chunk_count}
                for doc in self.documents
            ],
        }
