# voicerag/domain/interfaces.py

from abc import ABC, abstractmethod
from typing import List, Optional
import numpy as np

from .models import Chunk, ChunkMetadata, ScoredChunk


class EmbeddingPort(ABC):
    """
    Extension point for an embedding backend.
    Vectors are stored alongside index entries but never used for ranking.
    """

    @property
    @abstractmethod
    def dimension(self) -> int: ...

    @abstractmethod
    def embed(self, text: str) -> Optional[np.ndarray]: ...


class ChunkerPort(ABC):

    @abstractmethod
    def chunk(self, content: str, metadata: ChunkMetadata) -> List[Chunk]: ...


class IndexStorePort(ABC):

    @abstractmethod
    def index_chunks(self, chunks: List[Chunk]) -> None: ...

    @abstractmethod
    def search(self, query: str, top_k: int) -> List[ScoredChunk]: ...

    @abstractmethod
    def remove_document(self, file_name: str) -> int:
        """
        Drop every entry owned by a document.
        Returns the number of entries removed.
        """
        ...

    @abstractmethod
    def clear(self) -> None: ...

    @property
    @abstractmethod
    def size(self) -> int: ...


class DocumentSourcePort(ABC):
    """
    Where documents are discovered and fetched from: a manifest served over
    HTTP, or a local folder.
    """

    @abstractmethod
    async def discover(self) -> List[str]:
        """
        Return the file names available for ingestion.
        Failures degrade to an empty list, never raise.
        """
        ...

    @abstractmethod
    async def fetch(self, file_name: str) -> Optional[bytes]:
        """Return the file's bytes, or None when it cannot be retrieved."""
        ...
