# voicerag/infrastructure/sentence_chunker.py

import logging
import re
from typing import List

from voicerag.domain.interfaces import ChunkerPort
from voicerag.domain.models import Chunk, ChunkMetadata


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 500
DEFAULT_CHUNK_OVERLAP = 100

# Overlap is configured in characters and carried over as whole words,
# assuming roughly five characters per word.
CHARS_PER_OVERLAP_WORD = 5

# Page heuristic: the page counter moves on whenever the running buffer
# holds more than this many words. Shared across the whole document.
WORDS_PER_PAGE = 300

SENTENCE_BOUNDARY = re.compile(r"[.!?]+")


def make_chunk_id(file_name: str, chunk_index: int) -> str:
    return f"{file_name}_chunk_{chunk_index}"


class SentenceChunker(ChunkerPort):
    """
    Packs whole sentences into passages of roughly `chunk_size` characters.

    - A passage is closed as soon as the next sentence would push it past
      `chunk_size`; a single oversized sentence still becomes its own passage
    - Each new passage starts with the last `chunk_overlap // 5` words of the
      previous one, so context survives the cut
    - Page numbers are a heuristic, not a layout fact
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    ):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}.")
        if chunk_overlap < 0:
            raise ValueError(f"chunk_overlap cannot be negative, got {chunk_overlap}.")
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap

    @property
    def overlap_words(self) -> int:
        return self._chunk_overlap // CHARS_PER_OVERLAP_WORD

    @staticmethod
    def split_sentences(content: str) -> List[str]:
        """Split on runs of . ! ? and drop fragments that are blank."""
        return [
            fragment.strip()
            for fragment in SENTENCE_BOUNDARY.split(content)
            if fragment.strip()
        ]

    def chunk(self, content: str, metadata: ChunkMetadata) -> List[Chunk]:
        if not content or not content.strip():
            return []

        chunks: List[Chunk] = []
        buffer = ""
        page_number = 1

        for sentence in self.split_sentences(content):
            if buffer and len(buffer) + len(sentence) > self._chunk_size:
                chunks.append(self._make_chunk(buffer, metadata, page_number, len(chunks) + 1))
                buffer = self._seed_with_overlap(buffer, sentence)
            else:
                buffer = f"{buffer} {sentence}" if buffer else sentence

            if len(buffer.split()) > WORDS_PER_PAGE:
                page_number += 1

        if buffer.strip():
            chunks.append(self._make_chunk(buffer, metadata, page_number, len(chunks) + 1))

        logger.debug(
            "[SentenceChunker] %s → %d chunk(s), last page %d",
            metadata.file_name, len(chunks), page_number,
        )
        return chunks

    # ─── Private ──────────────────────────────────────────────────────────────

    def _seed_with_overlap(self, previous: str, sentence: str) -> str:
        if self.overlap_words == 0:
            return sentence
        tail = previous.split()[-self.overlap_words:]
        return " ".join(tail + [sentence])

    @staticmethod
    def _make_chunk(
        buffer: str,
        metadata: ChunkMetadata,
        page_number: int,
        chunk_index: int,
    ) -> Chunk:
        return Chunk(
            chunk_id=make_chunk_id(metadata.file_name, chunk_index),
            content=buffer.strip(),
            file_name=metadata.file_name,
            page_number=page_number,
            chunk_index=chunk_index,
            file_type=metadata.file_type,
            processed_at=metadata.processed_at,
        )
