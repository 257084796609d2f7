# voicerag/infrastructure/embedding_engine.py
# Placeholder backend: keeps the vector slot filled until a real model exists.

import numpy as np
from typing import Optional

from voicerag.domain.interfaces import EmbeddingPort


DEFAULT_DIMENSION = 1536


class LengthEmbeddingEngine(EmbeddingPort):
    """
    Deterministic stand-in for an embedding model.
    Slot i holds len(word_i) / 10 for the first `dimension` whitespace tokens
    of the lower-cased text; remaining slots are zero.
    """

    def __init__(self, dimension: int = DEFAULT_DIMENSION):
        if dimension <= 0:
            raise ValueError(f"dimension must be positive, got {dimension}.")
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> Optional[np.ndarray]:
        vector = np.zeros(self._dimension, dtype=np.float32)
        words = text.lower().split()[: self._dimension]
        if words:
            vector[: len(words)] = [len(word) / 10 for word in words]
        return vector
