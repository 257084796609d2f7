# voicerag/infrastructure/text_tokenizer.py

import re
from typing import List


MIN_KEYWORD_LENGTH = 3

STOPWORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "is", "are", "was", "were", "be", "been", "have", "has",
    "had", "do", "does", "did", "will", "would", "could", "should", "may",
    "might", "can", "this", "that", "these", "those", "i", "you", "he", "she",
    "it", "we", "they", "me", "him", "her", "us", "them",
})

_NON_WORD = re.compile(r"[^\w\s]")


def extract_keywords(text: str) -> List[str]:
    """
    Keyword rule shared by indexing and querying:
    - lower-case, strip everything that is neither a word char nor whitespace
    - keep tokens of 3+ characters that are not stopwords
    - deduplicate, first occurrence wins
    """
    if not text:
        return []

    stripped = _NON_WORD.sub("", text.lower())
    seen: dict[str, None] = {}
    for token in stripped.split():
        if len(token) >= MIN_KEYWORD_LENGTH and token not in STOPWORDS:
            seen.setdefault(token, None)
    return list(seen)
