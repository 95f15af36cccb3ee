"""HLSA utilities package."""

from hlsa.utils.text import (
    tokenize,
    stem,
    split_sentences,
    segment_text,
    rank_terms,
    VaderPolarity,
)

__all__ = [
    "tokenize",
    "stem",
    "split_sentences",
    "segment_text",
    "rank_terms",
    "VaderPolarity",
]
