"""Static word tables used by the local scorers.

The tables are versioned data, not logic. A JSON file with the same keys
can replace them (see ``Settings.lexicon_path``) so they can be tuned
without touching the scoring code.
"""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


LEXICON_VERSION = "2024.1"

ACADEMIC_WORDS = (
    "analyze", "assess", "concept", "context", "contrast", "derive", "distribute",
    "environment", "establish", "estimate", "evaluate", "factor", "function",
    "identify", "interpret", "involve", "method", "occur", "principle", "proceed",
    "process", "require", "research", "respond", "significant", "similar",
    "specific", "structure", "theory", "variable",
)

CONNECTOR_WORDS = (
    "therefore", "however", "moreover", "consequently", "furthermore",
    "nevertheless", "thus", "hence", "accordingly", "besides",
)

VAGUE_TIME_PHRASES = (
    "recently", "lately", "the other day", "last week", "a while ago",
    "a few days ago", "some time ago", "earlier", "previously",
)

# Function words dropped from key terms; matched against surface tokens.
STOP_WORDS = frozenset((
    "about", "above", "after", "again", "all", "also", "am", "an", "and",
    "another", "any", "are", "as", "at", "be", "because", "been", "before",
    "being", "below", "between", "both", "but", "by", "came", "can", "cannot",
    "come", "could", "did", "do", "does", "doing", "during", "each", "few",
    "for", "from", "further", "get", "got", "has", "had", "he", "have", "her",
    "here", "him", "himself", "his", "how", "if", "in", "into", "is", "it",
    "its", "itself", "like", "make", "many", "me", "might", "more", "most",
    "much", "must", "my", "myself", "never", "now", "of", "on", "only", "or",
    "other", "our", "ours", "ourselves", "out", "over", "own", "said", "same",
    "see", "should", "since", "so", "some", "still", "such", "take", "than",
    "that", "the", "their", "theirs", "them", "themselves", "then", "there",
    "these", "they", "this", "those", "through", "to", "too", "under", "until",
    "up", "very", "was", "way", "we", "well", "were", "what", "where", "when",
    "which", "while", "who", "whom", "with", "would", "why", "you", "your",
    "yours", "yourself", "_",
    *"abcdefghijklmnopqrstuvwxyz",
    *"0123456789",
))


@dataclass(frozen=True)
class Lexicons:
    """Word tables for vocabulary and time-perception scoring."""
    version: str = LEXICON_VERSION
    academic_words: tuple[str, ...] = ACADEMIC_WORDS
    connector_words: tuple[str, ...] = CONNECTOR_WORDS
    vague_time_phrases: tuple[str, ...] = VAGUE_TIME_PHRASES
    source: Optional[str] = field(default=None, compare=False)


DEFAULT_LEXICONS = Lexicons()


def load_lexicons(path: Optional[str] = None) -> Lexicons:
    """Load word tables from a JSON file.

    Missing keys keep their default values.

    Args:
        path: JSON file path; ``None`` returns the built-in tables

    Returns:
        Lexicons instance

    Raises:
        ValueError: If the file is not a JSON object or a table is not a list of strings
    """
    if not path:
        return DEFAULT_LEXICONS

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Lexicon file {path} must contain a JSON object")

    tables = {}
    for key in ("academic_words", "connector_words", "vague_time_phrases"):
        if key not in data:
            continue
        values = data[key]
        if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
            raise ValueError(f"Lexicon table '{key}' must be a list of strings")
        tables[key] = tuple(v.lower() for v in values)

    return Lexicons(
        version=str(data.get("version", LEXICON_VERSION)),
        source=str(Path(path)),
        **tables,
    )
