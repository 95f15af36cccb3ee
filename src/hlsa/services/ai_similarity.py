"""AI-similarity scoring.

Three local scorers measure "AI-likeness" magnitudes of a text:
- Vocabulary complexity: academic and connector word density plus the
  branching factor of a first-order word transition table
- Emotional fluctuation: spread of sentiment polarity across segments
- Creative divergence: topic jumps between consecutive segments

The aggregate inverts each magnitude with ``1 - x**1.5`` and combines
them into a human-likeness oriented score.
"""
import logging
from collections import defaultdict
from typing import Optional, Sequence

import numpy as np

from hlsa.api.schemas import AISimilarity
from hlsa.lexicons import DEFAULT_LEXICONS, Lexicons
from hlsa.utils.text import PolarityScorer, VaderPolarity, rank_terms, stem, tokenize

logger = logging.getLogger(__name__)

# Component weights
VOCAB_WEIGHTS = (0.4, 0.3, 0.3)  # academic, connector, branching
AGGREGATE_WEIGHTS = (0.3, 0.4, 0.3)  # vocabulary, sentiment, divergence

BRANCHING_NORMALIZER = 5.0
TYPICAL_HUMAN_SENTIMENT_STD = 0.5
DIVERGENCE_AMPLIFIER = 1.5
INVERSION_EXPONENT = 1.5
CONCEPTS_PER_SEGMENT = 3


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp a value into [low, high]."""
    return min(max(value, low), high)


def vocabulary_complexity(text: str, lexicons: Lexicons = DEFAULT_LEXICONS) -> float:
    """Score vocabulary complexity of a text.

    Args:
        text: Text to analyze
        lexicons: Word tables providing academic and connector words

    Returns:
        0.4 * academic density + 0.3 * connector density
        + 0.3 * normalized transition branching
    """
    tokens = tokenize(text)
    if not tokens:
        return 0.0

    stems = [stem(token) for token in tokens]
    academic = {stem(word) for word in lexicons.academic_words}
    connectors = {stem(word) for word in lexicons.connector_words}

    academic_density = sum(1 for s in stems if s in academic) / len(tokens)
    connector_density = sum(1 for s in stems if s in connectors) / len(tokens)

    transitions: dict[str, set[str]] = defaultdict(set)
    for current, following in zip(stems, stems[1:]):
        transitions[current].add(following)

    if transitions:
        avg_branching = sum(len(s) for s in transitions.values()) / len(transitions)
    else:
        avg_branching = 0.0
    branching = min(avg_branching / BRANCHING_NORMALIZER, 1.0)

    w_academic, w_connector, w_branching = VOCAB_WEIGHTS
    return (
        academic_density * w_academic
        + connector_density * w_connector
        + branching * w_branching
    )


def sentiment_variance(segments: Sequence[str], polarity: PolarityScorer) -> float:
    """Score emotional fluctuation across text segments.

    Args:
        segments: Ordered text segments
        polarity: Compound polarity primitive

    Returns:
        Population standard deviation of segment polarity divided by 0.5,
        capped at 1; 0 for fewer than two segments
    """
    if len(segments) < 2:
        return 0.0

    scores = np.array([polarity(segment) for segment in segments], dtype=float)
    std = float(np.std(scores))
    return min(std / TYPICAL_HUMAN_SENTIMENT_STD, 1.0)


def segment_concepts(segment: str, top_n: int = CONCEPTS_PER_SEGMENT) -> list[str]:
    """Top weighted stemmed terms of a segment, stop words included."""
    stems = [stem(token) for token in tokenize(segment)]
    return [term for term, _ in rank_terms(stems, top_n=top_n, stop_words=frozenset())]


def concept_divergence(segments: Sequence[str]) -> float:
    """Score topic jumps between consecutive segments.

    Similarity of two segments is the overlap of their top-3 terms divided
    by the larger set size; jump distance is ``1 - similarity``.

    Args:
        segments: Ordered text segments

    Returns:
        Mean jump distance times 1.5, capped at 1; 0 for fewer than two segments
    """
    if len(segments) < 2:
        return 0.0

    concepts = [set(segment_concepts(segment)) for segment in segments]

    total_jump = 0.0
    for current, following in zip(concepts, concepts[1:]):
        larger = max(len(current), len(following))
        # Two segments without content terms are treated as the same topic
        similarity = len(current & following) / larger if larger else 1.0
        total_jump += 1.0 - similarity

    avg_jump = total_jump / (len(concepts) - 1)
    return min(avg_jump * DIVERGENCE_AMPLIFIER, 1.0)


def invert_ai_score(ai_score: float) -> float:
    """Map an AI-likeness magnitude to human-likeness: ``1 - x**1.5``."""
    return 1.0 - clamp(ai_score) ** INVERSION_EXPONENT


def combine_ai_similarity(
    vocabulary: float,
    emotional: float,
    divergence: float,
) -> float:
    """Combine the three scorers into the human-likeness oriented aggregate."""
    w_vocab, w_emotion, w_divergence = AGGREGATE_WEIGHTS
    return clamp(
        invert_ai_score(vocabulary) * w_vocab
        + invert_ai_score(emotional) * w_emotion
        + invert_ai_score(divergence) * w_divergence
    )


class AISimilarityScorer:
    """Runs the three local scorers and their aggregation."""

    def __init__(
        self,
        lexicons: Lexicons = DEFAULT_LEXICONS,
        polarity: Optional[PolarityScorer] = None,
    ):
        """Initialize scorer.

        Args:
            lexicons: Word tables for vocabulary scoring
            polarity: Sentiment polarity primitive (defaults to VADER)
        """
        self.lexicons = lexicons
        self.polarity = polarity or VaderPolarity()

    def score(self, text: str, segments: Sequence[str]) -> AISimilarity:
        """Score a text.

        Args:
            text: Full text
            segments: Text segments for the variance and divergence scorers

        Returns:
            AISimilarity with every field in [0, 1]
        """
        vocab = clamp(vocabulary_complexity(text, self.lexicons))
        emotional = clamp(sentiment_variance(segments, self.polarity))
        divergence = clamp(concept_divergence(segments))
        overall = combine_ai_similarity(vocab, emotional, divergence)

        logger.debug(
            f"AI similarity: vocab={vocab:.3f}, emotional={emotional:.3f}, "
            f"divergence={divergence:.3f}, overall={overall:.3f}"
        )

        return AISimilarity(
            vocabulary_complexity=vocab,
            emotional_fluctuation=emotional,
            creative_divergence=divergence,
            overall_score=overall,
        )
