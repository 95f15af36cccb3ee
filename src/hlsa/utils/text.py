"""Text primitives shared by the scorers.

Tokenization, stemming, sentence/segment splitting, term weighting and
sentiment polarity. Everything here is deterministic.
"""
import logging
import re
from typing import AbstractSet, Optional, Protocol, Sequence

from nltk.stem import PorterStemmer
from nltk.tokenize import RegexpTokenizer
from sklearn.feature_extraction.text import TfidfVectorizer

from hlsa.lexicons import STOP_WORDS

logger = logging.getLogger(__name__)

_tokenizer = RegexpTokenizer(r"\w+")
_stemmer = PorterStemmer()

SENTENCE_BOUNDARY = re.compile(r"[.!?]+")
MAX_SEGMENT_CHARS = 200
VADER_RESOURCE = "sentiment/vader_lexicon.zip"


def tokenize(text: str) -> list[str]:
    """Word-boundary tokenization.

    Args:
        text: Input text

    Returns:
        Tokens in original order and case
    """
    return _tokenizer.tokenize(text)


def stem(token: str) -> str:
    """Porter stem of a lowercased token."""
    return _stemmer.stem(token.lower())


def split_sentences(text: str) -> list[str]:
    """Split text on runs of sentence punctuation.

    Args:
        text: Input text

    Returns:
        Stripped, non-empty sentences
    """
    parts = SENTENCE_BOUNDARY.split(text)
    return [p.strip() for p in parts if p.strip()]


def segment_text(text: str, max_chars: int = MAX_SEGMENT_CHARS) -> list[str]:
    """Group consecutive sentences into segments of up to ``max_chars``.

    A sentence longer than ``max_chars`` becomes its own segment.

    Args:
        text: Input text
        max_chars: Segment length limit in characters

    Returns:
        Ordered list of segments
    """
    segments = []
    current = ""
    for sentence in split_sentences(text):
        if current and len(current) + len(sentence) > max_chars:
            segments.append(current)
            current = sentence
        else:
            current = f"{current} {sentence}" if current else sentence
    if current:
        segments.append(current)
    return segments


def _identity(doc):
    return doc


def rank_terms(
    tokens: Sequence[str],
    top_n: Optional[int] = None,
    stop_words: AbstractSet[str] = STOP_WORDS,
) -> list[tuple[str, float]]:
    """Rank terms of a single document by TF-IDF weight.

    With one document the IDF factor is constant, so the ranking is a
    within-document frequency weighting. Tokens found in ``stop_words``
    are dropped.

    Args:
        tokens: Token sequence making up the document
        top_n: Keep only the first ``top_n`` terms
        stop_words: Lowercase words to drop; pass an empty set to keep all

    Returns:
        (term, weight) pairs, highest weight first, ties broken by term
    """
    terms = [t.lower() for t in tokens if t.lower() not in stop_words]
    if not terms:
        return []

    vectorizer = TfidfVectorizer(analyzer=_identity, norm=None)
    matrix = vectorizer.fit_transform([terms])
    weights = matrix.toarray()[0]
    ranked = sorted(
        zip(vectorizer.get_feature_names_out(), weights),
        key=lambda pair: (-pair[1], pair[0]),
    )
    ranked = [(str(term), float(weight)) for term, weight in ranked]
    return ranked[:top_n] if top_n is not None else ranked


class PolarityScorer(Protocol):
    """Returns a compound sentiment polarity in [-1, 1]."""

    def __call__(self, text: str) -> float: ...


def ensure_vader_lexicon() -> None:
    """Download the VADER lexicon if NLTK cannot find it.

    Raises:
        LookupError: If the lexicon is still missing after the download
    """
    import nltk

    try:
        nltk.data.find(VADER_RESOURCE)
    except LookupError:
        logger.info("Downloading NLTK package: vader_lexicon")
        nltk.download("vader_lexicon", quiet=True)
        nltk.data.find(VADER_RESOURCE)


class VaderPolarity:
    """Compound polarity from NLTK's VADER analyzer.

    The analyzer is built on first use.
    """

    def __init__(self):
        self._analyzer = None

    def __call__(self, text: str) -> float:
        if self._analyzer is None:
            from nltk.sentiment import SentimentIntensityAnalyzer

            ensure_vader_lexicon()
            self._analyzer = SentimentIntensityAnalyzer()
        return float(self._analyzer.polarity_scores(text)["compound"])
