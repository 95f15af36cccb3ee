"""Lexical/statistical text structure analysis."""
from hlsa.api.schemas import KeyTerm, TextStructure
from hlsa.utils.text import rank_terms, split_sentences, stem, tokenize

MAX_KEY_TERMS = 5


def analyze_text_structure(text: str) -> TextStructure:
    """Compute structural metrics for a text.

    Args:
        text: Raw user text

    Returns:
        TextStructure with lexical diversity (unique stems per token),
        average sentence length in tokens, top key terms and counts
    """
    tokens = tokenize(text)
    sentences = split_sentences(text)

    unique_stems = {stem(token) for token in tokens}
    lexical_diversity = len(unique_stems) / len(tokens) if tokens else 0.0
    avg_sentence_length = len(tokens) / len(sentences) if sentences else 0.0

    key_terms = [
        KeyTerm(term=term, weight=weight)
        for term, weight in rank_terms(tokens, top_n=MAX_KEY_TERMS)
    ]

    return TextStructure(
        lexical_diversity=min(max(lexical_diversity, 0.0), 1.0),
        avg_sentence_length=avg_sentence_length,
        key_terms=key_terms,
        token_count=len(tokens),
        sentence_count=len(sentences),
    )
