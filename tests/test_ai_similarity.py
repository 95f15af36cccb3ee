"""Tests for AI-similarity scorers."""
import pytest
from hlsa.lexicons import Lexicons
from hlsa.services.ai_similarity import (
    AISimilarityScorer,
    combine_ai_similarity,
    concept_divergence,
    invert_ai_score,
    sentiment_variance,
    vocabulary_complexity,
)
from hlsa.utils.text import segment_text


class TestVocabularyComplexity:
    """Tests for vocabulary_complexity."""

    def test_empty_text(self):
        assert vocabulary_complexity("") == 0.0

    def test_academic_connector_and_branching(self):
        """Six tokens: three academic, one connector, every stem followed once."""
        text = "However the research method is significant."
        # 0.4 * 3/6 + 0.3 * 1/6 + 0.3 * (1 / 5)
        assert vocabulary_complexity(text) == pytest.approx(0.31)

    def test_repetitive_text(self):
        """Alternating words give a branching factor of one."""
        assert vocabulary_complexity("cat dog cat dog cat dog") == pytest.approx(0.06)

    def test_custom_lexicons(self):
        lexicons = Lexicons(academic_words=("cat",), connector_words=())
        score = vocabulary_complexity("cat dog cat dog", lexicons)
        # 0.4 * 2/4 + 0 + 0.3 * (1 / 5)
        assert score == pytest.approx(0.26)

    def test_within_unit_range(self):
        text = " ".join(["therefore research"] * 50)
        assert 0.0 <= vocabulary_complexity(text) <= 1.0


class TestSentimentVariance:
    """Tests for sentiment_variance."""

    def test_fewer_than_two_segments(self, polarity):
        assert sentiment_variance([], polarity) == 0.0
        assert sentiment_variance(["I love it"], polarity) == 0.0

    def test_normalized_standard_deviation(self, polarity):
        # Polarities 0.8 and 0.0: population std 0.4, divided by 0.5
        assert sentiment_variance(["I love it", "It is a table"], polarity) == pytest.approx(0.8)

    def test_capped_at_one(self, polarity):
        assert sentiment_variance(["I love it", "I hate it"], polarity) == 1.0

    def test_flat_sentiment(self, polarity):
        assert sentiment_variance(["a chair", "a table", "a lamp"], polarity) == 0.0


class TestConceptDivergence:
    """Tests for concept_divergence."""

    def test_fewer_than_two_segments(self):
        assert concept_divergence([]) == 0.0
        assert concept_divergence(["apples oranges pears"]) == 0.0

    def test_same_topic(self):
        segments = ["apples oranges pears", "pears apples oranges"]
        assert concept_divergence(segments) == 0.0

    def test_disjoint_topics_capped(self):
        segments = ["apples oranges pears", "cars trucks boats"]
        assert concept_divergence(segments) == 1.0

    def test_average_jump(self):
        segments = ["apples oranges pears", "apples oranges pears", "cars trucks boats"]
        # Jumps 0 and 1, mean 0.5, amplified by 1.5
        assert concept_divergence(segments) == pytest.approx(0.75)

    def test_segments_without_terms(self):
        assert concept_divergence(["?!", "..."]) == 0.0

    def test_content_words_count_as_concepts(self):
        """Plural and singular forms share a stem; distinct topics still diverge."""
        assert concept_divergence(["system fire systems", "bill interest bills"]) == 1.0

    def test_function_words_kept(self):
        # {and, the} vs {of, the}: similarity 0.5, jump 0.5, amplified by 1.5
        assert concept_divergence(["the and", "of the"]) == pytest.approx(0.75)


class TestAggregation:
    """Tests for the inversion and weighted combination."""

    def test_invert(self):
        assert invert_ai_score(0.0) == 1.0
        assert invert_ai_score(1.0) == 0.0
        assert invert_ai_score(0.25) == pytest.approx(0.875)

    def test_combine(self):
        assert combine_ai_similarity(0.0, 0.0, 0.0) == pytest.approx(1.0)
        assert combine_ai_similarity(1.0, 1.0, 1.0) == pytest.approx(0.0)
        # 0.3 * 0.875 + 0.4 * 1 + 0.3 * 0
        assert combine_ai_similarity(0.25, 0.0, 1.0) == pytest.approx(0.6625)


class TestAISimilarityScorer:
    """Tests for the scorer bundle."""

    TEXT = (
        "I love rainy mornings because the city goes quiet and the coffee tastes better. "
        "Last week I hate-watched a documentary about trains, which was oddly relaxing. "
        "However, the research method they described seemed significant to me. "
        "Anyway, my cat knocked a plant over while I was writing this, so there's that."
    )

    def test_scores_in_range(self, polarity):
        scorer = AISimilarityScorer(polarity=polarity)
        result = scorer.score(self.TEXT, segment_text(self.TEXT))
        for value in result.model_dump().values():
            assert 0.0 <= value <= 1.0

    def test_deterministic(self, polarity):
        scorer = AISimilarityScorer(polarity=polarity)
        segments = segment_text(self.TEXT)
        assert scorer.score(self.TEXT, segments) == scorer.score(self.TEXT, segments)

    def test_overall_matches_combination(self, polarity):
        scorer = AISimilarityScorer(polarity=polarity)
        result = scorer.score(self.TEXT, segment_text(self.TEXT))
        expected = combine_ai_similarity(
            result.vocabulary_complexity,
            result.emotional_fluctuation,
            result.creative_divergence,
        )
        assert result.overall_score == pytest.approx(expected)
