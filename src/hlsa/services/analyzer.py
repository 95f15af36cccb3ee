"""Analysis Service.

Orchestrates one scoring pass: text structure, local AI-similarity
scorers, the six qualitative judges and the final classification.
"""
import logging
import time
from typing import Optional, Sequence

from hlsa.api.schemas import AnalysisReport, Classification
from hlsa.config import get_settings
from hlsa.lexicons import Lexicons, load_lexicons
from hlsa.services.ai_similarity import AISimilarityScorer
from hlsa.services.judges import (
    CompletionClient, JudgePanel, JudgeStatus, build_innovation_features
)
from hlsa.services.lexical import analyze_text_structure
from hlsa.services.llm_client import get_llm_client
from hlsa.services.store import SessionStore, get_session_store
from hlsa.utils.logging import hash_text, log_analysis_request, log_analysis_result
from hlsa.utils.text import PolarityScorer, segment_text

logger = logging.getLogger(__name__)

AI_SIMILARITY_WEIGHT = 0.4
INNOVATION_WEIGHT = 0.6
HUMAN_THRESHOLD = 0.7
AI_THRESHOLD = 0.3

# Delays outside this window are paste or idle anomalies
MIN_DELAY_MS = 100
MAX_DELAY_MS = 10000


class AnalysisError(RuntimeError):
    """Raised when the pipeline fails for a reason other than a judge failure."""


def filter_delays(delays: Sequence[float]) -> list[float]:
    """Keep delay samples within [100, 10000] ms."""
    return [d for d in delays if MIN_DELAY_MS <= d <= MAX_DELAY_MS]


def combine_overall(ai_similarity: float, innovation: float) -> float:
    """Blend the two sub-aggregates into the human-likeness score."""
    score = ai_similarity * AI_SIMILARITY_WEIGHT + innovation * INNOVATION_WEIGHT
    return min(max(score, 0.0), 1.0)


def classify(score: float) -> Classification:
    """Bucket a human-likeness score (both thresholds inclusive)."""
    if score >= HUMAN_THRESHOLD:
        return Classification.HUMAN
    if score <= AI_THRESHOLD:
        return Classification.AI
    return Classification.AMBIGUOUS


class AnalysisService:
    """Produces complete analysis reports."""

    def __init__(
        self,
        client: CompletionClient,
        store: Optional[SessionStore] = None,
        lexicons: Optional[Lexicons] = None,
        polarity: Optional[PolarityScorer] = None,
    ):
        """Initialize analysis service.

        Args:
            client: Completion service for the LLM judges
            store: Where reports are persisted when a session id is given
            lexicons: Word tables (defaults to the configured tables)
            polarity: Sentiment polarity primitive (defaults to VADER)
        """
        settings = get_settings()
        self.lexicons = lexicons or load_lexicons(settings.lexicon_path)
        self.store = store
        self.scorer = AISimilarityScorer(lexicons=self.lexicons, polarity=polarity)
        self.panel = JudgePanel(
            client,
            lexicons=self.lexicons,
            temperature=settings.judge_temperature,
            max_tokens=settings.judge_max_tokens,
        )

    async def analyze(
        self,
        text: str,
        response_delays: Sequence[float] = (),
        session_id: Optional[str] = None,
    ) -> AnalysisReport:
        """Analyze a text.

        Args:
            text: Non-empty user text
            response_delays: Raw inter-keystroke delays in milliseconds
            session_id: Session to persist the report under

        Returns:
            Fully populated AnalysisReport

        Raises:
            ValueError: If text is empty or whitespace only
            AnalysisError: On any unexpected pipeline failure
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty or whitespace only")

        start_time = time.time()
        delays = filter_delays(response_delays)
        log_analysis_request(text, len(delays), session_id)

        try:
            report, fallback_count = await self._run(text, delays)
        except Exception as e:
            logger.exception("Analysis pipeline failed")
            raise AnalysisError("Failed to analyze text") from e

        processing_time_ms = int((time.time() - start_time) * 1000)
        log_analysis_result(
            hash_text(text),
            report.overall_human_likeness_score,
            report.classification.value,
            fallback_count,
            processing_time_ms,
        )

        if session_id and self.store is not None:
            self._persist(session_id, text, report)

        return report

    async def _run(self, text: str, delays: list[float]) -> tuple[AnalysisReport, int]:
        segments = segment_text(text)
        text_structure = analyze_text_structure(text)
        ai_similarity = self.scorer.score(text, segments)

        outcomes = await self.panel.evaluate(text, delays)
        innovation = build_innovation_features(outcomes)
        fallback_count = sum(1 for o in outcomes.values() if o.status != JudgeStatus.OK)

        overall = combine_overall(ai_similarity.overall_score, innovation.overall_score)
        report = AnalysisReport(
            text_structure=text_structure,
            ai_similarity=ai_similarity,
            innovation_features=innovation,
            overall_human_likeness_score=overall,
            classification=classify(overall),
        )
        return report, fallback_count

    def _persist(self, session_id: str, text: str, report: AnalysisReport) -> None:
        try:
            self.store.save_analysis(session_id, text, report)
        except Exception as e:
            logger.warning(f"Could not store analysis for session {session_id}: {e}")


# Singleton instance
_analysis_service: Optional[AnalysisService] = None


def get_analysis_service() -> AnalysisService:
    """Get or create analysis service singleton."""
    global _analysis_service
    if _analysis_service is None:
        _analysis_service = AnalysisService(get_llm_client(), store=get_session_store())
    return _analysis_service


def reset_analysis_service() -> None:
    """Reset the analysis service singleton (useful for testing)."""
    global _analysis_service
    _analysis_service = None
