"""Qualitative feature judges.

Five dimensions are judged by the language model against a fixed rubric
of typical human versus typical AI traits. The sixth, time perception,
is computed locally from typing delays and temporal wording.

Every judge yields a FeatureResult. When the model cannot be reached or
its reply cannot be used, the dimension gets a neutral fallback result
so that a report always carries all six dimensions.
"""
import asyncio
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Protocol, Sequence

from hlsa.api.schemas import FeatureResult, InnovationFeatures
from hlsa.lexicons import DEFAULT_LEXICONS, Lexicons
from hlsa.utils.logging import hash_text, log_judge_outcome

logger = logging.getLogger(__name__)


class Dimension(str, Enum):
    """Innovation feature dimensions, in report order."""
    SEMANTIC_ELASTICITY = "semantic_elasticity"
    EMOTIONAL_EXPRESSION = "emotional_expression"
    REFERENCE_ABILITY = "reference_ability"
    AMBIGUITY_HANDLING = "ambiguity_handling"
    CREATIVE_THINKING = "creative_thinking"
    TIME_PERCEPTION = "time_perception"

    @property
    def label(self) -> str:
        """Human-readable name, e.g. 'semantic elasticity'."""
        return self.value.replace("_", " ")


class JudgeStatus(str, Enum):
    """How a judge result was obtained."""
    OK = "ok"
    UNPARSED = "unparsed"  # Reply had no score; neutral 0.5 reported
    FALLBACK = "fallback"  # Call failed; canned result reported


@dataclass(frozen=True)
class Rubric:
    """Rubric for one LLM-judged dimension."""
    dimension: Dimension
    focus: str
    human_traits: tuple[str, ...]
    ai_traits: tuple[str, ...]
    human_vs_ai: str


@dataclass(frozen=True)
class JudgeOutcome:
    """A judge's public result plus how it was obtained."""
    dimension: Dimension
    result: FeatureResult
    status: JudgeStatus


class CompletionClient(Protocol):
    """Text-completion service used by the judges."""

    async def complete(
        self,
        messages: list[dict],
        temperature: float = ...,
        max_tokens: int = ...,
    ) -> str: ...


# ==============================================================================
# Rubrics
# ==============================================================================

RUBRICS: dict[Dimension, Rubric] = {
    Dimension.SEMANTIC_ELASTICITY: Rubric(
        dimension=Dimension.SEMANTIC_ELASTICITY,
        focus="semantic elasticity (flexibility and contextual adaptation)",
        human_traits=(
            "Natural topic transitions",
            "Willingness to acknowledge knowledge gaps",
            "Flexible reasoning patterns",
        ),
        ai_traits=(
            "Rigid logical structures",
            "Overuse of transition phrases",
            "Reluctance to admit uncertainty",
        ),
        human_vs_ai=(
            "Human: topic natural transitions, acknowledges knowledge gaps\n"
            "AI: rigid logical structure, overuses transition phrases"
        ),
    ),
    Dimension.EMOTIONAL_EXPRESSION: Rubric(
        dimension=Dimension.EMOTIONAL_EXPRESSION,
        focus="emotional expression richness and authenticity",
        human_traits=(
            "Micro-emotional fluctuations (hesitation, humor)",
            "Asymmetric emotional responses",
            "Authentic personal reactions",
        ),
        ai_traits=(
            "Flat emotional tone",
            "Excessive political correctness",
            "Balanced, measured responses",
        ),
        human_vs_ai=(
            "Human: micro-emotional fluctuations, asymmetric responses\n"
            "AI: flat emotional tone, excessive political correctness"
        ),
    ),
    Dimension.REFERENCE_ABILITY: Rubric(
        dimension=Dimension.REFERENCE_ABILITY,
        focus="reference ability (personal experiences and specific details)",
        human_traits=(
            "Concrete, specific examples (\"last week's client meeting\")",
            "Idiosyncratic details that aren't necessary but add authenticity",
            "Temporal anchoring to personal timeline",
        ),
        ai_traits=(
            "Generic examples (\"a client meeting\")",
            "Reference to studies or general knowledge",
            "Lack of specific temporal anchoring",
        ),
        human_vs_ai=(
            "Human: concrete examples, idiosyncratic details\n"
            "AI: generic examples, references to studies"
        ),
    ),
    Dimension.AMBIGUITY_HANDLING: Rubric(
        dimension=Dimension.AMBIGUITY_HANDLING,
        focus="handling of ambiguity and conflicting information",
        human_traits=(
            "Temporary contradictions",
            "Self-correction and revision of thoughts",
            "Comfort with uncertainty",
        ),
        ai_traits=(
            "Forced consistency",
            "Avoidance of uncertainty",
            "Balanced presentation of alternatives",
        ),
        human_vs_ai=(
            "Human: temporary contradictions, self-correction\n"
            "AI: forced consistency, avoidance of uncertainty"
        ),
    ),
    Dimension.CREATIVE_THINKING: Rubric(
        dimension=Dimension.CREATIVE_THINKING,
        focus="creative thinking and unconventional solution capabilities",
        human_traits=(
            "Cross-domain analogies",
            "Imperfect but novel ideas",
            "Unexpected connections",
        ),
        ai_traits=(
            "Pattern-based innovation",
            "Formulaic creativity (\"combining X with Y\")",
            "Reference to established frameworks",
        ),
        human_vs_ai=(
            "Human: cross-domain analogies, imperfect but novel ideas\n"
            "AI: pattern-based innovation, formulaic creativity"
        ),
    ),
}

TIME_PERCEPTION_HUMAN_VS_AI = (
    "Human: reasonable delays, vague time references\n"
    "AI: instant responses, precise time references"
)

HUMAN_VS_AI: dict[Dimension, str] = {
    **{dimension: rubric.human_vs_ai for dimension, rubric in RUBRICS.items()},
    Dimension.TIME_PERCEPTION: TIME_PERCEPTION_HUMAN_VS_AI,
}

INNOVATION_WEIGHTS: dict[Dimension, float] = {
    Dimension.SEMANTIC_ELASTICITY: 0.20,
    Dimension.EMOTIONAL_EXPRESSION: 0.20,
    Dimension.REFERENCE_ABILITY: 0.15,
    Dimension.AMBIGUITY_HANDLING: 0.15,
    Dimension.CREATIVE_THINKING: 0.15,
    Dimension.TIME_PERCEPTION: 0.15,
}

NEUTRAL_SCORE = 0.5

# "Score: 0.8", "score 0,75", "SCORE: .6"
SCORE_PATTERN = re.compile(r"score\s*:?\s*(\d+(?:[.,]\d+)?|[.,]\d+)", re.IGNORECASE)


# ==============================================================================
# LLM judges
# ==============================================================================

def build_judge_messages(rubric: Rubric, text: str) -> list[dict]:
    """Build the chat messages for one rubric.

    Args:
        rubric: Dimension rubric
        text: User text to judge

    Returns:
        System rubric message followed by the raw user text
    """
    human = "\n".join(f"- {trait}" for trait in rubric.human_traits)
    ai = "\n".join(f"- {trait}" for trait in rubric.ai_traits)
    system = (
        f"Analyze the following text for {rubric.focus}.\n\n"
        f"Human text typically shows:\n{human}\n\n"
        f"AI text typically shows:\n{ai}\n\n"
        "Score the text from 0 (very AI-like) to 1 (very human-like) and provide "
        "a brief analysis. Start your reply with \"Score: <number>\"."
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": text},
    ]


def parse_score(reply: str) -> tuple[float, bool]:
    """Extract a 0-1 score from a free-text reply.

    Args:
        reply: Model reply

    Returns:
        Tuple of (clamped score, whether a score was found); 0.5 when not found
    """
    match = SCORE_PATTERN.search(reply or "")
    if not match:
        return NEUTRAL_SCORE, False
    value = float(match.group(1).replace(",", "."))
    return min(max(value, 0.0), 1.0), True


def fallback_result(dimension: Dimension) -> FeatureResult:
    """Neutral result substituted when a judge cannot complete."""
    return FeatureResult(
        score=NEUTRAL_SCORE,
        analysis=f"Error analyzing {dimension.label}",
        human_vs_ai=HUMAN_VS_AI[dimension],
    )


class LLMJudge:
    """Judges one dimension by asking the language model."""

    def __init__(
        self,
        rubric: Rubric,
        client: CompletionClient,
        temperature: float = 0.3,
        max_tokens: int = 250,
    ):
        self.rubric = rubric
        self.client = client
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def dimension(self) -> Dimension:
        return self.rubric.dimension

    async def judge(self, text: str) -> JudgeOutcome:
        """Judge a text.

        Raises:
            Whatever the completion client raises on failure
        """
        reply = await self.client.complete(
            messages=build_judge_messages(self.rubric, text),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        score, parsed = parse_score(reply)
        if not parsed:
            logger.warning(f"No score found in {self.dimension.label} reply; using neutral {NEUTRAL_SCORE}")
        return JudgeOutcome(
            dimension=self.dimension,
            result=FeatureResult(
                score=score,
                analysis=reply,
                human_vs_ai=self.rubric.human_vs_ai,
            ),
            status=JudgeStatus.OK if parsed else JudgeStatus.UNPARSED,
        )

    async def judge_or_fallback(self, text: str) -> JudgeOutcome:
        """Judge a text, converting any failure into the fallback result."""
        try:
            return await self.judge(text)
        except Exception as e:
            logger.warning(f"Error analyzing {self.dimension.label}: {e!r}")
            return JudgeOutcome(
                dimension=self.dimension,
                result=fallback_result(self.dimension),
                status=JudgeStatus.FALLBACK,
            )


# ==============================================================================
# Time perception (local)
# ==============================================================================

HUMAN_DELAY_WINDOW_MS = (1200, 3400)
FAST_DELAY_MS = 500
DELAY_ADJUSTMENT = 0.2
TIME_REFERENCE_ADJUSTMENT = 0.15

PRECISE_DATE_PATTERN = re.compile(r"\b\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}\b")
PRECISE_TIME_PATTERN = re.compile(r"\b\d{1,2}:\d{2}\b")


def judge_time_perception(
    text: str,
    delays: Sequence[float],
    lexicons: Lexicons = DEFAULT_LEXICONS,
) -> JudgeOutcome:
    """Judge time perception from typing delays and temporal wording.

    Args:
        text: User text
        delays: Inter-keystroke delays in milliseconds
        lexicons: Word tables providing the vague time phrases

    Returns:
        JudgeOutcome with a deterministic templated analysis
    """
    avg_delay = sum(delays) / len(delays) if delays else 0.0

    lowered = text.lower()
    has_vague = any(phrase in lowered for phrase in lexicons.vague_time_phrases)
    has_precise = bool(PRECISE_DATE_PATTERN.search(text) or PRECISE_TIME_PATTERN.search(text))

    score = NEUTRAL_SCORE
    low, high = HUMAN_DELAY_WINDOW_MS
    if low <= avg_delay <= high:
        score += DELAY_ADJUSTMENT
    elif avg_delay < FAST_DELAY_MS:
        score -= DELAY_ADJUSTMENT
    if has_vague:
        score += TIME_REFERENCE_ADJUSTMENT
    if has_precise:
        score -= TIME_REFERENCE_ADJUSTMENT
    score = min(max(score, 0.0), 1.0)

    analysis = (
        "Time perception analysis:\n"
        f"- Average response delay: {round(avg_delay)}ms\n"
        f"- Uses vague time references: {'Yes' if has_vague else 'No'}\n"
        f"- Uses precise time references: {'Yes' if has_precise else 'No'}\n"
        f"- Overall time perception score: {score:.2f}\n"
    )
    if score > 0.7:
        analysis += "The text shows human-like time perception patterns."
    elif score < 0.3:
        analysis += "The text shows AI-like time perception patterns."
    else:
        analysis += "The text shows mixed time perception patterns."

    return JudgeOutcome(
        dimension=Dimension.TIME_PERCEPTION,
        result=FeatureResult(
            score=score,
            analysis=analysis,
            human_vs_ai=TIME_PERCEPTION_HUMAN_VS_AI,
        ),
        status=JudgeStatus.OK,
    )


# ==============================================================================
# Panel and aggregation
# ==============================================================================

def combine_innovation_features(scores: Mapping[Dimension, float]) -> float:
    """Weighted sum of the six dimension scores."""
    total = sum(scores[dimension] * weight for dimension, weight in INNOVATION_WEIGHTS.items())
    return min(max(total, 0.0), 1.0)


class JudgePanel:
    """Runs all six judges for one text."""

    def __init__(
        self,
        client: CompletionClient,
        rubrics: Optional[Mapping[Dimension, Rubric]] = None,
        lexicons: Lexicons = DEFAULT_LEXICONS,
        temperature: float = 0.3,
        max_tokens: int = 250,
    ):
        """Initialize panel.

        Args:
            client: Completion service for the LLM judges
            rubrics: Rubric table (defaults to RUBRICS)
            lexicons: Word tables for the time perception judge
            temperature: Judge sampling temperature
            max_tokens: Judge output budget
        """
        rubrics = rubrics if rubrics is not None else RUBRICS
        self.lexicons = lexicons
        self.judges = [
            LLMJudge(rubric, client, temperature=temperature, max_tokens=max_tokens)
            for rubric in rubrics.values()
        ]

    async def evaluate(self, text: str, delays: Sequence[float]) -> dict[Dimension, JudgeOutcome]:
        """Run the LLM judges concurrently and the time judge locally.

        Args:
            text: User text
            delays: Filtered typing delays in milliseconds

        Returns:
            Outcomes keyed by dimension, in report order
        """
        llm_outcomes = await asyncio.gather(
            *(judge.judge_or_fallback(text) for judge in self.judges)
        )
        outcomes = {outcome.dimension: outcome for outcome in llm_outcomes}
        outcomes[Dimension.TIME_PERCEPTION] = judge_time_perception(text, delays, self.lexicons)

        text_hash = hash_text(text)
        ordered = {}
        for dimension in Dimension:
            outcome = outcomes.get(dimension)
            if outcome is None:
                logger.warning(f"No judge configured for {dimension.label}; using fallback")
                outcome = JudgeOutcome(dimension, fallback_result(dimension), JudgeStatus.FALLBACK)
            log_judge_outcome(text_hash, dimension.value, outcome.status.value, outcome.result.score)
            ordered[dimension] = outcome
        return ordered


def build_innovation_features(outcomes: Mapping[Dimension, JudgeOutcome]) -> InnovationFeatures:
    """Assemble InnovationFeatures from judge outcomes."""
    results = {dimension.value: outcomes[dimension].result for dimension in Dimension}
    overall = combine_innovation_features(
        {dimension: outcomes[dimension].result.score for dimension in Dimension}
    )
    return InnovationFeatures(**results, overall_score=overall)
