"""API Request/Response Schemas.

All data structures for the HLSA API endpoints and the analysis report.
"""
from enum import Enum
from typing import Annotated, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


Score = Annotated[float, Field(ge=0.0, le=1.0)]


class Classification(str, Enum):
    """Final authorship verdict."""
    HUMAN = "Human"
    AI = "AI"
    AMBIGUOUS = "Ambiguous"


# === Analysis report ===

class KeyTerm(BaseModel):
    """A weighted key term."""
    model_config = ConfigDict(frozen=True)

    term: str
    weight: float = Field(..., ge=0.0)


class TextStructure(BaseModel):
    """Structural metrics of the analyzed text."""
    model_config = ConfigDict(frozen=True)

    lexical_diversity: Score
    avg_sentence_length: float = Field(..., ge=0.0)
    key_terms: list[KeyTerm] = Field(default_factory=list, max_length=5)
    token_count: int = Field(..., ge=0)
    sentence_count: int = Field(..., ge=0)


class AISimilarity(BaseModel):
    """Local AI-similarity scores; ``overall_score`` is oriented towards human-likeness."""
    model_config = ConfigDict(frozen=True)

    vocabulary_complexity: Score
    emotional_fluctuation: Score
    creative_divergence: Score
    overall_score: Score


class FeatureResult(BaseModel):
    """Result of one qualitative judge."""
    model_config = ConfigDict(frozen=True)

    score: Score
    analysis: str
    human_vs_ai: str


class InnovationFeatures(BaseModel):
    """The six qualitative dimensions and their weighted combination."""
    model_config = ConfigDict(frozen=True)

    semantic_elasticity: FeatureResult
    emotional_expression: FeatureResult
    reference_ability: FeatureResult
    ambiguity_handling: FeatureResult
    creative_thinking: FeatureResult
    time_perception: FeatureResult
    overall_score: Score


class AnalysisReport(BaseModel):
    """Response body for /v1/analyze."""
    model_config = ConfigDict(frozen=True)

    text_structure: TextStructure
    ai_similarity: AISimilarity
    innovation_features: InnovationFeatures
    overall_human_likeness_score: Score
    classification: Classification


class AnalyzeRequest(BaseModel):
    """Request body for /v1/analyze."""
    text: str = Field(..., min_length=1, max_length=20000)
    response_delays: list[Annotated[int, Field(ge=0)]] = Field(
        default_factory=list,
        description="Inter-keystroke intervals in milliseconds",
    )
    session_id: Optional[str] = Field(None, min_length=1)

    @field_validator("text")
    @classmethod
    def text_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Text cannot be empty or whitespace only")
        return v


# === Sessions ===

class SessionCreateResponse(BaseModel):
    """Response body for POST /v1/sessions."""
    session_id: str


class SessionRecord(BaseModel):
    """A stored interview session."""
    id: str
    created_at: str


class InteractionRecord(BaseModel):
    """A stored question/response pair."""
    id: str
    session_id: str
    question: str
    response: str
    follow_up_question: Optional[str] = None
    depth: int = 1
    created_at: str


class AnalysisRecord(BaseModel):
    """A stored analysis result."""
    id: str
    session_id: str
    text: str
    report: AnalysisReport
    created_at: str


class SessionResponse(BaseModel):
    """Response body for GET /v1/sessions/{session_id}."""
    session: SessionRecord
    interactions: list[InteractionRecord]
    analysis_results: list[AnalysisRecord]


# === Questions ===

class QuestionResponse(BaseModel):
    """Response body for GET /v1/questions."""
    question: str
    category: Optional[str] = None


class CategoriesResponse(BaseModel):
    """Response body for GET /v1/questions/categories."""
    categories: list[str]


class FollowUpRequest(BaseModel):
    """Request body for /v1/questions/follow-up."""
    original_question: str = Field(..., min_length=1)
    user_response: str = Field(..., min_length=1)
    depth: int = Field(default=1, ge=1, le=3)
    session_id: Optional[str] = Field(None, min_length=1)


class FollowUpResponse(BaseModel):
    """Response body for /v1/questions/follow-up."""
    follow_up_question: str


# === Health ===

class HealthResponse(BaseModel):
    """Response body for /v1/health."""
    status: str
    llm_server: str
    model: Optional[str]
    storage: str
    lexicon_version: str
