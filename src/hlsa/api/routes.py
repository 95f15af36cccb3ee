"""API Routes.

FastAPI route definitions for HLSA.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from hlsa.api.schemas import (
    AnalyzeRequest, AnalysisReport,
    SessionCreateResponse, SessionResponse,
    QuestionResponse, CategoriesResponse, FollowUpRequest, FollowUpResponse,
    HealthResponse,
)
from hlsa.services.analyzer import AnalysisError, AnalysisService, get_analysis_service
from hlsa.services.llm_client import LLMClient, get_llm_client
from hlsa.services.questions import (
    FollowUpGenerator, QuestionBank, get_question_bank
)
from hlsa.services.store import SessionStore, get_session_store


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/v1", tags=["v1"])


def get_follow_up_generator() -> FollowUpGenerator:
    """Follow-up generator backed by the shared LLM client."""
    return FollowUpGenerator(get_llm_client())


@router.get("/health", response_model=HealthResponse)
async def health_check(
    llm_client: LLMClient = Depends(get_llm_client),
    store: SessionStore = Depends(get_session_store),
    service: AnalysisService = Depends(get_analysis_service),
):
    """Check system health.

    Returns:
        Health status including LLM server reachability and storage mode
    """
    llm_status = await llm_client.check_health()

    return HealthResponse(
        status="healthy" if llm_status["status"] == "connected" else "degraded",
        llm_server=llm_status["status"],
        model=llm_client.model_name,
        storage=store.status,
        lexicon_version=service.lexicons.version,
    )


@router.post("/analyze", response_model=AnalysisReport)
async def analyze(
    request: AnalyzeRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    """Score a response for human-likeness.

    Args:
        request: Text, typing delays and optional session id

    Returns:
        Complete analysis report

    Raises:
        HTTPException: 422 on invalid text, 500 on pipeline failure
    """
    try:
        return await service.analyze(
            request.text,
            response_delays=request.response_delays,
            session_id=request.session_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except AnalysisError:
        logger.exception("Error in analyze")
        raise HTTPException(status_code=500, detail="Failed to analyze text")


@router.post("/sessions", response_model=SessionCreateResponse)
async def create_session(store: SessionStore = Depends(get_session_store)):
    """Start a new interview session."""
    try:
        session = store.create_session()
        return SessionCreateResponse(session_id=session.id)
    except Exception:
        logger.exception("Error in create_session")
        raise HTTPException(status_code=500, detail="Failed to create session")


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Get a session with its interactions and analysis results.

    Raises:
        HTTPException: 404 if the session is unknown
    """
    bundle = store.get_session_bundle(session_id)
    if bundle is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return bundle


@router.get("/questions", response_model=QuestionResponse)
async def get_question(
    category: Optional[str] = Query(None),
    bank: QuestionBank = Depends(get_question_bank),
):
    """Get a random question, optionally from a category."""
    question, picked = bank.random_question(category)
    return QuestionResponse(question=question, category=picked)


@router.get("/questions/categories", response_model=CategoriesResponse)
async def list_categories(bank: QuestionBank = Depends(get_question_bank)):
    """List question categories."""
    return CategoriesResponse(categories=bank.categories)


@router.post("/questions/follow-up", response_model=FollowUpResponse)
async def follow_up(
    request: FollowUpRequest,
    generator: FollowUpGenerator = Depends(get_follow_up_generator),
    store: SessionStore = Depends(get_session_store),
):
    """Generate a follow-up question and record the interaction.

    Args:
        request: Original question, the user's response and depth

    Returns:
        Follow-up question (empty if the model is unavailable)
    """
    follow_up_question = await generator.generate(
        request.original_question,
        request.user_response,
        request.depth,
    )

    if request.session_id:
        try:
            store.add_interaction(
                request.session_id,
                question=request.original_question,
                response=request.user_response,
                follow_up_question=follow_up_question,
                depth=request.depth,
            )
        except Exception as e:
            logger.warning(f"Could not store interaction for session {request.session_id}: {e}")

    return FollowUpResponse(follow_up_question=follow_up_question)
