"""Tests for API routes."""
import pytest
from fastapi.testclient import TestClient

from hlsa.main import app
from hlsa.api.routes import get_follow_up_generator
from hlsa.services.analyzer import AnalysisService, get_analysis_service
from hlsa.services.llm_client import get_llm_client
from hlsa.services.questions import FollowUpGenerator
from hlsa.services.store import SessionStore, get_session_store

from conftest import FakeCompletionClient, keyword_polarity


class FakeLLMClient(FakeCompletionClient):
    """Fake client that also answers health checks."""

    model_name = "fake-model"

    def __init__(self, health="connected", **kwargs):
        super().__init__(**kwargs)
        self.health = health

    async def check_health(self):
        return {"status": self.health}


@pytest.fixture
def llm():
    return FakeLLMClient()


@pytest.fixture
def store(tmp_path):
    return SessionStore(data_dir=str(tmp_path))


@pytest.fixture
def client(llm, store):
    """Create test client with fake services."""
    service = AnalysisService(llm, store=store, polarity=keyword_polarity)
    app.dependency_overrides[get_llm_client] = lambda: llm
    app.dependency_overrides[get_session_store] = lambda: store
    app.dependency_overrides[get_analysis_service] = lambda: service
    app.dependency_overrides[get_follow_up_generator] = lambda: FollowUpGenerator(llm)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


class TestHealthEndpoint:
    """Tests for /v1/health endpoint."""

    def test_health_response(self, client):
        response = client.get("/v1/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["llm_server"] == "connected"
        assert data["model"] == "fake-model"
        assert data["storage"] == "durable"
        assert data["lexicon_version"]

    def test_health_degraded_when_llm_down(self, client, llm):
        llm.health = "disconnected"
        data = client.get("/v1/health").json()
        assert data["status"] == "degraded"
        assert data["llm_server"] == "disconnected"


class TestAnalyzeEndpoint:
    """Tests for /v1/analyze endpoint."""

    def test_text_required(self, client):
        assert client.post("/v1/analyze", json={}).status_code == 422

    def test_whitespace_text_rejected(self, client):
        response = client.post("/v1/analyze", json={"text": "   "})
        assert response.status_code == 422

    def test_negative_delays_rejected(self, client):
        response = client.post("/v1/analyze", json={"text": "Hi there.", "response_delays": [-1]})
        assert response.status_code == 422

    def test_full_report(self, client):
        response = client.post("/v1/analyze", json={
            "text": "I love this place. We went there last week and it rained.",
            "response_delays": [1800, 2100, 2500],
        })
        assert response.status_code == 200

        data = response.json()
        assert set(data) == {
            "text_structure", "ai_similarity", "innovation_features",
            "overall_human_likeness_score", "classification",
        }
        assert set(data["innovation_features"]) == {
            "semantic_elasticity", "emotional_expression", "reference_ability",
            "ambiguity_handling", "creative_thinking", "time_perception", "overall_score",
        }
        assert data["classification"] in ["Human", "AI", "Ambiguous"]
        assert data["text_structure"]["sentence_count"] == 2

    def test_report_saved_to_session(self, client):
        session_id = client.post("/v1/sessions").json()["session_id"]
        client.post("/v1/analyze", json={"text": "Some answer here.", "session_id": session_id})

        data = client.get(f"/v1/sessions/{session_id}").json()
        assert len(data["analysis_results"]) == 1
        assert data["analysis_results"][0]["text"] == "Some answer here."

    def test_pipeline_failure_returns_500(self, client, monkeypatch):
        service = app.dependency_overrides[get_analysis_service]()

        def boom(text, segments):
            raise RuntimeError("broken")

        monkeypatch.setattr(service.scorer, "score", boom)
        response = client.post("/v1/analyze", json={"text": "Some answer."})
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to analyze text"


class TestSessionEndpoints:
    """Tests for /v1/sessions endpoints."""

    def test_create_and_get(self, client):
        response = client.post("/v1/sessions")
        assert response.status_code == 200
        session_id = response.json()["session_id"]

        data = client.get(f"/v1/sessions/{session_id}").json()
        assert data["session"]["id"] == session_id
        assert data["interactions"] == []
        assert data["analysis_results"] == []

    def test_unknown_session(self, client):
        response = client.get("/v1/sessions/does-not-exist")
        assert response.status_code == 404


class TestQuestionEndpoints:
    """Tests for /v1/questions endpoints."""

    def test_categories(self, client):
        data = client.get("/v1/questions/categories").json()
        assert len(data["categories"]) == 10

    def test_question_in_category(self, client):
        data = client.get("/v1/questions", params={"category": "Ethical Dilemmas"}).json()
        assert data["category"] == "Ethical Dilemmas"
        assert data["question"]

    def test_unknown_category(self, client):
        data = client.get("/v1/questions", params={"category": "Nope"}).json()
        assert data["category"] is None
        assert data["question"]

    def test_follow_up_recorded(self, client, llm):
        llm.default = "What made you decide that?"
        session_id = client.post("/v1/sessions").json()["session_id"]

        response = client.post("/v1/questions/follow-up", json={
            "original_question": "How would you handle a crisis?",
            "user_response": "I would call my manager first.",
            "depth": 2,
            "session_id": session_id,
        })
        assert response.status_code == 200
        assert response.json()["follow_up_question"] == "What made you decide that?"

        interactions = client.get(f"/v1/sessions/{session_id}").json()["interactions"]
        assert len(interactions) == 1
        assert interactions[0]["follow_up_question"] == "What made you decide that?"
        assert interactions[0]["depth"] == 2

    def test_follow_up_depth_validated(self, client):
        response = client.post("/v1/questions/follow-up", json={
            "original_question": "Q?", "user_response": "R.", "depth": 5,
        })
        assert response.status_code == 422

    def test_follow_up_llm_failure_gives_empty(self, client, llm):
        llm.fail_on = {"interviewer"}
        response = client.post("/v1/questions/follow-up", json={
            "original_question": "Q?", "user_response": "R.",
        })
        assert response.status_code == 200
        assert response.json()["follow_up_question"] == ""


class TestStartup:
    """Tests for the application lifespan."""

    def test_vader_lexicon_checked_at_startup(self, monkeypatch):
        calls = []
        monkeypatch.setattr("hlsa.main.ensure_vader_lexicon", lambda: calls.append(True))

        with TestClient(app):
            pass
        assert calls == [True]

    def test_missing_lexicon_fails_startup(self, monkeypatch):
        def missing():
            raise LookupError("vader_lexicon not found")

        monkeypatch.setattr("hlsa.main.ensure_vader_lexicon", missing)
        with pytest.raises(LookupError):
            with TestClient(app):
                pass
