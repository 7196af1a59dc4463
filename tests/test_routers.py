import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, patch

from careerprep.main import app
from careerprep.services.analysis import AnalysisService, get_analysis_service
from careerprep.services.ratings import RatingService, get_rating_service
from careerprep.services.session_manager import InterviewSessionManager, get_session_manager
from careerprep.utils.exceptions import PersistenceError
from tests.conftest import (
    ACCOUNTANT_JOB,
    InMemoryInterviewRepository,
    InMemoryResumeRepository,
    REACT_JOB,
    RESUME_TEXT,
)

HEADERS = {"X-User-ID": "user-1"}
ANSWER = "For example, I built a React app with my team and learned to write unit tests first."


@pytest.fixture
def client():
    analysis = AnalysisService(InMemoryResumeRepository("analysis"), gateway=None)
    ratings = RatingService(InMemoryResumeRepository("rating"))
    manager = InterviewSessionManager(InMemoryInterviewRepository(), gateway=None)
    app.dependency_overrides[get_analysis_service] = lambda: analysis
    app.dependency_overrides[get_rating_service] = lambda: ratings
    app.dependency_overrides[get_session_manager] = lambda: manager
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Processing-Time" in response.headers

    def test_root_head(self, client):
        assert client.head("/").status_code == 200


class TestAnalysisRouter:
    def test_analyze(self, client):
        response = client.post("/api/analysis", headers=HEADERS, json={
            "resume_text": RESUME_TEXT,
            "job_descriptions": [REACT_JOB, ACCOUNTANT_JOB],
        })
        assert response.status_code == 200
        data = response.json()
        assert len(data["results"]) == 2
        assert data["results"][1]["is_non_tech_role"] is True
        assert data["results"][1]["match_percentage"] == 0
        assert 0 < data["results"][0]["raw_similarity"] < 1
        assert {"name": "React", "category": "Frontend Technologies", "confidence_level": 5} in data["extracted_technologies"]
        assert "X-Request-ID" in response.headers

    def test_missing_user_header(self, client):
        response = client.post("/api/analysis", json={"resume_text": RESUME_TEXT, "job_descriptions": [REACT_JOB]})
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"]["error_code"] == "VALIDATION_ERROR"

    def test_short_resume(self, client):
        response = client.post("/api/analysis", headers=HEADERS,
                               json={"resume_text": "short", "job_descriptions": [REACT_JOB]})
        assert response.status_code == 400
        body = response.json()
        for key in ("success", "timestamp", "request_id", "status_code", "error", "message"):
            assert key in body
        assert "100 characters" in body["message"]

    def test_save_list_delete(self, client):
        report = client.post("/api/analysis", headers=HEADERS,
                             json={"resume_text": RESUME_TEXT, "job_descriptions": [REACT_JOB]}).json()
        saved = client.post("/api/analysis/save", headers=HEADERS,
                            json={"resume_hash": report["resume_hash"], "title": "Frontend"})
        assert saved.status_code == 200
        assert saved.json()["is_saved"] is True

        listed = client.get("/api/analysis", headers=HEADERS).json()
        assert listed[0]["title"] == "Frontend"

        assert client.delete(f"/api/analysis/{report['id']}", headers=HEADERS).status_code == 200
        missing = client.get(f"/api/analysis/{report['id']}", headers=HEADERS)
        assert missing.status_code == 404

    def test_storage_outage_is_503(self, client):
        with patch.object(AnalysisService, "list_analyses",
                          AsyncMock(side_effect=PersistenceError("Storage error", operation="list"))):
            response = client.get("/api/analysis", headers=HEADERS)
        assert response.status_code == 503
        assert response.json()["error"]["details"]["retryable"] is True

    def test_internal_key_error_is_500(self, client):
        with patch.object(AnalysisService, "list_analyses", AsyncMock(side_effect=KeyError("metadata"))):
            response = client.get("/api/analysis", headers=HEADERS)
        assert response.status_code == 500
        assert response.json()["success"] is False


class TestInterviewRouter:
    def create(self, client):
        response = client.post("/api/interviews", headers=HEADERS, json={
            "job_description": REACT_JOB,
            "resume_text": RESUME_TEXT,
        })
        assert response.status_code == 201
        return response.json()

    def test_create(self, client):
        session = self.create(client)
        assert session["status"] == "created"
        assert session["current_question_index"] == 0
        assert len(session["questions"]) == 10
        assert "resume_text" not in session

    def test_full_interview(self, client):
        session = self.create(client)
        sid = session["id"]
        assert client.post(f"/api/interviews/{sid}/start", headers=HEADERS).json()["status"] == "in_progress"

        for question in session["questions"]:
            nxt = client.get(f"/api/interviews/{sid}/next-question", headers=HEADERS).json()
            assert nxt["question"]["question_id"] == question["question_id"]
            result = client.post(f"/api/interviews/{sid}/answers", headers=HEADERS, json={
                "question_id": question["question_id"],
                "response_text": ANSWER,
                "response_time": 60,
            })
            assert result.status_code == 200

        body = result.json()
        assert body["is_complete"] is True
        assert body["status"] == "completed"
        assert body["progress"]["current_question_index"] == 10

        feedback = client.get(f"/api/interviews/{sid}/feedback", headers=HEADERS).json()
        assert feedback["overall_feedback"]["questions_answered"] == 10
        assert len(feedback["responses"]) == 10

        history = client.get("/api/interviews", headers=HEADERS).json()
        assert history[0]["status"] == "completed"

    def test_duplicate_answer_is_409(self, client):
        sid = self.create(client)["id"]
        payload = {"question_id": "q1", "response_text": ANSWER}
        assert client.post(f"/api/interviews/{sid}/answers", headers=HEADERS, json=payload).status_code == 200
        response = client.post(f"/api/interviews/{sid}/answers", headers=HEADERS, json=payload)
        assert response.status_code == 409
        assert response.json()["error"]["error_code"] == "DUPLICATE_ANSWER"

    def test_feedback_before_completion_is_409(self, client):
        sid = self.create(client)["id"]
        assert client.get(f"/api/interviews/{sid}/feedback", headers=HEADERS).status_code == 409

    def test_unknown_interview_is_404(self, client):
        assert client.get("/api/interviews/nope", headers=HEADERS).status_code == 404

    def test_complete_twice(self, client):
        sid = self.create(client)["id"]
        first = client.post(f"/api/interviews/{sid}/complete", headers=HEADERS).json()
        second = client.post(f"/api/interviews/{sid}/complete", headers=HEADERS).json()
        assert first == second
        assert first["total_duration"] == 1800


class TestSwotRouter:
    TECHS = [
        {"name": "React", "category": "Frontend Technologies", "confidence_level": 8},
        {"name": "Docker", "category": "Cloud & DevOps", "confidence_level": 3},
    ]

    def test_ratings_lifecycle(self, client):
        saved = client.post("/api/swot/ratings", headers=HEADERS,
                            json={"resume_hash": "h" * 64, "technologies": self.TECHS})
        assert saved.status_code == 200
        assert saved.json()["metadata"]["expert_count"] == 1

        ratings = client.get("/api/swot/ratings", headers=HEADERS, params={"resume_hash": "h" * 64}).json()
        assert ratings[0]["summary"]["needs_improvement"] == 1

        stats = client.get(f"/api/swot/ratings/{'h' * 64}/stats", headers=HEADERS).json()
        assert stats["strengths"] == ["React"]

        assert client.delete(f"/api/swot/ratings/{'h' * 64}", headers=HEADERS).status_code == 200
        assert client.get(f"/api/swot/ratings/{'h' * 64}/stats", headers=HEADERS).status_code == 404

    def test_invalid_level_is_400(self, client):
        response = client.post("/api/swot/ratings", headers=HEADERS, json={
            "resume_hash": "h" * 64,
            "technologies": [{"name": "React", "category": "Frontend", "confidence_level": 12}],
        })
        assert response.status_code == 400

    def test_missing_hash_is_400(self, client):
        response = client.post("/api/swot/ratings", headers=HEADERS, json={"technologies": self.TECHS})
        assert response.status_code == 400
