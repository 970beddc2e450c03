"""
API Tests
=========
Tests for the HTTP surface: bug analysis, documentation views and health.
The orchestrator is replaced through FastAPI dependency overrides.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from bugscope.agents.analysis_orchestrator import AnalysisOrchestrator
from bugscope.api.analyze_bug import get_orchestrator
from bugscope.models.analysis_result import AnalysisOptions, AnalysisResult
from main import app

BUG = {
    "id": "bug-7",
    "title": "Stripe checkout fails",
    "description": "Payment button spins forever",
    "severity": "critical",
    "category": "functionality",
    "pageUrl": "/register",
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def orchestrator():
    orch = MagicMock(spec=AnalysisOrchestrator)
    orch.analyze = AsyncMock(return_value=AnalysisResult(
        summary="Checkout broken",
        suggested_cause="Webhook secret mismatch",
        model_used="gemini-test",
        confidence="medium",
        processing_time_ms=12,
    ))
    app.dependency_overrides[get_orchestrator] = lambda: orch
    yield orch
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


# ===================================================================
# POST /api/bugs/analyze
# ===================================================================
class TestAnalyzeEndpoint:
    def test_success(self, client, orchestrator):
        resp = client.post("/api/bugs/analyze", json={"bug": BUG, "includeScreenshot": True})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["analysis"]["summary"] == "Checkout broken"
        assert body["analysis"]["suggestedCause"] == "Webhook secret mismatch"
        assert body["analysis"]["processingTimeMs"] == 12

        bug, options = orchestrator.analyze.await_args.args
        assert bug.id == "bug-7"
        assert bug.page_url == "/register"
        assert options == AnalysisOptions(include_screenshot=True, include_video=False)

    def test_degraded_result_is_not_success(self, client, orchestrator):
        orchestrator.analyze.return_value = AnalysisResult(
            summary="Analysis failed", error="Gemini API error: 500 - boom"
        )
        resp = client.post("/api/bugs/analyze", json={"bug": BUG})

        assert resp.status_code == 200
        assert resp.json()["success"] is False
        assert resp.json()["analysis"]["error"] == "Gemini API error: 500 - boom"

    def test_legacy_media_field_names(self, client, orchestrator):
        bug = dict(BUG, screenshotUrl="/api/media/1.png", videoUrl="https://v/1.webm")
        client.post("/api/bugs/analyze", json={"bug": bug})

        parsed = orchestrator.analyze.await_args.args[0]
        assert parsed.screenshot_ref == "/api/media/1.png"
        assert parsed.video_ref == "https://v/1.webm"

    def test_invalid_body(self, client, orchestrator):
        resp = client.post("/api/bugs/analyze", json={"bug": {"id": "x"}})
        assert resp.status_code == 422
        orchestrator.analyze.assert_not_called()

    def test_invalid_severity(self, client, orchestrator):
        resp = client.post("/api/bugs/analyze", json={"bug": dict(BUG, severity="urgent")})
        assert resp.status_code == 422


# ===================================================================
# Documentation endpoints
# ===================================================================
class TestDocsEndpoints:
    def test_list(self, client):
        resp = client.get("/api/docs")
        assert resp.status_code == 200
        body = resp.json()
        ids = [s["id"] for s in body["sections"]]
        assert "bug-tracking" in ids
        assert body["totalArticles"] == sum(len(s["articles"]) for s in body["sections"])

    def test_section(self, client):
        resp = client.get("/api/docs/sections/bug-tracking")
        assert resp.status_code == 200
        titles = [a["title"] for a in resp.json()["articles"]]
        assert "Bug Tracking System" in titles

    def test_unknown_section(self, client):
        assert client.get("/api/docs/sections/nope").status_code == 404

    def test_search(self, client):
        resp = client.get("/api/docs/search", params={"q": "impersonation"})
        assert resp.status_code == 200
        results = resp.json()["results"]
        assert 0 < len(results) <= 5
        assert results[0]["excerpt"]

    def test_blank_search(self, client):
        assert client.get("/api/docs/search", params={"q": "  "}).status_code == 400
        assert client.get("/api/docs/search").status_code == 400


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
