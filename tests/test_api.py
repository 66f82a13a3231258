"""
Tests for the FastAPI endpoints.

Uses FastAPI TestClient with the workflow dependencies overridden by fakes,
so no request ever reaches the network.
"""

import os

import pytest
from fastapi.testclient import TestClient

from app.api.routes import get_report_store, get_workflow_deps
from app.config import get_settings
from app.main import app
from conftest import FakeStore
from services.report_store import ReportStore


# ===================================================================
# Fixtures
# ===================================================================

@pytest.fixture
def client(deps, settings):
    app.dependency_overrides[get_workflow_deps] = lambda: deps
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _analyze(client, **body):
    return client.post("/api/analyze", json=body)


# ===================================================================
# Input validation
# ===================================================================

class TestValidation:
    @pytest.mark.parametrize(
        "body",
        [
            {"url": "https://example.com/"},
            {"keywords": ["widgets"]},
            {"url": "https://example.com/", "keywords": "widgets"},
            {"url": "not a url", "keywords": ["widgets"]},
            {"url": "https://example.com/", "keywords": [1, 2]},
        ],
    )
    def test_invalid_body_is_rejected_before_network(self, client, deps, body):
        resp = client.post("/api/analyze", json=body)

        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing or invalid url or keywords in request body"}
        assert deps.fetcher.calls == []

    def test_non_object_body_is_rejected(self, client, deps):
        resp = client.post("/api/analyze", json=["https://example.com/"])
        assert resp.status_code == 400
        assert deps.fetcher.calls == []


# ===================================================================
# Analysis
# ===================================================================

class TestAnalyze:
    def test_success_response_shape(self, client):
        resp = _analyze(client, url="https://example.com/", keywords=["widgets"])

        assert resp.status_code == 200
        data = resp.json()
        assert data["url"] == "https://example.com/"
        assert data["keywords"] == ["widgets"]
        assert data["pagesAnalyzed"] == 4
        assert data["partial"] is True
        assert data["failedUrls"] == ["https://example.com/nav-only", "https://example.com/missing"]
        assert data["reportId"] is None
        assert "timestamp" in data

        analysis = data["analysis"]
        assert analysis["homepageSuggestions"] == []
        assert analysis["keywordDensity"]["widgets"]["byPage"][0]["occurrences"] == 4
        assert analysis["aiInsights"]["aiSummary"] == "A site about widgets."
        assert analysis["pageSpeed"]["score"] == 91
        assert analysis["rewrittenParagraph"].startswith("Rewritten: ")

        internal = {p["url"]: p["suggestions"] for p in analysis["internalPagesSuggestions"]}
        assert "Use only one H1 heading per page." in internal["https://example.com/products"]
        assert "Add an H1 heading to define the main topic of the page." in internal["https://example.com/about"]

    def test_seed_unreachable_is_server_error(self, client):
        resp = _analyze(client, url="https://unreachable.example.com/", keywords=["widgets"])
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to analyze the website"}

    def test_insights_failure_is_degraded_field(self, client, deps):
        deps.insights_generator.fail = True
        resp = _analyze(client, url="https://example.com/", keywords=["widgets"])

        assert resp.status_code == 200
        assert resp.json()["analysis"]["aiInsights"]["error"] is True

    def test_report_is_persisted(self, client, deps):
        deps.store = FakeStore()
        resp = _analyze(client, url="https://example.com/", keywords=["widgets"])
        assert resp.json()["reportId"] == "report-1"

    def test_optional_persistence_failure_is_tolerated(self, client, deps):
        deps.store = FakeStore(fail=True)
        resp = _analyze(client, url="https://example.com/", keywords=["widgets"])
        assert resp.status_code == 200
        assert resp.json()["reportId"] is None

    def test_required_persistence_failure_aborts(self, client, deps, settings):
        deps.store = FakeStore(fail=True)
        settings.persistence_required = True
        resp = _analyze(client, url="https://example.com/", keywords=["widgets"])
        assert resp.status_code == 500


# ===================================================================
# Stored reports
# ===================================================================

class TestReports:
    @pytest.fixture
    def store(self, client, deps, settings):
        store = ReportStore(settings.database_path)
        deps.store = store
        app.dependency_overrides[get_report_store] = lambda: store
        return store

    def test_get_and_render_stored_report(self, client, store, settings):
        report_id = _analyze(client, url="https://example.com/", keywords=["widgets"]).json()["reportId"]
        assert report_id

        resp = client.get(f"/api/reports/{report_id}")
        assert resp.status_code == 200
        assert resp.json()["pagesAnalyzed"] == 4

        resp = client.post(f"/api/reports/{report_id}/document")
        assert resp.status_code == 200
        path = resp.json()["path"]
        assert path == os.path.join(settings.report_output_dir, f"{report_id}.pdf")
        with open(path, "rb") as f:
            assert f.read(5) == b"%PDF-"

    def test_markdown_format(self, client, store, settings):
        settings.report_format = "markdown"
        report_id = _analyze(client, url="https://example.com/", keywords=["widgets"]).json()["reportId"]

        path = client.post(f"/api/reports/{report_id}/document").json()["path"]
        assert path.endswith(f"{report_id}.md")
        assert "# SEO AI Analysis Report" in open(path, encoding="utf-8").read()

    def test_unknown_report(self, client, store):
        assert client.get("/api/reports/unknown").status_code == 404
        assert client.post("/api/reports/unknown/document").status_code == 404


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.text == "SEO AI Backend is running"


class _CorruptStore:
    def get(self, report_id):
        return {"url": 1}


def test_unexpected_error_is_json_500(deps, settings):
    app.dependency_overrides[get_workflow_deps] = lambda: deps
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_report_store] = lambda: _CorruptStore()
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            resp = c.post("/api/reports/any/document")
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}
