"""Tests for services.report_store and services.report_renderer."""

import pytest

from app.errors import CollaboratorError
from models.insights_models import AiInsights, Faq
from models.report_models import AnalysisReport, SiteAnalysis
from models.site_models import PageRecord
from services.report_renderer import MarkdownReportRenderer, PdfReportRenderer, build_renderer
from services.report_store import ReportStore


@pytest.fixture
def report():
    return AnalysisReport(
        url="https://example.com/",
        keywords=["widgets"],
        pages_analyzed=1,
        analysis=SiteAnalysis(
            pages=[PageRecord(url="https://example.com/", title="Widgets", headings={1: ["Widgets"]})],
            readability_score=7.25,
            homepage_suggestions=["Add an H1 heading to define the main topic of the page."],
            ai_insights=AiInsights(
                ai_summary="All about widgets.",
                suggested_faqs=[Faq(question="What is a widget?", answer="A gadget.")],
            ),
            sample_paragraph="Widgets are great.",
            rewritten_paragraph="Widgets are truly great.",
        ),
        timestamp="2024-01-01T00:00:00+00:00",
    )


class TestReportStore:
    def test_save_and_get(self, tmp_path, report):
        store = ReportStore(str(tmp_path / "db" / "reports.db"))
        report_id = store.save(report)

        stored = store.get(report_id)
        assert stored["reportId"] == report_id
        assert stored["url"] == "https://example.com/"
        assert stored["pagesAnalyzed"] == 1
        assert stored["analysis"]["aiInsights"]["aiSummary"] == "All about widgets."

    def test_stored_report_validates_back(self, tmp_path, report):
        store = ReportStore(str(tmp_path / "reports.db"))
        stored = store.get(store.save(report))
        restored = AnalysisReport.model_validate(stored)
        assert restored.analysis.pages[0].headings[1] == ["Widgets"]
        assert isinstance(restored.analysis.ai_insights, AiInsights)

    def test_unknown_id(self, tmp_path):
        assert ReportStore(str(tmp_path / "reports.db")).get("nope") is None

    def test_unwritable_path_raises_collaborator_error(self, tmp_path, report):
        with pytest.raises(CollaboratorError):
            ReportStore(str(tmp_path)).save(report)


class TestMarkdownReportRenderer:
    def test_render_writes_all_sections(self, tmp_path, report):
        path = MarkdownReportRenderer().render(report, str(tmp_path / "out" / "report.md"))

        text = open(path, encoding="utf-8").read()
        for heading in (
            "# SEO AI Analysis Report",
            "## Meta Tags",
            "## Keyword Density",
            "## Readability Score",
            "## Suggestions for Homepage",
            "## AI Insights",
            "## Sample Paragraph Rewrite",
        ):
            assert heading in text
        assert "**URL:** https://example.com/" in text
        assert "7.25" in text
        assert "1. Q: What is a widget?" in text
        assert "**Rewritten:** Widgets are truly great." in text


class TestPdfReportRenderer:
    def test_render_writes_pdf(self, tmp_path, report):
        report.analysis.ai_insights.semantic_clarity = 85
        report.analysis.ai_insights.ai_summary = "Widgets — über alles ✓"

        path = PdfReportRenderer().render(report, str(tmp_path / "out" / "report.pdf"))

        with open(path, "rb") as f:
            data = f.read()
        assert data.startswith(b"%PDF-")

    def test_build_paginates_long_reports(self, report):
        report.analysis.homepage_suggestions = [f"Suggestion {i}: improve the heading copy." for i in range(120)]
        assert PdfReportRenderer().build(report).page_no() >= 2

    def test_unwritable_path_raises_collaborator_error(self, tmp_path, report):
        with pytest.raises(CollaboratorError):
            PdfReportRenderer().render(report, str(tmp_path))


def test_build_renderer_by_format():
    assert isinstance(build_renderer("pdf"), PdfReportRenderer)
    assert isinstance(build_renderer("markdown"), MarkdownReportRenderer)
