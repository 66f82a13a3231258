# services/report_renderer.py

from __future__ import annotations

import logging
import os
from typing import List, Optional, Protocol

from fpdf import FPDF
from fpdf.enums import XPos, YPos
from fpdf.errors import FPDFException

from app.errors import CollaboratorError
from models.insights_models import AiInsights, CollaboratorErrorMarker, SemanticClarity
from models.report_models import AnalysisReport

logger = logging.getLogger(__name__)


class ReportRenderer(Protocol):
    """レポートを output_path に書き出し、書き出したパスを返す。失敗時は CollaboratorError。"""

    extension: str

    def render(self, report: AnalysisReport, output_path: str) -> str:
        ...


def _na(value: object) -> str:
    if value is None or value == "":
        return "N/A"
    return str(value)


class MarkdownReportRenderer:
    """
    AnalysisReport を見出し付きの Markdown ドキュメントとして書き出す。
    セクション構成は URL / キーワード / メタタグ / キーワード密度 / 可読性 /
    改善提案 / AI サマリ / FAQ / 段落リライト。
    """

    extension = ".md"

    def build(self, report: AnalysisReport) -> str:
        analysis = report.analysis
        lines: List[str] = ["# SEO AI Analysis Report", ""]

        lines += [
            f"- **URL:** {report.url}",
            f"- **Keywords:** {', '.join(report.keywords) or 'N/A'}",
            f"- **Pages analyzed:** {report.pages_analyzed}",
            f"- **Generated at:** {report.timestamp}",
        ]
        if report.partial:
            lines.append(f"- **Partial crawl:** {len(report.failed_urls)} page(s) could not be analyzed")
        lines.append("")

        lines += ["## Meta Tags", ""]
        for entry in analysis.meta_tags.title:
            lines.append(f"- Title ({entry.url}): {_na(entry.text)} [{entry.length} chars]")
        for entry in analysis.meta_tags.description:
            lines.append(f"- Description ({entry.url}): {_na(entry.text)} [{entry.length} chars]")
        if analysis.meta_tags.issues:
            lines += ["", "### Issues", ""]
            lines += [f"- {issue}" for issue in analysis.meta_tags.issues]
        if analysis.meta_tags.suggestions:
            lines += ["", "### Suggested Replacements", ""]
            for s in analysis.meta_tags.suggestions:
                lines.append(f"- {s.type} ({s.url}): {s.suggested}")
        lines.append("")

        lines += ["## Keyword Density", ""]
        if not analysis.keyword_density:
            lines.append("N/A")
        for keyword, density in analysis.keyword_density.items():
            lines.append(f"- {keyword}: {density.overall:.2f}%")
        lines.append("")

        page_speed = analysis.page_speed
        lines += ["## Page Speed Score", ""]
        if isinstance(page_speed, CollaboratorErrorMarker) or page_speed is None:
            lines.append("N/A")
        else:
            lines.append(_na(page_speed.score))
        lines.append("")

        lines += ["## Readability Score", "", f"{analysis.readability_score:.2f}", ""]

        lines += ["## Suggestions for Homepage", ""]
        if not analysis.homepage_suggestions:
            lines.append("No issues found.")
        for idx, suggestion in enumerate(analysis.homepage_suggestions, start=1):
            lines.append(f"{idx}. {suggestion}")
        lines.append("")

        if analysis.internal_pages_suggestions:
            lines += ["## Suggestions for Internal Pages", ""]
            for page in analysis.internal_pages_suggestions:
                lines.append(f"### {page.url}")
                lines.append("")
                lines += [f"- {s}" for s in page.suggestions] or ["- No issues found."]
                lines.append("")

        insights = analysis.ai_insights
        lines += ["## AI Insights", ""]
        if isinstance(insights, AiInsights):
            clarity = insights.semantic_clarity
            lines += [
                f"- **AI visibility score:** {_na(insights.ai_visibility_score)}",
                f"- **Semantic clarity:** {_na(clarity.score if isinstance(clarity, SemanticClarity) else clarity)}",
                "",
                "### AI Summary",
                "",
                _na(insights.ai_summary),
                "",
                "### Optimized Meta Title",
                "",
                _na(insights.optimized_title),
                "",
                "### Optimized Meta Description",
                "",
                _na(insights.optimized_description),
                "",
                "### Suggested FAQs",
                "",
            ]
            for idx, faq in enumerate(insights.suggested_faqs, start=1):
                lines.append(f"{idx}. Q: {faq.question}")
                lines.append(f"   A: {faq.answer}")
            if insights.content_suggestions:
                lines += ["", "### Content Suggestions", ""]
                lines += [f"- {s}" for s in insights.content_suggestions]
        elif isinstance(insights, CollaboratorErrorMarker):
            lines.append(f"AI analysis failed: {insights.message}")
        else:
            lines.append("N/A")
        lines.append("")

        lines += [
            "## Sample Paragraph Rewrite",
            "",
            f"**Original:** {_na(analysis.sample_paragraph)}",
            "",
            f"**Rewritten:** {_na(analysis.rewritten_paragraph)}",
            "",
        ]
        return "\n".join(lines)

    def render(self, report: AnalysisReport, output_path: str) -> str:
        try:
            directory = os.path.dirname(output_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(self.build(report))
        except OSError as e:
            raise CollaboratorError("report_renderer", "Failed to write report", str(e)) from e

        logger.info("[report_renderer] wrote %s", output_path)
        return output_path


def _latin1(text: object) -> str:
    """標準フォント (Helvetica) は latin-1 のみ。範囲外の文字は "?" に置き換える。"""
    return str(text).encode("latin-1", "replace").decode("latin-1")


class _ReportPDF(FPDF):
    def footer(self) -> None:
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.cell(0, 10, f"Page {self.page_no()}", align="C")


class PdfReportRenderer:
    """
    AnalysisReport を複数ページの PDF として書き出す（fpdf2）。
    セクション構成は MarkdownReportRenderer と同じ。ページ送りは自動改ページに任せる。
    """

    extension = ".pdf"

    def __init__(self) -> None:
        self._pdf: Optional[_ReportPDF] = None

    def _heading(self, text: str, size: int = 14) -> None:
        self._pdf.ln(4)
        self._pdf.set_font("Helvetica", "B", size)
        self._pdf.multi_cell(0, 8, _latin1(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self._pdf.set_font("Helvetica", "", 11)

    def _line(self, text: object) -> None:
        self._pdf.multi_cell(0, 6, _latin1(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def build(self, report: AnalysisReport) -> FPDF:
        analysis = report.analysis
        self._pdf = _ReportPDF()
        self._pdf.set_auto_page_break(auto=True, margin=20)
        self._pdf.add_page()

        self._heading("SEO AI Analysis Report", size=18)
        self._line(f"URL: {report.url}")
        self._line(f"Keywords: {', '.join(report.keywords) or 'N/A'}")
        self._line(f"Pages analyzed: {report.pages_analyzed}")
        self._line(f"Generated at: {report.timestamp}")
        if report.partial:
            self._line(f"Partial crawl: {len(report.failed_urls)} page(s) could not be analyzed")

        self._heading("Meta Tags")
        for entry in analysis.meta_tags.title:
            self._line(f"Title ({entry.url}): {_na(entry.text)} [{entry.length} chars]")
        for entry in analysis.meta_tags.description:
            self._line(f"Description ({entry.url}): {_na(entry.text)} [{entry.length} chars]")
        for issue in analysis.meta_tags.issues:
            self._line(f"- {issue}")
        for s in analysis.meta_tags.suggestions:
            self._line(f"Suggested {s.type} ({s.url}): {s.suggested}")

        self._heading("Keyword Density")
        if not analysis.keyword_density:
            self._line("N/A")
        for keyword, density in analysis.keyword_density.items():
            self._line(f"{keyword}: {density.overall:.2f}%")

        page_speed = analysis.page_speed
        self._heading("Page Speed Score")
        if isinstance(page_speed, CollaboratorErrorMarker) or page_speed is None:
            self._line("N/A")
        else:
            self._line(_na(page_speed.score))

        self._heading("Readability Score")
        self._line(f"{analysis.readability_score:.2f}")

        self._heading("Suggestions for Homepage")
        if not analysis.homepage_suggestions:
            self._line("No issues found.")
        for idx, suggestion in enumerate(analysis.homepage_suggestions, start=1):
            self._line(f"{idx}. {suggestion}")

        if analysis.internal_pages_suggestions:
            self._heading("Suggestions for Internal Pages")
            for page in analysis.internal_pages_suggestions:
                self._heading(page.url, size=11)
                for s in page.suggestions or ["No issues found."]:
                    self._line(f"- {s}")

        insights = analysis.ai_insights
        self._heading("AI Insights")
        if isinstance(insights, AiInsights):
            clarity = insights.semantic_clarity
            self._line(f"AI visibility score: {_na(insights.ai_visibility_score)}")
            self._line(f"Semantic clarity: {_na(clarity.score if isinstance(clarity, SemanticClarity) else clarity)}")
            self._line(f"AI Summary: {_na(insights.ai_summary)}")
            self._line(f"Optimized Meta Title: {_na(insights.optimized_title)}")
            self._line(f"Optimized Meta Description: {_na(insights.optimized_description)}")
            self._heading("Suggested FAQs", size=12)
            for idx, faq in enumerate(insights.suggested_faqs, start=1):
                self._line(f"{idx}. Q: {faq.question}")
                self._line(f"   A: {faq.answer}")
            for s in insights.content_suggestions:
                self._line(f"- {s}")
        elif isinstance(insights, CollaboratorErrorMarker):
            self._line(f"AI analysis failed: {insights.message}")
        else:
            self._line("N/A")

        self._heading("Sample Paragraph Rewrite")
        self._line(f"Original: {_na(analysis.sample_paragraph)}")
        self._line(f"Rewritten: {_na(analysis.rewritten_paragraph)}")

        pdf, self._pdf = self._pdf, None
        return pdf

    def render(self, report: AnalysisReport, output_path: str) -> str:
        try:
            directory = os.path.dirname(output_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            self.build(report).output(output_path)
        except (OSError, FPDFException) as e:
            raise CollaboratorError("report_renderer", "Failed to write PDF report", str(e)) from e

        logger.info("[report_renderer] wrote %s", output_path)
        return output_path


def build_renderer(report_format: str) -> ReportRenderer:
    """settings.report_format に応じて renderer を選ぶ。"""
    if report_format == "markdown":
        return MarkdownReportRenderer()
    return PdfReportRenderer()
