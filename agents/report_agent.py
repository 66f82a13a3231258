# agents/report_agent.py

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List

from agents.insights_agent import InsightsBundle
from models.analysis_models import PageAnalysis, PageSuggestions
from models.crawl_models import CrawlResult
from models.report_models import AnalysisReport, SiteAnalysis
from models.site_models import PageRecord

logger = logging.getLogger(__name__)

ADD_H1_SUGGESTION = "Add an H1 heading to define the main topic of the page."
SINGLE_H1_SUGGESTION = "Use only one H1 heading per page."
ALT_TEXT_SUGGESTION = "Add descriptive alt text to images for accessibility."
KEYWORD_HEADING_SUGGESTION = 'Include the keyword "{keyword}" in at least one heading.'


def page_suggestions(page: PageRecord, keywords: List[str]) -> List[str]:
    """
    1ページ分の改善提案。各ルールは独立に評価する（途中で打ち切らない）。
    """
    suggestions: List[str] = []

    h1_count = len(page.h1_list)
    if h1_count == 0:
        suggestions.append(ADD_H1_SUGGESTION)
    if h1_count > 1:
        suggestions.append(SINGLE_H1_SUGGESTION)

    heading_text = page.heading_text().lower()
    for keyword in keywords:
        if keyword.lower() not in heading_text:
            suggestions.append(KEYWORD_HEADING_SUGGESTION.format(keyword=keyword))

    if page.images and not any(img.alt.strip() for img in page.images):
        suggestions.append(ALT_TEXT_SUGGESTION)

    return suggestions


def assemble_report(
    url: str,
    keywords: List[str],
    crawl: CrawlResult,
    analysis: PageAnalysis,
    insights: InsightsBundle,
) -> AnalysisReport:
    """
    クロール結果 / 分析結果 / 外部 insights を1つの AnalysisReport にまとめる。
    先頭ページをホームページとして扱う。
    """
    pages = crawl.pages
    homepage_suggestions = page_suggestions(pages[0], keywords) if pages else []
    internal_pages_suggestions = [
        PageSuggestions(url=p.url, suggestions=page_suggestions(p, keywords)) for p in pages[1:]
    ]

    site_analysis = SiteAnalysis(
        pages=pages,
        meta_tags=analysis.meta_tags,
        keyword_density=analysis.keyword_density,
        readability_score=analysis.readability_score,
        homepage_suggestions=homepage_suggestions,
        internal_pages_suggestions=internal_pages_suggestions,
        structured_data=analysis.structured_data,
        technical=analysis.technical,
        content_quality=analysis.content_quality,
        page_speed=insights.page_speed,
        ai_insights=insights.ai_insights,
        sample_paragraph=analysis.sample_paragraph,
        rewritten_paragraph=insights.rewritten_paragraph,
    )

    report = AnalysisReport(
        url=url,
        keywords=keywords,
        pages_analyzed=len(pages),
        analysis=site_analysis,
        timestamp=datetime.now(timezone.utc).isoformat(),
        partial=crawl.partial,
        failed_urls=[f.url for f in crawl.failures],
    )

    logger.info(
        "[report] assembled url=%s pages=%d homepage_suggestions=%d partial=%s",
        url,
        report.pages_analyzed,
        len(homepage_suggestions),
        report.partial,
    )
    return report
