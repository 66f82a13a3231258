# app/graph/nodes.py
from __future__ import annotations

import logging
from typing import List

from agents.analyzer_agent import analyze_pages
from agents.crawler_agent import SiteCrawler
from agents.insights_agent import gather_insights
from agents.report_agent import assemble_report
from app.errors import CollaboratorError
from app.graph.lg_state import GraphState, WorkflowDeps
from models.analysis_models import PageAnalysis
from models.crawl_models import CrawlResult
from models.report_models import AnalysisReport

logger = logging.getLogger(__name__)


def _log_progress(state: GraphState, node: str, message: str) -> GraphState:
    """
    進捗ログを state に積むユーティリティ。
    state は dict (GraphState) として扱う。
    """
    line = f"[{node}] {message}"

    messages: List[str] = list(state.get("progress_messages", []))
    messages.append(line)

    state["progress_messages"] = messages
    state["current_node"] = node

    logger.info(line)
    return state


# ---------- Crawler ノード ----------


def crawler_node(state: GraphState, deps: WorkflowDeps) -> GraphState:
    """
    Crawler ノード:
    シード URL から同一オリジンのページを幅優先で取得し、PageRecord のリストにする。
    シード URL 自体が取得できない場合は例外がそのまま上に伝わる。
    """
    state = _log_progress(state, "crawler", "start: crawling site")

    crawler = SiteCrawler(deps.fetcher, deps.settings)
    crawl: CrawlResult = crawler.crawl(state["url"])
    state["crawl"] = crawl

    state = _log_progress(
        state,
        "crawler",
        f"done: {len(crawl.pages)} pages crawled, {len(crawl.failures)} failed",
    )
    return state


# ---------- Analyzer ノード ----------


def analyzer_node(state: GraphState, deps: WorkflowDeps) -> GraphState:
    """
    Analyzer ノード:
    メタタグ / キーワード密度 / 可読性 / テクニカル指標を計算する。
    """
    state = _log_progress(state, "analyzer", "start: analyzing pages")

    crawl: CrawlResult = state["crawl"]
    state["analysis"] = analyze_pages(crawl.pages, state["keywords"])

    state = _log_progress(state, "analyzer", "done: analysis complete")
    return state


# ---------- Insights ノード ----------


def insights_node(state: GraphState, deps: WorkflowDeps) -> GraphState:
    """
    Insights ノード:
    LLM insights と PageSpeed（2並列）、サンプル段落のリライト。
    失敗はエラーマーカーになり、ワークフローは止めない。
    """
    state = _log_progress(state, "insights", "start: collecting external insights")

    crawl: CrawlResult = state["crawl"]
    analysis: PageAnalysis = state["analysis"]

    state["insights"] = gather_insights(
        url=state["url"],
        pages=crawl.pages,
        generator=deps.insights_generator,
        pagespeed=deps.pagespeed,
        sample_paragraph=analysis.sample_paragraph,
        prompt_max_chars=deps.settings.llm_prompt_max_chars,
    )

    state = _log_progress(state, "insights", "done: insights collected")
    return state


# ---------- Report ノード ----------


def report_node(state: GraphState, deps: WorkflowDeps) -> GraphState:
    state = _log_progress(state, "report", "start: assembling report")

    state["report"] = assemble_report(
        url=state["url"],
        keywords=state["keywords"],
        crawl=state["crawl"],
        analysis=state["analysis"],
        insights=state["insights"],
    )

    state = _log_progress(state, "report", "done: report assembled")
    return state


# ---------- Persist ノード ----------


def persist_node(state: GraphState, deps: WorkflowDeps) -> GraphState:
    """
    Persist ノード:
    レポートを保存して report_id を付与する。
    persistence_required=False の場合、保存失敗はログだけ出して続行する。
    """
    if deps.store is None:
        return _log_progress(state, "persist", "skip: persistence disabled")

    state = _log_progress(state, "persist", "start: saving report")

    report: AnalysisReport = state["report"]
    try:
        report_id = deps.store.save(report)
    except CollaboratorError as e:
        if deps.settings.persistence_required:
            raise
        logger.warning("[persist_node] save failed, continue without report_id: %s", e)
        return _log_progress(state, "persist", "failed: report not saved")

    state["report"] = report.model_copy(update={"report_id": report_id})
    state = _log_progress(state, "persist", f"done: report_id={report_id}")
    return state
