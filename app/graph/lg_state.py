# app/graph/lg_state.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from app.config import Settings
from services.crawler import PageFetcher, build_fetcher
from services.llm_client import InsightsGenerator, OpenAIInsightsClient
from services.pagespeed_client import PageSpeedClient
from services.report_store import ReportStore


class GraphState(Dict[str, Any]):
    """
    LangGraph 風の「状態」コンテナ。
    実体はただの dict だが、型ヒントとして分かりやすくするためのラッパ。
    """
    pass


@dataclass
class WorkflowDeps:
    """
    ワークフローが使う外部協調先一式。
    テストではここにフェイクを差し込む。
    """

    settings: Settings
    fetcher: PageFetcher
    insights_generator: InsightsGenerator
    pagespeed: PageSpeedClient
    store: Optional[ReportStore] = None


def build_default_deps(settings: Settings) -> WorkflowDeps:
    return WorkflowDeps(
        settings=settings,
        fetcher=build_fetcher(settings),
        insights_generator=OpenAIInsightsClient(settings),
        pagespeed=PageSpeedClient(settings),
        store=ReportStore(settings.database_path) if settings.persist_reports else None,
    )


def create_initial_state(url: str, keywords: List[str]) -> GraphState:
    """
    ワークフロー開始時の初期 state を作成。
    """
    state: GraphState = GraphState()
    state["url"] = url
    state["keywords"] = keywords
    state["progress_messages"] = []  # 各ノードからのログ的メッセージ
    state["current_node"] = None
    return state
