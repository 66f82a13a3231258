# app/graph/lg_workflow.py
from __future__ import annotations

import logging
from typing import List, Optional

from app.config import Settings, get_settings
from app.graph import nodes
from app.graph.lg_state import GraphState, WorkflowDeps, build_default_deps, create_initial_state

logger = logging.getLogger(__name__)


def run_workflow(
    url: str,
    keywords: List[str],
    deps: Optional[WorkflowDeps] = None,
    settings: Optional[Settings] = None,
) -> GraphState:
    """
    /api/analyze 用のシンプルな直列ワークフロー。

    crawler → analyzer → insights → report → persist
    """
    if deps is None:
        deps = build_default_deps(settings or get_settings())

    logger.info("[lg_workflow] run_workflow start url=%s keywords=%s", url, keywords)

    state = create_initial_state(url=url, keywords=keywords)

    # 1) クロール（Fetcher + Extractor）
    state = nodes.crawler_node(state, deps)

    # 2) 分析（メタタグ / 密度 / 可読性 / テクニカル）
    state = nodes.analyzer_node(state, deps)

    # 3) 外部 insights（LLM ∥ PageSpeed → リライト）
    state = nodes.insights_node(state, deps)

    # 4) レポート組み立て（改善提案を含む）
    state = nodes.report_node(state, deps)

    # 5) 保存
    state = nodes.persist_node(state, deps)

    logger.info(
        "[lg_workflow] run_workflow done url=%s current_node=%s",
        url,
        state.get("current_node"),
    )
    return state
