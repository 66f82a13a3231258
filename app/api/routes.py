# app/api/routes.py
from __future__ import annotations

import logging
import os
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings
from app.graph.lg_state import WorkflowDeps, build_default_deps
from app.graph.lg_workflow import run_workflow
from models.report_models import AnalysisReport, AnalyzeRequest
from services.report_renderer import ReportRenderer, build_renderer
from services.report_store import ReportStore

logger = logging.getLogger(__name__)

router = APIRouter()

ANALYSIS_FAILED_MESSAGE = "Failed to analyze the website"


# --------- 依存関係（テストでは dependency_overrides で差し替える） ---------


def get_workflow_deps(settings: Settings = Depends(get_settings)) -> WorkflowDeps:
    return build_default_deps(settings)


def get_report_store(settings: Settings = Depends(get_settings)) -> ReportStore:
    return ReportStore(settings.database_path)


def get_report_renderer(settings: Settings = Depends(get_settings)) -> ReportRenderer:
    return build_renderer(settings.report_format)


# --------- エンドポイント ---------


@router.post("/analyze", response_model=AnalysisReport)
def api_analyze(
    payload: Dict[str, Any] = Body(...),
    deps: WorkflowDeps = Depends(get_workflow_deps),
):
    """
    サイト解析のメインAPI。

    1) Crawler: シード URL から同一オリジンを幅優先で最大 max_pages 件
    2) Analyzer: メタタグ / キーワード密度 / 可読性 / テクニカル指標
    3) Insights: LLM ∥ PageSpeed、サンプル段落リライト
    4) Report: 改善提案を付けてレポートを組み立て
    5) Persist: 保存して reportId を付与

    url / keywords が不正な場合はネットワークアクセス前に 400 を返す。
    """
    request = AnalyzeRequest.from_payload(payload)

    logger.info(
        "[api.analyze] start url=%s keywords=%s",
        request.url,
        request.keywords,
    )

    try:
        state = run_workflow(url=request.url, keywords=request.keywords, deps=deps)
    except Exception:
        logger.exception("[api.analyze] analysis failed url=%s", request.url)
        return JSONResponse(status_code=500, content={"error": ANALYSIS_FAILED_MESSAGE})

    report: AnalysisReport = state["report"]

    logger.info(
        "[api.analyze] done url=%s pages=%d partial=%s report_id=%s",
        request.url,
        report.pages_analyzed,
        report.partial,
        report.report_id,
    )
    return report


@router.get("/reports/{report_id}")
def api_get_report(report_id: str, store: ReportStore = Depends(get_report_store)) -> Dict[str, Any]:
    report = store.get(report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.post("/reports/{report_id}/document")
def api_render_report(
    report_id: str,
    store: ReportStore = Depends(get_report_store),
    renderer: ReportRenderer = Depends(get_report_renderer),
    settings: Settings = Depends(get_settings),
) -> Dict[str, str]:
    """保存済みレポートを report_output_dir 配下にドキュメントとして書き出す。"""
    stored = store.get(report_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="Report not found")

    report = AnalysisReport.model_validate(stored)
    output_path = os.path.join(settings.report_output_dir, f"{report_id}{renderer.extension}")
    path = renderer.render(report, output_path)

    logger.info("[api.reports.document] report_id=%s path=%s", report_id, path)
    return {"path": path}
