# services/pagespeed_client.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from app.config import Settings
from app.errors import CollaboratorError
from models.insights_models import PageSpeedResult

logger = logging.getLogger(__name__)

PAGESPEED_API_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

# issues に載せる監査項目の上限
MAX_ISSUES = 5


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


class PageSpeedClient:
    """
    Google PageSpeed Insights API v5 でパフォーマンススコアを取得する。

    - settings.google_pagespeed_api_key が無い場合は score=None を返す
    - 通信エラー / 想定外のレスポンスは CollaboratorError
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
        self.api_key = settings.google_pagespeed_api_key
        self.strategy = settings.pagespeed_strategy
        # Lighthouse の実行は遅いので、ページ取得より長めに待つ
        self.timeout = max(settings.fetch_timeout, 60.0)
        self.session = session or requests.Session()

    def fetch_score(self, url: str) -> PageSpeedResult:
        if not self.api_key:
            logger.warning("[pagespeed] api_key is not set. skip url=%s", url)
            return PageSpeedResult(score=None, issues=["PageSpeed API key is not configured."])

        params = {
            "url": url,
            "key": self.api_key,
            "strategy": self.strategy,
            "category": "performance",
        }

        logger.info("[pagespeed] Request start: url=%s strategy=%s", url, self.strategy)

        try:
            resp = self.session.get(PAGESPEED_API_URL, params=params, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise CollaboratorError("pagespeed", "Failed to fetch PageSpeed score", str(e)) from e

        if not isinstance(data, dict):
            raise CollaboratorError(
                "pagespeed",
                "Failed to fetch PageSpeed score",
                f"unexpected response type {type(data).__name__}",
            )

        lighthouse = _as_dict(data.get("lighthouseResult"))
        performance = _as_dict(_as_dict(lighthouse.get("categories")).get("performance"))
        raw_score = performance.get("score")
        score = int(round(raw_score * 100)) if isinstance(raw_score, (int, float)) else None

        issues: List[str] = []
        for audit in _as_dict(lighthouse.get("audits")).values():
            if not isinstance(audit, dict):
                continue
            audit_score = audit.get("score")
            title = audit.get("title")
            if isinstance(audit_score, (int, float)) and audit_score < 0.5 and isinstance(title, str) and title:
                issues.append(title)
            if len(issues) >= MAX_ISSUES:
                break

        logger.info("[pagespeed] Response: url=%s score=%s issues=%d", url, score, len(issues))
        return PageSpeedResult(score=score, issues=issues)
