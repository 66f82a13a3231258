# services/report_store.py
"""
解析レポートの永続化（SQLite）。
1リクエスト = 1行。レポート本体は camelCase の JSON として保存する。
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

from app.errors import CollaboratorError
from models.report_models import AnalysisReport

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS reports (
    id TEXT PRIMARY KEY,
    url TEXT NOT NULL,
    keywords TEXT NOT NULL,
    payload TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""


class ReportStore:
    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._initialized = False

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """commit / rollback を自動で行う接続コンテキスト。"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        if self._initialized:
            return
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with self._connect() as conn:
            conn.execute(_SCHEMA)
        self._initialized = True

    def save(self, report: AnalysisReport) -> str:
        """レポートを保存して ID を返す。"""
        report_id = uuid.uuid4().hex
        payload = report.model_copy(update={"report_id": report_id}).to_json_dict()

        try:
            self._ensure_schema()
            with self._connect() as conn:
                conn.execute(
                    "INSERT INTO reports (id, url, keywords, payload, created_at) VALUES (?, ?, ?, ?, ?)",
                    (
                        report_id,
                        report.url,
                        json.dumps(report.keywords, ensure_ascii=False),
                        json.dumps(payload, ensure_ascii=False),
                        datetime.now(timezone.utc).isoformat(),
                    ),
                )
        except (sqlite3.Error, OSError) as e:
            logger.error("[report_store] save failed url=%s error=%s", report.url, e)
            raise CollaboratorError("report_store", "Failed to save report", str(e)) from e

        logger.info("[report_store] saved report_id=%s url=%s", report_id, report.url)
        return report_id

    def get(self, report_id: str) -> Optional[Dict[str, Any]]:
        """保存済みレポートの JSON(dict) を返す。見つからなければ None。"""
        try:
            self._ensure_schema()
            with self._connect() as conn:
                row = conn.execute("SELECT payload FROM reports WHERE id = ?", (report_id,)).fetchone()
        except (sqlite3.Error, OSError) as e:
            raise CollaboratorError("report_store", "Failed to load report", str(e)) from e

        if row is None:
            return None
        return json.loads(row["payload"])
