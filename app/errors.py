# app/errors.py

from __future__ import annotations

from typing import Optional


class SeoAnalyzerError(Exception):
    """このアプリで発生する例外の基底クラス。"""


class InputValidationError(SeoAnalyzerError):
    """リクエストの必須項目が欠けている / 形式が不正。クライアント側のエラー (400)。"""


class FetchError(SeoAnalyzerError):
    """
    1ページ分の取得失敗（ネットワークエラー / 2xx 以外 / タイムアウト）。
    クロール中はスキップされるが、シード URL の場合はリクエスト全体を中断する。
    """

    def __init__(self, url: str, cause: object) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to fetch {url}: {cause}")


class ExtractError(SeoAnalyzerError):
    """HTML ドキュメント全体の解析失敗。扱いは FetchError と同じ。"""

    def __init__(self, url: str, cause: object) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to extract {url}: {cause}")


class StructuredDataParseError(SeoAnalyzerError):
    """JSON-LD ブロック1つ分の解析失敗。外には投げず、ログだけ出してスキップする。"""


class CollaboratorError(SeoAnalyzerError):
    """LLM / PageSpeed / DB / レポート出力など外部協調先の失敗。"""

    def __init__(self, collaborator: str, message: str, details: Optional[str] = None) -> None:
        self.collaborator = collaborator
        self.message = message
        self.details = details
        super().__init__(f"[{collaborator}] {message}" + (f": {details}" if details else ""))
