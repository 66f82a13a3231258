# app/config.py

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    アプリ全体で使う設定クラス。
    .env から環境変数を読み込み、属性として参照できるようにする。

    各コンポーネントはこの Settings をコンストラクタで受け取る。
    （モジュール内で直接環境変数を読まない）
    """

    # ---------- OpenAI ----------
    # OPENAI_API_KEY=sk-xxxx... を .env に書く想定
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"

    # LLM に渡す本文の最大文字数
    llm_prompt_max_chars: int = 8000

    # ---------- Google PageSpeed Insights ----------
    # 未設定の場合は score=None の結果を返す
    google_pagespeed_api_key: Optional[str] = None
    pagespeed_strategy: Literal["mobile", "desktop"] = "mobile"

    # ---------- クロール ----------
    max_pages: int = 5
    fetch_timeout: float = 15.0

    # クロール全体の上限秒数（None で無制限）
    crawl_deadline: Optional[float] = 120.0

    user_agent: str = "Mozilla/5.0 (compatible; SEO-AI-Bot/1.0)"

    # "http" = requests, "browser" = Playwright (headless Chromium)
    fetcher_mode: Literal["http", "browser"] = "http"

    # 本文テキストの最大文字数
    content_max_chars: int = 10000

    # ---------- 永続化 / レポート出力 ----------
    database_path: str = "database/reports.db"
    persist_reports: bool = True

    # True の場合、保存失敗はリクエスト全体の失敗として扱う
    persistence_required: bool = False

    report_output_dir: str = "reports"
    # "pdf" (fpdf2) または "markdown"
    report_format: Literal["pdf", "markdown"] = "pdf"

    # ---------- ログ ----------
    log_level: str = "INFO"

    # ---------- Pydantic Settings 設定 ----------
    model_config = SettingsConfigDict(
        env_file=".env",            # .env を読む
        env_file_encoding="utf-8",
        extra="ignore",             # 定義外の環境変数があっても無視（エラーにしない）
    )


@lru_cache
def get_settings() -> Settings:
    """Settings をシングルトン的に使うためのヘルパ。"""
    return Settings()
