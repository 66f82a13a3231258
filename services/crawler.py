# services/crawler.py

from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests

from app.config import Settings
from app.errors import FetchError

logger = logging.getLogger(__name__)


class PageFetcher(Protocol):
    """URL 1件分の HTML を返す。失敗時は FetchError。"""

    def fetch(self, url: str) -> str:
        ...


class HttpFetcher:
    """
    requests による単純な GET。
    並列もリトライも入れていない（対象サイトへの負荷を抑えるため直列で使う）。
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
        self.timeout = settings.fetch_timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": settings.user_agent})

    def fetch(self, url: str) -> str:
        logger.debug("[fetcher.http] GET %s timeout=%s", url, self.timeout)
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.Timeout as e:
            raise FetchError(url, f"timeout after {self.timeout}s") from e
        except requests.RequestException as e:
            raise FetchError(url, e) from e
        return resp.text


class BrowserFetcher:
    """
    Playwright (headless Chromium) で描画後の HTML を取得する。
    JS で本文を組み立てるサイト向け。1ページごとにブラウザを起動して閉じる。
    """

    def __init__(self, settings: Settings) -> None:
        self.timeout_ms = int(settings.fetch_timeout * 1000)
        self.user_agent = settings.user_agent

    def fetch(self, url: str) -> str:
        from playwright.sync_api import Error as PlaywrightError
        from playwright.sync_api import sync_playwright

        logger.debug("[fetcher.browser] goto %s timeout_ms=%s", url, self.timeout_ms)
        try:
            with sync_playwright() as p:
                browser = p.chromium.launch(headless=True)
                try:
                    ctx = browser.new_context(user_agent=self.user_agent)
                    page = ctx.new_page()
                    response = page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)
                    if response is not None and response.status >= 400:
                        raise FetchError(url, f"HTTP {response.status}")
                    return page.content()
                finally:
                    browser.close()
        except PlaywrightError as e:
            raise FetchError(url, e) from e


def build_fetcher(settings: Settings) -> PageFetcher:
    """settings.fetcher_mode に応じて fetcher を選ぶ。"""
    if settings.fetcher_mode == "browser":
        return BrowserFetcher(settings)
    return HttpFetcher(settings)
