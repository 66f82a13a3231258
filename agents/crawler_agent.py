# agents/crawler_agent.py

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Deque, List, Optional, Set

from app.config import Settings
from app.errors import ExtractError, FetchError
from models.crawl_models import CrawlFailure, CrawlResult
from models.site_models import PageRecord
from services.crawler import PageFetcher
from services.html_parser import extract_page, normalize_url, url_origin

logger = logging.getLogger(__name__)


class SiteCrawler:
    """
    シード URL から同一オリジン内を幅優先で辿るクローラ。

    - ページは1件ずつ直列に取得する（並列取得はしない）
    - 取得 / 解析に失敗したページはログを出してスキップ
    - ただしシード URL 自体の失敗はリクエスト全体の失敗として例外を投げる
    - max_pages 件集まるか、frontier が空になるか、crawl_deadline を過ぎたら終了
    """

    def __init__(self, fetcher: PageFetcher, settings: Settings) -> None:
        self.fetcher = fetcher
        self.max_pages = settings.max_pages
        self.deadline = settings.crawl_deadline
        self.content_max_chars = settings.content_max_chars

    def _fetch_page(self, url: str, origin: str) -> PageRecord:
        html = self.fetcher.fetch(url)
        return extract_page(html, url, origin=origin, max_chars=self.content_max_chars)

    def crawl(self, seed_url: str, max_pages: Optional[int] = None) -> CrawlResult:
        limit = self.max_pages if max_pages is None else max_pages
        seed = normalize_url(seed_url)
        origin = url_origin(seed)

        frontier: Deque[str] = deque([seed])
        queued: Set[str] = {seed}
        visited: Set[str] = set()

        pages: List[PageRecord] = []
        failures: List[CrawlFailure] = []
        deadline_exceeded = False
        started = time.monotonic()

        logger.info("[crawler] start seed=%s max_pages=%d", seed, limit)

        while frontier and len(pages) < limit:
            if self.deadline is not None and pages and time.monotonic() - started > self.deadline:
                logger.warning(
                    "[crawler] deadline %.1fs exceeded, stop with pages=%d frontier=%d",
                    self.deadline,
                    len(pages),
                    len(frontier),
                )
                deadline_exceeded = True
                break

            url = frontier.popleft()
            if url in visited:
                continue
            visited.add(url)

            try:
                logger.info("[crawler] Crawling: %s", url)
                page = self._fetch_page(url, origin)
            except (FetchError, ExtractError) as e:
                if url == seed:
                    logger.error("[crawler] seed page failed: %s", e)
                    raise
                logger.warning("[crawler] Failed to crawl %s: %s", url, e)
                failures.append(CrawlFailure(url=url, reason=str(e)))
                continue

            pages.append(page)

            for link in page.links:
                if link not in visited and link not in queued:
                    queued.add(link)
                    frontier.append(link)

        logger.info(
            "[crawler] done seed=%s pages=%d failures=%d",
            seed,
            len(pages),
            len(failures),
        )
        return CrawlResult(
            seed_url=seed,
            pages=pages,
            failures=failures,
            deadline_exceeded=deadline_exceeded,
        )
