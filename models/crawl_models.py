# models/crawl_models.py

from __future__ import annotations

from typing import List

from pydantic import Field

from models.base_models import CamelModel
from models.site_models import PageRecord


class CrawlFailure(CamelModel):
    url: str
    reason: str


class CrawlResult(CamelModel):
    """
    1回のクロール結果。
    pages は幅優先の発見順で、件数は max_pages 以下。
    """

    seed_url: str
    pages: List[PageRecord] = Field(default_factory=list)
    failures: List[CrawlFailure] = Field(default_factory=list)

    # クロール上限秒数で打ち切った場合 True
    deadline_exceeded: bool = False

    @property
    def partial(self) -> bool:
        return bool(self.failures) or self.deadline_exceeded

    @property
    def urls(self) -> List[str]:
        return [p.url for p in self.pages]
