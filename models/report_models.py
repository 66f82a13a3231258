# models/report_models.py

from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from pydantic import Field, ValidationError, field_validator

from app.errors import InputValidationError
from models.analysis_models import (
    ContentQuality,
    KeywordDensity,
    MetaTagAnalysis,
    PageSuggestions,
    StructuredDataSummary,
    TechnicalAnalysis,
)
from models.base_models import CamelModel
from models.insights_models import InsightsField, PageSpeedField
from models.site_models import PageRecord

INVALID_REQUEST_MESSAGE = "Missing or invalid url or keywords in request body"


class AnalyzeRequest(CamelModel):
    """POST /api/analyze のリクエストボディ。"""

    url: str
    keywords: List[str]

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        value = value.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("url must be an absolute http(s) URL")
        return value

    @field_validator("keywords")
    @classmethod
    def _strip_keywords(cls, value: List[str]) -> List[str]:
        return [k.strip() for k in value if k and k.strip()]

    @classmethod
    def from_payload(cls, payload: Any) -> "AnalyzeRequest":
        """
        dict などの生データから AnalyzeRequest を作る。
        不正な場合は InputValidationError を投げる（ネットワークアクセスの前に弾く）。
        """
        if not isinstance(payload, dict):
            raise InputValidationError(INVALID_REQUEST_MESSAGE)
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise InputValidationError(INVALID_REQUEST_MESSAGE) from e


class SiteAnalysis(CamelModel):
    """レスポンスの analysis 部分。"""

    pages: List[PageRecord] = Field(default_factory=list)
    meta_tags: MetaTagAnalysis = Field(default_factory=MetaTagAnalysis)
    keyword_density: Dict[str, KeywordDensity] = Field(default_factory=dict)
    readability_score: float = 0.0
    homepage_suggestions: List[str] = Field(default_factory=list)
    internal_pages_suggestions: List[PageSuggestions] = Field(default_factory=list)
    structured_data: StructuredDataSummary = Field(default_factory=StructuredDataSummary)
    technical: TechnicalAnalysis = Field(default_factory=TechnicalAnalysis)
    content_quality: ContentQuality = Field(default_factory=ContentQuality)
    page_speed: Optional[PageSpeedField] = None
    ai_insights: Optional[InsightsField] = None
    sample_paragraph: Optional[str] = None
    rewritten_paragraph: Optional[str] = None


class AnalysisReport(CamelModel):
    """
    1回の解析リクエストの最終結果。
    JSON では {url, keywords, pagesAnalyzed, analysis, timestamp, ...} になる。
    """

    url: str
    keywords: List[str]
    pages_analyzed: int
    analysis: SiteAnalysis
    timestamp: str

    # 一部ページの取得失敗 / クロール打ち切りがあった場合 True
    partial: bool = False
    failed_urls: List[str] = Field(default_factory=list)

    report_id: Optional[str] = None

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
