# models/analysis_models.py

from typing import Dict, List, Optional

from pydantic import Field

from models.base_models import CamelModel


# ---------- キーワード密度 ----------


class KeywordPageDensity(CamelModel):
    url: str
    occurrences: int
    density: float  # %（小数点以下 2 桁）


class KeywordDensity(CamelModel):
    overall: float = 0.0
    by_page: List[KeywordPageDensity] = Field(default_factory=list)


# ---------- メタタグ ----------


class MetaTagEntry(CamelModel):
    url: str
    text: str
    length: int
    valid: bool


class MetaTagSuggestion(CamelModel):
    url: str
    type: str  # "title" | "description"
    current: str
    suggested: str


class MetaTagAnalysis(CamelModel):
    title: List[MetaTagEntry] = Field(default_factory=list)
    description: List[MetaTagEntry] = Field(default_factory=list)
    issues: List[str] = Field(default_factory=list)
    suggestions: List[MetaTagSuggestion] = Field(default_factory=list)


# ---------- テクニカル SEO ----------


class HeadingHierarchy(CamelModel):
    url: str
    headings: Dict[int, List[str]]


class HeadingStructure(CamelModel):
    issues: List[str] = Field(default_factory=list)
    hierarchy: List[HeadingHierarchy] = Field(default_factory=list)


class ImageOptimization(CamelModel):
    total: int = 0
    missing_alt: int = 0
    issues: List[str] = Field(default_factory=list)


class InternalLinks(CamelModel):
    total: int = 0
    issues: List[str] = Field(default_factory=list)


class StructuredDataSummary(CamelModel):
    pages_with_data: int = 0
    types: List[str] = Field(default_factory=list)


class TechnicalAnalysis(CamelModel):
    mobile_friendly: bool = False
    heading_structure: HeadingStructure = Field(default_factory=HeadingStructure)
    image_optimization: ImageOptimization = Field(default_factory=ImageOptimization)
    internal_links: InternalLinks = Field(default_factory=InternalLinks)
    structured_data: StructuredDataSummary = Field(default_factory=StructuredDataSummary)


# ---------- コンテンツ品質 ----------


class PageReadability(CamelModel):
    url: str
    score: float


class ContentQuality(CamelModel):
    average_word_count: int = 0
    readability_scores: List[PageReadability] = Field(default_factory=list)


# ---------- 改善提案 ----------


class PageSuggestions(CamelModel):
    url: str
    suggestions: List[str] = Field(default_factory=list)


class PageAnalysis(CamelModel):
    """
    analyzer_agent の出力。insights / 改善提案を足す前の中間結果。
    """

    meta_tags: MetaTagAnalysis
    keyword_density: Dict[str, KeywordDensity] = Field(default_factory=dict)
    readability_score: float = 0.0
    technical: TechnicalAnalysis = Field(default_factory=TechnicalAnalysis)
    content_quality: ContentQuality = Field(default_factory=ContentQuality)
    structured_data: StructuredDataSummary = Field(default_factory=StructuredDataSummary)
    sample_paragraph: Optional[str] = None
