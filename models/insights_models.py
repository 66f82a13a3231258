# models/insights_models.py

from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import ConfigDict, Field

from models.base_models import CamelModel


class SemanticClarity(CamelModel):
    score: Optional[float] = None
    justification: Optional[str] = None


class Faq(CamelModel):
    question: str = ""
    answer: str = ""


class AiInsights(CamelModel):
    """
    LLM が返す JSON をそのまま受け取るモデル。
    想定外のキーは無視し、項目はすべて任意扱いにする。
    型が合わない項目の扱いは services.llm_client.parse_insights を参照。
    """

    model_config = ConfigDict(extra="ignore")

    ai_visibility_score: Optional[float] = None
    # {"score", "justification"} の形が基本だが、数値だけ返ってくることもある
    semantic_clarity: Union[SemanticClarity, float, str, None] = None
    ai_summary: Optional[str] = None
    optimized_title: Optional[str] = None
    optimized_description: Optional[str] = None
    suggested_faqs: List[Faq] = Field(default_factory=list)
    content_suggestions: List[str] = Field(default_factory=list)


class CollaboratorErrorMarker(CamelModel):
    """外部協調先（LLM / PageSpeed など）の失敗時に結果の代わりに入れる目印。"""

    error: Literal[True] = True
    message: str
    details: Optional[str] = None


class PageSpeedResult(CamelModel):
    score: Optional[int] = None
    issues: List[str] = Field(default_factory=list)


InsightsField = Union[CollaboratorErrorMarker, AiInsights]
PageSpeedField = Union[CollaboratorErrorMarker, PageSpeedResult]
