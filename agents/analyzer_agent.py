# agents/analyzer_agent.py

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, List, Optional

from models.analysis_models import (
    ContentQuality,
    HeadingHierarchy,
    HeadingStructure,
    ImageOptimization,
    InternalLinks,
    MetaTagAnalysis,
    MetaTagEntry,
    MetaTagSuggestion,
    PageAnalysis,
    PageReadability,
    StructuredDataSummary,
    TechnicalAnalysis,
)
from models.site_models import PageRecord
from services.text_analytics import (
    analyze_keyword_density,
    extract_key_phrases,
    flesch_kincaid_grade,
    site_readability,
)

logger = logging.getLogger(__name__)

# ============================================================
# しきい値
# ============================================================

TITLE_MAX_LEN = 60
DESCRIPTION_MAX_LEN = 155

# 自動生成タイトル / ディスクリプションの切り詰め位置（末尾に "..." を付ける）
TITLE_TRUNCATE_AT = 57
DESCRIPTION_TRUNCATE_AT = 152
DESCRIPTION_FALLBACK_CHARS = 150
DESCRIPTION_MIN_FRAGMENT = 20

# サンプル段落（リライト対象）の長さ
SAMPLE_PARAGRAPH_MIN = 200
SAMPLE_PARAGRAPH_MAX = 500


# ============================================================
# メタタグ
# ============================================================

def _truncate(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def optimize_title(content: str) -> str:
    """本文の頻出語上位2つを " | " でつないだタイトル案。"""
    key_phrases = extract_key_phrases(content)
    return _truncate(" | ".join(key_phrases[:2]), TITLE_TRUNCATE_AT)


def optimize_description(content: str) -> str:
    """本文中で最初の「20文字を超える文らしき断片」をディスクリプション案にする。"""
    fragments = [s.strip() for s in content.split(".") if len(s.strip()) > DESCRIPTION_MIN_FRAGMENT]
    description = fragments[0] if fragments else content[:DESCRIPTION_FALLBACK_CHARS]
    return _truncate(description, DESCRIPTION_TRUNCATE_AT)


def _title_valid(title: str) -> bool:
    return 0 < len(title) <= TITLE_MAX_LEN


def _description_valid(description: str) -> bool:
    return 0 < len(description) <= DESCRIPTION_MAX_LEN


def analyze_meta_tags(pages: Iterable[PageRecord]) -> MetaTagAnalysis:
    result = MetaTagAnalysis()

    for page in pages:
        title_ok = _title_valid(page.title)
        desc_ok = _description_valid(page.description)

        result.title.append(MetaTagEntry(url=page.url, text=page.title, length=len(page.title), valid=title_ok))
        result.description.append(
            MetaTagEntry(url=page.url, text=page.description, length=len(page.description), valid=desc_ok)
        )

        if not page.title:
            result.issues.append(f"{page.url}: Missing title")
        elif len(page.title) > TITLE_MAX_LEN:
            result.issues.append(f"{page.url}: Title too long")

        if not page.description:
            result.issues.append(f"{page.url}: Missing description")
        elif len(page.description) > DESCRIPTION_MAX_LEN:
            result.issues.append(f"{page.url}: Description too long")

        if not title_ok:
            result.suggestions.append(
                MetaTagSuggestion(
                    url=page.url,
                    type="title",
                    current=page.title,
                    suggested=optimize_title(page.content),
                )
            )
        if not desc_ok:
            result.suggestions.append(
                MetaTagSuggestion(
                    url=page.url,
                    type="description",
                    current=page.description,
                    suggested=optimize_description(page.content),
                )
            )

    return result


# ============================================================
# テクニカル SEO
# ============================================================

def analyze_heading_structure(pages: Iterable[PageRecord]) -> HeadingStructure:
    structure = HeadingStructure()
    for page in pages:
        h1_count = len(page.h1_list)
        if h1_count == 0:
            structure.issues.append(f"{page.url}: Missing H1")
        elif h1_count > 1:
            structure.issues.append(f"{page.url}: Multiple H1 tags")
        structure.hierarchy.append(HeadingHierarchy(url=page.url, headings=page.headings))
    return structure


def analyze_image_optimization(pages: Iterable[PageRecord]) -> ImageOptimization:
    images = ImageOptimization()
    for page in pages:
        for img in page.images:
            images.total += 1
            if not img.alt.strip():
                images.missing_alt += 1
                images.issues.append(f"{page.url}: Image missing alt text ({img.src})")
    return images


def analyze_internal_links(pages: Iterable[PageRecord]) -> InternalLinks:
    links = InternalLinks()
    for page in pages:
        links.total += len(page.links)
        if not page.links:
            links.issues.append(f"{page.url}: No internal links")
    return links


def _collect_types(block: Any, types: List[str]) -> None:
    """JSON-LD から @type を集める（配列 / @graph も辿る）。"""
    if isinstance(block, list):
        for item in block:
            _collect_types(item, types)
        return
    if not isinstance(block, dict):
        return

    raw_type = block.get("@type")
    for t in raw_type if isinstance(raw_type, list) else [raw_type]:
        if isinstance(t, str) and t not in types:
            types.append(t)

    graph = block.get("@graph")
    if graph is not None:
        _collect_types(graph, types)


def analyze_structured_data(pages: Iterable[PageRecord]) -> StructuredDataSummary:
    summary = StructuredDataSummary()
    for page in pages:
        if page.structured_data:
            summary.pages_with_data += 1
            _collect_types(page.structured_data, summary.types)
    return summary


def is_mobile_friendly(homepage: Optional[PageRecord]) -> bool:
    """viewport メタタグの有無だけを見る簡易判定。"""
    return homepage is not None and "viewport" in homepage.meta_tags


# ============================================================
# コンテンツ品質
# ============================================================

def analyze_content_quality(pages: List[PageRecord]) -> ContentQuality:
    if not pages:
        return ContentQuality()
    total_words = sum(p.word_count for p in pages)
    return ContentQuality(
        average_word_count=round(total_words / len(pages)),
        readability_scores=[PageReadability(url=p.url, score=flesch_kincaid_grade(p.content)) for p in pages],
    )


def pick_sample_paragraph(content: str) -> Optional[str]:
    """
    リライト用のサンプル段落を本文の先頭から切り出す。
    文単位で SAMPLE_PARAGRAPH_MIN 文字以上になるまで連結し、最大 SAMPLE_PARAGRAPH_MAX 文字。
    """
    content = content.strip()
    if not content:
        return None

    paragraph = ""
    for sentence in re.split(r"(?<=[.!?])\s+", content):
        paragraph = f"{paragraph} {sentence}".strip()
        if len(paragraph) >= SAMPLE_PARAGRAPH_MIN:
            break
    return paragraph[:SAMPLE_PARAGRAPH_MAX]


# ============================================================
# メインロジック
# ============================================================

def analyze_pages(pages: List[PageRecord], keywords: List[str]) -> PageAnalysis:
    """
    クロール済みページ群からサイト全体の指標をまとめる。

    - メタタグ（長さチェック + 自動生成案）
    - キーワード密度 / 可読性
    - 見出し構造 / 画像 alt / 内部リンク / 構造化データ
    - コンテンツ品質（平均語数 + ページ別可読性）
    """
    homepage = pages[0] if pages else None
    structured_data = analyze_structured_data(pages)

    analysis = PageAnalysis(
        meta_tags=analyze_meta_tags(pages),
        keyword_density=analyze_keyword_density(pages, keywords),
        readability_score=site_readability(pages),
        technical=TechnicalAnalysis(
            mobile_friendly=is_mobile_friendly(homepage),
            heading_structure=analyze_heading_structure(pages),
            image_optimization=analyze_image_optimization(pages),
            internal_links=analyze_internal_links(pages),
            structured_data=structured_data,
        ),
        content_quality=analyze_content_quality(pages),
        structured_data=structured_data,
        sample_paragraph=pick_sample_paragraph(homepage.content) if homepage else None,
    )

    logger.info(
        "[analyzer] pages=%d keywords=%d meta_issues=%d readability=%s",
        len(pages),
        len(keywords),
        len(analysis.meta_tags.issues),
        analysis.readability_score,
    )
    return analysis
