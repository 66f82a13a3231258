# agents/insights_agent.py

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional

from app.errors import CollaboratorError
from models.insights_models import (
    CollaboratorErrorMarker,
    InsightsField,
    PageSpeedField,
)
from models.site_models import PageRecord
from services.llm_client import InsightsGenerator
from services.pagespeed_client import PageSpeedClient

logger = logging.getLogger(__name__)

AI_INSIGHTS_FAILED_MESSAGE = "Failed to generate AI insights"
PAGESPEED_FAILED_MESSAGE = "Failed to fetch PageSpeed score"
REWRITE_FAILED_MESSAGE = "Could not rewrite paragraph."


@dataclass
class InsightsBundle:
    ai_insights: InsightsField
    page_speed: PageSpeedField
    rewritten_paragraph: Optional[str]


def _combined_content(pages: List[PageRecord], max_chars: int) -> str:
    return "\n\n".join(p.content for p in pages)[:max_chars]


def _marker(error: CollaboratorError, fallback_message: str) -> CollaboratorErrorMarker:
    return CollaboratorErrorMarker(message=error.message or fallback_message, details=error.details)


def _unexpected_marker(error: Exception, message: str) -> CollaboratorErrorMarker:
    return CollaboratorErrorMarker(message=message, details=f"{type(error).__name__}: {error}")


def _run_insights(generator: InsightsGenerator, text: str) -> InsightsField:
    try:
        return generator.generate_insights(text)
    except CollaboratorError as e:
        logger.warning("[insights] AI insights failed, error marker used: %s", e)
        return _marker(e, AI_INSIGHTS_FAILED_MESSAGE)
    except Exception as e:
        logger.exception("[insights] AI insights raised unexpectedly, error marker used")
        return _unexpected_marker(e, AI_INSIGHTS_FAILED_MESSAGE)


def _run_pagespeed(client: PageSpeedClient, url: str) -> PageSpeedField:
    try:
        return client.fetch_score(url)
    except CollaboratorError as e:
        logger.warning("[insights] PageSpeed failed, error marker used: %s", e)
        return _marker(e, PAGESPEED_FAILED_MESSAGE)
    except Exception as e:
        logger.exception("[insights] PageSpeed raised unexpectedly, error marker used")
        return _unexpected_marker(e, PAGESPEED_FAILED_MESSAGE)


def _run_rewrite(generator: InsightsGenerator, paragraph: Optional[str]) -> Optional[str]:
    if not paragraph:
        return None
    try:
        return generator.rewrite_paragraph(paragraph)
    except CollaboratorError as e:
        logger.warning("[insights] paragraph rewrite failed: %s", e)
        return REWRITE_FAILED_MESSAGE
    except Exception:
        logger.exception("[insights] paragraph rewrite raised unexpectedly")
        return REWRITE_FAILED_MESSAGE


def gather_insights(
    url: str,
    pages: List[PageRecord],
    generator: InsightsGenerator,
    pagespeed: PageSpeedClient,
    sample_paragraph: Optional[str] = None,
    prompt_max_chars: int = 8000,
) -> InsightsBundle:
    """
    外部協調先の呼び出しをまとめる。

    1) LLM insights と PageSpeed を2並列で実行し、両方の完了を待つ
    2) サンプル段落を LLM でリライト

    どの呼び出しが失敗しても例外は投げず、エラーマーカー（または定型文）に置き換える。
    """
    text = _combined_content(pages, prompt_max_chars)

    with ThreadPoolExecutor(max_workers=2) as executor:
        insights_future = executor.submit(_run_insights, generator, text)
        pagespeed_future = executor.submit(_run_pagespeed, pagespeed, url)
        ai_insights = insights_future.result()
        page_speed = pagespeed_future.result()

    rewritten = _run_rewrite(generator, sample_paragraph)

    logger.info(
        "[insights] done url=%s ai_error=%s pagespeed_error=%s rewritten=%s",
        url,
        isinstance(ai_insights, CollaboratorErrorMarker),
        isinstance(page_speed, CollaboratorErrorMarker),
        rewritten is not None,
    )
    return InsightsBundle(ai_insights=ai_insights, page_speed=page_speed, rewritten_paragraph=rewritten)
