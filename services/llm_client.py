# services/llm_client.py

from __future__ import annotations

import json
import logging
from typing import Optional, Protocol

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from app.config import Settings
from app.errors import CollaboratorError
from models.insights_models import AiInsights

logger = logging.getLogger(__name__)

INSIGHTS_SYSTEM_PROMPT = """
You are an expert SEO and Content Strategist. Analyze the provided website content
for SEO and AI visibility and return ONLY a valid JSON object with this structure:

{
  "aiVisibilityScore": 0-100,
  "semanticClarity": {"score": 0-100, "justification": "string"},
  "aiSummary": "one-paragraph summary written for an AI answer snippet",
  "optimizedTitle": "meta title under 60 characters",
  "optimizedDescription": "meta description under 155 characters",
  "suggestedFaqs": [{"question": "string", "answer": "string"}],
  "contentSuggestions": ["string"]
}

Suggested FAQs (three of them) must be derived only from the provided text.
""".strip()

REWRITE_PROMPT = (
    "Rewrite the following paragraph to improve its clarity, engagement, and SEO value. "
    "Return only the rewritten paragraph.\n\nOriginal Paragraph:\n\"{paragraph}\""
)


class InsightsGenerator(Protocol):
    """LLM 協調先の最小インターフェース。失敗時は CollaboratorError。"""

    def generate_insights(self, text: str) -> AiInsights:
        ...

    def rewrite_paragraph(self, paragraph: str) -> str:
        ...


def _first_message_content(response) -> Optional[str]:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return None
    return choices[0].message.content


def parse_insights(content: str) -> AiInsights:
    """
    LLM の JSON 文字列を AiInsights にする。

    型が合わない項目（例: suggestedFaqs が文字列の配列）があっても全体は捨てず、
    その項目だけ落として残りを受け取る。JSON でない / オブジェクトでない場合は
    CollaboratorError。
    """
    try:
        data = json.loads(content)
    except ValueError as e:
        logger.error("[llm_client] JSON parse error error=%s content=%r", e, content[:2000])
        raise CollaboratorError("openai", "Failed to parse AI insights", str(e)) from e

    if not isinstance(data, dict):
        raise CollaboratorError(
            "openai",
            "Failed to parse AI insights",
            f"expected a JSON object, got {type(data).__name__}",
        )

    try:
        return AiInsights.model_validate(data)
    except ValidationError as e:
        invalid = {err["loc"][0] for err in e.errors() if err["loc"]}
        logger.warning("[llm_client] drop invalid insight fields=%s", sorted(map(str, invalid)))
        data = {k: v for k, v in data.items() if k not in invalid}

    try:
        return AiInsights.model_validate(data)
    except ValidationError as e:
        raise CollaboratorError("openai", "Failed to parse AI insights", str(e)) from e


class OpenAIInsightsClient:
    """
    OpenAI chat completions で insights / 段落リライトを生成する。
    クライアントは初回呼び出し時に作る（API キー未設定でも import は通るように）。
    """

    def __init__(self, settings: Settings, client: Optional[OpenAI] = None) -> None:
        self.api_key = settings.openai_api_key
        self.model = settings.openai_model
        self.prompt_max_chars = settings.llm_prompt_max_chars
        self._client = client

    def _get_client(self) -> OpenAI:
        if self._client is None:
            if not self.api_key:
                raise CollaboratorError("openai", "OPENAI_API_KEY is not set")
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def generate_insights(self, text: str) -> AiInsights:
        client = self._get_client()
        content_text = text[: self.prompt_max_chars]

        logger.info("[llm_client] insights request model=%s chars=%d", self.model, len(content_text))

        try:
            response = client.chat.completions.create(
                model=self.model,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": INSIGHTS_SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": f"--- WEBPAGE CONTENT ---\n{content_text}\n--- END OF CONTENT ---",
                    },
                ],
                temperature=0.4,
            )
        except OpenAIError as e:
            raise CollaboratorError("openai", "Failed to generate AI insights", str(e)) from e

        usage = getattr(response, "usage", None)
        logger.info(
            "[llm_client] insights response received total_tokens=%s",
            getattr(usage, "total_tokens", None) if usage else None,
        )

        content = _first_message_content(response)
        if content is None:
            raise CollaboratorError("openai", "Failed to generate AI insights", "empty response")

        return parse_insights(content)

    def rewrite_paragraph(self, paragraph: str) -> str:
        client = self._get_client()
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": REWRITE_PROMPT.format(paragraph=paragraph)}],
            )
        except OpenAIError as e:
            raise CollaboratorError("openai", "Failed to rewrite paragraph", str(e)) from e

        content = _first_message_content(response)
        if not content:
            raise CollaboratorError("openai", "Failed to rewrite paragraph", "empty response")
        return content.strip()
