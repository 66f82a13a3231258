# models/site_models.py

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import ConfigDict, Field

from models.base_models import CamelModel


def _empty_headings() -> Dict[int, List[str]]:
    return {level: [] for level in range(1, 7)}


class ImageInfo(CamelModel):
    """<img> 1つ分。alt / title は属性が無ければ空文字。"""

    src: str = ""
    alt: str = ""
    title: str = ""


class PageRecord(CamelModel):
    """
    クロールした1ページ分の抽出結果。
    抽出後は変更しない（frozen）。1リクエストの間だけメモリ上に保持する。
    """

    model_config = ConfigDict(frozen=True)

    url: str
    title: str = ""
    description: str = ""

    # 見出しレベル (1〜6) → 見出しテキストのリスト（空でも 6 レベル分必ず持つ）
    headings: Dict[int, List[str]] = Field(default_factory=_empty_headings)

    images: List[ImageInfo] = Field(default_factory=list)

    # 同一オリジンの絶対 URL（重複なし・出現順）
    links: List[str] = Field(default_factory=list)

    meta_tags: Dict[str, str] = Field(default_factory=dict)

    # 解析できた JSON-LD のみ
    structured_data: List[Any] = Field(default_factory=list)

    content: str = ""
    word_count: int = 0

    @property
    def h1_list(self) -> List[str]:
        return self.headings.get(1, [])

    def heading_text(self) -> str:
        """全レベルの見出しを1つの文字列に連結する。"""
        return " ".join(text for level in sorted(self.headings) for text in self.headings[level])
