# services/text_analytics.py

from __future__ import annotations

import re
from collections import Counter
from typing import Dict, Iterable, List

from models.analysis_models import KeywordDensity, KeywordPageDensity
from models.site_models import PageRecord

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_SILENT_SUFFIX_RE = re.compile(r"(?:[^laeiouy]es|ed|[^laeiouy]e)$")
_LEADING_Y_RE = re.compile(r"^y")
_VOWEL_GROUP_RE = re.compile(r"[aeiouy]{1,2}")

# タイトル自動生成で無視する語
STOP_WORDS = frozenset({"this", "that", "with", "have", "will", "from", "your", "they", "their", "about"})


# ============================================================
# キーワード密度
# ============================================================

def keyword_occurrences(text: str, keyword: str) -> int:
    """
    大文字小文字を区別せずにキーワードの出現回数を数える。
    "widget" が "widgets" の一部として数えられないよう、語の途中での一致は除外する。
    """
    keyword = keyword.strip()
    if not text or not keyword:
        return 0
    pattern = re.compile(r"(?<!\w)" + re.escape(keyword) + r"(?!\w)", re.IGNORECASE)
    return len(pattern.findall(text))


def density_percent(occurrences: int, word_count: int) -> float:
    """出現回数 / 語数 × 100 を [0, 100] に丸めて小数点以下 2 桁で返す。"""
    if word_count <= 0:
        return 0.0
    value = occurrences / word_count * 100
    return round(min(100.0, max(0.0, value)), 2)


def analyze_keyword_density(
    pages: Iterable[PageRecord],
    keywords: Iterable[str],
) -> Dict[str, KeywordDensity]:
    """キーワードごとにページ別と全体の密度を計算する。"""
    pages = list(pages)
    result: Dict[str, KeywordDensity] = {}

    for keyword in keywords:
        by_page: List[KeywordPageDensity] = []
        total_occurrences = 0
        total_words = 0

        for page in pages:
            occurrences = keyword_occurrences(page.content, keyword)
            by_page.append(
                KeywordPageDensity(
                    url=page.url,
                    occurrences=occurrences,
                    density=density_percent(occurrences, page.word_count),
                )
            )
            total_occurrences += occurrences
            total_words += page.word_count

        result[keyword] = KeywordDensity(
            overall=density_percent(total_occurrences, total_words),
            by_page=by_page,
        )

    return result


# ============================================================
# 可読性（Flesch–Kincaid Grade Level）
# ============================================================

def count_syllables_in_word(word: str) -> int:
    """母音グループ数による簡易的な音節数。3文字以下は1音節とみなす。"""
    word = word.lower()
    if len(word) <= 3:
        return 1
    word = _SILENT_SUFFIX_RE.sub("", word)
    word = _LEADING_Y_RE.sub("", word)
    groups = _VOWEL_GROUP_RE.findall(word)
    return len(groups) if groups else 1


def count_syllables(text: str) -> int:
    return sum(count_syllables_in_word(w) for w in text.lower().split())


def count_sentences(text: str) -> int:
    return sum(1 for fragment in _SENTENCE_SPLIT_RE.split(text) if fragment.strip())


def flesch_kincaid_grade(text: str) -> float:
    """
    score = 0.39 * (words / sentences) + 11.8 * (syllables / words) - 15.59
    文または語が 0 の場合は 0.0 を返す。
    """
    sentences = count_sentences(text)
    words = len(text.split())
    if sentences == 0 or words == 0:
        return 0.0

    syllables = count_syllables(text)
    score = 0.39 * (words / sentences) + 11.8 * (syllables / words) - 15.59
    return round(score, 2)


def site_readability(pages: Iterable[PageRecord]) -> float:
    """全ページの本文を連結した可読性スコア。"""
    return flesch_kincaid_grade(" ".join(p.content for p in pages))


# ============================================================
# キーフレーズ
# ============================================================

def extract_key_phrases(content: str, limit: int = 5) -> List[str]:
    """4文字以上の語を頻度順に返す（同数なら初出順）。"""
    words = [w for w in content.lower().split() if len(w) > 3 and w not in STOP_WORDS]
    return [word for word, _ in Counter(words).most_common(limit)]
