# services/html_parser.py

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urldefrag, urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup

from app.errors import ExtractError, StructuredDataParseError
from models.site_models import ImageInfo, PageRecord

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_MAX_CHARS = 10000

# 本文抽出の前に取り除く要素
NON_CONTENT_SELECTOR = "script, style, noscript, nav, footer, aside, .sidebar, .advertisement, .ads"

# 本文コンテナの候補（先に見つかったものを使う）
CONTENT_CONTAINER_SELECTORS = ("main", "article", ".content", "#content", "body")

_DEFAULT_PORTS = {"http": 80, "https": 443}


# ============================================================
# URL / オリジン
# ============================================================

def url_origin(url: str) -> str:
    """scheme://host[:port] を返す。デフォルトポートは省略する。"""
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    host = (parsed.hostname or "").lower()
    port = parsed.port
    if port is None or port == _DEFAULT_PORTS.get(scheme):
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


def is_same_origin(url: str, origin: str) -> bool:
    try:
        return url_origin(url) == origin
    except ValueError:
        return False


def normalize_url(url: str) -> str:
    """
    クロールの重複判定に使う正規形の URL。

    - フラグメントを除く
    - scheme / host を小文字にし、デフォルトポートを省く
    - 空のパスは "/" にする（https://example.com と https://example.com/ は同じページ）

    ポート番号が不正な場合は ValueError。
    """
    parsed = urlparse(urldefrag(url)[0])
    scheme = parsed.scheme.lower()
    if not parsed.netloc:
        return urlunparse(parsed._replace(scheme=scheme))

    host = (parsed.hostname or "").lower()
    if ":" in host:
        host = f"[{host}]"
    port = parsed.port
    netloc = host if port is None or port == _DEFAULT_PORTS.get(scheme) else f"{host}:{port}"
    userinfo = parsed.netloc.rpartition("@")[0]
    if userinfo:
        netloc = f"{userinfo}@{netloc}"

    return urlunparse((scheme, netloc, parsed.path or "/", parsed.params, parsed.query, ""))


# ============================================================
# 抽出ヘルパ
# ============================================================

def _extract_headings(soup: BeautifulSoup) -> Dict[int, List[str]]:
    """h1〜h6 を必ず 6 レベル分返す（無いレベルは空リスト）。"""
    headings: Dict[int, List[str]] = {}
    for level in range(1, 7):
        headings[level] = [h.get_text(strip=True) for h in soup.find_all(f"h{level}")]
    return headings


def _extract_images(soup: BeautifulSoup) -> List[ImageInfo]:
    return [
        ImageInfo(
            src=img.get("src") or "",
            alt=img.get("alt") or "",
            title=img.get("title") or "",
        )
        for img in soup.find_all("img")
    ]


def _extract_links(soup: BeautifulSoup, page_url: str, origin: str) -> List[str]:
    """
    a[href] を絶対 URL に解決し、同一オリジンのものだけを重複なしで返す。
    解決できない href は黙って捨てる。
    """
    links: List[str] = []
    seen = set()
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if not href:
            continue
        try:
            absolute = normalize_url(urljoin(page_url, href))
            scheme = urlparse(absolute).scheme
        except ValueError:
            continue
        if scheme not in ("http", "https"):
            continue
        if not is_same_origin(absolute, origin):
            continue
        if absolute in seen:
            continue
        seen.add(absolute)
        links.append(absolute)
    return links


def _extract_meta_tags(soup: BeautifulSoup) -> Dict[str, str]:
    meta_tags: Dict[str, str] = {}
    for meta in soup.find_all("meta"):
        name = meta.get("name") or meta.get("property")
        content = meta.get("content")
        if name and content:
            meta_tags[name] = content
    return meta_tags


def _parse_json_ld_block(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as e:
        raise StructuredDataParseError(str(e)) from e


def _extract_structured_data(soup: BeautifulSoup, page_url: str) -> List[Any]:
    """
    JSON-LD を1ブロックずつ解析する。
    壊れたブロックは警告ログだけ出して飛ばし、他のブロックは収集を続ける。
    """
    blocks: List[Any] = []
    for tag in soup.find_all("script", attrs={"type": "application/ld+json"}):
        raw = tag.string if tag.string is not None else tag.get_text()
        try:
            blocks.append(_parse_json_ld_block(raw))
        except StructuredDataParseError as e:
            logger.warning("[html_parser] invalid structured data url=%s error=%s", page_url, e)
    return blocks


def _extract_main_text(soup: BeautifulSoup, max_chars: int) -> str:
    """
    script/style/nav/footer 等を除去して本文テキストを抽出する。
    ※ soup を破壊的に変更するので、他の抽出が終わってから呼ぶこと。
    """
    for tag in soup.select(NON_CONTENT_SELECTOR):
        tag.decompose()

    container = None
    for selector in CONTENT_CONTAINER_SELECTORS:
        container = soup.select_one(selector)
        if container is not None:
            break
    if container is None:
        container = soup

    text = container.get_text(separator=" ", strip=True)
    text = re.sub(r"\s+", " ", text).strip()
    return text[:max_chars]


def count_words(text: str) -> int:
    return len(text.split())


# ============================================================
# 公開関数
# ============================================================

def extract_page(
    html: str,
    page_url: str,
    origin: Optional[str] = None,
    max_chars: int = DEFAULT_CONTENT_MAX_CHARS,
) -> PageRecord:
    """
    HTML文字列を解析して PageRecord を生成する。
    ※ ここではネットワークアクセスは行わない（fetcher で取得済み前提）

    origin を省略した場合はページ自身のオリジンでリンクを絞り込む。
    クローラからはシード URL のオリジンを渡す。
    """
    if not isinstance(html, str):
        raise ExtractError(page_url, f"expected HTML text, got {type(html).__name__}")

    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception as e:
        raise ExtractError(page_url, e) from e

    origin = origin or url_origin(page_url)

    title = soup.title.get_text(strip=True) if soup.title else ""
    meta_desc_tag = soup.find("meta", attrs={"name": "description"})
    description = (meta_desc_tag.get("content") or "").strip() if meta_desc_tag else ""

    headings = _extract_headings(soup)
    images = _extract_images(soup)
    links = _extract_links(soup, page_url, origin)
    meta_tags = _extract_meta_tags(soup)
    structured_data = _extract_structured_data(soup, page_url)

    # 本文は最後（要素を削除するため）
    content = _extract_main_text(soup, max_chars)

    return PageRecord(
        url=page_url,
        title=title,
        description=description,
        headings=headings,
        images=images,
        links=links,
        meta_tags=meta_tags,
        structured_data=structured_data,
        content=content,
        word_count=count_words(content),
    )
