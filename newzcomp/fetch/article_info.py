"""
Article metadata extraction (title, description, image, author).

Each field is resolved through an ordered list of fallbacks: structured
metadata tags first, then headings and class-name heuristics, then
largest-candidate heuristics, then a default. A failed fetch yields an
all-empty ArticleInfo rather than an exception.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ..config import FetchConfig
from ..core.types import TITLE_PLACEHOLDER, ArticleInfo
from .fetcher import fetch_url

logger = logging.getLogger(__name__)

_METADATA_SCRIPT_RE = re.compile(r"window\.(\w+)\.metadata\s*=\s*(\{[\s\S]*?\});")

Lookup = Callable[[BeautifulSoup], str | None]


def get_article_info(url: str, cfg: FetchConfig) -> ArticleInfo:
    """Fetch a page and extract its article metadata.

    Args:
        url: Page URL
        cfg: Fetch settings

    Returns:
        ArticleInfo with stripped values, or all-empty strings if the page
        could not be fetched or parsed
    """
    result = fetch_url(url, cfg)
    if not result.ok:
        logger.warning("Article info fetch failed for %s: %s", url, result.error)
        return ArticleInfo()
    try:
        return parse_article_info(result.text or "", result.final_url or url)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Article info parse failed for %s: %s", url, exc)
        return ArticleInfo()


def parse_article_info(html: str, base_url: str = "") -> ArticleInfo:
    """Extract article metadata from an HTML document."""
    soup = BeautifulSoup(html, "html.parser")
    title = _first_value(soup, _TITLE_LOOKUPS) or TITLE_PLACEHOLDER
    description = _first_value(soup, _DESCRIPTION_LOOKUPS) or ""
    image_url = _first_value(soup, _IMAGE_LOOKUPS) or _largest_image(soup) or ""
    author = _first_value(soup, _AUTHOR_LOOKUPS) or ""

    if image_url and base_url:
        image_url = urljoin(base_url, image_url)

    return ArticleInfo(
        title=_squash(title),
        description=_squash(description),
        image_url=image_url.strip(),
        author=_squash(author),
    )


def fetch_title(url: str, cfg: FetchConfig) -> str | None:
    """Fetch a page and return its og:title or <title>, or None on failure."""
    result = fetch_url(url, cfg, timeout=cfg.title_timeout_seconds, retries=0)
    if not result.ok:
        return None
    soup = BeautifulSoup(result.text or "", "html.parser")
    title = _meta(soup, property="og:title") or _text(soup, "title")
    return _squash(title) if title else None


def _first_value(soup: BeautifulSoup, lookups: list[Lookup]) -> str | None:
    for lookup in lookups:
        value = lookup(soup)
        if value and value.strip():
            return value
    return None


def _meta(soup: BeautifulSoup, **attrs: str) -> str | None:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return None
    content = tag.get("content")
    return content if isinstance(content, str) else None


def _text(soup: BeautifulSoup, selector: str) -> str | None:
    tag = soup.select_one(selector)
    if tag is None:
        return None
    return tag.get_text(" ", strip=True)


def _attr(soup: BeautifulSoup, selector: str, attr: str) -> str | None:
    tag = soup.select_one(selector)
    if tag is None:
        return None
    value = tag.get(attr)
    return value if isinstance(value, str) else None


def _largest_bold_text(soup: BeautifulSoup) -> str | None:
    candidates = [el.get_text(" ", strip=True) for el in soup.find_all(["b", "strong"])]
    candidates = [c for c in candidates if c]
    if not candidates:
        return None
    return max(candidates, key=len)


def _body_prefix(soup: BeautifulSoup) -> str | None:
    if soup.body is None:
        return None
    chunks = [
        s.strip()
        for s in soup.body.find_all(string=True)
        if s.parent is not None and s.parent.name not in ("script", "style", "noscript") and s.strip()
    ]
    text = " ".join(chunks)
    return text[:200] if text else None


def _largest_image(soup: BeautifulSoup) -> str | None:
    best: tuple[int, str] | None = None
    for img in soup.find_all("img"):
        src = img.get("src")
        if not src:
            continue
        area = _int_attr(img.get("width")) * _int_attr(img.get("height"))
        if area > 0 and (best is None or area > best[0]):
            best = (area, src)
    return best[1] if best else None


def _int_attr(value: Any) -> int:
    try:
        return int(str(value).strip().rstrip("px"))
    except (TypeError, ValueError):
        return 0


def _json_ld_author(soup: BeautifulSoup) -> str | None:
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            data = json.loads(script.string or "")
        except (json.JSONDecodeError, TypeError):
            continue
        for node in data if isinstance(data, list) else [data]:
            if not isinstance(node, dict):
                continue
            name = _author_name(node.get("author"))
            if name:
                return name
    return None


def _author_name(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        name = value.get("name")
        return name if isinstance(name, str) else None
    if isinstance(value, list):
        names = [_author_name(item) for item in value]
        names = [n for n in names if n]
        return ", ".join(names) if names else None
    return None


def _inline_metadata_author(soup: BeautifulSoup) -> str | None:
    """Read `window.<site>.metadata = {...}` blobs some publishers inline."""
    for script in soup.find_all("script"):
        text = script.string or ""
        match = _METADATA_SCRIPT_RE.search(text)
        if not match:
            continue
        try:
            metadata = json.loads(match.group(2))
        except json.JSONDecodeError:
            continue
        content = metadata.get("content") if isinstance(metadata, dict) else None
        if not isinstance(content, dict):
            continue
        author = content.get("author")
        if isinstance(author, list) and author:
            return ", ".join(str(a) for a in author)
        if isinstance(author, str) and author:
            return author
        if content.get("byline"):
            return str(content["byline"])
    return None


def _squash(text: str) -> str:
    return " ".join(text.split())


_TITLE_LOOKUPS: list[Lookup] = [
    lambda s: _meta(s, property="og:title"),
    lambda s: _meta(s, name="twitter:title"),
    lambda s: _text(s, "title"),
    lambda s: _text(s, "h1"),
    lambda s: _text(s, "h2"),
    lambda s: _text(s, "header"),
    lambda s: _text(s, "article h1"),
    lambda s: _text(s, "article h2"),
    lambda s: _text(s, 'div[class*="title" i]'),
    lambda s: _text(s, 'div[class*="headline" i]'),
    lambda s: _text(s, 'span[class*="title" i]'),
    lambda s: _text(s, 'span[class*="headline" i]'),
    _largest_bold_text,
]

_DESCRIPTION_LOOKUPS: list[Lookup] = [
    lambda s: _meta(s, property="og:description"),
    lambda s: _meta(s, name="description"),
    lambda s: _meta(s, name="twitter:description"),
    lambda s: _text(s, "p"),
    lambda s: _text(s, "article p"),
    lambda s: _text(s, 'div[class*="summary" i]'),
    lambda s: _text(s, 'div[class*="description" i]'),
    lambda s: _text(s, 'section[class*="summary" i]'),
    lambda s: _text(s, 'section[class*="description" i]'),
    lambda s: _text(s, 'span[class*="summary" i]'),
    lambda s: _text(s, 'span[class*="description" i]'),
    lambda s: _text(s, "blockquote"),
    lambda s: _text(s, "li"),
    _body_prefix,
]

_IMAGE_LOOKUPS: list[Lookup] = [
    lambda s: _meta(s, property="og:image"),
    lambda s: _meta(s, name="twitter:image"),
    lambda s: _attr(s, 'link[rel="image_src"]', "href"),
    lambda s: _attr(s, 'meta[itemprop="image"]', "content"),
    lambda s: _attr(s, 'img[alt*="article" i]', "src"),
    lambda s: _attr(s, 'img[alt*="news" i]', "src"),
    lambda s: _attr(s, 'img[src*="article" i]', "src"),
    lambda s: _attr(s, 'img[src*="news" i]', "src"),
    lambda s: _attr(s, "img", "src"),
]

_AUTHOR_LOOKUPS: list[Lookup] = [
    lambda s: _meta(s, name="author"),
    lambda s: _meta(s, property="article:author"),
    lambda s: _meta(s, name="twitter:creator"),
    _json_ld_author,
    _inline_metadata_author,
]
