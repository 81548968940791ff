"""
URL-shape heuristics for telling article pages from listing pages.

The two classifiers are independent and may both return False. Callers
treat such URLs as articles.
"""

from __future__ import annotations

import re


_SECTION_PATTERNS = [
    re.compile(r"/news/[^/]*/?$"),
    re.compile(r"/topics/[^/]*/?$"),
    re.compile(r"/category/[^/]*/?$"),
    re.compile(r"/section/[^/]*/?$"),
    re.compile(r"/[^/]*/diplomacy/?$"),
    re.compile(r"/[^/]*/politics/?$"),
    re.compile(r"/[^/]*/business/?$"),
    re.compile(r"/tag/[^/]*/?$"),
    re.compile(r"/latest/?$"),
    re.compile(r"/breaking/?$"),
    re.compile(r"/home/?$"),
    re.compile(r"/$"),
]

_ARTICLE_PATTERNS = [
    re.compile(r"/\d{4}/\d{2}/\d{2}/"),
    re.compile(r"/news/", re.IGNORECASE),
    re.compile(r"/[a-z-]+-\d{7,}", re.IGNORECASE),
]

_MEDIA_RE = re.compile(r"\.(jpg|jpeg|png|gif|svg|pdf)$", re.IGNORECASE)


def is_section_page(url: str) -> bool:
    """Return True if the URL looks like a category or listing page.

    Examples:
        >>> is_section_page("https://example.com/news/politics/")
        True
        >>> is_section_page("https://example.com/2026/01/05/story-title")
        False
    """
    return any(pattern.search(url) for pattern in _SECTION_PATTERNS)


def looks_like_article(url: str) -> bool:
    """Return True if the URL carries a date path, a /news/ segment or a numeric slug."""
    return any(pattern.search(url) for pattern in _ARTICLE_PATTERNS)


def is_media_link(url: str) -> bool:
    return bool(_MEDIA_RE.search(url))
