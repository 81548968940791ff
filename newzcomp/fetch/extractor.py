"""
Article body extraction for scraped news pages.

Extractors are tried in configured order, readability first by default,
then trafilatura, then a plain BeautifulSoup text dump.
"""

from __future__ import annotations

import logging
from typing import Callable

from bs4 import BeautifulSoup
import trafilatura
from readability import Document

logger = logging.getLogger(__name__)


def extract_text(html: str, primary: str, fallback: list[str]) -> str | None:
    """Return the first non-empty article body produced by the extractor chain.

    Unknown extractor names are ignored. An extractor that raises on
    malformed markup is skipped.
    """
    order = [primary] + [name for name in fallback if name != primary]
    for method in order:
        extractor = _get_extractor(method)
        if not extractor:
            continue
        try:
            text = extractor(html)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Extractor %s failed: %s", method, exc)
            continue
        if text and text.strip():
            return text.strip()
    return None


def first_words(text: str, max_words: int) -> str:
    """Return the first `max_words` whitespace-separated words of text.

    Examples:
        >>> first_words("one  two\\nthree four", 3)
        'one two three'
    """
    return " ".join(text.split()[:max_words])


def _get_extractor(name: str) -> Callable[[str], str | None] | None:
    if name == "trafilatura":
        return _extract_trafilatura
    if name == "readability":
        return _extract_readability
    if name == "bs4":
        return _extract_bs4
    return None


def _extract_trafilatura(html: str) -> str | None:
    return trafilatura.extract(html)


def _extract_readability(html: str) -> str | None:
    """Extract article content using Mozilla's readability algorithm.

    Readability identifies the main content block and returns simplified
    HTML, which is then flattened to text with bs4.
    """
    doc = Document(html)
    content_html = doc.summary()
    return _extract_bs4(content_html)


def _extract_bs4(html: str) -> str | None:
    """Extract plain text from HTML using BeautifulSoup.

    Removes script/style tags and returns non-empty lines only.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    text = soup.get_text(separator="\n")
    cleaned = "\n".join([line.strip() for line in text.splitlines() if line.strip()])
    return cleaned if cleaned else None
