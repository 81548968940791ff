"""
Near-duplicate detection for scraped coverage.

Syndicated wire copy often appears under several outlets with the same
headline and body. Such copies do not add a perspective, so the bias
analyzer counts them once.
"""

from __future__ import annotations

from rapidfuzz import fuzz

from .types import ScrapedArticle


def distinct_articles(articles: list[ScrapedArticle], threshold: int = 92) -> list[ScrapedArticle]:
    """Return articles with usable text that are not near-duplicates of an earlier one.

    Two articles are duplicates when their URLs match or their extracted
    texts are at least `threshold` percent similar.

    Args:
        articles: Scraped articles in pipeline order
        threshold: Similarity (0-100) above which articles are considered the same

    Returns:
        The first occurrence of each distinct article, preserving order
    """
    kept: list[ScrapedArticle] = []
    seen_urls: set[str] = set()

    for article in articles:
        if not article.has_text:
            continue
        if article.url in seen_urls:
            continue
        if _is_duplicate(article, kept, threshold):
            continue
        seen_urls.add(article.url)
        kept.append(article)

    return kept


def _is_duplicate(article: ScrapedArticle, kept: list[ScrapedArticle], threshold: int) -> bool:
    for existing in kept:
        if fuzz.ratio(article.text, existing.text) >= threshold:
            return True
    return False
