"""
Full-text scraping of related articles.
"""

from __future__ import annotations

import logging

from ..config import FetchConfig, ScrapeConfig
from ..core.types import RelatedArticle, ScrapedArticle
from .extractor import extract_text, first_words
from .fetcher import fetch_url

logger = logging.getLogger(__name__)


def fetch_article_text(url: str, fetch_cfg: FetchConfig, scrape_cfg: ScrapeConfig) -> str:
    """Fetch a page and return the first words of its main content.

    Returns an empty string when the fetch or every extractor fails.
    """
    result = fetch_url(url, fetch_cfg)
    if not result.ok:
        logger.warning("Scrape fetch failed for %s: %s", url, result.error)
        return ""
    text = extract_text(result.text or "", scrape_cfg.primary, scrape_cfg.fallback)
    if not text:
        logger.warning("No readable content extracted from %s", url)
        return ""
    return first_words(text, scrape_cfg.max_words)


def scrape_articles(
    related: list[RelatedArticle],
    fetch_cfg: FetchConfig,
    scrape_cfg: ScrapeConfig,
    max_articles: int | None = None,
) -> list[ScrapedArticle]:
    """Scrape at most `max_articles` related articles, one attempt each.

    A failure on one article leaves its text empty and does not stop the
    remaining articles.
    """
    limit = scrape_cfg.max_articles if max_articles is None else max_articles
    out: list[ScrapedArticle] = []
    for article in related[:limit]:
        try:
            text = fetch_article_text(article.url, fetch_cfg, scrape_cfg)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Scrape failed for %s: %s", article.url, exc)
            text = ""
        out.append(
            ScrapedArticle(
                source=article.source.get("name", ""),
                title=article.title,
                url=article.url,
                published_at=article.published_at,
                text=text,
            )
        )
    return out
