"""
Page fetching and extraction.

This package handles HTTP fetching, metadata extraction, main-content
extraction and scraping of related articles.
"""

from .article_info import fetch_title, get_article_info, parse_article_info
from .extractor import extract_text, first_words
from .fetcher import FetchResult, fetch_url
from .scraper import scrape_articles

__all__ = [
    "FetchResult",
    "extract_text",
    "fetch_title",
    "fetch_url",
    "first_words",
    "get_article_info",
    "parse_article_info",
    "scrape_articles",
]
