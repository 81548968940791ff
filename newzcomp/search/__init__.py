"""Search: query building, Google Custom Search, section resolution and theme discovery."""

from .google import GoogleSearchProvider
from .query import build_query, build_search_params, clean_query
from .related import collect_related_articles, prepend_seed
from .sections import SectionResolver, find_article_links
from .themes import discover_seed_urls, generate_theme_params

__all__ = [
    "GoogleSearchProvider",
    "SectionResolver",
    "build_query",
    "build_search_params",
    "clean_query",
    "collect_related_articles",
    "discover_seed_urls",
    "find_article_links",
    "generate_theme_params",
    "prepend_seed",
]
