"""Theme search parameters and seed URL discovery for batch runs."""

from __future__ import annotations

from datetime import date, timedelta
import logging

from ..config import FetchConfig
from ..core.allowlist import domain_of
from ..core.classify import looks_like_article
from ..core.types import SearchParams
from .sections import find_article_links

logger = logging.getLogger(__name__)

THEME_QUERIES = {
    "All": "latest news OR breaking news OR current events",
    "Sports": "sports OR athletics OR games",
    "Entertainment": "entertainment OR movies OR music OR celebrities",
    "Science": "science OR research OR discoveries",
    "Environment": "environment OR climate change OR ecology",
    "Education": "education OR schools OR universities",
    "Politics": "politics",
    "Tech": "technology OR tech",
    "Business": "business",
    "Health": "health",
    "World": "world news OR international",
    "Breaking": "breaking news OR latest news OR urgent updates",
}

DEFAULT_THEME = "All"


def canonical_theme(theme: str) -> str:
    """Map a theme name onto the fixed vocabulary, case-insensitively; unknown themes become "All"."""
    lookup = {name.lower(): name for name in THEME_QUERIES}
    return lookup.get((theme or "").strip().lower(), DEFAULT_THEME)


def generate_theme_params(theme: str = DEFAULT_THEME, today: date | None = None) -> SearchParams:
    """Build the search for a theme over the last two days.

    Examples:
        >>> generate_theme_params("Politics", date(2026, 3, 10)).query
        'politics after:2026-03-08 before:2026-03-10'
    """
    today = today or date.today()
    window = f"after:{(today - timedelta(days=2)).isoformat()} before:{today.isoformat()}"
    query = f"{THEME_QUERIES[canonical_theme(theme)]} {window}"
    return SearchParams(query=query, date_restrict=None, sort="date")


def is_breaking_theme(theme: str) -> bool:
    return (theme or "").strip().lower() == "breaking"


def discover_seed_urls(
    theme: str,
    search,
    fetch_cfg: FetchConfig,
    today: date | None = None,
    limit: int | None = None,
) -> list[str]:
    """Return article URLs for a theme, at most one per domain, in result order.

    Hits that look like articles are used directly; other hits are treated
    as listing pages and expanded into the article links they contain.
    """
    params = generate_theme_params(theme, today)
    results = search.search(params.query, date_restrict=params.date_restrict, sort=params.sort)

    seen_domains: set[str] = set()
    urls: list[str] = []
    for result in results:
        if limit is not None and len(urls) >= limit:
            break
        if looks_like_article(result.link):
            links = [result.link]
        else:
            links = find_article_links(result.link, fetch_cfg)
        for link in links:
            domain = domain_of(link)
            if not domain or domain in seen_domains:
                continue
            seen_domains.add(domain)
            urls.append(link)
            if limit is not None and len(urls) >= limit:
                break

    logger.info("Discovered %d seed URLs for theme %s", len(urls), canonical_theme(theme))
    return urls
