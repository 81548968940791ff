"""Search query construction from extracted story concepts."""

from __future__ import annotations

import logging
import re
from urllib.parse import urlparse

from ..config import SearchConfig
from ..core.types import Concepts, SearchParams, SeedArticle
from ..errors import ProviderError
from ..utils.logging import log_event

logger = logging.getLogger(__name__)

FALLBACK_TOPIC = "latest news"

_DATE_BOUND_RE = re.compile(r"\b(?:after|before):\d{4}-\d{2}-\d{2}\b")


def build_search_params(
    concepts: Concepts,
    seed_url: str,
    date_restrict: str | None = "d7",
    sort: str | None = "date",
    max_query_chars: int = 500,
) -> SearchParams:
    """Compose a search query that finds other outlets covering the same story.

    The query is the quoted entities followed by the topic phrase, an
    optional OR-group of quoted keywords, and a `-site:` exclusion for the
    seed outlet.

    Examples:
        >>> build_search_params(
        ...     Concepts(("Apple",), "iPhone launch", ("A19",)),
        ...     "https://www.example.com/a",
        ... ).query
        '"Apple" iPhone launch ("A19") -site:www.example.com'
    """
    parts = [f'"{entity}"' for entity in concepts.entities]
    if concepts.topic:
        parts.append(concepts.topic)
    core = " ".join(parts)
    if concepts.keywords:
        keyword_part = " OR ".join(f'"{keyword}"' for keyword in concepts.keywords)
        core = f"{core} ({keyword_part})" if core else f"({keyword_part})"

    host = _hostname(seed_url)
    query = f"{core} -site:{host}" if host else core
    if len(query) > max_query_chars:
        log_event(
            logger,
            "Search query exceeds budget",
            level=logging.WARNING,
            event="query_too_long",
            length=len(query),
            budget=max_query_chars,
        )
    return SearchParams(query=query, date_restrict=date_restrict, sort=sort, exclude_domain=host or None)


def fallback_concepts(seed: SeedArticle) -> Concepts:
    return Concepts(entities=(), topic=seed.title or FALLBACK_TOPIC, keywords=())


def build_query(seed: SeedArticle, extractor, cfg: SearchConfig) -> SearchParams:
    """Extract concepts for the seed and turn them into search parameters.

    Falls back to the seed title (or "latest news") as the topic when the
    seed has no title or concept extraction fails.
    """
    if not seed.title:
        logger.warning("No title for %s; falling back to '%s'", seed.url, FALLBACK_TOPIC)
        concepts = fallback_concepts(seed)
    else:
        try:
            concepts = extractor.extract(seed.title, seed.description)
        except ProviderError as exc:
            logger.warning("Concept extraction failed for %s: %s", seed.url, exc)
            concepts = fallback_concepts(seed)
        if not (concepts.entities or concepts.topic or concepts.keywords):
            concepts = fallback_concepts(seed)

    return build_search_params(
        concepts,
        seed.url,
        date_restrict=cfg.date_restrict,
        sort=cfg.sort,
        max_query_chars=cfg.max_query_chars,
    )


def clean_query(query: str) -> str:
    """Strip after:/before: date bounds from a query string."""
    cleaned = _DATE_BOUND_RE.sub("", query)
    return " ".join(cleaned.split())


def _hostname(url: str) -> str:
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""
