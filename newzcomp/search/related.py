"""Related-article discovery: allow-list, section resolution and one outlet per domain."""

from __future__ import annotations

from datetime import datetime, timezone
import logging

from ..config import FetchConfig
from ..core.allowlist import DomainAllowList, domain_of
from ..core.classify import is_section_page
from ..core.diversify import SourceDiversifier
from ..core.types import CandidateResult, RelatedArticle, SeedArticle
from ..fetch.article_info import fetch_title
from ..utils.logging import log_event
from .sections import SectionResolver

logger = logging.getLogger(__name__)

SEED_TITLE_FALLBACK = "Source Article"


def collect_related_articles(
    seed_url: str,
    candidates: list[CandidateResult],
    query: str,
    allowlist: DomainAllowList,
    resolver: SectionResolver,
    fetch_cfg: FetchConfig,
    cap: int = 8,
) -> list[RelatedArticle]:
    """Turn raw search hits into at most `cap` allow-listed articles from distinct outlets.

    Section pages are resolved to a specific article before acceptance.
    The seed outlet counts as already taken.
    """

    def accept(candidate: CandidateResult) -> RelatedArticle | None:
        if not allowlist.allows_url(candidate.link):
            return None
        url = candidate.link
        title = candidate.title
        if is_section_page(url):
            resolved = resolver.resolve(url, query)
            if not resolved or not allowlist.allows_url(resolved):
                return None
            url = resolved
            title = fetch_title(resolved, fetch_cfg) or title
        return RelatedArticle(
            source={"name": domain_of(url)},
            title=title,
            url=url,
            published_at=candidate.published_at,
            content=candidate.snippet,
        )

    def on_skip(candidate: CandidateResult, reason: str) -> None:
        logger.debug("Skipping %s: %s", candidate.link, reason)

    related = SourceDiversifier(cap).diversify(
        candidates,
        accept,
        seen_domains=[domain_of(seed_url)],
        on_skip=on_skip,
        item_domain=lambda item: domain_of(item.url),
    )
    log_event(
        logger,
        "Related articles selected",
        event="related_selected",
        url=seed_url,
        candidates=len(candidates),
        selected=len(related),
    )
    return related


def prepend_seed(related: list[RelatedArticle], seed: SeedArticle) -> list[RelatedArticle]:
    """Put the seed article first unless it is already among the related articles."""
    seed_key = normalize_url(seed.url)
    if any(normalize_url(article.url) == seed_key for article in related):
        return list(related)
    seed_article = RelatedArticle(
        source={"name": domain_of(seed.url)},
        title=seed.title or SEED_TITLE_FALLBACK,
        url=seed.url,
        published_at=datetime.now(timezone.utc).isoformat(),
        content=seed.description,
    )
    return [seed_article, *related]


def normalize_url(url: str) -> str:
    """Comparison key ignoring scheme, "www.", query, fragment and trailing slash."""
    base = url.split("#", 1)[0].split("?", 1)[0]
    base = base.split("://", 1)[-1].lower()
    if base.startswith("www."):
        base = base[4:]
    return base.rstrip("/")
