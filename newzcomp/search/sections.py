"""
Section page resolution.

Search engines often return category or listing pages instead of the
story itself. The resolver enumerates the outbound links of such a page
and asks a model to pick the one that matches the query.
"""

from __future__ import annotations

import logging
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ..config import FetchConfig, SectionConfig
from ..core.classify import is_media_link, is_section_page, looks_like_article
from ..core.types import LinkCandidate
from ..errors import ProviderError
from ..fetch.fetcher import fetch_url
from ..utils.logging import log_event
from .query import clean_query

logger = logging.getLogger(__name__)


class SectionResolver:
    """Resolve a section page URL to a specific article URL."""

    def __init__(self, fetch_cfg: FetchConfig, section_cfg: SectionConfig, selector):
        self.fetch_cfg = fetch_cfg
        self.section_cfg = section_cfg
        self.selector = selector

    def resolve(self, section_url: str, query: str) -> str | None:
        """Return the most relevant article linked from the page, or None."""
        result = fetch_url(section_url, self.fetch_cfg)
        if not result.ok:
            logger.warning("Section page fetch failed for %s: %s", section_url, result.error)
            return None

        candidates = link_candidates(
            result.text or "",
            result.final_url or section_url,
            section_url,
            self.section_cfg,
        )
        if not candidates:
            logger.warning("No article candidates found on %s", section_url)
            return None

        try:
            selected = self.selector.select(candidates, clean_query(query))
        except ProviderError as exc:
            logger.warning("Link selection failed for %s: %s", section_url, exc)
            return None

        log_event(
            logger,
            "Section page resolved" if selected else "No relevant article on section page",
            event="section_resolved",
            section_url=section_url,
            resolved_url=selected,
            candidates=len(candidates),
        )
        return selected


def link_candidates(
    html: str,
    base_url: str,
    section_url: str,
    cfg: SectionConfig,
) -> list[LinkCandidate]:
    """Collect outbound article links with their text and surrounding context."""
    soup = BeautifulSoup(html, "html.parser")
    seen: set[str] = set()
    candidates: list[LinkCandidate] = []

    for anchor in soup.find_all("a", href=True):
        href = urljoin(base_url, anchor["href"].strip())
        text = _squash(anchor.get_text(" "))
        if not _is_candidate(href, section_url) or len(text) <= cfg.min_link_text:
            continue
        if href in seen:
            continue
        seen.add(href)
        parent = anchor.parent
        context = _squash(parent.get_text(" "))[: cfg.context_chars] if parent else ""
        candidates.append(LinkCandidate(href=href, text=text, context=context))
        if len(candidates) >= cfg.max_candidates:
            break

    return candidates


def find_article_links(section_url: str, cfg: FetchConfig) -> list[str]:
    """Return the article-looking links on a page, deduplicated in page order.

    Returns an empty list when the page cannot be fetched.
    """
    result = fetch_url(section_url, cfg)
    if not result.ok:
        logger.error("Error finding article links on %s: %s", section_url, result.error)
        return []

    base_url = result.final_url or section_url
    soup = BeautifulSoup(result.text or "", "html.parser")
    links: list[str] = []
    seen: set[str] = set()
    for anchor in soup.find_all("a", href=True):
        href = urljoin(base_url, anchor["href"].strip())
        if not href.startswith("http") or href == section_url:
            continue
        if href.endswith("/") or "#" in href or is_media_link(href):
            continue
        if not looks_like_article(href) or href in seen:
            continue
        seen.add(href)
        links.append(href)
    return links


def _is_candidate(href: str, section_url: str) -> bool:
    return (
        href.startswith("http")
        and href != section_url
        and "#" not in href
        and not is_media_link(href)
        and not is_section_page(href)
    )


def _squash(text: str) -> str:
    return " ".join(text.split())
