"""
Core data types for the bias comparison pipeline.

This module defines the data structures passed between pipeline stages:
- SeedArticle: Metadata of the article a comparison starts from
- Concepts / SearchParams: Structured story description and the query built from it
- CandidateResult: Raw search-engine hit
- RelatedArticle / ScrapedArticle: Vetted coverage from other outlets, before and after scraping
- AnalysisResult: Normalized bias analysis returned by the model
- PipelineRecord: The unit written to the record store
- SeedResult: Per-seed outcome written to the audit file
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


TITLE_PLACEHOLDER = "Title not found"

TOPICS = (
    "all",
    "politics",
    "technology",
    "business",
    "health",
    "world",
    "sports",
    "entertainment",
    "science",
    "environment",
    "education",
    "breaking",
)


@dataclass(frozen=True)
class ArticleInfo:
    """Metadata scraped from a page's HTML.

    Every field is an empty string when the page could not be fetched.
    """

    title: str = ""
    description: str = ""
    image_url: str = ""
    author: str = ""


@dataclass(frozen=True)
class SeedArticle:
    """The article a comparison is built around."""

    url: str
    title: str = ""
    description: str = ""
    image_url: str = ""
    author: str = ""

    @classmethod
    def from_info(cls, url: str, info: ArticleInfo) -> "SeedArticle":
        return cls(
            url=url,
            title=info.title,
            description=info.description,
            image_url=info.image_url,
            author=info.author,
        )


@dataclass(frozen=True)
class Concepts:
    """Structured description of a story used to build a search query.

    Attributes:
        entities: Most important named entities (at most 5)
        topic: Short phrase for the main topic
        keywords: Central keywords that may have synonyms (at most 3)
    """

    entities: tuple[str, ...] = ()
    topic: str = ""
    keywords: tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Concepts":
        return cls(
            entities=tuple(_clean_strings(payload.get("entities"))[:5]),
            topic=str(payload.get("topic") or "").strip(),
            keywords=tuple(_clean_strings(payload.get("keywords"))[:3]),
        )


@dataclass(frozen=True)
class SearchParams:
    query: str
    date_restrict: str | None = "d7"
    sort: str | None = "date"
    exclude_domain: str | None = None


@dataclass(frozen=True)
class LinkCandidate:
    """An outbound link found on a section page."""

    href: str
    text: str
    context: str = ""


@dataclass(frozen=True)
class CandidateResult:
    """A single search-engine hit."""

    link: str
    title: str = ""
    snippet: str = ""
    display_link: str = ""
    published_at: str | None = None


@dataclass
class RelatedArticle:
    """An allow-listed article about the same story from another outlet.

    Attributes:
        source: Outlet descriptor, always carrying a "name" key
        title: Headline as found by search or section resolution
        url: Article URL
        published_at: ISO timestamp when known
        content: Search snippet or seed description
    """

    source: dict[str, str]
    title: str
    url: str
    published_at: str | None = None
    content: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ScrapedArticle:
    """A related article with its extracted body text.

    `text` is an empty string when fetching or extraction failed.
    """

    source: str
    title: str
    url: str
    published_at: str | None
    text: str = ""

    @property
    def has_text(self) -> bool:
        return bool(self.text.strip())


@dataclass
class BiasEntry:
    source: str = ""
    title: str = ""
    bias_rating: Any = "unknown"
    bias_direction: str = "unknown"
    bias_analysis: str = ""
    summary: str = ""


@dataclass
class AnalysisResult:
    """Bias analysis for one seed article and its related coverage."""

    bias: list[BiasEntry] = field(default_factory=list)
    bias_rating: Any = "unknown"
    bias_direction: str = "unknown"
    summary: str = ""
    sources_agree_on: str = ""
    conclusion: str = ""
    recommendations: str = ""
    reasoning: str = ""
    topic: str = "all"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class PipelineRecord:
    """The unit persisted for each accepted seed URL."""

    url: str
    title: str
    summary: str
    analysis: AnalysisResult | None
    related_articles: list[RelatedArticle]
    keywords: str = ""
    image_url: str = ""
    author: str = ""
    source: str = ""
    topic: str = "all"
    theme: str = "All"
    news_date: str = ""
    batchid: str = ""
    is_breaking: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["analysis"] = self.analysis.to_dict() if self.analysis else None
        return data


@dataclass
class SeedResult:
    """Outcome of processing one seed URL.

    Exactly one of `record` and `error` is set.
    """

    url: str
    record: PipelineRecord | None = None
    error: str | None = None
    raw_response: str | None = None

    @property
    def ok(self) -> bool:
        return self.record is not None

    def to_dict(self) -> dict[str, Any]:
        if self.record is None:
            payload: dict[str, Any] = {"url": self.url, "error": self.error}
            if self.raw_response is not None:
                payload["raw_response"] = self.raw_response
            return payload
        return self.record.to_dict()


def _clean_strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]
