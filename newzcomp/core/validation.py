"""
Quality gate applied to records before they are persisted.
"""

from __future__ import annotations

from ..config import ValidationConfig
from .allowlist import DomainAllowList
from .types import TITLE_PLACEHOLDER, PipelineRecord, RelatedArticle


def filter_allowed_related(
    related: list[RelatedArticle], allowlist: DomainAllowList
) -> list[RelatedArticle]:
    """Drop related articles whose domain is not on the allow-list."""
    return [article for article in related if allowlist.allows_url(article.url)]


def validate_record(
    record: PipelineRecord,
    allowlist: DomainAllowList,
    cfg: ValidationConfig | None = None,
) -> list[str]:
    """Return the reasons a record fails the quality gate.

    An empty list means the record may be persisted.
    """
    cfg = cfg or ValidationConfig()
    reasons: list[str] = []

    if not record.url:
        reasons.append("missing url")
    title = (record.title or "").strip()
    if not title:
        reasons.append("missing title")
    elif title == TITLE_PLACEHOLDER:
        reasons.append("placeholder title")
    elif len(title) < cfg.min_title_chars:
        reasons.append(f"title shorter than {cfg.min_title_chars} chars")

    analysis = record.analysis
    if analysis is None:
        reasons.append("missing analysis")
    else:
        if len((analysis.summary or "").strip()) < cfg.min_summary_chars:
            reasons.append(f"analysis summary shorter than {cfg.min_summary_chars} chars")
        if not analysis.bias:
            reasons.append("empty bias array")

    if not filter_allowed_related(record.related_articles or [], allowlist):
        reasons.append("no allowed related articles")

    return reasons


def is_valid(
    record: PipelineRecord,
    allowlist: DomainAllowList,
    cfg: ValidationConfig | None = None,
) -> bool:
    return not validate_record(record, allowlist, cfg)
