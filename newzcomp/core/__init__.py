"""Pure pipeline logic: data types, allow-list, classification, diversification, validation."""

from .allowlist import DomainAllowList, domain_of, load_allowlist
from .classify import is_section_page, looks_like_article
from .diversify import SourceDiversifier
from .model_json import coerce_analysis, normalize_model_json
from .validation import is_valid, validate_record

__all__ = [
    "DomainAllowList",
    "SourceDiversifier",
    "coerce_analysis",
    "domain_of",
    "is_section_page",
    "is_valid",
    "load_allowlist",
    "looks_like_article",
    "normalize_model_json",
    "validate_record",
]
