"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- ProviderConfig: LLM provider settings
- SearchConfig: Google Custom Search credentials and query defaults
- FetchConfig: HTTP fetching settings
- ScrapeConfig: Full-text scraping and extraction settings
- SectionConfig: Section-page resolution limits
- AnalysisConfig: Bias analysis prompt limits
- ValidationConfig: Quality bars applied before persistence
- AllowlistConfig: Trusted domain list location
- OutputConfig: Audit file and record store locations
- RunConfig: Themes and worker settings for batch runs
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml

from .errors import ConfigError


DEFAULT_THEMES = [
    "All",
    "Sports",
    "Entertainment",
    "Science",
    "Environment",
    "Education",
    "Politics",
    "Tech",
    "Business",
    "Health",
    "World",
    "Breaking",
]


@dataclass
class ProviderConfig:
    """Configuration for the LLM provider.

    Attributes:
        name: Provider name ("gemini", "openai", "openai_compatible")
        model: Model used for bias analysis
        light_model: Cheaper model used for concept extraction and link selection
        api_key_env: Environment variable name containing the API key
        base_url: Base URL for the provider API
        api_key: Optional inline API key (overrides env var)
        timeout_seconds: Request timeout for model calls
        trust_env: Whether to respect system proxy settings for API requests
    """

    name: str = "openai"
    model: str = "gpt-4o"
    light_model: str = "gpt-4o-mini"
    api_key_env: str = "OPENAI_API_KEY"
    base_url: str = "https://api.openai.com/v1"
    api_key: str | None = None
    timeout_seconds: float = 60.0
    trust_env: bool = True


@dataclass
class SearchConfig:
    """Configuration for the Google Custom Search adapter.

    Attributes:
        cx_env: Environment variable holding the search engine id
        api_key_env: Environment variable holding the fallback API key
        service_account_env: Environment variable pointing at a service-account JSON file
        service_account_file: Inline service-account path (overrides env var)
        endpoint: REST endpoint used by the API-key fallback
        date_restrict: Recency window for related-article searches
        sort: Result ordering
        num_results: Results requested per query (API maximum is 10)
        max_query_chars: Soft budget for composed query strings
        max_related: Cap on diverse related articles per seed
    """

    cx_env: str = "GOOGLE_CX"
    api_key_env: str = "GOOGLE_API_KEY"
    service_account_env: str = "GOOGLE_SERVICE_ACCOUNT_KEY"
    service_account_file: str | None = None
    endpoint: str = "https://www.googleapis.com/customsearch/v1"
    date_restrict: str = "d7"
    sort: str = "date"
    num_results: int = 10
    max_query_chars: int = 500
    max_related: int = 8


@dataclass
class FetchConfig:
    """Configuration for HTTP content fetching.

    Attributes:
        timeout_seconds: HTTP request timeout
        title_timeout_seconds: Shorter timeout used when refreshing a resolved title
        retries: Number of retry attempts for failed requests
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
    """

    timeout_seconds: float = 10.0
    title_timeout_seconds: float = 5.0
    retries: int = 1
    trust_env: bool = True
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )


@dataclass
class ScrapeConfig:
    """Configuration for full-text scraping.

    Attributes:
        max_articles: Maximum related articles scraped per seed
        max_words: Number of leading words kept from extracted text
        primary: Primary extraction method ("readability", "trafilatura", or "bs4")
        fallback: List of fallback methods to try if primary fails
    """

    max_articles: int = 4
    max_words: int = 200
    primary: str = "readability"
    fallback: list[str] = field(default_factory=lambda: ["trafilatura", "bs4"])


@dataclass
class SectionConfig:
    """Configuration for section-page resolution.

    Attributes:
        max_candidates: Maximum outbound links offered to the model
        min_link_text: Link text must be longer than this many characters
        context_chars: Characters of parent-element text kept per link
    """

    max_candidates: int = 80
    min_link_text: int = 10
    context_chars: int = 200


@dataclass
class AnalysisConfig:
    """Configuration for bias analysis.

    Attributes:
        max_chars_per_article: Characters of each article sent to the model
        max_output_tokens: Output token budget for the analysis call
        duplicate_threshold: Fuzzy similarity (0-100) above which two articles count as one
    """

    max_chars_per_article: int = 40000
    max_output_tokens: int = 4096
    duplicate_threshold: int = 92


@dataclass
class ValidationConfig:
    """Quality bars applied before a record is persisted."""

    min_title_chars: int = 10
    min_summary_chars: int = 20


@dataclass
class AllowlistConfig:
    """Location of the trusted domain list.

    Attributes:
        path: Text file with one domain per line
    """

    path: str = "allowed_domains.txt"


@dataclass
class OutputConfig:
    """Configuration for run outputs.

    Attributes:
        dir: Base output directory
        records_file: JSONL file validated records are appended to
        audit_prefix: Filename prefix for the per-theme raw result files
    """

    dir: str = "out"
    records_file: str = "records.jsonl"
    audit_prefix: str = "analysis_results_"


@dataclass
class RunConfig:
    """Configuration for batch runs.

    Attributes:
        themes: Themes processed by `newzcomp run` when none are given
        concurrency: Worker count across seed URLs within a theme
        max_seeds_per_theme: Optional cap on seed URLs per theme
    """

    themes: list[str] = field(default_factory=lambda: list(DEFAULT_THEMES))
    concurrency: int = 1
    max_seeds_per_theme: int | None = None


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_detail: LLM log detail level ("response_only", "prompt_response")
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls_authors")
        llm_log_file: Name of the LLM log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = True
    format: str = "jsonl"
    filename: str = "run.jsonl"
    llm_log_enabled: bool = True
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "none"
    llm_log_file: str = "llm.jsonl"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        host: Langfuse host URL (optional)
        environment: Langfuse environment label (optional)
        release: Langfuse release identifier (optional)
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    environment: str | None = None
    release: str | None = None
    redaction: str = "redact_urls_authors"
    max_text_chars: int = 20000


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    scrape: ScrapeConfig = field(default_factory=ScrapeConfig)
    section: SectionConfig = field(default_factory=SectionConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    allowlist: AllowlistConfig = field(default_factory=AllowlistConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    run: RunConfig = field(default_factory=RunConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)


_SECTIONS = {
    "provider": ProviderConfig,
    "search": SearchConfig,
    "fetch": FetchConfig,
    "scrape": ScrapeConfig,
    "section": SectionConfig,
    "analysis": AnalysisConfig,
    "validation": ValidationConfig,
    "allowlist": AllowlistConfig,
    "output": OutputConfig,
    "run": RunConfig,
    "logging": LoggingConfig,
    "langfuse": LangfuseConfig,
}


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")
    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    try:
        return AppConfig(**{name: cls(**data[name]) for name, cls in _SECTIONS.items()})
    except TypeError as exc:
        raise ConfigError(f"Invalid config: {exc}") from exc


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return os.getenv(cfg.api_key_env)


def get_search_credentials(cfg: SearchConfig) -> tuple[str | None, str | None, str | None]:
    """Return (cx, api_key, service_account_file) from config and environment."""
    cx = os.getenv(cfg.cx_env)
    api_key = os.getenv(cfg.api_key_env)
    service_account = cfg.service_account_file or os.getenv(cfg.service_account_env)
    return cx, api_key, service_account
