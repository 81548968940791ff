"""Bias analysis across an article and its related coverage."""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Any, Protocol

from ..config import AppConfig
from ..core.dedup import distinct_articles
from ..core.model_json import coerce_analysis, normalize_model_json
from ..core.types import AnalysisResult, ScrapedArticle
from ..llm.prompts import build_bias_prompt
from ..llm.providers.base import LLMProvider
from ..utils.logging import log_event, truncate_text


SEEK_PERSPECTIVES = (
    "Readers should seek additional perspectives on this story, since the analysis "
    "is based on a single source."
)

RAW_RESPONSE_CHARS = 2000


class Analyzer(Protocol):
    def analyze(self, articles: list[ScrapedArticle]) -> tuple[AnalysisResult | None, dict[str, Any] | None]: ...


class BiasAnalyzer:
    """Request a structured bias report and normalize the response.

    Provider transport errors propagate as ProviderError; unparseable
    responses are returned as an {"error", "raw"} payload instead.
    """

    def __init__(
        self,
        cfg: AppConfig,
        provider: LLMProvider,
        logger: logging.Logger | None = None,
    ) -> None:
        self.cfg = cfg
        self.provider = provider
        self.logger = logger

    def analyze(self, articles: list[ScrapedArticle]) -> tuple[AnalysisResult | None, dict[str, Any] | None]:
        usable = distinct_articles(articles, self.cfg.analysis.duplicate_threshold)
        single_source = len(usable) <= 1
        prompt = build_bias_prompt(
            articles,
            single_source=single_source,
            max_chars=self.cfg.analysis.max_chars_per_article,
        )
        raw = self.provider.generate(
            prompt,
            event="bias_analysis",
            json_mode=True,
            max_output_tokens=self.cfg.analysis.max_output_tokens,
        )
        result, error = parse_analysis(raw, single_source)
        log_event(
            self.logger,
            "Bias analysis parsed" if result else "Bias analysis unparseable",
            level=logging.INFO if result else logging.WARNING,
            event="analysis_complete",
            articles=len(articles),
            distinct=len(usable),
            single_source=single_source,
            error=error["error"] if error else None,
        )
        return result, error


def parse_analysis(raw: Any, single_source: bool) -> tuple[AnalysisResult | None, dict[str, Any] | None]:
    """Normalize a raw model response into an AnalysisResult or an error payload.

    The payload keeps a clipped copy of the response for the audit file.
    """
    obj, error = normalize_model_json(raw)
    if obj is None:
        message = str(error["error"]) if error else "Unparseable response"
        return None, {"error": message, "raw": truncate_text(str(raw), RAW_RESPONSE_CHARS)}
    result = coerce_analysis(obj)
    if single_source:
        result = ensure_seek_perspectives(result)
    return result, None


def ensure_seek_perspectives(result: AnalysisResult) -> AnalysisResult:
    """Append the seek-additional-perspectives advice if the model left it out."""
    if "additional perspective" in result.recommendations.lower():
        return result
    recommendations = f"{result.recommendations} {SEEK_PERSPECTIVES}".strip()
    return replace(result, recommendations=recommendations)
