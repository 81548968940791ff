"""Tests for the model-backed analyzers using a scripted provider."""

from __future__ import annotations

import json

import pytest

from newzcomp.analyzers.bias import BiasAnalyzer, ensure_seek_perspectives
from newzcomp.analyzers.concepts import ConceptExtractor
from newzcomp.analyzers.relevance import RelevanceSelector
from newzcomp.config import AppConfig
from newzcomp.core.types import AnalysisResult, LinkCandidate, ScrapedArticle
from newzcomp.errors import ProviderError


class _ScriptedProvider:
    """Provider stub returning canned responses and recording prompts."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def generate(self, prompt, **kwargs):
        self.calls.append((prompt, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _article(source: str, text: str) -> ScrapedArticle:
    return ScrapedArticle(source=source, title=f"{source} headline", url=f"https://{source}/story", published_at=None, text=text)


_ANALYSIS = {
    "summary": "Officials announced a new climate pact covering emissions.",
    "bias": [{"source": "reuters.com", "title": "Pact", "bias_rating": 1, "bias_direction": "neutral"}],
    "bias_rating": 1,
    "bias_direction": "neutral",
    "recommendations": "Compare coverage across outlets.",
    "topic": "environment",
}


def test_single_article_recommendations_mention_additional_perspectives():
    provider = _ScriptedProvider([json.dumps(_ANALYSIS)])
    analyzer = BiasAnalyzer(AppConfig(), provider)

    result, error = analyzer.analyze([_article("reuters.com", "The pact was signed on Monday by forty nations.")])

    assert error is None
    assert "additional perspectives" in result.recommendations.lower()
    assert "only one distinct article" in provider.calls[0][0]
    assert provider.calls[0][1]["json_mode"] is True


def test_duplicate_wire_copy_counts_as_single_source():
    text = "The pact was signed on Monday by forty nations after two weeks of talks in Geneva."
    provider = _ScriptedProvider(["```json\n" + json.dumps(_ANALYSIS) + "\n```"])

    result, _ = BiasAnalyzer(AppConfig(), provider).analyze([_article("a.com", text), _article("b.com", text)])

    assert "additional perspectives" in result.recommendations.lower()


def test_multiple_sources_keep_model_recommendations():
    provider = _ScriptedProvider([json.dumps(_ANALYSIS)])
    articles = [
        _article("a.com", "The pact was signed on Monday by forty nations after talks."),
        _article("b.com", "Critics say the agreement lacks enforcement and arrives too late for island states."),
    ]

    result, _ = BiasAnalyzer(AppConfig(), provider).analyze(articles)

    assert result.recommendations == "Compare coverage across outlets."
    assert result.topic == "environment"


def test_unparseable_analysis_returns_error():
    provider = _ScriptedProvider(["I cannot produce JSON today."])

    result, error = BiasAnalyzer(AppConfig(), provider).analyze([_article("a.com", "text")])

    assert result is None
    assert "Invalid JSON" in error["error"]
    assert error["raw"] == "I cannot produce JSON today."


def test_unparseable_analysis_raw_is_clipped():
    provider = _ScriptedProvider(["nope " * 1000])

    _, error = BiasAnalyzer(AppConfig(), provider).analyze([_article("a.com", "text")])

    assert error["raw"].startswith("nope nope")
    assert error["raw"].endswith("...(truncated)")
    assert len(error["raw"]) < 2100


def test_provider_error_propagates():
    provider = _ScriptedProvider([ProviderError("timeout")])
    with pytest.raises(ProviderError):
        BiasAnalyzer(AppConfig(), provider).analyze([_article("a.com", "text")])


def test_article_text_clipped_in_prompt():
    cfg = AppConfig()
    cfg.analysis.max_chars_per_article = 50
    provider = _ScriptedProvider([json.dumps(_ANALYSIS)])

    BiasAnalyzer(cfg, provider).analyze([_article("a.com", "y" * 500)])

    prompt = provider.calls[0][0]
    assert "y" * 50 in prompt
    assert "y" * 51 not in prompt


def test_ensure_seek_perspectives_is_not_duplicated():
    result = AnalysisResult(recommendations="Readers should seek additional perspectives.")
    assert ensure_seek_perspectives(result) is result


def test_concept_extractor_uses_light_model():
    provider = _ScriptedProvider(['{"entities": ["NASA"], "topic": "moon landing", "keywords": ["Artemis"]}'])

    concepts = ConceptExtractor(AppConfig(), provider).extract("NASA lands", "Crew returns")

    assert concepts.entities == ("NASA",)
    assert concepts.keywords == ("Artemis",)
    assert provider.calls[0][1]["model"] == AppConfig().provider.light_model
    assert 'Article Title: "NASA lands"' in provider.calls[0][0]


def test_concept_extractor_invalid_json_raises_provider_error():
    with pytest.raises(ProviderError):
        ConceptExtractor(AppConfig(), _ScriptedProvider(["not json"])).extract("t", "d")


def test_relevance_selector_maps_index_to_href():
    candidates = [LinkCandidate("https://a.com/1", "First headline"), LinkCandidate("https://b.com/2", "Second headline")]
    provider = _ScriptedProvider(["2"])

    href = RelevanceSelector(AppConfig(), provider).select(candidates, "budget vote")

    assert href == "https://b.com/2"
    assert "Return ONLY the number (1-2)" in provider.calls[0][0]
    assert provider.calls[0][1]["max_output_tokens"] == 10


def test_relevance_selector_skips_model_for_no_candidates():
    provider = _ScriptedProvider([])
    assert RelevanceSelector(AppConfig(), provider).select([], "q") is None
    assert provider.calls == []
