"""Tests for related-article discovery over search candidates."""

from __future__ import annotations

from newzcomp.config import FetchConfig
from newzcomp.core.allowlist import DomainAllowList, domain_of
from newzcomp.core.types import CandidateResult, RelatedArticle, SeedArticle
from newzcomp.search import related as related_module
from newzcomp.search.related import collect_related_articles, prepend_seed


ALLOWLIST = DomainAllowList.from_iterable(["reuters.com", "apnews.com", "cnn.com", "bbc.com"])
SEED_URL = "https://www.reuters.com/world/2026/03/10/story"


class _MapResolver:
    def __init__(self, mapping):
        self.mapping = mapping
        self.calls = []

    def resolve(self, section_url, query):
        self.calls.append((section_url, query))
        return self.mapping.get(section_url)


def test_section_pages_resolved_and_titles_refreshed(monkeypatch):
    monkeypatch.setattr(related_module, "fetch_title", lambda url, cfg: "Resolved CNN headline")
    resolver = _MapResolver({"https://cnn.com/politics/": "https://cnn.com/2026/03/10/politics/pact"})
    candidates = [
        CandidateResult(link="https://cnn.com/politics/", title="Politics - CNN"),
        CandidateResult(link="https://apnews.com/article/pact", title="AP pact", snippet="snip"),
    ]

    out = collect_related_articles(SEED_URL, candidates, "q", ALLOWLIST, resolver, FetchConfig())

    assert [a.url for a in out] == ["https://cnn.com/2026/03/10/politics/pact", "https://apnews.com/article/pact"]
    assert out[0].title == "Resolved CNN headline"
    assert out[1].content == "snip"
    assert resolver.calls == [("https://cnn.com/politics/", "q")]


def test_unresolved_section_does_not_block_domain(monkeypatch):
    monkeypatch.setattr(related_module, "fetch_title", lambda url, cfg: None)
    resolver = _MapResolver({})
    candidates = [
        CandidateResult(link="https://bbc.com/news/world", title="World"),
        CandidateResult(link="https://bbc.com/2026/03/10/pact-story", title="BBC pact"),
    ]

    out = collect_related_articles(SEED_URL, candidates, "q", ALLOWLIST, resolver, FetchConfig())

    assert [a.url for a in out] == ["https://bbc.com/2026/03/10/pact-story"]


def test_output_never_repeats_domain_or_includes_seed_outlet(monkeypatch):
    monkeypatch.setattr(related_module, "fetch_title", lambda url, cfg: None)
    resolver = _MapResolver({"https://cnn.com/politics/": "https://apnews.com/article/other"})
    candidates = [
        CandidateResult(link="https://reuters.com/world/other-1234567"),
        CandidateResult(link="https://apnews.com/article/pact"),
        CandidateResult(link="https://cnn.com/politics/"),
        CandidateResult(link="https://untrusted.test/2026/03/10/x"),
    ]

    out = collect_related_articles(SEED_URL, candidates, "q", ALLOWLIST, resolver, FetchConfig())

    domains = [domain_of(a.url) for a in out]
    assert domains == ["apnews.com"]


def test_prepend_seed_adds_seed_once():
    seed = SeedArticle(url=SEED_URL, title="Seed story", description="Seed description")
    others = [RelatedArticle(source={"name": "apnews.com"}, title="AP", url="https://apnews.com/article/pact")]

    with_seed = prepend_seed(others, seed)

    assert with_seed[0].url == SEED_URL
    assert with_seed[0].source == {"name": "reuters.com"}
    assert with_seed[0].content == "Seed description"
    assert prepend_seed(with_seed, seed) == with_seed


def test_prepend_seed_uses_fallback_title():
    seed = SeedArticle(url=SEED_URL)
    assert prepend_seed([], seed)[0].title == "Source Article"
