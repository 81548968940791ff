"""Tests for section page resolution and article link enumeration."""

from __future__ import annotations

from newzcomp.analyzers.relevance import parse_selection
from newzcomp.config import FetchConfig, SectionConfig
from newzcomp.core.types import LinkCandidate
from newzcomp.errors import ProviderError
from newzcomp.fetch.fetcher import FetchResult
from newzcomp.search import sections
from newzcomp.search.sections import SectionResolver, find_article_links


SECTION_URL = "https://www.example.com/news/politics/"

SECTION_HTML = """
<html><body>
  <div><a href="/2026/03/10/senate-passes-budget-bill">Senate passes sweeping budget bill</a> Budget vote late at night.</div>
  <div><a href="/2026/03/10/senate-passes-budget-bill">Senate passes sweeping budget bill</a></div>
  <div><a href="https://www.example.com/news/politics/">Politics section home</a></div>
  <div><a href="/news/world">World news section</a></div>
  <div><a href="/video/clip#player">Watch the full clip now</a></div>
  <div><a href="/images/chart.png">Chart of the budget vote</a></div>
  <div><a href="/2026/03/10/short">Short</a></div>
  <div><a href="https://other.com/politics/governor-signs-law-1234567">Governor signs new voting law</a></div>
  <div><a href="mailto:desk@example.com">Email the politics desk today</a></div>
</body></html>
"""


class _FakeSelector:
    def __init__(self, answer=None, error=None):
        self.answer = answer
        self.error = error
        self.calls = []

    def select(self, candidates, query):
        self.calls.append((candidates, query))
        if self.error:
            raise self.error
        return self.answer(candidates) if callable(self.answer) else self.answer


def _patch_fetch(monkeypatch, html=SECTION_HTML):
    monkeypatch.setattr(
        sections,
        "fetch_url",
        lambda url, cfg, **kwargs: FetchResult(url=url, status_code=200, text=html, error=None, final_url=url),
    )


def test_candidates_filtered_and_deduplicated(monkeypatch):
    _patch_fetch(monkeypatch)
    selector = _FakeSelector(answer=lambda candidates: candidates[0].href)

    resolved = SectionResolver(FetchConfig(), SectionConfig(), selector).resolve(
        SECTION_URL, "budget bill after:2026-03-08 before:2026-03-10"
    )

    candidates, query = selector.calls[0]
    assert [c.href for c in candidates] == [
        "https://www.example.com/2026/03/10/senate-passes-budget-bill",
        "https://other.com/politics/governor-signs-law-1234567",
    ]
    assert candidates[0].context.startswith("Senate passes sweeping budget bill")
    assert query == "budget bill"
    assert resolved == "https://www.example.com/2026/03/10/senate-passes-budget-bill"


def test_candidate_cap(monkeypatch):
    links = "".join(
        f'<p><a href="/2026/03/10/story-number-{i}">Story headline number {i}</a></p>' for i in range(100)
    )
    _patch_fetch(monkeypatch, f"<html><body>{links}</body></html>")
    selector = _FakeSelector(answer=None)

    assert SectionResolver(FetchConfig(), SectionConfig(), selector).resolve(SECTION_URL, "q") is None
    assert len(selector.calls[0][0]) == 80


def test_fetch_failure_returns_none(monkeypatch):
    monkeypatch.setattr(
        sections,
        "fetch_url",
        lambda url, cfg, **kwargs: FetchResult(url=url, status_code=None, text=None, error="timeout"),
    )
    selector = _FakeSelector(answer="unused")

    assert SectionResolver(FetchConfig(), SectionConfig(), selector).resolve(SECTION_URL, "q") is None
    assert selector.calls == []


def test_selector_error_returns_none(monkeypatch):
    _patch_fetch(monkeypatch)
    selector = _FakeSelector(error=ProviderError("model down"))

    assert SectionResolver(FetchConfig(), SectionConfig(), selector).resolve(SECTION_URL, "q") is None


def test_parse_selection_handles_index_and_none():
    candidates = [LinkCandidate("https://a.com/1", "one"), LinkCandidate("https://b.com/2", "two")]
    assert parse_selection("2", candidates) == "https://b.com/2"
    assert parse_selection(" 1.", candidates) == "https://a.com/1"
    assert parse_selection("NONE", candidates) is None
    assert parse_selection("none", candidates) is None
    assert parse_selection("3", candidates) is None
    assert parse_selection("0", candidates) is None
    assert parse_selection("the first one", candidates) is None


def test_find_article_links_keeps_article_shapes(monkeypatch):
    _patch_fetch(monkeypatch)

    links = find_article_links(SECTION_URL, FetchConfig())

    assert links == [
        "https://www.example.com/2026/03/10/senate-passes-budget-bill",
        "https://www.example.com/news/world",
        "https://www.example.com/2026/03/10/short",
        "https://other.com/politics/governor-signs-law-1234567",
    ]
