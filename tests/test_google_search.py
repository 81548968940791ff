"""Tests for the Google Custom Search adapter and its API-key fallback."""

from __future__ import annotations

import httpx

from newzcomp.config import FetchConfig, SearchConfig
from newzcomp.search import google
from newzcomp.search.google import GoogleSearchProvider, normalize_results


_RESPONSE = {
    "items": [
        {
            "link": "https://apnews.com/article/story",
            "title": "AP story",
            "snippet": "Snippet",
            "displayLink": "apnews.com",
            "pagemap": {"metatags": [{"article:published_time": "2026-03-10T12:00:00Z"}]},
        },
        {"title": "no link"},
        {"link": "https://reuters.com/world/story", "title": "Reuters story"},
    ]
}


def _patch_http(monkeypatch, handler):
    real_client = httpx.Client

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), timeout=kwargs.get("timeout"))

    monkeypatch.setattr(google.httpx, "Client", client_factory)


def _fail_primary(self, params, cx, service_account_file):
    raise RuntimeError("auth failed")


def test_normalize_results_reads_both_shapes():
    results = normalize_results(_RESPONSE)
    assert [r.link for r in results] == ["https://apnews.com/article/story", "https://reuters.com/world/story"]
    assert results[0].published_at == "2026-03-10T12:00:00Z"
    assert results[1].published_at is None
    assert normalize_results(None) == []


def test_fallback_used_when_service_account_fails(monkeypatch):
    monkeypatch.setenv("GOOGLE_CX", "cx-123")
    monkeypatch.setenv("GOOGLE_API_KEY", "key-123")
    monkeypatch.setattr(GoogleSearchProvider, "_search_service_account", _fail_primary)
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(dict(request.url.params))
        return httpx.Response(200, json=_RESPONSE)

    _patch_http(monkeypatch, handler)

    results = GoogleSearchProvider(SearchConfig(), FetchConfig()).search("climate pact", date_restrict="d7", sort="date")

    assert len(results) == 2
    assert seen["q"] == "climate pact"
    assert seen["key"] == "key-123"
    assert seen["cx"] == "cx-123"
    assert seen["dateRestrict"] == "d7"
    assert seen["num"] == "10"


def test_fallback_http_error_returns_empty(monkeypatch):
    monkeypatch.setenv("GOOGLE_CX", "cx-123")
    monkeypatch.setenv("GOOGLE_API_KEY", "key-123")
    monkeypatch.setattr(GoogleSearchProvider, "_search_service_account", _fail_primary)
    _patch_http(monkeypatch, lambda request: httpx.Response(403, json={"error": {"message": "quota"}}))

    assert GoogleSearchProvider(SearchConfig(), FetchConfig()).search("q") == []


def test_missing_credentials_return_empty(monkeypatch):
    for name in ("GOOGLE_CX", "GOOGLE_API_KEY", "GOOGLE_SERVICE_ACCOUNT_KEY"):
        monkeypatch.delenv(name, raising=False)

    assert GoogleSearchProvider(SearchConfig(), FetchConfig()).search("q") == []


def test_service_account_result_skips_fallback(monkeypatch):
    monkeypatch.setattr(
        GoogleSearchProvider,
        "_search_service_account",
        lambda self, params, cx, service_account_file: {"items": [{"link": "https://bbc.com/news/x"}]},
    )

    def handler(request):
        raise AssertionError("fallback should not be called")

    _patch_http(monkeypatch, handler)

    results = GoogleSearchProvider(SearchConfig(), FetchConfig()).search("q")
    assert [r.link for r in results] == ["https://bbc.com/news/x"]
