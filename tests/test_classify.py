"""Tests for URL-shape classification of section and article pages."""

from __future__ import annotations

import pytest

from newzcomp.core.classify import is_media_link, is_section_page, looks_like_article


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com/news/politics",
        "https://example.com/news/business/",
        "https://example.com/topics/china-russia-relations",
        "https://example.com/category/politics",
        "https://example.com/section/world/",
        "https://example.com/us/diplomacy",
        "https://example.com/tag/elections",
        "https://example.com/latest",
        "https://example.com/breaking/",
        "https://example.com/home",
        "https://example.com/",
    ],
)
def test_is_section_page_matches_listing_urls(url):
    assert is_section_page(url)


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com/2026/03/10/senate-passes-budget-bill",
        "https://example.com/world/europe/leaders-meet-in-paris-1234567",
        "https://example.com/story",
    ],
)
def test_is_section_page_rejects_article_urls(url):
    assert not is_section_page(url)


def test_looks_like_article_patterns():
    assert looks_like_article("https://example.com/2026/03/10/story")
    assert looks_like_article("https://example.com/NEWS/world-story")
    assert looks_like_article("https://example.com/world/leaders-meet-1234567")
    assert not looks_like_article("https://example.com/about")
    assert not looks_like_article("https://example.com/world/story-123")


def test_ambiguous_url_matches_neither_classifier():
    url = "https://example.com/opinion/long-form-essay"
    assert not is_section_page(url)
    assert not looks_like_article(url)


def test_classifiers_are_pure():
    urls = ["https://example.com/news/politics", "https://example.com/2026/01/05/x"]
    first = [(is_section_page(u), looks_like_article(u)) for u in urls]
    second = [(is_section_page(u), looks_like_article(u)) for u in urls]
    assert first == second


def test_is_media_link():
    assert is_media_link("https://cdn.example.com/photo.JPG")
    assert is_media_link("https://example.com/report.pdf")
    assert not is_media_link("https://example.com/story.html")
