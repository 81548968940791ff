"""Tests for hot-swappable LLM provider factory and backends."""

from __future__ import annotations

import httpx
import pytest

from newzcomp.config import LoggingConfig, ProviderConfig
from newzcomp.errors import ProviderError
from newzcomp.llm.providers import gemini, openai_compatible
from newzcomp.llm.providers.factory import available_providers, create_provider
from newzcomp.llm.providers.gemini import GeminiProvider, _extract_text
from newzcomp.llm.providers.openai_compatible import OpenAICompatibleProvider


def _patch_http(monkeypatch, module, handler):
    real_client = httpx.Client

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), timeout=kwargs.get("timeout"))

    monkeypatch.setattr(module.httpx, "Client", client_factory)


def test_available_providers_contains_expected_backends():
    names = available_providers()
    assert "gemini" in names
    assert "openai" in names
    assert "openai_compatible" in names


def test_create_provider_gemini():
    provider = create_provider(
        ProviderConfig(
            name="gemini",
            model="gemini-2.5-flash",
            api_key="test-key",
            base_url="https://generativelanguage.googleapis.com",
        ),
        LoggingConfig(),
        llm_logger=None,
    )
    assert isinstance(provider, GeminiProvider)


def test_create_provider_openai_compatible():
    provider = create_provider(
        ProviderConfig(name="OpenAI", api_key="test-key"),
        LoggingConfig(),
        llm_logger=None,
    )
    assert isinstance(provider, OpenAICompatibleProvider)


def test_create_provider_rejects_unknown_backend():
    with pytest.raises(ValueError, match="Unsupported provider"):
        create_provider(
            ProviderConfig(name="unknown-provider", model="x", api_key="test-key"),
            LoggingConfig(),
            llm_logger=None,
        )


def test_create_provider_requires_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ValueError, match="Missing API key"):
        create_provider(ProviderConfig(), LoggingConfig(), llm_logger=None)


def test_extract_text_joins_non_thought_parts():
    data = {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {"thought": True, "text": "internal reasoning"},
                        {"text": '{"summary": "A"'},
                        {"text": ', "topic": "world"}'},
                    ]
                }
            }
        ]
    }

    assert _extract_text(data) == '{"summary": "A", "topic": "world"}'


def test_gemini_json_mode_sets_response_mime_type(monkeypatch):
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["body"] = request.read()
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "{}"}]}}]})

    _patch_http(monkeypatch, gemini, handler)
    provider = GeminiProvider(
        ProviderConfig(name="gemini", model="gemini-2.5-flash", api_key="k", base_url="https://gl.example"),
        "k",
        LoggingConfig(),
        None,
    )

    assert provider.generate("prompt", event="test", json_mode=True) == "{}"
    assert ":generateContent" in captured["url"]
    assert b'"responseMimeType":"application/json"' in captured["body"].replace(b" ", b"")


def test_openai_compatible_sends_response_format(monkeypatch):
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["auth"] = request.headers.get("Authorization")
        captured["body"] = request.read()
        return httpx.Response(200, json={"choices": [{"message": {"content": " 3 "}}]})

    _patch_http(monkeypatch, openai_compatible, handler)
    provider = OpenAICompatibleProvider(ProviderConfig(api_key="k"), "k", LoggingConfig(), None)

    assert provider.generate("prompt", event="test", model="gpt-4o-mini", json_mode=True) == "3"
    assert captured["auth"] == "Bearer k"
    body = captured["body"].replace(b" ", b"")
    assert b'"response_format":{"type":"json_object"}' in body
    assert b'"model":"gpt-4o-mini"' in body


def test_transport_error_becomes_provider_error(monkeypatch):
    _patch_http(monkeypatch, openai_compatible, lambda request: httpx.Response(500, json={"error": "boom"}))
    provider = OpenAICompatibleProvider(ProviderConfig(api_key="k"), "k", LoggingConfig(), None)

    with pytest.raises(ProviderError, match="Chat completion failed"):
        provider.generate("prompt", event="test")
