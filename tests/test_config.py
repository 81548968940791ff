"""Tests for YAML config loading and defaults."""

from __future__ import annotations

import pytest

from newzcomp.config import AppConfig, get_search_credentials, load_config
from newzcomp.errors import ConfigError


def test_defaults_without_path():
    cfg = load_config(None)
    assert isinstance(cfg, AppConfig)
    assert cfg.search.date_restrict == "d7"
    assert cfg.scrape.max_articles == 4
    assert cfg.scrape.max_words == 200
    assert cfg.section.max_candidates == 80
    assert len(cfg.run.themes) == 12


def test_yaml_overrides_are_merged(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "provider:\n  name: gemini\n  model: gemini-2.5-flash\nrun:\n  concurrency: 3\nunknown: 1\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.provider.name == "gemini"
    assert cfg.provider.model == "gemini-2.5-flash"
    assert cfg.provider.light_model == "gpt-4o-mini"
    assert cfg.run.concurrency == 3
    assert cfg.fetch.timeout_seconds == 10.0


def test_unknown_section_key_raises_config_error(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("search:\n  nope: true\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path))


def test_non_mapping_root_raises_config_error(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path))


def test_search_credentials_from_env(monkeypatch):
    monkeypatch.setenv("GOOGLE_CX", "cx")
    monkeypatch.setenv("GOOGLE_API_KEY", "key")
    monkeypatch.setenv("GOOGLE_SERVICE_ACCOUNT_KEY", "/secrets/sa.json")

    assert get_search_credentials(AppConfig().search) == ("cx", "key", "/secrets/sa.json")
