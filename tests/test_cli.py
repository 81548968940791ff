"""Tests for CLI option resolution."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from newzcomp import cli
from newzcomp.core.types import SeedResult
from newzcomp.runner import BatchReport


runner = CliRunner()


def _capture_batch(monkeypatch):
    captured = {}

    def fake_run_batch(themes, cfg, output_dir, **kwargs):
        captured["themes"] = themes
        captured["output_dir"] = output_dir
        return BatchReport(batch_id="b1", output_dir=output_dir / "b1")

    monkeypatch.setattr(cli, "run_batch", fake_run_batch)
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    return captured


def test_run_uses_output_dir_from_config(monkeypatch, tmp_path):
    captured = _capture_batch(monkeypatch)
    config_path = tmp_path / "config.yaml"
    config_path.write_text(f"output:\n  dir: {tmp_path / 'from-config'}\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["run", "-c", str(config_path), "-t", "World", "--no-progress"])

    assert result.exit_code == 0, result.output
    assert captured["output_dir"] == tmp_path / "from-config"
    assert captured["themes"] == ["World"]


def test_output_flag_overrides_config(monkeypatch, tmp_path):
    captured = _capture_batch(monkeypatch)
    config_path = tmp_path / "config.yaml"
    config_path.write_text("output:\n  dir: ignored\n", encoding="utf-8")

    result = runner.invoke(
        cli.app,
        ["run", "-c", str(config_path), "-o", str(tmp_path / "flag"), "-t", "World", "--no-progress"],
    )

    assert result.exit_code == 0, result.output
    assert captured["output_dir"] == tmp_path / "flag"


def test_analyze_defaults_to_config_output_dir(monkeypatch):
    captured = {}

    def fake_analyze_single(url, cfg, output_dir):
        captured["output_dir"] = output_dir
        return SeedResult(url=url, error="Domain not allowed for analysis: example.test"), False

    monkeypatch.setattr(cli, "analyze_single", fake_analyze_single)
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)

    result = runner.invoke(cli.app, ["analyze", "https://example.test/story"])

    assert result.exit_code == 1
    assert captured["output_dir"] == Path("out")
