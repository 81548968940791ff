"""Prompt loading and rendering helpers for the model collaborators."""

from __future__ import annotations

from functools import lru_cache
import json
from pathlib import Path

from ..core.types import TOPICS, LinkCandidate, ScrapedArticle


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"

_SINGLE_SOURCE_NOTE = (
    "Important: only one distinct article is available. Do not write the analysis as if you are "
    "comparing articles; treat it as a single article analysis. Add to the recommendations that "
    "readers should seek additional perspectives."
)
_MULTI_SOURCE_NOTE = (
    "Important: if the additional articles are the exact same story from the same outlet, treat it "
    "as a single article analysis. Also add to the recommendations that readers should seek "
    "additional perspectives where coverage is thin."
)


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    template = _load_template(name)
    return template.format(**values)


def build_concepts_prompt(title: str, description: str) -> str:
    return _render_template("concepts", title=title, description=description)


def build_select_link_prompt(candidates: list[LinkCandidate], query: str) -> str:
    blocks = []
    for idx, item in enumerate(candidates, start=1):
        blocks.append(f"{idx}. URL: {item.href}\n   Title: {item.text}\n   Context: {item.context}")
    return _render_template(
        "select_link",
        query=query,
        candidates="\n\n".join(blocks),
        count=str(len(candidates)),
    )


def build_bias_prompt(
    articles: list[ScrapedArticle],
    single_source: bool,
    max_chars: int,
) -> str:
    payload = [
        {"source": article.source, "title": article.title, "text": article.text[:max_chars]}
        for article in articles
    ]
    return _render_template(
        "bias_analysis",
        articles=json.dumps(payload, ensure_ascii=False, indent=2),
        topics=", ".join(f'"{topic}"' for topic in TOPICS),
        mode_note=_SINGLE_SOURCE_NOTE if single_source else _MULTI_SOURCE_NOTE,
    )
