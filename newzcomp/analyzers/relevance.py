"""Pick the article on a section page that matches a search query."""

from __future__ import annotations

import logging
import re
from typing import Protocol

from ..config import AppConfig
from ..core.types import LinkCandidate
from ..llm.prompts import build_select_link_prompt
from ..llm.providers.base import LLMProvider
from ..utils.logging import log_event


_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


class LinkSelector(Protocol):
    def select(self, candidates: list[LinkCandidate], query: str) -> str | None: ...


class RelevanceSelector:
    """Ask the light model for the 1-based index of the most relevant link."""

    def __init__(
        self,
        cfg: AppConfig,
        provider: LLMProvider,
        logger: logging.Logger | None = None,
    ) -> None:
        self.cfg = cfg
        self.provider = provider
        self.logger = logger

    def select(self, candidates: list[LinkCandidate], query: str) -> str | None:
        if not candidates:
            return None
        prompt = build_select_link_prompt(candidates, query)
        raw = self.provider.generate(
            prompt,
            event="select_link",
            model=self.cfg.provider.light_model,
            max_output_tokens=10,
            temperature=0.0,
        )
        href = parse_selection(raw, candidates)
        log_event(
            self.logger,
            "Section link selected",
            level=logging.DEBUG,
            event="section_link_selected",
            choice=raw.strip(),
            href=href,
            candidates=len(candidates),
        )
        return href


def parse_selection(raw: str, candidates: list[LinkCandidate]) -> str | None:
    """Map a model answer onto a candidate href.

    A leading integer is read as a 1-based index; "NONE", non-numeric or
    out-of-range answers yield None.

    Examples:
        >>> parse_selection("2", [LinkCandidate("a", "x"), LinkCandidate("b", "y")])
        'b'
        >>> parse_selection("NONE", [LinkCandidate("a", "x")]) is None
        True
    """
    choice = (raw or "").strip()
    if not choice or choice.upper() == "NONE":
        return None
    match = _LEADING_INT_RE.match(choice)
    if not match:
        return None
    index = int(match.group(1)) - 1
    if 0 <= index < len(candidates):
        return candidates[index].href
    return None
