"""Concept extraction: story entities, topic and keywords from seed metadata."""

from __future__ import annotations

import logging
from typing import Protocol

from ..config import AppConfig
from ..core.model_json import normalize_model_json
from ..core.types import Concepts
from ..errors import ProviderError
from ..llm.prompts import build_concepts_prompt
from ..llm.providers.base import LLMProvider
from ..utils.logging import log_event


class ConceptSource(Protocol):
    def extract(self, title: str, description: str) -> Concepts: ...


class ConceptExtractor:
    """Ask the light model to deconstruct a headline into search concepts."""

    def __init__(
        self,
        cfg: AppConfig,
        provider: LLMProvider,
        logger: logging.Logger | None = None,
    ) -> None:
        self.cfg = cfg
        self.provider = provider
        self.logger = logger

    def extract(self, title: str, description: str) -> Concepts:
        """Return Concepts for the article.

        Raises:
            ProviderError: If the model call fails or returns something other than a JSON object
        """
        prompt = build_concepts_prompt(title, description)
        raw = self.provider.generate(
            prompt,
            event="concepts",
            model=self.cfg.provider.light_model,
            json_mode=True,
            max_output_tokens=512,
        )
        obj, error = normalize_model_json(raw)
        if obj is None:
            raise ProviderError(f"Concept extraction returned invalid JSON: {error['error']}")
        concepts = Concepts.from_payload(obj)
        log_event(
            self.logger,
            "Concepts extracted",
            level=logging.DEBUG,
            event="concepts_extracted",
            entities=list(concepts.entities),
            topic=concepts.topic,
            keywords=list(concepts.keywords),
        )
        return concepts
