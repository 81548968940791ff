"""Abstract interface for text-generation backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging

from ...config import LoggingConfig, ProviderConfig
from ...utils.logging import log_event, redact_text, truncate_text
from ..tracing import record_span_error, set_span_output, start_span


class LLMProvider(ABC):
    """Provider interface used by the concept, relevance and bias analyzers.

    Subclasses implement `_complete`; `generate` adds tracing and LLM
    response logging around it. Transport failures surface as ProviderError.
    """

    provider_name = "base"

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        log_cfg: LoggingConfig,
        llm_logger: logging.Logger | None,
    ):
        if not api_key:
            raise ValueError(f"Missing API key for provider {cfg.name} (set {cfg.api_key_env})")
        self.cfg = cfg
        self.api_key = api_key
        self.log_cfg = log_cfg
        self.llm_logger = llm_logger

    def generate(
        self,
        prompt: str,
        *,
        event: str,
        model: str | None = None,
        json_mode: bool = False,
        max_output_tokens: int = 1024,
        temperature: float = 0.2,
    ) -> str:
        """Send a single-turn prompt and return the response text.

        Args:
            prompt: User prompt
            event: Event name used for tracing and the LLM log
            model: Model override; defaults to cfg.model
            json_mode: Ask the backend to constrain output to a JSON object
            max_output_tokens: Output token budget
            temperature: Sampling temperature

        Raises:
            ProviderError: If the request fails or returns no content
        """
        model_name = model or self.cfg.model
        with start_span(
            f"{self.provider_name}.{event}",
            kind="llm",
            input_value=prompt,
            attributes={"llm.model": model_name, "llm.provider": self.provider_name},
        ) as span:
            try:
                content = self._complete(
                    prompt,
                    model=model_name,
                    json_mode=json_mode,
                    max_output_tokens=max_output_tokens,
                    temperature=temperature,
                )
            except Exception as exc:
                record_span_error(span, exc)
                self._log_llm_response(event, "provider_error", model_name, str(exc), prompt)
                raise
            set_span_output(span, content)
            self._log_llm_response(event, "ok", model_name, content, prompt)
            return content

    @abstractmethod
    def _complete(
        self,
        prompt: str,
        *,
        model: str,
        json_mode: bool,
        max_output_tokens: int,
        temperature: float,
    ) -> str:
        raise NotImplementedError

    def _log_llm_response(
        self,
        event: str,
        status: str,
        model: str,
        content: str,
        prompt: str,
    ) -> None:
        if self.llm_logger is None:
            return
        redaction = self.log_cfg.llm_log_redaction
        payload = {
            "event": event,
            "status": status,
            "model": model,
            "raw_response": truncate_text(redact_text(content, redaction)),
        }
        if self.log_cfg.llm_log_detail == "prompt_response":
            payload["raw_prompt"] = truncate_text(redact_text(prompt, redaction))
        log_event(self.llm_logger, "LLM response", **payload)
