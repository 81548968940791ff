"""OpenAI-compatible chat completions provider."""

from __future__ import annotations

from typing import Any

import httpx

from ...errors import ProviderError
from .base import LLMProvider


class OpenAICompatibleProvider(LLMProvider):
    """Provider for OpenAI and any server exposing /chat/completions."""

    provider_name = "openai"

    def _complete(
        self,
        prompt: str,
        *,
        model: str,
        json_mode: bool,
        max_output_tokens: int,
        temperature: float,
    ) -> str:
        payload: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_output_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}
        data = self._post(payload)
        content = _extract_text(data)
        if not content:
            raise ProviderError("Chat completion returned no content")
        return content.strip()

    def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            with httpx.Client(timeout=self.cfg.timeout_seconds, trust_env=self.cfg.trust_env) as client:
                resp = client.post(url, headers=headers, json=payload)
                resp.raise_for_status()
                return resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ProviderError(f"Chat completion failed: {type(exc).__name__}: {exc}") from exc


def _extract_text(data: dict[str, Any]) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content if isinstance(content, str) else ""
