"""Google Gemini provider over the generateContent REST endpoint."""

from __future__ import annotations

from typing import Any

import httpx

from ...errors import ProviderError
from .base import LLMProvider


class GeminiProvider(LLMProvider):
    """Gemini-backed text generation."""

    provider_name = "gemini"

    def _complete(
        self,
        prompt: str,
        *,
        model: str,
        json_mode: bool,
        max_output_tokens: int,
        temperature: float,
    ) -> str:
        generation_config: dict[str, Any] = {
            "temperature": temperature,
            "maxOutputTokens": max_output_tokens,
        }
        if json_mode:
            generation_config["responseMimeType"] = "application/json"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        data = self._post(model, payload)
        content = _extract_text(data)
        if not content:
            raise ProviderError("Gemini returned no text")
        return content.strip()

    def _post(self, model: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/v1beta/models/{model}:generateContent"
        params = {"key": self.api_key}
        try:
            with httpx.Client(timeout=self.cfg.timeout_seconds, trust_env=self.cfg.trust_env) as client:
                resp = client.post(url, params=params, json=payload)
                resp.raise_for_status()
                return resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ProviderError(f"Gemini request failed: {type(exc).__name__}: {exc}") from exc


def _extract_text(data: dict[str, Any]) -> str:
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""

    if not isinstance(parts, list):
        return ""

    non_thought_chunks: list[str] = []
    all_chunks: list[str] = []
    for part in parts:
        if not isinstance(part, dict):
            continue
        text = part.get("text")
        if not text:
            continue
        chunk = str(text)
        all_chunks.append(chunk)
        if not bool(part.get("thought")):
            non_thought_chunks.append(chunk)

    if non_thought_chunks:
        return "".join(non_thought_chunks)
    return "".join(all_chunks)
