"""
Normalization of JSON returned by the language model.

Model output may arrive as a dict, raw JSON text, JSON wrapped in a
markdown code fence, or unparseable prose. `normalize_model_json` turns
all of these into either a dict or an error payload without raising.
"""

from __future__ import annotations

import json
import re
from typing import Any

from .types import TOPICS, AnalysisResult, BiasEntry


_LEADING_FENCE_RE = re.compile(r"^```(?:json)?[ \t]*[\r\n]*", re.IGNORECASE)
_TRAILING_FENCE_RE = re.compile(r"[\r\n]*```\s*$")


def strip_code_fence(text: str) -> str:
    """Remove a leading ```json / ``` marker and a trailing ``` marker."""
    cleaned = text.strip()
    cleaned = _LEADING_FENCE_RE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def normalize_model_json(raw: Any) -> tuple[dict[str, Any] | None, dict[str, Any] | None]:
    """Parse a model response into a JSON object.

    Args:
        raw: The model response, usually a string

    Returns:
        A tuple (obj, error). On success obj is the parsed dict and error is
        None. On failure obj is None and error is {"error": ..., "raw": ...}.

    Examples:
        >>> normalize_model_json('```json\\n{"summary": "x"}\\n```')
        ({'summary': 'x'}, None)
    """
    if isinstance(raw, dict):
        return raw, None
    if not isinstance(raw, str):
        return None, {"error": f"Unexpected response type: {type(raw).__name__}", "raw": raw}
    if not raw.strip():
        return None, {"error": "Empty response", "raw": raw}

    cleaned = strip_code_fence(raw)
    try:
        obj = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        snippet = extract_json_snippet(raw)
        if snippet is None:
            return None, {"error": f"Invalid JSON: {exc}", "raw": raw}
        try:
            obj = json.loads(snippet)
        except json.JSONDecodeError as inner:
            return None, {"error": f"Invalid JSON: {inner}", "raw": raw}
    if not isinstance(obj, dict):
        return None, {"error": "Expected a JSON object", "raw": raw}
    return obj, None


def extract_json_snippet(text: str) -> str | None:
    """Find a JSON object embedded in prose.

    A ```json fenced block wins; otherwise the span from the first "{" to
    the last "}" is returned. None when neither is present.
    """
    fenced = _extract_fenced_json(text)
    if fenced:
        return fenced
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def coerce_analysis(obj: dict[str, Any]) -> AnalysisResult:
    """Fill defaults and normalize types of a parsed analysis object."""
    bias_items = obj.get("bias")
    entries: list[BiasEntry] = []
    if isinstance(bias_items, list):
        for item in bias_items:
            if not isinstance(item, dict):
                continue
            entries.append(
                BiasEntry(
                    source=_as_text(item.get("source")),
                    title=_as_text(item.get("title")),
                    bias_rating=item.get("bias_rating", "unknown"),
                    bias_direction=_as_text(item.get("bias_direction")) or "unknown",
                    bias_analysis=_as_text(item.get("bias_analysis")),
                    summary=_as_text(item.get("summary")),
                )
            )

    topic = _as_text(obj.get("topic")).lower()
    if topic not in TOPICS:
        topic = "all"

    return AnalysisResult(
        bias=entries,
        bias_rating=obj.get("bias_rating", "unknown"),
        bias_direction=_as_text(obj.get("bias_direction")) or "unknown",
        summary=_as_text(obj.get("summary")),
        sources_agree_on=_as_text(obj.get("sources_agree_on")),
        conclusion=_as_text(obj.get("conclusion")),
        recommendations=_as_text(obj.get("recommendations")),
        reasoning=_as_text(obj.get("reasoning")),
        topic=topic,
    )


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(str(item).strip() for item in value if str(item).strip())
    return str(value).strip()


def _extract_fenced_json(text: str) -> str | None:
    lines = text.splitlines()
    start_idx = None
    for idx, line in enumerate(lines):
        if line.strip().startswith("```") and "json" in line.lower():
            start_idx = idx + 1
            break
    if start_idx is None:
        return None
    for idx in range(start_idx, len(lines)):
        if lines[idx].strip().startswith("```"):
            snippet = "\n".join(lines[start_idx:idx]).strip()
            return snippet or None
    return None
