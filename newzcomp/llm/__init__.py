"""LLM backends, prompt rendering and tracing."""

from .providers import LLMProvider, available_providers, create_provider

__all__ = ["LLMProvider", "available_providers", "create_provider"]
