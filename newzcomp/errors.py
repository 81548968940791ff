"""Exception types raised across the pipeline."""

from __future__ import annotations


class NewzcompError(Exception):
    """Base class for pipeline errors."""


class ConfigError(NewzcompError):
    """Configuration could not be loaded or is inconsistent."""


class AllowlistError(NewzcompError):
    """The trusted domain list could not be loaded. Fatal for a run."""


class ProviderError(NewzcompError):
    """A model request failed at the transport level."""
