"""Model-backed analyzers: concept extraction, section link selection, bias analysis."""

from .bias import BiasAnalyzer
from .concepts import ConceptExtractor
from .relevance import RelevanceSelector

__all__ = ["BiasAnalyzer", "ConceptExtractor", "RelevanceSelector"]
