"""Refinement suggestions computed from the result distribution."""

from .analyzer import RefinementAnalyzer, suggest_refinements
from .models import (
    AmenityFrequency,
    AmenityInsights,
    PriceBand,
    PriceInsights,
    PropertyTypeInsights,
    PropertyTypeStats,
    RatingInsights,
    RefinementSuggestion,
)
from .rules import RULES_V1, RefinementRules

__all__ = [
    "RULES_V1",
    "AmenityFrequency",
    "AmenityInsights",
    "PriceBand",
    "PriceInsights",
    "PropertyTypeInsights",
    "PropertyTypeStats",
    "RatingInsights",
    "RefinementAnalyzer",
    "RefinementRules",
    "RefinementSuggestion",
    "suggest_refinements",
]
