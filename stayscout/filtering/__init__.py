"""Adaptive filtering of listings under the filter-or-sort discipline."""

from .criteria import Criterion, Outcome, estimate_capacity
from .engine import FilterEngine, FilterOutcome, build_criteria, filter_listings

__all__ = [
    "Criterion",
    "FilterEngine",
    "FilterOutcome",
    "Outcome",
    "build_criteria",
    "estimate_capacity",
    "filter_listings",
]
