"""StayScout: query understanding and adaptive refinement for rental search."""

from stayscout.context import SearchContext, merge_context
from stayscout.errors import InvalidInputError
from stayscout.filtering import FilterEngine, FilterOutcome, filter_listings
from stayscout.listings import Listing, parse_listings
from stayscout.query import QueryAnalysis, TripContext, analyze, classify_route, classify_trip
from stayscout.refinement import RefinementSuggestion, suggest_refinements
from stayscout.session import TurnProcessor, TurnResult

__version__ = "0.1.0"

__all__ = [
    "FilterEngine",
    "FilterOutcome",
    "InvalidInputError",
    "Listing",
    "QueryAnalysis",
    "RefinementSuggestion",
    "SearchContext",
    "TripContext",
    "TurnProcessor",
    "TurnResult",
    "analyze",
    "classify_route",
    "classify_trip",
    "filter_listings",
    "merge_context",
    "parse_listings",
    "suggest_refinements",
]
