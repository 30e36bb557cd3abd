"""Query understanding: entity extraction, analysis, trip context and routing."""

from .analyzer import analyze
from .criteria import AMENITY_RULES, PROPERTY_TYPES, parse_criteria
from .extraction import extract_entities
from .models import (
    Completeness,
    Entities,
    GuestCount,
    PriceConstraint,
    QueryAnalysis,
    QueryRoute,
    RatingRequest,
    SearchCriteria,
    Sentiment,
    TripContext,
)
from .router import classify_route
from .trip import classify_trip

__all__ = [
    "AMENITY_RULES",
    "PROPERTY_TYPES",
    "Completeness",
    "Entities",
    "GuestCount",
    "PriceConstraint",
    "QueryAnalysis",
    "QueryRoute",
    "RatingRequest",
    "SearchCriteria",
    "Sentiment",
    "TripContext",
    "analyze",
    "classify_route",
    "classify_trip",
    "extract_entities",
    "parse_criteria",
]
