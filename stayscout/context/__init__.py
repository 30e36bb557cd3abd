"""Search context tracking across conversational turns."""

from .geocoding import (
    LocationValidation,
    LocationValidator,
    NominatimConfig,
    NominatimLocationValidator,
)
from .models import SearchContext
from .tracker import ContextState, SearchContextTracker, merge_context, start_context

__all__ = [
    "ContextState",
    "LocationValidation",
    "LocationValidator",
    "NominatimConfig",
    "NominatimLocationValidator",
    "SearchContext",
    "SearchContextTracker",
    "merge_context",
    "start_context",
]
