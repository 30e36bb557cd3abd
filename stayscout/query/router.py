"""Route a turn to property search, refinement or the travel assistant."""

import logging
import re
from dataclasses import replace

from stayscout.errors import require_utterance

from .extraction import extract_places
from .models import QueryRoute

logger = logging.getLogger(__name__)

SEARCH_KEYWORDS = (
    "house", "cabin", "apartment", "condo", "villa", "room", "rental", "airbnb",
    "bedroom", "bathroom", "sleeps", "guests", "night", "week", "weekend",
    "pool", "kitchen", "parking", "wifi", "pet-friendly", "superhost",
    "luxury", "budget", "cheap", "under", "over", "$", "price",
)
TRAVEL_QUESTION_KEYWORDS = (
    "best town", "best area", "best neighborhood", "best place", "where to stay",
    "what to do", "activities", "attractions", "restaurants", "when to visit",
    "best time", "weather", "season", "recommend", "suggestion", "advice",
)
REFINEMENT_KEYWORDS = (
    "show me", "filter", "only", "prefer", "want", "need", "must have",
    "change", "different", "another", "more", "less", "cheaper", "expensive",
)
QUESTION_PATTERNS = (
    re.compile(r"what\s+is\s+the\s+best", re.IGNORECASE),
    re.compile(r"where\s+should\s+i", re.IGNORECASE),
    re.compile(r"which\s+(?:town|area|neighborhood|place)", re.IGNORECASE),
    re.compile(r"what\s+(?:town|area|neighborhood|place)", re.IGNORECASE),
    re.compile(r"best\s+(?:town|area|neighborhood|place|city)", re.IGNORECASE),
    re.compile(r"where\s+to\s+(?:stay|go|visit)", re.IGNORECASE),
)


def _score(lowered: str, keywords: tuple[str, ...]) -> int:
    return sum(1 for keyword in keywords if keyword in lowered)


def classify_route(
    utterance: str,
    *,
    has_results: bool = False,
    previous_location: str | None = None,
) -> QueryRoute:
    """Classify where a turn should be dispatched.

    Args:
        utterance: The user's text
        has_results: Whether the conversation already shows search results
        previous_location: Location of the active search, if any

    Returns:
        QueryRoute with intent, confidence and reasoning

    Raises:
        InvalidInputError: If ``utterance`` is not a string
    """
    text = require_utterance(utterance)
    lowered = text.lower().strip()

    search_score = _score(lowered, SEARCH_KEYWORDS)
    travel_score = _score(lowered, TRAVEL_QUESTION_KEYWORDS)
    refinement_score = _score(lowered, REFINEMENT_KEYWORDS)

    places = extract_places(text)
    location = places[0] if places else None
    is_question = any(pattern.search(text) for pattern in QUESTION_PATTERNS)

    if is_question and travel_score > 0 and search_score == 0:
        route = QueryRoute(
            intent="travel_question",
            confidence=0.9,
            reasoning="Question asks for travel advice without property requirements",
            suggested_action="travel_assistant",
        )
    elif has_results and refinement_score > 0 and location is None:
        route = QueryRoute(
            intent="refinement",
            confidence=0.8,
            reasoning="Refinement keywords with existing search results",
            suggested_action="refine_search",
        )
    elif search_score > travel_score and (location or search_score >= 2):
        route = QueryRoute(
            intent="search",
            confidence=min(0.95, 0.6 + search_score * 0.1),
            reasoning=(
                f"Contains {search_score} property search keywords"
                f"{' and a location' if location else ''}"
            ),
            suggested_action="search_properties",
        )
    elif travel_score > search_score or is_question:
        route = QueryRoute(
            intent="travel_question",
            confidence=min(0.9, 0.6 + travel_score * 0.1),
            reasoning=f"Contains {travel_score} travel question keywords or question patterns",
            suggested_action="travel_assistant",
        )
    elif location:
        route = QueryRoute(
            intent="search",
            confidence=0.6,
            reasoning="Has a location but unclear intent, defaulting to property search",
            suggested_action="search_properties",
        )
    else:
        route = QueryRoute(
            intent="travel_question",
            confidence=0.5,
            reasoning="Unclear intent without a location, defaulting to travel assistant",
            suggested_action="travel_assistant",
        )

    extracted = location
    if extracted is None and route.intent == "refinement":
        extracted = previous_location
    is_specific = bool(location and (search_score >= 2 or route.intent == "search"))

    route = replace(
        route,
        confidence=round(route.confidence, 2),
        extracted_location=extracted,
        is_specific=is_specific,
    )
    logger.debug(
        f"Routed {text!r} to {route.intent} ({route.confidence}) "
        f"scores search={search_score} travel={travel_score} refinement={refinement_score}"
    )
    return route
