"""Query analyzer: entities, sentiment, intents and completeness for one utterance."""

import logging
import re
from datetime import date
from typing import TYPE_CHECKING

from stayscout.errors import require_utterance
from stayscout.thresholds import EngineConfig, engine_config

from .criteria import parse_criteria
from .extraction import LOCATION_FALLBACK, extract_entities, extract_keywords
from .models import Completeness, Entities, QueryAnalysis, SearchCriteria, Sentiment

if TYPE_CHECKING:
    from stayscout.context.models import SearchContext

logger = logging.getLogger(__name__)

POSITIVE_WORDS = ("love", "great", "amazing", "perfect", "excellent", "wonderful", "fantastic")
NEGATIVE_WORDS = ("hate", "terrible", "awful", "bad", "horrible", "disappointed", "frustrated")

# Ordered (intent, phrases); every intent whose phrases match is kept
INTENT_PATTERNS = (
    ("search", ("find", "search", "look for", "looking for", "need", "want")),
    ("compare", ("compare", "vs", "versus", "better", "difference")),
    ("filter", ("only", "just", "specifically", "must have")),
    ("question", ("what", "how", "where", "when", "why", "which")),
    ("book", ("book", "reserve", "availability", "available")),
)

DATES_FALLBACK = re.compile(r"\b(?:from|during|until|between|arriving)\s+\w+", re.IGNORECASE)
GROUP_FALLBACK = re.compile(r"\b(?:solo|couple|family|group)\b", re.IGNORECASE)
BUDGET_FALLBACK = re.compile(r"\b(?:budget|cheap|affordable|expensive|luxury)\b", re.IGNORECASE)

CLARIFYING_QUESTIONS = {
    "location": "Where would you like to stay? (e.g., 'in San Francisco' or 'near downtown Austin')",
    "dates": "When are you planning to visit? (e.g., 'next weekend' or 'March 15-18')",
    "group_size": "How many people will be staying? (e.g., '2 adults' or 'family of 4')",
    "budget": "Do you have a budget range in mind? (e.g., 'under $200/night' or 'luxury options')",
}
INTENT_HINTS = {
    "compare": "What specific features would you like me to compare?",
    "question": "I'd be happy to provide more details about any specific aspect!",
}


def _contains_phrase(lowered: str, phrase: str) -> bool:
    return re.search(rf"\b{re.escape(phrase)}\b", lowered) is not None


def analyze_sentiment(text: str) -> Sentiment:
    """Score sentiment from positive/negative word counts."""
    lowered = text.lower()
    positive = sum(1 for word in POSITIVE_WORDS if _contains_phrase(lowered, word))
    negative = sum(1 for word in NEGATIVE_WORDS if _contains_phrase(lowered, word))
    score = (positive - negative) / max(positive + negative, 1)

    label = "neutral"
    if score > 0.1:
        label = "positive"
    elif score < -0.1:
        label = "negative"
    return Sentiment(score=score, label=label)


def detect_intents(text: str) -> tuple[str, ...]:
    lowered = text.lower()
    return tuple(
        intent
        for intent, phrases in INTENT_PATTERNS
        if any(_contains_phrase(lowered, phrase) for phrase in phrases)
    )


def assess_completeness(
    text: str,
    entities: Entities,
    criteria: SearchCriteria,
    prior_context: "SearchContext | None" = None,
) -> Completeness:
    """Decide which of location, dates, group size and budget are known.

    Each dimension is satisfied by an extracted entity, by the prior search
    context, or by a light keyword fallback.
    """
    has_location = bool(entities.places) or bool(LOCATION_FALLBACK.search(text))
    has_dates = bool(entities.dates) or criteria.checkin is not None or bool(DATES_FALLBACK.search(text))
    has_group_size = (
        bool(entities.people) or criteria.guests.is_specified or bool(GROUP_FALLBACK.search(text))
    )
    has_budget = (
        bool(entities.money) or criteria.price is not None or bool(BUDGET_FALLBACK.search(text))
    )

    if prior_context is not None:
        has_location = has_location or bool(
            prior_context.location and prior_context.location != "Unknown"
        )
        has_dates = has_dates or bool(prior_context.checkin or prior_context.checkout)
        has_group_size = has_group_size or prior_context.guests_specified
        has_budget = has_budget or (
            prior_context.min_price is not None or prior_context.max_price is not None
        )

    return Completeness.from_flags(has_location, has_dates, has_group_size, has_budget)


def build_suggestions(
    completeness: Completeness,
    intents: tuple[str, ...],
    max_clarifying: int = 3,
) -> tuple[str, ...]:
    """Clarifying questions for missing dimensions, then intent hints."""
    missing = [
        ("location", completeness.has_location),
        ("dates", completeness.has_dates),
        ("group_size", completeness.has_group_size),
        ("budget", completeness.has_budget),
    ]
    questions = [CLARIFYING_QUESTIONS[name] for name, present in missing if not present]
    suggestions = questions[:max_clarifying]
    suggestions.extend(INTENT_HINTS[intent] for intent in intents if intent in INTENT_HINTS)
    return tuple(suggestions)


def analyze(
    utterance: str,
    prior_context: "SearchContext | None" = None,
    *,
    today: date | None = None,
    config: EngineConfig = engine_config,
) -> QueryAnalysis:
    """Analyze a single utterance.

    Args:
        utterance: The user's free-form text
        prior_context: Search context carried over from earlier turns
        today: Reference date for resolving relative dates
        config: Engine thresholds

    Returns:
        QueryAnalysis for the utterance

    Raises:
        InvalidInputError: If ``utterance`` is not a string
    """
    text = require_utterance(utterance)

    entities = extract_entities(text)
    criteria = parse_criteria(
        text,
        today=today,
        excellent_floor=config.ratings.excellent_floor,
        high_floor=config.ratings.high_rated_floor,
        well_reviewed_count=config.ratings.well_reviewed_count,
    )
    intents = detect_intents(text)
    completeness = assess_completeness(text, entities, criteria, prior_context)

    analysis = QueryAnalysis(
        utterance=text,
        entities=entities,
        sentiment=analyze_sentiment(text),
        keywords=extract_keywords(text),
        intents=intents,
        completeness=completeness,
        suggestions=build_suggestions(
            completeness, intents, config.completeness.max_clarifying
        ),
        criteria=criteria,
    )
    logger.debug(
        f"Analyzed utterance: places={entities.places} intents={intents} "
        f"completeness={completeness.score:.2f}"
    )
    return analysis
