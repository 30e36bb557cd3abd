"""Trip context classification: purpose, urgency, group type and priorities."""

import re

from stayscout.errors import require_utterance

from .extraction import extract_adjectives, extract_dates
from .models import TripContext

# Purpose with the most matching words wins; ties go to the earlier entry
TRIP_PURPOSE_PATTERNS = (
    ("business", ("work", "business", "conference", "meeting", "corporate", "client")),
    ("romantic", ("romantic", "honeymoon", "anniversary", "couples", "date night")),
    ("family", ("family", "kids", "children", "reunion")),
    ("adventure", ("adventure", "hiking", "outdoor", "active", "sports", "skiing", "surfing")),
    ("relaxation", ("relax", "relaxing", "spa", "peaceful", "quiet", "wellness")),
    ("social", ("friends", "group", "party", "celebration", "bachelor", "bachelorette")),
    ("cultural", ("culture", "museum", "museums", "art", "history", "local")),
)

URGENT_WORDS = re.compile(r"\b(?:asap|urgent|urgently|immediately|tonight|last[\s-]minute)\b", re.IGNORECASE)
SPECIFIC_WORDS = re.compile(r"\b(?:specific|exact|exactly)\b", re.IGNORECASE)

# First match wins
GROUP_TYPE_PATTERNS = (
    ("solo", re.compile(r"\b(?:alone|solo|myself|just me)\b", re.IGNORECASE)),
    ("couple", re.compile(r"\b(?:couple|partner|spouse|wife|husband|girlfriend|boyfriend)\b", re.IGNORECASE)),
    ("family", re.compile(r"\b(?:family|kids|children|toddlers?)\b", re.IGNORECASE)),
    ("friends", re.compile(r"\b(?:friends|group|buddies)\b", re.IGNORECASE)),
    ("business", re.compile(r"\b(?:business|work|corporate|colleagues|coworkers)\b", re.IGNORECASE)),
)

MAX_PRIORITIES = 5


def detect_purpose(text: str) -> str | None:
    lowered = text.lower()
    purpose = None
    best = 0
    for name, words in TRIP_PURPOSE_PATTERNS:
        matches = sum(1 for word in words if re.search(rf"\b{re.escape(word)}\b", lowered))
        if matches > best:
            best = matches
            purpose = name
    return purpose


def detect_urgency(text: str) -> str:
    if URGENT_WORDS.search(text):
        return "urgent"
    if extract_dates(text) or SPECIFIC_WORDS.search(text):
        return "specific"
    return "flexible"


def detect_group_type(text: str) -> str:
    for group_type, pattern in GROUP_TYPE_PATTERNS:
        if pattern.search(text):
            return group_type
    return "unknown"


def classify_trip(utterance: str) -> TripContext:
    """Classify the trip described by ``utterance``.

    Raises:
        InvalidInputError: If ``utterance`` is not a string
    """
    text = require_utterance(utterance)
    priorities = tuple(word for word in extract_adjectives(text) if len(word) > 3)
    return TripContext(
        purpose=detect_purpose(text),
        urgency=detect_urgency(text),
        group_type=detect_group_type(text),
        priorities=priorities[:MAX_PRIORITIES],
    )
