"""Lexical entity extraction.

Pulls place names, dates, money amounts, people counts, organizations and
descriptive words out of a single utterance. Every rule is a compiled regular
expression or a word table; extraction never raises and an utterance with
nothing recognisable yields empty buckets.
"""

import re

from .models import Entities

NUMBER_WORDS = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
}

COUNT = r"(\d+|" + "|".join(NUMBER_WORDS) + r")"

MONTHS = (
    "january", "february", "march", "april", "may", "june", "july",
    "august", "september", "october", "november", "december",
)
MONTH_ABBREVIATIONS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "jun": 6, "jul": 7, "aug": 8,
    "sep": 9, "sept": 9, "oct": 10, "nov": 11, "dec": 12,
}
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

# Capitalised words that start or end a capitalised phrase but are never places
NON_PLACE_WORDS = frozenset(
    [
        "i", "i'm", "im", "me", "my", "we", "our", "us", "you", "it", "the", "a", "an",
        "hi", "hello", "hey", "please", "thanks", "thank", "ok", "okay", "yes", "no",
        "actually", "also", "only", "just", "and", "or", "but", "for", "with", "under",
        "find", "show", "need", "want", "looking", "search", "searching", "book",
        "can", "could", "would", "should", "what", "where", "when", "which", "how", "why",
        "is", "are", "any", "some", "something", "somewhere", "place", "places",
        "superhost", "superhosts", "airbnb", "vrbo", "booking",
        "entire", "private", "shared", "room", "rooms", "home", "house", "apartment",
        "condo", "villa", "cabin", "studio", "pool", "wifi",
        "cheap", "cheaper", "luxury", "budget", "family", "friends", "kids", "adults",
        "guests", "people", "next", "this", "weekend", "week", "tonight", "tomorrow",
        "today", "asap", "usd", "early", "mid", "late", "end",
        "christmas", "thanksgiving", "easter", "labor", "memorial", "independence",
        "day", "eve", "halloween",
    ]
    + list(MONTHS)
    + list(MONTH_ABBREVIATIONS)
    + list(WEEKDAYS)
)

PLACE_CONNECTORS = ("of", "de", "del", "la", "le", "upon")

# A candidate made only of these (or of adjectives) is a description, not a place
GENERIC_PLACE_WORDS = frozenset(
    [
        "beach", "beachfront", "oceanfront", "lakefront", "downtown", "lake", "lakes",
        "mountain", "mountains", "ocean", "coast", "city", "countryside", "island",
    ]
)

_CAP_WORD = r"[A-Z][a-zA-Z'\.\-]*"
_CAP_PHRASE = (
    rf"{_CAP_WORD}(?:\s+(?:(?:{'|'.join(PLACE_CONNECTORS)})\s+)?{_CAP_WORD})*"
    r"(?:,?\s+[A-Z]{2}\b)?"
)

_PREPOSITION_PLACE = re.compile(
    r"(?i:\b(?:in|near|at|around|to|visiting|outside(?:\s+of)?|by)\s+"
    r"(?:the\s+|downtown\s+|central\s+|beautiful\s+|sunny\s+)?)"
    rf"({_CAP_PHRASE})"
)
_LEADING_PLACE = re.compile(
    rf"^\s*({_CAP_PHRASE})"
    r"(?=\s+(?i:for|with|under|over|below|from|in|near|during|this|next|on|at|"
    r"beach|downtown|area|properties|rentals?|cabins?|houses?|homes?|villas?|"
    r"condos?|apartments?|getaway|trip|vacation|weekend|stay)\b)"
)
_SEGMENT_PLACE = re.compile(rf"^(?:the\s+)?({_CAP_PHRASE})$")
_CITY_STATE = re.compile(rf"\b({_CAP_WORD}(?:\s+{_CAP_WORD})*,\s*[A-Z]{{2}})\b")
_SEGMENT_SPLIT = re.compile(r"[,;!?\n]|\.(?!\d)")

# Any-case preposition phrase; lowercase chat ("in austin") falls back to it
LOCATION_FALLBACK = re.compile(
    r"\b(?:in|at|near|around)\s+"
    r"(?!(?:least|most|total|all|mind|advance|a|an|my|our|the\s+moment)\b)"
    r"(?:(?:downtown|central|beautiful|sunny)\s+)?"
    r"([A-Za-z]\w+(?:\s+[A-Za-z][\w'\-]*){0,2})",
    re.IGNORECASE,
)
# Words that follow a preposition in chat but never start a place
_LOWERCASE_NON_PLACES = frozenset(
    ["morning", "evening", "area", "town", "time", "walking", "person", "bed", "front", "back"]
)

_MONTH_NAMES = "|".join(m for m in MONTHS if m != "may") + "|" + "|".join(MONTH_ABBREVIATIONS)
_DAY = r"\d{1,2}(?:st|nd|rd|th)?"
DATE_PATTERNS = (
    re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),
    re.compile(r"(?<![\d.])\d{1,2}/\d{1,2}(?:/\d{2,4})?(?![\d.]|\s*stars)"),
    re.compile(
        rf"\b(?:(?:early|mid|late|end of)[\s-]+)?(?:{_MONTH_NAMES})\.?"
        rf"(?:\s+{_DAY}(?:\s*(?:-|–|to|through)\s*{_DAY})?)?(?:,?\s+\d{{4}})?\b",
        re.IGNORECASE,
    ),
    re.compile(
        rf"\b(?:(?:early|mid|late|end of|in)[\s-]+may|may\s+{_DAY})"
        rf"(?:\s*(?:-|–|to|through)\s*{_DAY})?(?:,?\s+\d{{4}})?\b",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(?:(?:this|next|coming)\s+)?(?:" + "|".join(WEEKDAYS) + r")\b",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(?:today|tonight|tomorrow|this weekend|next weekend|this week|next week|"
        r"next month|this month|long weekend)\b",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(?:(?:week\s+)?(?:after|before|post)\s+)?(?:labor day|memorial day|"
        r"christmas|thanksgiving|new year'?s(?: eve)?|easter|spring break|"
        r"fourth of july|july 4th|independence day)(?:\s+(?:week|weekend))?\b",
        re.IGNORECASE,
    ),
)

_MONEY_AMOUNT = r"\d[\d,]*(?:\.\d+)?\s?k?"
MONEY_PATTERNS = (
    re.compile(
        rf"\$\s?{_MONEY_AMOUNT}(?:\s*(?:-|–|to)\s*\$?\s?{_MONEY_AMOUNT})?\+?",
        re.IGNORECASE,
    ),
    re.compile(rf"\b{_MONEY_AMOUNT}\s?(?:dollars|bucks|usd|eur|euros|gbp)\b", re.IGNORECASE),
    re.compile(r"\b(?:usd|eur|gbp)\s?\d[\d,]*\b", re.IGNORECASE),
)

PEOPLE_PATTERNS = (
    re.compile(
        rf"\b{COUNT}\s+(?:adults?|people|persons?|guests?|kids?|children|child|"
        r"toddlers?|infants?|babies|teens?|teenagers?|travell?ers|friends|couples|"
        r"of us|grown-?ups)\b",
        re.IGNORECASE,
    ),
    re.compile(rf"\b(?:family|party|group)\s+of\s+{COUNT}\b", re.IGNORECASE),
    re.compile(rf"\bsleeps\s+{COUNT}\b", re.IGNORECASE),
)

KNOWN_ORGANIZATIONS = (
    "airbnb", "vrbo", "booking.com", "expedia", "marriott", "hilton", "hyatt",
    "sonder", "homeaway", "tripadvisor",
)
_ORGANIZATION_SUFFIX = re.compile(
    rf"\b({_CAP_WORD}(?:\s+{_CAP_WORD})*\s+(?:Inc|LLC|Corp|Corporation|Company|Co|Ltd|Group)\b\.?)"
)

STOPWORDS = frozenset(
    """
    a about above after again all also am an and any are as at be because been before
    being below between both but by can could did do does doing down during each few
    for from further had has have having he her here hers him his how i if in into is
    it its itself just me more most my myself no nor not now of off on once only or
    other our ours out over own same she should so some such than that the their them
    then there these they this those through to too under until up very was we were
    what when where which while who whom why will with would you your yours please
    find show look looking need want get give let make like something somewhere
    place places stay staying would love okay ok hi hello hey thanks thank actually
    really maybe much many per night nights week weeks day days us lets let's i'm
    """.split()
)

ADJECTIVES = frozenset(
    """
    cozy cosy quiet modern spacious luxurious luxury cheap affordable romantic
    peaceful clean safe walkable central private secluded rustic charming stylish
    scenic large big small tiny comfortable quaint historic trendy lively remote
    bright sunny warm cool relaxing beautiful gorgeous stunning nice lovely cute
    upscale elegant budget inexpensive pricey expensive premium unique authentic
    family-friendly pet-friendly kid-friendly dog-friendly beachfront oceanfront
    lakefront waterfront riverfront oceanview accessible wheelchair-accessible
    close near convenient new renovated spotless fast reliable excellent great
    amazing perfect wonderful fantastic
    """.split()
)
_ADJECTIVE_SUFFIXES = ("ful", "ous", "ive", "able", "ible", "-friendly")
_WORD = re.compile(r"[a-z][a-z'\-]+")


def parse_count(token: str) -> int | None:
    """Parse a digit string or an English number word."""
    token = token.strip().lower()
    if token.isdigit():
        return int(token)
    return NUMBER_WORDS.get(token)


def _collect_spans(text: str, patterns: tuple[re.Pattern, ...], group: int = 0) -> list[str]:
    """Run every pattern, keep non-overlapping matches in text order."""
    matches = []
    for pattern in patterns:
        for match in pattern.finditer(text):
            value = match.group(group)
            if value and value.strip():
                matches.append((match.start(group), match.end(group), value.strip()))

    matches.sort(key=lambda m: (m[0], -(m[1] - m[0])))
    kept = []
    last_end = -1
    for start, end, value in matches:
        if start >= last_end:
            kept.append(value)
            last_end = end
    return kept


def _dedupe(values: list[str]) -> tuple[str, ...]:
    seen = set()
    unique = []
    for value in values:
        key = value.lower()
        if key not in seen:
            seen.add(key)
            unique.append(value)
    return tuple(unique)


def _clean_place(candidate: str) -> str | None:
    """Trim non-place words from both ends of a capitalised phrase."""
    tokens = candidate.replace(",", " , ").split()

    def is_noise(token: str) -> bool:
        bare = token.strip(".,'").lower()
        return bare in NON_PLACE_WORDS or bare in PLACE_CONNECTORS or bare == ","

    while tokens and is_noise(tokens[0]):
        tokens.pop(0)
    while tokens and is_noise(tokens[-1]):
        tokens.pop()
    if not tokens:
        return None

    place = " ".join(tokens).replace(" , ", ", ").strip(" .")
    # Bare state codes ("SC") only count when attached to a city
    if len(place) < 2 or place.isdigit() or re.fullmatch(r"[A-Z]{2}", place):
        return None
    words = [token.strip(".,'").lower() for token in tokens if token != ","]
    if all(word in GENERIC_PLACE_WORDS or word in ADJECTIVES for word in words):
        return None
    return place


def _lowercase_place(text: str) -> str | None:
    """Title-case the first plausible place after a preposition ("in austin")."""
    for match in LOCATION_FALLBACK.finditer(text):
        words = []
        for token in match.group(1).split():
            bare = token.strip(".,'").lower()
            if bare in NON_PLACE_WORDS or bare in STOPWORDS or any(c.isdigit() for c in bare):
                break
            words.append(token)
        if not words or words[0].lower() in _LOWERCASE_NON_PLACES:
            continue
        place = _clean_place(" ".join(words))
        if place:
            return place.title()
    return None


def extract_places(text: str) -> tuple[str, ...]:
    """Extract candidate place names.

    Rules are accumulated in order: prepositional phrases ("in Austin"),
    "City, ST" pairs, a leading capitalised phrase ("Austin for 2 adults") and
    stand-alone capitalised segments ("..., under $200, Austin"). When none of
    those finds a place, a lowercase place after a preposition is title-cased.
    """
    candidates = []
    candidates.extend(m.group(1) for m in _PREPOSITION_PLACE.finditer(text))
    candidates.extend(m.group(1) for m in _CITY_STATE.finditer(text))

    leading = _LEADING_PLACE.match(text)
    if leading:
        candidates.append(leading.group(1))

    for segment in _SEGMENT_SPLIT.split(text):
        match = _SEGMENT_PLACE.match(segment.strip())
        if match:
            candidates.append(match.group(1))

    places = []
    for candidate in candidates:
        place = _clean_place(candidate)
        if place:
            places.append(place)

    if not places:
        fallback = _lowercase_place(text)
        return (fallback,) if fallback else ()

    # Prefer "Charleston, SC" over a bare "Charleston" found by another rule
    unique = _dedupe(places)
    return tuple(
        p for p in unique
        if not any(other != p and other.lower().startswith(p.lower() + ",") for other in unique)
    )


def extract_dates(text: str) -> tuple[str, ...]:
    return _dedupe(_collect_spans(text, DATE_PATTERNS))


def extract_money(text: str) -> tuple[str, ...]:
    return _dedupe(_collect_spans(text, MONEY_PATTERNS))


def extract_people(text: str) -> tuple[str, ...]:
    return _dedupe(_collect_spans(text, PEOPLE_PATTERNS))


def extract_organizations(text: str) -> tuple[str, ...]:
    lowered = text.lower()
    found = [name for name in KNOWN_ORGANIZATIONS if re.search(rf"\b{re.escape(name)}\b", lowered)]
    found.extend(m.group(1) for m in _ORGANIZATION_SUFFIX.finditer(text))
    return _dedupe(found)


def tokenize(text: str) -> list[str]:
    """Lowercase word tokens (letters, apostrophes, hyphens)."""
    return _WORD.findall(text.lower())


def extract_keywords(text: str, limit: int = 10) -> tuple[str, ...]:
    """Content words in order of appearance, without stopwords."""
    words = [w for w in tokenize(text) if len(w) > 2 and w not in STOPWORDS]
    return _dedupe(words)[:limit]


def is_adjective(word: str) -> bool:
    return word in ADJECTIVES or (len(word) > 5 and word.endswith(_ADJECTIVE_SUFFIXES))


def extract_adjectives(text: str) -> tuple[str, ...]:
    return _dedupe([w for w in tokenize(text) if is_adjective(w)])


def extract_entities(text: str) -> Entities:
    """Extract every entity bucket from ``text``."""
    return Entities(
        places=extract_places(text),
        dates=extract_dates(text),
        people=extract_people(text),
        money=extract_money(text),
        organizations=extract_organizations(text),
    )
