"""Parse search criteria out of an utterance.

Each concern is an ordered rule table. Unless noted otherwise the first
matching rule wins; amenities accumulate every match. A rule that does not
match leaves its field at the default, so a parse miss is never an error.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date

from .dates import resolve_stay_dates
from .extraction import COUNT, parse_count
from .models import GuestCount, PriceConstraint, RatingRequest, SearchCriteria

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AmenityRule:
    """Canonical amenity with the phrases users say and the terms listings use."""

    name: str
    phrases: tuple[str, ...]
    listing_terms: tuple[str, ...]

    def pattern(self) -> re.Pattern:
        alternation = "|".join(re.escape(p) for p in self.phrases)
        return re.compile(rf"(?<![\w-])(?:{alternation})(?![\w-])", re.IGNORECASE)


AMENITY_RULES = (
    AmenityRule("pool", ("pool", "pools", "swimming pool"), ("pool",)),
    AmenityRule("hot tub", ("hot tub", "hottub", "jacuzzi", "spa bath"), ("hot tub", "jacuzzi")),
    AmenityRule("wifi", ("wifi", "wi-fi", "internet", "wireless"), ("wifi", "wi-fi", "internet")),
    AmenityRule("kitchen", ("kitchen", "kitchenette", "cook"), ("kitchen",)),
    AmenityRule("parking", ("parking", "garage", "park my car"), ("parking", "garage")),
    AmenityRule(
        "air conditioning",
        ("air conditioning", "air-conditioning", "a/c", "ac", "aircon"),
        ("air conditioning", "central air", "ac unit"),
    ),
    AmenityRule("washer", ("washer", "laundry", "washing machine"), ("washer", "laundry")),
    AmenityRule("dryer", ("dryer",), ("dryer",)),
    AmenityRule(
        "pets allowed",
        ("pet friendly", "pet-friendly", "pets allowed", "dog friendly", "dog-friendly",
         "my dog", "our dog", "my cat", "pets"),
        ("pets allowed", "pet friendly", "pet-friendly"),
    ),
    AmenityRule("fireplace", ("fireplace",), ("fireplace",)),
    AmenityRule("gym", ("gym", "fitness center", "fitness"), ("gym", "fitness")),
    AmenityRule(
        "workspace",
        ("workspace", "desk", "work remotely", "remote work", "dedicated workspace"),
        ("workspace", "desk"),
    ),
    AmenityRule("balcony", ("balcony",), ("balcony",)),
    AmenityRule("patio", ("patio", "deck", "backyard", "garden"), ("patio", "deck", "backyard", "garden")),
    AmenityRule("bbq grill", ("bbq", "grill", "barbecue"), ("bbq", "grill", "barbecue")),
    AmenityRule("ev charger", ("ev charger", "ev charging"), ("ev charger",)),
    AmenityRule("crib", ("crib", "cot", "pack n play"), ("crib", "pack ’n play", "pack n play")),
    AmenityRule("elevator", ("elevator",), ("elevator",)),
    AmenityRule("tv", ("tv", "television", "netflix"), ("tv", "television")),
)

# Property types are matched against listing names and room types, first match wins
PROPERTY_TYPES = (
    ("studio", ("studio",)),
    ("treehouse", ("treehouse", "tree house")),
    ("tiny house", ("tiny house", "tiny home")),
    ("houseboat", ("houseboat",)),
    ("villa", ("villa",)),
    ("cabin", ("cabin", "chalet", "lodge")),
    ("cottage", ("cottage",)),
    ("bungalow", ("bungalow",)),
    ("farmhouse", ("farmhouse", "farm stay", "ranch")),
    ("townhouse", ("townhouse", "townhome")),
    ("loft", ("loft",)),
    ("condo", ("condo", "condominium")),
    ("apartment", ("apartment", "apt", "flat")),
    ("guesthouse", ("guesthouse", "guest house", "guest suite")),
)

ROOM_TYPES = (
    (
        "entire",
        re.compile(
            r"\b(?:entire|whole)\s+(?:home|house|place|apartment|condo|unit|property|flat)\b"
            r"|\bto\s+(?:myself|ourselves)\b",
            re.IGNORECASE,
        ),
    ),
    ("private", re.compile(r"\bprivate\s+(?:room|bedroom)\b", re.IGNORECASE)),
    ("shared", re.compile(r"\bshared\s+(?:room|space)\b|\bhostel\b|\bdorm\b", re.IGNORECASE)),
)

_AMOUNT = r"\$?\s?(\d[\d,]*(?:\.\d+)?)\s?(k\b)?"
_NOT_MONEY = (
    r"(?![\d,]\d|\.\d|\d|\s*(?:\+\s*)?(?:reviews?|nights?|guests?|people|persons|adults?|kids?|children|"
    r"stars?|bed(?:room)?s?|bath(?:room)?s?|br\b|ba\b|miles?|mi\b|minutes?|mins?|km|"
    r"rating|rated|days?|weeks?|%))"
)

# (pattern, basis): basis "total" forces a trip budget, None infers from the text
MAX_PRICE_PATTERNS = (
    (
        re.compile(
            rf"(?:no\s+more\s+than|under|less\s+than|max(?:imum)?|limit(?:\s+of)?|up\s+to|budget\s+of)"
            rf"\s*{_AMOUNT}\s+(?:in\s+)?total",
            re.IGNORECASE,
        ),
        "total",
    ),
    (
        re.compile(
            rf"(?:don'?t|don’t|do\s+not)\s+(?:want\s+to\s+)?spend\s+(?:more\s+than\s+)?{_AMOUNT}",
            re.IGNORECASE,
        ),
        "total",
    ),
    (
        re.compile(
            rf"{_AMOUNT}\s+(?:total|for\s+the\s+(?:whole|entire)\s+(?:trip|stay)|all\s+in)",
            re.IGNORECASE,
        ),
        "total",
    ),
    (
        re.compile(
            rf"(?:under|below|less\s+than|no\s+more\s+than|max(?:imum)?|up\s+to|at\s+most|"
            rf"cheaper\s+than|budget(?:\s+of|\s+is)?|within)\s*{_AMOUNT}{_NOT_MONEY}",
            re.IGNORECASE,
        ),
        None,
    ),
    (
        re.compile(
            rf"{_AMOUNT}\s*(?:per\s+night|/\s?night|a\s+night|nightly|/\s?nt)",
            re.IGNORECASE,
        ),
        "nightly",
    ),
    (re.compile(rf"\$\s?(\d[\d,]*(?:\.\d+)?)\s?(k\b)?\s+budget", re.IGNORECASE), None),
)
_PRICE_RANGE = re.compile(
    rf"(?:between\s+)?\$\s?(\d[\d,]*(?:\.\d+)?)\s?(k\b)?\s*(?:-|–|to|and)\s*{_AMOUNT}",
    re.IGNORECASE,
)
_MIN_PRICE = re.compile(
    r"(?:over|above|more\s+than|at\s+least|minimum(?:\s+of)?|starting\s+at|from)"
    r"\s*\$\s?(\d[\d,]*(?:\.\d+)?)\s?(k\b)?",
    re.IGNORECASE,
)

_NUMERIC_RATING = (
    re.compile(r"(\d(?:\.\d+)?)\s*\+?\s*(?:stars?|star\s+rating|rating|rated)", re.IGNORECASE),
    re.compile(
        r"rat(?:ing|ed)\s*(?:of\s+|above\s+|over\s+|at\s+least\s+)?(\d(?:\.\d+)?)\s*\+?",
        re.IGNORECASE,
    ),
    re.compile(r"(\d(?:\.\d+)?)\s*\+?\s*/\s*5\b", re.IGNORECASE),
)
_EXCELLENT_RATING = re.compile(
    r"\bexcellent\s+(?:reviews?|ratings?)\b|\b(?:rated|rating)\s+excellent\b|\bexceptional(?:ly)?\s+rated\b",
    re.IGNORECASE,
)
_HIGH_RATING = re.compile(
    r"\b(?:highly|high|well)[\s-]+rated\b|\bhigh\s+ratings?\b|\bgreat\s+(?:reviews|ratings)\b",
    re.IGNORECASE,
)

_REVIEW_COUNTS = (
    re.compile(r"(?:at\s+least|minimum|min)\s+(\d+)\s+reviews?", re.IGNORECASE),
    re.compile(r"(?:over|more\s+than)\s+(\d+)\s+reviews?", re.IGNORECASE),
    re.compile(r"(?<!under )(?<!than )\b(\d+)\s*\+?\s+reviews?", re.IGNORECASE),
)
_WELL_REVIEWED = re.compile(
    r"\bwell[\s-]reviewed\b|\blots\s+of\s+reviews\b|\bmany\s+reviews\b|\bplenty\s+of\s+reviews\b",
    re.IGNORECASE,
)
_NEW_LISTING = re.compile(r"\bnew\s+listings?\b|\brecently\s+added\b|\bnewest\b", re.IGNORECASE)

_SUPERHOST = re.compile(r"\bsuper\s?hosts?\b", re.IGNORECASE)
_ONLY = re.compile(r"\bonly\b|\bexclusively\b|\bjust\s+super\s?hosts?\b", re.IGNORECASE)

_PREMIUM_ONLY = re.compile(
    r"\b(?:premium|high[\s-]end|luxury)\s+only\b|\bshow\s+premium\b|\bonly\s+(?:premium|high[\s-]end|luxury)\b",
    re.IGNORECASE,
)
BUDGET_TIERS = (
    ("luxury", re.compile(r"\b(?:luxury|luxurious|upscale|high[\s-]end|premium|5[\s-]star|five[\s-]star)\b", re.IGNORECASE)),
    (
        "budget",
        re.compile(
            r"(?<!my )(?<!our )(?<!total )(?<!the )"
            r"\bbudget\b(?!\s*(?:of|is|:|\$|around|under|up\s+to|\d))"
            r"|\b(?:cheap|affordable|inexpensive|low[\s-]cost|economical|bargain)\b",
            re.IGNORECASE,
        ),
    ),
    ("mid-range", re.compile(r"\bmid[\s-]?range\b|\bmoderately\s+priced\b|\breasonably\s+priced\b", re.IGNORECASE)),
)
RELATIVE_PRICE = (
    (
        "cheaper",
        re.compile(
            r"\bcheaper\b|\bless\s+expensive\b|\blower\s+(?:price|budget|cost)\b|\bmore\s+affordable\b"
            r"|\bbudget\s+options\b|\btoo\s+(?:expensive|pricey)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "pricier",
        re.compile(
            r"\bmore\s+expensive\b(?!\s+first)|\bpricier\b|\bfancier\b|\bnicer\b|\bupgrade\b|\bmore\s+luxurious\b",
            re.IGNORECASE,
        ),
    ),
)

SORT_ORDERS = (
    ("price_asc", ("cheapest first", "lowest price first", "sort by price", "price low to high", "cheapest")),
    ("price_desc", ("most expensive first", "highest price first", "price high to low")),
    ("rating_desc", ("highest rated", "best rated", "top rated", "sort by rating")),
    ("reviews_desc", ("most reviews", "most reviewed", "sort by reviews")),
    ("newest", ("newest first", "recently added")),
    ("luxury", ("most luxurious",)),
)

SIZE_PREFERENCES = (
    (
        "larger",
        re.compile(r"\b(?:larger|bigger)\b|\bmore\s+(?:space|room)\b|\bspacious\b", re.IGNORECASE),
    ),
    ("smaller", re.compile(r"\bsmaller\b|\bcompact\b|\bcozy\s+size\b|\btiny\b(?!\s+(?:house|home))", re.IGNORECASE)),
)
LOCATION_FEATURES = (
    ("beach", re.compile(r"\bbeach(?:front|side)?\b|\bocean(?:front|side)?\b|\bseaside\b|\bwaterfront\b", re.IGNORECASE)),
    ("downtown", re.compile(r"\bdowntown\b|\bcity\s+cent(?:er|re)\b|\bcentral\s+location\b", re.IGNORECASE)),
)

_BEDROOMS = re.compile(rf"\b{COUNT}[\s-]*(?:bed(?:room)?s?|br|bd)\b", re.IGNORECASE)
_BATHROOMS = re.compile(
    r"\b(\d+(?:\.5)?|" + "|".join(("one", "two", "three", "four", "five")) + r")[\s-]*(?:bath(?:room)?s?|ba)\b",
    re.IGNORECASE,
)
_ADULTS = re.compile(rf"\b{COUNT}\s+(?:adults?|grown-?ups)\b", re.IGNORECASE)
_CHILDREN = re.compile(
    rf"\b{COUNT}\s+(?:kids?|children|child|toddlers?|infants?|babies|teens?|teenagers?)\b",
    re.IGNORECASE,
)
_TOTAL_GUESTS = (
    re.compile(rf"\b{COUNT}\s+(?:people|persons|guests?|travell?ers|of\s+us|friends)\b", re.IGNORECASE),
    re.compile(rf"\b(?:family|party|group)\s+of\s+{COUNT}\b", re.IGNORECASE),
    re.compile(rf"\bsleeps\s+{COUNT}\b", re.IGNORECASE),
)
_NIGHTS = re.compile(rf"\b{COUNT}\s+nights?\b", re.IGNORECASE)
_WEEKS = re.compile(r"\b(a|one|1|two|2|three|3)\s+weeks?\b", re.IGNORECASE)


def _amount(digits: str, k_suffix: str | None) -> float | None:
    try:
        value = float(digits.replace(",", ""))
    except ValueError:
        return None
    if k_suffix:
        value *= 1000
    return value if value > 0 else None


def parse_price(text: str) -> PriceConstraint | None:
    """Parse an explicit price bound.

    "k" multiplies by 1000. A bound is a trip total when its phrasing says so
    ("$1500 total", "don't want to spend more than $2k") or the utterance
    mentions "total"; otherwise it is a nightly rate.
    """
    mentions_total = re.search(r"\btotal\b", text, re.IGNORECASE) is not None

    match = _PRICE_RANGE.search(text)
    if match:
        low = _amount(match.group(1), match.group(2))
        high = _amount(match.group(3), match.group(4))
        if low is not None and high is not None and low < high:
            return PriceConstraint(
                minimum=low,
                maximum=high,
                basis="total" if mentions_total else "nightly",
            )

    for pattern, basis in MAX_PRICE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        maximum = _amount(match.group(1), match.group(2))
        if maximum is None:
            continue
        if basis is None:
            basis = "total" if mentions_total else "nightly"
        return PriceConstraint(maximum=maximum, basis=basis)

    match = _MIN_PRICE.search(text)
    if match:
        minimum = _amount(match.group(1), match.group(2))
        if minimum is not None:
            return PriceConstraint(minimum=minimum, basis="total" if mentions_total else "nightly")
    return None


def parse_rating(text: str, excellent_floor: float = 4.8, high_floor: float = 4.5) -> RatingRequest | None:
    for pattern in _NUMERIC_RATING:
        for match in pattern.finditer(text):
            try:
                value = float(match.group(1))
            except ValueError:
                continue
            if 3.0 <= value <= 5.0:
                return RatingRequest(minimum=value, numeric=True)
    if _EXCELLENT_RATING.search(text):
        return RatingRequest(minimum=excellent_floor)
    if _HIGH_RATING.search(text):
        return RatingRequest(minimum=high_floor)
    return None


def parse_min_reviews(text: str, well_reviewed_count: int = 20) -> int | None:
    for pattern in _REVIEW_COUNTS:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    if _WELL_REVIEWED.search(text):
        return well_reviewed_count
    return None


def parse_amenities(text: str) -> tuple[str, ...]:
    """Canonical amenity names mentioned in ``text``, in table order."""
    return tuple(rule.name for rule in AMENITY_RULES if rule.pattern().search(text))


def parse_property_type(text: str) -> str | None:
    lowered = text.lower()
    for name, synonyms in PROPERTY_TYPES:
        if any(re.search(rf"\b{re.escape(s)}s?\b", lowered) for s in synonyms):
            return name
    return None


def parse_guests(text: str) -> GuestCount:
    adults = children = total = None

    match = _ADULTS.search(text)
    if match:
        adults = parse_count(match.group(1))
    match = _CHILDREN.search(text)
    if match:
        children = parse_count(match.group(1))
    for pattern in _TOTAL_GUESTS:
        match = pattern.search(text)
        if match:
            total = parse_count(match.group(1))
            break

    return GuestCount(adults=adults, children=children, total=total)


def parse_nights(text: str) -> int | None:
    match = _NIGHTS.search(text)
    if match:
        nights = parse_count(match.group(1))
        if nights:
            return nights
    match = _WEEKS.search(text)
    if match:
        weeks = parse_count(match.group(1)) or 1
        return 7 * weeks
    return None


def _first_label(text: str, table) -> str | None:
    for label, pattern in table:
        if pattern.search(text):
            return label
    return None


def parse_sort_order(text: str) -> str | None:
    lowered = text.lower()
    for name, phrases in SORT_ORDERS:
        if any(re.search(rf"\b{re.escape(p)}\b", lowered) for p in phrases):
            return name
    return None


def parse_criteria(
    text: str,
    today: date | None = None,
    excellent_floor: float = 4.8,
    high_floor: float = 4.5,
    well_reviewed_count: int = 20,
) -> SearchCriteria:
    """Parse every search criterion from one utterance.

    Args:
        text: The user's utterance
        today: Reference date for resolving relative dates
        excellent_floor: Rating floor for "excellent reviews"
        high_floor: Rating floor for "highly rated"
        well_reviewed_count: Minimum review count for "well reviewed"

    Returns:
        SearchCriteria with unmatched fields left at their defaults
    """
    superhost = None
    if _SUPERHOST.search(text):
        superhost = "only" if _ONLY.search(text) else "preferred"

    min_reviews = parse_min_reviews(text, well_reviewed_count)
    nights = parse_nights(text)
    bedrooms_match = _BEDROOMS.search(text)
    bathrooms_match = _BATHROOMS.search(text)
    bathrooms = None
    if bathrooms_match:
        token = bathrooms_match.group(1)
        count = parse_count(token)
        bathrooms = float(count) if count is not None else float(token)

    checkin, checkout = resolve_stay_dates(text, today=today, nights=nights)

    criteria = SearchCriteria(
        superhost=superhost,
        rating=parse_rating(text, excellent_floor, high_floor),
        min_reviews=min_reviews,
        new_listing=min_reviews is None and _NEW_LISTING.search(text) is not None,
        price=parse_price(text),
        relative_price=_first_label(text, RELATIVE_PRICE),
        budget_tier=_first_label(text, BUDGET_TIERS),
        premium_only=_PREMIUM_ONLY.search(text) is not None,
        room_type=_first_label(text, ROOM_TYPES),
        property_type=parse_property_type(text),
        amenities=parse_amenities(text),
        bedrooms=parse_count(bedrooms_match.group(1)) if bedrooms_match else None,
        bathrooms=bathrooms,
        guests=parse_guests(text),
        nights=nights,
        checkin=checkin,
        checkout=checkout,
        size_preference=_first_label(text, SIZE_PREFERENCES),
        location_feature=_first_label(text, LOCATION_FEATURES),
        sort_order=parse_sort_order(text),
    )
    logger.debug(f"Parsed criteria {criteria.mentioned()} from {text!r}")
    return criteria
