"""Filter criteria under the filter-or-sort discipline.

A criterion with a retention threshold is a hard filter that only applies
when the kept subset is non-empty and holds at least ``threshold`` of the
current set. Otherwise the set is stably reordered by the criterion's
fallback key and the criterion is reported relaxed. Criteria without a
threshold only ever reorder.
"""

import math
import re
import statistics
from abc import ABC, abstractmethod
from enum import Enum

from stayscout.listings import Listing
from stayscout.query.criteria import AMENITY_RULES, PROPERTY_TYPES, AmenityRule

_BEDROOM_TOKEN = re.compile(r"\b(\d+)\s*(?:br|bd|bed(?:room)?s?)\b", re.IGNORECASE)
_BATHROOM_TOKEN = re.compile(r"\b(\d+(?:\.5)?)\s*(?:ba|bath(?:room)?s?)\b", re.IGNORECASE)
_STUDIO = re.compile(r"\bstudio\b", re.IGNORECASE)
_SMALL_WORDS = re.compile(r"\bstudio\b|\b1\s*(?:br|bd|bed(?:room)?)\b|\bsmall\b|\bcompact\b|\bcozy\b", re.IGNORECASE)

LOCATION_FEATURE_TERMS = {
    "beach": re.compile(r"beach|ocean|sea\b|seaside|coast|waterfront", re.IGNORECASE),
    "downtown": re.compile(r"downtown|cent(?:er|re)|central", re.IGNORECASE),
}


class Outcome(str, Enum):
    """What a criterion did to the current set."""

    APPLIED = "applied"
    RELAXED = "relaxed"
    ORDERED = "ordered"


def bedrooms_from_name(listing: Listing) -> int | None:
    """Bedroom count stated in the listing title ("3BR", "2 bedroom", "studio")."""
    match = _BEDROOM_TOKEN.search(listing.name)
    if match:
        return int(match.group(1))
    if _STUDIO.search(listing.searchable_text()):
        return 0
    return None


def known_bedrooms(listing: Listing) -> int | None:
    if listing.bedrooms is not None:
        return listing.bedrooms
    return bedrooms_from_name(listing)


def estimate_capacity(listing: Listing) -> int:
    """Rough number of guests a listing sleeps."""
    bedrooms = known_bedrooms(listing)
    if bedrooms is not None:
        return max(bedrooms, 1) * 2
    text = listing.searchable_text()
    if "entire" in text:
        return 4
    if "private room" in text or "shared" in text:
        return 2
    return 3


class Criterion(ABC):
    """One step of the filtering fold."""

    name: str = "criterion"

    def __init__(self, threshold: float | None = None) -> None:
        self.threshold = threshold

    @abstractmethod
    def matches(self, listing: Listing) -> bool:
        """Whether ``listing`` satisfies the criterion."""
        pass

    def fallback_key(self, listing: Listing) -> tuple:
        """Sort key used when the criterion reorders instead of filtering."""
        return (not self.matches(listing), -listing.rating)

    def apply(self, listings: list[Listing]) -> tuple[list[Listing], Outcome]:
        if self.threshold is not None:
            kept = [listing for listing in listings if self.matches(listing)]
            if kept and len(kept) >= self.threshold * len(listings):
                return kept, Outcome.APPLIED
        ordered = sorted(listings, key=self.fallback_key)
        if self.threshold is None:
            return ordered, Outcome.ORDERED
        return ordered, Outcome.RELAXED

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, threshold={self.threshold})"


class SuperhostCriterion(Criterion):
    """Superhosts only, or superhosts first when ``threshold`` is None."""

    def __init__(self, threshold: float | None = None) -> None:
        super().__init__(threshold)
        self.name = "superhost" if threshold is not None else "superhost_preference"

    def matches(self, listing: Listing) -> bool:
        return listing.is_superhost


class RatingCriterion(Criterion):
    name = "rating"

    def __init__(self, floor: float, threshold: float | None = 0.0) -> None:
        super().__init__(threshold)
        self.floor = floor

    def matches(self, listing: Listing) -> bool:
        return listing.rating >= self.floor

    def fallback_key(self, listing: Listing) -> tuple:
        return (-listing.rating,)


class ReviewCountCriterion(Criterion):
    name = "review_count"

    def __init__(self, minimum: int, threshold: float | None = 0.0) -> None:
        super().__init__(threshold)
        self.minimum = minimum

    def matches(self, listing: Listing) -> bool:
        return listing.reviews_count >= self.minimum

    def fallback_key(self, listing: Listing) -> tuple:
        return (-listing.reviews_count, -listing.rating)


class NewListingCriterion(Criterion):
    name = "new_listing"

    def __init__(self, max_reviews: int, threshold: float | None = 0.10) -> None:
        super().__init__(threshold)
        self.max_reviews = max_reviews

    def matches(self, listing: Listing) -> bool:
        return listing.reviews_count < self.max_reviews

    def fallback_key(self, listing: Listing) -> tuple:
        return (listing.reviews_count, -listing.rating)


class PriceCriterion(Criterion):
    """Nightly price window; either bound may be open."""

    name = "price"

    def __init__(
        self,
        minimum: float | None = None,
        maximum: float | None = None,
        threshold: float | None = 0.0,
    ) -> None:
        super().__init__(threshold)
        self.minimum = minimum
        self.maximum = maximum

    def matches(self, listing: Listing) -> bool:
        rate = listing.nightly_rate
        if self.minimum is not None and rate < self.minimum:
            return False
        if self.maximum is not None and rate > self.maximum:
            return False
        return True

    def fallback_key(self, listing: Listing) -> tuple:
        if self.maximum is not None:
            return (listing.nightly_rate, -listing.rating)
        return (-listing.nightly_rate, -listing.rating)


class PremiumCriterion(Criterion):
    name = "premium"

    def __init__(self, floor: float, threshold: float | None = 0.0) -> None:
        super().__init__(threshold)
        self.floor = floor

    def matches(self, listing: Listing) -> bool:
        return listing.nightly_rate > self.floor

    def fallback_key(self, listing: Listing) -> tuple:
        return (-listing.nightly_rate, -listing.rating)


class RoomTypeCriterion(Criterion):
    name = "room_type"

    def __init__(self, room_type: str, threshold: float | None = 0.0) -> None:
        super().__init__(threshold)
        self.room_type = room_type

    def matches(self, listing: Listing) -> bool:
        return self.room_type in listing.room_type.lower()


class PropertyTypeCriterion(Criterion):
    name = "property_type"

    def __init__(self, property_type: str, threshold: float | None = 0.10) -> None:
        super().__init__(threshold)
        self.property_type = property_type
        synonyms = dict(PROPERTY_TYPES).get(property_type, (property_type,))
        self._pattern = re.compile(
            r"\b(?:" + "|".join(re.escape(s) for s in synonyms) + r")s?\b",
            re.IGNORECASE,
        )

    def matches(self, listing: Listing) -> bool:
        return self._pattern.search(listing.searchable_text()) is not None


class AmenityCriterion(Criterion):
    """A single requested amenity, matched against amenities and the title."""

    def __init__(self, rule: AmenityRule, threshold: float | None = 0.40) -> None:
        super().__init__(threshold)
        self.rule = rule
        self.name = f"amenity:{rule.name}"

    def matches(self, listing: Listing) -> bool:
        name = listing.name.lower()
        for term in self.rule.listing_terms:
            if term in name or any(term in amenity.lower() for amenity in listing.amenities):
                return True
        return False

    @classmethod
    def for_name(cls, amenity: str, threshold: float | None = 0.40) -> "AmenityCriterion":
        for rule in AMENITY_RULES:
            if rule.name == amenity:
                return cls(rule, threshold)
        return cls(AmenityRule(amenity, (amenity,), (amenity,)), threshold)


class BedroomCriterion(Criterion):
    """Minimum bedrooms.

    Known bedroom counts decide first, then a bedroom token in the title;
    listings with neither only qualify when they are an entire place.
    """

    name = "bedrooms"

    def __init__(self, minimum: int, threshold: float | None = 0.20) -> None:
        super().__init__(threshold)
        self.minimum = minimum

    def matches(self, listing: Listing) -> bool:
        bedrooms = known_bedrooms(listing)
        if bedrooms is not None:
            return bedrooms >= self.minimum
        return "entire" in listing.room_type.lower()

    def fallback_key(self, listing: Listing) -> tuple:
        return (-estimate_capacity(listing), -listing.rating)


class BathroomCriterion(Criterion):
    name = "bathrooms"

    def __init__(self, minimum: float, threshold: float | None = 0.20) -> None:
        super().__init__(threshold)
        self.minimum = minimum

    def matches(self, listing: Listing) -> bool:
        if listing.bathrooms is not None:
            return listing.bathrooms >= self.minimum
        match = _BATHROOM_TOKEN.search(listing.name)
        return bool(match) and float(match.group(1)) >= self.minimum


class SizePreferenceCriterion(Criterion):
    name = "size_preference"

    def __init__(self, preference: str, threshold: float | None = 0.20) -> None:
        super().__init__(threshold)
        self.preference = preference

    def matches(self, listing: Listing) -> bool:
        bedrooms = known_bedrooms(listing)
        if self.preference == "larger":
            return bedrooms is not None and bedrooms >= 2
        if bedrooms is not None:
            return bedrooms <= 1
        return _SMALL_WORDS.search(listing.name) is not None


class LocationFeatureCriterion(Criterion):
    def __init__(self, feature: str) -> None:
        super().__init__(None)
        self.feature = feature
        self.name = f"location:{feature}"
        self._pattern = LOCATION_FEATURE_TERMS[feature]

    def matches(self, listing: Listing) -> bool:
        return self._pattern.search(listing.name) is not None


class PriceOrderCriterion(Criterion):
    """Sort-only price ordering for budget tiers and "cheaper"/"pricier"."""

    def __init__(self, direction: str, name: str) -> None:
        super().__init__(None)
        self.direction = direction
        self.name = name
        self._median: float | None = None

    def matches(self, listing: Listing) -> bool:
        return True

    def apply(self, listings: list[Listing]) -> tuple[list[Listing], Outcome]:
        if self.direction == "middle" and listings:
            self._median = statistics.median(l.nightly_rate for l in listings)
        return super().apply(listings)

    def fallback_key(self, listing: Listing) -> tuple:
        if self.direction == "ascending":
            return (listing.nightly_rate, -listing.rating)
        if self.direction == "middle":
            return (abs(listing.nightly_rate - (self._median or 0.0)), -listing.rating)
        return (-listing.nightly_rate, -listing.rating)


SORT_KEYS = {
    "price_asc": lambda l: (l.nightly_rate, -l.rating),
    "price_desc": lambda l: (-l.nightly_rate, -l.rating),
    "rating_desc": lambda l: (-l.rating, -l.reviews_count),
    "reviews_desc": lambda l: (-l.reviews_count, -l.rating),
    "newest": lambda l: (l.reviews_count, -l.rating),
    "luxury": lambda l: (-(l.nightly_rate * 0.7 + l.rating * 0.3),),
}


class ExplicitSortCriterion(Criterion):
    def __init__(self, order: str) -> None:
        super().__init__(None)
        self.order = order
        self.name = f"sort:{order}"
        self._key = SORT_KEYS[order]

    def matches(self, listing: Listing) -> bool:
        return True

    def fallback_key(self, listing: Listing) -> tuple:
        return self._key(listing)


def large_group_bedrooms(guests: int, guests_per_bedroom: int, minimum: int) -> int:
    return max(minimum, math.ceil(guests / guests_per_bedroom))
