"""Versioned rule tables for the refinement analyzer."""

from dataclasses import dataclass, field

_AMENITY_CATEGORIES = {
    "essentials": ("wifi", "kitchen", "air conditioning", "heating", "hot water"),
    "comfort": ("tv", "fireplace", "balcony", "patio", "hot tub", "jacuzzi"),
    "convenience": ("parking", "laundry", "washer", "dryer", "elevator"),
    "outdoor": ("pool", "garden", "bbq", "grill", "beach access", "lake access"),
    "family": ("crib", "high chair", "baby", "kid", "child", "family"),
}


@dataclass(frozen=True)
class RefinementRules:
    """Keyword tables used to decide which refinements make sense."""

    version: str = "v1"
    warm_locations: tuple[str, ...] = (
        "miami", "malibu", "san diego", "los angeles", "hawaii", "florida", "arizona",
        "nevada", "california", "texas", "austin", "new orleans", "charleston", "savannah",
        "phoenix", "las vegas", "key west", "santa barbara", "palm springs",
    )
    cold_locations: tuple[str, ...] = (
        "aspen", "denver", "seattle", "portland", "boston", "new york", "chicago",
        "minneapolis", "alaska", "montana", "vermont", "new hampshire", "maine",
        "colorado", "utah", "wyoming", "north dakota", "minnesota",
    )
    warm_skip: tuple[str, ...] = ("heating", "fireplace")
    cold_skip: tuple[str, ...] = ("air conditioning", "pool")
    basic_amenities: tuple[str, ...] = ("hot water", "essentials")
    amenity_categories: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(_AMENITY_CATEGORIES)
    )
    # Suggestions of a kind are skipped when any of these appear in the utterance
    price_keywords: tuple[str, ...] = (
        "$", "budget", "luxury", "cheap", "expensive", "under", "over", "range",
    )
    rating_keywords: tuple[str, ...] = (
        "excellent", "4.8", "4.9", "5.0", "highly rated", "top rated",
    )
    superhost_keywords: tuple[str, ...] = ("superhost", "super host")
    property_type_keywords: tuple[str, ...] = (
        "apartment", "house", "villa", "condo", "entire", "private room", "shared",
    )


RULES_V1 = RefinementRules()
