"""Query understanding models and data structures."""

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class Entities:
    """Entity buckets pulled out of an utterance."""

    places: tuple[str, ...] = ()
    dates: tuple[str, ...] = ()
    people: tuple[str, ...] = ()
    money: tuple[str, ...] = ()
    organizations: tuple[str, ...] = ()


@dataclass(frozen=True)
class Sentiment:
    """Rule-based sentiment of an utterance."""

    score: float = 0.0
    label: str = "neutral"  # "positive" | "negative" | "neutral"


@dataclass(frozen=True)
class Completeness:
    """Which of the four search dimensions are known so far."""

    has_location: bool = False
    has_dates: bool = False
    has_group_size: bool = False
    has_budget: bool = False
    score: float = 0.0

    @classmethod
    def from_flags(
        cls,
        has_location: bool,
        has_dates: bool,
        has_group_size: bool,
        has_budget: bool,
    ) -> "Completeness":
        flags = [has_location, has_dates, has_group_size, has_budget]
        return cls(
            has_location=has_location,
            has_dates=has_dates,
            has_group_size=has_group_size,
            has_budget=has_budget,
            score=sum(flags) / len(flags),
        )


@dataclass(frozen=True)
class PriceConstraint:
    """A price bound as the user stated it.

    ``basis`` is "nightly" or "total". Total budgets are converted to a
    nightly ceiling with :meth:`nightly_bounds`.
    """

    minimum: float | None = None
    maximum: float | None = None
    basis: str = "nightly"

    def nightly_bounds(self, nights: int) -> tuple[float | None, float | None]:
        """Return (min, max) per night, dividing total budgets by ``nights``."""
        if self.basis != "total" or nights <= 0:
            return self.minimum, self.maximum
        minimum = self.minimum // nights if self.minimum is not None else None
        maximum = self.maximum // nights if self.maximum is not None else None
        return minimum, maximum


@dataclass(frozen=True)
class RatingRequest:
    """Minimum rating asked for. Numeric requests are applied leniently."""

    minimum: float
    numeric: bool = False


@dataclass(frozen=True)
class GuestCount:
    """Explicit party size signals; ``None`` means not mentioned."""

    adults: int | None = None
    children: int | None = None
    total: int | None = None

    @property
    def is_specified(self) -> bool:
        return any(v is not None for v in (self.adults, self.children, self.total))

    @property
    def total_guests(self) -> int | None:
        if self.total is not None:
            return self.total
        if self.adults is None and self.children is None:
            return None
        return (self.adults or 0) + (self.children or 0)


@dataclass(frozen=True)
class SearchCriteria:
    """Structured criteria parsed from a single utterance."""

    superhost: str | None = None  # "preferred" | "only"
    rating: RatingRequest | None = None
    min_reviews: int | None = None
    new_listing: bool = False
    price: PriceConstraint | None = None
    relative_price: str | None = None  # "cheaper" | "pricier"
    budget_tier: str | None = None  # "budget" | "mid-range" | "luxury"
    premium_only: bool = False
    room_type: str | None = None  # "entire" | "private" | "shared"
    property_type: str | None = None
    amenities: tuple[str, ...] = ()
    bedrooms: int | None = None
    bathrooms: float | None = None
    guests: GuestCount = field(default_factory=GuestCount)
    nights: int | None = None
    checkin: str | None = None
    checkout: str | None = None
    size_preference: str | None = None  # "larger" | "smaller"
    location_feature: str | None = None  # "beach" | "downtown"
    sort_order: str | None = None

    def mentioned(self) -> list[str]:
        """Names of the criteria this utterance actually set."""
        defaults = SearchCriteria()
        return [
            name
            for name in self.__dataclass_fields__
            if getattr(self, name) != getattr(defaults, name)
        ]


@dataclass(frozen=True)
class QueryAnalysis:
    """Everything the engine understood from one utterance."""

    utterance: str
    entities: Entities
    sentiment: Sentiment
    keywords: tuple[str, ...]
    intents: tuple[str, ...]
    completeness: Completeness
    suggestions: tuple[str, ...]
    criteria: SearchCriteria = field(default_factory=SearchCriteria)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        completeness = data.pop("completeness")
        data["completeness"] = {
            "hasLocation": completeness["has_location"],
            "hasDates": completeness["has_dates"],
            "hasGroupSize": completeness["has_group_size"],
            "hasBudget": completeness["has_budget"],
            "score": completeness["score"],
        }
        return data


@dataclass(frozen=True)
class TripContext:
    """Trip metadata that is not itself a search criterion."""

    purpose: str | None = None
    urgency: str = "flexible"  # "flexible" | "specific" | "urgent"
    group_type: str = "unknown"
    priorities: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "purpose": self.purpose,
            "urgency": self.urgency,
            "groupType": self.group_type,
            "priorities": list(self.priorities),
        }


@dataclass(frozen=True)
class QueryRoute:
    """Where a turn should be dispatched."""

    intent: str  # "search" | "travel_question" | "refinement"
    confidence: float
    reasoning: str
    suggested_action: str  # "search_properties" | "travel_assistant" | "refine_search"
    extracted_location: str | None = None
    is_specific: bool = False
