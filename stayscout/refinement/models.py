"""Refinement insights and suggestion records."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class PriceBand:
    label: str  # "budget" | "mid-range" | "luxury"
    minimum: float
    maximum: float
    count: int


@dataclass(frozen=True)
class PriceInsights:
    minimum: float = 0.0
    maximum: float = 0.0
    median: float = 0.0
    average: float = 0.0
    q1: float = 0.0
    q3: float = 0.0
    bands: tuple[PriceBand, ...] = ()


@dataclass(frozen=True)
class RatingInsights:
    average: float = 0.0
    excellent: int = 0
    very_good: int = 0
    good: int = 0
    fair: int = 0
    superhost_count: int = 0
    superhost_percentage: float = 0.0


@dataclass(frozen=True)
class AmenityFrequency:
    amenity: str
    count: int
    percentage: float


@dataclass(frozen=True)
class AmenityInsights:
    popular: tuple[AmenityFrequency, ...] = ()
    categories: dict[str, tuple[str, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class PropertyTypeStats:
    type: str
    count: int
    percentage: float
    average_price: float
    average_rating: float


@dataclass(frozen=True)
class PropertyTypeInsights:
    types: tuple[PropertyTypeStats, ...] = ()


@dataclass(frozen=True)
class RefinementSuggestion:
    """A follow-up refinement worth offering next."""

    type: str  # "price" | "rating" | "amenity" | "property_type" | "host_type"
    label: str
    description: str
    query: str
    count: int
    priority: str  # "high" | "medium" | "low"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "label": self.label,
            "description": self.description,
            "query": self.query,
            "count": self.count,
            "priority": self.priority,
        }
