"""Search context carried across conversational turns."""

from dataclasses import dataclass
from typing import Any

_CAMEL_FIELDS = {
    "location": "location",
    "adults": "adults",
    "children": "children",
    "nights": "nights",
    "checkin": "checkin",
    "checkout": "checkout",
    "min_price": "minPrice",
    "max_price": "maxPrice",
    "guests_specified": "guestsSpecified",
    "location_confidence": "locationConfidence",
}


@dataclass(frozen=True)
class SearchContext:
    """Accumulated search parameters.

    A field set once is only replaced by an explicit new signal in a later
    turn; merging never clears it.
    """

    location: str
    adults: int = 1
    children: int = 0
    nights: int | None = None
    checkin: str | None = None
    checkout: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    guests_specified: bool = False
    location_confidence: float | None = None

    @property
    def total_guests(self) -> int:
        return self.adults + self.children

    def to_dict(self) -> dict[str, Any]:
        return {camel: getattr(self, name) for name, camel in _CAMEL_FIELDS.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchContext":
        values = {}
        for name, camel in _CAMEL_FIELDS.items():
            if camel in data:
                values[name] = data[camel]
            elif name in data:
                values[name] = data[name]
        return cls(**values)
