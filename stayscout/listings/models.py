"""Listing records supplied by the listing source."""

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from stayscout.errors import InvalidInputError

logger = logging.getLogger(__name__)


class _Record(BaseModel):
    """Frozen record accepting camelCase or snake_case keys."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )


class ListingPrice(_Record):
    """Nightly rate and optional stay total."""

    rate: float = Field(ge=0)
    total: float | None = None
    currency: str = "USD"


class ListingHost(_Record):
    """Host information shown on the listing."""

    name: str | None = None
    is_superhost: bool = False


class ListingLocation(_Record):
    """Coarse location descriptor."""

    city: str | None = None
    country: str | None = None


class Listing(_Record):
    """A short-term rental listing.

    The engine treats listings as read-only: it only ever subsets or reorders
    them. Optional fields that the source did not supply stay ``None``.
    """

    id: str
    name: str
    url: str | None = None
    images: tuple[str, ...] = ()
    price: ListingPrice
    rating: float = Field(ge=0, le=5)
    reviews_count: int = Field(ge=0)
    room_type: str
    amenities: tuple[str, ...] = ()
    host: ListingHost = Field(default_factory=ListingHost)
    location: ListingLocation | None = None
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: float | None = Field(default=None, ge=0)
    trust_score: float | None = None
    platform: str | None = None

    @property
    def nightly_rate(self) -> float:
        """Nightly price used by every price comparison."""
        return self.price.rate

    @property
    def is_superhost(self) -> bool:
        return self.host.is_superhost

    def searchable_text(self) -> str:
        """Lowercased name and room type, used by keyword heuristics."""
        return f"{self.name} {self.room_type}".lower()

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase field names of the listing source."""
        return self.model_dump(by_alias=True, mode="json")


def parse_listing(record: Listing | dict[str, Any]) -> Listing:
    """Validate a single listing record.

    Args:
        record: Listing instance or raw mapping from the listing source

    Returns:
        Validated listing

    Raises:
        InvalidInputError: If the record is malformed
    """
    if isinstance(record, Listing):
        return record
    if not isinstance(record, dict):
        raise InvalidInputError(
            f"Listing record must be a mapping, got {type(record).__name__}"
        )
    try:
        return Listing.model_validate(record)
    except ValidationError as e:
        listing_id = record.get("id", "<unknown>")
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InvalidInputError(f"Malformed listing {listing_id}: {problems}") from e


def parse_listings(records: Iterable[Listing | dict[str, Any]]) -> list[Listing]:
    """Validate a batch of listing records, preserving order.

    Args:
        records: Listing instances or raw mappings

    Returns:
        Validated listings

    Raises:
        InvalidInputError: If the batch is not iterable or any record is malformed
    """
    if isinstance(records, (str, bytes, dict)) or not isinstance(records, Iterable):
        raise InvalidInputError(
            f"Listings must be a list of records, got {type(records).__name__}"
        )
    listings = [parse_listing(record) for record in records]
    logger.debug(f"Validated {len(listings)} listings")
    return listings
