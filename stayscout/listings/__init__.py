"""Listing records and boundary validation."""

from .models import (
    Listing,
    ListingHost,
    ListingLocation,
    ListingPrice,
    parse_listing,
    parse_listings,
)

__all__ = [
    "Listing",
    "ListingHost",
    "ListingLocation",
    "ListingPrice",
    "parse_listing",
    "parse_listings",
]
