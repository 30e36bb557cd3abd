"""Shared fixtures for the StayScout tests."""

from datetime import date

import pytest

from stayscout.listings import Listing


def make_listing(
    listing_id: str,
    name: str | None = None,
    rate: float = 150.0,
    rating: float = 4.5,
    reviews: int = 25,
    room_type: str = "Entire home/apt",
    amenities: tuple[str, ...] = (),
    superhost: bool = False,
    bedrooms: int | None = None,
    bathrooms: float | None = None,
) -> Listing:
    """Build a listing from a camelCase record, the way the listing source sends it."""
    record = {
        "id": listing_id,
        "name": name or f"Listing {listing_id}",
        "price": {"rate": rate, "currency": "USD"},
        "rating": rating,
        "reviewsCount": reviews,
        "roomType": room_type,
        "amenities": list(amenities),
        "host": {"name": "Host", "isSuperhost": superhost},
    }
    if bedrooms is not None:
        record["bedrooms"] = bedrooms
    if bathrooms is not None:
        record["bathrooms"] = bathrooms
    return Listing.model_validate(record)


@pytest.fixture
def today():
    """Fixed reference date (a Wednesday) for date resolution."""
    return date(2025, 6, 11)


@pytest.fixture
def austin_listings():
    """Ten Austin listings under $200, exactly one with a pool."""
    return [
        make_listing(
            f"a{i}",
            name=f"Austin Stay {i}",
            rate=90.0 + i * 10,
            rating=round(4.0 + i * 0.09, 2),
            amenities=("Wifi", "Kitchen", "Pool") if i == 3 else ("Wifi", "Kitchen"),
        )
        for i in range(10)
    ]


@pytest.fixture
def mixed_listings():
    """Twenty listings spread over price, rating, host and room type."""
    listings = []
    for i in range(20):
        listings.append(
            make_listing(
                f"m{i}",
                name=f"Place {i}",
                rate=60.0 + i * 20,
                rating=4.95 if i % 5 == 0 else 4.2 + (i % 5) * 0.1,
                reviews=10 + i * 7,
                room_type="Private room" if i % 4 == 0 else "Entire home/apt",
                amenities=("Wifi", "Kitchen", "Free parking") + (("Pool",) if i % 2 == 0 else ()),
                superhost=i % 3 == 0,
            )
        )
    return listings
