"""Tests for search context tracking."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import make_listing

from stayscout.context import (
    ContextState,
    LocationValidation,
    SearchContext,
    SearchContextTracker,
    merge_context,
)
from stayscout.filtering import filter_listings
from stayscout.query import analyze


class TestMergeContext:
    """Test merging turns into the context."""

    def test_no_location_no_context(self):
        """Test a first turn without a place leaves the tracker uninitialized."""
        assert merge_context(None, analyze("2 adults under $200")) is None

    def test_first_turn_sets_location_and_guests(self):
        """Test "Austin for 2 adults"."""
        context = merge_context(None, analyze("Austin for 2 adults"))

        assert context.location == "Austin"
        assert context.adults == 2
        assert context.guests_specified is True
        assert context.max_price is None

    def test_cheaper_preserves_location_and_guests(self):
        """Test a follow-up asking for cheaper options."""
        first = merge_context(None, analyze("Austin for 2 adults"))
        second = merge_context(first, analyze("actually make it cheaper"), reference_price=150.0)

        assert second.location == "Austin"
        assert second.adults == 2
        assert second.max_price == 120.0

    def test_cheaper_without_anchor_uses_budget_ceiling(self):
        """Test "cheaper" when there is no ceiling and no reference price."""
        first = merge_context(None, analyze("Austin for 2 adults"))
        second = merge_context(first, analyze("make it cheaper"))
        assert second.max_price == 150.0

    def test_cheaper_lowers_existing_ceiling(self):
        """Test "cheaper" applied twice keeps lowering the ceiling."""
        context = merge_context(None, analyze("Austin, under $200"))
        assert context.max_price == 200.0

        context = merge_context(context, analyze("cheaper"))
        assert context.max_price == 160.0
        context = merge_context(context, analyze("cheaper"))
        assert context.max_price == 128.0

    def test_pricier_raises_ceiling(self):
        """Test "pricier" raises an existing ceiling."""
        context = merge_context(None, analyze("Austin, under $200"))
        context = merge_context(context, analyze("something pricier"))
        assert context.max_price == 250.0

    def test_new_floor_above_ceiling_clears_ceiling(self):
        """Test "over $300" after "under $200" drops the stale ceiling."""
        context = merge_context(None, analyze("Austin under $200 a night"))
        assert context.max_price == 200.0

        context = merge_context(context, analyze("actually show me places over $300"))
        assert context.min_price == 300.0
        assert context.max_price is None

        pool = analyze("with a pool")
        context = merge_context(context, pool)
        assert context.min_price == 300.0
        assert context.max_price is None

        listings = [make_listing(f"p{rate}", rate=rate) for rate in (150.0, 250.0, 350.0, 450.0)]
        results = filter_listings(listings, pool, context)
        assert results
        assert all(listing.nightly_rate >= 300 for listing in results)

    def test_new_ceiling_below_floor_clears_floor(self):
        """Test "under $100" after "over $300" drops the stale floor."""
        prior = SearchContext(location="Austin", min_price=300.0)
        context = merge_context(prior, analyze("actually under $100 a night"))

        assert context.max_price == 100.0
        assert context.min_price is None

    def test_cheaper_below_floor_clears_floor(self):
        """Test "cheaper" pushing the ceiling under the floor drops the floor."""
        prior = SearchContext(location="Austin", min_price=180.0, max_price=200.0)
        context = merge_context(prior, analyze("cheaper"))

        assert context.max_price == 160.0
        assert context.min_price is None

    def test_compatible_bounds_are_kept(self):
        """Test a floor below the existing ceiling keeps both."""
        prior = SearchContext(location="Austin", max_price=300.0)
        context = merge_context(prior, analyze("over $100 a night"))

        assert context.min_price == 100.0
        assert context.max_price == 300.0

    def test_party_size_replaces_adults_and_children(self):
        """Test "family of 4" after "2 adults and 1 kid" totals 4."""
        context = merge_context(None, analyze("Austin for 2 adults and 1 kid"))
        assert context.total_guests == 3

        context = merge_context(context, analyze("actually we are a family of 4"))
        assert context.total_guests == 4
        assert context.adults == 3
        assert context.children == 1

    def test_party_size_smaller_than_children(self):
        """Test a stated total never leaves more children than the party holds."""
        prior = SearchContext(location="Austin", adults=2, children=3, guests_specified=True)
        context = merge_context(prior, analyze("just 2 people now"))

        assert context.total_guests == 2
        assert context.adults >= 1

    def test_lowercase_place_starts_context(self):
        """Test "in austin" in lowercase chat starts a context."""
        analysis = analyze("looking for a place in austin for 2 adults")

        assert analysis.entities.places == ("Austin",)
        assert analysis.completeness.has_location is True
        context = merge_context(None, analysis)
        assert context.location == "Austin"
        assert context.adults == 2

    def test_no_signal_returns_prior(self):
        """Test a turn without explicit signals leaves the context unchanged."""
        prior = SearchContext(location="Austin", adults=3, guests_specified=True, max_price=180.0)
        assert merge_context(prior, analyze("hmm, let me think")) == prior

    def test_new_location_replaces_old(self):
        """Test naming a different city moves the search."""
        prior = SearchContext(location="Austin", adults=2, location_confidence=0.9)
        context = merge_context(prior, analyze("switch to Denver"))

        assert context.location == "Denver"
        assert context.adults == 2
        assert context.location_confidence is None

    def test_nights_derive_checkout(self, today):
        """Test a known stay length fills in check-out."""
        prior = SearchContext(location="Austin", nights=3)
        context = merge_context(prior, analyze("arriving July 10", today=today))

        assert context.checkin == "2025-07-10"
        assert context.checkout == "2025-07-13"

    def test_to_dict_round_trip(self):
        """Test camelCase serialization."""
        context = SearchContext(location="Austin", max_price=120.0, guests_specified=True)
        data = context.to_dict()

        assert data["maxPrice"] == 120.0
        assert data["guestsSpecified"] is True
        assert SearchContext.from_dict(data) == context


class TestSearchContextTracker:
    """Test the tracker state machine and location validation."""

    def test_states(self):
        """Test uninitialized until a place is named, active afterwards."""
        tracker = SearchContextTracker()

        context = tracker.advance(None, analyze("2 adults"))
        assert tracker.state_of(context) is ContextState.UNINITIALIZED

        context = tracker.advance(context, analyze("Austin for 2 adults"))
        assert tracker.state_of(context) is ContextState.ACTIVE

        assert tracker.state_of(tracker.reset()) is ContextState.UNINITIALIZED

    @pytest.mark.asyncio
    async def test_validated_location_is_normalised(self):
        """Test a validator result replaces the raw location."""
        validator = MagicMock()
        validator.validate = AsyncMock(
            return_value=LocationValidation(location="Austin, Texas", confidence=0.95)
        )
        tracker = SearchContextTracker(validator=validator)

        context = await tracker.advance_validated(None, analyze("Austin for 2 adults"))

        validator.validate.assert_awaited_once_with("Austin")
        assert context.location == "Austin, Texas"
        assert context.location_confidence == 0.95

    @pytest.mark.asyncio
    async def test_invalid_location_keeps_raw_value(self):
        """Test an unknown place keeps the raw text with the reported confidence."""
        validator = MagicMock()
        validator.validate = AsyncMock(
            return_value=LocationValidation(location="Narnia", confidence=0.0, valid=False)
        )
        tracker = SearchContextTracker(validator=validator)

        context = await tracker.advance_validated(None, analyze("cabin in Narnia"))

        assert context.location == "Narnia"
        assert context.location_confidence == 0.0

    @pytest.mark.asyncio
    async def test_validator_error_falls_back(self):
        """Test validator failures keep the raw location."""
        validator = MagicMock()
        validator.validate = AsyncMock(side_effect=RuntimeError("service down"))
        tracker = SearchContextTracker(validator=validator)

        context = await tracker.advance_validated(None, analyze("Austin for 2 adults"))

        assert context.location == "Austin"
        assert context.location_confidence == 0.5

    @pytest.mark.asyncio
    async def test_validator_timeout_falls_back(self):
        """Test a slow validator is abandoned."""

        async def slow_validate(location):
            await asyncio.sleep(1)
            return LocationValidation(location=location, confidence=1.0)

        validator = MagicMock()
        validator.validate = slow_validate
        tracker = SearchContextTracker(validator=validator, validation_timeout=0.01)

        context = await tracker.advance_validated(None, analyze("Austin for 2 adults"))

        assert context.location == "Austin"
        assert context.location_confidence == 0.5

    @pytest.mark.asyncio
    async def test_unchanged_location_is_not_revalidated(self):
        """Test later turns about the same place skip validation."""
        validator = MagicMock()
        validator.validate = AsyncMock()
        tracker = SearchContextTracker(validator=validator)
        prior = SearchContext(location="Austin", location_confidence=0.95)

        context = await tracker.advance_validated(prior, analyze("make it cheaper"))

        validator.validate.assert_not_awaited()
        assert context.location == "Austin"
