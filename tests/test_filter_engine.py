"""Tests for the adaptive filtering engine."""

from conftest import make_listing

from stayscout.context import SearchContext
from stayscout.filtering import FilterEngine, filter_listings
from stayscout.filtering.criteria import AmenityCriterion, Outcome, PriceCriterion
from stayscout.query import analyze
from stayscout.thresholds import EngineConfig, RetentionThresholds


class TestCriterion:
    """Test the filter-or-sort rule for single criteria."""

    def test_applies_when_enough_listings_match(self, austin_listings):
        """Test a hard filter with a non-empty kept subset."""
        result, outcome = PriceCriterion(maximum=120.0).apply(austin_listings)

        assert outcome is Outcome.APPLIED
        assert [listing.id for listing in result] == ["a0", "a1", "a2", "a3"]

    def test_relaxes_below_retention_threshold(self, austin_listings):
        """Test a matching minority is sorted first instead of filtered."""
        result, outcome = AmenityCriterion.for_name("pool").apply(austin_listings)

        assert outcome is Outcome.RELAXED
        assert len(result) == len(austin_listings)
        assert result[0].id == "a3"

    def test_relaxes_when_nothing_matches(self, austin_listings):
        """Test an empty kept subset never replaces the set."""
        result, outcome = PriceCriterion(maximum=50.0).apply(austin_listings)

        assert outcome is Outcome.RELAXED
        assert [listing.nightly_rate for listing in result] == sorted(
            listing.nightly_rate for listing in austin_listings
        )


class TestFilterEngine:
    """Test the criteria fold."""

    def test_rare_amenity_sorts_first(self, austin_listings):
        """Test "2 adults, pool, under $200, Austin" with a single pool listing."""
        outcome = FilterEngine().apply(austin_listings, analyze("2 adults, pool, under $200, Austin"))

        assert len(outcome.listings) == 10
        assert outcome.listings[0].id == "a3"
        assert outcome.applied == ("price",)
        assert outcome.relaxed == ("amenity:pool",)

    def test_superhost_only_without_superhosts(self, austin_listings):
        """Test "superhost only" over a set with no superhosts."""
        outcome = FilterEngine().apply(austin_listings, analyze("superhost only"))

        assert {listing.id for listing in outcome.listings} == {
            listing.id for listing in austin_listings
        }
        ratings = [listing.rating for listing in outcome.listings]
        assert ratings == sorted(ratings, reverse=True)
        assert outcome.relaxed == ("superhost",)
        assert outcome.applied == ()

    def test_superhost_only_filters_when_present(self, mixed_listings):
        """Test "superhost only" keeps only superhosts when some exist."""
        outcome = FilterEngine().apply(mixed_listings, analyze("superhost only"))

        assert outcome.listings
        assert all(listing.is_superhost for listing in outcome.listings)
        assert outcome.applied == ("superhost",)

    def test_never_collapses(self, austin_listings):
        """Test contradictory criteria still leave listings."""
        outcome = FilterEngine().apply(
            austin_listings,
            analyze("superhost only, entire villa with a hot tub, 4.9+ rating, under $50"),
        )

        assert outcome.listings
        assert "rating" in outcome.applied
        assert "price" in outcome.relaxed
        assert "superhost" in outcome.relaxed
        assert all(listing.rating >= 4.4 for listing in outcome.listings)

    def test_result_is_subset_of_input(self, mixed_listings):
        """Test the engine only subsets and reorders."""
        outcome = FilterEngine().apply(mixed_listings, analyze("entire place with a pool under $300"))

        input_ids = {listing.id for listing in mixed_listings}
        output_ids = [listing.id for listing in outcome.listings]
        assert set(output_ids) <= input_ids
        assert len(output_ids) == len(set(output_ids))

    def test_idempotent(self, mixed_listings):
        """Test that filtering the output again changes nothing."""
        engine = FilterEngine()
        analysis = analyze("highly rated place with a pool, cheapest first")

        first = engine.apply(mixed_listings, analysis)
        second = engine.apply(first.listings, analysis)

        assert [l.id for l in second.listings] == [l.id for l in first.listings]

    def test_sort_only_criteria_are_ordered(self, austin_listings):
        """Test budget wording reorders without filtering."""
        outcome = FilterEngine().apply(austin_listings, analyze("cheap places in Austin"))

        assert [listing.id for listing in outcome.listings] == [f"a{i}" for i in range(10)]
        assert outcome.ordered == ("price_order:cheaper",)
        assert outcome.applied == ()
        assert outcome.relaxed == ()

    def test_context_price_bounds(self, austin_listings):
        """Test bounds from the active context apply when the turn repeats none."""
        context = SearchContext(location="Austin", max_price=120.0)
        outcome = FilterEngine().apply(austin_listings, analyze("show me options"), context)

        assert [listing.id for listing in outcome.listings] == ["a0", "a1", "a2", "a3"]
        assert outcome.applied == ("price",)

    def test_large_group_needs_bedrooms(self):
        """Test six guests require at least three bedrooms."""
        listings = [
            make_listing("b0", bedrooms=1),
            make_listing("b1", bedrooms=3),
            make_listing("b2", bedrooms=4),
            make_listing("b3", room_type="Private room"),
            make_listing("b4", bedrooms=2),
        ]
        outcome = FilterEngine().apply(listings, analyze("Austin for 6 people"))

        assert [listing.id for listing in outcome.listings] == ["b1", "b2"]
        assert outcome.applied == ("bedrooms",)

    def test_no_criteria_returns_input(self, austin_listings):
        """Test an utterance without criteria leaves the set untouched."""
        outcome = FilterEngine().apply(austin_listings, analyze("hello"))
        assert list(outcome.listings) == austin_listings

    def test_empty_input(self):
        """Test empty input yields empty output."""
        assert FilterEngine().apply([], analyze("pool")).listings == ()

    def test_custom_retention(self, austin_listings):
        """Test a zero amenity threshold turns the pool into a hard filter."""
        config = EngineConfig(retention=RetentionThresholds(amenity=0.0))
        outcome = FilterEngine(config).apply(austin_listings, analyze("pool"))

        assert [listing.id for listing in outcome.listings] == ["a3"]

    def test_filter_listings_helper(self, austin_listings):
        """Test the list-returning helper."""
        assert filter_listings(austin_listings, analyze("pool"))[0].id == "a3"
