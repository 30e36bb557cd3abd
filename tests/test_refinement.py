"""Tests for refinement suggestions."""

import pytest
from conftest import make_listing

from stayscout.refinement import RefinementAnalyzer, suggest_refinements


@pytest.fixture
def priced_listings():
    """Twenty listings priced $80 to $270 in $10 steps."""
    return [make_listing(f"p{i}", rate=80.0 + i * 10) for i in range(20)]


class TestPriceInsights:
    """Test price statistics and bands."""

    def test_bands_cover_every_listing(self, priced_listings):
        """Test budget, mid-range and luxury bands partition the set."""
        insights = RefinementAnalyzer(priced_listings).analyze_prices()

        assert [(b.label, b.count) for b in insights.bands] == [
            ("budget", 6),
            ("mid-range", 10),
            ("luxury", 4),
        ]
        assert sum(b.count for b in insights.bands) == 20
        assert insights.q1 == 130.0
        assert insights.q3 == 230.0
        assert insights.bands[0].minimum == 80.0
        assert insights.bands[-1].minimum == 240.0
        assert insights.median == 175.0

    def test_empty(self):
        """Test no listings, no bands."""
        assert RefinementAnalyzer([]).analyze_prices().bands == ()


class TestGenerateSuggestions:
    """Test suggestion generation and ranking."""

    def test_price_bands_by_priority(self, priced_listings):
        """Test price suggestions are ranked by priority then count."""
        suggestions = RefinementAnalyzer(priced_listings).generate_suggestions("cabin")

        assert [s.label for s in suggestions] == ["Mid-range", "Budget-friendly", "Luxury"]
        assert [s.priority for s in suggestions] == ["high", "high", "medium"]
        assert suggestions[0].query == "cabin under $230/night"
        assert suggestions[2].query == "cabin over $240/night"

    def test_price_already_specified(self, priced_listings):
        """Test no price bands when the utterance already names a price."""
        assert RefinementAnalyzer(priced_listings).generate_suggestions("cabin under $200") == []

    def test_warm_location_ranking(self, mixed_listings):
        """Test the ranked mix of amenity, type, price and host suggestions."""
        suggestions = RefinementAnalyzer(mixed_listings).generate_suggestions("places in Miami")
        labels = [s.label for s in suggestions]

        assert len(suggestions) == 6
        assert set(labels[:3]) == {"With wifi", "With kitchen", "With free parking"}
        assert labels[3:] == ["Entire home/apt only", "Mid-range", "With pool"]
        assert all(s.priority == "high" for s in suggestions)

    def test_cold_location_skips_pool(self, mixed_listings):
        """Test cold destinations never suggest a pool."""
        suggestions = RefinementAnalyzer(mixed_listings).generate_suggestions(
            "somewhere cozy", location="Aspen"
        )
        labels = [s.label for s in suggestions]

        assert "With pool" not in labels
        assert labels[-1] == "Superhosts only"

    def test_superhost_already_specified(self, mixed_listings):
        """Test no superhost suggestion when the utterance asks for superhosts."""
        suggestions = suggest_refinements(mixed_listings, "superhost places in Aspen")
        assert all(s.type != "host_type" for s in suggestions)

    def test_excellent_ratings_suggested(self, mixed_listings):
        """Test the excellent-rating suggestion counts 4.8+ listings."""
        analyzer = RefinementAnalyzer(mixed_listings)
        ratings = analyzer.analyze_ratings()

        assert ratings.excellent == 4
        assert ratings.superhost_count == 7
        # Amenities, property type and price are all named in the utterance
        suggestions = analyzer.generate_suggestions(
            "entire house under $500 with wifi, kitchen, free parking and pool"
        )
        assert [s.label for s in suggestions] == ["Superhosts only", "Excellent ratings only"]

    def test_single_property_type_not_suggested(self, priced_listings):
        """Test a uniform result set gets no property type suggestions."""
        suggestions = RefinementAnalyzer(priced_listings).generate_suggestions("cabin")
        assert all(s.type != "property_type" for s in suggestions)

    def test_empty_result_set(self):
        """Test nothing to suggest for an empty set."""
        assert suggest_refinements([], "anything") == []

    def test_to_dict(self, priced_listings):
        """Test serialization."""
        data = RefinementAnalyzer(priced_listings).generate_suggestions("cabin")[0].to_dict()
        assert data == {
            "type": "price",
            "label": "Mid-range",
            "description": "10 properties from $140 to $230/night",
            "query": "cabin under $230/night",
            "count": 10,
            "priority": "high",
        }
