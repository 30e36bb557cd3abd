"""Tests for turn routing."""

import pytest

from stayscout.errors import InvalidInputError
from stayscout.query import classify_route


class TestClassifyRoute:
    """Test search, refinement and travel question routing."""

    def test_travel_question(self):
        """Test a question asking for travel advice."""
        route = classify_route("What is the best area to stay in Lisbon?")

        assert route.intent == "travel_question"
        assert route.confidence == 0.9
        assert route.suggested_action == "travel_assistant"
        assert route.extracted_location == "Lisbon"
        assert route.is_specific is False

    def test_specific_search(self):
        """Test a property search with a location."""
        route = classify_route("cabin with a pool in Asheville for the weekend")

        assert route.intent == "search"
        assert route.confidence == 0.95
        assert route.extracted_location == "Asheville"
        assert route.is_specific is True

    def test_refinement_keeps_previous_location(self):
        """Test refinement of existing results falls back to the active location."""
        route = classify_route(
            "show me cheaper ones",
            has_results=True,
            previous_location="Austin",
        )

        assert route.intent == "refinement"
        assert route.confidence == 0.8
        assert route.suggested_action == "refine_search"
        assert route.extracted_location == "Austin"

    def test_refinement_needs_results(self):
        """Test refinement words without results are not a refinement."""
        route = classify_route("show me cheaper ones", has_results=False)
        assert route.intent != "refinement"

    def test_location_only_defaults_to_search(self):
        """Test a bare place name."""
        route = classify_route("Portland")

        assert route.intent == "search"
        assert route.confidence == 0.6

    def test_unclear_defaults_to_travel_assistant(self):
        """Test text with no signal."""
        route = classify_route("hmm")

        assert route.intent == "travel_question"
        assert route.confidence == 0.5
        assert route.extracted_location is None

    def test_rejects_non_string(self):
        """Test non-string input is rejected."""
        with pytest.raises(InvalidInputError):
            classify_route(["Austin"])
