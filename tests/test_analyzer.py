"""Tests for the query analyzer."""

import pytest

from stayscout.context import SearchContext
from stayscout.errors import InvalidInputError
from stayscout.query import analyze
from stayscout.query.analyzer import (
    CLARIFYING_QUESTIONS,
    INTENT_HINTS,
    analyze_sentiment,
    detect_intents,
)


class TestAnalyze:
    """Test full utterance analysis."""

    def test_complete_request(self, today):
        """Test an utterance that covers every dimension."""
        analysis = analyze(
            "Looking for a cabin in Lake Tahoe next weekend for 2 adults under $300",
            today=today,
        )

        assert analysis.entities.places == ("Lake Tahoe",)
        assert analysis.intents == ("search",)
        assert analysis.completeness.score == 1.0
        assert analysis.suggestions == ()
        assert analysis.criteria.checkin == "2025-06-20"
        assert analysis.criteria.property_type == "cabin"

    def test_empty_request_asks_three_questions(self):
        """Test clarifying questions are capped at three, in fixed order."""
        analysis = analyze("hello")

        assert analysis.completeness.score == 0.0
        assert analysis.suggestions == (
            CLARIFYING_QUESTIONS["location"],
            CLARIFYING_QUESTIONS["dates"],
            CLARIFYING_QUESTIONS["group_size"],
        )

    def test_intent_hint_follows_questions(self):
        """Test intent hints come after clarifying questions."""
        analysis = analyze("compare the cabins in Aspen for our family next weekend under $400")

        assert "compare" in analysis.intents
        assert analysis.suggestions[-1] == INTENT_HINTS["compare"]

    def test_prior_context_fills_dimensions(self):
        """Test that an active context satisfies location, group and budget."""
        prior = SearchContext(location="Austin", adults=2, guests_specified=True, max_price=200.0)
        analysis = analyze("show me cheaper ones", prior_context=prior)

        completeness = analysis.completeness
        assert completeness.has_location is True
        assert completeness.has_group_size is True
        assert completeness.has_budget is True
        assert completeness.has_dates is False
        assert completeness.score == 0.75

    def test_unknown_prior_location_does_not_count(self):
        """Test the "Unknown" placeholder location is ignored."""
        analysis = analyze("hello", prior_context=SearchContext(location="Unknown"))
        assert analysis.completeness.has_location is False

    def test_completeness_is_monotonic(self, today):
        """Test that adding location, dates, group and budget never lowers the score."""
        steps = [
            "find a place",
            "find a place in Denver",
            "find a place in Denver next weekend",
            "find a place in Denver next weekend for 3 people",
            "find a place in Denver next weekend for 3 people under $250",
        ]
        scores = [analyze(text, today=today).completeness.score for text in steps]

        assert scores == sorted(scores)
        assert scores[0] == 0.0
        assert scores[-1] == 1.0

    def test_to_dict_uses_camel_case_completeness(self):
        """Test serialization of the completeness block."""
        data = analyze("hello").to_dict()
        assert set(data["completeness"]) == {
            "hasLocation",
            "hasDates",
            "hasGroupSize",
            "hasBudget",
            "score",
        }

    def test_rejects_non_string(self):
        """Test non-string utterances are rejected at the boundary."""
        with pytest.raises(InvalidInputError, match="must be a string"):
            analyze(42)


class TestSentimentAndIntents:
    """Test sentiment scoring and intent detection."""

    def test_positive(self):
        """Test positive words."""
        sentiment = analyze_sentiment("I love this, it's perfect")
        assert sentiment.label == "positive"
        assert sentiment.score == 1.0

    def test_negative(self):
        """Test negative words."""
        sentiment = analyze_sentiment("This is terrible and awful")
        assert sentiment.label == "negative"
        assert sentiment.score == -1.0

    def test_mixed_is_neutral(self):
        """Test balanced words."""
        assert analyze_sentiment("I love it but the last one was bad").label == "neutral"

    def test_intents_accumulate_in_table_order(self):
        """Test every matching intent is kept."""
        assert detect_intents("Can you compare these two and book the cheaper one?") == (
            "compare",
            "book",
        )

    def test_no_intents(self):
        """Test text with no intent words."""
        assert detect_intents("a cabin") == ()
