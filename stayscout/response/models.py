"""Conversational response models."""

from dataclasses import dataclass
from typing import Any

from stayscout.context.models import SearchContext
from stayscout.listings import Listing
from stayscout.query.models import QueryAnalysis, TripContext
from stayscout.refinement.models import RefinementSuggestion


@dataclass(frozen=True)
class PropertyRecommendation:
    """A listing singled out for the trip, with the reason shown to the user."""

    listing_id: str
    name: str
    reason: str
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "listingId": self.listing_id,
            "name": self.name,
            "reason": self.reason,
            "score": self.score,
        }


@dataclass(frozen=True)
class ConversationalResponse:
    """User-facing reply for one turn."""

    message: str
    clarifying_question: str | None = None
    follow_ups: tuple[str, ...] = ()
    insights: tuple[str, ...] = ()
    recommendations: tuple[PropertyRecommendation, ...] = ()
    source: str = "rules"  # "rules" | "llm"

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "clarifyingQuestion": self.clarifying_question,
            "followUps": list(self.follow_ups),
            "insights": list(self.insights),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "source": self.source,
        }


@dataclass(frozen=True)
class ResponseRequest:
    """Everything a responder may draw on for one turn."""

    analysis: QueryAnalysis
    trip: TripContext
    listings: tuple[Listing, ...] = ()
    suggestions: tuple[RefinementSuggestion, ...] = ()
    relaxed: tuple[str, ...] = ()
    context: SearchContext | None = None
