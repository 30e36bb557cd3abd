"""Turn processing pipeline: one conversational turn end to end."""

import logging
import statistics
import time
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Any

from stayscout.context import SearchContext, SearchContextTracker
from stayscout.errors import require_utterance
from stayscout.filtering import FilterEngine
from stayscout.listings import Listing, parse_listings
from stayscout.query import (
    QueryAnalysis,
    QueryRoute,
    TripContext,
    analyze,
    classify_route,
    classify_trip,
)
from stayscout.refinement import RefinementAnalyzer, RefinementSuggestion
from stayscout.response import (
    ConversationalResponse,
    LLMEnhancedResponder,
    ResponseRequest,
    ResponseStrategy,
    RuleBasedResponder,
)
from stayscout.response.synthesizer import NO_MATCH_MESSAGE
from stayscout.thresholds import EngineConfig, engine_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnResult:
    """Complete result of processing one turn."""

    analysis: QueryAnalysis
    trip: TripContext
    route: QueryRoute
    context: SearchContext | None
    listings: tuple[Listing, ...]
    applied_criteria: tuple[str, ...]
    relaxed_criteria: tuple[str, ...]
    suggestions: tuple[RefinementSuggestion, ...]
    response: ConversationalResponse
    needs_clarification: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "analysis": self.analysis.to_dict(),
            "trip": self.trip.to_dict(),
            "route": {
                "intent": self.route.intent,
                "confidence": self.route.confidence,
                "reasoning": self.route.reasoning,
                "suggestedAction": self.route.suggested_action,
                "extractedLocation": self.route.extracted_location,
                "isSpecific": self.route.is_specific,
            },
            "context": self.context.to_dict() if self.context else None,
            "listings": [listing.to_dict() for listing in self.listings],
            "appliedCriteria": list(self.applied_criteria),
            "relaxedCriteria": list(self.relaxed_criteria),
            "suggestions": [s.to_dict() for s in self.suggestions],
            "response": self.response.to_dict(),
            "needsClarification": self.needs_clarification,
        }


class TurnProcessor:
    """Runs the engine for a single turn.

    Holds no conversation memory: the caller passes the prior
    ``SearchContext`` in and keeps ``TurnResult.context`` for the next turn.
    """

    def __init__(
        self,
        config: EngineConfig = engine_config,
        responder: ResponseStrategy | None = None,
        tracker: SearchContextTracker | None = None,
    ) -> None:
        """Initialize turn processor.

        Args:
            config: Engine thresholds shared by every component
            responder: Response strategy, defaults to the rule-based responder
            tracker: Context tracker, optionally with a location validator
        """
        self.config = config
        self.responder = responder or RuleBasedResponder(config)
        self.tracker = tracker or SearchContextTracker(config)
        self.filter_engine = FilterEngine(config)

    async def _advance_context(
        self,
        prior: SearchContext | None,
        analysis: QueryAnalysis,
        reference_price: float | None,
    ) -> SearchContext | None:
        if self.tracker.validator is not None:
            return await self.tracker.advance_validated(prior, analysis, reference_price)
        return self.tracker.advance(prior, analysis, reference_price)

    def _clarification(
        self,
        analysis: QueryAnalysis,
        trip: TripContext,
        route: QueryRoute,
        context: SearchContext | None,
        listings: list[Listing],
    ) -> TurnResult:
        question = analysis.suggestions[0] if analysis.suggestions else None
        message = NO_MATCH_MESSAGE + (question or "")
        response = ConversationalResponse(
            message=message.strip(),
            clarifying_question=question,
            follow_ups=analysis.suggestions[1 : 1 + self.config.response.max_follow_ups],
        )
        return TurnResult(
            analysis=analysis,
            trip=trip,
            route=route,
            context=context,
            listings=tuple(listings),
            applied_criteria=(),
            relaxed_criteria=(),
            suggestions=(),
            response=response,
            needs_clarification=True,
        )

    async def process_turn(
        self,
        utterance: str,
        listings: Iterable[Listing | dict[str, Any]],
        context: SearchContext | None = None,
        *,
        today: date | None = None,
    ) -> TurnResult:
        """Process one conversational turn.

        Args:
            utterance: The user's text
            listings: Candidate listings from the listing source
            context: Search context returned by the previous turn
            today: Reference date for resolving relative dates

        Returns:
            TurnResult with the new context, filtered listings and response

        Raises:
            InvalidInputError: If the utterance or a listing record is malformed
        """
        start_time = time.time()
        text = require_utterance(utterance)
        candidates = parse_listings(listings)
        logger.info(f"Processing turn: {text!r} over {len(candidates)} listings")

        # Step 1: Understand the utterance
        analysis = analyze(text, context, today=today, config=self.config)
        trip = classify_trip(text)
        route = classify_route(
            text,
            has_results=bool(candidates),
            previous_location=context.location if context else None,
        )

        # Step 2: Advance the search context
        reference_price = (
            statistics.median(listing.nightly_rate for listing in candidates)
            if candidates
            else None
        )
        new_context = await self._advance_context(context, analysis, reference_price)

        # Step 3: Ask before searching when too little is known
        completeness = analysis.completeness
        if (
            completeness.score < self.config.completeness.clarify_below
            and not completeness.has_location
        ):
            logger.info(f"Turn needs clarification (completeness {completeness.score:.2f})")
            return self._clarification(analysis, trip, route, new_context, candidates)

        # Step 4: Filter and suggest
        outcome = self.filter_engine.apply(candidates, analysis, new_context)
        suggestions = RefinementAnalyzer(
            outcome.listings, thresholds=self.config.refinement
        ).generate_suggestions(text, new_context.location if new_context else None)

        # Step 5: Compose the reply
        response = await self.responder.compose(
            ResponseRequest(
                analysis=analysis,
                trip=trip,
                listings=outcome.listings,
                suggestions=tuple(suggestions),
                relaxed=outcome.relaxed,
                context=new_context,
            )
        )

        processing_time = time.time() - start_time
        logger.info(
            f"Turn processed in {processing_time:.2f}s: {len(outcome.listings)} listings, "
            f"{len(suggestions)} suggestions, response from {response.source}"
        )
        return TurnResult(
            analysis=analysis,
            trip=trip,
            route=route,
            context=new_context,
            listings=outcome.listings,
            applied_criteria=outcome.applied,
            relaxed_criteria=outcome.relaxed,
            suggestions=tuple(suggestions),
            response=response,
        )

    def reset(self) -> None:
        """Start a new conversation."""
        return self.tracker.reset()

    async def health_check(self) -> dict[str, bool]:
        """Check health of turn processing components.

        Returns:
            Health status dictionary
        """
        health = {"turn_processor": True}
        if isinstance(self.responder, LLMEnhancedResponder):
            health["llm_provider"] = await self.responder.provider.health_check()
        health["overall"] = all(health.values())
        return health
