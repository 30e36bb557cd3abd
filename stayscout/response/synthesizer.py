"""Conversational response synthesis.

The rule-based responder always produces a complete reply. The LLM responder
decorates it: complex turns are sent to the configured provider for a more
personal message, and any provider failure falls back to the rule-based reply.
"""

import asyncio
import json
import logging
import re
import statistics
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import replace

from pydantic import BaseModel, Field, ValidationError

from stayscout.config import Settings, get_settings
from stayscout.listings import Listing
from stayscout.llm.base import LLMProvider
from stayscout.llm.factory import create_llm_provider
from stayscout.query.models import QueryAnalysis, TripContext
from stayscout.thresholds import EngineConfig, ResponseThresholds, engine_config

from .models import ConversationalResponse, PropertyRecommendation, ResponseRequest

logger = logging.getLogger(__name__)

ACKNOWLEDGMENTS = {
    "positive": "I'd love to help you find the perfect place! ",
    "negative": "Let me help you find something that'll work better for you. ",
    "neutral": "I'll help you find great options. ",
}
NO_MATCH_MESSAGE = "I couldn't find a clear match for that yet. "
URGENCY_NOTE = "I'll prioritize options with immediate availability. "

# Keyed by criterion name, or by the prefix before ":" for amenity/location
RELAXED_NOTES = {
    "superhost": "superhost-only stays",
    "rating": "that rating",
    "review_count": "that many reviews",
    "new_listing": "new listings",
    "price": "your price range",
    "premium": "premium-only stays",
    "room_type": "that room type",
    "property_type": "that property type",
    "amenity": "{detail}",
    "bedrooms": "that many bedrooms",
    "bathrooms": "that many bathrooms",
    "size_preference": "that size",
}

EMPTY_FOLLOW_UPS = (
    "Try a different location",
    "Expand your search criteria",
    "Search for nearby areas",
)
GENERIC_FOLLOW_UPS = (
    "Show budget options",
    "Show luxury properties",
    "Show only superhosts",
)

# (purpose, name terms, bonus)
PURPOSE_BONUSES = (
    ("business", ("workspace", "office", "desk"), 30),
    ("business", ("wifi", "internet"), 20),
    ("business", ("downtown", "center"), 15),
    ("romantic", ("private", "secluded"), 30),
    ("romantic", ("view", "ocean", "sunset"), 25),
    ("romantic", ("hot tub", "fireplace"), 20),
    ("family", ("family", "kid"), 30),
    ("family", ("pool", "playground"), 25),
    ("family", ("kitchen", "multiple bedroom"), 20),
)
# (group type, room type term, bonus)
GROUP_BONUSES = (
    ("business", "entire", 15),
    ("family", "entire", 20),
    ("solo", "private", 10),
)
# (purpose, name terms, reason)
PURPOSE_REASONS = (
    ("business", ("workspace", "office"), "dedicated workspace"),
    ("business", ("downtown", "center"), "central business location"),
    ("romantic", ("private", "secluded"), "private and intimate setting"),
    ("romantic", ("view", "ocean"), "beautiful views"),
    ("family", ("family", "kid"), "family-friendly features"),
    ("family", ("pool",), "swimming pool for the kids"),
)
BUSINESS_AMENITY_TERMS = ("workspace", "wifi", "desk")

ENHANCEMENT_SYSTEM_PROMPT = """You are a friendly short-term rental search assistant.
Reply with a single JSON object and nothing else:
{"message": "<2-3 sentence personalised reply>", "insights": ["<short bullet>", ...]}
Only mention properties and facts present in the data you are given."""


def _dollars(value: float) -> str:
    return f"${value:,.0f}"


def relevance_score(listing: Listing, trip: TripContext) -> float:
    """Score a listing for the trip: rating, purpose and group fit, host, reviews."""
    score = listing.rating * 20
    name = listing.name.lower()
    room_type = listing.room_type.lower()

    for purpose, terms, bonus in PURPOSE_BONUSES:
        if trip.purpose == purpose and any(term in name for term in terms):
            score += bonus
    for group_type, term, bonus in GROUP_BONUSES:
        if trip.group_type == group_type and term in room_type:
            score += bonus

    if listing.is_superhost:
        score += 15
    if listing.reviews_count > 50:
        score += 10
    elif listing.reviews_count > 20:
        score += 5
    return score


def recommendation_reason(listing: Listing, trip: TripContext) -> str:
    name = listing.name.lower()
    reasons = [
        reason
        for purpose, terms, reason in PURPOSE_REASONS
        if trip.purpose == purpose and any(term in name for term in terms)
    ]
    if listing.is_superhost:
        reasons.append("superhost with excellent reviews")
    if listing.rating >= 4.8:
        reasons.append("outstanding guest ratings")
    if listing.reviews_count > 100:
        reasons.append("well-established with many happy guests")

    if not reasons:
        return f"Highly rated property ({listing.rating}/5) with good reviews"
    if len(reasons) == 1:
        return f"Perfect for {reasons[0]}"
    if len(reasons) == 2:
        return f"Great choice for {reasons[0]} and {reasons[1]}"
    return f"Excellent option featuring {reasons[0]}, {reasons[1]}, and {reasons[2]}"


def should_enhance(
    analysis: QueryAnalysis,
    thresholds: ResponseThresholds = engine_config.response,
) -> bool:
    """Whether a turn is complex enough to be worth an LLM call."""
    return (
        len(analysis.intents) > thresholds.max_intents
        or analysis.sentiment.label == "negative"
        or len(analysis.keywords) > thresholds.max_keywords
        or len(analysis.utterance) > thresholds.max_utterance_length
    )


class ResponseStrategy(ABC):
    """Composes the user-facing reply for a turn."""

    @abstractmethod
    async def compose(self, request: ResponseRequest) -> ConversationalResponse:
        """Compose a response.

        Args:
            request: Analysis, trip context, results and suggestions of the turn

        Returns:
            The conversational response
        """
        pass


class RuleBasedResponder(ResponseStrategy):
    """Deterministic responder built from the turn's analysis and results."""

    def __init__(self, config: EngineConfig = engine_config) -> None:
        self.config = config

    async def compose(self, request: ResponseRequest) -> ConversationalResponse:
        return self.compose_now(request)

    def compose_now(self, request: ResponseRequest) -> ConversationalResponse:
        """Synchronous form of :meth:`compose`."""
        analysis = request.analysis
        clarifying = None
        if (
            analysis.completeness.score < self.config.completeness.good_enough
            and analysis.suggestions
        ):
            clarifying = analysis.suggestions[0]

        return ConversationalResponse(
            message=self.build_message(request, clarifying),
            clarifying_question=clarifying,
            follow_ups=self.build_follow_ups(request),
            insights=self.build_insights(request.listings, request.trip),
            recommendations=self.build_recommendations(request.listings, request.trip),
            source="rules",
        )

    def build_message(self, request: ResponseRequest, clarifying: str | None) -> str:
        analysis = request.analysis
        trip = request.trip
        message = ACKNOWLEDGMENTS.get(analysis.sentiment.label, ACKNOWLEDGMENTS["neutral"])

        if not request.listings:
            message += NO_MATCH_MESSAGE
        else:
            if trip.purpose and trip.group_type not in ("unknown", "solo"):
                message += f"For your {trip.purpose} {trip.group_type} trip, "
            elif trip.purpose:
                message += f"For your {trip.purpose} trip, "
            elif trip.group_type != "unknown":
                message += f"For your {trip.group_type} trip, "
            count = len(request.listings)
            noun = "property" if count == 1 else "properties"
            verb = "matches" if count == 1 else "match"
            message += f"I found {count} {noun} that {verb} your criteria. "

            relaxed = self._relaxed_phrases(request.relaxed)
            if relaxed:
                message += (
                    f"Nothing matched {' or '.join(relaxed)} exactly, "
                    "so the closest options are listed first. "
                )

        if clarifying:
            message += f"{clarifying} "
        if trip.urgency == "urgent":
            message += URGENCY_NOTE
        return message.strip()

    @staticmethod
    def _relaxed_phrases(relaxed: Sequence[str]) -> list[str]:
        phrases = []
        for name in relaxed:
            key, _, detail = name.partition(":")
            template = RELAXED_NOTES.get(key)
            if template is None:
                continue
            phrase = template.format(detail=detail)
            if phrase not in phrases:
                phrases.append(phrase)
        return phrases

    def build_follow_ups(self, request: ResponseRequest) -> tuple[str, ...]:
        limit = self.config.response.max_follow_ups
        if not request.listings:
            return EMPTY_FOLLOW_UPS[:limit]
        labels = list(dict.fromkeys(s.label for s in request.suggestions))
        if not labels:
            return GENERIC_FOLLOW_UPS[:limit]
        return tuple(labels[:limit])

    def build_insights(self, listings: Sequence[Listing], trip: TripContext) -> tuple[str, ...]:
        if not listings:
            return ()

        prices = [listing.nightly_rate for listing in listings]
        insights = [
            f"Price range: {_dollars(min(prices))}-{_dollars(max(prices))}/night "
            f"(avg: {_dollars(statistics.fmean(prices))})"
        ]

        average_rating = statistics.fmean(listing.rating for listing in listings)
        if average_rating >= 4.5:
            insights.append(f"Excellent quality options - average rating {average_rating:.1f}/5")

        superhosts = sum(1 for listing in listings if listing.is_superhost)
        if superhosts:
            if superhosts == 1:
                insights.append("1 property is hosted by a Superhost")
            else:
                insights.append(f"{superhosts} properties are hosted by Superhosts")

        if trip.purpose == "business":
            business = sum(
                1
                for listing in listings
                if any(term in listing.name.lower() for term in BUSINESS_AMENITY_TERMS)
            )
            if business:
                noun, verb = ("property", "mentions") if business == 1 else ("properties", "mention")
                insights.append(f"{business} {noun} {verb} business amenities")

        return tuple(insights[: self.config.response.max_insights])

    def build_recommendations(
        self, listings: Sequence[Listing], trip: TripContext
    ) -> tuple[PropertyRecommendation, ...]:
        ranked = sorted(listings, key=lambda listing: relevance_score(listing, trip), reverse=True)
        return tuple(
            PropertyRecommendation(
                listing_id=listing.id,
                name=listing.name,
                reason=recommendation_reason(listing, trip),
                score=relevance_score(listing, trip),
            )
            for listing in ranked[: self.config.response.max_recommendations]
        )


class EnhancedReply(BaseModel):
    """Shape the LLM is asked to return."""

    message: str = Field(min_length=1)
    insights: list[str] = Field(default_factory=list)


def parse_enhanced_reply(content: str) -> EnhancedReply:
    """Parse the JSON object in an LLM reply, tolerating surrounding prose.

    Raises:
        ValueError: If no valid JSON object is present
    """
    match = re.search(r"\{.*\}", content, re.DOTALL)
    if not match:
        raise ValueError("LLM reply contained no JSON object")
    try:
        return EnhancedReply.model_validate_json(match.group(0))
    except ValidationError as e:
        raise ValueError(f"LLM reply did not match the expected shape: {e}") from e


class LLMEnhancedResponder(ResponseStrategy):
    """Decorates another responder with an optional LLM-written message."""

    def __init__(
        self,
        inner: ResponseStrategy,
        provider: LLMProvider,
        timeout: float = 8.0,
        config: EngineConfig = engine_config,
    ) -> None:
        self.inner = inner
        self.provider = provider
        self.timeout = timeout
        self.config = config

    def build_prompt(self, request: ResponseRequest, base: ConversationalResponse) -> str:
        analysis = request.analysis
        top = [
            {
                "name": listing.name,
                "nightlyRate": listing.nightly_rate,
                "rating": listing.rating,
                "reviews": listing.reviews_count,
                "superhost": listing.is_superhost,
                "roomType": listing.room_type,
            }
            for listing in request.listings[:5]
        ]
        payload = {
            "query": analysis.utterance,
            "sentiment": analysis.sentiment.label,
            "intents": list(analysis.intents),
            "trip": request.trip.to_dict(),
            "context": request.context.to_dict() if request.context else None,
            "resultCount": len(request.listings),
            "topListings": top,
            "relaxedCriteria": list(request.relaxed),
            "draftMessage": base.message,
        }
        return (
            "Rewrite the draft reply for this rental search so it speaks to the "
            "traveller's situation.\n\n"
            f"{json.dumps(payload, indent=2)}"
        )

    async def compose(self, request: ResponseRequest) -> ConversationalResponse:
        base = await self.inner.compose(request)
        if not should_enhance(request.analysis, self.config.response):
            return base

        try:
            result = await asyncio.wait_for(
                self.provider.generate_response(
                    self.build_prompt(request, base),
                    system=ENHANCEMENT_SYSTEM_PROMPT,
                ),
                timeout=self.timeout,
            )
            if not result.success:
                raise RuntimeError(result.error or "provider reported failure")
            reply = parse_enhanced_reply(result.content)
        except asyncio.TimeoutError:
            logger.warning(f"LLM enhancement timed out after {self.timeout}s, using rule-based reply")
            return base
        except Exception as e:
            logger.warning(f"LLM enhancement failed, using rule-based reply: {e}")
            return base

        insights = tuple(reply.insights[: self.config.response.max_insights]) or base.insights
        logger.info(f"Enhanced response with {result.model}")
        return replace(base, message=reply.message.strip(), insights=insights, source="llm")


def create_responder(settings: Settings | None = None) -> ResponseStrategy:
    """Build the responder selected by configuration.

    Raises:
        ValueError: If enhancement is enabled but the provider is misconfigured
    """
    settings = settings or get_settings()
    responder: ResponseStrategy = RuleBasedResponder()
    if not settings.llm_enhancement_enabled:
        return responder

    provider = create_llm_provider(settings.llm_provider, settings=settings)
    logger.info(f"LLM enhancement enabled with provider {settings.llm_provider.value}")
    return LLMEnhancedResponder(responder, provider, timeout=settings.llm_timeout_seconds)
