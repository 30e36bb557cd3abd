"""Adaptive filtering engine: a left fold over criteria that never collapses."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from stayscout.context.models import SearchContext
from stayscout.listings import Listing
from stayscout.query.models import QueryAnalysis
from stayscout.thresholds import EngineConfig, engine_config

from .criteria import (
    AmenityCriterion,
    BathroomCriterion,
    BedroomCriterion,
    Criterion,
    ExplicitSortCriterion,
    LocationFeatureCriterion,
    NewListingCriterion,
    Outcome,
    PremiumCriterion,
    PriceCriterion,
    PriceOrderCriterion,
    PropertyTypeCriterion,
    RatingCriterion,
    ReviewCountCriterion,
    RoomTypeCriterion,
    SizePreferenceCriterion,
    SuperhostCriterion,
    large_group_bedrooms,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterOutcome:
    """Filtered listings and what happened to each criterion."""

    listings: tuple[Listing, ...]
    applied: tuple[str, ...] = ()
    relaxed: tuple[str, ...] = ()
    ordered: tuple[str, ...] = ()


def _group_size(analysis: QueryAnalysis, context: SearchContext | None) -> int | None:
    total = analysis.criteria.guests.total_guests
    if total:
        return total
    if context is not None and context.guests_specified:
        return context.total_guests
    return None


def build_criteria(
    analysis: QueryAnalysis,
    context: SearchContext | None = None,
    config: EngineConfig = engine_config,
) -> list[Criterion]:
    """Translate an analysis (and the active context) into fold order."""
    criteria = analysis.criteria
    retention = config.retention
    ratings = config.ratings
    steps: list[Criterion] = []

    if criteria.superhost == "only":
        steps.append(SuperhostCriterion(retention.superhost_only))
    elif criteria.superhost == "preferred":
        steps.append(SuperhostCriterion(None))

    if criteria.rating is not None:
        floor = criteria.rating.minimum
        if criteria.rating.numeric:
            floor = max(ratings.numeric_minimum, floor - ratings.numeric_leniency)
        steps.append(RatingCriterion(floor, retention.rating))

    if criteria.min_reviews is not None and criteria.min_reviews > 0:
        steps.append(ReviewCountCriterion(criteria.min_reviews, retention.review_count))
    elif criteria.new_listing:
        steps.append(NewListingCriterion(ratings.new_listing_max_reviews, retention.new_listing))

    nights = criteria.nights or (context.nights if context else None) or config.pricing.default_nights
    minimum = maximum = None
    if criteria.price is not None:
        minimum, maximum = criteria.price.nightly_bounds(nights)
    elif context is not None:
        minimum, maximum = context.min_price, context.max_price
    if minimum is not None and maximum is not None and minimum > maximum:
        minimum = None
    if minimum is not None or maximum is not None:
        steps.append(PriceCriterion(minimum, maximum, retention.price))

    if criteria.premium_only:
        steps.append(PremiumCriterion(config.pricing.premium_floor, retention.premium))
    if criteria.room_type:
        steps.append(RoomTypeCriterion(criteria.room_type, retention.room_type))
    if criteria.property_type:
        steps.append(PropertyTypeCriterion(criteria.property_type, retention.property_type))
    for amenity in criteria.amenities:
        steps.append(AmenityCriterion.for_name(amenity, retention.amenity))

    bedrooms = criteria.bedrooms if criteria.bedrooms and criteria.bedrooms > 0 else None
    guests = _group_size(analysis, context)
    if bedrooms is None and guests and guests >= config.groups.large_group_size:
        bedrooms = large_group_bedrooms(
            guests,
            config.groups.guests_per_bedroom,
            config.groups.min_large_group_bedrooms,
        )
    if bedrooms:
        steps.append(BedroomCriterion(bedrooms, retention.bedrooms))

    if criteria.bathrooms and criteria.bathrooms > 0:
        steps.append(BathroomCriterion(criteria.bathrooms, retention.bathrooms))
    if criteria.size_preference:
        steps.append(SizePreferenceCriterion(criteria.size_preference, retention.size_preference))
    if criteria.location_feature:
        steps.append(LocationFeatureCriterion(criteria.location_feature))

    if criteria.relative_price == "cheaper" or (
        criteria.relative_price is None and criteria.budget_tier == "budget"
    ):
        steps.append(PriceOrderCriterion("ascending", "price_order:cheaper"))
    elif criteria.relative_price == "pricier" or (
        criteria.relative_price is None and criteria.budget_tier == "luxury"
    ):
        steps.append(PriceOrderCriterion("descending", "price_order:pricier"))
    elif criteria.budget_tier == "mid-range":
        steps.append(PriceOrderCriterion("middle", "price_order:mid-range"))

    if criteria.sort_order:
        steps.append(ExplicitSortCriterion(criteria.sort_order))
    return steps


class FilterEngine:
    """Apply criteria as a left fold, iterated to a fixed point.

    Each pass can only shrink the set, so iteration stops once a pass leaves
    membership and order unchanged. The result for a non-empty input is never
    empty.
    """

    def __init__(self, config: EngineConfig = engine_config) -> None:
        self.config = config

    def _fold(
        self, listings: list[Listing], criteria: Sequence[Criterion]
    ) -> tuple[list[Listing], dict[str, Outcome]]:
        current = listings
        outcomes: dict[str, Outcome] = {}
        for criterion in criteria:
            result, outcome = criterion.apply(current)
            logger.debug(
                f"Criterion {criterion.name}: {outcome.value} ({len(current)} -> {len(result)})"
            )
            current = result
            outcomes[criterion.name] = outcome
        return current, outcomes

    def apply(
        self,
        listings: Sequence[Listing],
        analysis: QueryAnalysis,
        context: SearchContext | None = None,
    ) -> FilterOutcome:
        """Filter and reorder ``listings`` for ``analysis``.

        Args:
            listings: Candidate listings; not modified
            analysis: Analysis of the current turn
            context: Active search context, supplying price bounds and group
                size the utterance itself does not repeat

        Returns:
            FilterOutcome with the listings and per-criterion outcomes
        """
        current = list(listings)
        criteria = build_criteria(analysis, context, self.config)
        if not current or not criteria:
            return FilterOutcome(listings=tuple(current))

        outcomes: dict[str, Outcome] = {}
        for _ in range(len(current) + 2):
            result, outcomes = self._fold(current, criteria)
            if len(result) == len(current) and all(a is b for a, b in zip(result, current)):
                break
            current = result

        outcome = FilterOutcome(
            listings=tuple(current),
            applied=tuple(n for n, o in outcomes.items() if o is Outcome.APPLIED),
            relaxed=tuple(n for n, o in outcomes.items() if o is Outcome.RELAXED),
            ordered=tuple(n for n, o in outcomes.items() if o is Outcome.ORDERED),
        )
        logger.info(
            f"Filtered {len(listings)} -> {len(outcome.listings)} listings "
            f"(applied={list(outcome.applied)}, relaxed={list(outcome.relaxed)})"
        )
        return outcome


def filter_listings(
    listings: Sequence[Listing],
    analysis: QueryAnalysis,
    context: SearchContext | None = None,
) -> list[Listing]:
    """Filter and reorder listings; never returns an empty list for non-empty input."""
    return list(FilterEngine().apply(listings, analysis, context).listings)
