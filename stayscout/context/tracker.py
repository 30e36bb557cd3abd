"""Search context tracker: builds and merges the context across turns."""

import asyncio
import logging
from dataclasses import replace
from datetime import date, timedelta
from enum import Enum

from stayscout.query.models import QueryAnalysis
from stayscout.thresholds import EngineConfig, engine_config

from .geocoding import LocationValidator
from .models import SearchContext

logger = logging.getLogger(__name__)

# Confidence recorded when the validator failed and the raw location was kept
UNVALIDATED_CONFIDENCE = 0.5


class ContextState(str, Enum):
    """Tracker states."""

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"


def _guest_fields(analysis: QueryAnalysis, prior: SearchContext | None) -> dict:
    guests = analysis.criteria.guests
    if not guests.is_specified:
        return {}

    fields: dict = {"guests_specified": True}
    if guests.adults is not None:
        fields["adults"] = guests.adults
    if guests.children is not None:
        fields["children"] = guests.children
    if guests.adults is None and guests.total is not None:
        # A stated party size replaces the whole party
        children = guests.children
        if children is None:
            children = prior.children if prior else 0
        children = max(min(children, guests.total - 1), 0)
        fields["adults"] = max(guests.total - children, 1)
        fields["children"] = children
    return fields


def _date_fields(analysis: QueryAnalysis, prior: SearchContext | None) -> dict:
    criteria = analysis.criteria
    fields: dict = {}
    if criteria.nights is not None:
        fields["nights"] = criteria.nights
    if criteria.checkin is None:
        return fields

    fields["checkin"] = criteria.checkin
    checkout = criteria.checkout
    nights = criteria.nights or (prior.nights if prior else None)
    if checkout is None and nights:
        checkout = (date.fromisoformat(criteria.checkin) + timedelta(days=nights)).isoformat()
    if checkout is None and prior is not None and prior.checkout and prior.checkout > criteria.checkin:
        checkout = prior.checkout
    fields["checkout"] = checkout
    return fields


def _price_fields(
    analysis: QueryAnalysis,
    prior: SearchContext | None,
    nights: int | None,
    reference_price: float | None,
    config: EngineConfig,
) -> dict:
    """Explicit price bounds win; otherwise apply a relative adjustment.

    A new bound that crosses the prior opposite bound clears it.
    """
    criteria = analysis.criteria
    pricing = config.pricing
    fields: dict = {}
    prior_min = prior.min_price if prior else None
    current_max = prior.max_price if prior else None

    if criteria.price is not None:
        minimum, maximum = criteria.price.nightly_bounds(nights or pricing.default_nights)
        if minimum is not None:
            fields["min_price"] = minimum
            if maximum is None and current_max is not None and current_max < minimum:
                fields["max_price"] = None
        if maximum is not None:
            fields["max_price"] = maximum
            if minimum is None and prior_min is not None and prior_min > maximum:
                fields["min_price"] = None
        return fields

    if criteria.relative_price == "cheaper":
        if current_max is not None:
            fields["max_price"] = round(current_max * pricing.cheaper_factor, 2)
        elif reference_price:
            fields["max_price"] = round(reference_price * pricing.cheaper_factor, 2)
        else:
            fields["max_price"] = pricing.budget_ceiling
        if prior_min is not None and prior_min > fields["max_price"]:
            fields["min_price"] = None
    elif criteria.relative_price == "pricier":
        if current_max is not None:
            fields["max_price"] = round(current_max * pricing.pricier_factor, 2)
        elif reference_price:
            fields["min_price"] = round(reference_price, 2)
    return fields


def start_context(
    analysis: QueryAnalysis,
    *,
    reference_price: float | None = None,
    config: EngineConfig = engine_config,
) -> SearchContext | None:
    """Build the first context of a conversation.

    Returns None unless the turn names a place.
    """
    if not analysis.entities.places:
        return None

    fields = {"location": analysis.entities.places[0]}
    fields.update(_guest_fields(analysis, None))
    fields.update(_date_fields(analysis, None))
    fields.update(
        _price_fields(analysis, None, fields.get("nights"), reference_price, config)
    )
    context = SearchContext(**fields)
    logger.info(f"Started search context for {context.location}")
    return context


def merge_context(
    prior: SearchContext | None,
    analysis: QueryAnalysis,
    *,
    reference_price: float | None = None,
    config: EngineConfig = engine_config,
) -> SearchContext | None:
    """Merge one turn's explicit signals into the prior context.

    Fields without a new explicit signal keep their prior value, so merging an
    analysis that carries no signal returns a context equal to ``prior``.

    Args:
        prior: Context from earlier turns, or None
        analysis: Analysis of the current turn
        reference_price: Median nightly price of the current results, used
            when "cheaper" arrives without an existing ceiling
        config: Engine thresholds

    Returns:
        The merged context, or None while no location is known
    """
    if prior is None:
        return start_context(analysis, reference_price=reference_price, config=config)

    fields: dict = {}
    if analysis.entities.places:
        location = analysis.entities.places[0]
        if location != prior.location:
            fields["location"] = location
            fields["location_confidence"] = None
    fields.update(_guest_fields(analysis, prior))
    fields.update(_date_fields(analysis, prior))
    nights = fields.get("nights", prior.nights)
    fields.update(_price_fields(analysis, prior, nights, reference_price, config))

    if not fields:
        return prior
    merged = replace(prior, **fields)
    if merged != prior:
        logger.debug(f"Merged context fields {sorted(fields)}")
    return merged


class SearchContextTracker:
    """State machine over the search context.

    ``UNINITIALIZED`` until a turn names a place, then ``ACTIVE`` until
    :meth:`reset`. The tracker holds no conversation memory; callers pass the
    prior context in and keep the returned one.
    """

    def __init__(
        self,
        config: EngineConfig = engine_config,
        validator: LocationValidator | None = None,
        validation_timeout: float = 3.0,
    ) -> None:
        self.config = config
        self.validator = validator
        self.validation_timeout = validation_timeout

    @staticmethod
    def state_of(context: SearchContext | None) -> ContextState:
        return ContextState.UNINITIALIZED if context is None else ContextState.ACTIVE

    def advance(
        self,
        prior: SearchContext | None,
        analysis: QueryAnalysis,
        reference_price: float | None = None,
    ) -> SearchContext | None:
        return merge_context(
            prior, analysis, reference_price=reference_price, config=self.config
        )

    async def advance_validated(
        self,
        prior: SearchContext | None,
        analysis: QueryAnalysis,
        reference_price: float | None = None,
    ) -> SearchContext | None:
        """Advance, then validate a newly named location.

        Validator errors and timeouts keep the raw location with a lower
        confidence.
        """
        context = self.advance(prior, analysis, reference_price)
        if (
            context is None
            or self.validator is None
            or (prior is not None and context.location == prior.location)
        ):
            return context

        try:
            validation = await asyncio.wait_for(
                self.validator.validate(context.location),
                timeout=self.validation_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Location validation timed out after {self.validation_timeout}s, "
                f"keeping {context.location!r}"
            )
            return replace(context, location_confidence=UNVALIDATED_CONFIDENCE)
        except Exception as e:
            logger.warning(f"Location validation failed, keeping {context.location!r}: {e}")
            return replace(context, location_confidence=UNVALIDATED_CONFIDENCE)

        if not validation.valid:
            logger.info(f"Location {context.location!r} could not be validated")
            return replace(context, location_confidence=validation.confidence)
        return replace(
            context,
            location=validation.location,
            location_confidence=validation.confidence,
        )

    def reset(self) -> None:
        """Start a new conversation; the context returns to ``UNINITIALIZED``."""
        logger.info("Search context reset")
        return None
