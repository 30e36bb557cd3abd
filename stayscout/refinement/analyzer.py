"""Refinement suggestion generator.

Computes statistics over the filtered result set and proposes the follow-up
refinements that would actually narrow it: price bands, excellent ratings,
superhosts, popular amenities and dominant property types.
"""

import logging
import math
import statistics
from collections import Counter
from collections.abc import Sequence

from stayscout.listings import Listing
from stayscout.thresholds import RefinementThresholds, engine_config

from .models import (
    AmenityFrequency,
    AmenityInsights,
    PriceBand,
    PriceInsights,
    PropertyTypeInsights,
    PropertyTypeStats,
    RatingInsights,
    RefinementSuggestion,
)
from .rules import RULES_V1, RefinementRules

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}
BAND_LABELS = {
    "budget": "Budget-friendly",
    "mid-range": "Mid-range",
    "luxury": "Luxury",
}


def _money(value: float) -> str:
    return f"{value:,.0f}" if value == math.floor(value) else f"{value:,.2f}"


class RefinementAnalyzer:
    """Statistics and suggestions over one filtered result set."""

    def __init__(
        self,
        listings: Sequence[Listing],
        rules: RefinementRules = RULES_V1,
        thresholds: RefinementThresholds = engine_config.refinement,
    ) -> None:
        self.listings = list(listings)
        self.rules = rules
        self.thresholds = thresholds

    def _priority(self, count: int) -> str:
        fraction = count / len(self.listings) if self.listings else 0.0
        if fraction >= self.thresholds.high_priority_fraction:
            return "high"
        if fraction >= self.thresholds.medium_priority_fraction:
            return "medium"
        return "low"

    def analyze_prices(self) -> PriceInsights:
        prices = sorted(listing.nightly_rate for listing in self.listings)
        if not prices:
            return PriceInsights()

        n = len(prices)
        q1 = prices[min(n - 1, math.floor(n * self.thresholds.quartile_q1))]
        q3 = prices[min(n - 1, math.floor(n * self.thresholds.quartile_q3))]

        groups = {
            "budget": [p for p in prices if p <= q1],
            "mid-range": [p for p in prices if q1 < p <= q3],
            "luxury": [p for p in prices if p > q3],
        }
        bands = tuple(
            PriceBand(label=label, minimum=members[0], maximum=members[-1], count=len(members))
            for label, members in groups.items()
            if members
        )
        return PriceInsights(
            minimum=prices[0],
            maximum=prices[-1],
            median=statistics.median(prices),
            average=statistics.fmean(prices),
            q1=q1,
            q3=q3,
            bands=bands,
        )

    def analyze_ratings(self) -> RatingInsights:
        if not self.listings:
            return RatingInsights()

        t = self.thresholds
        ratings = [listing.rating for listing in self.listings]
        superhosts = sum(1 for listing in self.listings if listing.is_superhost)
        return RatingInsights(
            average=statistics.fmean(ratings),
            excellent=sum(1 for r in ratings if r >= t.excellent_rating),
            very_good=sum(1 for r in ratings if t.very_good_rating <= r < t.excellent_rating),
            good=sum(1 for r in ratings if t.good_rating <= r < t.very_good_rating),
            fair=sum(1 for r in ratings if r < t.good_rating),
            superhost_count=superhosts,
            superhost_percentage=superhosts / len(self.listings) * 100,
        )

    def analyze_amenities(self) -> AmenityInsights:
        if not self.listings:
            return AmenityInsights()

        counts: Counter[str] = Counter()
        for listing in self.listings:
            # A listing counts once per amenity even if the source repeats it
            counts.update({amenity.strip() for amenity in listing.amenities if amenity.strip()})

        popular = tuple(
            AmenityFrequency(amenity, count, count / len(self.listings) * 100)
            for amenity, count in counts.most_common(self.thresholds.max_popular_amenities)
        )
        categories = {
            category: tuple(
                a.amenity for a in popular if any(term in a.amenity.lower() for term in terms)
            )
            for category, terms in self.rules.amenity_categories.items()
        }
        return AmenityInsights(popular=popular, categories=categories)

    def analyze_property_types(self) -> PropertyTypeInsights:
        groups: dict[str, list[Listing]] = {}
        for listing in self.listings:
            groups.setdefault(listing.room_type, []).append(listing)

        types = tuple(
            PropertyTypeStats(
                type=room_type,
                count=len(members),
                percentage=len(members) / len(self.listings) * 100,
                average_price=statistics.fmean(m.nightly_rate for m in members),
                average_rating=statistics.fmean(m.rating for m in members),
            )
            for room_type, members in groups.items()
        )
        return PropertyTypeInsights(
            types=tuple(sorted(types, key=lambda t: t.count, reverse=True))
        )

    def _climate(self, text: str) -> tuple[bool, bool]:
        warm = any(place in text for place in self.rules.warm_locations)
        cold = any(place in text for place in self.rules.cold_locations)
        return warm, cold

    def _price_suggestions(self, utterance: str) -> list[RefinementSuggestion]:
        suggestions = []
        for band in self.analyze_prices().bands:
            if band.count <= self.thresholds.min_suggestion_count:
                continue
            if band.label == "luxury":
                query = f"{utterance} over ${_money(band.minimum)}/night"
                description = f"{band.count} properties from ${_money(band.minimum)}/night"
            else:
                query = f"{utterance} under ${_money(band.maximum)}/night"
                description = (
                    f"{band.count} properties from ${_money(band.minimum)} "
                    f"to ${_money(band.maximum)}/night"
                )
            suggestions.append(
                RefinementSuggestion(
                    type="price",
                    label=BAND_LABELS[band.label],
                    description=description,
                    query=query,
                    count=band.count,
                    priority=self._priority(band.count),
                )
            )
        return suggestions

    def _amenity_suggestions(self, utterance: str, lowered: str, climate_text: str) -> list[RefinementSuggestion]:
        warm, cold = self._climate(climate_text)
        popular_floor = self.thresholds.popular_amenity_fraction * 100
        suggestions = []
        for amenity in self.analyze_amenities().popular:
            if len(suggestions) >= self.thresholds.max_amenity_suggestions:
                break
            name = amenity.amenity.lower()
            if name in lowered:
                continue
            if warm and any(term in name for term in self.rules.warm_skip):
                continue
            if cold and any(term in name for term in self.rules.cold_skip):
                continue
            if any(term in name for term in self.rules.basic_amenities):
                continue
            if amenity.percentage <= popular_floor:
                continue
            suggestions.append(
                RefinementSuggestion(
                    type="amenity",
                    label=f"With {name}",
                    description=f"{amenity.count} properties have this amenity",
                    query=f"{utterance} with {name}",
                    count=amenity.count,
                    priority=self._priority(amenity.count),
                )
            )
        return suggestions

    def _property_type_suggestions(self, utterance: str, lowered: str) -> list[RefinementSuggestion]:
        types = self.analyze_property_types().types
        if len(types) <= 1:
            return []
        suggestions = []
        for stats in types:
            if len(suggestions) >= self.thresholds.max_property_type_suggestions:
                break
            if stats.count <= self.thresholds.min_suggestion_count:
                continue
            name = stats.type.lower()
            if name in lowered:
                continue
            suggestions.append(
                RefinementSuggestion(
                    type="property_type",
                    label=f"{stats.type} only",
                    description=f"{stats.count} {name} properties",
                    query=f"{utterance} {name} only",
                    count=stats.count,
                    priority=self._priority(stats.count),
                )
            )
        return suggestions

    def generate_suggestions(self, utterance: str, location: str | None = None) -> list[RefinementSuggestion]:
        """Rank the refinements worth offering for this result set.

        Args:
            utterance: The utterance that produced the result set
            location: Active search location, used for climate hints

        Returns:
            At most ``max_suggestions`` suggestions, by priority then count
        """
        if not self.listings:
            return []

        lowered = utterance.lower()
        climate_text = f"{lowered} {(location or '').lower()}"

        def already_specified(terms: tuple[str, ...]) -> bool:
            return any(term in lowered for term in terms)

        suggestions: list[RefinementSuggestion] = []
        if not already_specified(self.rules.price_keywords):
            suggestions.extend(self._price_suggestions(utterance))

        ratings = self.analyze_ratings()
        if not already_specified(self.rules.rating_keywords) and ratings.excellent > 0:
            suggestions.append(
                RefinementSuggestion(
                    type="rating",
                    label="Excellent ratings only",
                    description=f"{ratings.excellent} properties rated {self.thresholds.excellent_rating}+",
                    query=f"{utterance} with excellent reviews",
                    count=ratings.excellent,
                    priority=self._priority(ratings.excellent),
                )
            )

        if not already_specified(self.rules.superhost_keywords) and ratings.superhost_count > 0:
            suggestions.append(
                RefinementSuggestion(
                    type="host_type",
                    label="Superhosts only",
                    description=f"{ratings.superhost_count} superhost properties",
                    query=f"{utterance} superhost only",
                    count=ratings.superhost_count,
                    priority=self._priority(ratings.superhost_count),
                )
            )

        suggestions.extend(self._amenity_suggestions(utterance, lowered, climate_text))
        if not already_specified(self.rules.property_type_keywords):
            suggestions.extend(self._property_type_suggestions(utterance, lowered))

        suggestions.sort(key=lambda s: (PRIORITY_ORDER[s.priority], -s.count))
        ranked = suggestions[: self.thresholds.max_suggestions]
        logger.debug(f"Generated {len(ranked)} of {len(suggestions)} refinement suggestions")
        return ranked


def suggest_refinements(
    filtered_listings: Sequence[Listing],
    utterance: str,
    *,
    location: str | None = None,
) -> list[RefinementSuggestion]:
    """Suggest follow-up refinements for a filtered result set."""
    return RefinementAnalyzer(filtered_listings).generate_suggestions(utterance, location)
