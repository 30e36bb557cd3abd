"""Engine thresholds: single source for every tunable number in the core."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RetentionThresholds:
    """Minimum fraction of the current set a hard filter must keep.

    0.0 means "any non-empty result". Criteria that are sort-only never
    filter and have no entry here.
    """
    superhost_only: float = 0.0
    rating: float = 0.0
    review_count: float = 0.0
    new_listing: float = 0.10
    price: float = 0.0
    premium: float = 0.0
    room_type: float = 0.0
    property_type: float = 0.10
    amenity: float = 0.40
    bedrooms: float = 0.20
    bathrooms: float = 0.20
    size_preference: float = 0.20


@dataclass(frozen=True)
class RatingRules:
    """How rating phrases map to numeric floors."""
    high_rated_floor: float = 4.5
    excellent_floor: float = 4.8
    numeric_leniency: float = 0.5   # "4.5+ rating" filters at 4.0
    numeric_minimum: float = 3.0
    well_reviewed_count: int = 20
    new_listing_max_reviews: int = 5


@dataclass(frozen=True)
class PricingDefaults:
    """Price interpretation defaults."""
    default_nights: int = 5            # total budget / nights when unknown
    cheaper_factor: float = 0.8        # "show cheaper" lowers the ceiling by 20%
    pricier_factor: float = 1.25
    budget_ceiling: float = 150.0      # "cheaper" with nothing to anchor on
    premium_floor: float = 200.0       # "premium only"


@dataclass(frozen=True)
class GroupRules:
    """Party size heuristics."""
    large_group_size: int = 4
    guests_per_bedroom: int = 2
    min_large_group_bedrooms: int = 2


@dataclass(frozen=True)
class CompletenessThresholds:
    """When a turn is complete enough to search or to stop asking."""
    clarify_below: float = 0.5        # short-circuit to a question below this
    good_enough: float = 0.75         # stop appending clarifying questions at this
    max_clarifying: int = 3


@dataclass(frozen=True)
class RefinementThresholds:
    """Statistics used by the refinement suggestion generator."""
    quartile_q1: float = 0.25
    quartile_q3: float = 0.75
    excellent_rating: float = 4.8
    very_good_rating: float = 4.5
    good_rating: float = 4.0
    popular_amenity_fraction: float = 0.40
    high_priority_fraction: float = 0.25
    medium_priority_fraction: float = 0.10
    min_suggestion_count: int = 2
    max_popular_amenities: int = 12
    max_amenity_suggestions: int = 4
    max_property_type_suggestions: int = 3
    max_suggestions: int = 6


@dataclass(frozen=True)
class ResponseThresholds:
    """When to escalate a turn to the LLM collaborator."""
    max_intents: int = 2
    max_keywords: int = 8
    max_utterance_length: int = 100
    max_follow_ups: int = 4
    max_insights: int = 3
    max_recommendations: int = 3


@dataclass(frozen=True)
class EngineConfig:
    """Top-level config aggregating all sub-configs."""
    retention: RetentionThresholds = field(default_factory=RetentionThresholds)
    ratings: RatingRules = field(default_factory=RatingRules)
    pricing: PricingDefaults = field(default_factory=PricingDefaults)
    groups: GroupRules = field(default_factory=GroupRules)
    completeness: CompletenessThresholds = field(default_factory=CompletenessThresholds)
    refinement: RefinementThresholds = field(default_factory=RefinementThresholds)
    response: ResponseThresholds = field(default_factory=ResponseThresholds)


# Singleton, import this everywhere
engine_config = EngineConfig()
