"""Matching/filter engine: campaign discovery plus influencer and business matching."""

from marketplace.matching.cards import (
    Badge,
    BusinessMatchCard,
    CampaignCard,
    InfluencerCard,
    InfluencerSummary,
    business_match_card,
    campaign_card,
    influencer_card,
    influencer_summary,
)
from marketplace.matching.engine import MatchingEngine
from marketplace.matching.filters import BusinessMatchFilters, CampaignFilters, InfluencerFilters
from marketplace.matching.presentation import (
    badge_type,
    days_left,
    format_follower_count,
    time_left_label,
)
from marketplace.matching.scoring import (
    MatchCriteria,
    ReputationScoringStrategy,
    ScoringStrategy,
    ScoringWeights,
    WeightedScoringStrategy,
    build_strategy,
    load_scoring_weights,
)

__all__ = [
    "Badge",
    "BusinessMatchCard",
    "BusinessMatchFilters",
    "CampaignCard",
    "CampaignFilters",
    "InfluencerCard",
    "InfluencerFilters",
    "InfluencerSummary",
    "MatchCriteria",
    "MatchingEngine",
    "ReputationScoringStrategy",
    "ScoringStrategy",
    "ScoringWeights",
    "WeightedScoringStrategy",
    "badge_type",
    "build_strategy",
    "business_match_card",
    "campaign_card",
    "days_left",
    "format_follower_count",
    "influencer_card",
    "influencer_summary",
    "load_scoring_weights",
    "time_left_label",
]
