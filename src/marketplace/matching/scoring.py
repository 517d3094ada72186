"""Pluggable influencer scoring for business-side discovery.

A :class:`ScoringStrategy` maps an influencer profile and the business's
match criteria to an integer score in ``0..100``.  Two strategies ship:

- :class:`WeightedScoringStrategy` (default): weighted sum of niche,
  audience, follower-fit, engagement, location and platform sub-scores, with
  weights loaded from YAML.
- :class:`ReputationScoringStrategy`: a profile-only heuristic (base 60 plus
  follower, engagement, completed-campaign and rating boosts, capped at 99).
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import structlog
import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field, ValidationError, model_validator

from marketplace.domain.models import InfluencerProfile

logger = structlog.get_logger()

DEFAULT_WEIGHTS_PATH = Path("config/scoring_weights.yaml")

NEUTRAL = 0.5
DEFAULT_MAX_FOLLOWERS = 1_000_000


class MatchCriteria(BaseModel):
    """What a business is looking for, merged from its preferences and request filters."""

    niches: list[str] = Field(default_factory=list)
    platforms: list[str] = Field(default_factory=list)
    min_followers: int | None = None
    max_followers: int | None = None
    min_engagement_rate: float = 0
    locations: list[str] = Field(default_factory=list)
    age_ranges: list[str] = Field(default_factory=list)
    genders: list[str] = Field(default_factory=list)


class ScoringWeights(BaseModel):
    """Relative importance of each sub-score; normalized by their sum."""

    niche: float = Field(default=0.30, ge=0)
    audience: float = Field(default=0.25, ge=0)
    follower_count: float = Field(default=0.15, ge=0)
    engagement: float = Field(default=0.15, ge=0)
    location: float = Field(default=0.10, ge=0)
    platform: float = Field(default=0.05, ge=0)

    @model_validator(mode="after")
    def total_must_be_positive(self) -> ScoringWeights:
        if self.total <= 0:
            raise ValueError("at least one scoring weight must be positive")
        return self

    @property
    def total(self) -> float:
        return (
            self.niche
            + self.audience
            + self.follower_count
            + self.engagement
            + self.location
            + self.platform
        )


def load_scoring_weights(path: Path = DEFAULT_WEIGHTS_PATH) -> ScoringWeights:
    """Load and validate scoring weights from a YAML file.

    The file holds either the six weights at top level or under a
    ``weights:`` key.

    Args:
        path: Path to the YAML config file.

    Returns:
        Validated weights. Falls back to defaults if the file is missing,
        empty, or contains invalid YAML or invalid weights.
    """
    if not path.exists():
        return ScoringWeights()

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError:
        logger.warning("scoring_weights_invalid_yaml", path=str(path))
        return ScoringWeights()

    if raw is None:
        return ScoringWeights()

    if isinstance(raw, dict) and "weights" in raw:
        raw = raw["weights"]

    try:
        return ScoringWeights.model_validate(raw)
    except ValidationError as exc:
        logger.warning("scoring_weights_invalid", path=str(path), errors=exc.errors())
        return ScoringWeights()


class ScoringStrategy(Protocol):
    """Scores how well an influencer fits a business's criteria."""

    name: str

    def score(self, profile: InfluencerProfile, criteria: MatchCriteria) -> int: ...

    def breakdown(
        self, profile: InfluencerProfile, criteria: MatchCriteria
    ) -> dict[str, int]: ...


def _influencer_niches(profile: InfluencerProfile) -> set[str]:
    niches = {profile.primary_link.niche}
    niches.update(c.strip().lower() for c in profile.content_info.categories if c.strip())
    return niches


def _influencer_platforms(profile: InfluencerProfile) -> set[str]:
    platforms = {profile.primary_link.platform.value}
    if profile.secondary_link is not None:
        platforms.add(profile.secondary_link.platform.value)
    return platforms


class WeightedScoringStrategy:
    """Weighted sum of six sub-scores, each in ``0..1``, scaled to ``0..100``.

    A sub-score with no criteria to compare against is neutral (0.5).
    """

    name = "weighted"

    def __init__(self, weights: ScoringWeights | None = None) -> None:
        self.weights = weights or ScoringWeights()

    def sub_scores(self, profile: InfluencerProfile, criteria: MatchCriteria) -> dict[str, float]:
        return {
            "niche": self.niche_score(profile, criteria),
            "audience": self.audience_score(profile, criteria),
            "followerCount": self.follower_score(profile, criteria),
            "engagement": self.engagement_score(profile, criteria),
            "location": self.location_score(profile, criteria),
            "platform": self.platform_score(profile, criteria),
        }

    def score(self, profile: InfluencerProfile, criteria: MatchCriteria) -> int:
        w = self.weights
        parts = self.sub_scores(profile, criteria)
        total = (
            parts["niche"] * w.niche
            + parts["audience"] * w.audience
            + parts["followerCount"] * w.follower_count
            + parts["engagement"] * w.engagement
            + parts["location"] * w.location
            + parts["platform"] * w.platform
        )
        return max(0, min(100, round(total / w.total * 100)))

    def breakdown(self, profile: InfluencerProfile, criteria: MatchCriteria) -> dict[str, int]:
        """Each unweighted sub-score scaled to ``0..100``."""
        return {
            factor: round(value * 100)
            for factor, value in self.sub_scores(profile, criteria).items()
        }

    @staticmethod
    def niche_score(profile: InfluencerProfile, criteria: MatchCriteria) -> float:
        wanted = {n.strip().lower() for n in criteria.niches if n.strip()}
        if not wanted:
            return NEUTRAL
        have = _influencer_niches(profile)
        overlap = len(wanted & have)
        if overlap == 0:
            return 0.0
        return min(overlap / max(len(wanted), len(have)) + 0.2, 1.0)

    @staticmethod
    def audience_score(profile: InfluencerProfile, criteria: MatchCriteria) -> float:
        info = profile.content_info
        score = 0.0
        factors = 0

        if criteria.age_ranges and info.primary_age_range:
            score += 1.0 if info.primary_age_range in criteria.age_ranges else 0.0
            factors += 1

        if criteria.genders and info.gender_split:
            split = info.gender_split.lower()
            score += 1.0 if any(g.lower() in split for g in criteria.genders) else 0.0
            factors += 1

        return score / factors if factors else NEUTRAL

    @staticmethod
    def follower_score(profile: InfluencerProfile, criteria: MatchCriteria) -> float:
        if not criteria.min_followers and not criteria.max_followers:
            return NEUTRAL

        followers = profile.primary_link.follower_count
        low = criteria.min_followers or 0
        high = criteria.max_followers or DEFAULT_MAX_FOLLOWERS

        if low <= followers <= high:
            if high == low:
                return 1.0
            # The middle of the requested range scores highest.
            position = (followers - low) / (high - low)
            return 1.0 - abs(position - 0.5)
        if followers < low:
            return max(0.0, 1.0 - (low - followers) / low)
        return max(0.0, 1.0 - (followers - high) / high)

    @staticmethod
    def engagement_score(profile: InfluencerProfile, criteria: MatchCriteria) -> float:
        floor = criteria.min_engagement_rate
        rate = profile.content_info.engagement_rate
        if rate >= floor:
            return min(0.7 + min((rate - floor) / 10, 0.3), 1.0)
        return max(0.0, 0.7 - (floor - rate) / floor)

    @staticmethod
    def location_score(profile: InfluencerProfile, criteria: MatchCriteria) -> float:
        wanted = [loc.strip().lower() for loc in criteria.locations if loc.strip()]
        if not wanted:
            return NEUTRAL
        location = (profile.content_info.primary_location or "").strip().lower()
        if not location:
            return 0.3
        if any(w in location or location in w for w in wanted):
            return 1.0
        return 0.3

    @staticmethod
    def platform_score(profile: InfluencerProfile, criteria: MatchCriteria) -> float:
        wanted = {p.lower() for p in criteria.platforms}
        if not wanted:
            return NEUTRAL
        overlap = len(wanted & _influencer_platforms(profile)) / len(wanted)
        bonus = 0.2 if profile.primary_link.platform.value in wanted else 0.0
        return min(overlap + bonus, 1.0)


# (exclusive lower bound, boost), highest tier first.
FOLLOWER_BOOSTS = ((100_000, 20), (50_000, 15), (10_000, 10), (1_000, 5))
ENGAGEMENT_BOOSTS = ((5.0, 15), (3.0, 10), (1.0, 5))
COMPLETED_BOOSTS = ((10, 10), (5, 5))


def _boost(value: float, tiers: tuple[tuple[float, int], ...]) -> int:
    for threshold, boost in tiers:
        if value > threshold:
            return boost
    return 0


class ReputationScoringStrategy:
    """Profile-only heuristic that ignores the business's criteria."""

    name = "reputation"

    def score(self, profile: InfluencerProfile, criteria: MatchCriteria) -> int:
        return min(sum(self.breakdown(profile, criteria).values()), 99)

    def breakdown(self, profile: InfluencerProfile, criteria: MatchCriteria) -> dict[str, int]:
        """The base score and each boost, before the cap."""
        rating = profile.stats.average_rating
        return {
            "base": 60,
            "followerCount": _boost(profile.primary_link.follower_count, FOLLOWER_BOOSTS),
            "engagement": _boost(profile.content_info.engagement_rate, ENGAGEMENT_BOOSTS),
            "completedCampaigns": _boost(profile.stats.completed_campaigns, COMPLETED_BOOSTS),
            "rating": 10 if rating >= 4.5 else 5 if rating >= 4 else 0,
        }


STRATEGIES: dict[str, type[WeightedScoringStrategy] | type[ReputationScoringStrategy]] = {
    WeightedScoringStrategy.name: WeightedScoringStrategy,
    ReputationScoringStrategy.name: ReputationScoringStrategy,
}


def build_strategy(name: str, weights: ScoringWeights | None = None) -> ScoringStrategy:
    """Instantiate the scoring strategy registered under *name*.

    Raises:
        ValueError: If no strategy has that name.
    """
    if name == WeightedScoringStrategy.name:
        return WeightedScoringStrategy(weights)
    if name in STRATEGIES:
        return STRATEGIES[name]()
    raise ValueError(f"Unknown scoring strategy: {name!r} (expected one of {sorted(STRATEGIES)})")
