"""Read-side discovery for both sides of the marketplace.

Influencers browse campaigns and rank businesses; businesses rank influencers.

Nothing here mutates state.  Filtering that the store can index (status,
category, platform membership, budget bounds, niche, follower bounds,
location) is pushed down into SQL; ranking and display fields are computed
per request.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog

from marketplace.domain.capabilities import require_capability
from marketplace.domain.errors import ProfileRequiredError
from marketplace.domain.models import (
    BusinessProfile,
    Campaign,
    InfluencerProfile,
    Principal,
    utcnow,
    validate_payload,
)
from marketplace.domain.types import CampaignStatus, Capability
from marketplace.matching.cards import (
    BusinessMatchCard,
    CampaignCard,
    InfluencerCard,
    business_match_card,
    campaign_card,
    influencer_card,
)
from marketplace.matching.filters import (
    BusinessMatchFilters,
    CampaignFilters,
    InfluencerFilters,
)
from marketplace.matching.scoring import (
    MatchCriteria,
    ScoringStrategy,
    WeightedScoringStrategy,
)
from marketplace.store.store import MarketplaceStore

logger = structlog.get_logger()


class MatchingEngine:
    """Produces filtered, formatted discovery lists for both sides of the marketplace.

    Args:
        store: The marketplace document store.
        clock: Returns the current UTC time; injectable for tests.
        page_size: Cap on campaign lists.
        match_limit: Default cap on influencer match lists.
        strategy: How influencer matches are scored.
    """

    def __init__(
        self,
        store: MarketplaceStore,
        *,
        clock: Callable[[], datetime] = utcnow,
        page_size: int = 50,
        match_limit: int = 20,
        strategy: ScoringStrategy | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._page_size = page_size
        self._match_limit = match_limit
        self._strategy: ScoringStrategy = strategy or WeightedScoringStrategy()

    @property
    def strategy(self) -> ScoringStrategy:
        return self._strategy

    def _cards(self, campaigns: list[Campaign]) -> list[CampaignCard]:
        now = self._clock()
        businesses: dict[str, BusinessProfile | None] = {}
        cards: list[CampaignCard] = []
        for campaign in campaigns:
            profile_id = campaign.business_profile_id
            if profile_id not in businesses:
                businesses[profile_id] = self._store.get_business_profile(profile_id)
            cards.append(campaign_card(campaign, businesses[profile_id], now))
        return cards

    def list_active_campaigns(
        self,
        principal: Principal,
        filters: CampaignFilters | dict[str, Any] | None = None,
    ) -> list[CampaignCard]:
        """List active campaigns, newest first, capped at the configured page size.

        Raises:
            AuthorizationError: If the principal's role cannot browse campaigns.
            ValidationError: If the filter set is malformed.
        """
        require_capability(principal, Capability.BROWSE_CAMPAIGNS)
        criteria = validate_payload(CampaignFilters, filters or {}, "Invalid campaign filters")

        campaigns = self._store.list_campaigns(
            status=CampaignStatus.ACTIVE,
            category=criteria.category,
            platform=criteria.platform,
            min_budget=criteria.min_budget,
            max_budget=criteria.max_budget,
            limit=self._page_size,
        )
        logger.debug(
            "active_campaigns_listed",
            count=len(campaigns),
            filters=criteria.model_dump(exclude_none=True, mode="json"),
        )
        return self._cards(campaigns)

    def _own_influencer_profile(self, principal: Principal) -> InfluencerProfile:
        profile = self._store.get_influencer_profile_by_user(principal.id)
        if profile is None:
            raise ProfileRequiredError(
                "Influencer profile not found. Please create an influencer profile first."
            )
        return profile

    def list_campaigns_for_influencer(self, principal: Principal) -> list[CampaignCard]:
        """Recommend open campaigns whose requirements admit the calling influencer.

        A campaign qualifies when it is active, its application deadline is
        still in the future, its niche list is empty or contains the
        influencer's niche, and its follower bounds admit the influencer's
        follower count.

        Raises:
            AuthorizationError: If the principal is not an influencer.
            ProfileRequiredError: If the influencer has no profile yet.
        """
        require_capability(principal, Capability.APPLY_TO_CAMPAIGN)
        profile = self._own_influencer_profile(principal)

        now = self._clock()
        niche = profile.primary_link.niche
        followers = profile.primary_link.follower_count

        matches: list[Campaign] = []
        for campaign in self._store.list_campaigns(status=CampaignStatus.ACTIVE):
            if campaign.timeline.application_deadline <= now:
                continue
            requirements = campaign.requirements
            if requirements.niches and niche not in requirements.niches:
                continue
            if not requirements.admits_followers(followers):
                continue
            matches.append(campaign)
            if len(matches) >= self._page_size:
                break

        logger.debug("recommended_campaigns_listed", influencer_id=profile.id, count=len(matches))
        return self._cards(matches)

    def _criteria_for(
        self, business: BusinessProfile | None, filters: InfluencerFilters
    ) -> MatchCriteria:
        criteria = MatchCriteria(
            min_followers=filters.min_followers,
            max_followers=filters.max_followers,
        )
        if business is not None:
            prefs = business.campaign_preferences
            audience = prefs.target_audience
            criteria.niches = list(audience.interests)
            criteria.platforms = [p.value for p in prefs.preferred_platforms]
            criteria.locations = list(audience.locations)
            criteria.age_ranges = list(audience.age_ranges)
            criteria.genders = list(audience.genders)
        if filters.category:
            criteria.niches = [filters.category]
        if filters.platform:
            criteria.platforms = [filters.platform.value]
        if filters.location:
            criteria.locations = [filters.location]
        return criteria

    def list_influencer_matches(
        self,
        principal: Principal,
        filters: InfluencerFilters | dict[str, Any] | None = None,
    ) -> list[InfluencerCard]:
        """List active influencers matching the filters, ranked by match score.

        The business's saved campaign preferences (target interests,
        preferred platforms, audience locations) feed the score; explicit
        filters override them.  Ties on score fall back to follower count.
        Every candidate that passes the filters is scored before the list is
        cut to ``limit``.

        Raises:
            AuthorizationError: If the principal is not a business.
            ValidationError: If the filter set is malformed.
        """
        require_capability(principal, Capability.BROWSE_INFLUENCERS)
        criteria_filters = validate_payload(
            InfluencerFilters, filters or {}, "Invalid influencer filters"
        )
        business = self._store.get_business_profile_by_user(principal.id)
        criteria = self._criteria_for(business, criteria_filters)

        profiles = self._store.list_influencer_profiles(
            niche=criteria_filters.category,
            platform=criteria_filters.platform,
            min_followers=criteria_filters.min_followers,
            max_followers=criteria_filters.max_followers,
            location=criteria_filters.location,
            active_only=True,
        )

        cards: list[InfluencerCard] = []
        for profile in profiles:
            score = self._strategy.score(profile, criteria)
            if criteria_filters.min_score is not None and score < criteria_filters.min_score:
                continue
            cards.append(
                influencer_card(profile, score, self._strategy.breakdown(profile, criteria))
            )
        cards.sort(key=lambda c: (c.match_score, c.follower_count), reverse=True)
        cards = cards[: criteria_filters.limit or self._match_limit]

        logger.debug(
            "influencer_matches_listed",
            business_id=principal.id,
            strategy=self._strategy.name,
            candidates=len(profiles),
            count=len(cards),
        )
        return cards

    def list_business_matches(
        self,
        principal: Principal,
        filters: BusinessMatchFilters | dict[str, Any] | None = None,
    ) -> list[BusinessMatchCard]:
        """Rank active businesses by how well the calling influencer fits them.

        Each business is scored with its own saved campaign preferences as
        the criteria, using the same strategy as the business-side list.

        Raises:
            AuthorizationError: If the principal is not an influencer.
            ProfileRequiredError: If the influencer has no profile yet.
            ValidationError: If the filter set is malformed.
        """
        require_capability(principal, Capability.BROWSE_BUSINESSES)
        criteria_filters = validate_payload(
            BusinessMatchFilters, filters or {}, "Invalid business match filters"
        )
        profile = self._own_influencer_profile(principal)

        cards: list[BusinessMatchCard] = []
        for business in self._store.list_business_profiles():
            if not business.is_active:
                continue
            criteria = self._criteria_for(business, InfluencerFilters())
            score = self._strategy.score(profile, criteria)
            if criteria_filters.min_score is not None and score < criteria_filters.min_score:
                continue
            cards.append(
                business_match_card(business, score, self._strategy.breakdown(profile, criteria))
            )
        cards.sort(key=lambda c: c.match_score, reverse=True)
        cards = cards[: criteria_filters.limit or self._match_limit]

        logger.debug(
            "business_matches_listed",
            influencer_id=profile.id,
            strategy=self._strategy.name,
            count=len(cards),
        )
        return cards
