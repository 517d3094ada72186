"""Read-side shapes returned by discovery and listing queries."""

from __future__ import annotations

import re
from datetime import datetime
from decimal import Decimal

from pydantic import Field

from marketplace.domain.models import (
    BusinessProfile,
    Campaign,
    Document,
    InfluencerProfile,
    Pricing,
)
from marketplace.domain.types import (
    BadgeType,
    CampaignCategory,
    CampaignStatus,
    CompanySize,
    Currency,
    Industry,
    Platform,
)
from marketplace.matching.presentation import (
    badge_label,
    badge_type,
    days_left,
    format_follower_count,
    time_left_label,
)

_HANDLE_URL_PREFIX = re.compile(r"^https?://[^/]+/")


class Badge(Document):
    type: BadgeType
    label: str


class CampaignCard(Document):
    """A campaign as listed to influencers, with display fields computed at query time."""

    id: str
    title: str
    description: str
    company: str
    verified: bool
    budget: Decimal
    currency: Currency
    platform: Platform
    platforms: list[Platform]
    category: CampaignCategory
    status: CampaignStatus
    deadline: str
    days_left: int
    application_deadline: datetime
    applicants: int
    tags: list[str] = Field(default_factory=list)
    badge: Badge


class InfluencerSummary(Document):
    """Compact public view of an influencer profile."""

    id: str
    name: str
    username: str
    platform: Platform
    followers: str
    follower_count: int
    engagement: str
    niche: str
    location: str
    profile_picture: str | None = None


class InfluencerCard(InfluencerSummary):
    """An influencer as listed to businesses, ranked by ``match_score``."""

    avatar: str
    verified: bool
    match_score: int
    bio: str
    website: str | None = None
    pricing: Pricing
    score_breakdown: dict[str, int] = Field(default_factory=dict)


class BusinessMatchCard(Document):
    """A business as listed to an influencer, ranked by ``match_score``."""

    id: str
    company: str
    logo: str | None = None
    industry: Industry
    company_size: CompanySize
    headquarters: str
    website: str
    verified: bool
    active_campaigns: int
    preferred_platforms: list[Platform]
    match_score: int
    score_breakdown: dict[str, int] = Field(default_factory=dict)


def campaign_card(
    campaign: Campaign, business: BusinessProfile | None, now: datetime
) -> CampaignCard:
    days = days_left(campaign.timeline.application_deadline, now)
    badge = badge_type(campaign.is_featured, campaign.is_urgent, days)
    return CampaignCard(
        id=campaign.id,
        title=campaign.title,
        description=campaign.description,
        company=business.company_name if business else "Unknown Company",
        verified=business.is_verified if business else False,
        budget=campaign.budget.per_influencer,
        currency=campaign.budget.currency,
        platform=campaign.platforms[0],
        platforms=campaign.platforms,
        category=campaign.category,
        status=campaign.status,
        deadline=time_left_label(days),
        days_left=days,
        application_deadline=campaign.timeline.application_deadline,
        applicants=campaign.applications_count,
        tags=campaign.content_guidelines.hashtags,
        badge=Badge(type=badge, label=badge_label(badge)),
    )


def _username(handle: str) -> str:
    return "@" + _HANDLE_URL_PREFIX.sub("", handle).replace("@", "")


def _summary_fields(profile: InfluencerProfile) -> dict[str, object]:
    link = profile.primary_link
    return {
        "id": profile.id,
        "name": profile.full_name,
        "username": _username(link.handle),
        "platform": link.platform,
        "followers": format_follower_count(link.follower_count),
        "follower_count": link.follower_count,
        "engagement": f"{profile.content_info.engagement_rate:g}%",
        "niche": link.niche,
        "location": profile.content_info.primary_location or "Not specified",
        "profile_picture": profile.profile_picture,
    }


def influencer_summary(profile: InfluencerProfile) -> InfluencerSummary:
    return InfluencerSummary.model_validate(_summary_fields(profile))


def influencer_card(
    profile: InfluencerProfile,
    match_score: int,
    score_breakdown: dict[str, int] | None = None,
) -> InfluencerCard:
    return InfluencerCard.model_validate(
        {
            **_summary_fields(profile),
            "avatar": (profile.full_name or "U")[0].upper(),
            "verified": profile.primary_link.follower_count > 10_000,
            "match_score": match_score,
            "bio": profile.bio or "No bio available",
            "website": profile.website,
            "pricing": profile.pricing,
            "score_breakdown": score_breakdown or {},
        }
    )


def business_match_card(
    profile: BusinessProfile, match_score: int, score_breakdown: dict[str, int]
) -> BusinessMatchCard:
    return BusinessMatchCard(
        id=profile.id,
        company=profile.company_name,
        logo=profile.company_logo,
        industry=profile.industry,
        company_size=profile.company_size,
        headquarters=profile.headquarters,
        website=profile.website,
        verified=profile.is_verified,
        active_campaigns=profile.stats.active_campaigns,
        preferred_platforms=profile.campaign_preferences.preferred_platforms,
        match_score=match_score,
        score_breakdown=score_breakdown,
    )
