"""Read shapes for the per-user lifecycle listings."""

from __future__ import annotations

from datetime import datetime

from marketplace.domain.models import (
    Application,
    Budget,
    BusinessProfile,
    Campaign,
    Document,
    Invitation,
)
from marketplace.domain.types import CampaignCategory, CampaignStatus, Industry, Platform
from marketplace.matching.cards import InfluencerSummary


class CampaignSummary(Document):
    id: str
    title: str
    description: str
    company: str
    industry: Industry | None = None
    category: CampaignCategory
    platforms: list[Platform]
    budget: Budget
    application_deadline: datetime
    status: CampaignStatus

    @classmethod
    def build(cls, campaign: Campaign, business: BusinessProfile | None) -> CampaignSummary:
        return cls(
            id=campaign.id,
            title=campaign.title,
            description=campaign.description,
            company=business.company_name if business else "Unknown Company",
            industry=business.industry if business else None,
            category=campaign.category,
            platforms=campaign.platforms,
            budget=campaign.budget,
            application_deadline=campaign.timeline.application_deadline,
            status=campaign.status,
        )


class MyApplication(Document):
    """One of the calling influencer's applications with its campaign."""

    campaign: CampaignSummary
    application: Application


class MyInvitation(Document):
    """A pending invitation addressed to the calling influencer."""

    campaign: CampaignSummary
    invitation: Invitation


class Applicant(Document):
    """An application to the caller's campaign, joined with the applicant's profile."""

    application: Application
    influencer: InfluencerSummary | None = None
