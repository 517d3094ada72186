"""Idempotent repair pass for derived counters and back-references.

Campaign documents are the source of truth.  Profile back-references and
stat counters are recomputed from them; only documents whose derived fields
actually differ are rewritten, so running the pass twice is a no-op.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Hashable
from decimal import Decimal
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel

from marketplace.domain.models import (
    ApplicationRef,
    BusinessProfile,
    Campaign,
    CampaignRef,
    CollaborationRef,
    CompletedCampaignRef,
    InfluencerProfile,
    InvitationRef,
    SentInvitationRef,
)
from marketplace.domain.types import CampaignStatus, CollaborationStatus
from marketplace.store.store import MarketplaceStore

logger = structlog.get_logger()

T = TypeVar("T")


class ReconcileReport(BaseModel):
    campaigns_checked: int = 0
    campaigns_repaired: int = 0
    business_profiles_repaired: int = 0
    influencer_profiles_repaired: int = 0

    @property
    def total_repaired(self) -> int:
        return (
            self.campaigns_repaired
            + self.business_profiles_repaired
            + self.influencer_profiles_repaired
        )


def _snapshot(doc: BaseModel) -> dict[str, Any]:
    return doc.model_dump(mode="json", exclude={"version", "updated_at"})


def _keep_order(existing: list[Hashable], items: list[T], key: Callable[[T], Hashable]) -> list[T]:
    """Sort *items* by where their key first appears in *existing*; unseen keys go last."""
    position: dict[Hashable, int] = {}
    for idx, k in enumerate(existing):
        position.setdefault(k, idx)
    return sorted(items, key=lambda item: position.get(key(item), len(existing)))


def _rebuild_business(profile: BusinessProfile, campaigns: list[Campaign]) -> None:
    prior_refs = {ref.campaign_id: ref for ref in profile.campaigns}
    prior_collabs = {(c.campaign_id, c.influencer_id): c for c in profile.collaborations}

    refs: list[CampaignRef] = []
    collaborations: list[CollaborationRef] = []
    sent: list[SentInvitationRef] = []

    for campaign in sorted(campaigns, key=lambda c: c.created_at):
        prior_ref = prior_refs.get(campaign.id)
        refs.append(
            CampaignRef(
                campaign_id=campaign.id,
                status=campaign.status,
                created_at=prior_ref.created_at if prior_ref else campaign.created_at,
            )
        )

        completed = campaign.status == CampaignStatus.COMPLETED
        for influencer_id, when in campaign.accepted_participants().items():
            prior = prior_collabs.get((campaign.id, influencer_id))
            if completed:
                status = CollaborationStatus.COMPLETED
            else:
                status = prior.status if prior else CollaborationStatus.ACCEPTED
            collaborations.append(
                CollaborationRef(
                    influencer_id=influencer_id,
                    campaign_id=campaign.id,
                    status=status,
                    rating=prior.rating if prior else None,
                    review=prior.review if prior else None,
                    collaborated_at=prior.collaborated_at if prior else when,
                )
            )

        sent.extend(
            SentInvitationRef(
                influencer_id=invitation.influencer_id,
                campaign_id=campaign.id,
                invitation_id=invitation.id,
                message=invitation.message,
                status=invitation.status,
                sent_at=invitation.sent_at,
            )
            for invitation in campaign.invitations
        )

    profile.campaigns = _keep_order(
        [r.campaign_id for r in profile.campaigns], refs, lambda r: r.campaign_id
    )
    profile.collaborations = _keep_order(
        [(c.campaign_id, c.influencer_id) for c in profile.collaborations],
        collaborations,
        lambda c: (c.campaign_id, c.influencer_id),
    )
    profile.sent_invitations = _keep_order(
        [s.invitation_id for s in profile.sent_invitations], sent, lambda s: s.invitation_id
    )
    profile.stats.total_campaigns = len(refs)
    profile.stats.active_campaigns = sum(1 for r in refs if r.status == CampaignStatus.ACTIVE)
    profile.stats.completed_campaigns = sum(
        1 for r in refs if r.status == CampaignStatus.COMPLETED
    )
    profile.stats.total_influencers_worked_with = len(collaborations)


def _rebuild_influencer(profile: InfluencerProfile, campaigns: list[Campaign]) -> None:
    prior_completed = {ref.campaign_id: ref for ref in profile.completed_campaigns}
    applications: list[ApplicationRef] = []
    invitations: list[InvitationRef] = []
    completed: list[CompletedCampaignRef] = []
    joined = 0

    for campaign in campaigns:
        application = campaign.application_for(profile.id)
        if application is not None:
            applications.append(
                ApplicationRef(
                    campaign_id=campaign.id,
                    application_id=application.id,
                    status=application.status,
                    applied_at=application.applied_at,
                )
            )

        invitation = campaign.invitation_for(profile.id)
        if invitation is not None:
            invitations.append(
                InvitationRef(
                    business_id=campaign.business_id,
                    campaign_id=campaign.id,
                    invitation_id=invitation.id,
                    status=invitation.status,
                    invited_at=invitation.sent_at,
                    responded_at=invitation.responded_at,
                )
            )

        if profile.id not in campaign.accepted_participants():
            continue
        joined += 1
        if campaign.status == CampaignStatus.COMPLETED:
            prior = prior_completed.get(campaign.id)
            completed.append(
                prior
                or CompletedCampaignRef(
                    campaign_id=campaign.id,
                    business_id=campaign.business_id,
                    earnings=campaign.agreed_rate(profile.id),
                    completed_at=campaign.updated_at,
                )
            )

    profile.campaign_applications = _keep_order(
        [r.application_id for r in profile.campaign_applications],
        applications,
        lambda r: r.application_id,
    )
    profile.direct_invitations = _keep_order(
        [r.invitation_id for r in profile.direct_invitations],
        invitations,
        lambda r: r.invitation_id,
    )
    profile.completed_campaigns = _keep_order(
        [r.campaign_id for r in profile.completed_campaigns],
        completed,
        lambda r: r.campaign_id,
    )
    profile.stats.total_campaigns = joined
    profile.stats.completed_campaigns = len(completed)
    profile.stats.total_earnings = sum((r.earnings for r in completed), Decimal("0"))


def reconcile(store: MarketplaceStore) -> ReconcileReport:
    """Recompute every derived counter and back-reference from campaign documents.

    Args:
        store: The marketplace store to repair.

    Returns:
        A report of how many documents were checked and rewritten.
    """
    report = ReconcileReport()

    with store.transaction():
        campaigns = store.list_campaigns()
        report.campaigns_checked = len(campaigns)

        by_business: dict[str, list[Campaign]] = defaultdict(list)
        by_influencer: dict[str, list[Campaign]] = defaultdict(list)

        for campaign in campaigns:
            before = _snapshot(campaign)
            campaign.recount()
            if _snapshot(campaign) != before:
                store.update_campaign(campaign)
                report.campaigns_repaired += 1
                logger.info(
                    "campaign_counters_repaired",
                    campaign_id=campaign.id,
                    applications_count=campaign.applications_count,
                    selected_influencers=campaign.selected_influencers,
                )
            store.rebuild_participants(campaign)

            by_business[campaign.business_profile_id].append(campaign)
            participants = {a.influencer_id for a in campaign.applications}
            participants.update(i.influencer_id for i in campaign.invitations)
            for influencer_id in participants:
                by_influencer[influencer_id].append(campaign)

        for business in store.list_business_profiles():
            before = _snapshot(business)
            _rebuild_business(business, by_business.get(business.id, []))
            if _snapshot(business) != before:
                store.update_business_profile(business)
                report.business_profiles_repaired += 1
                logger.info("business_profile_repaired", profile_id=business.id)

        for influencer in store.list_influencer_profiles(active_only=False):
            before = _snapshot(influencer)
            _rebuild_influencer(influencer, by_influencer.get(influencer.id, []))
            if _snapshot(influencer) != before:
                store.update_influencer_profile(influencer)
                report.influencer_profiles_repaired += 1
                logger.info("influencer_profile_repaired", profile_id=influencer.id)

    logger.info(
        "reconcile_completed",
        campaigns_checked=report.campaigns_checked,
        total_repaired=report.total_repaired,
    )
    return report
