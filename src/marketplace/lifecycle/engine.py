"""Campaign lifecycle engine: the single writer for campaign, application and invitation status.

Every mutating operation follows the same shape:

1. Check the caller's capability (role gate) before touching the store.
2. Validate the payload into a pydantic model.
3. Inside one store transaction, load the campaign and the profiles it
   touches, validate the transition against current state, and write the
   campaign, participant index rows, profile counters and back-references.
4. After commit, bump metrics and write the audit entry.

A lost optimistic-concurrency race re-runs step 3 from scratch.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

import structlog

from marketplace.audit.logger import AuditLogger
from marketplace.domain.capabilities import require_capability
from marketplace.domain.errors import (
    CampaignFullError,
    ConflictError,
    DuplicateApplicationError,
    DuplicateInvitationError,
    ForbiddenError,
    NotFoundError,
    ProfileRequiredError,
    ValidationError,
)
from marketplace.domain.models import (
    Application,
    ApplicationCreate,
    ApplicationRef,
    ApplicationReview,
    BusinessProfile,
    Campaign,
    CampaignCreate,
    CampaignRef,
    CampaignStatusChange,
    CollaborationRef,
    CompletedCampaignRef,
    InfluencerProfile,
    Invitation,
    InvitationCreate,
    InvitationRef,
    InvitationResponse,
    Principal,
    SentInvitationRef,
    utcnow,
    validate_payload,
)
from marketplace.domain.types import (
    ApplicationStatus,
    CampaignStatus,
    Capability,
    CollaborationStatus,
    InvitationStatus,
)
from marketplace.lifecycle.views import Applicant, CampaignSummary, MyApplication, MyInvitation
from marketplace.matching.cards import influencer_summary
from marketplace.observability.metrics import (
    APPLICATIONS_REVIEWED,
    APPLICATIONS_SUBMITTED,
    CAMPAIGNS_CREATED,
    INVITATIONS_SENT,
)
from marketplace.resilience.retry import run_with_conflict_retry
from marketplace.state_machine import (
    CAMPAIGN_TERMINAL_STATES,
    ApplicationEvent,
    CampaignEvent,
    application_machine,
    campaign_machine,
    invitation_machine,
)
from marketplace.store.store import MarketplaceStore

logger = structlog.get_logger()

T = TypeVar("T")


def transactional(
    store: MarketplaceStore, operation: str, func: Callable[[], T], attempts: int = 3
) -> T:
    """Run *func* inside one store transaction, retrying on version conflicts."""

    def attempt() -> T:
        with store.transaction():
            return func()

    return run_with_conflict_retry(operation, attempt, attempts)


class CampaignLifecycleEngine:
    """Validates and applies state transitions and keeps derived counters consistent.

    Args:
        store: The marketplace document store.
        audit: Optional audit trail writer.
        clock: Returns the current UTC time; injectable for tests.
        publish_on_create: When True, new campaigns go straight to ``active``.
            When False they start as ``draft`` and need :meth:`publish_campaign`.
        enforce_max_influencers: When True, accepting an application or an
            invitation fails with ``CampaignFullError`` once ``maxInfluencers``
            influencers have joined.
        max_write_attempts: Attempts per operation on version conflicts.
    """

    def __init__(
        self,
        store: MarketplaceStore,
        *,
        audit: AuditLogger | None = None,
        clock: Callable[[], datetime] = utcnow,
        publish_on_create: bool = True,
        enforce_max_influencers: bool = True,
        max_write_attempts: int = 3,
    ) -> None:
        self._store = store
        self._audit = audit
        self._clock = clock
        self._publish_on_create = publish_on_create
        self._enforce_max_influencers = enforce_max_influencers
        self._max_write_attempts = max_write_attempts

    def _transaction(self, operation: str, func: Callable[[], T]) -> T:
        return transactional(self._store, operation, func, self._max_write_attempts)

    # ------------------------------------------------------------------
    # Loading helpers (call inside a transaction)
    # ------------------------------------------------------------------

    def _business_profile(self, principal: Principal) -> BusinessProfile:
        profile = self._store.get_business_profile_by_user(principal.id)
        if profile is None:
            raise ProfileRequiredError(
                "Business profile not found. Please create a business profile first."
            )
        return profile

    def _influencer_profile(self, principal: Principal) -> InfluencerProfile:
        profile = self._store.get_influencer_profile_by_user(principal.id)
        if profile is None:
            raise ProfileRequiredError(
                "Influencer profile not found. Please create an influencer profile first."
            )
        return profile

    def _campaign(self, campaign_id: str) -> Campaign:
        campaign = self._store.get_campaign(campaign_id)
        if campaign is None:
            raise NotFoundError("Campaign not found")
        return campaign

    def _owned_campaign(self, principal: Principal, campaign_id: str) -> Campaign:
        campaign = self._campaign(campaign_id)
        if campaign.business_id != principal.id:
            raise ForbiddenError("You do not have permission to manage this campaign")
        return campaign

    def _campaign_business(self, campaign: Campaign) -> BusinessProfile:
        # The profile reference is fixed at creation; never re-derived from the user.
        business = self._store.get_business_profile(campaign.business_profile_id)
        if business is None:
            raise NotFoundError("Business profile for campaign not found")
        return business

    @staticmethod
    def _require_open(campaign: Campaign, action: str) -> None:
        if campaign.status in CAMPAIGN_TERMINAL_STATES:
            raise ConflictError(f"Cannot {action}: campaign is {campaign.status}")

    def _require_capacity(self, campaign: Campaign) -> None:
        if not self._enforce_max_influencers:
            return
        if len(campaign.accepted_participants()) >= campaign.max_influencers:
            raise CampaignFullError(campaign.id, campaign.max_influencers)

    # ------------------------------------------------------------------
    # Campaigns
    # ------------------------------------------------------------------

    def create_campaign(
        self, principal: Principal, payload: CampaignCreate | dict[str, Any]
    ) -> Campaign:
        """Create a campaign owned by the calling business.

        The campaign, the business's ``campaigns`` back-reference and its
        ``totalCampaigns``/``activeCampaigns`` counters commit together.

        Raises:
            AuthorizationError: If the caller is not a business.
            ValidationError: Listing every missing or invalid field.
            ProfileRequiredError: If the business has no profile yet.
        """
        require_capability(principal, Capability.CREATE_CAMPAIGN)
        data = validate_payload(CampaignCreate, payload, "Invalid campaign data")

        def apply() -> Campaign:
            business = self._business_profile(principal)
            now = self._clock()
            campaign = Campaign.model_validate(
                {
                    **data.model_dump(),
                    "business_id": principal.id,
                    "business_profile_id": business.id,
                    "status": CampaignStatus.DRAFT,
                    "created_at": now,
                    "updated_at": now,
                }
            )
            if self._publish_on_create:
                campaign.status = campaign_machine(campaign.status).trigger(CampaignEvent.PUBLISH)

            self._store.insert_campaign(campaign)

            business.campaigns.append(
                CampaignRef(campaign_id=campaign.id, status=campaign.status, created_at=now)
            )
            business.stats.total_campaigns += 1
            if campaign.status == CampaignStatus.ACTIVE:
                business.stats.active_campaigns += 1
            business.updated_at = now
            self._store.update_business_profile(business)
            return campaign

        campaign = self._transaction("create_campaign", apply)

        CAMPAIGNS_CREATED.inc()
        logger.info(
            "campaign_created",
            campaign_id=campaign.id,
            business_id=principal.id,
            status=str(campaign.status),
        )
        if self._audit is not None:
            self._audit.log_campaign_created(
                principal.id, campaign.id, campaign.title, str(campaign.status)
            )
        return campaign

    def change_campaign_status(
        self, principal: Principal, campaign_id: str, event: str | CampaignEvent
    ) -> Campaign:
        """Apply a publish/pause/resume/complete/cancel event to an owned campaign.

        The business's ``activeCampaigns``/``completedCampaigns`` counters and
        the status copy in its ``campaigns`` back-reference move with it.  On
        completion every accepted participant gets a ``completedCampaigns``
        entry earning its agreed rate, and the business's collaborations for
        the campaign are marked completed.

        Raises:
            AuthorizationError: If the caller is not a business.
            ValidationError: If *event* is not a campaign event.
            NotFoundError: If the campaign does not exist.
            ForbiddenError: If the caller does not own the campaign.
            InvalidTransitionError: If the event is not allowed from the current status.
        """
        require_capability(principal, Capability.MANAGE_CAMPAIGN)
        change = validate_payload(
            CampaignStatusChange, {"event": str(event)}, "Invalid campaign status change"
        )

        def apply() -> tuple[Campaign, CampaignStatus]:
            campaign = self._owned_campaign(principal, campaign_id)
            previous = campaign.status
            campaign.status = campaign_machine(previous).trigger(change.event)
            now = self._clock()
            campaign.updated_at = now
            self._store.update_campaign(campaign)

            business = self._campaign_business(campaign)
            for ref in business.campaigns:
                if ref.campaign_id == campaign.id:
                    ref.status = campaign.status
            if previous == CampaignStatus.ACTIVE:
                business.stats.active_campaigns -= 1
            if campaign.status == CampaignStatus.ACTIVE:
                business.stats.active_campaigns += 1
            if campaign.status == CampaignStatus.COMPLETED:
                business.stats.completed_campaigns += 1
                for collaboration in business.collaborations:
                    if collaboration.campaign_id == campaign.id:
                        collaboration.status = CollaborationStatus.COMPLETED
                self._record_completion(campaign, now)
            business.updated_at = now
            self._store.update_business_profile(business)
            return campaign, previous

        campaign, previous = self._transaction("change_campaign_status", apply)

        logger.info(
            "campaign_status_changed",
            campaign_id=campaign.id,
            from_state=str(previous),
            to_state=str(campaign.status),
            event=change.event,
        )
        if self._audit is not None:
            self._audit.log_campaign_status_changed(
                principal.id, campaign.id, str(previous), str(campaign.status), change.event
            )
        return campaign

    def _record_completion(self, campaign: Campaign, now: datetime) -> None:
        for influencer_id in campaign.accepted_participants():
            influencer = self._store.get_influencer_profile(influencer_id)
            if influencer is None:
                logger.warning(
                    "participant_profile_missing",
                    campaign_id=campaign.id,
                    influencer_id=influencer_id,
                )
                continue
            earnings = campaign.agreed_rate(influencer_id)
            influencer.completed_campaigns.append(
                CompletedCampaignRef(
                    campaign_id=campaign.id,
                    business_id=campaign.business_id,
                    earnings=earnings,
                    completed_at=now,
                )
            )
            influencer.stats.completed_campaigns += 1
            influencer.stats.total_earnings += earnings
            influencer.updated_at = now
            self._store.update_influencer_profile(influencer)

    def publish_campaign(self, principal: Principal, campaign_id: str) -> Campaign:
        return self.change_campaign_status(principal, campaign_id, CampaignEvent.PUBLISH)

    def pause_campaign(self, principal: Principal, campaign_id: str) -> Campaign:
        return self.change_campaign_status(principal, campaign_id, CampaignEvent.PAUSE)

    def resume_campaign(self, principal: Principal, campaign_id: str) -> Campaign:
        return self.change_campaign_status(principal, campaign_id, CampaignEvent.RESUME)

    def complete_campaign(self, principal: Principal, campaign_id: str) -> Campaign:
        return self.change_campaign_status(principal, campaign_id, CampaignEvent.COMPLETE)

    def cancel_campaign(self, principal: Principal, campaign_id: str) -> Campaign:
        return self.change_campaign_status(principal, campaign_id, CampaignEvent.CANCEL)

    def get_campaign(self, principal: Principal, campaign_id: str) -> Campaign:
        """Load one campaign for display.

        The owner sees the whole document.  Anyone else sees it only once it
        has left draft, and only their own application and invitation.

        Raises:
            AuthorizationError: If the caller's role cannot browse campaigns.
            NotFoundError: If the campaign does not exist or is a draft owned
                by someone else.
        """
        require_capability(principal, Capability.BROWSE_CAMPAIGNS)
        campaign = self._campaign(campaign_id)
        if campaign.business_id == principal.id:
            return campaign
        if campaign.status == CampaignStatus.DRAFT:
            raise NotFoundError("Campaign not found")

        influencer = self._store.get_influencer_profile_by_user(principal.id)
        own_id = influencer.id if influencer is not None else None
        campaign.applications = [a for a in campaign.applications if a.influencer_id == own_id]
        campaign.invitations = [i for i in campaign.invitations if i.influencer_id == own_id]
        return campaign

    def update_campaign(
        self,
        principal: Principal,
        campaign_id: str,
        payload: CampaignCreate | dict[str, Any],
    ) -> Campaign:
        """Replace the editable fields of an owned campaign.

        The payload is validated exactly like CreateCampaign.  Status,
        counters, applications and invitations are kept as they are.

        Raises:
            AuthorizationError: If the caller is not a business.
            ValidationError: Listing every missing or invalid field.
            NotFoundError: If the campaign does not exist.
            ForbiddenError: If the caller does not own the campaign.
            ConflictError: If the campaign is completed or cancelled, or the new
                ``maxInfluencers`` is below the number who already joined.
        """
        require_capability(principal, Capability.MANAGE_CAMPAIGN)
        data = validate_payload(CampaignCreate, payload, "Invalid campaign data")

        def apply() -> tuple[Campaign, list[str]]:
            campaign = self._owned_campaign(principal, campaign_id)
            if campaign.status in CAMPAIGN_TERMINAL_STATES:
                raise ConflictError("Cannot update completed or cancelled campaigns")
            joined = len(campaign.accepted_participants())
            if data.max_influencers < joined:
                raise ConflictError(
                    f"maxInfluencers cannot drop below the {joined} influencers already selected"
                )

            now = self._clock()
            before = campaign.to_document()
            updated = Campaign.model_validate(
                {**campaign.model_dump(), **data.model_dump(), "updated_at": now}
            )
            after = updated.to_document()
            changed = sorted(k for k in after if k != "updatedAt" and after[k] != before.get(k))
            if not changed:
                return campaign, changed
            self._store.update_campaign(updated)
            return updated, changed

        campaign, changed = self._transaction("update_campaign", apply)

        logger.info(
            "campaign_updated",
            campaign_id=campaign.id,
            business_id=principal.id,
            fields=changed,
        )
        if self._audit is not None and changed:
            self._audit.log_campaign_updated(principal.id, campaign.id, changed)
        return campaign

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    def submit_application(
        self,
        principal: Principal,
        campaign_id: str,
        payload: ApplicationCreate | dict[str, Any] | None = None,
    ) -> Application:
        """Apply the calling influencer to an active campaign.

        Raises:
            AuthorizationError: If the caller is not an influencer.
            ValidationError: If the payload is invalid or the deadline has passed.
            ProfileRequiredError: If the influencer has no profile yet.
            NotFoundError: If the campaign does not exist.
            ConflictError: If the campaign is not active or the influencer already
                joined it through an invitation.
            DuplicateApplicationError: If this influencer already applied.
        """
        require_capability(principal, Capability.APPLY_TO_CAMPAIGN)
        data = validate_payload(ApplicationCreate, payload or {}, "Invalid application data")

        def apply() -> Application:
            influencer = self._influencer_profile(principal)
            campaign = self._campaign(campaign_id)
            if campaign.status != CampaignStatus.ACTIVE:
                raise ConflictError("Campaign is not accepting applications")
            now = self._clock()
            if now > campaign.timeline.application_deadline:
                raise ValidationError("Application deadline has passed")
            if campaign.application_for(influencer.id) is not None:
                raise DuplicateApplicationError(campaign.id, influencer.id)
            if influencer.id in campaign.accepted_participants():
                raise ConflictError("You have already accepted an invitation to this campaign")

            application = Application.model_validate(
                {
                    **data.model_dump(),
                    "influencer_id": influencer.id,
                    "user_id": principal.id,
                    "applied_at": now,
                }
            )
            campaign.applications.append(application)
            campaign.recount()
            campaign.updated_at = now
            self._store.update_campaign(campaign)
            self._store.add_participant(
                campaign.id,
                influencer.id,
                "application",
                application.id,
                application.status.value,
                now.isoformat(),
            )

            influencer.campaign_applications.append(
                ApplicationRef(
                    campaign_id=campaign.id,
                    application_id=application.id,
                    status=application.status,
                    applied_at=now,
                )
            )
            influencer.updated_at = now
            self._store.update_influencer_profile(influencer)
            return application

        application = self._transaction("submit_application", apply)

        APPLICATIONS_SUBMITTED.inc()
        logger.info(
            "application_submitted",
            campaign_id=campaign_id,
            influencer_id=application.influencer_id,
            application_id=application.id,
        )
        if self._audit is not None:
            self._audit.log_application_submitted(
                principal.id,
                campaign_id,
                application.influencer_id,
                application.id,
                str(application.proposed_rate),
            )
        return application

    def review_application(
        self,
        principal: Principal,
        campaign_id: str,
        application_id: str,
        payload: ApplicationReview | dict[str, Any],
    ) -> Application:
        """Accept or reject a pending application on an owned campaign.

        On accept, ``selectedInfluencers``, the business's
        ``totalInfluencersWorkedWith`` and collaborations log, and the
        influencer's ``totalCampaigns`` all move in the same transaction.

        Raises:
            AuthorizationError: If the caller is not a business.
            ForbiddenError: If the caller does not own the campaign.
            NotFoundError: If the campaign or application does not exist.
            InvalidTransitionError: If the application is no longer pending.
            CampaignFullError: If accepting would exceed ``maxInfluencers``.
            ConflictError: If the campaign is closed or the influencer already
                joined it through an invitation.
        """
        require_capability(principal, Capability.REVIEW_APPLICATION)
        review = validate_payload(ApplicationReview, payload, "Invalid application review")

        def apply() -> Application:
            campaign = self._owned_campaign(principal, campaign_id)
            self._require_open(campaign, "review applications")
            application = campaign.application_by_id(application_id)
            if application is None:
                raise NotFoundError("Application not found")

            new_status = application_machine(application.status).trigger(review.decision)
            accepted = new_status == ApplicationStatus.ACCEPTED
            if accepted:
                if application.influencer_id in campaign.accepted_participants():
                    raise ConflictError(
                        "Influencer already joined this campaign through an invitation"
                    )
                self._require_capacity(campaign)

            now = self._clock()
            application.status = new_status
            application.reviewed_at = now
            application.business_notes = review.business_notes
            campaign.recount()
            campaign.updated_at = now
            self._store.update_campaign(campaign)
            self._store.set_participant_status(
                campaign.id, application.influencer_id, "application", new_status.value
            )

            influencer = self._store.get_influencer_profile(application.influencer_id)
            if influencer is not None:
                for ref in influencer.campaign_applications:
                    if ref.application_id == application.id:
                        ref.status = new_status
                if accepted:
                    influencer.stats.total_campaigns += 1
                influencer.updated_at = now
                self._store.update_influencer_profile(influencer)
            else:
                logger.warning(
                    "applicant_profile_missing",
                    campaign_id=campaign.id,
                    influencer_id=application.influencer_id,
                )

            if accepted:
                business = self._campaign_business(campaign)
                business.collaborations.append(
                    CollaborationRef(
                        influencer_id=application.influencer_id,
                        campaign_id=campaign.id,
                        status=CollaborationStatus.ACCEPTED,
                        collaborated_at=now,
                    )
                )
                business.stats.total_influencers_worked_with += 1
                business.updated_at = now
                self._store.update_business_profile(business)
            return application

        application = self._transaction("review_application", apply)

        APPLICATIONS_REVIEWED.labels(decision=review.decision).inc()
        logger.info(
            "application_reviewed",
            campaign_id=campaign_id,
            application_id=application.id,
            influencer_id=application.influencer_id,
            decision=review.decision,
        )
        if self._audit is not None:
            self._audit.log_application_reviewed(
                principal.id,
                campaign_id,
                application.influencer_id,
                application.id,
                review.decision,
            )
        return application

    def withdraw_application(
        self, principal: Principal, campaign_id: str, application_id: str
    ) -> Application:
        """Withdraw the calling influencer's own pending application.

        Raises:
            ForbiddenError: If the application belongs to another influencer.
            InvalidTransitionError: If the application is no longer pending.
        """
        require_capability(principal, Capability.APPLY_TO_CAMPAIGN)

        def apply() -> Application:
            influencer = self._influencer_profile(principal)
            campaign = self._campaign(campaign_id)
            application = campaign.application_by_id(application_id)
            if application is None:
                raise NotFoundError("Application not found")
            if application.influencer_id != influencer.id:
                raise ForbiddenError("You can only withdraw your own applications")

            application.status = application_machine(application.status).trigger(
                ApplicationEvent.WITHDRAW
            )
            now = self._clock()
            campaign.recount()
            campaign.updated_at = now
            self._store.update_campaign(campaign)
            self._store.set_participant_status(
                campaign.id, influencer.id, "application", application.status.value
            )

            for ref in influencer.campaign_applications:
                if ref.application_id == application.id:
                    ref.status = application.status
            influencer.updated_at = now
            self._store.update_influencer_profile(influencer)
            return application

        application = self._transaction("withdraw_application", apply)

        logger.info(
            "application_withdrawn",
            campaign_id=campaign_id,
            application_id=application.id,
            influencer_id=application.influencer_id,
        )
        if self._audit is not None:
            self._audit.log_application_withdrawn(
                principal.id, campaign_id, application.influencer_id, application.id
            )
        return application

    # ------------------------------------------------------------------
    # Invitations
    # ------------------------------------------------------------------

    def send_invitation(
        self,
        principal: Principal,
        campaign_id: str,
        payload: InvitationCreate | dict[str, Any],
    ) -> Invitation:
        """Invite an influencer to an owned campaign.

        Raises:
            AuthorizationError: If the caller is not a business.
            ForbiddenError: If the caller does not own the campaign.
            NotFoundError: If the campaign or influencer profile does not exist.
            ConflictError: If the campaign is completed or cancelled.
            DuplicateInvitationError: If the influencer was already invited.
        """
        require_capability(principal, Capability.SEND_INVITATION)
        data = validate_payload(InvitationCreate, payload, "Invalid invitation data")

        def apply() -> Invitation:
            campaign = self._owned_campaign(principal, campaign_id)
            self._require_open(campaign, "send invitations")
            influencer = self._store.get_influencer_profile(data.influencer_id)
            if influencer is None:
                raise NotFoundError("Influencer not found")
            if campaign.invitation_for(influencer.id) is not None:
                raise DuplicateInvitationError(campaign.id, influencer.id)

            now = self._clock()
            invitation = Invitation(
                influencer_id=influencer.id,
                user_id=influencer.user_id,
                message=data.message,
                proposed_rate=data.proposed_rate,
                sent_at=now,
            )
            campaign.invitations.append(invitation)
            campaign.updated_at = now
            self._store.update_campaign(campaign)
            self._store.add_participant(
                campaign.id,
                influencer.id,
                "invitation",
                invitation.id,
                invitation.status.value,
                now.isoformat(),
            )

            influencer.direct_invitations.append(
                InvitationRef(
                    business_id=campaign.business_id,
                    campaign_id=campaign.id,
                    invitation_id=invitation.id,
                    invited_at=now,
                )
            )
            influencer.updated_at = now
            self._store.update_influencer_profile(influencer)

            business = self._campaign_business(campaign)
            business.sent_invitations.append(
                SentInvitationRef(
                    influencer_id=influencer.id,
                    campaign_id=campaign.id,
                    invitation_id=invitation.id,
                    message=invitation.message,
                    sent_at=now,
                )
            )
            business.updated_at = now
            self._store.update_business_profile(business)
            return invitation

        invitation = self._transaction("send_invitation", apply)

        INVITATIONS_SENT.inc()
        logger.info(
            "invitation_sent",
            campaign_id=campaign_id,
            influencer_id=invitation.influencer_id,
            invitation_id=invitation.id,
        )
        if self._audit is not None:
            self._audit.log_invitation_sent(
                principal.id, campaign_id, invitation.influencer_id, invitation.id
            )
        return invitation

    def respond_to_invitation(
        self,
        principal: Principal,
        campaign_id: str,
        invitation_id: str,
        payload: InvitationResponse | dict[str, Any],
    ) -> Invitation:
        """Accept or decline a pending invitation addressed to the caller.

        Both the campaign-embedded invitation and the influencer's
        ``directInvitations`` copy are updated, as is the business's
        ``sentInvitations`` copy.  Acceptance records a collaboration.

        Raises:
            AuthorizationError: If the caller is not an influencer.
            ForbiddenError: If the invitation was sent to someone else.
            NotFoundError: If the campaign or invitation does not exist.
            InvalidTransitionError: If the invitation is no longer pending.
            ConflictError: If the campaign is closed or the influencer's
                application was already accepted.
            CampaignFullError: If accepting would exceed ``maxInfluencers``.
        """
        require_capability(principal, Capability.RESPOND_TO_INVITATION)
        answer = validate_payload(InvitationResponse, payload, "Invalid invitation response")

        def apply() -> Invitation:
            influencer = self._influencer_profile(principal)
            campaign = self._campaign(campaign_id)
            invitation = campaign.invitation_by_id(invitation_id)
            if invitation is None:
                raise NotFoundError("Invitation not found")
            if invitation.influencer_id != influencer.id:
                raise ForbiddenError("This invitation was not sent to you")

            new_status = invitation_machine(invitation.status).trigger(answer.response)
            accepted = new_status == InvitationStatus.ACCEPTED
            if accepted:
                self._require_open(campaign, "accept invitation")
                if influencer.id in campaign.accepted_participants():
                    raise ConflictError("Your application to this campaign was already accepted")
                self._require_capacity(campaign)

            now = self._clock()
            invitation.status = new_status
            invitation.responded_at = now
            campaign.updated_at = now
            self._store.update_campaign(campaign)
            self._store.set_participant_status(
                campaign.id, influencer.id, "invitation", new_status.value
            )

            for ref in influencer.direct_invitations:
                if ref.invitation_id == invitation.id:
                    ref.status = new_status
                    ref.responded_at = now
            if accepted:
                influencer.stats.total_campaigns += 1
            influencer.updated_at = now
            self._store.update_influencer_profile(influencer)

            business = self._campaign_business(campaign)
            for sent in business.sent_invitations:
                if sent.invitation_id == invitation.id:
                    sent.status = new_status
            if accepted:
                business.collaborations.append(
                    CollaborationRef(
                        influencer_id=influencer.id,
                        campaign_id=campaign.id,
                        status=CollaborationStatus.ACCEPTED,
                        collaborated_at=now,
                    )
                )
                business.stats.total_influencers_worked_with += 1
            business.updated_at = now
            self._store.update_business_profile(business)
            return invitation

        invitation = self._transaction("respond_to_invitation", apply)

        logger.info(
            "invitation_responded",
            campaign_id=campaign_id,
            invitation_id=invitation.id,
            influencer_id=invitation.influencer_id,
            response=answer.response,
        )
        if self._audit is not None:
            self._audit.log_invitation_responded(
                principal.id,
                campaign_id,
                invitation.influencer_id,
                invitation.id,
                answer.response,
            )
        return invitation

    # ------------------------------------------------------------------
    # Per-user listings
    # ------------------------------------------------------------------

    def list_my_campaigns(self, principal: Principal) -> list[Campaign]:
        require_capability(principal, Capability.MANAGE_CAMPAIGN)
        return self._store.list_campaigns(business_id=principal.id)

    def _summaries(self, campaigns: list[Campaign]) -> dict[str, CampaignSummary]:
        businesses: dict[str, BusinessProfile | None] = {}
        summaries: dict[str, CampaignSummary] = {}
        for campaign in campaigns:
            profile_id = campaign.business_profile_id
            if profile_id not in businesses:
                businesses[profile_id] = self._store.get_business_profile(profile_id)
            summaries[campaign.id] = CampaignSummary.build(campaign, businesses[profile_id])
        return summaries

    def list_my_applications(self, principal: Principal) -> list[MyApplication]:
        """List the caller's applications, newest first, read from the participant index."""
        require_capability(principal, Capability.APPLY_TO_CAMPAIGN)
        influencer = self._influencer_profile(principal)

        campaign_ids = self._store.participant_campaign_ids(influencer.id, "application")
        campaigns = self._store.get_campaigns(campaign_ids)
        summaries = self._summaries(list(campaigns.values()))

        results: list[MyApplication] = []
        for campaign_id in campaign_ids:
            campaign = campaigns.get(campaign_id)
            application = campaign.application_for(influencer.id) if campaign else None
            if campaign is None or application is None:
                continue
            results.append(
                MyApplication(campaign=summaries[campaign_id], application=application)
            )
        return results

    def list_my_invitations(self, principal: Principal) -> list[MyInvitation]:
        """List pending invitations addressed to the caller, newest first."""
        require_capability(principal, Capability.RESPOND_TO_INVITATION)
        influencer = self._influencer_profile(principal)

        campaign_ids = self._store.participant_campaign_ids(
            influencer.id, "invitation", status=InvitationStatus.PENDING.value
        )
        campaigns = self._store.get_campaigns(campaign_ids)
        summaries = self._summaries(list(campaigns.values()))

        results: list[MyInvitation] = []
        for campaign_id in campaign_ids:
            campaign = campaigns.get(campaign_id)
            invitation = campaign.invitation_for(influencer.id) if campaign else None
            if campaign is None or invitation is None:
                continue
            if invitation.status != InvitationStatus.PENDING:
                continue
            results.append(MyInvitation(campaign=summaries[campaign_id], invitation=invitation))
        return results

    def list_campaign_applications(
        self, principal: Principal, campaign_id: str
    ) -> list[Applicant]:
        """List applications to an owned campaign joined with applicant summaries."""
        require_capability(principal, Capability.REVIEW_APPLICATION)
        campaign = self._owned_campaign(principal, campaign_id)

        applicants: list[Applicant] = []
        for application in campaign.applications:
            profile = self._store.get_influencer_profile(application.influencer_id)
            applicants.append(
                Applicant(
                    application=application,
                    influencer=influencer_summary(profile) if profile else None,
                )
            )
        return applicants
