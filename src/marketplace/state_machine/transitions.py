"""Transition maps defining all valid (state, event) -> state mappings.

One table per record kind.  Any pair not present in a table is an invalid
transition for that kind.
"""

from enum import StrEnum

from marketplace.domain.types import ApplicationStatus, CampaignStatus, InvitationStatus


class CampaignEvent(StrEnum):
    """Events that move a campaign through its lifecycle."""

    PUBLISH = "publish"
    PAUSE = "pause"
    RESUME = "resume"
    COMPLETE = "complete"
    CANCEL = "cancel"


class ApplicationEvent(StrEnum):
    ACCEPT = "accept"
    REJECT = "reject"
    WITHDRAW = "withdraw"


class InvitationEvent(StrEnum):
    ACCEPT = "accept"
    DECLINE = "decline"


CAMPAIGN_TRANSITIONS: dict[tuple[CampaignStatus, str], CampaignStatus] = {
    # From DRAFT
    (CampaignStatus.DRAFT, CampaignEvent.PUBLISH): CampaignStatus.ACTIVE,
    (CampaignStatus.DRAFT, CampaignEvent.CANCEL): CampaignStatus.CANCELLED,
    # From ACTIVE
    (CampaignStatus.ACTIVE, CampaignEvent.PAUSE): CampaignStatus.PAUSED,
    (CampaignStatus.ACTIVE, CampaignEvent.COMPLETE): CampaignStatus.COMPLETED,
    (CampaignStatus.ACTIVE, CampaignEvent.CANCEL): CampaignStatus.CANCELLED,
    # From PAUSED
    (CampaignStatus.PAUSED, CampaignEvent.RESUME): CampaignStatus.ACTIVE,
    (CampaignStatus.PAUSED, CampaignEvent.COMPLETE): CampaignStatus.COMPLETED,
    (CampaignStatus.PAUSED, CampaignEvent.CANCEL): CampaignStatus.CANCELLED,
}

CAMPAIGN_TERMINAL_STATES: frozenset[CampaignStatus] = frozenset(
    {CampaignStatus.COMPLETED, CampaignStatus.CANCELLED}
)

APPLICATION_TRANSITIONS: dict[tuple[ApplicationStatus, str], ApplicationStatus] = {
    (ApplicationStatus.PENDING, ApplicationEvent.ACCEPT): ApplicationStatus.ACCEPTED,
    (ApplicationStatus.PENDING, ApplicationEvent.REJECT): ApplicationStatus.REJECTED,
    (ApplicationStatus.PENDING, ApplicationEvent.WITHDRAW): ApplicationStatus.WITHDRAWN,
}

APPLICATION_TERMINAL_STATES: frozenset[ApplicationStatus] = frozenset(
    {ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED, ApplicationStatus.WITHDRAWN}
)

INVITATION_TRANSITIONS: dict[tuple[InvitationStatus, str], InvitationStatus] = {
    (InvitationStatus.PENDING, InvitationEvent.ACCEPT): InvitationStatus.ACCEPTED,
    (InvitationStatus.PENDING, InvitationEvent.DECLINE): InvitationStatus.DECLINED,
}

INVITATION_TERMINAL_STATES: frozenset[InvitationStatus] = frozenset(
    {InvitationStatus.ACCEPTED, InvitationStatus.DECLINED}
)
