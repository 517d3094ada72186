"""Status state machines for campaigns, applications, and invitations."""

from marketplace.state_machine.machine import (
    StatusMachine,
    application_machine,
    campaign_machine,
    invitation_machine,
)
from marketplace.state_machine.transitions import (
    APPLICATION_TERMINAL_STATES,
    APPLICATION_TRANSITIONS,
    CAMPAIGN_TERMINAL_STATES,
    CAMPAIGN_TRANSITIONS,
    INVITATION_TERMINAL_STATES,
    INVITATION_TRANSITIONS,
    ApplicationEvent,
    CampaignEvent,
    InvitationEvent,
)

__all__ = [
    "APPLICATION_TERMINAL_STATES",
    "APPLICATION_TRANSITIONS",
    "CAMPAIGN_TERMINAL_STATES",
    "CAMPAIGN_TRANSITIONS",
    "INVITATION_TERMINAL_STATES",
    "INVITATION_TRANSITIONS",
    "ApplicationEvent",
    "CampaignEvent",
    "InvitationEvent",
    "StatusMachine",
    "application_machine",
    "campaign_machine",
    "invitation_machine",
]
