"""Audit trail models for tracking campaign lifecycle events.

Each entry records who acted (principal id), which campaign and influencer
profile were involved, and a flat string metadata map with the
event-specific details (status transitions, decisions, rates).
"""

from enum import StrEnum

from pydantic import BaseModel


class EventType(StrEnum):
    """Types of events tracked in the audit trail."""

    CAMPAIGN_CREATED = "campaign_created"
    CAMPAIGN_STATUS_CHANGED = "campaign_status_changed"
    CAMPAIGN_UPDATED = "campaign_updated"
    APPLICATION_SUBMITTED = "application_submitted"
    APPLICATION_REVIEWED = "application_reviewed"
    APPLICATION_WITHDRAWN = "application_withdrawn"
    INVITATION_SENT = "invitation_sent"
    INVITATION_RESPONDED = "invitation_responded"
    PROFILE_SAVED = "profile_saved"


class AuditEntry(BaseModel):
    """A single audit trail entry.

    All fields except event_type are optional to accommodate different
    event types (e.g., profile_saved has no campaign_id).
    """

    event_type: EventType
    principal_id: str | None = None
    campaign_id: str | None = None
    influencer_id: str | None = None
    metadata: dict[str, str] | None = None
