"""Convenience class for inserting audit trail entries.

Each method creates a properly structured :class:`AuditEntry` for one
lifecycle event and inserts it via :func:`insert_audit_entry`.
"""

from __future__ import annotations

import sqlite3
import threading

from marketplace.audit.models import AuditEntry, EventType
from marketplace.audit.store import insert_audit_entry


class AuditLogger:
    """Typed convenience API for inserting audit entries.

    Args:
        conn: An open SQLite connection to the audit database.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._lock = threading.Lock()

    def _insert(self, entry: AuditEntry) -> int:
        with self._lock:
            return insert_audit_entry(self._conn, entry)

    def log_campaign_created(
        self,
        principal_id: str,
        campaign_id: str,
        title: str,
        status: str,
    ) -> int:
        """Log a newly created campaign.

        Args:
            principal_id: The business user who created it.
            campaign_id: Campaign identifier.
            title: Campaign title.
            status: Initial status (active when auto-published, else draft).

        Returns:
            The row ID of the inserted audit entry.
        """
        entry = AuditEntry(
            event_type=EventType.CAMPAIGN_CREATED,
            principal_id=principal_id,
            campaign_id=campaign_id,
            metadata={"title": title, "status": status},
        )
        return self._insert(entry)

    def log_campaign_status_changed(
        self,
        principal_id: str,
        campaign_id: str,
        from_state: str,
        to_state: str,
        event: str,
    ) -> int:
        """Log a campaign status transition.

        Stores from_state, to_state, and event in metadata.

        Returns:
            The row ID of the inserted audit entry.
        """
        entry = AuditEntry(
            event_type=EventType.CAMPAIGN_STATUS_CHANGED,
            principal_id=principal_id,
            campaign_id=campaign_id,
            metadata={"from_state": from_state, "to_state": to_state, "event": event},
        )
        return self._insert(entry)

    def log_campaign_updated(
        self,
        principal_id: str,
        campaign_id: str,
        changed_fields: list[str],
    ) -> int:
        """Log an owner edit; metadata lists the changed top-level fields."""
        entry = AuditEntry(
            event_type=EventType.CAMPAIGN_UPDATED,
            principal_id=principal_id,
            campaign_id=campaign_id,
            metadata={"fields": ",".join(changed_fields)},
        )
        return self._insert(entry)

    def log_application_submitted(
        self,
        principal_id: str,
        campaign_id: str,
        influencer_id: str,
        application_id: str,
        proposed_rate: str,
    ) -> int:
        entry = AuditEntry(
            event_type=EventType.APPLICATION_SUBMITTED,
            principal_id=principal_id,
            campaign_id=campaign_id,
            influencer_id=influencer_id,
            metadata={"application_id": application_id, "proposed_rate": proposed_rate},
        )
        return self._insert(entry)

    def log_application_reviewed(
        self,
        principal_id: str,
        campaign_id: str,
        influencer_id: str,
        application_id: str,
        decision: str,
    ) -> int:
        entry = AuditEntry(
            event_type=EventType.APPLICATION_REVIEWED,
            principal_id=principal_id,
            campaign_id=campaign_id,
            influencer_id=influencer_id,
            metadata={"application_id": application_id, "decision": decision},
        )
        return self._insert(entry)

    def log_application_withdrawn(
        self,
        principal_id: str,
        campaign_id: str,
        influencer_id: str,
        application_id: str,
    ) -> int:
        entry = AuditEntry(
            event_type=EventType.APPLICATION_WITHDRAWN,
            principal_id=principal_id,
            campaign_id=campaign_id,
            influencer_id=influencer_id,
            metadata={"application_id": application_id},
        )
        return self._insert(entry)

    def log_invitation_sent(
        self,
        principal_id: str,
        campaign_id: str,
        influencer_id: str,
        invitation_id: str,
    ) -> int:
        entry = AuditEntry(
            event_type=EventType.INVITATION_SENT,
            principal_id=principal_id,
            campaign_id=campaign_id,
            influencer_id=influencer_id,
            metadata={"invitation_id": invitation_id},
        )
        return self._insert(entry)

    def log_invitation_responded(
        self,
        principal_id: str,
        campaign_id: str,
        influencer_id: str,
        invitation_id: str,
        response: str,
    ) -> int:
        entry = AuditEntry(
            event_type=EventType.INVITATION_RESPONDED,
            principal_id=principal_id,
            campaign_id=campaign_id,
            influencer_id=influencer_id,
            metadata={"invitation_id": invitation_id, "response": response},
        )
        return self._insert(entry)

    def log_profile_saved(
        self,
        principal_id: str,
        role: str,
        profile_id: str,
        created: bool,
    ) -> int:
        """Log a business or influencer profile create/replace.

        Args:
            principal_id: The user who saved the profile.
            role: ``business`` or ``influencer``.
            profile_id: The profile document id.
            created: True on first save, False on replace.

        Returns:
            The row ID of the inserted audit entry.
        """
        entry = AuditEntry(
            event_type=EventType.PROFILE_SAVED,
            principal_id=principal_id,
            metadata={
                "role": role,
                "profile_id": profile_id,
                "action": "created" if created else "replaced",
            },
        )
        return self._insert(entry)
