"""Audit trail for campaign lifecycle events."""

from marketplace.audit.logger import AuditLogger
from marketplace.audit.models import AuditEntry, EventType
from marketplace.audit.store import close_audit_db, init_audit_db, query_audit_trail

__all__ = [
    "AuditEntry",
    "AuditLogger",
    "EventType",
    "close_audit_db",
    "init_audit_db",
    "query_audit_trail",
]
