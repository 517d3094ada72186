"""Tests for AuditLogger convenience methods covering every lifecycle event type."""

import sqlite3
from pathlib import Path

from marketplace.audit.logger import AuditLogger
from marketplace.audit.store import close_audit_db, init_audit_db, query_audit_trail


class TestAuditLogger:
    """Tests for AuditLogger convenience methods."""

    def _make_logger(self, tmp_path: Path) -> tuple[AuditLogger, sqlite3.Connection]:
        """Create an AuditLogger with a fresh database."""
        conn = init_audit_db(tmp_path / "audit.db")
        return AuditLogger(conn), conn

    def test_log_campaign_created(self, tmp_path: Path) -> None:
        logger, conn = self._make_logger(tmp_path)
        row_id = logger.log_campaign_created("biz-1", "camp-1", "Spring Glow", "active")
        assert row_id > 0
        row = query_audit_trail(conn, campaign_id="camp-1")[0]
        assert row["event_type"] == "campaign_created"
        assert row["principal_id"] == "biz-1"
        assert row["metadata"] == {"title": "Spring Glow", "status": "active"}
        close_audit_db(conn)

    def test_log_campaign_status_changed(self, tmp_path: Path) -> None:
        logger, conn = self._make_logger(tmp_path)
        logger.log_campaign_status_changed("biz-1", "camp-1", "active", "paused", "pause")
        row = query_audit_trail(conn)[0]
        assert row["event_type"] == "campaign_status_changed"
        assert row["metadata"] == {"from_state": "active", "to_state": "paused", "event": "pause"}
        close_audit_db(conn)

    def test_log_application_submitted(self, tmp_path: Path) -> None:
        logger, conn = self._make_logger(tmp_path)
        logger.log_application_submitted("inf-user", "camp-1", "inf-1", "app-1", "450.50")
        row = query_audit_trail(conn)[0]
        assert row["event_type"] == "application_submitted"
        assert row["influencer_id"] == "inf-1"
        assert row["metadata"] == {"application_id": "app-1", "proposed_rate": "450.50"}
        close_audit_db(conn)

    def test_log_application_reviewed(self, tmp_path: Path) -> None:
        logger, conn = self._make_logger(tmp_path)
        logger.log_application_reviewed("biz-1", "camp-1", "inf-1", "app-1", "reject")
        row = query_audit_trail(conn, event_type="application_reviewed")[0]
        assert row["metadata"]["decision"] == "reject"
        close_audit_db(conn)

    def test_log_application_withdrawn(self, tmp_path: Path) -> None:
        logger, conn = self._make_logger(tmp_path)
        logger.log_application_withdrawn("inf-user", "camp-1", "inf-1", "app-1")
        row = query_audit_trail(conn)[0]
        assert row["event_type"] == "application_withdrawn"
        assert row["metadata"] == {"application_id": "app-1"}
        close_audit_db(conn)

    def test_log_invitation_sent_and_responded(self, tmp_path: Path) -> None:
        logger, conn = self._make_logger(tmp_path)
        logger.log_invitation_sent("biz-1", "camp-1", "inf-1", "inv-1")
        logger.log_invitation_responded("inf-user", "camp-1", "inf-1", "inv-1", "decline")

        rows = query_audit_trail(conn, campaign_id="camp-1")
        assert {r["event_type"] for r in rows} == {"invitation_sent", "invitation_responded"}
        responded = query_audit_trail(conn, event_type="invitation_responded")[0]
        assert responded["metadata"] == {"invitation_id": "inv-1", "response": "decline"}
        close_audit_db(conn)

    def test_log_campaign_updated(self, tmp_path: Path) -> None:
        logger, conn = self._make_logger(tmp_path)
        logger.log_campaign_updated("biz-1", "camp-1", ["budget", "title"])
        row = query_audit_trail(conn, event_type="campaign_updated")[0]
        assert row["campaign_id"] == "camp-1"
        assert row["metadata"] == {"fields": "budget,title"}
        close_audit_db(conn)

    def test_log_profile_saved(self, tmp_path: Path) -> None:
        logger, conn = self._make_logger(tmp_path)
        logger.log_profile_saved("inf-user", "influencer", "prof-1", created=False)
        row = query_audit_trail(conn, principal_id="inf-user")[0]
        assert row["campaign_id"] is None
        assert row["metadata"] == {
            "role": "influencer",
            "profile_id": "prof-1",
            "action": "replaced",
        }
        close_audit_db(conn)
