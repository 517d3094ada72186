"""SQLite-backed document store for profiles and campaigns.

Mirrors the state-store pattern: accepts a sqlite3.Connection, uses
parameterized queries exclusively, and serializes documents with
``model_dump_json``.  Writes go through :meth:`MarketplaceStore.transaction`
so that a campaign, its participant index rows, and the profile documents an
operation touches commit or roll back together.
"""

from __future__ import annotations

import json
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal
from typing import Any, Literal

import structlog

from marketplace.domain.errors import (
    ConcurrentModificationError,
    DuplicateApplicationError,
    DuplicateInvitationError,
    StoreError,
)
from marketplace.domain.models import BusinessProfile, Campaign, InfluencerProfile, to_cents
from marketplace.domain.types import CampaignCategory, CampaignStatus, Platform

logger = structlog.get_logger()

ParticipantKind = Literal["application", "invitation"]


class MarketplaceStore:
    """Persist and retrieve marketplace documents in SQLite.

    Every document row carries a ``version`` column.  Updates only succeed
    when the stored version still matches the version the caller loaded;
    otherwise :class:`ConcurrentModificationError` is raised.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize with an open database connection.

        Args:
            conn: An open sqlite3.Connection whose database already has the
                  marketplace tables (see ``init_marketplace_tables``) and was
                  opened with ``isolation_level=None``.
        """
        self._conn = conn
        self._lock = threading.RLock()
        self._depth = 0

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[MarketplaceStore]:
        """Run the enclosed reads and writes as one ``BEGIN IMMEDIATE`` transaction.

        Nested calls join the outer transaction.  Domain errors raised inside
        the block roll back every write and propagate unchanged; sqlite
        failures are re-raised as :class:`StoreError`.
        """
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            self._run("BEGIN IMMEDIATE")
            self._depth = 1
            try:
                yield self
            except BaseException:
                self._depth = 0
                self._rollback()
                raise
            self._depth = 0
            try:
                self._run("COMMIT")
            except StoreError:
                self._rollback()
                raise

    def _rollback(self) -> None:
        try:
            self._conn.execute("ROLLBACK")
        except sqlite3.Error:
            logger.exception("store_rollback_failed")

    def _run(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as exc:
            logger.error("store_query_failed", error=str(exc), sql=sql.split()[0])
            raise StoreError(f"Persistence failure: {exc}") from exc

    def _fetch_docs(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> list[str]:
        with self._lock:
            return [row[0] for row in self._run(sql, params).fetchall()]

    def ping(self) -> None:
        """Run a trivial query; raises StoreError if the database is unusable."""
        with self._lock:
            self._run("SELECT 1")

    # ------------------------------------------------------------------
    # Generic versioned writes
    # ------------------------------------------------------------------

    def _update_versioned(
        self,
        table: str,
        doc_id: str,
        expected_version: int,
        columns: dict[str, Any],
    ) -> None:
        assignments = ", ".join(f"{name} = ?" for name in columns)
        cursor = self._run(
            f"UPDATE {table} SET {assignments}, version = version + 1 "
            "WHERE id = ? AND version = ?",
            [*columns.values(), doc_id, expected_version],
        )
        if cursor.rowcount == 0:
            raise ConcurrentModificationError(
                f"{table} document {doc_id} was modified concurrently; reload and retry"
            )

    # ------------------------------------------------------------------
    # Business profiles
    # ------------------------------------------------------------------

    def insert_business_profile(self, profile: BusinessProfile) -> None:
        with self.transaction():
            self._run(
                """
                INSERT INTO business_profiles (
                    id, user_id, doc_json, version, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    profile.id,
                    profile.user_id,
                    profile.model_dump_json(by_alias=True),
                    profile.version,
                    profile.created_at.isoformat(),
                    profile.updated_at.isoformat(),
                ),
            )

    def update_business_profile(self, profile: BusinessProfile) -> None:
        """Replace a business profile document, bumping its version."""
        with self.transaction():
            expected = profile.version
            profile.version = expected + 1
            try:
                self._update_versioned(
                    "business_profiles",
                    profile.id,
                    expected,
                    {
                        "doc_json": profile.model_dump_json(by_alias=True),
                        "updated_at": profile.updated_at.isoformat(),
                    },
                )
            except ConcurrentModificationError:
                profile.version = expected
                raise

    def get_business_profile(self, profile_id: str) -> BusinessProfile | None:
        docs = self._fetch_docs(
            "SELECT doc_json FROM business_profiles WHERE id = ?", (profile_id,)
        )
        return BusinessProfile.model_validate_json(docs[0]) if docs else None

    def get_business_profile_by_user(self, user_id: str) -> BusinessProfile | None:
        docs = self._fetch_docs(
            "SELECT doc_json FROM business_profiles WHERE user_id = ?", (user_id,)
        )
        return BusinessProfile.model_validate_json(docs[0]) if docs else None

    def list_business_profiles(self) -> list[BusinessProfile]:
        docs = self._fetch_docs("SELECT doc_json FROM business_profiles ORDER BY created_at")
        return [BusinessProfile.model_validate_json(d) for d in docs]

    # ------------------------------------------------------------------
    # Influencer profiles
    # ------------------------------------------------------------------

    @staticmethod
    def _influencer_columns(profile: InfluencerProfile) -> dict[str, Any]:
        return {
            "niche": profile.primary_link.niche,
            "platform": profile.primary_link.platform.value,
            "follower_count": profile.primary_link.follower_count,
            "location": (profile.content_info.primary_location or "").lower(),
            "is_active": int(profile.is_active),
            "doc_json": profile.model_dump_json(by_alias=True),
            "updated_at": profile.updated_at.isoformat(),
        }

    def insert_influencer_profile(self, profile: InfluencerProfile) -> None:
        columns = self._influencer_columns(profile)
        columns.update(
            id=profile.id,
            user_id=profile.user_id,
            version=profile.version,
            created_at=profile.created_at.isoformat(),
        )
        names = ", ".join(columns)
        placeholders = ", ".join("?" for _ in columns)
        with self.transaction():
            self._run(
                f"INSERT INTO influencer_profiles ({names}) VALUES ({placeholders})",
                list(columns.values()),
            )

    def update_influencer_profile(self, profile: InfluencerProfile) -> None:
        """Replace an influencer profile document, bumping its version."""
        with self.transaction():
            expected = profile.version
            profile.version = expected + 1
            try:
                self._update_versioned(
                    "influencer_profiles",
                    profile.id,
                    expected,
                    self._influencer_columns(profile),
                )
            except ConcurrentModificationError:
                profile.version = expected
                raise

    def get_influencer_profile(self, profile_id: str) -> InfluencerProfile | None:
        docs = self._fetch_docs(
            "SELECT doc_json FROM influencer_profiles WHERE id = ?", (profile_id,)
        )
        return InfluencerProfile.model_validate_json(docs[0]) if docs else None

    def get_influencer_profile_by_user(self, user_id: str) -> InfluencerProfile | None:
        docs = self._fetch_docs(
            "SELECT doc_json FROM influencer_profiles WHERE user_id = ?", (user_id,)
        )
        return InfluencerProfile.model_validate_json(docs[0]) if docs else None

    def list_influencer_profiles(
        self,
        *,
        niche: str | None = None,
        platform: str | None = None,
        min_followers: int | None = None,
        max_followers: int | None = None,
        location: str | None = None,
        active_only: bool = True,
        limit: int | None = None,
    ) -> list[InfluencerProfile]:
        """Query influencer profiles, largest audience first.

        All filters are optional.  ``niche`` and ``platform`` match exactly
        (case-insensitive); ``location`` is a case-insensitive substring match.

        Returns:
            Matching profiles ordered by follower count descending.
        """
        conditions: list[str] = []
        params: list[Any] = []

        if active_only:
            conditions.append("is_active = 1")
        if niche is not None:
            conditions.append("niche = ?")
            params.append(niche.strip().lower())
        if platform is not None:
            conditions.append("platform = ?")
            params.append(platform.strip().lower())
        if min_followers is not None:
            conditions.append("follower_count >= ?")
            params.append(min_followers)
        if max_followers is not None:
            conditions.append("follower_count <= ?")
            params.append(max_followers)
        if location:
            conditions.append("instr(location, ?) > 0")
            params.append(location.strip().lower())

        where_clause = ""
        if conditions:
            where_clause = "WHERE " + " AND ".join(conditions)

        query = (
            f"SELECT doc_json FROM influencer_profiles {where_clause} "
            "ORDER BY follower_count DESC, created_at"
        )
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        return [InfluencerProfile.model_validate_json(d) for d in self._fetch_docs(query, params)]

    # ------------------------------------------------------------------
    # Campaigns
    # ------------------------------------------------------------------

    @staticmethod
    def _campaign_columns(campaign: Campaign) -> dict[str, Any]:
        return {
            "status": campaign.status.value,
            "category": campaign.category.value,
            "platforms_json": json.dumps([p.value for p in campaign.platforms]),
            "per_influencer_cents": to_cents(campaign.budget.per_influencer),
            "doc_json": campaign.model_dump_json(by_alias=True),
            "updated_at": campaign.updated_at.isoformat(),
        }

    def insert_campaign(self, campaign: Campaign) -> None:
        columns = self._campaign_columns(campaign)
        columns.update(
            id=campaign.id,
            business_id=campaign.business_id,
            business_profile_id=campaign.business_profile_id,
            version=campaign.version,
            created_at=campaign.created_at.isoformat(),
        )
        names = ", ".join(columns)
        placeholders = ", ".join("?" for _ in columns)
        with self.transaction():
            self._run(
                f"INSERT INTO campaigns ({names}) VALUES ({placeholders})",
                list(columns.values()),
            )

    def update_campaign(self, campaign: Campaign) -> None:
        """Replace a campaign document, bumping its version."""
        with self.transaction():
            expected = campaign.version
            campaign.version = expected + 1
            try:
                self._update_versioned(
                    "campaigns", campaign.id, expected, self._campaign_columns(campaign)
                )
            except ConcurrentModificationError:
                campaign.version = expected
                raise

    def get_campaign(self, campaign_id: str) -> Campaign | None:
        docs = self._fetch_docs("SELECT doc_json FROM campaigns WHERE id = ?", (campaign_id,))
        return Campaign.model_validate_json(docs[0]) if docs else None

    def get_campaigns(self, campaign_ids: list[str]) -> dict[str, Campaign]:
        if not campaign_ids:
            return {}
        placeholders = ", ".join("?" for _ in campaign_ids)
        docs = self._fetch_docs(
            f"SELECT doc_json FROM campaigns WHERE id IN ({placeholders})", campaign_ids
        )
        campaigns = [Campaign.model_validate_json(d) for d in docs]
        return {c.id: c for c in campaigns}

    def list_campaigns(
        self,
        *,
        status: CampaignStatus | None = None,
        category: CampaignCategory | str | None = None,
        platform: Platform | str | None = None,
        min_budget: Decimal | None = None,
        max_budget: Decimal | None = None,
        business_id: str | None = None,
        limit: int | None = None,
    ) -> list[Campaign]:
        """Query campaigns with flexible filtering, newest first.

        Budget bounds are inclusive and apply to ``budget.perInfluencer``,
        compared in whole cents.  ``platform`` is a membership test against
        the campaign's platform list.

        Returns:
            Matching campaigns ordered by creation time descending.
        """
        conditions: list[str] = []
        params: list[Any] = []

        if status is not None:
            conditions.append("status = ?")
            params.append(str(status))
        if category is not None:
            conditions.append("category = ?")
            params.append(str(category))
        if platform is not None:
            conditions.append(
                "EXISTS (SELECT 1 FROM json_each(campaigns.platforms_json) WHERE value = ?)"
            )
            params.append(str(platform))
        if min_budget is not None:
            conditions.append("per_influencer_cents >= ?")
            params.append(to_cents(min_budget, ROUND_CEILING))
        if max_budget is not None:
            conditions.append("per_influencer_cents <= ?")
            params.append(to_cents(max_budget, ROUND_FLOOR))
        if business_id is not None:
            conditions.append("business_id = ?")
            params.append(business_id)

        where_clause = ""
        if conditions:
            where_clause = "WHERE " + " AND ".join(conditions)

        query = (
            f"SELECT doc_json FROM campaigns {where_clause} "
            "ORDER BY created_at DESC, rowid DESC"
        )
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        return [Campaign.model_validate_json(d) for d in self._fetch_docs(query, params)]

    # ------------------------------------------------------------------
    # Participant index
    # ------------------------------------------------------------------

    def add_participant(
        self,
        campaign_id: str,
        influencer_id: str,
        kind: ParticipantKind,
        record_id: str,
        status: str,
        created_at: str,
    ) -> None:
        """Index an application or invitation by influencer.

        The unique constraint on ``(campaign_id, influencer_id, kind)`` makes
        this the atomic guard against duplicate applications and invitations.

        Raises:
            DuplicateApplicationError: If *kind* is ``application`` and a row exists.
            DuplicateInvitationError: If *kind* is ``invitation`` and a row exists.
        """
        with self.transaction():
            try:
                self._conn.execute(
                    """
                    INSERT INTO campaign_participants (
                        campaign_id, influencer_id, kind, record_id, status, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (campaign_id, influencer_id, kind, record_id, status, created_at),
                )
            except sqlite3.IntegrityError as exc:
                if "UNIQUE" not in str(exc):
                    raise StoreError(f"Persistence failure: {exc}") from exc
                if kind == "application":
                    raise DuplicateApplicationError(campaign_id, influencer_id) from exc
                raise DuplicateInvitationError(campaign_id, influencer_id) from exc
            except sqlite3.Error as exc:
                raise StoreError(f"Persistence failure: {exc}") from exc

    def set_participant_status(
        self, campaign_id: str, influencer_id: str, kind: ParticipantKind, status: str
    ) -> None:
        with self.transaction():
            self._run(
                "UPDATE campaign_participants SET status = ? "
                "WHERE campaign_id = ? AND influencer_id = ? AND kind = ?",
                (status, campaign_id, influencer_id, kind),
            )

    def participant_campaign_ids(
        self,
        influencer_id: str,
        kind: ParticipantKind,
        status: str | None = None,
    ) -> list[str]:
        """Return campaign ids an influencer applied to or was invited to, newest first."""
        query = (
            "SELECT campaign_id FROM campaign_participants "
            "WHERE influencer_id = ? AND kind = ?"
        )
        params: list[Any] = [influencer_id, kind]
        if status is not None:
            query += " AND status = ?"
            params.append(status)
        query += " ORDER BY created_at DESC"
        return self._fetch_docs(query, params)

    def rebuild_participants(self, campaign: Campaign) -> None:
        """Rewrite the participant index rows for one campaign from its document."""
        with self.transaction():
            self._run("DELETE FROM campaign_participants WHERE campaign_id = ?", (campaign.id,))
            for application in campaign.applications:
                self.add_participant(
                    campaign.id,
                    application.influencer_id,
                    "application",
                    application.id,
                    application.status.value,
                    application.applied_at.isoformat(),
                )
            for invitation in campaign.invitations:
                self.add_participant(
                    campaign.id,
                    invitation.influencer_id,
                    "invitation",
                    invitation.id,
                    invitation.status.value,
                    invitation.sent_at.isoformat(),
                )

    def close(self) -> None:
        """Close the underlying connection."""
        with self._lock:
            self._conn.close()
