"""SQLite schema for the marketplace document store.

Each aggregate is one JSON document per row plus a handful of query columns
that mirror fields inside the document.  The ``campaign_participants`` table
indexes applications and invitations by influencer and enforces the
one-per-(campaign, influencer) rule with a unique constraint.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path


def connect(db_path: Path | str) -> sqlite3.Connection:
    """Open a connection suitable for explicit ``BEGIN IMMEDIATE`` transactions.

    ``isolation_level=None`` disables the sqlite3 module's implicit
    transactions so :meth:`MarketplaceStore.transaction` owns BEGIN/COMMIT.

    Args:
        db_path: Path to the SQLite database file, or ``":memory:"``.

    Returns:
        An open sqlite3.Connection with WAL mode and foreign keys enabled.
    """
    conn = sqlite3.connect(str(db_path), isolation_level=None, check_same_thread=False)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    conn.execute("PRAGMA busy_timeout=5000")
    return conn


def init_marketplace_tables(conn: sqlite3.Connection) -> None:
    """Create the marketplace tables and indexes if they do not already exist.

    Args:
        conn: An open sqlite3.Connection.
    """
    conn.execute("""
        CREATE TABLE IF NOT EXISTS business_profiles (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL UNIQUE,
            doc_json TEXT NOT NULL,
            version INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS influencer_profiles (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL UNIQUE,
            niche TEXT NOT NULL,
            platform TEXT NOT NULL,
            follower_count INTEGER NOT NULL DEFAULT 0,
            location TEXT NOT NULL DEFAULT '',
            is_active INTEGER NOT NULL DEFAULT 1,
            doc_json TEXT NOT NULL,
            version INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS campaigns (
            id TEXT PRIMARY KEY,
            business_id TEXT NOT NULL,
            business_profile_id TEXT NOT NULL REFERENCES business_profiles (id),
            status TEXT NOT NULL,
            category TEXT NOT NULL,
            platforms_json TEXT NOT NULL DEFAULT '[]',
            per_influencer_cents INTEGER NOT NULL DEFAULT 0,
            doc_json TEXT NOT NULL,
            version INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS campaign_participants (
            campaign_id TEXT NOT NULL REFERENCES campaigns (id),
            influencer_id TEXT NOT NULL,
            kind TEXT NOT NULL CHECK (kind IN ('application', 'invitation')),
            record_id TEXT NOT NULL,
            status TEXT NOT NULL,
            created_at TEXT NOT NULL,
            UNIQUE (campaign_id, influencer_id, kind)
        )
    """)

    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_campaigns_business ON campaigns (business_id, status)"
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_campaigns_status_category ON campaigns (status, category)"
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_campaigns_created ON campaigns (created_at)"
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_participants_influencer "
        "ON campaign_participants (influencer_id, kind)"
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_influencers_niche ON influencer_profiles (niche, platform)"
    )


def init_marketplace_db(db_path: Path | str) -> sqlite3.Connection:
    """Open the marketplace database and make sure its schema exists.

    Args:
        db_path: Path to the SQLite database file, or ``":memory:"``.

    Returns:
        An open, initialized sqlite3.Connection.
    """
    conn = connect(db_path)
    init_marketplace_tables(conn)
    return conn
