"""Fixtures for exercising the HTTP surface through FastAPI's TestClient."""

from __future__ import annotations

import sqlite3
from typing import Any

import pytest
from fastapi.testclient import TestClient

from marketplace.app import create_app
from marketplace.audit.logger import AuditLogger
from marketplace.config import Settings
from marketplace.lifecycle.engine import CampaignLifecycleEngine
from marketplace.lifecycle.profiles import ProfileService
from marketplace.matching.engine import MatchingEngine
from marketplace.store.store import MarketplaceStore


@pytest.fixture
def services(
    store: MarketplaceStore,
    audit_conn: sqlite3.Connection,
    audit_logger: AuditLogger,
    lifecycle: CampaignLifecycleEngine,
    profiles: ProfileService,
    matching: MatchingEngine,
) -> dict[str, Any]:
    """The services dict ``initialize_services`` would build, on the frozen clock."""
    return {
        "_settings": Settings(_env_file=None),  # type: ignore[call-arg]
        "store": store,
        "audit_conn": audit_conn,
        "audit_logger": audit_logger,
        "lifecycle": lifecycle,
        "profiles": profiles,
        "matching": matching,
    }


@pytest.fixture
def client(services: dict[str, Any]) -> TestClient:
    # Not entered as a context manager, so the lifespan never closes the
    # fixture-owned connections.
    return TestClient(create_app(services))
