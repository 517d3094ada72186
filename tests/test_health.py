"""Tests for /health and /ready observability endpoints.

Uses FastAPI TestClient with in-memory SQLite connections to verify
liveness and readiness checks without external dependencies.
"""

from __future__ import annotations

import sqlite3

from fastapi import FastAPI
from fastapi.testclient import TestClient

from marketplace.health import register_health_routes
from marketplace.store.schema import init_marketplace_db
from marketplace.store.store import MarketplaceStore

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_app(services: dict | None = None) -> FastAPI:
    """Create a minimal FastAPI app with health routes and given services."""
    app = FastAPI()
    app.state.services = services or {}
    register_health_routes(app)
    return app


def _memory_store() -> MarketplaceStore:
    return MarketplaceStore(init_marketplace_db(":memory:"))


# ---------------------------------------------------------------------------
# /health (liveness)
# ---------------------------------------------------------------------------


class TestHealthEndpoint:
    """GET /health liveness check."""

    def test_health_returns_200(self) -> None:
        client = TestClient(_make_app())

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


# ---------------------------------------------------------------------------
# /ready (readiness)
# ---------------------------------------------------------------------------


class TestReadyEndpoint:
    """GET /ready readiness check."""

    def test_ready_returns_200_when_services_ok(self) -> None:
        store = _memory_store()
        conn = sqlite3.connect(":memory:", check_same_thread=False)
        client = TestClient(_make_app({"store": store, "audit_conn": conn}))

        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ready",
            "checks": {"store": "ok", "audit_db": "ok"},
        }

        store.close()
        conn.close()

    def test_ready_returns_503_when_audit_db_missing(self) -> None:
        """audit_conn is None -> audit_db fails."""
        store = _memory_store()
        client = TestClient(_make_app({"store": store, "audit_conn": None}))

        response = client.get("/ready")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "not_ready"
        assert body["checks"]["audit_db"] == "fail"
        assert body["checks"]["store"] == "ok"

        store.close()

    def test_ready_returns_503_when_store_missing(self) -> None:
        conn = sqlite3.connect(":memory:", check_same_thread=False)
        client = TestClient(_make_app({"audit_conn": conn}))

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["checks"] == {"store": "fail", "audit_db": "ok"}

        conn.close()

    def test_ready_returns_503_when_connections_closed(self) -> None:
        store = _memory_store()
        conn = sqlite3.connect(":memory:", check_same_thread=False)
        store.close()
        conn.close()
        client = TestClient(_make_app({"store": store, "audit_conn": conn}))

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["checks"] == {"store": "fail", "audit_db": "fail"}
