"""Tests for the identity gate and the failure envelope."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from marketplace.app import create_app
from marketplace.store.store import MarketplaceStore

BUSINESS = {"X-User-Id": "biz-user-1", "X-User-Role": "business"}


class TestIdentityGate:
    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"X-User-Id": "biz-user-1"},
            {"X-User-Role": "business"},
            {"X-User-Id": "   ", "X-User-Role": "business"},
            {"X-User-Id": "admin-1", "X-User-Role": "admin"},
        ],
        ids=["none", "no_role", "no_id", "blank_id", "unknown_role"],
    )
    def test_rejected_with_401(self, client: TestClient, headers: dict[str, str]) -> None:
        response = client.get("/api/campaigns/my-campaigns", headers=headers)

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Authentication required",
            "error": "unauthenticated",
        }

    def test_role_is_case_insensitive(self, client: TestClient) -> None:
        response = client.get(
            "/api/campaigns/my-campaigns",
            headers={"X-User-Id": "biz-user-1", "X-User-Role": "Business"},
        )
        assert response.status_code == 200

    def test_health_needs_no_identity(self, client: TestClient) -> None:
        assert client.get("/health").status_code == 200


class TestRequestValidation:
    def test_malformed_body(self, client: TestClient) -> None:
        response = client.post("/api/campaigns", json=[1, 2], headers=BUSINESS)

        assert response.status_code == 422
        assert response.json() == {
            "success": False,
            "message": "Invalid request: body",
            "error": "validation_error",
            "fields": ["body"],
        }

    def test_bad_filter_values(self, client: TestClient) -> None:
        response = client.get(
            "/api/campaigns", params={"minBudget": "lots"}, headers=BUSINESS
        )

        assert response.status_code == 422
        assert response.json()["fields"] == ["minBudget"]

    def test_unknown_status_event(self, client: TestClient) -> None:
        response = client.post(
            "/api/campaigns/any/status", json={"event": "explode"}, headers=BUSINESS
        )

        assert response.status_code == 422
        assert response.json()["fields"] == ["event"]


class TestServerErrors:
    def test_store_failure_hides_details(
        self, services: dict[str, Any], store: MarketplaceStore
    ) -> None:
        store.close()
        client = TestClient(create_app(services), raise_server_exceptions=False)

        response = client.get("/api/campaigns/my-campaigns", headers=BUSINESS)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Internal server error",
            "error": "store_error",
        }

    def test_unexpected_exception(self, services: dict[str, Any]) -> None:
        matching = MagicMock()
        matching.list_active_campaigns.side_effect = RuntimeError("boom")
        services["matching"] = matching
        client = TestClient(create_app(services), raise_server_exceptions=False)

        response = client.get("/api/campaigns", headers=BUSINESS)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Internal server error",
            "error": "internal_error",
        }
        assert "boom" not in response.text

    def test_errors_carry_request_id(self, client: TestClient) -> None:
        response = client.get(
            "/api/campaigns/my-campaigns", headers={"X-Request-ID": "req-42"}
        )

        assert response.status_code == 401
        assert response.headers["X-Request-ID"] == "req-42"
