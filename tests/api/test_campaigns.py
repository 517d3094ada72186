"""HTTP tests for the campaign endpoints, driven end to end through the app."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient

BUSINESS = {"X-User-Id": "biz-user-1", "X-User-Role": "business"}
OTHER_BUSINESS = {"X-User-Id": "biz-user-2", "X-User-Role": "business"}
INFLUENCER = {"X-User-Id": "inf-user-1", "X-User-Role": "influencer"}
OTHER_INFLUENCER = {"X-User-Id": "inf-user-2", "X-User-Role": "influencer"}


@pytest.fixture
def onboarded(
    client: TestClient,
    make_business_data: Callable[..., dict[str, Any]],
    make_influencer_data: Callable[..., dict[str, Any]],
) -> dict[str, str]:
    """Save one business and one influencer profile; return the influencer's id."""
    client.post("/api/profile/business", json=make_business_data(), headers=BUSINESS)
    created = client.post(
        "/api/profile/influencer", json=make_influencer_data(), headers=INFLUENCER
    )
    return {"influencer_id": created.json()["profile"]["id"]}


@pytest.fixture
def campaign_id(
    client: TestClient,
    onboarded: dict[str, str],
    make_campaign_data: Callable[..., dict[str, Any]],
) -> str:
    response = client.post("/api/campaigns", json=make_campaign_data(), headers=BUSINESS)
    assert response.status_code == 201
    return response.json()["campaign"]["id"]


class TestCreateCampaign:
    def test_created_active_with_string_money(
        self,
        client: TestClient,
        onboarded: dict[str, str],
        make_campaign_data: Callable[..., dict[str, Any]],
    ) -> None:
        response = client.post("/api/campaigns", json=make_campaign_data(), headers=BUSINESS)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Campaign created successfully"
        campaign = body["campaign"]
        assert campaign["status"] == "active"
        assert campaign["budget"]["total"] == "5000"
        assert campaign["budget"]["perInfluencer"] == "500"
        assert campaign["applicationsCount"] == 0

    def test_requires_business_profile(
        self, client: TestClient, make_campaign_data: Callable[..., dict[str, Any]]
    ) -> None:
        response = client.post("/api/campaigns", json=make_campaign_data(), headers=BUSINESS)

        assert response.status_code == 404
        assert response.json()["error"] == "profile_required"
        assert response.json()["message"] == (
            "Business profile not found. Please create a business profile first."
        )

    def test_influencers_cannot_create(
        self,
        client: TestClient,
        onboarded: dict[str, str],
        make_campaign_data: Callable[..., dict[str, Any]],
    ) -> None:
        response = client.post("/api/campaigns", json=make_campaign_data(), headers=INFLUENCER)

        assert response.status_code == 403
        assert response.json()["message"] == "Only businesses can create campaigns"

    def test_invalid_fields_reported(
        self,
        client: TestClient,
        onboarded: dict[str, str],
        make_campaign_data: Callable[..., dict[str, Any]],
    ) -> None:
        payload = make_campaign_data(maxInfluencers=0)
        del payload["category"]

        response = client.post("/api/campaigns", json=payload, headers=BUSINESS)

        assert response.status_code == 422
        assert set(response.json()["fields"]) == {"category", "maxInfluencers"}


class TestListings:
    def test_browse_and_filter(
        self, client: TestClient, campaign_id: str
    ) -> None:
        response = client.get("/api/campaigns", headers=INFLUENCER)

        assert response.status_code == 200
        cards = response.json()["campaigns"]
        assert [c["id"] for c in cards] == [campaign_id]
        assert cards[0]["company"] == "Glow Labs"
        assert cards[0]["budget"] == "500"

        filtered = client.get(
            "/api/campaigns", params={"platform": "youtube"}, headers=INFLUENCER
        )
        assert filtered.json()["campaigns"] == []

        by_budget = client.get(
            "/api/campaigns", params={"minBudget": "100", "maxBudget": "1000"}, headers=INFLUENCER
        )
        assert len(by_budget.json()["campaigns"]) == 1

    def test_fixed_paths_not_captured_as_campaign_id(
        self, client: TestClient, campaign_id: str
    ) -> None:
        mine = client.get("/api/campaigns/my-campaigns", headers=BUSINESS)
        assert mine.status_code == 200
        assert [c["id"] for c in mine.json()["campaigns"]] == [campaign_id]

        recommended = client.get("/api/campaigns/recommended", headers=INFLUENCER)
        assert recommended.status_code == 200
        assert [c["id"] for c in recommended.json()["campaigns"]] == [campaign_id]

        assert client.get("/api/campaigns/my-applications", headers=INFLUENCER).json() == {
            "success": True,
            "applications": [],
        }
        assert client.get("/api/campaigns/my-invitations", headers=INFLUENCER).json() == {
            "success": True,
            "invitations": [],
        }

    def test_influencer_matches(self, client: TestClient, onboarded: dict[str, str]) -> None:
        response = client.get(
            "/api/campaigns/influencer-matches", params={"limit": "5"}, headers=BUSINESS
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        match = body["influencers"][0]
        assert match["id"] == onboarded["influencer_id"]
        assert match["username"] == "@mayachen"
        assert 0 <= match["matchScore"] <= 100

    def test_influencers_cannot_browse_matches(
        self, client: TestClient, onboarded: dict[str, str]
    ) -> None:
        response = client.get("/api/campaigns/influencer-matches", headers=INFLUENCER)
        assert response.status_code == 403

    def test_influencer_matches_by_score(
        self, client: TestClient, onboarded: dict[str, str]
    ) -> None:
        kept = client.get(
            "/api/campaigns/influencer-matches",
            params={"minScore": "50", "limit": "1"},
            headers=BUSINESS,
        ).json()
        assert [m["id"] for m in kept["influencers"]] == [onboarded["influencer_id"]]
        assert set(kept["influencers"][0]["scoreBreakdown"]) == {
            "niche",
            "audience",
            "followerCount",
            "engagement",
            "location",
            "platform",
        }

        dropped = client.get(
            "/api/campaigns/influencer-matches", params={"minScore": "100"}, headers=BUSINESS
        )
        assert dropped.json()["total"] == 0

    def test_business_matches(self, client: TestClient, onboarded: dict[str, str]) -> None:
        response = client.get(
            "/api/campaigns/business-matches", params={"limit": "5"}, headers=INFLUENCER
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        match = body["businesses"][0]
        assert match["company"] == "Glow Labs"
        assert match["matchScore"] == 80
        assert match["scoreBreakdown"]["niche"] == 100

        assert client.get(
            "/api/campaigns/business-matches", headers=BUSINESS
        ).status_code == 403
        invalid = client.get(
            "/api/campaigns/business-matches", params={"minScore": "250"}, headers=INFLUENCER
        )
        assert invalid.status_code == 422
        assert invalid.json()["fields"] == ["minScore"]


class TestSingleCampaign:
    def test_owner_and_applicant_views(
        self,
        client: TestClient,
        campaign_id: str,
        make_influencer_data: Callable[..., dict[str, Any]],
    ) -> None:
        client.post(
            "/api/profile/influencer",
            json=make_influencer_data(fullName="Leo Park"),
            headers=OTHER_INFLUENCER,
        )
        for headers in (INFLUENCER, OTHER_INFLUENCER):
            client.post(f"/api/campaigns/{campaign_id}/apply", json={}, headers=headers)

        owner = client.get(f"/api/campaigns/{campaign_id}", headers=BUSINESS)
        assert owner.status_code == 200
        assert len(owner.json()["campaign"]["applications"]) == 2

        applicant = client.get(f"/api/campaigns/{campaign_id}", headers=OTHER_INFLUENCER)
        campaign = applicant.json()["campaign"]
        assert len(campaign["applications"]) == 1
        assert campaign["applications"][0]["userId"] == OTHER_INFLUENCER["X-User-Id"]
        assert campaign["applicationsCount"] == 2

        missing = client.get("/api/campaigns/nope", headers=BUSINESS)
        assert missing.status_code == 404

    def test_update_campaign(
        self,
        client: TestClient,
        campaign_id: str,
        make_business_data: Callable[..., dict[str, Any]],
        make_campaign_data: Callable[..., dict[str, Any]],
    ) -> None:
        payload = make_campaign_data(
            title="Summer Glow Launch",
            budget={"total": "6000", "perInfluencer": "600.50", "currency": "USD"},
        )

        response = client.put(f"/api/campaigns/{campaign_id}", json=payload, headers=BUSINESS)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Campaign updated successfully"
        assert body["campaign"]["title"] == "Summer Glow Launch"
        assert body["campaign"]["budget"]["perInfluencer"] == "600.50"

        client.post("/api/profile/business", json=make_business_data(), headers=OTHER_BUSINESS)
        foreign = client.put(
            f"/api/campaigns/{campaign_id}", json=payload, headers=OTHER_BUSINESS
        )
        assert foreign.status_code == 403
        assert foreign.json()["error"] == "forbidden"

        payload["budget"]["perInfluencer"] = "600.505"
        invalid = client.put(f"/api/campaigns/{campaign_id}", json=payload, headers=BUSINESS)
        assert invalid.status_code == 422
        assert invalid.json()["fields"] == ["budget.perInfluencer"]


class TestApplicationFlow:
    def test_apply_review_accept(self, client: TestClient, campaign_id: str) -> None:
        applied = client.post(
            f"/api/campaigns/{campaign_id}/apply",
            json={"proposedRate": 450.5, "message": "Love this serum"},
            headers=INFLUENCER,
        )

        assert applied.status_code == 201
        assert applied.json()["message"] == "Application submitted successfully"
        application = applied.json()["application"]
        assert application["status"] == "pending"
        assert application["proposedRate"] == "450.5"

        listed = client.get(f"/api/campaigns/{campaign_id}/applications", headers=BUSINESS)
        applicants = listed.json()["applications"]
        assert [a["application"]["id"] for a in applicants] == [application["id"]]
        assert applicants[0]["influencer"]["name"] == "Maya Chen"

        reviewed = client.post(
            f"/api/campaigns/{campaign_id}/applications/{application['id']}/review",
            json={"decision": "accept"},
            headers=BUSINESS,
        )

        assert reviewed.status_code == 200
        assert reviewed.json()["message"] == "Application accepted successfully"

        mine = client.get("/api/campaigns/my-applications", headers=INFLUENCER).json()
        assert mine["applications"][0]["application"]["status"] == "accepted"
        assert mine["applications"][0]["campaign"]["id"] == campaign_id

    def test_apply_without_body(self, client: TestClient, campaign_id: str) -> None:
        response = client.post(f"/api/campaigns/{campaign_id}/apply", headers=INFLUENCER)

        assert response.status_code == 201
        assert response.json()["application"]["proposedRate"] == "0"

    def test_duplicate_application_is_409(self, client: TestClient, campaign_id: str) -> None:
        client.post(f"/api/campaigns/{campaign_id}/apply", json={}, headers=INFLUENCER)

        response = client.post(f"/api/campaigns/{campaign_id}/apply", json={}, headers=INFLUENCER)

        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "message": "You have already applied to this campaign",
            "error": "duplicate_application",
        }

    def test_withdraw(self, client: TestClient, campaign_id: str) -> None:
        applied = client.post(f"/api/campaigns/{campaign_id}/apply", json={}, headers=INFLUENCER)
        application_id = applied.json()["application"]["id"]

        response = client.post(
            f"/api/campaigns/{campaign_id}/applications/{application_id}/withdraw",
            headers=INFLUENCER,
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Application withdrawn successfully"
        assert response.json()["application"]["status"] == "withdrawn"

    def test_other_business_cannot_review(
        self,
        client: TestClient,
        campaign_id: str,
        make_business_data: Callable[..., dict[str, Any]],
    ) -> None:
        client.post(
            "/api/profile/business",
            json=make_business_data(companyName="Rival Co"),
            headers=OTHER_BUSINESS,
        )
        applied = client.post(f"/api/campaigns/{campaign_id}/apply", json={}, headers=INFLUENCER)
        application_id = applied.json()["application"]["id"]

        response = client.post(
            f"/api/campaigns/{campaign_id}/applications/{application_id}/review",
            json={"decision": "accept"},
            headers=OTHER_BUSINESS,
        )

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"
        assert response.json()["message"] == (
            "You do not have permission to manage this campaign"
        )

    def test_unknown_campaign_is_404(self, client: TestClient, onboarded: dict[str, str]) -> None:
        response = client.post("/api/campaigns/nope/apply", json={}, headers=INFLUENCER)

        assert response.status_code == 404
        assert response.json()["message"] == "Campaign not found"


class TestCampaignStatus:
    def test_pause_blocks_applications_then_resume(
        self, client: TestClient, campaign_id: str
    ) -> None:
        paused = client.post(
            f"/api/campaigns/{campaign_id}/status", json={"event": "pause"}, headers=BUSINESS
        )
        assert paused.status_code == 200
        assert paused.json()["message"] == "Campaign is now paused"

        blocked = client.post(f"/api/campaigns/{campaign_id}/apply", json={}, headers=INFLUENCER)
        assert blocked.status_code == 409
        assert blocked.json()["message"] == "Campaign is not accepting applications"

        resumed = client.post(
            f"/api/campaigns/{campaign_id}/status", json={"event": "resume"}, headers=BUSINESS
        )
        assert resumed.json()["campaign"]["status"] == "active"

    def test_invalid_transition_is_409(self, client: TestClient, campaign_id: str) -> None:
        client.post(
            f"/api/campaigns/{campaign_id}/status", json={"event": "cancel"}, headers=BUSINESS
        )

        response = client.post(
            f"/api/campaigns/{campaign_id}/status", json={"event": "resume"}, headers=BUSINESS
        )

        assert response.status_code == 409
        assert response.json()["error"] == "invalid_transition"


class TestInvitationFlow:
    def test_invite_and_accept(
        self, client: TestClient, campaign_id: str, onboarded: dict[str, str]
    ) -> None:
        sent = client.post(
            f"/api/campaigns/{campaign_id}/invite",
            json={"influencerId": onboarded["influencer_id"], "proposedRate": 600},
            headers=BUSINESS,
        )

        assert sent.status_code == 201
        assert sent.json()["message"] == "Invitation sent successfully"
        invitation_id = sent.json()["invitation"]["id"]

        pending = client.get("/api/campaigns/my-invitations", headers=INFLUENCER).json()
        assert [i["invitation"]["id"] for i in pending["invitations"]] == [invitation_id]

        responded = client.post(
            f"/api/campaigns/{campaign_id}/invitations/{invitation_id}/respond",
            json={"response": "accept"},
            headers=INFLUENCER,
        )

        assert responded.status_code == 200
        assert responded.json()["message"] == "Invitation accepted successfully"
        assert client.get("/api/campaigns/my-invitations", headers=INFLUENCER).json() == {
            "success": True,
            "invitations": [],
        }

    def test_duplicate_invitation_is_409(
        self, client: TestClient, campaign_id: str, onboarded: dict[str, str]
    ) -> None:
        payload = {"influencerId": onboarded["influencer_id"]}
        client.post(f"/api/campaigns/{campaign_id}/invite", json=payload, headers=BUSINESS)

        response = client.post(
            f"/api/campaigns/{campaign_id}/invite", json=payload, headers=BUSINESS
        )

        assert response.status_code == 409
        assert response.json()["error"] == "duplicate_invitation"

    def test_only_recipient_may_respond(
        self,
        client: TestClient,
        campaign_id: str,
        onboarded: dict[str, str],
        make_influencer_data: Callable[..., dict[str, Any]],
    ) -> None:
        client.post(
            "/api/profile/influencer",
            json=make_influencer_data(fullName="Leo Park"),
            headers=OTHER_INFLUENCER,
        )
        sent = client.post(
            f"/api/campaigns/{campaign_id}/invite",
            json={"influencerId": onboarded["influencer_id"]},
            headers=BUSINESS,
        )
        invitation_id = sent.json()["invitation"]["id"]

        response = client.post(
            f"/api/campaigns/{campaign_id}/invitations/{invitation_id}/respond",
            json={"response": "accept"},
            headers=OTHER_INFLUENCER,
        )

        assert response.status_code == 403
        assert response.json()["message"] == "This invitation was not sent to you"
