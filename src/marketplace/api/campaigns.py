"""Campaign endpoints: lifecycle writes, per-user listings, and discovery.

Fixed paths (``/recommended``, ``/my-campaigns`` ...) are declared before the
``/{campaign_id}/...`` routes so they are never captured as a campaign id.
Handlers are plain ``def`` functions; FastAPI runs them in its threadpool,
which keeps the blocking SQLite calls off the event loop.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Query
from fastapi.responses import JSONResponse

from marketplace.api.deps import CurrentPrincipal, Lifecycle, Matching, Profiles
from marketplace.domain.models import Document

router = APIRouter(prefix="/api/campaigns", tags=["campaigns"])

OptionalQuery = Annotated[str | None, Query()]


def _documents(items: list[Any]) -> list[dict[str, Any]]:
    return [item.to_document() for item in items]


def _present(**values: Any) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _created(message: str, key: str, item: Document) -> JSONResponse:
    return JSONResponse(
        status_code=201,
        content={"success": True, "message": message, key: item.to_document()},
    )


# ---------------------------------------------------------------------------
# Collection and per-user listings
# ---------------------------------------------------------------------------


@router.post("")
def create_campaign(
    principal: CurrentPrincipal,
    lifecycle: Lifecycle,
    payload: Annotated[dict[str, Any], Body()],
) -> JSONResponse:
    campaign = lifecycle.create_campaign(principal, payload)
    return _created("Campaign created successfully", "campaign", campaign)


@router.get("")
def list_campaigns(
    principal: CurrentPrincipal,
    matching: Matching,
    category: OptionalQuery = None,
    platform: OptionalQuery = None,
    min_budget: Annotated[str | None, Query(alias="minBudget")] = None,
    max_budget: Annotated[str | None, Query(alias="maxBudget")] = None,
) -> dict[str, Any]:
    filters = _present(
        category=category, platform=platform, minBudget=min_budget, maxBudget=max_budget
    )
    cards = matching.list_active_campaigns(principal, filters)
    return {"success": True, "campaigns": _documents(cards)}


@router.get("/recommended")
def recommended_campaigns(principal: CurrentPrincipal, matching: Matching) -> dict[str, Any]:
    cards = matching.list_campaigns_for_influencer(principal)
    return {"success": True, "campaigns": _documents(cards)}


@router.get("/my-campaigns")
def my_campaigns(principal: CurrentPrincipal, lifecycle: Lifecycle) -> dict[str, Any]:
    campaigns = lifecycle.list_my_campaigns(principal)
    return {"success": True, "campaigns": _documents(campaigns)}


@router.get("/my-applications")
def my_applications(principal: CurrentPrincipal, lifecycle: Lifecycle) -> dict[str, Any]:
    applications = lifecycle.list_my_applications(principal)
    return {"success": True, "applications": _documents(applications)}


@router.get("/my-invitations")
def my_invitations(principal: CurrentPrincipal, lifecycle: Lifecycle) -> dict[str, Any]:
    invitations = lifecycle.list_my_invitations(principal)
    return {"success": True, "invitations": _documents(invitations)}


@router.get("/influencer-matches")
def influencer_matches(
    principal: CurrentPrincipal,
    matching: Matching,
    category: OptionalQuery = None,
    platform: OptionalQuery = None,
    min_followers: Annotated[str | None, Query(alias="minFollowers")] = None,
    max_followers: Annotated[str | None, Query(alias="maxFollowers")] = None,
    location: OptionalQuery = None,
    min_score: Annotated[str | None, Query(alias="minScore")] = None,
    limit: OptionalQuery = None,
) -> dict[str, Any]:
    filters = _present(
        category=category,
        platform=platform,
        minFollowers=min_followers,
        maxFollowers=max_followers,
        location=location,
        minScore=min_score,
        limit=limit,
    )
    cards = matching.list_influencer_matches(principal, filters)
    return {"success": True, "influencers": _documents(cards), "total": len(cards)}


@router.get("/business-matches")
def business_matches(
    principal: CurrentPrincipal,
    matching: Matching,
    min_score: Annotated[str | None, Query(alias="minScore")] = None,
    limit: OptionalQuery = None,
) -> dict[str, Any]:
    filters = _present(minScore=min_score, limit=limit)
    cards = matching.list_business_matches(principal, filters)
    return {"success": True, "businesses": _documents(cards), "total": len(cards)}


@router.get("/influencer-profile/{influencer_id}")
def influencer_profile(
    influencer_id: str, principal: CurrentPrincipal, profiles: Profiles
) -> dict[str, Any]:
    profile = profiles.get_influencer_profile_view(principal, influencer_id)
    return {"success": True, "influencer": profile.to_document()}


# ---------------------------------------------------------------------------
# Single campaign
# ---------------------------------------------------------------------------


@router.get("/{campaign_id}")
def get_campaign(
    campaign_id: str, principal: CurrentPrincipal, lifecycle: Lifecycle
) -> dict[str, Any]:
    campaign = lifecycle.get_campaign(principal, campaign_id)
    return {"success": True, "campaign": campaign.to_document()}


@router.put("/{campaign_id}")
def update_campaign(
    campaign_id: str,
    principal: CurrentPrincipal,
    lifecycle: Lifecycle,
    payload: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    campaign = lifecycle.update_campaign(principal, campaign_id, payload)
    return {
        "success": True,
        "message": "Campaign updated successfully",
        "campaign": campaign.to_document(),
    }


@router.post("/{campaign_id}/status")
def change_status(
    campaign_id: str,
    principal: CurrentPrincipal,
    lifecycle: Lifecycle,
    payload: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    campaign = lifecycle.change_campaign_status(principal, campaign_id, payload.get("event", ""))
    return {
        "success": True,
        "message": f"Campaign is now {campaign.status}",
        "campaign": campaign.to_document(),
    }


@router.post("/{campaign_id}/apply")
def apply_to_campaign(
    campaign_id: str,
    principal: CurrentPrincipal,
    lifecycle: Lifecycle,
    payload: Annotated[dict[str, Any] | None, Body()] = None,
) -> JSONResponse:
    application = lifecycle.submit_application(principal, campaign_id, payload)
    return _created("Application submitted successfully", "application", application)


@router.get("/{campaign_id}/applications")
def campaign_applications(
    campaign_id: str, principal: CurrentPrincipal, lifecycle: Lifecycle
) -> dict[str, Any]:
    applicants = lifecycle.list_campaign_applications(principal, campaign_id)
    return {"success": True, "applications": _documents(applicants)}


@router.post("/{campaign_id}/applications/{application_id}/review")
def review_application(
    campaign_id: str,
    application_id: str,
    principal: CurrentPrincipal,
    lifecycle: Lifecycle,
    payload: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    application = lifecycle.review_application(principal, campaign_id, application_id, payload)
    return {
        "success": True,
        "message": f"Application {application.status} successfully",
        "application": application.to_document(),
    }


@router.post("/{campaign_id}/applications/{application_id}/withdraw")
def withdraw_application(
    campaign_id: str,
    application_id: str,
    principal: CurrentPrincipal,
    lifecycle: Lifecycle,
) -> dict[str, Any]:
    application = lifecycle.withdraw_application(principal, campaign_id, application_id)
    return {
        "success": True,
        "message": "Application withdrawn successfully",
        "application": application.to_document(),
    }


@router.post("/{campaign_id}/invite")
def send_invitation(
    campaign_id: str,
    principal: CurrentPrincipal,
    lifecycle: Lifecycle,
    payload: Annotated[dict[str, Any], Body()],
) -> JSONResponse:
    invitation = lifecycle.send_invitation(principal, campaign_id, payload)
    return _created("Invitation sent successfully", "invitation", invitation)


@router.post("/{campaign_id}/invitations/{invitation_id}/respond")
def respond_to_invitation(
    campaign_id: str,
    invitation_id: str,
    principal: CurrentPrincipal,
    lifecycle: Lifecycle,
    payload: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    invitation = lifecycle.respond_to_invitation(principal, campaign_id, invitation_id, payload)
    return {
        "success": True,
        "message": f"Invitation {invitation.status} successfully",
        "invitation": invitation.to_document(),
    }
