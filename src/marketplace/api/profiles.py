"""Profile endpoints: create, replace and read the caller's own profile."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from marketplace.api.deps import CurrentPrincipal, Profiles

router = APIRouter(prefix="/api/profile", tags=["profiles"])


def _saved(kind: str, document: dict[str, Any], created: bool) -> JSONResponse:
    verb = "created" if created else "updated"
    return JSONResponse(
        status_code=201 if created else 200,
        content={
            "success": True,
            "message": f"{kind} profile {verb} successfully",
            "profile": document,
        },
    )


@router.post("/business")
def save_business_profile(
    principal: CurrentPrincipal,
    profiles: Profiles,
    payload: Annotated[dict[str, Any], Body()],
) -> JSONResponse:
    profile, created = profiles.save_business_profile(principal, payload)
    return _saved("Business", profile.to_document(), created)


@router.get("/business")
def get_business_profile(principal: CurrentPrincipal, profiles: Profiles) -> dict[str, Any]:
    profile = profiles.get_business_profile(principal)
    return {"success": True, "profile": profile.to_document()}


@router.post("/influencer")
def save_influencer_profile(
    principal: CurrentPrincipal,
    profiles: Profiles,
    payload: Annotated[dict[str, Any], Body()],
) -> JSONResponse:
    profile, created = profiles.save_influencer_profile(principal, payload)
    return _saved("Influencer", profile.to_document(), created)


@router.get("/influencer")
def get_influencer_profile(principal: CurrentPrincipal, profiles: Profiles) -> dict[str, Any]:
    profile = profiles.get_influencer_profile(principal)
    return {"success": True, "profile": profile.to_document()}
