"""FastAPI dependencies: the identity gate and service lookups.

Authentication itself happens upstream.  The gateway forwards the resolved
caller as ``X-User-Id`` and ``X-User-Role`` headers; a request missing
either header, or naming an unknown role, is rejected with 401 before any
route logic runs.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Header, Request

from marketplace.domain.errors import AuthenticationError
from marketplace.domain.models import Principal
from marketplace.domain.types import Role
from marketplace.lifecycle.engine import CampaignLifecycleEngine
from marketplace.lifecycle.profiles import ProfileService
from marketplace.matching.engine import MatchingEngine


def get_principal(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Principal:
    """Resolve the calling principal from the forwarded identity headers.

    Raises:
        AuthenticationError: If either header is missing or the role is unknown.
    """
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationError("Authentication required")
    try:
        role = Role((x_user_role or "").strip().lower())
    except ValueError as exc:
        raise AuthenticationError("Authentication required") from exc
    return Principal(id=x_user_id.strip(), role=role)


def _services(request: Request) -> dict[str, Any]:
    return request.app.state.services


def get_lifecycle(request: Request) -> CampaignLifecycleEngine:
    return _services(request)["lifecycle"]


def get_matching(request: Request) -> MatchingEngine:
    return _services(request)["matching"]


def get_profiles(request: Request) -> ProfileService:
    return _services(request)["profiles"]


CurrentPrincipal = Annotated[Principal, Depends(get_principal)]
Lifecycle = Annotated[CampaignLifecycleEngine, Depends(get_lifecycle)]
Matching = Annotated[MatchingEngine, Depends(get_matching)]
Profiles = Annotated[ProfileService, Depends(get_profiles)]
