"""Capability table: which role may perform which operation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from marketplace.domain.errors import AuthorizationError
from marketplace.domain.types import Capability, Role

if TYPE_CHECKING:
    from marketplace.domain.models import Principal

ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.BUSINESS: frozenset(
        {
            Capability.MANAGE_BUSINESS_PROFILE,
            Capability.CREATE_CAMPAIGN,
            Capability.MANAGE_CAMPAIGN,
            Capability.SEND_INVITATION,
            Capability.REVIEW_APPLICATION,
            Capability.BROWSE_INFLUENCERS,
            Capability.BROWSE_CAMPAIGNS,
        }
    ),
    Role.INFLUENCER: frozenset(
        {
            Capability.MANAGE_INFLUENCER_PROFILE,
            Capability.APPLY_TO_CAMPAIGN,
            Capability.RESPOND_TO_INVITATION,
            Capability.BROWSE_CAMPAIGNS,
            Capability.BROWSE_BUSINESSES,
        }
    ),
}

_DENIAL_MESSAGES: dict[Capability, str] = {
    Capability.MANAGE_BUSINESS_PROFILE: "Only businesses can manage business profiles",
    Capability.MANAGE_INFLUENCER_PROFILE: "Only influencers can manage influencer profiles",
    Capability.CREATE_CAMPAIGN: "Only businesses can create campaigns",
    Capability.MANAGE_CAMPAIGN: "Only businesses can manage campaigns",
    Capability.SEND_INVITATION: "Only businesses can send invitations",
    Capability.REVIEW_APPLICATION: "Only businesses can review applications",
    Capability.BROWSE_INFLUENCERS: "Only businesses can browse influencers",
    Capability.APPLY_TO_CAMPAIGN: "Only influencers can apply to campaigns",
    Capability.RESPOND_TO_INVITATION: "Only influencers can respond to invitations",
    Capability.BROWSE_CAMPAIGNS: "Campaign browsing is not available for this role",
    Capability.BROWSE_BUSINESSES: "Only influencers can access business matching",
}


def has_capability(role: Role, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(role, frozenset())


def require_capability(principal: Principal, capability: Capability) -> None:
    """Ensure *principal*'s role grants *capability*.

    Raises:
        AuthorizationError: If the role does not grant the capability.
    """
    if not has_capability(principal.role, capability):
        raise AuthorizationError(_DENIAL_MESSAGES[capability])
