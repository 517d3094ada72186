"""Domain types, models, capabilities, and errors for the campaign marketplace."""

from marketplace.domain.capabilities import (
    ROLE_CAPABILITIES,
    has_capability,
    require_capability,
)
from marketplace.domain.errors import (
    AuthenticationError,
    AuthorizationError,
    CampaignFullError,
    ConcurrentModificationError,
    ConflictError,
    DuplicateApplicationError,
    DuplicateInvitationError,
    ForbiddenError,
    InvalidTransitionError,
    MarketplaceError,
    NotFoundError,
    ProfileRequiredError,
    StoreError,
    ValidationError,
)
from marketplace.domain.models import (
    Application,
    BusinessProfile,
    Campaign,
    CampaignCreate,
    InfluencerProfile,
    Invitation,
    Principal,
)
from marketplace.domain.types import (
    ApplicationStatus,
    BadgeType,
    CampaignCategory,
    CampaignStatus,
    Capability,
    InvitationStatus,
    Platform,
    Role,
)

__all__ = [
    "AuthenticationError",
    "ROLE_CAPABILITIES",
    "Application",
    "ApplicationStatus",
    "AuthorizationError",
    "BadgeType",
    "BusinessProfile",
    "Campaign",
    "CampaignCategory",
    "CampaignCreate",
    "CampaignFullError",
    "CampaignStatus",
    "Capability",
    "ConcurrentModificationError",
    "ConflictError",
    "DuplicateApplicationError",
    "DuplicateInvitationError",
    "ForbiddenError",
    "InfluencerProfile",
    "InvalidTransitionError",
    "Invitation",
    "InvitationStatus",
    "MarketplaceError",
    "NotFoundError",
    "Platform",
    "Principal",
    "ProfileRequiredError",
    "Role",
    "StoreError",
    "ValidationError",
    "has_capability",
    "require_capability",
]
