"""Domain-specific exception classes for the campaign marketplace.

Every error carries the HTTP status code and a short machine-readable code
that the API boundary uses to build the failure envelope.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import ValidationError as PydanticValidationError


class MarketplaceError(Exception):
    """Base class for all domain errors in the marketplace."""

    status_code: int = 500
    code: str = "marketplace_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(MarketplaceError):
    """Raised when caller input is malformed or incomplete.

    Attributes:
        fields: Dotted paths of every field that failed validation.
    """

    status_code = 422
    code = "validation_error"

    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        self.fields = list(fields)
        if self.fields:
            message = f"{message}: {', '.join(self.fields)}"
        super().__init__(message)

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError, message: str) -> ValidationError:
        """Build a ValidationError listing each failing field of a pydantic error."""
        fields: list[str] = []
        for err in exc.errors():
            path = ".".join(str(part) for part in err["loc"]) or "__root__"
            if path not in fields:
                fields.append(path)
        return cls(message, fields)


class AuthorizationError(MarketplaceError):
    """Raised when the principal's role lacks the capability for an operation."""

    status_code = 403
    code = "authorization_error"


class ForbiddenError(AuthorizationError):
    """Raised when the principal does not own the target aggregate."""

    code = "forbidden"


class NotFoundError(MarketplaceError):
    status_code = 404
    code = "not_found"


class ProfileRequiredError(NotFoundError):
    """Raised when an operation needs a profile the caller has not created yet."""

    code = "profile_required"


class ConflictError(MarketplaceError):
    """Raised when the request conflicts with current aggregate state.

    Callers should refresh their view rather than retry blindly.
    """

    status_code = 409
    code = "conflict"


class DuplicateApplicationError(ConflictError):
    code = "duplicate_application"

    def __init__(self, campaign_id: str, influencer_id: str) -> None:
        self.campaign_id = campaign_id
        self.influencer_id = influencer_id
        super().__init__("You have already applied to this campaign")


class DuplicateInvitationError(ConflictError):
    code = "duplicate_invitation"

    def __init__(self, campaign_id: str, influencer_id: str) -> None:
        self.campaign_id = campaign_id
        self.influencer_id = influencer_id
        super().__init__("Influencer already invited to this campaign")


class InvalidTransitionError(ConflictError):
    """Raised when a status transition is not allowed from the current state.

    Attributes:
        entity: The kind of record being transitioned (campaign, application, ...).
        current_state: The state the record was in.
        event: The event that was rejected.
    """

    code = "invalid_transition"

    def __init__(self, entity: str, current_state: str, event: str) -> None:
        self.entity = entity
        self.current_state = current_state
        self.event = event
        super().__init__(f"Cannot apply event '{event}' to {entity} in state '{current_state}'")


class CampaignFullError(ConflictError):
    """Raised when accepting another application would exceed ``maxInfluencers``."""

    code = "campaign_full"

    def __init__(self, campaign_id: str, max_influencers: int) -> None:
        self.campaign_id = campaign_id
        self.max_influencers = max_influencers
        super().__init__(
            f"Campaign already has {max_influencers} selected influencers"
        )


class ConcurrentModificationError(ConflictError):
    """Raised when a document changed between read and write."""

    code = "concurrent_modification"


class StoreError(MarketplaceError):
    """Raised when the underlying persistence layer fails."""

    status_code = 500
    code = "store_error"


class AuthenticationError(MarketplaceError):
    """Raised when a request carries no usable principal."""

    status_code = 401
    code = "unauthenticated"
