"""Create-or-replace for business and influencer profiles.

Saving replaces every caller-supplied field and keeps the fields the
marketplace owns: id, stats counters, back-references, verification and
creation time.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog

from marketplace.audit.logger import AuditLogger
from marketplace.domain.capabilities import require_capability
from marketplace.domain.errors import NotFoundError
from marketplace.domain.models import (
    BusinessProfile,
    BusinessProfileInput,
    InfluencerProfile,
    InfluencerProfileInput,
    Principal,
    utcnow,
    validate_payload,
)
from marketplace.domain.types import Capability, Role
from marketplace.lifecycle.engine import transactional
from marketplace.store.store import MarketplaceStore

logger = structlog.get_logger()


class ProfileService:
    """Profile create/replace and lookup for both roles.

    Args:
        store: The marketplace document store.
        audit: Optional audit trail writer.
        clock: Returns the current UTC time; injectable for tests.
        max_write_attempts: Attempts per save on version conflicts.
    """

    def __init__(
        self,
        store: MarketplaceStore,
        *,
        audit: AuditLogger | None = None,
        clock: Callable[[], datetime] = utcnow,
        max_write_attempts: int = 3,
    ) -> None:
        self._store = store
        self._audit = audit
        self._clock = clock
        self._max_write_attempts = max_write_attempts

    def _log_saved(self, principal: Principal, role: Role, profile_id: str, created: bool) -> None:
        logger.info(
            "profile_saved",
            user_id=principal.id,
            role=str(role),
            profile_id=profile_id,
            created=created,
        )
        if self._audit is not None:
            self._audit.log_profile_saved(principal.id, str(role), profile_id, created)

    def save_business_profile(
        self, principal: Principal, payload: BusinessProfileInput | dict[str, Any]
    ) -> tuple[BusinessProfile, bool]:
        """Create or fully replace the caller's business profile.

        Returns:
            The saved profile and whether it was newly created.

        Raises:
            AuthorizationError: If the caller is not a business.
            ValidationError: Listing every missing or invalid field.
        """
        require_capability(principal, Capability.MANAGE_BUSINESS_PROFILE)
        data = validate_payload(BusinessProfileInput, payload, "Invalid business profile")

        def apply() -> tuple[BusinessProfile, bool]:
            now = self._clock()
            existing = self._store.get_business_profile_by_user(principal.id)
            if existing is None:
                profile = BusinessProfile.model_validate(
                    {
                        **data.model_dump(),
                        "user_id": principal.id,
                        "created_at": now,
                        "updated_at": now,
                    }
                )
                self._store.insert_business_profile(profile)
                return profile, True

            profile = BusinessProfile.model_validate(
                {**existing.model_dump(), **data.model_dump(), "updated_at": now}
            )
            self._store.update_business_profile(profile)
            return profile, False

        profile, created = transactional(
            self._store, "save_business_profile", apply, self._max_write_attempts
        )
        self._log_saved(principal, Role.BUSINESS, profile.id, created)
        return profile, created

    def get_business_profile(self, principal: Principal) -> BusinessProfile:
        require_capability(principal, Capability.MANAGE_BUSINESS_PROFILE)
        profile = self._store.get_business_profile_by_user(principal.id)
        if profile is None:
            raise NotFoundError("Business profile not found")
        return profile

    def save_influencer_profile(
        self, principal: Principal, payload: InfluencerProfileInput | dict[str, Any]
    ) -> tuple[InfluencerProfile, bool]:
        """Create or fully replace the caller's influencer profile.

        Returns:
            The saved profile and whether it was newly created.

        Raises:
            AuthorizationError: If the caller is not an influencer.
            ValidationError: Listing every missing or invalid field.
        """
        require_capability(principal, Capability.MANAGE_INFLUENCER_PROFILE)
        data = validate_payload(InfluencerProfileInput, payload, "Invalid influencer profile")

        def apply() -> tuple[InfluencerProfile, bool]:
            now = self._clock()
            existing = self._store.get_influencer_profile_by_user(principal.id)
            if existing is None:
                profile = InfluencerProfile.model_validate(
                    {
                        **data.model_dump(),
                        "user_id": principal.id,
                        "created_at": now,
                        "updated_at": now,
                    }
                )
                self._store.insert_influencer_profile(profile)
                return profile, True

            profile = InfluencerProfile.model_validate(
                {**existing.model_dump(), **data.model_dump(), "updated_at": now}
            )
            self._store.update_influencer_profile(profile)
            return profile, False

        profile, created = transactional(
            self._store, "save_influencer_profile", apply, self._max_write_attempts
        )
        self._log_saved(principal, Role.INFLUENCER, profile.id, created)
        return profile, created

    def get_influencer_profile(self, principal: Principal) -> InfluencerProfile:
        require_capability(principal, Capability.MANAGE_INFLUENCER_PROFILE)
        profile = self._store.get_influencer_profile_by_user(principal.id)
        if profile is None:
            raise NotFoundError("Influencer profile not found")
        return profile

    def get_influencer_profile_view(
        self, principal: Principal, influencer_id: str
    ) -> InfluencerProfile:
        """Return an influencer's full public profile to a browsing business.

        Raises:
            AuthorizationError: If the caller is not a business.
            NotFoundError: If no active profile has that id.
        """
        require_capability(principal, Capability.BROWSE_INFLUENCERS)
        profile = self._store.get_influencer_profile(influencer_id)
        if profile is None or not profile.is_active:
            raise NotFoundError("Influencer not found")
        return profile
