"""Shared pytest fixtures for the campaign marketplace test suite."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from marketplace.audit.logger import AuditLogger
from marketplace.audit.store import close_audit_db, init_audit_db
from marketplace.domain.models import BusinessProfile, Campaign, InfluencerProfile, Principal
from marketplace.domain.types import Role
from marketplace.lifecycle.engine import CampaignLifecycleEngine
from marketplace.lifecycle.profiles import ProfileService
from marketplace.matching.engine import MatchingEngine
from marketplace.store.schema import init_marketplace_db
from marketplace.store.store import MarketplaceStore

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)


class FrozenClock:
    """A clock that only moves when a test tells it to."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def store() -> Iterator[MarketplaceStore]:
    """An in-memory marketplace store with the schema created."""
    marketplace_store = MarketplaceStore(init_marketplace_db(":memory:"))
    yield marketplace_store
    marketplace_store.close()


@pytest.fixture
def audit_conn() -> Iterator[sqlite3.Connection]:
    conn = init_audit_db(":memory:")
    yield conn
    close_audit_db(conn)


@pytest.fixture
def audit_logger(audit_conn: sqlite3.Connection) -> AuditLogger:
    return AuditLogger(audit_conn)


@pytest.fixture
def lifecycle(
    store: MarketplaceStore, clock: FrozenClock, audit_logger: AuditLogger
) -> CampaignLifecycleEngine:
    return CampaignLifecycleEngine(store, audit=audit_logger, clock=clock)


@pytest.fixture
def profiles(
    store: MarketplaceStore, clock: FrozenClock, audit_logger: AuditLogger
) -> ProfileService:
    return ProfileService(store, audit=audit_logger, clock=clock)


@pytest.fixture
def matching(store: MarketplaceStore, clock: FrozenClock) -> MatchingEngine:
    return MatchingEngine(store, clock=clock)


# ---------------------------------------------------------------------------
# Principals
# ---------------------------------------------------------------------------


@pytest.fixture
def business() -> Principal:
    return Principal(id="biz-user-1", role=Role.BUSINESS)


@pytest.fixture
def other_business() -> Principal:
    return Principal(id="biz-user-2", role=Role.BUSINESS)


@pytest.fixture
def influencer() -> Principal:
    return Principal(id="inf-user-1", role=Role.INFLUENCER)


@pytest.fixture
def other_influencer() -> Principal:
    return Principal(id="inf-user-2", role=Role.INFLUENCER)


# ---------------------------------------------------------------------------
# Payload factories
# ---------------------------------------------------------------------------


def business_profile_data(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "companyName": "Glow Labs",
        "companyDescription": "Clean skincare for everyday routines",
        "industry": "beauty",
        "companySize": "11-50",
        "website": "https://glowlabs.example",
        "campaignPreferences": {
            "typicalBudget": "2500-10000",
            "preferredPlatforms": ["instagram"],
            "targetAudience": {
                "interests": ["beauty"],
                "locations": ["Los Angeles"],
            },
        },
    }
    data.update(overrides)
    return data


def influencer_profile_data(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "fullName": "Maya Chen",
        "bio": "Skincare routines and honest product reviews",
        "primaryLink": {
            "platform": "instagram",
            "handle": "https://instagram.com/mayachen",
            "followerCount": 25_000,
            "niche": "Beauty",
        },
        "contentInfo": {
            "engagementRate": 4.2,
            "primaryLocation": "Los Angeles, CA",
            "primaryAgeRange": "18-24",
        },
        "pricing": {"instagramPrice": 450},
    }
    data.update(overrides)
    return data


def campaign_data(now: datetime = NOW, **overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "title": "Spring Glow Launch",
        "description": "Introduce our new vitamin C serum to your audience",
        "campaignType": "product-review",
        "category": "Fashion & Beauty",
        "platforms": ["instagram", "tiktok"],
        "requirements": {"minFollowers": 10_000, "niches": ["beauty"]},
        "budget": {"total": "5000", "perInfluencer": "500", "currency": "USD"},
        "timeline": {
            "applicationDeadline": (now + timedelta(days=10)).isoformat(),
            "contentDeadline": (now + timedelta(days=20)).isoformat(),
            "campaignStart": (now + timedelta(days=21)).isoformat(),
            "campaignEnd": (now + timedelta(days=40)).isoformat(),
        },
        "contentGuidelines": {"hashtags": ["#glow", "#skincare"]},
        "maxInfluencers": 3,
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_campaign_data(clock: FrozenClock) -> Callable[..., dict[str, Any]]:
    def factory(**overrides: Any) -> dict[str, Any]:
        return campaign_data(clock.now, **overrides)

    return factory


@pytest.fixture
def make_influencer_data() -> Callable[..., dict[str, Any]]:
    return influencer_profile_data


@pytest.fixture
def make_business_data() -> Callable[..., dict[str, Any]]:
    return business_profile_data


# ---------------------------------------------------------------------------
# Saved aggregates
# ---------------------------------------------------------------------------


@pytest.fixture
def business_profile(profiles: ProfileService, business: Principal) -> BusinessProfile:
    profile, _ = profiles.save_business_profile(business, business_profile_data())
    return profile


@pytest.fixture
def influencer_profile(profiles: ProfileService, influencer: Principal) -> InfluencerProfile:
    profile, _ = profiles.save_influencer_profile(influencer, influencer_profile_data())
    return profile


@pytest.fixture
def other_influencer_profile(
    profiles: ProfileService, other_influencer: Principal
) -> InfluencerProfile:
    profile, _ = profiles.save_influencer_profile(
        other_influencer,
        influencer_profile_data(
            fullName="Leo Park",
            primaryLink={
                "platform": "tiktok",
                "handle": "@leopark",
                "followerCount": 80_000,
                "niche": "beauty",
            },
        ),
    )
    return profile


@pytest.fixture
def active_campaign(
    lifecycle: CampaignLifecycleEngine,
    business: Principal,
    business_profile: BusinessProfile,
    make_campaign_data: Callable[..., dict[str, Any]],
) -> Campaign:
    return lifecycle.create_campaign(business, make_campaign_data())
