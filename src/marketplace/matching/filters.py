"""Declarative filter sets for the two discovery queries."""

from __future__ import annotations

from decimal import Decimal

from pydantic import Field, field_validator, model_validator

from marketplace.domain.models import Document, coerce_money
from marketplace.domain.types import CampaignCategory, Platform


class CampaignFilters(Document):
    """Filters for ListActiveCampaigns.  Budget bounds are inclusive."""

    category: CampaignCategory | None = None
    platform: Platform | None = None
    min_budget: Decimal | None = Field(default=None, ge=0)
    max_budget: Decimal | None = Field(default=None, ge=0)

    @field_validator("min_budget", "max_budget", mode="before")
    @classmethod
    def convert_float_money(cls, v: object) -> object:
        """Convert float inputs through str to keep monetary values exact."""
        return coerce_money(v)

    @model_validator(mode="after")
    def budget_bounds_ordered(self) -> CampaignFilters:
        if (
            self.min_budget is not None
            and self.max_budget is not None
            and self.min_budget > self.max_budget
        ):
            raise ValueError("minBudget must not exceed maxBudget")
        return self


class InfluencerFilters(Document):
    """Filters for ListInfluencerMatches.

    ``category`` matches the influencer's primary niche case-insensitively;
    ``location`` is a case-insensitive substring match.  ``min_score`` drops
    matches scoring below it.
    """

    category: str | None = None
    platform: Platform | None = None
    min_followers: int | None = Field(default=None, ge=0)
    max_followers: int | None = Field(default=None, ge=0)
    location: str | None = None
    min_score: int | None = Field(default=None, ge=0, le=100)
    limit: int | None = Field(default=None, ge=1, le=100)

    @field_validator("category", "location")
    @classmethod
    def blank_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def follower_bounds_ordered(self) -> InfluencerFilters:
        if (
            self.min_followers is not None
            and self.max_followers is not None
            and self.min_followers > self.max_followers
        ):
            raise ValueError("minFollowers must not exceed maxFollowers")
        return self


class BusinessMatchFilters(Document):
    """Filters for ListBusinessMatches."""

    min_score: int | None = Field(default=None, ge=0, le=100)
    limit: int | None = Field(default=None, ge=1, le=100)
