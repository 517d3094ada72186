"""Pydantic v2 models for marketplace documents and request payloads.

Documents are stored and served in camelCase (``applicationsCount``,
``budget.perInfluencer``) while Python code uses snake_case attributes.
Monetary values are Decimal; float inputs are converted through ``str`` so
no binary rounding error leaks into budgets or rates.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from marketplace.domain.errors import ValidationError
from marketplace.domain.types import (
    PRIMARY_PLATFORMS,
    ApplicationStatus,
    ApplicationTimeline,
    BudgetBracket,
    CampaignCategory,
    CampaignStatus,
    CampaignType,
    CollaborationStatus,
    CompanySize,
    Currency,
    Industry,
    InvitationStatus,
    Platform,
    Priority,
    Role,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(tz=UTC)


def new_id() -> str:
    return uuid.uuid4().hex


def coerce_money(v: object) -> object:
    if isinstance(v, float):
        return Decimal(str(v))
    return v


def to_cents(amount: Decimal, rounding: str = ROUND_HALF_UP) -> int:
    """Convert a monetary amount to whole cents using the given rounding mode."""
    return int((amount * 100).to_integral_value(rounding=rounding))


def _as_utc(v: datetime) -> datetime:
    if v.tzinfo is None:
        return v.replace(tzinfo=UTC)
    return v.astimezone(UTC)


def validate_payload(model: type[ModelT], payload: Any, message: str) -> ModelT:
    """Validate *payload* against *model*, raising a field-listing ValidationError.

    Args:
        model: The pydantic model class to validate against.
        payload: A dict (or model instance) supplied by the caller.
        message: Human-readable prefix for the error message.

    Returns:
        The validated model instance.

    Raises:
        ValidationError: Listing every field that failed validation.
    """
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc, message) from exc


class Document(BaseModel):
    """Base for every stored or served marketplace shape."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> dict[str, Any]:
        """Return the JSON-ready camelCase representation."""
        return self.model_dump(mode="json", by_alias=True)


class Principal(BaseModel):
    """Authenticated caller as resolved by the identity gate."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: Role
    profile_id: str | None = None


# ---------------------------------------------------------------------------
# Campaign sub-documents
# ---------------------------------------------------------------------------


class Budget(Document):
    """Campaign budget; ``per_influencer`` drives the discovery budget filter."""

    total: Decimal = Field(ge=0, decimal_places=2)
    per_influencer: Decimal = Field(ge=0, decimal_places=2)
    currency: Currency = Currency.USD

    @field_validator("total", "per_influencer", mode="before")
    @classmethod
    def convert_float_money(cls, v: object) -> object:
        """Convert float inputs through str to keep monetary values exact."""
        return coerce_money(v)

    @model_validator(mode="after")
    def per_influencer_must_not_exceed_total(self) -> Budget:
        if self.per_influencer > self.total:
            raise ValueError(
                f"perInfluencer ({self.per_influencer}) must not exceed total ({self.total})"
            )
        return self


class Timeline(Document):
    """Four ordered campaign dates.

    applicationDeadline <= contentDeadline <= campaignStart <= campaignEnd.
    """

    application_deadline: datetime
    content_deadline: datetime
    campaign_start: datetime
    campaign_end: datetime

    @field_validator(
        "application_deadline", "content_deadline", "campaign_start", "campaign_end"
    )
    @classmethod
    def normalize_to_utc(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @model_validator(mode="after")
    def dates_must_be_ordered(self) -> Timeline:
        ordered = [
            ("applicationDeadline", self.application_deadline),
            ("contentDeadline", self.content_deadline),
            ("campaignStart", self.campaign_start),
            ("campaignEnd", self.campaign_end),
        ]
        for (earlier_name, earlier), (later_name, later) in zip(ordered, ordered[1:]):
            if earlier > later:
                raise ValueError(f"{earlier_name} must not be after {later_name}")
        return self


class CampaignRequirements(Document):
    """Who a campaign is looking for."""

    min_followers: int = Field(default=0, ge=0)
    max_followers: int | None = Field(default=None, ge=0)
    min_engagement_rate: float = Field(default=0, ge=0, le=100)
    age_range: list[str] = Field(default_factory=list)
    gender: Literal["any", "male", "female"] = "any"
    location: list[str] = Field(default_factory=list)
    niches: list[str] = Field(default_factory=list)

    @field_validator("niches")
    @classmethod
    def normalize_niches(cls, v: list[str]) -> list[str]:
        return [n.strip().lower() for n in v if n.strip()]

    @model_validator(mode="after")
    def follower_bounds_ordered(self) -> CampaignRequirements:
        if self.max_followers is not None and self.min_followers > self.max_followers:
            raise ValueError(
                f"minFollowers ({self.min_followers}) must not exceed "
                f"maxFollowers ({self.max_followers})"
            )
        return self

    def admits_followers(self, follower_count: int) -> bool:
        if follower_count < self.min_followers:
            return False
        return self.max_followers is None or follower_count <= self.max_followers


class ContentGuidelines(Document):
    post_type: list[str] = Field(default_factory=list)
    content_length: str | None = None
    hashtags: list[str] = Field(default_factory=list)
    mentions: list[str] = Field(default_factory=list)
    key_messages: list[str] = Field(default_factory=list)
    do_not_include: list[str] = Field(default_factory=list)
    brand_guidelines: str | None = None


class Deliverable(Document):
    type: str
    quantity: int = Field(default=1, ge=1)
    description: str = ""


class Application(Document):
    """An influencer's request to join a campaign."""

    id: str = Field(default_factory=new_id)
    influencer_id: str
    user_id: str
    proposed_rate: Decimal = Field(default=Decimal("0"), ge=0)
    message: str = ""
    portfolio_links: list[str] = Field(default_factory=list)
    timeline: ApplicationTimeline | None = None
    status: ApplicationStatus = ApplicationStatus.PENDING
    applied_at: datetime = Field(default_factory=utcnow)
    reviewed_at: datetime | None = None
    business_notes: str | None = None


class Invitation(Document):
    """A business's direct offer to a specific influencer."""

    id: str = Field(default_factory=new_id)
    influencer_id: str
    user_id: str
    message: str = ""
    proposed_rate: Decimal | None = None
    status: InvitationStatus = InvitationStatus.PENDING
    sent_at: datetime = Field(default_factory=utcnow)
    responded_at: datetime | None = None


class Campaign(Document):
    """The central aggregate: owns its applications and invitations."""

    id: str = Field(default_factory=new_id)
    business_id: str
    business_profile_id: str
    title: str
    description: str
    campaign_type: CampaignType
    category: CampaignCategory
    platforms: list[Platform] = Field(min_length=1)
    requirements: CampaignRequirements = Field(default_factory=CampaignRequirements)
    budget: Budget
    timeline: Timeline
    content_guidelines: ContentGuidelines = Field(default_factory=ContentGuidelines)
    deliverables: list[Deliverable] = Field(default_factory=list)
    max_influencers: int = Field(ge=1)
    status: CampaignStatus = CampaignStatus.DRAFT
    applications_count: int = 0
    selected_influencers: int = 0
    applications: list[Application] = Field(default_factory=list)
    invitations: list[Invitation] = Field(default_factory=list)
    is_featured: bool = False
    is_urgent: bool = False
    priority: Priority = Priority.MEDIUM
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    version: int = 0

    def application_by_id(self, application_id: str) -> Application | None:
        return next((a for a in self.applications if a.id == application_id), None)

    def application_for(self, influencer_id: str) -> Application | None:
        return next((a for a in self.applications if a.influencer_id == influencer_id), None)

    def invitation_by_id(self, invitation_id: str) -> Invitation | None:
        return next((i for i in self.invitations if i.id == invitation_id), None)

    def invitation_for(self, influencer_id: str) -> Invitation | None:
        return next((i for i in self.invitations if i.influencer_id == influencer_id), None)

    def accepted_participants(self) -> dict[str, datetime]:
        """Influencers who joined through an accepted application or invitation.

        Maps each influencer id to when it joined; an influencer counts once
        even if both records were accepted.
        """
        joined: dict[str, datetime] = {}
        for a in self.applications:
            if a.status == ApplicationStatus.ACCEPTED:
                joined.setdefault(a.influencer_id, a.reviewed_at or a.applied_at)
        for i in self.invitations:
            if i.status == InvitationStatus.ACCEPTED:
                joined.setdefault(i.influencer_id, i.responded_at or i.sent_at)
        return joined

    def agreed_rate(self, influencer_id: str) -> Decimal:
        """The rate a participant was accepted at, falling back to ``perInfluencer``."""
        application = self.application_for(influencer_id)
        if (
            application is not None
            and application.status == ApplicationStatus.ACCEPTED
            and application.proposed_rate > 0
        ):
            return application.proposed_rate
        invitation = self.invitation_for(influencer_id)
        if (
            invitation is not None
            and invitation.status == InvitationStatus.ACCEPTED
            and invitation.proposed_rate is not None
        ):
            return invitation.proposed_rate
        return self.budget.per_influencer

    def recount(self) -> None:
        """Recompute derived counters from the embedded sub-collections."""
        self.applications_count = len(self.applications)
        self.selected_influencers = sum(
            1 for a in self.applications if a.status == ApplicationStatus.ACCEPTED
        )


class CampaignCreate(Document):
    """Payload accepted by CreateCampaign."""

    title: str = Field(max_length=100)
    description: str = Field(max_length=2000)
    campaign_type: CampaignType
    category: CampaignCategory
    platforms: list[Platform] = Field(min_length=1)
    requirements: CampaignRequirements = Field(default_factory=CampaignRequirements)
    budget: Budget
    timeline: Timeline
    content_guidelines: ContentGuidelines = Field(default_factory=ContentGuidelines)
    deliverables: list[Deliverable] = Field(default_factory=list)
    max_influencers: int = Field(ge=1)
    is_featured: bool = False
    is_urgent: bool = False
    priority: Priority = Priority.MEDIUM

    @field_validator("title", "description")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("field must not be empty")
        return v.strip()

    @field_validator("platforms")
    @classmethod
    def dedupe_platforms(cls, v: list[Platform]) -> list[Platform]:
        return list(dict.fromkeys(v))


class ApplicationCreate(Document):
    proposed_rate: Decimal = Field(default=Decimal("0"), ge=0)
    message: str = Field(default="", max_length=1000)
    portfolio_links: list[str] = Field(default_factory=list)
    timeline: ApplicationTimeline | None = None

    @field_validator("proposed_rate", mode="before")
    @classmethod
    def convert_float_money(cls, v: object) -> object:
        """Convert float inputs through str to keep monetary values exact."""
        return coerce_money(v)


class InvitationCreate(Document):
    influencer_id: str = Field(min_length=1)
    message: str = Field(default="", max_length=1000)
    proposed_rate: Decimal | None = Field(default=None, ge=0)

    @field_validator("proposed_rate", mode="before")
    @classmethod
    def convert_float_money(cls, v: object) -> object:
        """Convert float inputs through str to keep monetary values exact."""
        return coerce_money(v)


class ApplicationReview(Document):
    decision: Literal["accept", "reject"]
    business_notes: str | None = Field(default=None, max_length=500)


class InvitationResponse(Document):
    response: Literal["accept", "decline"]


class CampaignStatusChange(Document):
    event: Literal["publish", "pause", "resume", "complete", "cancel"]


# ---------------------------------------------------------------------------
# Business profile
# ---------------------------------------------------------------------------


class TargetAudience(Document):
    """Structured, versioned audience description for campaign preferences."""

    schema_version: int = 1
    age_ranges: list[str] = Field(default_factory=list)
    genders: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    description: str = ""


class CampaignPreferences(Document):
    typical_budget: BudgetBracket | None = None
    preferred_platforms: list[Platform] = Field(default_factory=list)
    target_audience: TargetAudience = Field(default_factory=TargetAudience)
    campaign_types: list[CampaignType] = Field(default_factory=list)
    collaboration_style: str = ""


class ContactInfo(Document):
    contact_person: str | None = None
    phone: str | None = None
    linkedin_url: str | None = None
    instagram_url: str | None = None
    twitter_url: str | None = None


class BusinessStats(Document):
    total_campaigns: int = 0
    active_campaigns: int = 0
    completed_campaigns: int = 0
    total_spent: Decimal = Decimal("0")
    total_influencers_worked_with: int = 0
    average_rating: float = 0


class CampaignRef(Document):
    campaign_id: str
    status: CampaignStatus
    created_at: datetime = Field(default_factory=utcnow)


class CollaborationRef(Document):
    influencer_id: str
    campaign_id: str
    status: CollaborationStatus
    rating: float | None = None
    review: str | None = None
    collaborated_at: datetime = Field(default_factory=utcnow)


class SentInvitationRef(Document):
    influencer_id: str
    campaign_id: str
    invitation_id: str
    message: str = ""
    status: InvitationStatus = InvitationStatus.PENDING
    sent_at: datetime = Field(default_factory=utcnow)


class BusinessProfileInput(Document):
    """Fields a business supplies when saving its profile (full replace)."""

    company_name: str = Field(min_length=1)
    company_description: str = Field(default="", max_length=1000)
    company_logo: str | None = None
    industry: Industry
    company_size: CompanySize
    headquarters: str = "Not specified"
    website: str = ""
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    campaign_preferences: CampaignPreferences = Field(default_factory=CampaignPreferences)

    @field_validator("company_name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("companyName must not be empty")
        return v.strip()


class BusinessProfile(BusinessProfileInput):
    id: str = Field(default_factory=new_id)
    user_id: str
    stats: BusinessStats = Field(default_factory=BusinessStats)
    campaigns: list[CampaignRef] = Field(default_factory=list)
    collaborations: list[CollaborationRef] = Field(default_factory=list)
    sent_invitations: list[SentInvitationRef] = Field(default_factory=list)
    is_verified: bool = False
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    version: int = 0


# ---------------------------------------------------------------------------
# Influencer profile
# ---------------------------------------------------------------------------


class SocialLink(Document):
    """The mandatory primary social presence of an influencer."""

    platform: Platform
    handle: str = Field(min_length=1)
    follower_count: int = Field(default=0, ge=0)
    niche: str = Field(min_length=1)

    @field_validator("platform")
    @classmethod
    def platform_must_be_primary_capable(cls, v: Platform) -> Platform:
        if v not in PRIMARY_PLATFORMS:
            raise ValueError(
                f"{v} cannot be a primary platform. "
                f"Valid platforms: {', '.join(sorted(PRIMARY_PLATFORMS))}"
            )
        return v

    @field_validator("niche")
    @classmethod
    def normalize_niche(cls, v: str) -> str:
        return v.strip().lower()


class SecondaryLink(Document):
    platform: Platform
    handle: str


class ContentInfo(Document):
    categories: list[str] = Field(default_factory=list)
    primary_age_range: str | None = None
    gender_split: str | None = None
    primary_location: str | None = None
    engagement_rate: float = Field(default=0, ge=0, le=100)
    content_style: str | None = None
    posting_frequency: str | None = None


class Pricing(Document):
    """Per-platform asking prices."""

    instagram_price: Decimal = Field(default=Decimal("0"), ge=0)
    tiktok_price: Decimal = Field(default=Decimal("0"), ge=0)
    story_price: Decimal = Field(default=Decimal("0"), ge=0)
    youtube_price: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator(
        "instagram_price", "tiktok_price", "story_price", "youtube_price", mode="before"
    )
    @classmethod
    def convert_float_money(cls, v: object) -> object:
        """Convert float inputs through str to keep monetary values exact."""
        return coerce_money(v)


class InfluencerStats(Document):
    total_campaigns: int = 0
    completed_campaigns: int = 0
    average_rating: float = 0
    total_earnings: Decimal = Decimal("0")


class ApplicationRef(Document):
    campaign_id: str
    application_id: str
    status: ApplicationStatus = ApplicationStatus.PENDING
    applied_at: datetime = Field(default_factory=utcnow)


class InvitationRef(Document):
    business_id: str
    campaign_id: str
    invitation_id: str
    status: InvitationStatus = InvitationStatus.PENDING
    invited_at: datetime = Field(default_factory=utcnow)
    responded_at: datetime | None = None


class CompletedCampaignRef(Document):
    campaign_id: str
    business_id: str
    rating: float | None = None
    review: str | None = None
    earnings: Decimal = Decimal("0")
    completed_at: datetime = Field(default_factory=utcnow)


class InfluencerProfileInput(Document):
    """Fields an influencer supplies when saving its profile (full replace)."""

    full_name: str = Field(min_length=1)
    bio: str = Field(max_length=500)
    profile_picture: str | None = None
    primary_link: SocialLink
    secondary_link: SecondaryLink | None = None
    website: str | None = None
    content_info: ContentInfo = Field(default_factory=ContentInfo)
    pricing: Pricing = Field(default_factory=Pricing)
    communications: list[str] = Field(default_factory=list)
    additional_notes: str | None = None


class InfluencerProfile(InfluencerProfileInput):
    id: str = Field(default_factory=new_id)
    user_id: str
    stats: InfluencerStats = Field(default_factory=InfluencerStats)
    campaign_applications: list[ApplicationRef] = Field(default_factory=list)
    direct_invitations: list[InvitationRef] = Field(default_factory=list)
    completed_campaigns: list[CompletedCampaignRef] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    version: int = 0
