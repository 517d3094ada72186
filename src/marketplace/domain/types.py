"""Domain enumerations shared by the campaign marketplace."""

from enum import StrEnum


class Role(StrEnum):
    """Closed set of principal roles resolved by the identity gate."""

    BUSINESS = "business"
    INFLUENCER = "influencer"


class Platform(StrEnum):
    """Social platforms a campaign can target."""

    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    YOUTUBE = "youtube"
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    LINKEDIN = "linkedin"
    TWITCH = "twitch"


# Platforms an influencer may declare as primary
PRIMARY_PLATFORMS: frozenset[Platform] = frozenset(
    {Platform.INSTAGRAM, Platform.TIKTOK, Platform.YOUTUBE, Platform.TWITTER}
)


class CampaignType(StrEnum):
    """Kind of engagement a campaign asks for."""

    SPONSORED_POST = "sponsored-post"
    PRODUCT_REVIEW = "product-review"
    BRAND_AMBASSADOR = "brand-ambassador"
    GIVEAWAY = "giveaway"
    EVENT_COVERAGE = "event-coverage"
    TUTORIAL = "tutorial"
    UNBOXING = "unboxing"
    OTHER = "other"


class CampaignCategory(StrEnum):
    """Campaign categories shown in the discovery filters."""

    FASHION_BEAUTY = "Fashion & Beauty"
    LIFESTYLE = "Lifestyle"
    TECHNOLOGY = "Technology"
    FOOD_BEVERAGE = "Food & Beverage"
    TRAVEL = "Travel"
    FITNESS_HEALTH = "Fitness & Health"
    GAMING = "Gaming"
    EDUCATION = "Education"
    BUSINESS = "Business"
    ENTERTAINMENT = "Entertainment"
    HOME_GARDEN = "Home & Garden"
    PARENTING = "Parenting"
    SPORTS = "Sports"
    OTHER = "Other"


class CampaignStatus(StrEnum):
    """States in the campaign lifecycle."""

    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ApplicationStatus(StrEnum):
    """States of an influencer-initiated application."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class InvitationStatus(StrEnum):
    """States of a business-initiated invitation."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class CollaborationStatus(StrEnum):
    """Status copies kept in a business profile's collaboration log."""

    INVITED = "invited"
    APPLIED = "applied"
    ACCEPTED = "accepted"
    ONGOING = "ongoing"
    COMPLETED = "completed"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Industry(StrEnum):
    """Industries a business profile can declare."""

    TECHNOLOGY = "technology"
    FASHION = "fashion"
    FITNESS = "fitness"
    FOOD = "food"
    TRAVEL = "travel"
    FINANCE = "finance"
    AUTOMOTIVE = "automotive"
    ENTERTAINMENT = "entertainment"
    BEAUTY = "beauty"
    LIFESTYLE = "lifestyle"
    EDUCATION = "education"
    HEALTHCARE = "healthcare"
    OTHER = "other"


class CompanySize(StrEnum):
    XS = "1-10"
    S = "11-50"
    M = "51-200"
    L = "201-500"
    XL = "501-1000"
    XXL = "1000+"


class BudgetBracket(StrEnum):
    """Typical campaign budget brackets from business onboarding."""

    STARTER = "500-2500"
    GROWTH = "2500-10000"
    SCALE = "10000-50000"
    ENTERPRISE = "50000+"


class ApplicationTimeline(StrEnum):
    """How soon an applicant can deliver."""

    WITHIN_WEEK = "within_week"
    WITHIN_2_WEEKS = "within_2_weeks"
    WITHIN_MONTH = "within_month"
    FLEXIBLE = "flexible"


class Currency(StrEnum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"
    AUD = "AUD"
    JPY = "JPY"
    INR = "INR"


class BadgeType(StrEnum):
    """Display badges attached to campaign cards, in priority order."""

    FEATURED = "featured"
    URGENT = "urgent"
    NEW = "new"
    NORMAL = "normal"


class Capability(StrEnum):
    """Operations a principal may be allowed to perform."""

    MANAGE_BUSINESS_PROFILE = "manage_business_profile"
    MANAGE_INFLUENCER_PROFILE = "manage_influencer_profile"
    CREATE_CAMPAIGN = "create_campaign"
    MANAGE_CAMPAIGN = "manage_campaign"
    SEND_INVITATION = "send_invitation"
    REVIEW_APPLICATION = "review_application"
    BROWSE_INFLUENCERS = "browse_influencers"
    APPLY_TO_CAMPAIGN = "apply_to_campaign"
    RESPOND_TO_INVITATION = "respond_to_invitation"
    BROWSE_CAMPAIGNS = "browse_campaigns"
    BROWSE_BUSINESSES = "browse_businesses"
