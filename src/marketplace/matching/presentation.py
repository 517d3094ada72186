"""Display helpers computed at query time: time-left labels, badges, follower counts."""

from __future__ import annotations

import math
from datetime import datetime

from marketplace.domain.types import BadgeType

SECONDS_PER_DAY = 86_400

_BADGE_LABELS: dict[BadgeType, str] = {
    BadgeType.FEATURED: "Featured",
    BadgeType.URGENT: "Urgent",
    BadgeType.NEW: "New",
    BadgeType.NORMAL: "",
}


def days_left(deadline: datetime, now: datetime) -> int:
    """Whole days until *deadline*, rounded up; zero or negative once it has passed."""
    return math.ceil((deadline - now).total_seconds() / SECONDS_PER_DAY)


def time_left_label(days: int) -> str:
    """Bucket a day count into a coarse human label.

    ``<=0`` -> "Expired", ``1`` -> "1 day", ``2..7`` -> "N days",
    ``8..14`` -> "2 weeks", ``15..21`` -> "3 weeks", otherwise
    ``ceil(days / 7)`` weeks.
    """
    if days <= 0:
        return "Expired"
    if days == 1:
        return "1 day"
    if days <= 7:
        return f"{days} days"
    if days <= 14:
        return "2 weeks"
    if days <= 21:
        return "3 weeks"
    return f"{math.ceil(days / 7)} weeks"


def badge_type(is_featured: bool, is_urgent: bool, days: int) -> BadgeType:
    """Pick the campaign badge; the first matching rule wins."""
    if is_featured:
        return BadgeType.FEATURED
    if is_urgent or days <= 3:
        return BadgeType.URGENT
    if days <= 7:
        return BadgeType.NEW
    return BadgeType.NORMAL


def badge_label(badge: BadgeType) -> str:
    return _BADGE_LABELS[badge]


def format_follower_count(count: int) -> str:
    """Render 1_230_000 as ``1.2M`` and 12_500 as ``12.5K``; smaller counts verbatim."""
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)
