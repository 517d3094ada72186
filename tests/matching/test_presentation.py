"""Tests for query-time display helpers."""

from datetime import UTC, datetime, timedelta

import pytest

from marketplace.domain.types import BadgeType
from marketplace.matching.presentation import (
    badge_label,
    badge_type,
    days_left,
    format_follower_count,
    time_left_label,
)

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)


class TestDaysLeft:
    @pytest.mark.parametrize(
        ("delta", "expected"),
        [
            (timedelta(days=10), 10),
            (timedelta(days=9, hours=1), 10),
            (timedelta(hours=1), 1),
            (timedelta(0), 0),
            (timedelta(hours=-1), 0),
            (timedelta(days=-3), -3),
        ],
        ids=["exact_days", "partial_day_rounds_up", "one_hour", "now", "just_passed", "past"],
    )
    def test_rounds_up(self, delta: timedelta, expected: int) -> None:
        assert days_left(NOW + delta, NOW) == expected


class TestTimeLeftLabel:
    @pytest.mark.parametrize(
        ("days", "label"),
        [
            (-2, "Expired"),
            (0, "Expired"),
            (1, "1 day"),
            (2, "2 days"),
            (7, "7 days"),
            (8, "2 weeks"),
            (14, "2 weeks"),
            (15, "3 weeks"),
            (21, "3 weeks"),
            (22, "4 weeks"),
            (29, "5 weeks"),
        ],
    )
    def test_buckets(self, days: int, label: str) -> None:
        assert time_left_label(days) == label


class TestBadge:
    @pytest.mark.parametrize(
        ("featured", "urgent", "days", "expected"),
        [
            (True, True, 1, BadgeType.FEATURED),
            (False, True, 30, BadgeType.URGENT),
            (False, False, 3, BadgeType.URGENT),
            (False, False, 4, BadgeType.NEW),
            (False, False, 7, BadgeType.NEW),
            (False, False, 8, BadgeType.NORMAL),
        ],
        ids=["featured_wins", "flagged_urgent", "closing_soon", "four_days", "a_week", "normal"],
    )
    def test_first_matching_rule_wins(
        self, featured: bool, urgent: bool, days: int, expected: BadgeType
    ) -> None:
        assert badge_type(featured, urgent, days) == expected

    def test_labels(self) -> None:
        assert badge_label(BadgeType.FEATURED) == "Featured"
        assert badge_label(BadgeType.URGENT) == "Urgent"
        assert badge_label(BadgeType.NEW) == "New"
        assert badge_label(BadgeType.NORMAL) == ""


class TestFormatFollowerCount:
    @pytest.mark.parametrize(
        ("count", "expected"),
        [
            (0, "0"),
            (999, "999"),
            (1_000, "1.0K"),
            (12_500, "12.5K"),
            (25_000, "25.0K"),
            (999_000, "999.0K"),
            (1_000_000, "1.0M"),
            (1_230_000, "1.2M"),
        ],
    )
    def test_compact(self, count: int, expected: str) -> None:
        assert format_follower_count(count) == expected
