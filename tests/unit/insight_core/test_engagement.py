"""Tests for streaks, points, levels and badges."""

from datetime import timedelta
from zoneinfo import ZoneInfo

import pytest
from builders import NOW

from insight_core.domain.models import (
    ActivitySession,
    CarbEntry,
    GlucoseReading,
    InsulinDose,
    LogRepository,
    MedicationDose,
    MoodCheckIn,
)
from insight_core.services.engagement import (
    BADGE_RULES,
    active_days,
    calculate_streaks,
    evaluate_badges,
    level_for,
    points_and_level,
    unlocked_badges,
)

UTC_ZONE = ZoneInfo("UTC")


def _repo_with_days(days_ago: list[int]) -> LogRepository:
    return LogRepository(
        glucose=tuple(
            GlucoseReading(value=120, taken_at=NOW - timedelta(days=offset)) for offset in days_ago
        )
    )


class TestStreaks:
    def test_three_day_streak_then_gap(self) -> None:
        streaks = calculate_streaks(_repo_with_days([0, 1, 2, 5, 6]), NOW, UTC_ZONE).unwrap()
        assert streaks.current == 3
        assert streaks.longest >= 3
        assert streaks.total_days == 5

    def test_inactive_today_breaks_the_walk(self) -> None:
        streaks = calculate_streaks(_repo_with_days([1, 2, 3]), NOW, UTC_ZONE).unwrap()
        assert streaks.current == 0
        assert streaks.longest == 3

    def test_longest_run_can_be_in_the_past(self) -> None:
        streaks = calculate_streaks(_repo_with_days([0, 10, 11, 12, 13, 14]), NOW, UTC_ZONE).unwrap()
        assert streaks.current == 1
        assert streaks.longest == 5

    def test_longest_is_limited_to_lookback(self) -> None:
        streaks = calculate_streaks(_repo_with_days([400, 401, 402]), NOW, UTC_ZONE).unwrap()
        assert streaks.longest == 0
        assert streaks.total_days == 3

    def test_days_are_unioned_across_streams(self) -> None:
        repo = LogRepository(
            glucose=(GlucoseReading(value=110, taken_at=NOW),),
            moods=(MoodCheckIn(mood_rank=3, taken_at=NOW - timedelta(days=1)),),
            carbs=(CarbEntry(food_name="Oatmeal", carbs_grams=28, logged_at=NOW - timedelta(hours=1)),),
        )
        assert len(active_days(repo, UTC_ZONE)) == 2
        assert calculate_streaks(repo, NOW, UTC_ZONE).unwrap().current == 2

    def test_empty_repository_is_insufficient(self) -> None:
        assert calculate_streaks(LogRepository(), NOW, UTC_ZONE).is_err()


class TestPointsAndLevel:
    def test_weighted_points_with_streak_bonus(self) -> None:
        repo = LogRepository(
            glucose=tuple(GlucoseReading(value=100, taken_at=NOW) for _ in range(2)),
            carbs=(CarbEntry(food_name="Apple", carbs_grams=25, logged_at=NOW),),
        )
        result = points_and_level(repo, current_streak=3).unwrap()

        assert result.points == 2 * 10 + 8 + 3 * 20
        assert result.level.name == "Beginner"
        assert result.points_to_next_level == 12

    def test_every_stream_has_a_weight(self) -> None:
        repo = LogRepository(
            glucose=(GlucoseReading(value=100, taken_at=NOW),),
            carbs=(CarbEntry(food_name="Apple", carbs_grams=25, logged_at=NOW),),
            insulin=(InsulinDose(units=2, taken_at=NOW),),
            medications=(MedicationDose(medication_id="met", taken_at=NOW),),
            activities=(ActivitySession(duration_min=10, calories_burned=40, taken_at=NOW),),
            moods=(MoodCheckIn(mood_rank=4, taken_at=NOW),),
        )
        assert points_and_level(repo, current_streak=0).unwrap().points == 10 + 8 + 8 + 5 + 15 + 5

    @pytest.mark.parametrize(
        "points,name,rank,next_threshold",
        [
            (0, "Beginner", 1, 100),
            (100, "Tracker", 2, 300),
            (599, "Achiever", 3, 600),
            (999, "Champion", 4, 1000),
            (1500, "Expert", 5, 2000),
            (4999, "Master", 6, 5000),
            (5000, "Legend", 7, 10000),
        ],
    )
    def test_level_tiers(self, points: int, name: str, rank: int, next_threshold: int) -> None:
        level = level_for(points)
        assert (level.name, level.rank, level.next_threshold) == (name, rank, next_threshold)


class TestBadges:
    def test_fifteen_badges_are_always_reported(self) -> None:
        badges = evaluate_badges(LogRepository(), current_streak=0, points=0)
        assert len(badges) == len(BADGE_RULES) == 15
        assert unlocked_badges(badges) == []

    def test_unlocked_badges_and_progress(self) -> None:
        repo = _repo_with_days([0, 1, 2])
        badges = {badge.badge_id: badge for badge in evaluate_badges(repo, current_streak=3, points=560)}

        assert badges["s1"].unlocked
        assert not badges["s2"].unlocked
        assert badges["s2"].progress == 3
        assert badges["g1"].unlocked
        assert badges["g2"].progress == 3
        assert badges["m1"].progress == 1
        assert badges["m2"].unlocked
        assert badges["m2"].progress == 500
        assert not badges["m3"].unlocked

    def test_all_rounder_needs_every_stream(self) -> None:
        repo = LogRepository(
            glucose=(GlucoseReading(value=100, taken_at=NOW),),
            carbs=(CarbEntry(food_name="Apple", carbs_grams=25, logged_at=NOW),),
            insulin=(InsulinDose(units=2, taken_at=NOW),),
            medications=(MedicationDose(medication_id="met", taken_at=NOW),),
            activities=(ActivitySession(duration_min=10, calories_burned=40, taken_at=NOW),),
            moods=(MoodCheckIn(mood_rank=4, taken_at=NOW),),
        )
        badges = {badge.badge_id: badge for badge in evaluate_badges(repo, 1, 71)}
        assert badges["m1"].unlocked
        assert badges["a1"].unlocked
