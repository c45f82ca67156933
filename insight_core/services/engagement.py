"""
Logging streaks, points, levels and badges.

These reward consistent logging across every stream. They read the whole
repository rather than a report window.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo

from insight_core.domain.metrics import (
    Badge,
    BadgeCategory,
    Level,
    PointsAndLevel,
    StreakSummary,
)
from insight_core.domain.models import LogRepository
from insight_core.domain.result import InsufficientData, Result
from insight_core.services.window import local_date

DEFAULT_STREAK_LOOKBACK_DAYS = 365

POINTS_PER_ENTRY: dict[str, int] = {
    "glucose": 10,
    "carbs": 8,
    "insulin": 8,
    "medications": 5,
    "activities": 15,
    "moods": 5,
}
POINTS_PER_STREAK_DAY = 20

# (upper bound exclusive, name); the last tier is open ended.
LEVEL_TIERS: tuple[tuple[int, str], ...] = (
    (100, "Beginner"),
    (300, "Tracker"),
    (600, "Achiever"),
    (1000, "Champion"),
    (2000, "Expert"),
    (5000, "Master"),
)
TOP_LEVEL = "Legend"
TOP_LEVEL_TARGET = 10000


def active_days(repository: LogRepository, tz: tzinfo) -> set[date]:
    """Local calendar dates on which anything at all was logged."""
    return {local_date(entry.timestamp, tz) for entry in repository.entries()}


def _current_streak(days: set[date], today: date, lookback: int) -> int:
    # Walk back from today; the first inactive day ends the walk, so an
    # inactive today means no current streak even if yesterday was logged.
    streak = 0
    for offset in range(lookback):
        if today - timedelta(days=offset) not in days:
            break
        streak += 1
    return streak


def _longest_run(days: set[date], today: date, lookback: int) -> int:
    longest = run = 0
    for offset in range(lookback - 1, -1, -1):
        if today - timedelta(days=offset) in days:
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    return longest


def calculate_streaks(
    repository: LogRepository,
    now: datetime,
    tz: tzinfo,
    lookback_days: int = DEFAULT_STREAK_LOOKBACK_DAYS,
) -> Result[StreakSummary, InsufficientData]:
    """
    Current and longest run of consecutive logging days.

    The current streak walks back from today and stops at the first day
    without entries, so an inactive today gives 0. That walk alone would make
    the longest streak equal the current one; instead the longest run is
    searched over the whole lookback window and is never shorter than the
    current streak. ``total_days`` counts every active day.
    """
    days = active_days(repository, tz)
    if not days:
        return Result.err(InsufficientData("streaks", required=1, available=0))

    today = local_date(now, tz)
    current = _current_streak(days, today, lookback_days)
    longest = max(current, _longest_run(days, today, lookback_days))
    return Result.ok(StreakSummary(current=current, longest=longest, total_days=len(days)))


def level_for(points: int) -> Level:
    for rank, (threshold, name) in enumerate(LEVEL_TIERS, start=1):
        if points < threshold:
            return Level(rank=rank, name=name, next_threshold=threshold)
    return Level(rank=len(LEVEL_TIERS) + 1, name=TOP_LEVEL, next_threshold=TOP_LEVEL_TARGET)


def points_and_level(
    repository: LogRepository, current_streak: int
) -> Result[PointsAndLevel, InsufficientData]:
    """Weighted entry counts plus a bonus per current streak day."""
    counts = repository.counts()
    points = sum(POINTS_PER_ENTRY[stream] * count for stream, count in counts.items())
    points += POINTS_PER_STREAK_DAY * current_streak
    return Result.ok(PointsAndLevel(points=points, level=level_for(points)))


@dataclass(frozen=True)
class _BadgeRule:
    badge_id: str
    name: str
    description: str
    category: BadgeCategory
    target: int
    measure: str


BADGE_RULES: tuple[_BadgeRule, ...] = (
    _BadgeRule("s1", "First Flame", "3-day logging streak", BadgeCategory.STREAK, 3, "streak"),
    _BadgeRule("s2", "Week Warrior", "7-day logging streak", BadgeCategory.STREAK, 7, "streak"),
    _BadgeRule("s3", "Monthly Master", "30-day logging streak", BadgeCategory.STREAK, 30, "streak"),
    _BadgeRule("s4", "100 Day Club", "100-day logging streak", BadgeCategory.STREAK, 100, "streak"),
    _BadgeRule("g1", "First Check", "Log first glucose reading", BadgeCategory.GLUCOSE, 1, "glucose"),
    _BadgeRule("g2", "Data Collector", "Log 50 glucose readings", BadgeCategory.GLUCOSE, 50, "glucose"),
    _BadgeRule("g3", "Scientist", "Log 200 glucose readings", BadgeCategory.GLUCOSE, 200, "glucose"),
    _BadgeRule("l1", "Foodie", "Log 20 meals", BadgeCategory.LOGGING, 20, "carbs"),
    _BadgeRule("l2", "Med Tracker", "Log 30 medication doses", BadgeCategory.LOGGING, 30, "medications"),
    _BadgeRule("l3", "Mindful", "Log 10 mood check-ins", BadgeCategory.LOGGING, 10, "moods"),
    _BadgeRule("a1", "First Steps", "Log first activity", BadgeCategory.ACTIVITY, 1, "activities"),
    _BadgeRule("a2", "Active Life", "Log 20 activities", BadgeCategory.ACTIVITY, 20, "activities"),
    _BadgeRule("m1", "All-Rounder", "Log in all 6 categories", BadgeCategory.MILESTONE, 6, "categories"),
    _BadgeRule("m2", "500 Points", "Earn 500 points", BadgeCategory.MILESTONE, 500, "points"),
    _BadgeRule("m3", "2000 Points", "Earn 2000 points", BadgeCategory.MILESTONE, 2000, "points"),
)


def evaluate_badges(repository: LogRepository, current_streak: int, points: int) -> list[Badge]:
    """Every badge with its progress; ``Badge.unlocked`` tells which are earned."""
    measures = dict(repository.counts())
    measures["streak"] = current_streak
    measures["points"] = points
    measures["categories"] = sum(1 for count in repository.counts().values() if count > 0)

    return [
        Badge(
            badge_id=rule.badge_id,
            name=rule.name,
            description=rule.description,
            category=rule.category,
            progress=min(measures[rule.measure], rule.target),
            target=rule.target,
        )
        for rule in BADGE_RULES
    ]


def unlocked_badges(badges: list[Badge]) -> list[Badge]:
    return [badge for badge in badges if badge.unlocked]
