"""
Insight engine: one entry point that windows a repository and runs every
calculator, the pattern detector, the badge rules and the report composer.
"""

from dataclasses import dataclass, field
from datetime import datetime

import structlog

from insight_core.config import AppConfig, get_config
from insight_core.domain.metrics import (
    ActivitySummary,
    Badge,
    CarbSummary,
    DayGlucose,
    EstimatedA1C,
    GlucoseAverage,
    GlucosePrediction,
    GlucoseSummary,
    GlucoseVariability,
    Insight,
    InsulinOnBoard,
    InsulinSummary,
    MedicationAdherence,
    MoodSummary,
    PointsAndLevel,
    StreakSummary,
    TimeInRangeBreakdown,
    TimeOfDayAverages,
    WeeklyComparison,
)
from insight_core.domain.models import LogRepository, ensure_aware
from insight_core.domain.result import InsufficientData, Result
from insight_core.services import engagement, glucose_metrics, log_metrics
from insight_core.services.pattern_detector import PatternDetector
from insight_core.services.report_composer import PatientReport, ReportComposer
from insight_core.services.window import filter_repository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class HealthSnapshot:
    """Everything the engine derives for one repository, window and instant."""

    now: datetime
    period_days: int
    window: LogRepository
    average: Result[GlucoseAverage, InsufficientData]
    estimated_a1c: Result[EstimatedA1C, InsufficientData]
    time_in_range: Result[TimeInRangeBreakdown, InsufficientData]
    variability: Result[GlucoseVariability, InsufficientData]
    time_of_day: Result[TimeOfDayAverages, InsufficientData]
    weekly: Result[WeeklyComparison, InsufficientData]
    prediction: Result[GlucosePrediction, InsufficientData]
    glucose_summary: Result[GlucoseSummary, InsufficientData]
    daily: Result[list[DayGlucose], InsufficientData]
    insulin_on_board: Result[InsulinOnBoard, InsufficientData]
    carbs: Result[CarbSummary, InsufficientData]
    insulin: Result[InsulinSummary, InsufficientData]
    medications: Result[MedicationAdherence, InsufficientData]
    activity: Result[ActivitySummary, InsufficientData]
    mood: Result[MoodSummary, InsufficientData]
    streaks: Result[StreakSummary, InsufficientData]
    points: Result[PointsAndLevel, InsufficientData]
    patterns: tuple[Insight, ...] = ()
    behavioral_insight: Insight | None = None
    badges: tuple[Badge, ...] = field(default_factory=tuple)

    @property
    def unlocked_badges(self) -> tuple[Badge, ...]:
        return tuple(badge for badge in self.badges if badge.unlocked)


class InsightEngine:
    """
    Stateless orchestrator over the calculators.

    The repository, reference instant and period are passed on every call;
    nothing is cached between calls.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or get_config()
        self.tz = self.config.preferences.tz
        self.detector = PatternDetector(
            self.config.targets.min_mg_dl, self.config.targets.max_mg_dl, self.tz
        )
        self.composer = ReportComposer(self.config)
        self.logger = logger.bind(component="insight_engine")

    def _period(self, period_days: int | None) -> int:
        return period_days if period_days is not None else self.config.engine.report_period_days

    def snapshot(
        self, repository: LogRepository, now: datetime, period_days: int | None = None
    ) -> HealthSnapshot:
        now = ensure_aware(now)
        period = self._period(period_days)
        self.logger.info("snapshot_started", period_days=period, **repository.counts())

        window = filter_repository(repository, period, now)
        readings = window.glucose
        targets = self.config.targets
        preferences = self.config.preferences

        streaks = engagement.calculate_streaks(
            repository, now, self.tz, self.config.engine.streak_lookback_days
        )
        current_streak = streaks.unwrap().current if streaks.is_ok() else 0
        points = engagement.points_and_level(repository, current_streak)
        badges = engagement.evaluate_badges(repository, current_streak, points.unwrap().points)

        snapshot = HealthSnapshot(
            now=now,
            period_days=period,
            window=window,
            average=glucose_metrics.average_glucose(readings),
            estimated_a1c=glucose_metrics.estimated_a1c(readings),
            time_in_range=glucose_metrics.time_in_range(
                readings, targets.min_mg_dl, targets.max_mg_dl
            ),
            variability=glucose_metrics.glucose_variability(readings),
            time_of_day=glucose_metrics.time_of_day_averages(readings, self.tz),
            # Weekly comparison always spans the last 14 days, whatever the period.
            weekly=glucose_metrics.weekly_comparison(repository.glucose, now),
            prediction=glucose_metrics.predict_next_reading(
                repository.glucose, repository.carbs, now
            ),
            glucose_summary=glucose_metrics.glucose_summary(readings),
            daily=glucose_metrics.daily_breakdown(repository.glucose, now, self.tz),
            insulin_on_board=log_metrics.insulin_on_board(
                repository.insulin, now, self.config.engine.insulin_active_hours
            ),
            carbs=log_metrics.carb_summary(
                window.carbs, now, self.tz, preferences.carb_goal_grams
            ),
            insulin=log_metrics.insulin_summary(window.insulin),
            medications=log_metrics.medication_adherence(window.medications),
            activity=log_metrics.activity_summary(window.activities),
            mood=log_metrics.mood_summary(window.moods),
            streaks=streaks,
            points=points,
            patterns=tuple(self.detector.detect_patterns(readings)),
            behavioral_insight=self.detector.behavioral_insight(readings),
            badges=tuple(badges),
        )

        self.logger.info(
            "snapshot_finished",
            period_days=period,
            window_entries=sum(window.counts().values()),
            patterns=len(snapshot.patterns),
            unlocked_badges=len(snapshot.unlocked_badges),
        )
        return snapshot

    def report(
        self, repository: LogRepository, now: datetime, period_days: int | None = None
    ) -> PatientReport:
        now = ensure_aware(now)
        period = self._period(period_days)
        window = filter_repository(repository, period, now)
        return self.composer.compose(window, now, period)
