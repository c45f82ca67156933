"""
Rule-based glucose pattern detection.

Rules run in a fixed order and that order is their precedence. Every rule
checks its own sample requirement and simply does not fire when the data is
too thin.
"""

import statistics
from collections.abc import Callable, Sequence
from datetime import tzinfo

import structlog

from insight_core.domain.metrics import (
    HIGH_VARIABILITY_CV,
    DayPart,
    Insight,
    InsightRule,
    InsightSeverity,
)
from insight_core.domain.models import GlucoseReading
from insight_core.services.glucose_metrics import (
    day_part,
    glucose_variability,
    round_half_up,
    time_in_range,
)
from insight_core.services.window import to_local

logger = structlog.get_logger(__name__)

MIN_BUCKET_SAMPLES = 3
GOOD_CONTROL_TIR = 80
POST_MEAL_SPIKE_SHARE = 0.5
# Local hours (inclusive) that usually follow lunch and dinner.
POST_MEAL_HOURS = frozenset(range(12, 15)) | frozenset(range(18, 22))

KEEP_LOGGING = Insight(
    rule=InsightRule.KEEP_LOGGING,
    title="Looking Good",
    message="Keep logging to unlock deeper pattern analysis.",
    severity=InsightSeverity.INFO,
)

NO_DATA = Insight(
    rule=InsightRule.NO_DATA,
    title="No Data Yet",
    message="Start logging to see patterns.",
    severity=InsightSeverity.INFO,
)


class PatternDetector:
    """
    Evaluate glucose readings against the user's target range.

    Args:
        target_min: Lower bound of the target band (mg/dL)
        target_max: Upper bound of the target band (mg/dL)
        tz: Timezone used to assign readings to local hours
    """

    def __init__(self, target_min: float, target_max: float, tz: tzinfo) -> None:
        self.target_min = target_min
        self.target_max = target_max
        self.tz = tz
        self.logger = logger.bind(component="pattern_detector")
        self._rules: tuple[Callable[[Sequence[GlucoseReading]], Insight | None], ...] = (
            self._dawn_phenomenon,
            self._post_meal_spike,
            self._good_control,
            self._high_variability,
            self._evening_elevation,
        )

    def _bucket_mean_above_target(
        self, readings: Sequence[GlucoseReading], part: DayPart
    ) -> float | None:
        """Unrounded mean of the bucket when it is above target, else None."""
        values = [
            reading.value
            for reading in readings
            if day_part(to_local(reading.taken_at, self.tz).hour) is part
        ]
        if len(values) < MIN_BUCKET_SAMPLES:
            return None
        mean = statistics.fmean(values)
        return mean if mean > self.target_max else None

    def _dawn_phenomenon(self, readings: Sequence[GlucoseReading]) -> Insight | None:
        mean = self._bucket_mean_above_target(readings, DayPart.MORNING)
        if mean is None:
            return None
        return Insight(
            rule=InsightRule.DAWN_PHENOMENON,
            title="Dawn Phenomenon",
            message=(
                f"Morning average is {round_half_up(mean):.0f} mg/dL, above your target. "
                "This is common in diabetes; consider talking to your doctor."
            ),
            severity=InsightSeverity.WARNING,
        )

    def _post_meal_spike(self, readings: Sequence[GlucoseReading]) -> Insight | None:
        after_meal = [
            reading
            for reading in readings
            if to_local(reading.taken_at, self.tz).hour in POST_MEAL_HOURS
        ]
        if len(after_meal) < MIN_BUCKET_SAMPLES:
            return None
        spikes = [reading for reading in after_meal if reading.value > self.target_max]
        share = len(spikes) / len(after_meal)
        if share <= POST_MEAL_SPIKE_SHARE:
            return None
        return Insight(
            rule=InsightRule.POST_MEAL_SPIKE,
            title="Post-Meal Spikes",
            message=(
                f"{round_half_up(share * 100):.0f}% of after-meal readings are above target. "
                "Try smaller portions or a walk after eating."
            ),
            severity=InsightSeverity.ALERT,
        )

    def _good_control(self, readings: Sequence[GlucoseReading]) -> Insight | None:
        tir = time_in_range(readings, self.target_min, self.target_max)
        if tir.is_err() or tir.unwrap().in_range < GOOD_CONTROL_TIR:
            return None
        return Insight(
            rule=InsightRule.GOOD_CONTROL,
            title="Excellent Control",
            message=(
                f"{tir.unwrap().in_range}% time in range, meeting the target of "
                f"{GOOD_CONTROL_TIR}% or more. Keep it up!"
            ),
            severity=InsightSeverity.POSITIVE,
        )

    def _high_variability(self, readings: Sequence[GlucoseReading]) -> Insight | None:
        variability = glucose_variability(readings)
        if variability.is_err() or not variability.unwrap().high_variability:
            return None
        return Insight(
            rule=InsightRule.HIGH_VARIABILITY,
            title="High Variability",
            message=(
                f"Glucose CV is {variability.unwrap().cv}% (target below {HIGH_VARIABILITY_CV}%). "
                "Large swings increase the risk of complications."
            ),
            severity=InsightSeverity.ALERT,
        )

    def _evening_elevation(self, readings: Sequence[GlucoseReading]) -> Insight | None:
        mean = self._bucket_mean_above_target(readings, DayPart.EVENING)
        if mean is None:
            return None
        return Insight(
            rule=InsightRule.EVENING_ELEVATION,
            title="Evening Elevation",
            message=(
                f"Evening average is {round_half_up(mean):.0f} mg/dL, above your target. "
                "Look at dinner portions and evening snacks."
            ),
            severity=InsightSeverity.WARNING,
        )

    def detect_patterns(self, readings: Sequence[GlucoseReading]) -> list[Insight]:
        """Every matching insight, in rule order."""
        insights = [
            insight for rule in self._rules if (insight := rule(readings)) is not None
        ]
        self.logger.debug(
            "patterns_detected",
            readings=len(readings),
            rules=[insight.rule.value for insight in insights],
        )
        return insights

    def behavioral_insight(self, readings: Sequence[GlucoseReading]) -> Insight:
        """The single highest-precedence insight for the window."""
        if not readings:
            return NO_DATA
        for rule in self._rules:
            insight = rule(readings)
            if insight is not None:
                return insight
        return KEEP_LOGGING


def detect_patterns(
    readings: Sequence[GlucoseReading], target_min: float, target_max: float, tz: tzinfo
) -> list[Insight]:
    return PatternDetector(target_min, target_max, tz).detect_patterns(readings)


def behavioral_insight(
    readings: Sequence[GlucoseReading], target_min: float, target_max: float, tz: tzinfo
) -> Insight:
    return PatternDetector(target_min, target_max, tz).behavioral_insight(readings)
