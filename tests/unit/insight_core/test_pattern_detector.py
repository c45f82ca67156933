"""Tests for the ordered pattern rules and the behavioral insight."""

from zoneinfo import ZoneInfo

import pytest
from builders import readings_at_hour

from insight_core.domain.metrics import InsightRule, InsightSeverity
from insight_core.services.pattern_detector import (
    NO_DATA,
    PatternDetector,
    behavioral_insight,
    detect_patterns,
)

UTC_ZONE = ZoneInfo("UTC")


@pytest.fixture
def detector() -> PatternDetector:
    return PatternDetector(target_min=70, target_max=180, tz=UTC_ZONE)


def _rules(insights: list) -> list[InsightRule]:
    return [insight.rule for insight in insights]


class TestRules:
    def test_dawn_phenomenon(self, detector: PatternDetector) -> None:
        readings = readings_at_hour([200, 210, 220], hour=7)
        insights = detector.detect_patterns(readings)

        assert _rules(insights) == [InsightRule.DAWN_PHENOMENON]
        assert "210 mg/dL" in insights[0].message
        assert insights[0].severity is InsightSeverity.WARNING

    def test_dawn_compares_unrounded_mean(self, detector: PatternDetector) -> None:
        insights = detector.detect_patterns(readings_at_hour([180, 180, 180.1], hour=7))

        assert _rules(insights) == [InsightRule.DAWN_PHENOMENON]
        assert "180 mg/dL" in insights[0].message

    def test_dawn_mean_equal_to_target_is_silent(self, detector: PatternDetector) -> None:
        assert detector.detect_patterns(readings_at_hour([179, 180, 181], hour=7)) == []

    def test_dawn_needs_three_morning_readings(self, detector: PatternDetector) -> None:
        assert detector.detect_patterns(readings_at_hour([250, 260], hour=7)) == []

    def test_post_meal_spike(self, detector: PatternDetector) -> None:
        readings = readings_at_hour([200, 210, 150], hour=13)
        insights = detector.detect_patterns(readings)

        assert _rules(insights) == [InsightRule.POST_MEAL_SPIKE]
        assert insights[0].message.startswith("67%")

    def test_post_meal_needs_more_than_half(self, detector: PatternDetector) -> None:
        readings = readings_at_hour([200, 210, 150, 140], hour=19)
        assert InsightRule.POST_MEAL_SPIKE not in _rules(detector.detect_patterns(readings))

    def test_post_meal_hours_are_inclusive(self, detector: PatternDetector) -> None:
        readings = readings_at_hour([200], hour=12) + readings_at_hour([200], hour=14)
        readings += readings_at_hour([200], hour=21)
        assert InsightRule.POST_MEAL_SPIKE in _rules(detector.detect_patterns(readings))

    def test_good_control(self, detector: PatternDetector) -> None:
        readings = readings_at_hour([100] * 10, hour=3)
        insights = detector.detect_patterns(readings)

        assert _rules(insights) == [InsightRule.GOOD_CONTROL]
        assert insights[0].severity is InsightSeverity.POSITIVE
        assert insights[0].color == "#4CAF50"

    def test_high_variability(self, detector: PatternDetector) -> None:
        readings = readings_at_hour([50, 50, 50, 50, 250], hour=2)
        insights = detector.detect_patterns(readings)

        assert _rules(insights) == [InsightRule.HIGH_VARIABILITY]
        assert "89%" in insights[0].message

    def test_evening_elevation(self, detector: PatternDetector) -> None:
        readings = readings_at_hour([200, 200, 200], hour=17)
        assert _rules(detector.detect_patterns(readings)) == [InsightRule.EVENING_ELEVATION]

    def test_evening_compares_unrounded_mean(self, detector: PatternDetector) -> None:
        readings = readings_at_hour([180, 180, 180.1], hour=17)
        assert _rules(detector.detect_patterns(readings)) == [InsightRule.EVENING_ELEVATION]

    def test_all_matches_in_rule_order(self, detector: PatternDetector) -> None:
        readings = readings_at_hour([200, 210, 220], hour=17) + readings_at_hour([200, 210, 220], hour=7)
        assert _rules(detector.detect_patterns(readings)) == [
            InsightRule.DAWN_PHENOMENON,
            InsightRule.EVENING_ELEVATION,
        ]


class TestBehavioralInsight:
    def test_first_matching_rule_wins(self, detector: PatternDetector) -> None:
        readings = readings_at_hour([200, 210, 220], hour=17) + readings_at_hour([200, 210, 220], hour=7)
        assert detector.behavioral_insight(readings).rule is InsightRule.DAWN_PHENOMENON

    def test_keep_logging_when_nothing_matches(self, detector: PatternDetector) -> None:
        insight = detector.behavioral_insight(readings_at_hour([100, 300], hour=2))
        assert insight.rule is InsightRule.KEEP_LOGGING
        assert insight.severity is InsightSeverity.INFO

    def test_no_data_for_empty_window(self, detector: PatternDetector) -> None:
        assert detector.behavioral_insight([]) == NO_DATA


def test_module_functions_match_detector() -> None:
    readings = readings_at_hour([100] * 6, hour=3)
    assert _rules(detect_patterns(readings, 70, 180, UTC_ZONE)) == [InsightRule.GOOD_CONTROL]
    assert behavioral_insight(readings, 70, 180, UTC_ZONE).rule is InsightRule.GOOD_CONTROL
