"""
Tests for log entry models, the repository snapshot and the Result type.
"""

from datetime import UTC, datetime, timedelta

import pytest
from builders import NOW, reading
from hypothesis import given
from hypothesis import strategies as st

from insight_core.domain.models import (
    ActivitySession,
    CarbEntry,
    FoodCompositionRecord,
    GlucoseReading,
    InsulinDose,
    InsulinKind,
    LogRepository,
    MedicationDose,
    MoodCheckIn,
    parse_entries,
)
from insight_core.domain.result import ExternalLookupFailure, InsufficientData, Result


class TestResult:
    """Test the Result type for explicit error handling."""

    def test_ok_result_unwraps_value(self) -> None:
        result: Result[int, InsufficientData] = Result.ok(0)
        assert result.is_ok()
        assert result.unwrap() == 0

    def test_err_result_raises_on_unwrap(self) -> None:
        result: Result[int, InsufficientData] = Result.err(
            InsufficientData("estimated_a1c", required=5, available=2)
        )
        assert result.is_err()
        assert result.unwrap_or(42) == 42
        with pytest.raises(InsufficientData, match="at least 5"):
            result.unwrap()

    def test_unwrap_err_on_ok_raises(self) -> None:
        with pytest.raises(ValueError, match="Ok value"):
            Result.ok("value").unwrap_err()

    def test_result_requires_exactly_one_side(self) -> None:
        with pytest.raises(ValueError):
            Result()
        with pytest.raises(ValueError):
            Result(value=1, error=ExternalLookupFailure("x"))


class TestLogEntries:
    def test_naive_timestamp_is_read_as_utc(self) -> None:
        entry = GlucoseReading(value=110, taken_at=datetime(2024, 1, 1, 8, 0))
        assert entry.taken_at.tzinfo == UTC

    def test_carb_entry_exposes_logged_at_as_timestamp(self) -> None:
        entry = CarbEntry(food_name="Toast", carbs_grams=26, logged_at=NOW)
        assert entry.timestamp == NOW

    def test_entries_are_immutable(self) -> None:
        entry = reading(120)
        with pytest.raises(ValueError, match="frozen"):
            entry.value = 130  # type: ignore

    def test_glucose_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            GlucoseReading(value=0, taken_at=NOW)

    @pytest.mark.parametrize("rank", [0, 6])
    def test_mood_rank_is_bounded(self, rank: int) -> None:
        with pytest.raises(ValueError):
            MoodCheckIn(mood_rank=rank, taken_at=NOW)

    @given(units=st.floats(min_value=0.0, max_value=100.0))
    def test_any_non_negative_dose_is_valid(self, units: float) -> None:
        dose = InsulinDose(units=units, taken_at=NOW)
        assert dose.units == units
        assert dose.kind is InsulinKind.RAPID

    def test_food_record_key_is_normalized(self) -> None:
        record = FoodCompositionRecord(key="  Brown   RICE ", carbs_per_portion=36, calories_per_portion=216)
        assert record.key == "brown rice"


class TestParseEntries:
    def test_discriminator_selects_entry_type(self) -> None:
        entries = parse_entries(
            [
                {"entry_type": "glucose", "value": 140, "taken_at": "2024-06-15T08:00:00Z"},
                {"entry_type": "carbs", "food_name": "Rice", "carbs_grams": 45, "logged_at": "2024-06-15T08:05:00Z"},
                {"entry_type": "medication", "medication_id": "met", "taken": False, "taken_at": "2024-06-15T09:00:00Z"},
            ]
        )
        assert [type(entry) for entry in entries] == [GlucoseReading, CarbEntry, MedicationDose]

    def test_unknown_entry_type_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_entries([{"entry_type": "steps", "count": 1000}])


class TestLogRepository:
    def test_streams_are_sorted_oldest_first(self) -> None:
        repo = LogRepository(glucose=(reading(100, 1), reading(120, 5), reading(140, 3)))
        assert [r.value for r in repo.glucose] == [120, 140, 100]

    def test_from_entries_dispatches_each_stream(self) -> None:
        entries = [
            reading(110),
            CarbEntry(food_name="Apple", carbs_grams=25, logged_at=NOW),
            InsulinDose(units=4, taken_at=NOW),
            MedicationDose(medication_id="met", taken_at=NOW),
            ActivitySession(duration_min=30, calories_burned=100, taken_at=NOW),
            MoodCheckIn(mood_rank=4, taken_at=NOW - timedelta(hours=1)),
        ]
        repo = LogRepository.from_entries(entries)

        assert repo.counts() == {
            "glucose": 1,
            "carbs": 1,
            "insulin": 1,
            "medications": 1,
            "activities": 1,
            "moods": 1,
        }
        assert len(list(repo.entries())) == 6
        assert not repo.is_empty()

    def test_empty_repository(self) -> None:
        assert LogRepository().is_empty()
