"""
Calculators for the non-glucose log streams: carbs, insulin, medications,
activity and mood.
"""

import statistics
from collections import Counter
from collections.abc import Sequence
from datetime import datetime, tzinfo

from insight_core.domain.metrics import (
    ActivitySummary,
    CarbSummary,
    CarbTrigger,
    InsulinOnBoard,
    InsulinSummary,
    MedicationAdherence,
    MoodCorrelation,
    MoodSummary,
)
from insight_core.domain.models import (
    ActivityIntensity,
    ActivitySession,
    CarbEntry,
    InsulinDose,
    InsulinKind,
    MedicationDose,
    MoodCheckIn,
    ensure_aware,
)
from insight_core.domain.result import InsufficientData, Result
from insight_core.services.glucose_metrics import round_half_up
from insight_core.services.window import local_date

DEFAULT_INSULIN_ACTIVE_HOURS = 4.0
DEFAULT_BODY_WEIGHT_KG = 70.0
LBS_TO_KG = 0.453592
MOOD_CORRELATION_MIN_SAMPLES = 3
MOOD_CORRELATION_THRESHOLD = 20

# Metabolic equivalents per activity type.
ACTIVITY_METS: dict[str, float] = {
    "Walking": 3.5,
    "Running": 8.0,
    "Cycling": 6.0,
    "Swimming": 7.0,
    "Yoga": 2.5,
    "Gym / Weights": 5.0,
    "Dancing": 5.0,
    "Hiking": 6.0,
    "Team Sports": 7.0,
    "Stretching": 2.0,
    "Housework": 3.0,
    "Gardening": 4.0,
}
DEFAULT_MET = ACTIVITY_METS["Walking"]

INTENSITY_MULTIPLIERS: dict[ActivityIntensity, float] = {
    ActivityIntensity.LIGHT: 0.8,
    ActivityIntensity.MODERATE: 1.0,
    ActivityIntensity.VIGOROUS: 1.3,
}


def insulin_on_board(
    doses: Sequence[InsulinDose],
    now: datetime,
    active_hours: float = DEFAULT_INSULIN_ACTIVE_HOURS,
) -> Result[InsulinOnBoard, InsufficientData]:
    """
    Insulin still active at ``now`` under a linear decay model.

    Each dose taken within the last ``active_hours`` contributes
    ``units * (1 - hours_elapsed / active_hours)``. Doses stamped after
    ``now`` are ignored. No recent doses gives a zero estimate.
    """
    now = ensure_aware(now)
    remaining = 0.0
    contributing = 0
    for dose in doses:
        hours_elapsed = (now - dose.taken_at).total_seconds() / 3600
        if 0 <= hours_elapsed < active_hours:
            remaining += dose.units * max(0.0, 1 - hours_elapsed / active_hours)
            contributing += 1
    return Result.ok(
        InsulinOnBoard(
            units=round_half_up(remaining, 2),
            active_duration_hours=active_hours,
            contributing_doses=contributing,
        )
    )


def carb_summary(
    entries: Sequence[CarbEntry], now: datetime, tz: tzinfo, carb_goal: float
) -> Result[CarbSummary, InsufficientData]:
    """Meal totals, today's intake against the goal and the heaviest meal."""
    if not entries:
        return Result.err(InsufficientData("carb_summary", required=1, available=0))

    total = sum(entry.carbs_grams for entry in entries)
    today = local_date(now, tz)
    today_carbs = sum(
        entry.carbs_grams for entry in entries if local_date(entry.logged_at, tz) == today
    )
    heaviest = max(entries, key=lambda entry: entry.carbs_grams)
    goal_percent = min(100, int(round_half_up(today_carbs / carb_goal * 100)))

    return Result.ok(
        CarbSummary(
            meals=len(entries),
            total_carbs=round_half_up(total, 1),
            mean_carbs_per_meal=int(round_half_up(total / len(entries))),
            today_carbs=round_half_up(today_carbs, 1),
            carb_goal=carb_goal,
            goal_percent=goal_percent,
            top_trigger=CarbTrigger(food_name=heaviest.food_name, carbs_grams=heaviest.carbs_grams),
        )
    )


def insulin_summary(doses: Sequence[InsulinDose]) -> Result[InsulinSummary, InsufficientData]:
    if not doses:
        return Result.err(InsufficientData("insulin_summary", required=1, available=0))

    total = sum(dose.units for dose in doses)
    by_kind: dict[InsulinKind, float] = {}
    for dose in doses:
        by_kind[dose.kind] = by_kind.get(dose.kind, 0.0) + dose.units

    return Result.ok(
        InsulinSummary(
            doses=len(doses),
            total_units=round_half_up(total, 1),
            mean_units_per_dose=round_half_up(total / len(doses), 1),
            units_by_kind={kind: round_half_up(units, 1) for kind, units in by_kind.items()},
        )
    )


def medication_adherence(
    doses: Sequence[MedicationDose],
) -> Result[MedicationAdherence, InsufficientData]:
    """Share of logged doses that were taken, plus the most common skip reason."""
    if not doses:
        return Result.err(InsufficientData("medication_adherence", required=1, available=0))

    taken = sum(1 for dose in doses if dose.taken)
    reasons = Counter(
        dose.skip_reason.strip()
        for dose in doses
        if not dose.taken and dose.skip_reason and dose.skip_reason.strip()
    )
    top_reason = reasons.most_common(1)[0][0] if reasons else None

    return Result.ok(
        MedicationAdherence(
            logged=len(doses),
            taken=taken,
            skipped=len(doses) - taken,
            adherence_percent=int(round_half_up(taken / len(doses) * 100)),
            top_skip_reason=top_reason,
        )
    )


def activity_summary(
    sessions: Sequence[ActivitySession],
) -> Result[ActivitySummary, InsufficientData]:
    if not sessions:
        return Result.err(InsufficientData("activity_summary", required=1, available=0))

    drops = [
        session.glucose_before - session.glucose_after
        for session in sessions
        if session.glucose_before is not None and session.glucose_after is not None
    ]
    mean_drop = int(round_half_up(statistics.fmean(drops))) if drops else None

    return Result.ok(
        ActivitySummary(
            sessions=len(sessions),
            total_minutes=sum(session.duration_min for session in sessions),
            total_calories=sum(session.calories_burned for session in sessions),
            mean_glucose_drop=mean_drop,
        )
    )


def body_weight_kg(weight: float, unit: str = "kg") -> float:
    """Weight in kilograms; unknown or non-positive weight is read as 70 kg."""
    if weight <= 0:
        return DEFAULT_BODY_WEIGHT_KG
    return weight * LBS_TO_KG if unit == "lbs" else weight


def estimate_activity_calories(
    activity_type: str,
    duration_min: float,
    intensity: ActivityIntensity = ActivityIntensity.MODERATE,
    weight: float = 0.0,
    weight_unit: str = "kg",
) -> int:
    """MET x intensity x kg x hours, rounded to whole kcal."""
    met = ACTIVITY_METS.get(activity_type, DEFAULT_MET)
    multiplier = INTENSITY_MULTIPLIERS[intensity]
    kcal = met * multiplier * body_weight_kg(weight, weight_unit) * duration_min / 60
    return int(round_half_up(kcal))


def _mood_correlation(check_ins: Sequence[MoodCheckIn]) -> MoodCorrelation | None:
    with_glucose = [entry for entry in check_ins if entry.glucose_at_time is not None]
    if len(with_glucose) < MOOD_CORRELATION_MIN_SAMPLES:
        return None

    good = [entry.glucose_at_time for entry in with_glucose if entry.mood_rank >= 4]
    low = [entry.glucose_at_time for entry in with_glucose if entry.mood_rank <= 2]
    if not good and not low:
        return None

    good_mean = statistics.fmean(good) if good else None
    low_mean = statistics.fmean(low) if low else None

    pattern = "No strong correlation detected yet between mood and glucose."
    if good_mean is not None and low_mean is not None:
        if low_mean > good_mean + MOOD_CORRELATION_THRESHOLD:
            pattern = "Higher glucose readings correlate with lower mood."
        elif low_mean < good_mean - MOOD_CORRELATION_THRESHOLD:
            pattern = "Lower glucose readings correlate with lower mood."

    return MoodCorrelation(
        good_mood_mean=int(round_half_up(good_mean)) if good_mean is not None else None,
        low_mood_mean=int(round_half_up(low_mean)) if low_mean is not None else None,
        pattern=pattern,
    )


def mood_summary(
    check_ins: Sequence[MoodCheckIn], top_symptoms: int = 3
) -> Result[MoodSummary, InsufficientData]:
    """Mean wellbeing scores, most frequent symptoms and the mood-glucose link."""
    if not check_ins:
        return Result.err(InsufficientData("mood_summary", required=1, available=0))

    symptoms = Counter(symptom for entry in check_ins for symptom in sorted(entry.symptoms))

    return Result.ok(
        MoodSummary(
            check_ins=len(check_ins),
            mean_mood=round_half_up(statistics.fmean(e.mood_rank for e in check_ins), 1),
            mean_energy=round_half_up(statistics.fmean(e.energy for e in check_ins), 1),
            mean_stress=round_half_up(statistics.fmean(e.stress for e in check_ins), 1),
            mean_sleep=round_half_up(statistics.fmean(e.sleep for e in check_ins), 1),
            top_symptoms=tuple(name for name, _ in symptoms.most_common(top_symptoms)),
            correlation=_mood_correlation(check_ins),
        )
    )
