"""
Glucose statistics.

Every calculator takes an already windowed collection of readings and
returns ``Result[<metric>, InsufficientData]``. Nothing here raises for
missing data and nothing falls back to zero.
"""

import statistics
from collections.abc import Sequence
from datetime import date, datetime, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal

import structlog

from insight_core.domain.metrics import (
    MIN_STATISTICAL_SAMPLES,
    VERY_HIGH_GLUCOSE,
    VERY_LOW_GLUCOSE,
    BucketAverage,
    DayGlucose,
    DayPart,
    EstimatedA1C,
    GlucoseAverage,
    GlucosePrediction,
    GlucoseSummary,
    GlucoseTrend,
    GlucoseVariability,
    TimeInRangeBreakdown,
    TimeOfDayAverages,
    WeeklyComparison,
)
from insight_core.domain.models import CarbEntry, GlucoseReading, ensure_aware
from insight_core.domain.result import InsufficientData, Result
from insight_core.services.window import local_date, to_local, window_between

logger = structlog.get_logger(__name__)

# eA1C = (mean glucose + 46.7) / 28.7 (ADAG regression)
A1C_INTERCEPT = 46.7
A1C_SLOPE = 28.7

# Next-reading estimate: one more step of the latest trend plus recent carbs.
PREDICTION_HORIZON = timedelta(minutes=30)
CARB_LOOKBACK = timedelta(hours=1)
CARB_IMPACT_PER_GRAM = 1.5
TREND_THRESHOLD = 2.0
PREDICTION_FLOOR = 40
PREDICTION_CEILING = 400

_TIR_BANDS = ("very_low", "low", "in_range", "high", "very_high")


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero, e.g. 2.5 -> 3 and 0.25 -> 0.3 at one digit."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _values(readings: Sequence[GlucoseReading]) -> list[float]:
    return [reading.value for reading in readings]


def _require(
    metric: str, readings: Sequence[GlucoseReading], minimum: int
) -> InsufficientData | None:
    if len(readings) < minimum:
        return InsufficientData(metric, required=minimum, available=len(readings))
    return None


def day_part(hour: int) -> DayPart:
    if 5 <= hour < 12:
        return DayPart.MORNING
    if 12 <= hour < 17:
        return DayPart.AFTERNOON
    if 17 <= hour < 21:
        return DayPart.EVENING
    return DayPart.NIGHT


def average_glucose(
    readings: Sequence[GlucoseReading],
) -> Result[GlucoseAverage, InsufficientData]:
    if missing := _require("average_glucose", readings, 1):
        return Result.err(missing)
    mean = statistics.fmean(_values(readings))
    return Result.ok(GlucoseAverage(value=int(round_half_up(mean)), count=len(readings)))


def estimated_a1c(readings: Sequence[GlucoseReading]) -> Result[EstimatedA1C, InsufficientData]:
    """Estimated A1C from the unrounded mean; needs at least five readings."""
    if missing := _require("estimated_a1c", readings, MIN_STATISTICAL_SAMPLES):
        return Result.err(missing)
    mean = statistics.fmean(_values(readings))
    percent = round_half_up((mean + A1C_INTERCEPT) / A1C_SLOPE, 1)
    return Result.ok(
        EstimatedA1C(percent=percent, mean_glucose=round_half_up(mean, 1), count=len(readings))
    )


def _band(value: float, target_min: float, target_max: float) -> str:
    if value < VERY_LOW_GLUCOSE:
        return "very_low"
    if value < target_min:
        return "low"
    if value > VERY_HIGH_GLUCOSE:
        return "very_high"
    if value > target_max:
        return "high"
    return "in_range"


def _balance_percentages(raw: dict[str, float], rounded: dict[str, int]) -> dict[str, int]:
    """Nudge rounded bands by single points until they sum to 100 +/- 1."""
    balanced = dict(rounded)
    total = sum(balanced.values())
    while total > 101:
        band = max(_TIR_BANDS, key=lambda name: balanced[name] - raw[name])
        balanced[band] -= 1
        total -= 1
    while total < 99:
        band = max(_TIR_BANDS, key=lambda name: raw[name] - balanced[name])
        balanced[band] += 1
        total += 1
    if balanced != rounded:
        logger.debug("time_in_range_rebalanced", before=rounded, after=balanced)
    return balanced


def time_in_range(
    readings: Sequence[GlucoseReading], target_min: float, target_max: float
) -> Result[TimeInRangeBreakdown, InsufficientData]:
    """
    Split readings into the five clinical bands.

    Bands: very low (<54), low (<target_min), very high (>250),
    high (>target_max), otherwise in range. Each share is a whole percent.
    """
    if missing := _require("time_in_range", readings, 1):
        return Result.err(missing)

    counts = dict.fromkeys(_TIR_BANDS, 0)
    for reading in readings:
        counts[_band(reading.value, target_min, target_max)] += 1

    total = len(readings)
    raw = {band: counts[band] / total * 100 for band in _TIR_BANDS}
    rounded = {band: int(round_half_up(raw[band])) for band in _TIR_BANDS}
    percentages = _balance_percentages(raw, rounded)

    return Result.ok(
        TimeInRangeBreakdown(
            **percentages, count=total, target_min=target_min, target_max=target_max
        )
    )


def glucose_variability(
    readings: Sequence[GlucoseReading],
) -> Result[GlucoseVariability, InsufficientData]:
    """Population standard deviation and coefficient of variation."""
    if missing := _require("glucose_variability", readings, MIN_STATISTICAL_SAMPLES):
        return Result.err(missing)
    values = _values(readings)
    mean = statistics.fmean(values)
    sd = statistics.pstdev(values)
    cv = int(round_half_up(sd / mean * 100))
    return Result.ok(
        GlucoseVariability(
            mean=round_half_up(mean, 1),
            standard_deviation=round_half_up(sd, 1),
            cv=cv,
            count=len(values),
        )
    )


def time_of_day_averages(
    readings: Sequence[GlucoseReading], tz: tzinfo
) -> Result[TimeOfDayAverages, InsufficientData]:
    """Mean glucose per local time-of-day bucket; empty buckets are omitted."""
    if missing := _require("time_of_day_averages", readings, 1):
        return Result.err(missing)

    grouped: dict[DayPart, list[float]] = {}
    for reading in readings:
        part = day_part(to_local(reading.taken_at, tz).hour)
        grouped.setdefault(part, []).append(reading.value)

    buckets = {
        part: BucketAverage(
            part=part, mean=round_half_up(statistics.fmean(values), 1), count=len(values)
        )
        for part, values in grouped.items()
    }
    return Result.ok(TimeOfDayAverages(buckets=buckets))


def weekly_comparison(
    readings: Sequence[GlucoseReading], now: datetime
) -> Result[WeeklyComparison, InsufficientData]:
    """Compare the last seven days with the seven days before them."""
    now = ensure_aware(now)
    week = timedelta(days=7)
    this_week = window_between(readings, now - week, now)
    last_week = window_between(readings, now - 2 * week, now - week)
    if not this_week or not last_week:
        return Result.err(
            InsufficientData(
                "weekly_comparison", required=1, available=min(len(this_week), len(last_week))
            )
        )

    this_mean = statistics.fmean(_values(this_week))
    last_mean = statistics.fmean(_values(last_week))
    return Result.ok(
        WeeklyComparison(
            this_week_mean=round_half_up(this_mean, 1),
            last_week_mean=round_half_up(last_mean, 1),
            delta=round_half_up(this_mean - last_mean, 1),
        )
    )


def predict_next_reading(
    readings: Sequence[GlucoseReading],
    carbs: Sequence[CarbEntry],
    now: datetime,
) -> Result[GlucosePrediction, InsufficientData]:
    """
    Estimate glucose ``PREDICTION_HORIZON`` after ``now``.

    The change between the two latest readings is carried forward once and
    every gram of carbs logged in the last hour adds ``CARB_IMPACT_PER_GRAM``.
    The estimate is clamped to the meter range. Readings and carbs stamped
    after ``now`` are ignored.
    """
    now = ensure_aware(now)
    past = sorted(
        (reading for reading in readings if reading.taken_at <= now),
        key=lambda reading: reading.taken_at,
    )
    if missing := _require("predict_next_reading", past, 2):
        return Result.err(missing)

    previous, latest = past[-2], past[-1]
    delta = latest.value - previous.value
    recent_carbs = sum(
        entry.carbs_grams for entry in carbs if now - CARB_LOOKBACK < entry.logged_at <= now
    )
    carb_impact = recent_carbs * CARB_IMPACT_PER_GRAM
    predicted = round_half_up(latest.value + delta + carb_impact)

    if delta > TREND_THRESHOLD:
        trend = GlucoseTrend.RISING
    elif delta < -TREND_THRESHOLD:
        trend = GlucoseTrend.FALLING
    else:
        trend = GlucoseTrend.STABLE

    return Result.ok(
        GlucosePrediction(
            predicted_value=int(min(PREDICTION_CEILING, max(PREDICTION_FLOOR, predicted))),
            trend=trend,
            delta=round_half_up(delta, 1),
            carb_impact=round_half_up(carb_impact, 1),
            predicted_at=now + PREDICTION_HORIZON,
        )
    )


def glucose_summary(
    readings: Sequence[GlucoseReading],
) -> Result[GlucoseSummary, InsufficientData]:
    if missing := _require("glucose_summary", readings, 1):
        return Result.err(missing)
    values = _values(readings)
    return Result.ok(
        GlucoseSummary(
            count=len(values),
            mean=int(round_half_up(statistics.fmean(values))),
            minimum=min(values),
            maximum=max(values),
        )
    )


def daily_breakdown(
    readings: Sequence[GlucoseReading], now: datetime, tz: tzinfo, days: int = 7
) -> Result[list[DayGlucose], InsufficientData]:
    """
    Per-day statistics for the last ``days`` local calendar days, oldest first.

    Days without readings are still listed, with only ``count=0``.
    """
    if missing := _require("daily_breakdown", readings, 1):
        return Result.err(missing)

    today = local_date(now, tz)
    calendar = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    by_day: dict[date, list[float]] = {day: [] for day in calendar}
    for reading in readings:
        day = local_date(reading.taken_at, tz)
        if day in by_day:
            by_day[day].append(reading.value)

    breakdown = []
    for day in calendar:
        values = by_day[day]
        if not values:
            breakdown.append(DayGlucose(day=day))
            continue
        breakdown.append(
            DayGlucose(
                day=day,
                count=len(values),
                mean=int(round_half_up(statistics.fmean(values))),
                minimum=min(values),
                maximum=max(values),
            )
        )
    return Result.ok(breakdown)
