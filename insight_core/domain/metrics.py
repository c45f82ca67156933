"""
Typed outputs of the metric calculators, pattern detector and badge rules.

These are plain immutable value objects. Rounding and thresholds are applied
by the calculators; the models only carry results and a few derived labels.
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from insight_core.domain.models import InsulinKind

# Statistical calculators (eA1C, CV) are undefined below this many readings.
MIN_STATISTICAL_SAMPLES = 5

VERY_LOW_GLUCOSE = 54
VERY_HIGH_GLUCOSE = 250
HIGH_VARIABILITY_CV = 36


class _Metric(BaseModel):
    model_config = ConfigDict(frozen=True)


class DayPart(str, Enum):
    """Local time-of-day buckets."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


class GlucoseAverage(_Metric):
    value: int
    count: int = Field(gt=0)


class A1CCategory(str, Enum):
    NORMAL = "Normal"
    PREDIABETES = "Prediabetes"
    WELL_CONTROLLED = "Well Controlled"
    NEEDS_IMPROVEMENT = "Needs Improvement"
    HIGH_RISK = "High Risk"


class EstimatedA1C(_Metric):
    """Estimated HbA1c (%) derived from the mean glucose."""

    percent: float
    mean_glucose: float
    count: int

    @computed_field(return_type=A1CCategory)
    def category(self) -> A1CCategory:
        if self.percent < 5.7:
            return A1CCategory.NORMAL
        if self.percent < 6.5:
            return A1CCategory.PREDIABETES
        if self.percent < 7.0:
            return A1CCategory.WELL_CONTROLLED
        if self.percent < 8.0:
            return A1CCategory.NEEDS_IMPROVEMENT
        return A1CCategory.HIGH_RISK


class TimeInRangeBreakdown(_Metric):
    """Share of readings (%) in each of the five glucose bands."""

    very_low: int
    low: int
    in_range: int
    high: int
    very_high: int
    count: int
    target_min: float
    target_max: float

    @computed_field(return_type=int)
    def total_percent(self) -> int:
        return self.very_low + self.low + self.in_range + self.high + self.very_high


class GlucoseVariability(_Metric):
    mean: float
    standard_deviation: float
    cv: int = Field(description="Coefficient of variation, percent")
    count: int

    @computed_field(return_type=bool)
    def high_variability(self) -> bool:
        return self.cv > HIGH_VARIABILITY_CV


class BucketAverage(_Metric):
    part: DayPart
    mean: float
    count: int


class TimeOfDayAverages(_Metric):
    """Mean glucose per non-empty time-of-day bucket."""

    buckets: dict[DayPart, BucketAverage] = Field(default_factory=dict)

    def get(self, part: DayPart) -> BucketAverage | None:
        return self.buckets.get(part)


class WeeklyComparison(_Metric):
    this_week_mean: float
    last_week_mean: float
    delta: float

    @computed_field(return_type=bool)
    def improved(self) -> bool:
        # Lower average glucose is the desired direction.
        return self.delta < 0


class GlucoseTrend(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


class GlucosePrediction(_Metric):
    """Short-horizon estimate from the latest trend and recent carbs."""

    predicted_value: int
    trend: GlucoseTrend
    delta: float = Field(description="Latest reading minus the one before it, mg/dL")
    carb_impact: float = Field(ge=0.0, description="Expected rise from carbs eaten in the last hour")
    predicted_at: datetime


class InsulinOnBoard(_Metric):
    units: float
    active_duration_hours: float
    contributing_doses: int


class GlucoseSummary(_Metric):
    count: int
    mean: int
    minimum: float
    maximum: float


class DayGlucose(_Metric):
    day: date
    count: int = 0
    mean: int | None = None
    minimum: float | None = None
    maximum: float | None = None


class CarbTrigger(_Metric):
    food_name: str
    carbs_grams: float


class CarbSummary(_Metric):
    meals: int
    total_carbs: float
    mean_carbs_per_meal: int
    today_carbs: float
    carb_goal: float
    goal_percent: int
    top_trigger: CarbTrigger


class InsulinSummary(_Metric):
    doses: int
    total_units: float
    mean_units_per_dose: float
    units_by_kind: dict[InsulinKind, float] = Field(default_factory=dict)


class MedicationAdherence(_Metric):
    logged: int
    taken: int
    skipped: int
    adherence_percent: int
    top_skip_reason: str | None = None


class ActivitySummary(_Metric):
    sessions: int
    total_minutes: float
    total_calories: float
    mean_glucose_drop: int | None = None


class MoodCorrelation(_Metric):
    good_mood_mean: int | None = None
    low_mood_mean: int | None = None
    pattern: str


class MoodSummary(_Metric):
    check_ins: int
    mean_mood: float
    mean_energy: float
    mean_stress: float
    mean_sleep: float
    top_symptoms: tuple[str, ...] = ()
    correlation: MoodCorrelation | None = None


class StreakSummary(_Metric):
    current: int
    longest: int
    total_days: int


class Level(_Metric):
    rank: int
    name: str
    next_threshold: int


class PointsAndLevel(_Metric):
    points: int
    level: Level

    @computed_field(return_type=int)
    def points_to_next_level(self) -> int:
        return max(0, self.level.next_threshold - self.points)


class InsightSeverity(str, Enum):
    """How an insight should be presented."""

    POSITIVE = "positive"
    INFO = "info"
    WARNING = "warning"
    ALERT = "alert"

    @property
    def color(self) -> str:
        return _SEVERITY_COLORS[self]


_SEVERITY_COLORS = {
    InsightSeverity.POSITIVE: "#4CAF50",
    InsightSeverity.INFO: "#2196F3",
    InsightSeverity.WARNING: "#FF9800",
    InsightSeverity.ALERT: "#FF5252",
}


class InsightRule(str, Enum):
    DAWN_PHENOMENON = "dawn_phenomenon"
    POST_MEAL_SPIKE = "post_meal_spike"
    GOOD_CONTROL = "good_control"
    HIGH_VARIABILITY = "high_variability"
    EVENING_ELEVATION = "evening_elevation"
    KEEP_LOGGING = "keep_logging"
    NO_DATA = "no_data"


class Insight(_Metric):
    rule: InsightRule
    title: str
    message: str
    severity: InsightSeverity

    @computed_field(return_type=str)
    def color(self) -> str:
        return self.severity.color


class BadgeCategory(str, Enum):
    STREAK = "streak"
    GLUCOSE = "glucose"
    LOGGING = "logging"
    ACTIVITY = "activity"
    MILESTONE = "milestone"


class Badge(_Metric):
    badge_id: str
    name: str
    description: str
    category: BadgeCategory
    progress: int
    target: int

    @computed_field(return_type=bool)
    def unlocked(self) -> bool:
        return self.progress >= self.target


class BolusSuggestion(_Metric):
    """Advisory insulin dose; never a prescription."""

    carb_dose: float
    correction_dose: float
    insulin_on_board: float
    total_before_iob: float
    recommended_units: float
