"""
Domain models for health log entries.

Every entry is an immutable, validated pydantic model. The six log streams
form a closed tagged union (``entry_type``) so downstream code can dispatch
over them exhaustively. Naive timestamps are read as UTC.
"""

from collections.abc import Iterable, Iterator
from datetime import UTC, datetime
from enum import Enum
from itertools import chain
from typing import Annotated, Literal, assert_never

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


def ensure_aware(value: datetime) -> datetime:
    """Read naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class InsulinKind(str, Enum):
    """Insulin action profiles."""

    RAPID = "rapid"
    SHORT = "short"
    INTERMEDIATE = "intermediate"
    LONG = "long"
    MIXED = "mixed"


class ActivityIntensity(str, Enum):
    """Self-reported exertion for an activity session."""

    LIGHT = "light"
    MODERATE = "moderate"
    VIGOROUS = "vigorous"


class GlycemicTag(str, Enum):
    """Glycemic-index classification of a reference food."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class _TimedEntry(BaseModel):
    """Shared behaviour for entries stamped with ``taken_at``."""

    model_config = ConfigDict(frozen=True)

    taken_at: datetime

    @field_validator("taken_at")
    @classmethod
    def _timezone_aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @property
    def timestamp(self) -> datetime:
        return self.taken_at


class GlucoseReading(_TimedEntry):
    """One blood glucose measurement in mg/dL."""

    entry_type: Literal["glucose"] = "glucose"
    value: float = Field(gt=0.0, description="Glucose concentration in mg/dL")
    note: str | None = None


class CarbEntry(BaseModel):
    """A logged meal or snack with its carbohydrate estimate."""

    model_config = ConfigDict(frozen=True)

    entry_type: Literal["carbs"] = "carbs"
    food_name: str = Field(min_length=1)
    carbs_grams: float = Field(ge=0.0)
    calories_kcal: float | None = Field(None, ge=0.0)
    logged_at: datetime

    @field_validator("logged_at")
    @classmethod
    def _timezone_aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @property
    def timestamp(self) -> datetime:
        return self.logged_at


class InsulinDose(_TimedEntry):
    """An insulin injection or pump bolus."""

    entry_type: Literal["insulin"] = "insulin"
    units: float = Field(ge=0.0)
    kind: InsulinKind = InsulinKind.RAPID


class MedicationDose(_TimedEntry):
    """A scheduled medication dose, either taken or skipped."""

    entry_type: Literal["medication"] = "medication"
    medication_id: str = Field(min_length=1)
    medication_name: str | None = None
    dosage: str | None = None
    taken: bool = True
    skip_reason: str | None = None


class ActivitySession(_TimedEntry):
    """A bout of physical activity."""

    entry_type: Literal["activity"] = "activity"
    activity_type: str = "Other"
    duration_min: float = Field(ge=0.0)
    calories_burned: float = Field(ge=0.0)
    intensity: ActivityIntensity = ActivityIntensity.MODERATE
    glucose_before: float | None = Field(None, gt=0.0)
    glucose_after: float | None = Field(None, gt=0.0)


class MoodCheckIn(_TimedEntry):
    """A wellbeing check-in. Ranks run 1 (worst) to 5 (best)."""

    entry_type: Literal["mood"] = "mood"
    mood_rank: int = Field(ge=1, le=5)
    energy: int = Field(default=3, ge=1, le=5)
    stress: int = Field(default=3, ge=1, le=5)
    sleep: int = Field(default=3, ge=1, le=5)
    symptoms: frozenset[str] = Field(default_factory=frozenset)
    glucose_at_time: float | None = Field(None, gt=0.0)


LogEntry = Annotated[
    GlucoseReading | CarbEntry | InsulinDose | MedicationDose | ActivitySession | MoodCheckIn,
    Field(discriminator="entry_type"),
]

_log_entries_adapter: TypeAdapter[list[LogEntry]] = TypeAdapter(list[LogEntry])


def parse_entries(raw_entries: Iterable[dict[str, object]]) -> list[LogEntry]:
    """Validate raw dictionaries (e.g. from a sync payload) into tagged entries."""
    return _log_entries_adapter.validate_python(list(raw_entries))


class FoodCompositionRecord(BaseModel):
    """Nutrition for one reference portion of a food."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1, description="Lowercase lookup key, e.g. 'brown rice'")
    carbs_per_portion: float = Field(ge=0.0)
    calories_per_portion: float = Field(ge=0.0)
    glycemic_tag: GlycemicTag = GlycemicTag.MEDIUM
    portion: str = "1 serving"

    @field_validator("key")
    @classmethod
    def _normalize_key(cls, value: str) -> str:
        return " ".join(value.lower().split())


class LogRepository(BaseModel):
    """
    Read-only snapshot of every log stream for one user.

    Each stream is stored oldest first. Building a new snapshot is the only
    way to change its contents.
    """

    model_config = ConfigDict(frozen=True)

    glucose: tuple[GlucoseReading, ...] = ()
    carbs: tuple[CarbEntry, ...] = ()
    insulin: tuple[InsulinDose, ...] = ()
    medications: tuple[MedicationDose, ...] = ()
    activities: tuple[ActivitySession, ...] = ()
    moods: tuple[MoodCheckIn, ...] = ()

    @field_validator("glucose", "carbs", "insulin", "medications", "activities", "moods")
    @classmethod
    def _chronological(cls, entries: tuple) -> tuple:
        return tuple(sorted(entries, key=lambda entry: entry.timestamp))

    @classmethod
    def from_entries(cls, entries: Iterable[LogEntry]) -> "LogRepository":
        """Split a mixed sequence of tagged entries into their streams."""
        glucose: list[GlucoseReading] = []
        carbs: list[CarbEntry] = []
        insulin: list[InsulinDose] = []
        medications: list[MedicationDose] = []
        activities: list[ActivitySession] = []
        moods: list[MoodCheckIn] = []

        for entry in entries:
            match entry:
                case GlucoseReading():
                    glucose.append(entry)
                case CarbEntry():
                    carbs.append(entry)
                case InsulinDose():
                    insulin.append(entry)
                case MedicationDose():
                    medications.append(entry)
                case ActivitySession():
                    activities.append(entry)
                case MoodCheckIn():
                    moods.append(entry)
                case _:
                    assert_never(entry)

        return cls(
            glucose=tuple(glucose),
            carbs=tuple(carbs),
            insulin=tuple(insulin),
            medications=tuple(medications),
            activities=tuple(activities),
            moods=tuple(moods),
        )

    def entries(self) -> Iterator[LogEntry]:
        """Iterate every entry, stream by stream."""
        return chain(
            self.glucose, self.carbs, self.insulin, self.medications, self.activities, self.moods
        )

    def counts(self) -> dict[str, int]:
        return {
            "glucose": len(self.glucose),
            "carbs": len(self.carbs),
            "insulin": len(self.insulin),
            "medications": len(self.medications),
            "activities": len(self.activities),
            "moods": len(self.moods),
        }

    def is_empty(self) -> bool:
        return not any(self.counts().values())
