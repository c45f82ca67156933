"""
Plain-text patient report.

The report always contains the same six titled sections in the same order.
A section whose stream is empty keeps its title and shows a placeholder
line instead of detail rows.
"""

from collections.abc import Callable
from datetime import datetime, timedelta

import structlog
from pydantic import BaseModel, ConfigDict

from insight_core.config import AppConfig
from insight_core.domain.models import LogRepository
from insight_core.domain.result import Result
from insight_core.services.glucose_metrics import (
    estimated_a1c,
    glucose_summary,
    glucose_variability,
    time_in_range,
)
from insight_core.services.log_metrics import (
    activity_summary,
    carb_summary,
    insulin_summary,
    medication_adherence,
    mood_summary,
)
from insight_core.services.pattern_detector import PatternDetector
from insight_core.services.window import to_local

logger = structlog.get_logger(__name__)

NO_DATA_PLACEHOLDER = "No data for this period."
INSUFFICIENT_DATA = "insufficient data"
REPORT_TITLE = "PATIENT HEALTH REPORT"
DISCLAIMER = (
    "This report is for informational purposes only.",
    "Always consult your healthcare provider.",
)
WIDTH = 42
LABEL_WIDTH = 22

Row = tuple[str, str]


class ReportSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    rows: tuple[Row, ...] = ()

    def render(self) -> list[str]:
        lines = [f"-- {self.title.upper()} ".ljust(WIDTH, "-")]
        if not self.rows:
            lines.append(f"  {NO_DATA_PLACEHOLDER}")
        for label, value in self.rows:
            lines.append(f"  {label + ':':<{LABEL_WIDTH}}{value}")
        return lines


class PatientReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    period_days: int
    start: datetime
    end: datetime
    generated_at: datetime
    sections: tuple[ReportSection, ...]

    def section(self, title: str) -> ReportSection | None:
        return next((section for section in self.sections if section.title == title), None)

    def render(self) -> str:
        banner = "=" * WIDTH
        lines = [
            banner,
            REPORT_TITLE.center(WIDTH).rstrip(),
            banner,
            "",
            f"Report Period: {self.start:%Y-%m-%d} to {self.end:%Y-%m-%d} ({self.period_days} days)",
            f"Generated: {self.generated_at:%Y-%m-%d %H:%M %Z}".rstrip(),
        ]
        for section in self.sections:
            lines.append("")
            lines.extend(section.render())
        lines.extend(["", banner, *(f"  {line}" for line in DISCLAIMER), banner])
        return "\n".join(lines) + "\n"


def _num(value: float) -> str:
    return f"{value:g}"


def _or_insufficient(result: Result, render: Callable) -> str:
    return render(result.unwrap()) if result.is_ok() else INSUFFICIENT_DATA


class ReportComposer:
    """
    Build a :class:`PatientReport` from an already windowed repository.

    A failure inside one section is logged and that section falls back to
    the placeholder; composing never raises.
    """

    SECTION_TITLES = (
        "Glucose",
        "Meals & Carbs",
        "Insulin",
        "Medications",
        "Activity",
        "Mood & Wellness",
    )

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.tz = config.preferences.tz
        self.logger = logger.bind(component="report_composer")

    def compose(self, window: LogRepository, now: datetime, period_days: int) -> PatientReport:
        builders: dict[str, Callable[[], tuple[Row, ...]]] = {
            "Glucose": lambda: self._glucose_rows(window),
            "Meals & Carbs": lambda: self._carb_rows(window, now),
            "Insulin": lambda: self._insulin_rows(window),
            "Medications": lambda: self._medication_rows(window),
            "Activity": lambda: self._activity_rows(window),
            "Mood & Wellness": lambda: self._mood_rows(window),
        }

        sections = []
        for title in self.SECTION_TITLES:
            try:
                rows = builders[title]()
            except Exception as e:
                self.logger.error("report_section_failed", section=title, error=str(e))
                rows = ()
            sections.append(ReportSection(title=title, rows=rows))

        local_now = to_local(now, self.tz)
        report = PatientReport(
            period_days=period_days,
            start=local_now - timedelta(days=period_days),
            end=local_now,
            generated_at=local_now,
            sections=tuple(sections),
        )
        self.logger.info(
            "report_composed",
            period_days=period_days,
            empty_sections=[section.title for section in sections if not section.rows],
        )
        return report

    def _glucose_rows(self, window: LogRepository) -> tuple[Row, ...]:
        summary = glucose_summary(window.glucose)
        if summary.is_err():
            return ()
        stats = summary.unwrap()
        targets = self.config.targets
        tir = time_in_range(window.glucose, targets.min_mg_dl, targets.max_mg_dl)
        detector = PatternDetector(targets.min_mg_dl, targets.max_mg_dl, self.tz)

        return (
            ("Total Readings", str(stats.count)),
            ("Average Glucose", f"{stats.mean} mg/dL"),
            ("Estimated A1C", _or_insufficient(estimated_a1c(window.glucose), lambda a: f"{a.percent}%")),
            (
                "Time in Range",
                _or_insufficient(
                    tir,
                    lambda t: f"{t.in_range}% ({_num(t.target_min)}-{_num(t.target_max)} mg/dL)",
                ),
            ),
            ("Variability (CV)", _or_insufficient(glucose_variability(window.glucose), lambda v: f"{v.cv}%")),
            ("Lowest Reading", f"{_num(stats.minimum)} mg/dL"),
            ("Highest Reading", f"{_num(stats.maximum)} mg/dL"),
            ("Key Insight", detector.behavioral_insight(window.glucose).title),
        )

    def _carb_rows(self, window: LogRepository, now: datetime) -> tuple[Row, ...]:
        result = carb_summary(window.carbs, now, self.tz, self.config.preferences.carb_goal_grams)
        if result.is_err():
            return ()
        carbs = result.unwrap()
        return (
            ("Total Meals Logged", str(carbs.meals)),
            ("Total Carbs", f"{_num(carbs.total_carbs)}g"),
            ("Avg Carbs/Meal", f"{carbs.mean_carbs_per_meal}g"),
            (
                "Highest-Carb Meal",
                f"{carbs.top_trigger.food_name} ({_num(carbs.top_trigger.carbs_grams)}g)",
            ),
        )

    def _insulin_rows(self, window: LogRepository) -> tuple[Row, ...]:
        result = insulin_summary(window.insulin)
        if result.is_err():
            return ()
        insulin = result.unwrap()
        rows: list[Row] = [
            ("Total Doses", str(insulin.doses)),
            ("Total Units", f"{_num(insulin.total_units)}u"),
            ("Avg Units/Dose", f"{insulin.mean_units_per_dose:.1f}u"),
        ]
        for kind, units in insulin.units_by_kind.items():
            rows.append((f"{kind.value.title()} Insulin", f"{_num(units)}u"))
        return tuple(rows)

    def _medication_rows(self, window: LogRepository) -> tuple[Row, ...]:
        result = medication_adherence(window.medications)
        if result.is_err():
            return ()
        adherence = result.unwrap()
        rows: list[Row] = [
            ("Doses Logged", str(adherence.logged)),
            ("Taken", str(adherence.taken)),
            ("Skipped", str(adherence.skipped)),
            ("Adherence", f"{adherence.adherence_percent}%"),
        ]
        if adherence.top_skip_reason:
            rows.append(("Top Skip Reason", adherence.top_skip_reason))
        return tuple(rows)

    def _activity_rows(self, window: LogRepository) -> tuple[Row, ...]:
        result = activity_summary(window.activities)
        if result.is_err():
            return ()
        activity = result.unwrap()
        rows: list[Row] = [
            ("Sessions Logged", str(activity.sessions)),
            ("Total Minutes", _num(activity.total_minutes)),
            ("Total Calories", _num(activity.total_calories)),
        ]
        if activity.mean_glucose_drop is not None:
            rows.append(("Avg Glucose Drop", f"{activity.mean_glucose_drop} mg/dL"))
        return tuple(rows)

    def _mood_rows(self, window: LogRepository) -> tuple[Row, ...]:
        result = mood_summary(window.moods)
        if result.is_err():
            return ()
        mood = result.unwrap()
        rows: list[Row] = [
            ("Check-ins", str(mood.check_ins)),
            ("Avg Mood", f"{mood.mean_mood}/5"),
            ("Avg Energy", f"{mood.mean_energy}/5"),
            ("Avg Stress", f"{mood.mean_stress}/5"),
            ("Avg Sleep", f"{mood.mean_sleep}/5"),
        ]
        if mood.top_symptoms:
            rows.append(("Top Symptoms", ", ".join(mood.top_symptoms)))
        if mood.correlation is not None:
            rows.append(("Mood and Glucose", mood.correlation.pattern))
        return tuple(rows)
