"""
Core services for the insight engine.

This package contains the calculators, the pattern detector, the meal
parser, the report composer and the engine that ties them together.
"""

from insight_core.domain.result import Result

from .bolus import suggest_bolus
from .engagement import calculate_streaks, evaluate_badges, points_and_level
from .glucose_metrics import (
    average_glucose,
    daily_breakdown,
    estimated_a1c,
    glucose_summary,
    glucose_variability,
    predict_next_reading,
    time_in_range,
    time_of_day_averages,
    weekly_comparison,
)
from .insight_engine import HealthSnapshot, InsightEngine
from .log_metrics import (
    activity_summary,
    carb_summary,
    estimate_activity_calories,
    insulin_on_board,
    insulin_summary,
    medication_adherence,
    mood_summary,
)
from .meal_parser import GlycemicLoad, MealParser, ParsedFoodItem, ParsedMeal, parse_meal_text
from .pattern_detector import PatternDetector, behavioral_insight, detect_patterns
from .report_composer import PatientReport, ReportComposer, ReportSection
from .window import ReportPeriod, filter_repository, filter_window, window_between

__all__ = [
    "Result",
    "InsightEngine",
    "HealthSnapshot",
    "ReportPeriod",
    "filter_window",
    "filter_repository",
    "window_between",
    "average_glucose",
    "estimated_a1c",
    "time_in_range",
    "glucose_variability",
    "time_of_day_averages",
    "weekly_comparison",
    "predict_next_reading",
    "glucose_summary",
    "daily_breakdown",
    "insulin_on_board",
    "carb_summary",
    "insulin_summary",
    "medication_adherence",
    "activity_summary",
    "estimate_activity_calories",
    "mood_summary",
    "calculate_streaks",
    "points_and_level",
    "evaluate_badges",
    "PatternDetector",
    "detect_patterns",
    "behavioral_insight",
    "MealParser",
    "ParsedFoodItem",
    "ParsedMeal",
    "GlycemicLoad",
    "parse_meal_text",
    "ReportComposer",
    "ReportSection",
    "PatientReport",
    "suggest_bolus",
]
