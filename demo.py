"""
End-to-end walkthrough of the insight engine on synthetic logs.

This script exercises:
1. Configuration loading and validation
2. Metric calculation and pattern detection over a report window
3. Streaks, points and badges
4. Free-text meal parsing
5. Product lookup normalization and failure handling
6. The advisory bolus calculator and the text report

Run with: uv run python demo.py
"""

import random
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from adapters.food_lookup.service import FoodLookupService
from insight_core.config import get_config, print_config_summary, validate_config
from insight_core.domain.models import (
    ActivityIntensity,
    ActivitySession,
    CarbEntry,
    GlucoseReading,
    InsulinDose,
    LogRepository,
    MedicationDose,
    MoodCheckIn,
)
from insight_core.logging_setup import configure_logging
from insight_core.services import InsightEngine, parse_meal_text, suggest_bolus

console = Console()


def build_sample_repository(now: datetime, days: int = 30, seed: int = 7) -> LogRepository:
    """Four readings a day with a high-ish morning, plus meals, doses and check-ins."""
    rng = random.Random(seed)
    glucose, carbs, insulin, meds, activities, moods = [], [], [], [], [], []

    for offset in range(days):
        day = (now - timedelta(days=offset)).replace(hour=0, minute=0, second=0, microsecond=0)
        for hour, base in ((7, 175), (13, 165), (19, 150), (23, 120)):
            taken_at = day + timedelta(hours=hour, minutes=rng.randint(0, 45))
            if taken_at <= now:
                glucose.append(GlucoseReading(value=base + rng.randint(-35, 45), taken_at=taken_at))

        lunch = day + timedelta(hours=12, minutes=30)
        if lunch <= now:
            carbs.append(CarbEntry(food_name="Rice and Curry", carbs_grams=60, logged_at=lunch))
            insulin.append(InsulinDose(units=6, taken_at=lunch))
            meds.append(
                MedicationDose(
                    medication_id="metformin",
                    medication_name="Metformin",
                    dosage="500 mg",
                    taken=rng.random() > 0.15,
                    skip_reason="Forgot",
                    taken_at=lunch,
                )
            )
        if offset % 3 == 0 and day + timedelta(hours=18) <= now:
            activities.append(
                ActivitySession(
                    activity_type="Walking",
                    duration_min=30,
                    calories_burned=120,
                    intensity=ActivityIntensity.MODERATE,
                    glucose_before=180,
                    glucose_after=150,
                    taken_at=day + timedelta(hours=18),
                )
            )
        if offset % 2 == 0 and day + timedelta(hours=21) <= now:
            moods.append(
                MoodCheckIn(
                    mood_rank=rng.randint(1, 5),
                    symptoms=frozenset({"fatigue"}) if rng.random() > 0.6 else frozenset(),
                    glucose_at_time=rng.randint(110, 220),
                    taken_at=day + timedelta(hours=21),
                )
            )

    return LogRepository(
        glucose=tuple(glucose),
        carbs=tuple(carbs),
        insulin=tuple(insulin),
        medications=tuple(meds),
        activities=tuple(activities),
        moods=tuple(moods),
    )


class InMemoryProductLookup:
    """Product client backed by a dict, with one barcode that always errors."""

    def __init__(self, products: Mapping[str, Mapping[str, Any]]) -> None:
        self.products = products

    def fetch_barcode(self, barcode: str) -> Mapping[str, Any] | None:
        if barcode == "0000000000000":
            raise ConnectionError("product database unavailable")
        return self.products.get(barcode)

    def search(self, query: str, country: str | None = None) -> Sequence[Mapping[str, Any]]:
        return [p for p in self.products.values() if query.lower() in p["product_name"].lower()]


def show_snapshot(engine: InsightEngine, repository: LogRepository, now: datetime) -> None:
    console.print(Panel("Metrics and Patterns", style="blue"))
    snapshot = engine.snapshot(repository, now)

    table = Table(title=f"Last {snapshot.period_days} days")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")

    def show(label: str, result: Any, render: Any) -> None:
        table.add_row(label, render(result.unwrap()) if result.is_ok() else "insufficient data")

    show("Average glucose", snapshot.average, lambda m: f"{m.value} mg/dL")
    show("Estimated A1C", snapshot.estimated_a1c, lambda m: f"{m.percent}% ({m.category.value})")
    show("Time in range", snapshot.time_in_range, lambda m: f"{m.in_range}%")
    show("Variability (CV)", snapshot.variability, lambda m: f"{m.cv}%")
    show("Week over week", snapshot.weekly, lambda m: f"{m.delta:+} mg/dL")
    show("Next 30 min", snapshot.prediction, lambda m: f"{m.predicted_value} mg/dL ({m.trend.value})")
    show("Insulin on board", snapshot.insulin_on_board, lambda m: f"{m.units}u")
    show("Current streak", snapshot.streaks, lambda m: f"{m.current} days")
    show("Points", snapshot.points, lambda m: f"{m.points} ({m.level.name})")
    console.print(table)

    for insight in snapshot.patterns:
        console.print(f"[bold]{insight.title}[/bold]: {insight.message}", style=insight.color)
    console.print(f"Unlocked badges: {', '.join(b.name for b in snapshot.unlocked_badges)}")


def show_meal_parsing() -> None:
    console.print(Panel("Meal Parsing", style="blue"))
    for text in ("2 cups rice and chicken", "Roti and dal", "grandma's special casserole"):
        meal = parse_meal_text(text)
        items = ", ".join(f"{item.name} x{item.quantity} ({item.carbs_grams:g}g)" for item in meal.items)
        console.print(f"{text!r} -> {items}; load {meal.glycemic_load.value}")


def show_food_lookup() -> None:
    console.print(Panel("Product Lookup", style="blue"))
    service = FoodLookupService(
        InMemoryProductLookup(
            {
                "5000159484695": {
                    "product_name": "Oat Biscuits",
                    "brands": "Acme",
                    "serving_size": "2 biscuits (25 g)",
                    "nutriments": {"carbohydrates_100g": 62, "sugars_100g": 20, "fiber_100g": 6},
                }
            }
        )
    )
    for barcode in ("5000159484695", "123", "0000000000000"):
        result = service.by_barcode(barcode)
        if result.is_ok():
            product = result.unwrap()
            console.print(f"{barcode}: {product.display_name}, impact {product.glycemic_impact.value}")
        else:
            console.print(f"{barcode}: {result.unwrap_err()}", style="yellow")


def main() -> None:
    config = validate_config()
    configure_logging(config.logging)
    print_config_summary(config)

    now = datetime.now(UTC)
    repository = build_sample_repository(now)
    engine = InsightEngine(get_config())

    show_snapshot(engine, repository, now)
    show_meal_parsing()
    show_food_lookup()

    console.print(Panel("Bolus Suggestion", style="blue"))
    iob = engine.snapshot(repository, now).insulin_on_board.unwrap().units
    suggestion = suggest_bolus(210, 60, config.bolus, insulin_on_board=iob, targets=config.targets)
    console.print(f"Recommended: {suggestion.recommended_units}u (advisory only)")

    console.print(engine.report(repository, now).render())


if __name__ == "__main__":
    main()
