"""
Packaged-food product models for the food lookup adapter.

Product databases such as Open Food Facts return loosely structured
payloads: names in several fields, nutriments per serving and/or per 100 g,
and missing values everywhere. This module normalizes such a payload into a
typed product that the engine can turn into food records and carb entries.

Key concepts:
- Per-serving values are preferred; per-100g values fill the gaps
- Glycemic impact is a heuristic from carbs, sugar share and fiber
- Nutri-Score grade (a-e) and NOVA group (1-4, processing level) are
  carried through for display only
"""

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from insight_core.domain.models import CarbEntry, FoodCompositionRecord, GlycemicTag
from insight_core.services.glucose_metrics import round_half_up

UNKNOWN_PRODUCT = "Unknown Product"
DEFAULT_SERVING = "1 serving"


class GlycemicImpact(str, Enum):
    """Estimated blood-glucose impact of one serving."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def tag(self) -> GlycemicTag:
        return GlycemicTag(self.value.lower())


class NormalizedProduct(BaseModel):
    """A packaged food with nutrition for one serving."""

    model_config = ConfigDict(frozen=True)

    name: str = UNKNOWN_PRODUCT
    brand: str = ""
    serving: str = DEFAULT_SERVING
    barcode: str = ""

    carbs: float = Field(default=0.0, ge=0.0, description="grams per serving")
    calories: float = Field(default=0.0, ge=0.0, description="kcal per serving")
    protein: float = Field(default=0.0, ge=0.0)
    fat: float = Field(default=0.0, ge=0.0)
    fiber: float = Field(default=0.0, ge=0.0)
    sugar: float = Field(default=0.0, ge=0.0)

    nutri_score: str | None = None
    nova_group: int | None = Field(default=None, ge=1, le=4)
    ingredients: str | None = None
    allergens: str | None = None

    @field_validator("nutri_score")
    @classmethod
    def validate_nutri_score(cls, v: str | None) -> str | None:
        if v is None:
            return None
        grade = v.strip().lower()
        return grade if grade in {"a", "b", "c", "d", "e"} else None

    @computed_field(return_type=str)
    def display_name(self) -> str:
        return f"{self.name} ({self.brand})" if self.brand else self.name

    @computed_field(return_type=GlycemicImpact)
    def glycemic_impact(self) -> GlycemicImpact:
        sugar_ratio = self.sugar / max(1.0, self.carbs)
        high_fiber = self.fiber >= 3
        if self.carbs <= 10 or (high_fiber and sugar_ratio < 0.3):
            return GlycemicImpact.LOW
        if self.carbs <= 30 and sugar_ratio < 0.6:
            return GlycemicImpact.MEDIUM
        return GlycemicImpact.HIGH

    def to_food_record(self) -> FoodCompositionRecord:
        return FoodCompositionRecord(
            key=self.name,
            carbs_per_portion=self.carbs,
            calories_per_portion=self.calories,
            glycemic_tag=self.glycemic_impact.tag,
            portion=self.serving,
        )

    def to_carb_entry(self, servings: float, logged_at: datetime) -> CarbEntry:
        """A candidate carb entry for ``servings`` portions of this product."""
        if servings <= 0:
            raise ValueError(f"servings must be positive, got {servings}")
        return CarbEntry(
            food_name=self.display_name,
            carbs_grams=round_half_up(self.carbs * servings),
            calories_kcal=round_half_up(self.calories * servings),
            logged_at=logged_at,
        )


def _first(source: Mapping[str, Any], *keys: str) -> Any:
    """First truthy value among ``keys``; empty strings and zeros count as missing."""
    for key in keys:
        value = source.get(key)
        if value:
            return value
    return None


def _nutriment(nutriments: Mapping[str, Any], name: str) -> float:
    value = _first(nutriments, f"{name}_serving", f"{name}_100g")
    try:
        return max(0.0, float(value)) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def _nova_group(value: Any) -> int | None:
    try:
        group = int(value)
    except (TypeError, ValueError):
        return None
    return group if 1 <= group <= 4 else None


def normalize_product(raw: Mapping[str, Any], barcode: str | None = None) -> NormalizedProduct:
    """Map a raw product payload onto :class:`NormalizedProduct`."""
    nutriments = raw.get("nutriments") or {}

    return NormalizedProduct(
        name=str(_first(raw, "product_name", "product_name_en") or "").strip() or UNKNOWN_PRODUCT,
        brand=str(raw.get("brands") or "").strip(),
        serving=str(_first(raw, "serving_size", "quantity") or DEFAULT_SERVING),
        barcode=barcode or str(raw.get("code") or ""),
        carbs=round_half_up(_nutriment(nutriments, "carbohydrates")),
        calories=round_half_up(_nutriment(nutriments, "energy-kcal")),
        protein=round_half_up(_nutriment(nutriments, "proteins"), 1),
        fat=round_half_up(_nutriment(nutriments, "fat"), 1),
        fiber=round_half_up(_nutriment(nutriments, "fiber"), 1),
        sugar=round_half_up(_nutriment(nutriments, "sugars"), 1),
        nutri_score=raw.get("nutriscore_grade") or None,
        nova_group=_nova_group(raw.get("nova_group")),
        ingredients=_first(raw, "ingredients_text", "ingredients_text_en"),
        allergens=raw.get("allergens") or None,
    )
