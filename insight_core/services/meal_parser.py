"""
Free-text meal parser.

Turns a typed or transcribed description such as "2 cups rice and chicken"
into quantified food items using a food-composition reference table.
Longer keys are tried first, so "chicken breast" wins over "chicken"; the
words of a matched key are then consumed and shorter keys made of them are
skipped. Keys of equal length keep their table order.
"""

import re
from collections.abc import Iterable
from datetime import datetime
from enum import Enum

import structlog
from pydantic import BaseModel, ConfigDict, Field, computed_field

from insight_core.domain.food_reference import DEFAULT_FOOD_REFERENCE
from insight_core.domain.models import CarbEntry, FoodCompositionRecord, GlycemicTag
from insight_core.services.glucose_metrics import round_half_up

logger = structlog.get_logger(__name__)

GENERIC_CARBS_GRAMS = 25.0
GENERIC_CALORIES_KCAL = 200.0
GENERIC_NAME_LIMIT = 40

_UNIT_WORDS = r"(?:cups?|pieces?|slices?|bowls?|plates?|servings?|fillets?)"
_PUNCTUATION = re.compile(r"[^\w\s]")


class GlycemicLoad(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"


class ParsedFoodItem(BaseModel):
    """One recognised food with its quantity-scaled nutrition."""

    model_config = ConfigDict(frozen=True)

    name: str
    key: str | None = Field(None, description="Reference key; None for the generic fallback")
    quantity: int = Field(default=1, ge=1)
    portion: str
    carbs_grams: float = Field(ge=0.0)
    calories_kcal: float = Field(ge=0.0)
    glycemic_tag: GlycemicTag

    @computed_field(return_type=bool)
    def generic(self) -> bool:
        return self.key is None


class ParsedMeal(BaseModel):
    """Parser output: the items found and their aggregate nutrition."""

    model_config = ConfigDict(frozen=True)

    text: str
    items: tuple[ParsedFoodItem, ...] = ()

    @computed_field(return_type=float)
    def total_carbs(self) -> float:
        return sum(item.carbs_grams for item in self.items)

    @computed_field(return_type=float)
    def total_calories(self) -> float:
        return sum(item.calories_kcal for item in self.items)

    @computed_field(return_type=GlycemicLoad)
    def glycemic_load(self) -> GlycemicLoad:
        return classify_glycemic_load(self.items)

    def to_carb_entries(self, logged_at: datetime) -> list[CarbEntry]:
        """Candidate carb log entries for the caller to confirm."""
        return [
            CarbEntry(
                food_name=item.name,
                carbs_grams=item.carbs_grams,
                calories_kcal=item.calories_kcal,
                logged_at=logged_at,
            )
            for item in self.items
        ]


def classify_glycemic_load(items: Iterable[ParsedFoodItem]) -> GlycemicLoad:
    items = list(items)
    total = sum(item.carbs_grams for item in items)
    has_high = any(item.glycemic_tag is GlycemicTag.HIGH for item in items)
    if total > 50 or (has_high and total > 30):
        return GlycemicLoad.HIGH
    if total > 25:
        return GlycemicLoad.MODERATE
    return GlycemicLoad.LOW


def normalize_text(text: str) -> str:
    """Lowercase and replace punctuation with spaces."""
    return _PUNCTUATION.sub(" ", text.lower())


class MealParser:
    """
    Match meal descriptions against a food reference table.

    Args:
        reference: Food records to match; defaults to the bundled table
    """

    def __init__(self, reference: Iterable[FoodCompositionRecord] = DEFAULT_FOOD_REFERENCE) -> None:
        # sorted() is stable, so equal-length keys stay in table order.
        records = sorted(reference, key=lambda record: len(record.key), reverse=True)
        self._entries = [(record, self._compile(record.key)) for record in records]
        self.logger = logger.bind(component="meal_parser", reference_size=len(records))

    @staticmethod
    def _compile(key: str) -> re.Pattern[str]:
        words = r"\s+".join(re.escape(word) for word in key.split())
        return re.compile(rf"(?:(?<!\d)(\d{{1,4}})\s*)?(?:{_UNIT_WORDS}\s+)?(?:of\s+)?\b{words}\b")

    def parse(self, text: str) -> ParsedMeal:
        normalized = normalize_text(text)
        consumed: set[str] = set()
        items: list[ParsedFoodItem] = []

        for record, pattern in self._entries:
            if record.key in consumed:
                continue
            match = pattern.search(normalized)
            if match is None:
                continue

            quantity = int(match.group(1)) if match.group(1) else 1
            quantity = max(quantity, 1)
            items.append(
                ParsedFoodItem(
                    name=record.key.title(),
                    key=record.key,
                    quantity=quantity,
                    portion=f"{quantity}x {record.portion}" if quantity > 1 else record.portion,
                    carbs_grams=round_half_up(record.carbs_per_portion * quantity),
                    calories_kcal=round_half_up(record.calories_per_portion * quantity),
                    glycemic_tag=record.glycemic_tag,
                )
            )
            consumed.add(record.key)
            consumed.update(record.key.split())

        stripped = text.strip()
        if not items and stripped:
            self.logger.info("meal_parse_fallback", text_length=len(stripped))
            items.append(
                ParsedFoodItem(
                    name=stripped[:GENERIC_NAME_LIMIT],
                    portion="1 serving",
                    carbs_grams=GENERIC_CARBS_GRAMS,
                    calories_kcal=GENERIC_CALORIES_KCAL,
                    glycemic_tag=GlycemicTag.MEDIUM,
                )
            )

        self.logger.debug("meal_parsed", items=[item.name for item in items])
        return ParsedMeal(text=text, items=tuple(items))


def parse_meal_text(
    text: str, reference: Iterable[FoodCompositionRecord] = DEFAULT_FOOD_REFERENCE
) -> ParsedMeal:
    return MealParser(reference).parse(text)
