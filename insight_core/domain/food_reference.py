"""Bundled food-composition reference table used by the meal text parser."""

from insight_core.domain.models import FoodCompositionRecord, GlycemicTag

_LOW = GlycemicTag.LOW
_MEDIUM = GlycemicTag.MEDIUM
_HIGH = GlycemicTag.HIGH

# key, carbs (g), calories (kcal), glycemic tag, reference portion
_TABLE: list[tuple[str, float, float, GlycemicTag, str]] = [
    ("rice", 45, 206, _HIGH, "1 cup (cooked)"),
    ("white rice", 45, 206, _HIGH, "1 cup (cooked)"),
    ("brown rice", 36, 216, _MEDIUM, "1 cup (cooked)"),
    ("chicken", 0, 165, _LOW, "1 piece (medium)"),
    ("chicken breast", 0, 165, _LOW, "1 piece (medium)"),
    ("bread", 26, 134, _HIGH, "2 slices"),
    ("pasta", 43, 220, _MEDIUM, "1 cup (cooked)"),
    ("egg", 1, 156, _LOW, "2 large"),
    ("eggs", 1, 156, _LOW, "2 large"),
    ("milk", 12, 149, _MEDIUM, "1 cup"),
    ("banana", 27, 105, _MEDIUM, "1 medium"),
    ("apple", 25, 95, _LOW, "1 medium"),
    ("orange", 15, 62, _LOW, "1 medium"),
    ("oatmeal", 28, 158, _MEDIUM, "1 cup (cooked)"),
    ("potato", 37, 163, _HIGH, "1 medium"),
    ("sweet potato", 24, 103, _MEDIUM, "1 medium"),
    ("salmon", 0, 208, _LOW, "1 fillet"),
    ("steak", 0, 276, _LOW, "6 oz"),
    ("beef", 0, 276, _LOW, "6 oz"),
    ("salad", 8, 65, _LOW, "1 bowl"),
    ("pizza", 52, 570, _HIGH, "2 slices"),
    ("burger", 40, 540, _HIGH, "1 burger"),
    ("sandwich", 34, 350, _MEDIUM, "1 sandwich"),
    ("yogurt", 17, 150, _LOW, "1 cup"),
    ("cereal", 36, 190, _HIGH, "1 cup"),
    ("juice", 26, 112, _HIGH, "1 cup"),
    ("orange juice", 26, 112, _HIGH, "1 cup"),
    ("coffee", 0, 5, _LOW, "1 cup"),
    ("tea", 0, 2, _LOW, "1 cup"),
    ("noodles", 40, 221, _MEDIUM, "1 cup (cooked)"),
    ("soup", 15, 120, _LOW, "1 bowl"),
    ("beans", 40, 225, _LOW, "1 cup"),
    ("lentils", 40, 230, _LOW, "1 cup"),
    ("cheese", 1, 220, _LOW, "2 oz"),
    ("nuts", 6, 170, _LOW, "1 handful"),
    ("toast", 26, 134, _HIGH, "2 slices"),
    ("roti", 30, 200, _MEDIUM, "2 pieces"),
    ("chapati", 30, 200, _MEDIUM, "2 pieces"),
    ("naan", 42, 262, _HIGH, "1 piece"),
    ("paratha", 32, 260, _MEDIUM, "1 piece"),
    ("dal", 20, 170, _LOW, "1 cup"),
    ("biryani", 65, 490, _HIGH, "1 plate"),
    ("curry", 15, 230, _MEDIUM, "1 cup"),
    ("fish", 0, 180, _LOW, "1 fillet"),
    ("shrimp", 1, 84, _LOW, "6 pieces"),
    ("corn", 19, 90, _MEDIUM, "1 ear"),
    ("fruit", 20, 80, _MEDIUM, "1 cup mixed"),
    ("ice cream", 17, 137, _HIGH, "1 scoop"),
    ("cake", 35, 260, _HIGH, "1 slice"),
    ("cookie", 22, 150, _HIGH, "2 cookies"),
    ("chocolate", 26, 235, _MEDIUM, "1 small bar"),
    ("soda", 39, 140, _HIGH, "1 can"),
    ("water", 0, 0, _LOW, "1 glass"),
    ("smoothie", 38, 260, _MEDIUM, "1 cup"),
    ("wrap", 28, 300, _MEDIUM, "1 wrap"),
    ("taco", 24, 340, _MEDIUM, "2 tacos"),
    ("fries", 44, 365, _HIGH, "1 serving"),
    ("pancake", 44, 350, _HIGH, "2 pancakes"),
    ("pancakes", 44, 350, _HIGH, "2 pancakes"),
    ("waffle", 25, 218, _HIGH, "1 waffle"),
    ("mango", 25, 99, _MEDIUM, "1 medium"),
    ("dates", 54, 200, _HIGH, "3 pieces"),
    ("hummus", 9, 104, _LOW, "1/4 cup"),
    ("kebab", 4, 280, _LOW, "2 skewers"),
    ("shawarma", 38, 450, _MEDIUM, "1 wrap"),
    ("falafel", 28, 340, _MEDIUM, "4 pieces"),
    ("pita", 33, 165, _MEDIUM, "1 piece"),
]

DEFAULT_FOOD_REFERENCE: tuple[FoodCompositionRecord, ...] = tuple(
    FoodCompositionRecord(
        key=key,
        carbs_per_portion=carbs,
        calories_per_portion=calories,
        glycemic_tag=tag,
        portion=portion,
    )
    for key, carbs, calories, tag, portion in _TABLE
)
