"""Tests for the free-text meal parser."""

from builders import NOW
from hypothesis import given
from hypothesis import strategies as st

from insight_core.domain.models import FoodCompositionRecord, GlycemicTag
from insight_core.services.meal_parser import (
    GlycemicLoad,
    MealParser,
    ParsedFoodItem,
    classify_glycemic_load,
    normalize_text,
    parse_meal_text,
)


def _by_key(text: str) -> dict[str | None, ParsedFoodItem]:
    return {item.key: item for item in parse_meal_text(text).items}


class TestMatching:
    def test_quantity_and_multiple_foods(self) -> None:
        meal = parse_meal_text("2 cups rice and chicken")
        items = {item.key: item for item in meal.items}

        assert set(items) == {"rice", "chicken"}
        assert (items["rice"].quantity, items["rice"].carbs_grams, items["rice"].calories_kcal) == (2, 90, 412)
        assert items["rice"].portion == "2x 1 cup (cooked)"
        assert (items["chicken"].quantity, items["chicken"].carbs_grams, items["chicken"].calories_kcal) == (1, 0, 165)
        assert meal.total_carbs == 90
        assert meal.glycemic_load is GlycemicLoad.HIGH

    def test_longest_key_wins(self) -> None:
        assert set(_by_key("grilled chicken breast")) == {"chicken breast"}
        assert set(_by_key("brown rice")) == {"brown rice"}

    def test_keys_match_whole_words_only(self) -> None:
        assert set(_by_key("steak")) == {"steak"}
        assert set(_by_key("eggs")) == {"eggs"}

    def test_punctuation_is_ignored(self) -> None:
        assert normalize_text("Toast, Eggs!") == "toast  eggs "
        assert set(_by_key("Toast, eggs!")) == {"toast", "eggs"}

    def test_unit_word_and_of(self) -> None:
        pizza = _by_key("3 slices of pizza")["pizza"]
        assert pizza.quantity == 3
        assert pizza.carbs_grams == 156
        assert pizza.name == "Pizza"

    def test_multi_word_name_is_title_cased(self) -> None:
        assert _by_key("ice cream")["ice cream"].name == "Ice Cream"

    def test_equal_length_keys_keep_table_order(self) -> None:
        reference = [
            FoodCompositionRecord(key="tea", carbs_per_portion=0, calories_per_portion=2),
            FoodCompositionRecord(key="jam", carbs_per_portion=13, calories_per_portion=56),
        ]
        meal = MealParser(reference).parse("jam and tea")
        assert [item.key for item in meal.items] == ["tea", "jam"]


class TestFallback:
    def test_unrecognized_text_gives_one_generic_item(self) -> None:
        text = "  grandma's special casserole with extra love and care  "
        meal = parse_meal_text(text)

        assert len(meal.items) == 1
        item = meal.items[0]
        assert item.generic
        assert item.name == text.strip()[:40]
        assert len(item.name) == 40
        assert (item.carbs_grams, item.calories_kcal) == (25, 200)
        assert item.glycemic_tag is GlycemicTag.MEDIUM

    def test_blank_text_gives_no_items(self) -> None:
        meal = parse_meal_text("   ")
        assert meal.items == ()
        assert meal.total_carbs == 0
        assert meal.glycemic_load is GlycemicLoad.LOW

    @given(text=st.text(max_size=80))
    def test_parser_never_raises(self, text: str) -> None:
        meal = parse_meal_text(text)
        assert meal.total_carbs >= 0
        if text.strip():
            assert len(meal.items) >= 1


class TestGlycemicLoad:
    def test_thresholds(self) -> None:
        assert parse_meal_text("yogurt").glycemic_load is GlycemicLoad.LOW
        assert parse_meal_text("apple").glycemic_load is GlycemicLoad.LOW
        assert parse_meal_text("oatmeal").glycemic_load is GlycemicLoad.MODERATE
        assert parse_meal_text("bread and coffee").glycemic_load is GlycemicLoad.MODERATE
        assert parse_meal_text("toast and orange").glycemic_load is GlycemicLoad.HIGH
        assert parse_meal_text("banana and apple").glycemic_load is GlycemicLoad.HIGH

    def test_empty_items_are_low(self) -> None:
        assert classify_glycemic_load([]) is GlycemicLoad.LOW


def test_to_carb_entries() -> None:
    entries = parse_meal_text("2 cups rice and chicken").to_carb_entries(NOW)

    assert {entry.food_name: entry.carbs_grams for entry in entries} == {"Rice": 90, "Chicken": 0}
    assert all(entry.logged_at == NOW for entry in entries)
