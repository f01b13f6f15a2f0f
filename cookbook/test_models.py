"""Tests for the canonical recipe model and stored-row mapping"""

import pytest

from cookbook.core.errors import MalformedResponseError
from cookbook.core.models import (
    DEFAULT_GROUP_NAME,
    IngredientGroup,
    Recipe,
    normalize_category,
    normalize_stored_row,
)


def test_normalize_stored_row_reads_storage_names():
    row = {
        "id": "r1",
        "user_id": "user-1",
        "recipe_name": "Tomato Soup",
        "categories": ["lunch", "dinner"],
        "instructions": ["Simmer tomatoes.", "Blend."],
        "created_at": "2026-10-01T12:00:00",
        "ingredient_groups": [
            {"id": "g2", "recipe_id": "r1", "name": "Garnish", "ingredients": ["basil"], "sort_order": 1},
            {"id": "g1", "recipe_id": "r1", "name": "Soup", "ingredients": ["6 tomatoes", "1 onion"], "sort_order": 0},
        ],
    }

    recipe = normalize_stored_row(row)

    assert recipe.id == "r1"
    assert recipe.name == "Tomato Soup"
    assert recipe.categories == ["lunch", "dinner"]
    assert [g.name for g in recipe.ingredient_groups] == ["Soup", "Garnish"]
    assert recipe.ingredient_groups[0].ingredients == ["6 tomatoes", "1 onion"]
    assert recipe.instructions == ["Simmer tomatoes.", "Blend."]
    assert recipe.created_at == "2026-10-01T12:00:00"


def test_normalize_stored_row_reads_canonical_names():
    row = {
        "recipeName": "Draft Salad",
        "categories": ["lunch"],
        "ingredientGroups": [{"name": "Ingredients", "ingredients": ["lettuce"]}],
        "instructions": ["Toss."],
    }

    recipe = normalize_stored_row(row)

    assert recipe.id is None
    assert recipe.name == "Draft Salad"
    assert recipe.ingredient_groups == [IngredientGroup("Ingredients", ["lettuce"])]


def test_normalize_stored_row_prefers_storage_field():
    row = {
        "recipe_name": "Stored Name",
        "recipeName": "Canonical Name",
        "ingredient_groups": [{"name": "Stored", "ingredients": ["a"]}],
        "ingredientGroups": [{"name": "Canonical", "ingredients": ["b"]}],
    }

    recipe = normalize_stored_row(row)

    assert recipe.name == "Stored Name"
    assert [g.name for g in recipe.ingredient_groups] == ["Stored"]


def test_normalize_stored_row_tolerates_missing_fields():
    recipe = normalize_stored_row({"id": "r9", "ingredient_groups": None})

    assert recipe.name == ""
    assert recipe.categories == []
    assert recipe.ingredient_groups == []
    assert recipe.instructions == []


def test_normalize_stored_row_skips_null_items():
    recipe = normalize_stored_row({
        "recipe_name": "Toast",
        "categories": ["breakfast", None],
        "ingredient_groups": [{"name": "Ingredients", "ingredients": ["bread", None], "sort_order": 0}],
        "instructions": [None, "Toast the bread."],
    })

    assert recipe.categories == ["breakfast"]
    assert recipe.ingredient_groups[0].ingredients == ["bread"]
    assert recipe.instructions == ["Toast the bread."]


def test_normalized_repairs_generator_output():
    recipe = Recipe(
        name="  Lemonade ",
        categories=["Snacks", "summer", "snacks", " "],
        ingredient_groups=[
            IngredientGroup("", ["4 lemons", "  ", "1 cup sugar "]),
            IngredientGroup("Empty", ["", "   "]),
        ],
        instructions=["1. Juice the lemons.", "", "Step 2: Stir in sugar.", "  Chill.  "],
    ).normalized()

    assert recipe.name == "Lemonade"
    assert recipe.categories == ["snacks", "summer"]
    assert recipe.ingredient_groups == [IngredientGroup(DEFAULT_GROUP_NAME, ["4 lemons", "1 cup sugar"])]
    assert recipe.instructions == ["Juice the lemons.", "Stir in sugar.", "Chill."]


def test_normalized_synthesizes_default_group():
    recipe = Recipe(name="Water", ingredient_groups=[]).normalized()

    assert len(recipe.ingredient_groups) == 1
    assert recipe.ingredient_groups[0].name == DEFAULT_GROUP_NAME


def test_normalized_keeps_decimal_quantities_in_steps():
    recipe = Recipe(name="Rice", instructions=["1.5 cups water go in first."]).normalized()

    assert recipe.instructions == ["1.5 cups water go in first."]


def test_normalized_rejects_blank_name():
    with pytest.raises(MalformedResponseError):
        Recipe(name="   ").normalized()


def test_normalize_category():
    assert normalize_category(" Dessert ") == "dessert"
    assert normalize_category("Holiday") == "Holiday"


def test_vocabulary_categories_excludes_unknown_tokens():
    recipe = Recipe(name="Pie", categories=["DESSERT", "Thanksgiving"])

    assert recipe.vocabulary_categories() == ["dessert"]


def test_rows_keep_group_positions(pancakes):
    header = pancakes.to_row("user-1")
    groups = pancakes.group_rows("r1")

    assert header == {
        "user_id": "user-1",
        "recipe_name": "Fluffy Pancakes",
        "categories": ["breakfast"],
        "instructions": pancakes.instructions,
    }
    assert [(g["name"], g["sort_order"], g["recipe_id"]) for g in groups] == [
        ("Dry Ingredients", 0, "r1"),
        ("Wet Ingredients", 1, "r1"),
    ]


def test_to_row_drops_blank_instructions():
    recipe = Recipe(name="Toast", instructions=["Toast bread.", "  ", ""])

    assert recipe.to_row("u")["instructions"] == ["Toast bread."]


def test_dict_round_trip(pancakes):
    assert Recipe.from_dict(pancakes.to_dict()) == pancakes


def test_format_for_print_numbers_steps(pancakes):
    text = pancakes.format_for_print()

    assert text.startswith("Fluffy Pancakes\n")
    assert "Categories: breakfast" in text
    assert "Dry Ingredients:\n  - 1 1/2 cups flour" in text
    assert "1. Whisk the dry ingredients.\n2. Add the wet ingredients and stir." in text
