"""
Recipe Search and Filtering
Local, in-memory browsing filters and keyword matching over a recipe list
"""

from typing import Iterable, Sequence

from cookbook.core.models import ALL_CATEGORIES, Recipe


def filter_by_category(recipes: Iterable[Recipe], category: str = ALL_CATEGORIES) -> list[Recipe]:
    """
    Keep recipes tagged with `category` (case-insensitive); "all" keeps
    everything. Only vocabulary categories take part, so tokens outside the
    vocabulary never match.
    """
    selected = (category or "").strip().lower()
    if not selected or selected == ALL_CATEGORIES:
        return list(recipes)
    return [recipe for recipe in recipes if selected in recipe.vocabulary_categories()]


def filter_by_letter(recipes: Iterable[Recipe], letter: str = "") -> list[Recipe]:
    """Keep recipes whose name starts with `letter` (case-insensitive); "" keeps everything"""
    if not letter:
        return list(recipes)
    selected = letter.lower()
    return [recipe for recipe in recipes if recipe.name.lower().startswith(selected)]


def apply_filters(
    recipes: Iterable[Recipe],
    category: str = ALL_CATEGORIES,
    letter: str = ""
) -> list[Recipe]:
    """Category first, then letter within what is left"""
    return filter_by_letter(filter_by_category(recipes, category), letter)


def matches_query(recipe: Recipe, query: str) -> bool:
    """
    True if `query` appears in the recipe name, in any ingredient line of
    any group, or in any category. Case-insensitive substring match.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return True

    if needle in recipe.name.lower():
        return True

    for line in recipe.get_ingredient_lines():
        if needle in line.lower():
            return True

    for category in recipe.categories:
        if needle in str(category).lower():
            return True

    return False


def search_recipes(recipes: Iterable[Recipe], query: str) -> list[Recipe]:
    """Local keyword search over a recipe list"""
    return [recipe for recipe in recipes if matches_query(recipe, query)]


def search_by_keywords(recipes: Iterable[Recipe], keywords: Sequence[str]) -> list[Recipe]:
    """Recipes matching at least one of the keywords"""
    terms = [k for k in keywords if k and k.strip()]
    if not terms:
        return []
    return [
        recipe for recipe in recipes
        if any(matches_query(recipe, term) for term in terms)
    ]


def group_by_letter(recipes: Iterable[Recipe]) -> dict[str, list[Recipe]]:
    """Alphabet index: upper-cased first letter -> recipes, letters sorted"""
    index: dict[str, list[Recipe]] = {}
    for recipe in recipes:
        name = recipe.name.strip()
        if not name:
            continue
        index.setdefault(name[0].upper(), []).append(recipe)
    return dict(sorted(index.items()))
