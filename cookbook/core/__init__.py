"""
Cookbook Core Module
Recipe normalization, keyword extraction, filtering and storage
"""

from cookbook.core.errors import (
    CookbookError,
    EmptyInputError,
    NotAuthenticatedError,
    UpstreamError,
    OverloadedError,
    MalformedResponseError,
    PersistenceError,
)
from cookbook.core.models import Recipe, IngredientGroup, normalize_stored_row
from cookbook.core.parser import normalize, normalize_images
from cookbook.core.keywords import extract_keywords
from cookbook.core.search import apply_filters, filter_by_category, filter_by_letter, search_recipes
from cookbook.core.repository import RecipeRepository
from cookbook.core.session import Session

__all__ = [
    "CookbookError",
    "EmptyInputError",
    "NotAuthenticatedError",
    "UpstreamError",
    "OverloadedError",
    "MalformedResponseError",
    "PersistenceError",
    "Recipe",
    "IngredientGroup",
    "normalize_stored_row",
    "normalize",
    "normalize_images",
    "extract_keywords",
    "apply_filters",
    "filter_by_category",
    "filter_by_letter",
    "search_recipes",
    "RecipeRepository",
    "Session",
]
