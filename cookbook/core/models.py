"""
Recipe Data Model
Defines the canonical Recipe dataclass and the mapping from storage rows
"""

import re
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from cookbook.config import RECIPE_CATEGORIES
from cookbook.core.errors import MalformedResponseError

CATEGORIES = tuple(RECIPE_CATEGORIES)
ALL_CATEGORIES = "all"
DEFAULT_GROUP_NAME = "Ingredients"

# "1. ", "2) ", "Step 3: " at the start of a step
STEP_NUMBER = re.compile(r"^(?:step\s*)?\d+\s*[.):]\s+", re.IGNORECASE)


def normalize_category(token: str) -> str:
    """Map a category token onto the vocabulary, or return it verbatim"""
    cleaned = str(token).strip().lower()
    if cleaned in CATEGORIES:
        return cleaned
    return token


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _strings(value: Any) -> list[str]:
    """List items that are strings; nulls and anything else are dropped"""
    return [item for item in _as_list(value) if isinstance(item, str)]


@dataclass
class IngredientGroup:
    """A named, ordered list of ingredient lines"""
    name: str
    ingredients: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "ingredients": list(self.ingredients)
        }

    @classmethod
    def from_dict(cls, data: dict) -> "IngredientGroup":
        return cls(
            name=str(data.get("name") or ""),
            ingredients=_strings(data.get("ingredients"))
        )


@dataclass
class Recipe:
    """Represents a complete recipe in canonical form"""
    name: str
    categories: list[str] = field(default_factory=list)
    ingredient_groups: list[IngredientGroup] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    id: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "recipeName": self.name,
            "categories": list(self.categories),
            "ingredientGroups": [g.to_dict() for g in self.ingredient_groups],
            "instructions": list(self.instructions)
        }
        if self.id is not None:
            data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Recipe":
        """Build a recipe from the canonical (camelCase) shape"""
        return cls(
            id=data.get("id"),
            name=str(data.get("recipeName") or ""),
            categories=_strings(data.get("categories")),
            ingredient_groups=[
                IngredientGroup.from_dict(g)
                for g in _as_list(data.get("ingredientGroups"))
                if isinstance(g, dict)
            ],
            instructions=_strings(data.get("instructions"))
        )

    def to_row(self, owner_id: str) -> dict:
        """Header row for the `recipes` table"""
        return {
            "user_id": owner_id,
            "recipe_name": self.name,
            "categories": [normalize_category(c) for c in self.categories],
            "instructions": [s for s in self.instructions if s.strip()]
        }

    def group_rows(self, recipe_id: str) -> list[dict]:
        """Rows for the `ingredient_groups` table, tagged with their position"""
        return [
            {
                "recipe_id": recipe_id,
                "name": group.name,
                "ingredients": list(group.ingredients),
                "sort_order": index
            }
            for index, group in enumerate(self.ingredient_groups)
        ]

    def normalized(self) -> "Recipe":
        """
        Return a copy that satisfies the canonical invariants.

        Instruction and ingredient lines are trimmed and blanks dropped,
        leftover step numbering is removed, empty groups are removed,
        vocabulary categories are lower-cased (unknown tokens kept as they
        are) and a default group is added when nothing is left. A blank
        name cannot be repaired.
        """
        name = self.name.strip()
        if not name:
            raise MalformedResponseError("Recipe has no name")

        categories = []
        for token in self.categories:
            category = normalize_category(token)
            if str(category).strip() and category not in categories:
                categories.append(category)

        groups = []
        for group in self.ingredient_groups:
            lines = [line.strip() for line in group.ingredients if line.strip()]
            if not lines:
                continue
            groups.append(IngredientGroup(
                name=group.name.strip() or DEFAULT_GROUP_NAME,
                ingredients=lines
            ))
        if not groups:
            groups = [IngredientGroup(name=DEFAULT_GROUP_NAME)]

        instructions = []
        for step in self.instructions:
            step = STEP_NUMBER.sub("", step.strip()).strip()
            if step:
                instructions.append(step)

        return replace(
            self,
            name=name,
            categories=categories,
            ingredient_groups=groups,
            instructions=instructions
        )

    def vocabulary_categories(self) -> list[str]:
        """Categories that belong to the fixed vocabulary, lower-cased"""
        result = []
        for token in self.categories:
            category = str(token).strip().lower()
            if category in CATEGORIES:
                result.append(category)
        return result

    def get_ingredient_lines(self) -> list[str]:
        """All ingredient lines across groups, in display order"""
        return [line for group in self.ingredient_groups for line in group.ingredients]

    def get_ingredients_text(self) -> str:
        """Get formatted ingredient groups for display"""
        blocks = []
        for group in self.ingredient_groups:
            lines = [f"{group.name}:"]
            lines.extend(f"  - {line}" for line in group.ingredients)
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks)

    def get_instructions_text(self) -> str:
        """Get numbered instructions for display"""
        steps = [step for step in self.instructions if step.strip()]
        return "\n".join(
            f"{i+1}. {step}"
            for i, step in enumerate(steps)
        )

    def format_for_print(self) -> str:
        """Plain-text print view"""
        parts = [self.name]
        if self.categories:
            parts.append(f"Categories: {', '.join(self.categories)}")
        if self.ingredient_groups:
            parts.append(self.get_ingredients_text())
        if self.instructions:
            parts.append("Instructions:\n" + self.get_instructions_text())
        return "\n\n".join(parts) + "\n"


def _pick(row: dict, storage_key: str, canonical_key: str, default: Any) -> Any:
    value = row.get(storage_key)
    if value:
        return value
    value = row.get(canonical_key)
    if value:
        return value
    return default


def normalize_stored_row(row: dict) -> Recipe:
    """
    Map a stored row into the canonical Recipe.

    This is the single place where the two naming conventions meet:

        storage              canonical
        -------              ---------
        id                   id
        recipe_name          recipeName
        categories           categories
        ingredient_groups    ingredientGroups
        instructions         instructions
        created_at           createdAt

    The storage-style field wins when both are present. Group rows are put
    back in `sort_order` order; groups without a position keep the order they
    arrived in, after the positioned ones. Absent fields become empty.
    """
    raw_groups = [g for g in _as_list(_pick(row, "ingredient_groups", "ingredientGroups", [])) if isinstance(g, dict)]
    positioned = sorted(
        (g for g in raw_groups if g.get("sort_order") is not None),
        key=lambda g: g["sort_order"]
    )
    unpositioned = [g for g in raw_groups if g.get("sort_order") is None]

    return Recipe(
        id=row.get("id"),
        name=str(_pick(row, "recipe_name", "recipeName", "")),
        categories=_strings(row.get("categories")),
        ingredient_groups=[IngredientGroup.from_dict(g) for g in positioned + unpositioned],
        instructions=_strings(row.get("instructions")),
        created_at=_pick(row, "created_at", "createdAt", None)
    )
