"""
Recipe Repository
Owner-scoped CRUD and search against the Supabase `recipes` and
`ingredient_groups` tables
"""

from __future__ import annotations

import logging
from typing import Optional

from postgrest.exceptions import APIError
from supabase import Client

from cookbook.core.errors import EmptyInputError, PersistenceError
from cookbook.core.models import Recipe, normalize_stored_row
from cookbook.core.session import Session

logger = logging.getLogger(__name__)

RECIPES_TABLE = "recipes"
GROUPS_TABLE = "ingredient_groups"
RECIPES_VIEW = "recipes_with_ingredients"
SEARCH_PROCEDURE = "search_recipes"


class RecipeRepository:
    """
    Stores recipes for the session's user.

    Recipes are brought to canonical form before every write; a blank name
    is rejected with EmptyInputError before any request is made.

    Writes are not transactional. `create` writes the header and then the
    groups; if the groups insert fails the header stays. `update` deletes the
    old groups before inserting the new ones, so a failure in between leaves
    the recipe with no groups, and a read racing an update can see that.
    Both cases surface as PersistenceError on the failing step.
    """

    def __init__(self, client: Client, session: Session):
        self.client = client
        self.session = session
        if session.access_token:
            # Row-level security policies key off the caller's JWT
            self.client.postgrest.auth(session.access_token)

    def _execute(self, query, action: str):
        try:
            return query.execute()
        except APIError as e:
            message = e.message or str(e)
            logger.error("%s failed: %s", action, message)
            raise PersistenceError(message) from e

    def _prepare(self, recipe: Recipe) -> Recipe:
        """Bring an authored recipe to canonical form before it is written"""
        if not recipe.name or not recipe.name.strip():
            raise EmptyInputError("Recipe name is required")
        return recipe.normalized()

    def _insert_groups(self, recipe_id: str, recipe: Recipe) -> list[dict]:
        rows = recipe.group_rows(recipe_id)
        if not rows:
            return []
        response = self._execute(
            self.client.table(GROUPS_TABLE).insert(rows),
            "Ingredient groups insert"
        )
        return response.data or []

    def create(self, recipe: Recipe) -> Recipe:
        """Insert the header, then its ordered ingredient groups"""
        owner_id = self.session.require_user()
        recipe = self._prepare(recipe)

        response = self._execute(
            self.client.table(RECIPES_TABLE).insert(recipe.to_row(owner_id)),
            "Recipe insert"
        )
        if not response.data:
            raise PersistenceError("Recipe insert returned no row")
        header = response.data[0]

        groups = self._insert_groups(header["id"], recipe)
        logger.info("Created recipe %s (%d groups)", header["id"], len(groups))
        return normalize_stored_row({**header, "ingredient_groups": groups})

    def list(self) -> list[Recipe]:
        """All of the user's recipes, newest first"""
        owner_id = self.session.require_user()

        response = self._execute(
            self.client.table(RECIPES_VIEW)
            .select("*")
            .eq("user_id", owner_id)
            .order("created_at", desc=True),
            "Recipe list"
        )
        return [normalize_stored_row(row) for row in response.data or []]

    def get(self, recipe_id: str) -> Optional[Recipe]:
        owner_id = self.session.require_user()

        response = self._execute(
            self.client.table(RECIPES_VIEW)
            .select("*")
            .eq("id", recipe_id)
            .eq("user_id", owner_id),
            "Recipe fetch"
        )
        if not response.data:
            return None
        return normalize_stored_row(response.data[0])

    def update(self, recipe_id: str, recipe: Recipe) -> Recipe:
        """Replace the header, then swap the ingredient groups (delete, then insert)"""
        owner_id = self.session.require_user()
        recipe = self._prepare(recipe)

        response = self._execute(
            self.client.table(RECIPES_TABLE)
            .update(recipe.to_row(owner_id))
            .eq("id", recipe_id)
            .eq("user_id", owner_id),
            "Recipe update"
        )
        if not response.data:
            raise PersistenceError(f"Recipe {recipe_id} not found")
        header = response.data[0]

        self._execute(
            self.client.table(GROUPS_TABLE).delete().eq("recipe_id", recipe_id),
            "Ingredient groups delete"
        )
        groups = self._insert_groups(recipe_id, recipe)

        logger.info("Updated recipe %s (%d groups)", recipe_id, len(groups))
        return normalize_stored_row({**header, "ingredient_groups": groups})

    def delete(self, recipe_id: str) -> bool:
        """Delete a recipe; its groups go with it via the foreign key cascade"""
        owner_id = self.session.require_user()

        response = self._execute(
            self.client.table(RECIPES_TABLE)
            .delete()
            .eq("id", recipe_id)
            .eq("user_id", owner_id),
            "Recipe delete"
        )
        deleted = bool(response.data)
        logger.info("Delete recipe %s: %s", recipe_id, "ok" if deleted else "not found")
        return deleted

    def search(self, term: str) -> list[Recipe]:
        """Server-side full-text search over the user's recipes"""
        owner_id = self.session.require_user()
        if term is None or not term.strip():
            raise EmptyInputError("No search term provided")

        response = self._execute(
            self.client.rpc(SEARCH_PROCEDURE, {
                "search_term": term.strip(),
                "user_id": owner_id
            }),
            "Recipe search"
        )
        return [normalize_stored_row(row) for row in response.data or []]
