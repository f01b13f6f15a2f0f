"""Shared test fixtures: stub LLM, stub OCR and an in-memory Supabase"""

import itertools
from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError

from cookbook.core.models import IngredientGroup, Recipe
from cookbook.core.session import Session


class StubGenerator:
    """Plays back canned replies; an Exception instance is raised instead"""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def calls(self) -> int:
        return len(self.prompts)


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters = []
        self.order_by = None

    def select(self, *columns):
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.op = "update"
        self.payload = payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def execute(self):
        return self.db.run(self)


class FakeRpc:
    def __init__(self, db, name, params):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.calls.append(("rpc", self.name))
        self.db.check_failure("rpc", self.name)
        term = self.params["search_term"].lower()
        rows = [
            row for row in self.db.view_rows()
            if row["user_id"] == self.params["user_id"] and (
                term in row["recipe_name"].lower()
                or any(term in c.lower() for c in row["categories"])
                or any(term in line.lower() for g in row["ingredient_groups"] for line in g["ingredients"])
            )
        ]
        return SimpleNamespace(data=rows)


class FakeSupabase:
    """
    Enough of the supabase-py query builder for the repository: the
    `recipes` and `ingredient_groups` tables, the `recipes_with_ingredients`
    view and the `search_recipes` procedure.
    """

    def __init__(self, users=None):
        self.tables = {"recipes": [], "ingredient_groups": []}
        self.calls = []
        self.failures = set()
        self.tokens = []
        self.users = users or {}
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)
        self.postgrest = SimpleNamespace(auth=self.tokens.append)
        self.auth = SimpleNamespace(get_user=self._get_user)

    def _get_user(self, token):
        user_id = self.users.get(token)
        return SimpleNamespace(user=SimpleNamespace(id=user_id) if user_id else None)

    def fail(self, table, op):
        self.failures.add((table, op))

    def check_failure(self, table, op):
        if (table, op) in self.failures:
            raise APIError({"message": f"{op} on {table} rejected", "code": "42501"})

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params):
        return FakeRpc(self, name, params)

    def view_rows(self):
        rows = []
        for recipe in self.tables["recipes"]:
            groups = [g for g in self.tables["ingredient_groups"] if g["recipe_id"] == recipe["id"]]
            # the view does not promise any group order
            rows.append({**recipe, "ingredient_groups": [dict(g) for g in reversed(groups)]})
        return rows

    def _matches(self, row, filters):
        return all(row.get(column) == value for column, value in filters)

    def run(self, query):
        self.calls.append((query.table, query.op))
        self.check_failure(query.table, query.op)

        if query.table == "recipes_with_ingredients":
            rows = [r for r in self.view_rows() if self._matches(r, query.filters)]
            if query.order_by:
                column, desc = query.order_by
                rows.sort(key=lambda r: r[column], reverse=desc)
            return SimpleNamespace(data=rows)

        table = self.tables[query.table]

        if query.op == "insert":
            payload = query.payload if isinstance(query.payload, list) else [query.payload]
            inserted = []
            for item in payload:
                row = {"id": f"{query.table}-{next(self._ids)}", **item}
                if query.table == "recipes":
                    row["created_at"] = f"2026-10-17T10:00:{next(self._clock):02d}"
                table.append(row)
                inserted.append(dict(row))
            return SimpleNamespace(data=inserted)

        matched = [row for row in table if self._matches(row, query.filters)]

        if query.op == "update":
            for row in matched:
                row.update(query.payload)
            return SimpleNamespace(data=[dict(r) for r in matched])

        if query.op == "delete":
            self.tables[query.table] = [r for r in table if r not in matched]
            if query.table == "recipes":
                ids = {r["id"] for r in matched}
                self.tables["ingredient_groups"] = [
                    g for g in self.tables["ingredient_groups"] if g["recipe_id"] not in ids
                ]
            return SimpleNamespace(data=[dict(r) for r in matched])

        return SimpleNamespace(data=[dict(r) for r in matched])


@pytest.fixture
def fake_db():
    return FakeSupabase(users={"token-1": "user-1"})


@pytest.fixture
def session():
    return Session(user_id="user-1", access_token="token-1")


@pytest.fixture
def pancakes():
    return Recipe(
        name="Fluffy Pancakes",
        categories=["breakfast"],
        ingredient_groups=[
            IngredientGroup("Dry Ingredients", ["1 1/2 cups flour", "3 1/2 tsp baking powder"]),
            IngredientGroup("Wet Ingredients", ["1 1/4 cups milk", "1 egg", "3 tbsp melted butter"]),
        ],
        instructions=["Whisk the dry ingredients.", "Add the wet ingredients and stir.", "Cook on a hot griddle."]
    )


@pytest.fixture
def book():
    return [
        Recipe("Apple Pie", ["dessert"], [IngredientGroup("Filling", ["6 apples", "1 cup sugar"])], ["Bake."]),
        Recipe("avocado toast", ["Breakfast", "snacks"], [IngredientGroup("Ingredients", ["1 avocado", "2 slices bread"])], ["Toast."]),
        Recipe("Beef Stew", ["dinner"], [IngredientGroup("Ingredients", ["1 lb beef", "2 carrots"])], ["Simmer."]),
        Recipe("BBQ Sauce", ["sauce", "Family Favorite"], [IngredientGroup("Ingredients", ["1 cup ketchup", "apple cider vinegar"])], ["Mix."]),
        Recipe("Chocolate Mousse", ["DESSERT"], [IngredientGroup("Ingredients", ["200g chocolate", "3 eggs"])], ["Chill."]),
    ]
