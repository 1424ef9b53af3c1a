"""In-memory implementation of RecipeRepository for testing."""

import uuid
from datetime import datetime, timezone

from domain.model.recipe import Recipe


class FakeRecipeRepository:
    def __init__(self):
        self.store: dict[str, Recipe] = {}

    def add(self, title: str, user_id: str | None = None, recipe_id: str | None = None,
            created_at: datetime | None = None) -> Recipe:
        """Seed a recipe (test helper, not part of the port)."""
        recipe = Recipe(
            id=recipe_id or uuid.uuid4().hex,
            title=title,
            description=f"{title} description",
            created_at=created_at or datetime.now(timezone.utc),
            user_id=user_id,
        )
        self.store[recipe.id] = recipe
        return recipe

    def get_by_id(self, recipe_id: str) -> Recipe | None:
        return self.store.get(recipe_id)

    def get_many(self, recipe_ids: list[str]) -> list[Recipe]:
        return [self.store[rid] for rid in recipe_ids if rid in self.store]

    def list_by_user(self, user_id: str) -> list[Recipe]:
        recipes = [r for r in self.store.values() if r.user_id == user_id]
        return sorted(recipes, key=lambda r: r.created_at, reverse=True)
