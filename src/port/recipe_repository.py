"""Port definition for RecipeRepository.

Read-only: the account features only resolve recipe references.
"""

from typing import Protocol

from domain.model.recipe import Recipe


class RecipeRepository(Protocol):
    def get_by_id(self, recipe_id: str) -> Recipe | None: ...

    def get_many(self, recipe_ids: list[str]) -> list[Recipe]:
        """Return existing recipes among recipe_ids, in the given order."""
        ...

    def list_by_user(self, user_id: str) -> list[Recipe]:
        """Recipes authored by user_id, newest first."""
        ...
