"""Favorites ledger.

toggle() flips membership; calling it twice restores the original state.
Callers that need "ensure favorited" semantics must read the state first.
"""

import logging
from dataclasses import dataclass

from domain.model.errors import RecipeNotFoundError, UserNotFoundError
from domain.model.recipe import Recipe
from port.recipe_repository import RecipeRepository
from port.user_repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToggleResult:
    favorited: bool
    favorites: list[str]


def toggle(
    user_repo: UserRepository,
    recipe_repo: RecipeRepository,
    user_id: str,
    recipe_id: str,
) -> ToggleResult:
    """Add recipe_id to the user's favorites, or remove it if already there.

    Raises:
        UserNotFoundError / RecipeNotFoundError: dangling reference
    """
    if not user_repo.get_by_id(user_id):
        raise UserNotFoundError()
    if not recipe_repo.get_by_id(recipe_id):
        raise RecipeNotFoundError()

    favorites = user_repo.toggle_favorite(user_id, recipe_id)
    if favorites is None:
        raise UserNotFoundError()

    favorited = recipe_id in favorites
    logger.info("Favorite toggled", extra={
        "userId": user_id, "recipeId": recipe_id, "favorited": favorited,
    })
    return ToggleResult(favorited=favorited, favorites=favorites)


def list_favorites(
    user_repo: UserRepository,
    recipe_repo: RecipeRepository,
    user_id: str,
) -> list[Recipe]:
    """Favorite recipes in the order they were added; deleted recipes are skipped."""
    user = user_repo.get_by_id(user_id)
    if not user:
        raise UserNotFoundError()
    return recipe_repo.get_many(user.favorites)
