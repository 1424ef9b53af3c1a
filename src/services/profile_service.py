"""Profile service: read and edit the non-credential parts of an account."""

import logging
from dataclasses import dataclass

from domain.model.errors import UserNotFoundError, ValidationError
from domain.model.recipe import Recipe
from domain.model.user import User
from port.recipe_repository import RecipeRepository
from port.user_repository import UserRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('name', 'age', 'bio', 'photo', 'banner_image')


@dataclass
class Profile:
    user: User
    recipes: list[Recipe]

    @property
    def recipe_count(self) -> int:
        return len(self.recipes)


def get_profile(user_repo: UserRepository, recipe_repo: RecipeRepository, user_id: str) -> Profile:
    user = user_repo.get_by_id(user_id)
    if not user:
        raise UserNotFoundError()
    return Profile(user=user, recipes=recipe_repo.list_by_user(user_id))


def update_profile(user_repo: UserRepository, user_id: str, **fields) -> User:
    """Update only the supplied editable fields.

    An explicit None clears an optional field; name can never be cleared.

    Raises:
        ValidationError: unknown field, blank name, or nothing to update
        UserNotFoundError: user does not exist
    """
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Cannot update field: {sorted(unknown)[0]}", field=sorted(unknown)[0])

    changes = dict(fields)
    if 'name' in changes:
        changes['name'] = (changes['name'] or '').strip()
        if not changes['name']:
            raise ValidationError("Name cannot be empty", field='name')
    if not changes:
        raise ValidationError("Nothing to update")

    user = user_repo.update_fields(user_id, changes)
    if user is None:
        raise UserNotFoundError()

    logger.info("Profile updated", extra={"userId": user_id, "fields": sorted(changes)})
    return user
