"""Unit tests for profile_service."""

import unittest
from datetime import datetime, timedelta, timezone

from adapter.fake.recipe_repository import FakeRecipeRepository
from adapter.fake.user_repository import FakeUserRepository
from domain.model.errors import UserNotFoundError, ValidationError
from domain.model.user import User
from services.profile_service import get_profile, update_profile

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestProfileService(unittest.TestCase):

    def setUp(self):
        self.users = FakeUserRepository()
        self.recipes = FakeRecipeRepository()
        self.user = self.users.create(User(
            id='', name='Cook', email='cook@example.com', created_at=NOW, updated_at=NOW,
            password_hash='hash', password_set=True,
        ))

    def test_profile_lists_own_recipes_newest_first(self):
        self.recipes.add('Old', user_id=self.user.id, created_at=NOW)
        self.recipes.add('New', user_id=self.user.id, created_at=NOW + timedelta(days=2))
        self.recipes.add('Someone else', user_id='other')

        profile = get_profile(self.users, self.recipes, self.user.id)

        self.assertEqual([r.title for r in profile.recipes], ['New', 'Old'])
        self.assertEqual(profile.recipe_count, 2)

    def test_profile_unknown_user(self):
        with self.assertRaises(UserNotFoundError):
            get_profile(self.users, self.recipes, 'missing')

    def test_update_sets_only_supplied_fields(self):
        self.users.update_fields(self.user.id, {'bio': 'Soup person'})

        updated = update_profile(self.users, self.user.id, name='  Chef  ', age=30)

        self.assertEqual(updated.name, 'Chef')
        self.assertEqual(updated.age, 30)
        self.assertEqual(updated.bio, 'Soup person')
        self.assertEqual(updated.password_hash, 'hash')

    def test_blank_name_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            update_profile(self.users, self.user.id, name='   ')
        self.assertEqual(ctx.exception.field, 'name')

    def test_explicit_none_clears_optional_fields(self):
        self.users.update_fields(self.user.id, {'bio': 'Soup person', 'photo': 'me.png', 'age': 40})

        updated = update_profile(self.users, self.user.id, bio=None, photo=None)

        self.assertIsNone(updated.bio)
        self.assertIsNone(updated.photo)
        self.assertEqual(updated.age, 40)

    def test_name_cannot_be_cleared(self):
        with self.assertRaises(ValidationError) as ctx:
            update_profile(self.users, self.user.id, name=None)
        self.assertEqual(ctx.exception.field, 'name')
        self.assertEqual(self.users.get_by_id(self.user.id).name, 'Cook')

    def test_nothing_to_update(self):
        with self.assertRaises(ValidationError):
            update_profile(self.users, self.user.id)

    def test_credentials_are_not_editable(self):
        with self.assertRaises(ValidationError):
            update_profile(self.users, self.user.id, password_hash='x')
        with self.assertRaises(ValidationError):
            update_profile(self.users, self.user.id, email='new@example.com')

    def test_update_unknown_user(self):
        with self.assertRaises(UserNotFoundError):
            update_profile(self.users, 'missing', name='X')


if __name__ == '__main__':
    unittest.main()
