"""Unit tests for API dependencies: repository wiring and the 503 path."""

import unittest
from unittest.mock import patch, MagicMock

from fastapi import HTTPException

from api.dependencies import get_recipe_repo, get_user_repo
from adapter.mongodb.recipe_repository import MongoRecipeRepository
from adapter.mongodb.user_repository import MongoUserRepository


class TestRepositoryDependencies(unittest.TestCase):

    @patch('api.dependencies.get_mongodb_client')
    def test_returns_mongo_repositories_when_connected(self, mock_get_client):
        mock_client = MagicMock()
        mock_client.__getitem__.return_value = MagicMock()
        mock_get_client.return_value = mock_client

        self.assertIsInstance(get_user_repo(), MongoUserRepository)
        self.assertIsInstance(get_recipe_repo(), MongoRecipeRepository)

    @patch('api.dependencies.get_mongodb_client')
    def test_raises_503_when_mongodb_unavailable(self, mock_get_client):
        mock_get_client.return_value = None

        for dependency in (get_user_repo, get_recipe_repo):
            with self.subTest(dependency=dependency.__name__):
                with self.assertRaises(HTTPException) as context:
                    dependency()
                self.assertEqual(context.exception.status_code, 503)
                self.assertEqual(context.exception.detail, "Database unavailable")

    @patch('api.dependencies.get_mongodb_client')
    def test_uses_configured_database_name(self, mock_get_client):
        mock_client = MagicMock()
        mock_get_client.return_value = mock_client

        get_user_repo()

        from api.dependencies import DATABASE_NAME
        mock_client.__getitem__.assert_called_with(DATABASE_NAME)

    @patch('api.dependencies.get_mongodb_client')
    def test_user_repo_exposes_protocol_methods(self, mock_get_client):
        mock_get_client.return_value = MagicMock()

        repo = get_user_repo()

        expected_methods = [
            'create', 'get_by_id', 'get_by_email', 'get_by_google_id',
            'upsert_pending', 'consume_otp', 'clear_otp', 'update_fields',
            'set_password_hash', 'replace_password_hash', 'toggle_favorite',
            'update_last_login',
        ]
        for method_name in expected_methods:
            self.assertTrue(callable(getattr(repo, method_name, None)), method_name)


if __name__ == '__main__':
    unittest.main()
