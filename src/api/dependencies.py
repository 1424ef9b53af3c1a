from fastapi import HTTPException

from adapter.external.google_oauth import GoogleOAuthAdapter
from adapter.external.resend_email import ResendEmailAdapter
from adapter.mongodb.connection import get_mongodb_client
from adapter.mongodb import DATABASE_NAME
from adapter.mongodb.recipe_repository import MongoRecipeRepository
from adapter.mongodb.user_repository import MongoUserRepository
from port.identity_provider import IdentityProviderPort
from port.notification import NotificationPort
from port.recipe_repository import RecipeRepository
from port.user_repository import UserRepository


def _get_db():
    """Get MongoDB database, raising 503 if unavailable."""
    client = get_mongodb_client()
    if client is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return client[DATABASE_NAME]


def get_user_repo() -> UserRepository:
    return MongoUserRepository(_get_db())


def get_recipe_repo() -> RecipeRepository:
    return MongoRecipeRepository(_get_db())


def get_notifier() -> NotificationPort:
    return ResendEmailAdapter()


def get_identity_provider() -> IdentityProviderPort:
    return GoogleOAuthAdapter()
