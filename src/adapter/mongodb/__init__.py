"""MongoDB adapters: connection management, indexes and repositories."""

import os

from bson import ObjectId

DATABASE_NAME = os.getenv('MONGODB_DATABASE', 'recipe_portal')
USERS_COLLECTION_NAME = 'users'
RECIPES_COLLECTION_NAME = 'recipes'


def to_key(entity_id: str):
    """Stored _id for a string id.

    Records written by the earlier Node backend use ObjectId keys; records
    created here use hex uuids, which never parse as an ObjectId.
    """
    return ObjectId(entity_id) if ObjectId.is_valid(entity_id) else entity_id
