"""MongoDB implementation of RecipeRepository.

The recipes collection is shared with the recipe CRUD service, which writes
camelCase fields and ObjectId primary keys; ids cross this boundary as strings.
"""

from logging import getLogger

from pymongo.database import Database
from pymongo.errors import PyMongoError

from adapter.mongodb import RECIPES_COLLECTION_NAME, to_key
from domain.model.recipe import Recipe

logger = getLogger(__name__)


class MongoRecipeRepository:
    def __init__(self, db: Database):
        self.collection = db[RECIPES_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(self.collection, [('userId', 1), ('createdAt', -1)], 'idx_recipes_user_created')
            return True
        except PyMongoError as e:
            logger.error("Failed to create recipes indexes", extra={"error": str(e)})
            return False

    def _to_domain(self, doc: dict) -> Recipe:
        user_id = doc.get('userId')
        return Recipe(
            id=str(doc['_id']),
            title=doc.get('title') or doc.get('strMeal', ''),
            description=doc.get('description', ''),
            created_at=doc['createdAt'],
            image=doc.get('image') or doc.get('strMealThumb'),
            user_id=str(user_id) if user_id is not None else None,
            user_name=doc.get('userName', 'Anonymous'),
        )

    def get_by_id(self, recipe_id: str) -> Recipe | None:
        try:
            doc = self.collection.find_one({'_id': to_key(recipe_id)})
            return self._to_domain(doc) if doc else None
        except PyMongoError as e:
            logger.error("Failed to get recipe by ID", extra={"recipeId": recipe_id, "error": str(e)})
            raise

    def get_many(self, recipe_ids: list[str]) -> list[Recipe]:
        if not recipe_ids:
            return []
        try:
            docs = self.collection.find({'_id': {'$in': [to_key(rid) for rid in recipe_ids]}})
            by_id = {str(doc['_id']): self._to_domain(doc) for doc in docs}
        except PyMongoError as e:
            logger.error("Failed to get recipes", extra={"count": len(recipe_ids), "error": str(e)})
            raise
        return [by_id[rid] for rid in recipe_ids if rid in by_id]

    def list_by_user(self, user_id: str) -> list[Recipe]:
        try:
            docs = self.collection.find({'userId': to_key(user_id)}).sort('createdAt', -1)
            return [self._to_domain(doc) for doc in docs]
        except PyMongoError as e:
            logger.error("Failed to list recipes by user", extra={"userId": user_id, "error": str(e)})
            raise
