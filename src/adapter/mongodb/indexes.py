"""MongoDB index management utilities.

Index creation that survives schema drift, used by each MongoXxxRepository
from ensure_indexes().
"""

from logging import getLogger

from pymongo.errors import PyMongoError

logger = getLogger(__name__)

# Options whose change makes MongoDB reject create_index for an existing index
_COMPARED_OPTIONS = ('unique', 'sparse', 'partialFilterExpression')


def create_index_safe(collection, keys: list, name: str, **kwargs) -> bool:
    """Create index, replacing an existing index that conflicts with it.

    A conflict is an index with the same name but a different key spec,
    the same key spec under another name, or the same name and keys with
    different uniqueness/filter options (e.g. google_id moving from a
    sparse to a partial unique index).
    """
    try:
        collection.create_index(keys, name=name, **kwargs)
        return True
    except PyMongoError as e:
        message = str(e)
        if "already exists" not in message and "Conflict" not in message:
            raise
        return _resolve_conflict(collection, keys, name, **kwargs)


def _options_differ(idx_info: dict, wanted: dict) -> bool:
    for option in _COMPARED_OPTIONS:
        if idx_info.get(option) != wanted.get(option):
            # MongoDB omits false flags from index_information()
            if not idx_info.get(option) and not wanted.get(option):
                continue
            return True
    return False


def _resolve_conflict(collection, keys: list, name: str, **kwargs) -> bool:
    keys_dict = dict(keys)

    for idx_name, idx_info in collection.index_information().items():
        if idx_name == '_id_':
            continue

        same_name = idx_name == name
        same_keys = dict(idx_info.get('key', [])) == keys_dict
        if not (same_name or same_keys):
            continue
        if same_name and same_keys and not _options_differ(idx_info, kwargs):
            continue

        logger.warning("Dropping conflicting index", extra={
            "collection": collection.name, "index": idx_name,
        })
        collection.drop_index(idx_name)
        collection.create_index(keys, name=name, **kwargs)
        logger.info("Recreated index", extra={"collection": collection.name, "index": name})
        return True

    logger.error("Failed to resolve index conflict", extra={
        "collection": collection.name, "index": name,
    })
    return False


def ensure_all_indexes(db) -> bool:
    """Ensure indexes for all collections. Called at app startup."""
    from adapter.mongodb.recipe_repository import MongoRecipeRepository
    from adapter.mongodb.user_repository import MongoUserRepository

    results = [
        MongoUserRepository(db).ensure_indexes(),
        MongoRecipeRepository(db).ensure_indexes(),
    ]
    return all(results)
