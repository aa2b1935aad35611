# printwrap/database.py
import logging
import threading

from pymongo import ASCENDING, DESCENDING, TEXT, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import OperationFailure

from printwrap.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# ---------------------------------------------------------
# MongoDB connection
#
# One MongoClient per process. pymongo pools connections
# internally, so the client is created once and reused by
# every request. The lock guards the first creation so that
# concurrent requests during warm-up share a single client.
# ---------------------------------------------------------

_client: MongoClient | None = None
_client_lock = threading.Lock()

TEXT_INDEX_NAME = "product_search_index"

# name -> (keys, extra create_index options)
PRODUCT_INDEXES: dict[str, tuple[list[tuple[str, object]], dict]] = {
    TEXT_INDEX_NAME: (
        [("name", TEXT), ("description", TEXT)],
        {"weights": {"name": 10, "description": 5}},
    ),
    "category_index": ([("categoryId", ASCENDING)], {}),
    "created_at_index": ([("createdAt", DESCENDING)], {}),
    "category_created_at_index": (
        [("categoryId", ASCENDING), ("createdAt", DESCENDING)],
        {},
    ),
}


def get_client() -> MongoClient:
    """
    Return the process-wide MongoClient, creating it on first use.
    """
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                logger.info("🔌 Connecting to MongoDB at %s", settings.masked_mongodb_uri)
                _client = MongoClient(settings.MONGODB_URI)
    return _client


def close_client() -> None:
    global _client
    with _client_lock:
        if _client is not None:
            _client.close()
            _client = None


def get_database() -> Database:
    return get_client()[settings.MONGODB_DB]


def get_products_collection() -> Collection:
    """
    FastAPI dependency that returns the products collection.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(collection: Collection = Depends(get_products_collection)):
            ...
    """
    return get_database()[settings.PRODUCTS_COLLECTION]


def ensure_indexes(collection: Collection) -> list[str]:
    """
    Create the product indexes, one at a time.

    An index that already exists (or conflicts with an existing one)
    makes create_index raise OperationFailure; that is logged and
    skipped so the routine can run unconditionally at startup.

    Returns:
        Names of the indexes this call created or confirmed.
    """
    created: list[str] = []
    for name, (keys, options) in PRODUCT_INDEXES.items():
        try:
            collection.create_index(keys, name=name, **options)
            created.append(name)
        except OperationFailure as e:
            logger.info("ℹ️ Index %s already exists (%s)", name, e.code)
    logger.info("✅ Product indexes ready: %s", ", ".join(created) or "none created")
    return created
