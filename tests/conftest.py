"""
Shared fixtures for the catalog test suite.

Store-backed tests run against mongomock collections. mongomock has no
text index support, so `TextIndexedCollection` stands in for a
collection with the weighted search index: it reports the index and
answers `$text` filters with the equivalent substring match.
"""

import re
from datetime import datetime, timedelta

import mongomock
import pytest
from fastapi.testclient import TestClient

from printwrap.database import TEXT_INDEX_NAME, get_products_collection
from printwrap.main import app
from printwrap.routers.health import get_database_factory


@pytest.fixture
def mongo_db():
    return mongomock.MongoClient()["printwrap-test"]


@pytest.fixture
def collection(mongo_db):
    return mongo_db["products"]


def make_product_doc(index: int, **overrides) -> dict:
    """Stored product document; higher index = created later."""
    base = datetime(2024, 1, 1)
    doc = {
        "name": f"Product {index:02d}",
        "description": f"Description for product {index}",
        "price": 10.0 + index,
        "categoryId": "c1",
        "hasVariations": False,
        "createdAt": base + timedelta(minutes=index),
        "updatedAt": base + timedelta(minutes=index),
    }
    doc.update(overrides)
    return doc


@pytest.fixture
def seed(collection):
    def _seed(count: int, **overrides) -> list:
        docs = [make_product_doc(i, **overrides) for i in range(1, count + 1)]
        collection.insert_many(docs)
        return docs

    return _seed


def _text_to_regex(match: dict) -> dict:
    match = dict(match)
    text = match.pop("$text", None)
    if text is not None:
        pattern = re.escape(text["$search"])
        match["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]
    return match


class TextIndexedCollection:
    """
    Wraps a mongomock collection as if the text index existed.

    Records every `$match` it receives so tests can assert which
    search path was taken.
    """

    def __init__(self, inner):
        self.inner = inner
        self.matches: list = []

    def index_information(self):
        info = dict(self.inner.index_information())
        info[TEXT_INDEX_NAME] = {"key": [("_fts", "text"), ("_ftsx", 1)]}
        return info

    def count_documents(self, match):
        self.matches.append(match)
        return self.inner.count_documents(_text_to_regex(match))

    def aggregate(self, pipeline):
        self.matches.append(pipeline[0]["$match"])
        stages = [
            {"$match": _text_to_regex(stage["$match"])} if "$match" in stage else stage
            for stage in pipeline
        ]
        return self.inner.aggregate(stages)

    def __getattr__(self, name):
        return getattr(self.inner, name)


@pytest.fixture
def text_collection(collection):
    return TextIndexedCollection(collection)


@pytest.fixture
def api_client(collection, mongo_db):
    """
    TestClient with the store dependencies pointed at mongomock.

    Used without a `with` block so the lifespan (index setup against a
    real server) does not run.
    """
    app.dependency_overrides[get_products_collection] = lambda: collection
    app.dependency_overrides[get_database_factory] = lambda: (lambda: mongo_db)
    yield TestClient(app)
    app.dependency_overrides.clear()
