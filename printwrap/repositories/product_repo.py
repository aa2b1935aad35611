# printwrap/repositories/product_repo.py
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.collection import Collection


def parse_object_id(raw: str) -> ObjectId | None:
    """
    Parse an external id; None when it is not a valid ObjectId.
    """
    try:
        return ObjectId(raw)
    except (InvalidId, TypeError):
        return None


class ProductRepository:
    """
    Data access layer for product documents.

    - Pure store operations (CRUD), raw documents in and out.
    - No FastAPI, no business logic.
    """

    def get_by_id(self, collection: Collection, product_id: ObjectId) -> dict | None:
        return collection.find_one({"_id": product_id})

    def list_all(self, collection: Collection) -> list[dict]:
        return list(collection.find({}))

    def count(self, collection: Collection) -> int:
        return collection.count_documents({})

    def create(self, collection: Collection, document: dict) -> dict:
        """
        Insert a document; returns it with the store-assigned `_id`.
        """
        document = dict(document)
        result = collection.insert_one(document)
        document["_id"] = result.inserted_id
        return document

    def update(
        self,
        collection: Collection,
        product_id: ObjectId,
        fields: dict,
    ) -> dict | None:
        """
        `$set` the given fields; returns the document after the update,
        or None if nothing matched.
        """
        return collection.find_one_and_update(
            {"_id": product_id},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )

    def delete(self, collection: Collection, product_id: ObjectId) -> int:
        result = collection.delete_one({"_id": product_id})
        return result.deleted_count
