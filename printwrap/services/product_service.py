# printwrap/services/product_service.py
import logging
from datetime import datetime, timezone

from pymongo.collection import Collection

from printwrap.models.product import (
    ANGLES,
    Variation,
    angle_image_field,
    clean_variation_images,
    derive_angles,
)
from printwrap.repositories.product_query import ProductQuery
from printwrap.repositories.product_repo import ProductRepository, parse_object_id
from printwrap.schemas.pagination import PaginationParams
from printwrap.schemas.product import (
    PaginatedProducts,
    ProductCreate,
    ProductRead,
    ProductUpdate,
)

logger = logging.getLogger(__name__)

# Fields whose change can alter the derived `angles` list.
ANGLE_INPUT_FIELDS = {"hasVariations", *(angle_image_field(a) for a in ANGLES)}


def utc_now() -> datetime:
    """
    Current UTC time, naive and truncated to milliseconds.

    MongoDB stores datetimes as naive UTC with millisecond precision,
    so values produced here survive a write/read cycle unchanged.
    """
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class ProductService:
    """
    Business logic for the product catalog.

    Responsibilities:
      - timestamps on create/update
      - write-path cleaning of variations and angle images
      - normalizing stored documents into ProductRead
      - not-found reported as None/False, never raised
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Helpers -----

    @staticmethod
    def _clean_fields(fields: dict) -> dict:
        """
        Prepare caller-supplied fields (camelCase keys) for storage.

        - Variation images without a url are dropped.
        - At most one primary image per variation.
        """
        if fields.get("variations") is not None:
            cleaned = []
            for raw in fields["variations"]:
                variation = Variation.model_validate(raw)
                variation.images = clean_variation_images(variation.images)
                cleaned.append(variation.model_dump(by_alias=True))
            fields["variations"] = cleaned
        return fields

    # ----- Products -----

    def get_products_paginated(
        self,
        collection: Collection,
        params: PaginationParams,
    ) -> PaginatedProducts:
        return ProductQuery(collection).paginate(params)

    def get_all_products(self, collection: Collection) -> list[ProductRead]:
        """
        Every product, unfiltered and unpaginated (bulk/legacy callers).
        """
        return [ProductRead.from_document(doc) for doc in self.repo.list_all(collection)]

    def get_product(self, collection: Collection, product_id: str) -> ProductRead | None:
        oid = parse_object_id(product_id)
        if oid is None:
            return None
        doc = self.repo.get_by_id(collection, oid)
        if doc is None:
            return None
        return ProductRead.from_document(doc)

    def create_product(
        self,
        collection: Collection,
        payload: ProductCreate,
    ) -> ProductRead:
        """
        Persist a new product.

        Only fields present in the payload are stored; the returned
        ProductRead still carries every field (absent ones as None).
        """
        fields = self._clean_fields(payload.model_dump(by_alias=True, exclude_unset=True))
        if not fields.get("hasVariations"):
            fields["angles"] = derive_angles(fields)
        now = utc_now()
        fields["createdAt"] = now
        fields["updatedAt"] = now

        doc = self.repo.create(collection, fields)
        logger.info("Created product %s (%s)", doc["_id"], doc.get("name"))
        return ProductRead.from_document(doc)

    def update_product(
        self,
        collection: Collection,
        product_id: str,
        payload: ProductUpdate,
    ) -> ProductRead | None:
        """
        Merge the supplied fields into an existing product.
        """
        oid = parse_object_id(product_id)
        if oid is None:
            return None

        fields = self._clean_fields(payload.model_dump(by_alias=True, exclude_unset=True))

        if ANGLE_INPUT_FIELDS & fields.keys():
            current = self.repo.get_by_id(collection, oid)
            if current is None:
                return None
            merged = {**current, **fields}
            if not merged.get("hasVariations"):
                fields["angles"] = derive_angles(merged)

        fields["updatedAt"] = utc_now()

        doc = self.repo.update(collection, oid, fields)
        if doc is None:
            return None
        return ProductRead.from_document(doc)

    def delete_product(self, collection: Collection, product_id: str) -> bool:
        """
        Hard delete by id; True only if exactly one document was removed.
        """
        oid = parse_object_id(product_id)
        if oid is None:
            return False
        return self.repo.delete(collection, oid) == 1
