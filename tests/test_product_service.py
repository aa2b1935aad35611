"""
Tests for ProductService CRUD and normalization.
"""

import pytest
from bson import ObjectId

from printwrap.repositories.product_repo import ProductRepository
from printwrap.schemas.pagination import PaginationParams
from printwrap.schemas.product import ProductCreate, ProductRead, ProductUpdate
from printwrap.services.product_service import ProductService, utc_now


@pytest.fixture
def service():
    return ProductService(ProductRepository())


def mug_payload(**overrides) -> ProductCreate:
    data = {
        "name": "Mug",
        "price": 10,
        "categoryId": "c1",
        "hasVariations": False,
        "frontImage": "u1",
    }
    data.update(overrides)
    return ProductCreate.model_validate(data)


# Stored documents written before the current validation rules.
OLDER_DOCUMENTS = [
    pytest.param(
        {"hasVariations": True, "variations": [{"color": {"name": "Red"}, "price": 5, "images": [{"url": "u1"}]}]},
        id="variation-without-ids",
    ),
    pytest.param(
        {"hasVariations": True, "stockQuantity": -2, "variations": [{"id": "v1", "stockQuantity": None, "inStock": None}]},
        id="null-and-negative-stock",
    ),
    pytest.param(
        {"purchaseLimit": {"enabled": True, "maxQuantityPerOrder": 0}},
        id="zero-purchase-limit",
    ),
    pytest.param(
        {"hasVariations": True, "variations": [{"id": "v1", "color": None, "images": None, "sku": "OLD-1"}]},
        id="null-color-and-images",
    ),
]


def variation(**overrides) -> dict:
    data = {
        "id": "var_1",
        "color": {"name": "Red", "hex_code": "#ff0000"},
        "price": 12,
        "inStock": True,
        "stockQuantity": 4,
        "images": [],
    }
    data.update(overrides)
    return data


class TestCreate:

    def test_mug_scenario(self, service, collection):
        created = service.create_product(collection, mug_payload())

        stored = collection.find_one({"_id": ObjectId(created.id)})
        assert stored["angles"] == ["front"]
        assert "backImage" not in stored

        fetched = service.get_product(collection, created.id)
        assert fetched.front_image == "u1"
        assert fetched.back_image is None
        assert fetched.angles == ["front"]

    def test_round_trip_is_identical(self, service, collection):
        created = service.create_product(
            collection,
            mug_payload(purchaseLimit={"enabled": True, "maxQuantityPerOrder": 2, "message": "Max 2"}),
        )
        fetched = service.get_product(collection, created.id)
        assert fetched == created
        assert fetched.purchase_limit.max_quantity_per_order == 2

    def test_absent_fields_are_present_as_none(self, service, collection):
        created = service.create_product(collection, mug_payload())
        body = created.model_dump(by_alias=True)
        for key in ("purchaseLimit", "variations", "materialImage", "rightAltText", "baseColor"):
            assert key in body
            assert body[key] is None

    def test_timestamps(self, service, collection):
        before = utc_now()
        created = service.create_product(collection, mug_payload())
        assert created.created_at == created.updated_at
        assert created.created_at >= before
        assert created.created_at.microsecond % 1000 == 0

    def test_strips_images_without_url(self, service, collection):
        images = [
            {"id": "a", "url": "https://cdn/front.png", "angle": "front", "is_primary": True},
            {"id": "b", "url": "", "angle": "back", "is_primary": False},
            {"id": "c", "url": None, "angle": "left", "is_primary": False},
        ]
        created = service.create_product(
            collection,
            mug_payload(hasVariations=True, variations=[variation(images=images)]),
        )
        assert [img.id for img in created.variations[0].images] == ["a"]

    def test_keeps_a_single_primary_per_variation(self, service, collection):
        images = [
            {"id": "a", "url": "u-a", "angle": "front", "is_primary": False},
            {"id": "b", "url": "u-b", "angle": "back", "is_primary": True},
            {"id": "c", "url": "u-c", "angle": "left", "is_primary": True},
        ]
        other = [{"id": "d", "url": "u-d", "angle": "front", "is_primary": True}]
        created = service.create_product(
            collection,
            mug_payload(
                hasVariations=True,
                variations=[variation(images=images), variation(id="var_2", images=other)],
            ),
        )
        first, second = created.variations
        assert [img.is_primary for img in first.images] == [False, True, False]
        assert second.images[0].is_primary is True

    def test_variations_stored_with_mixed_key_styles(self, service, collection):
        created = service.create_product(
            collection, mug_payload(hasVariations=True, variations=[variation()])
        )
        stored = collection.find_one({"_id": ObjectId(created.id)})
        assert stored["variations"][0]["inStock"] is True
        assert stored["variations"][0]["stockQuantity"] == 4
        assert stored["variations"][0]["color"]["hex_code"] == "#ff0000"


class TestRead:

    def test_get_unknown_and_malformed(self, service, collection):
        assert service.get_product(collection, str(ObjectId())) is None
        assert service.get_product(collection, "not-an-id") is None

    def test_legacy_document_normalizes(self, service, collection):
        oid = collection.insert_one({"name": "Old", "price": 3, "categoryId": "c9"}).inserted_id
        product = service.get_product(collection, str(oid))
        assert product.id == str(oid)
        assert product.purchase_limit is None
        assert product.created_at is None
        assert product.angles == []

    def test_get_all(self, service, collection, seed):
        seed(12)
        products = service.get_all_products(collection)
        assert len(products) == 12
        assert all(isinstance(p, ProductRead) for p in products)

    def test_paginated_delegates(self, service, collection, seed):
        seed(25)
        result = service.get_products_paginated(collection, PaginationParams(page=3, limit=10))
        assert len(result.data) == 5
        assert result.pagination.has_next is False


class TestUpdate:

    def test_merges_fields(self, service, collection):
        created = service.create_product(collection, mug_payload(description="white"))
        updated = service.update_product(collection, created.id, ProductUpdate(price=15))

        assert updated.price == 15
        assert updated.description == "white"
        assert updated.created_at == created.created_at
        assert updated.updated_at >= created.updated_at

    def test_angle_change_updates_angles(self, service, collection):
        created = service.create_product(collection, mug_payload())
        updated = service.update_product(
            collection, created.id, ProductUpdate(back_image="u2", has_variations=False)
        )
        assert updated.angles == ["front", "back"]
        stored = collection.find_one({"_id": ObjectId(created.id)})
        assert stored["angles"] == ["front", "back"]

    def test_unknown_id(self, service, collection):
        assert service.update_product(collection, str(ObjectId()), ProductUpdate(price=1)) is None
        assert service.update_product(collection, "zzz", ProductUpdate(price=1)) is None


class TestDelete:

    def test_delete(self, service, collection):
        created = service.create_product(collection, mug_payload())
        assert service.delete_product(collection, created.id) is True
        assert service.get_product(collection, created.id) is None

    def test_delete_nonexistent_is_false(self, service, collection):
        assert service.delete_product(collection, str(ObjectId())) is False
        assert service.delete_product(collection, "bogus") is False


class TestOlderDocuments:

    def seed_older(self, collection, fields: dict):
        doc = {"name": "Legacy", "price": 4, "categoryId": "c1", **fields}
        return collection.insert_one(doc).inserted_id

    @pytest.mark.parametrize("fields", OLDER_DOCUMENTS)
    def test_read_back_by_id(self, service, collection, fields):
        oid = self.seed_older(collection, fields)
        product = service.get_product(collection, str(oid))
        assert product.id == str(oid)
        assert product.name == "Legacy"

    @pytest.mark.parametrize("fields", OLDER_DOCUMENTS)
    def test_listed_with_current_products(self, service, collection, seed, fields):
        seed(2)
        self.seed_older(collection, fields)

        assert len(service.get_all_products(collection)) == 3
        page = service.get_products_paginated(collection, PaginationParams(page=1, limit=10))
        assert page.pagination.total == 3
        assert "Legacy" in [p.name for p in page.data]

    def test_nested_values_pass_through(self, service, collection):
        oid = self.seed_older(
            collection,
            {
                "hasVariations": True,
                "purchaseLimit": {"enabled": True, "maxQuantityPerOrder": 0},
                "variations": [{"stockQuantity": None, "images": [{"url": "u1"}]}],
            },
        )
        product = service.get_product(collection, str(oid))
        body = product.model_dump(by_alias=True)

        assert body["purchaseLimit"]["maxQuantityPerOrder"] == 0
        variation = body["variations"][0]
        assert variation["id"] is None
        assert variation["stockQuantity"] is None
        assert variation["images"][0] == {
            "id": None, "url": "u1", "alt_text": None, "angle": None, "is_primary": None,
        }

    def test_unknown_nested_keys_are_dropped(self, service, collection):
        oid = self.seed_older(collection, {"variations": [{"id": "v1", "sku": "OLD-1"}]})
        variation = service.get_product(collection, str(oid)).model_dump(by_alias=True)["variations"][0]
        assert "sku" not in variation
