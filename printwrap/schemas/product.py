# printwrap/schemas/product.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from printwrap.models.product import (
    PurchaseLimit,
    PurchaseLimitRecord,
    Variation,
    VariationRecord,
    derive_angles,
)
from printwrap.schemas.pagination import PaginationMeta


class CamelModel(BaseModel):
    """
    Base for product payloads: snake_case attributes, camelCase on the wire
    and in stored documents.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AngleImagesMixin(CamelModel):
    """
    Single-product angle images (URL + alt text per angle).
    """

    front_image: str | None = None
    back_image: str | None = None
    left_image: str | None = None
    right_image: str | None = None
    material_image: str | None = None
    front_alt_text: str | None = None
    back_alt_text: str | None = None
    left_alt_text: str | None = None
    right_alt_text: str | None = None
    material_alt_text: str | None = None


class ProductFields(AngleImagesMixin):
    """
    Every optional product field except identity and timestamps.
    """

    description: str | None = None
    image: str | None = None
    subcategory_ids: list[str] | None = None
    in_stock: bool | None = None
    has_variations: bool | None = None
    variations: list[Variation] | None = None
    eligible_for_coupons: bool | None = None
    type: str | None = None
    base_color: str | None = None
    stock_quantity: int | None = Field(default=None, ge=0)
    angles: list[str] | None = None
    colors: list[str] | None = None
    purchase_limit: PurchaseLimit | None = None


class ProductCreate(ProductFields):
    """
    Payload for creating a product.

    Only the fields the caller sends are persisted.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=255)
    price: float = Field(ge=0)
    category_id: str

    @field_validator("name", "category_id")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductUpdate(ProductFields):
    """
    Partial update payload for products.
    All fields are optional; name, price and categoryId may be left out
    but not sent as null.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    price: float | None = Field(default=None, ge=0)
    category_id: str | None = None

    @field_validator("name", "price", "category_id", mode="before")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("field cannot be null")
        return v

    @field_validator("name", "category_id")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductRead(ProductFields):
    """
    Product representation for clients.

    The field set is stable: fields missing from the stored document
    come back as null instead of being omitted.
    Nested parts use the lenient record models so documents written
    under older rules still read back.
    """

    id: str
    name: str | None = None
    price: float | None = None
    category_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    stock_quantity: int | None = None
    variations: list[VariationRecord] | None = None
    purchase_limit: PurchaseLimitRecord | None = None

    @classmethod
    def from_document(cls, doc: dict) -> "ProductRead":
        """
        Normalize a stored document: `_id` becomes the string `id`.
        """
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)

    @model_validator(mode="after")
    def recompute_angles(self) -> "ProductRead":
        # single products derive angles from their image fields
        if not self.has_variations:
            self.angles = derive_angles(self.model_dump(by_alias=True))
        return self


class PaginatedProducts(BaseModel):
    data: list[ProductRead]
    pagination: PaginationMeta


class DeleteResult(BaseModel):
    success: bool
