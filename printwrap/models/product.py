# printwrap/models/product.py
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Named camera positions for single-product images, in display order.
ANGLES: tuple[str, ...] = ("front", "back", "left", "right", "material")

# Sentinel category value meaning "no category filter".
ALL_CATEGORIES = "all"


def angle_image_field(angle: str) -> str:
    """Stored key of the image URL for an angle, e.g. 'frontImage'."""
    return f"{angle}Image"


def angle_alt_field(angle: str) -> str:
    """Stored key of the alt text for an angle, e.g. 'frontAltText'."""
    return f"{angle}AltText"


def derive_angles(fields: Mapping[str, Any]) -> list[str]:
    """
    Angles for which an image is present, in ANGLES order.

    Works on any mapping keyed by the stored camelCase names
    (a raw document or a `model_dump(by_alias=True)`).
    """
    return [a for a in ANGLES if fields.get(angle_image_field(a))]


class PurchaseLimit(BaseModel):
    """
    Per-order purchase cap for a product.
    """

    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = False
    max_quantity_per_order: int = Field(default=5, ge=1, alias="maxQuantityPerOrder")
    message: str = ""


class VariationColor(BaseModel):
    name: str = ""
    hex_code: str = "#000000"
    swatch_image: str | None = None


class VariationImage(BaseModel):
    """
    One image of a variation, shot from a given angle.

    `angle` is usually one of ANGLES but any string is accepted.
    An image without a url is incomplete and is dropped on save.
    """

    id: str
    url: str | None = None
    alt_text: str | None = None
    angle: str = "front"
    is_primary: bool = False

    @property
    def is_complete(self) -> bool:
        return bool(self.url and self.url.strip())


class Variation(BaseModel):
    """
    Purchasable color variant of a product.

    Matches stored sub-document:
      - id, color, price, inStock, stockQuantity, images
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    color: VariationColor = Field(default_factory=VariationColor)
    price: float | None = Field(default=None, ge=0)
    in_stock: bool = Field(default=True, alias="inStock")
    stock_quantity: int = Field(default=0, ge=0, alias="stockQuantity")
    images: list[VariationImage] = Field(default_factory=list)


def clean_variation_images(images: list[VariationImage]) -> list[VariationImage]:
    """
    Drop incomplete images and keep at most one primary image.

    The first image flagged primary stays primary; later flags are cleared.
    """
    cleaned: list[VariationImage] = []
    seen_primary = False
    for image in images:
        if not image.is_complete:
            continue
        if image.is_primary:
            if seen_primary:
                image = image.model_copy(update={"is_primary": False})
            seen_primary = True
        cleaned.append(image)
    return cleaned


class StoredModel(BaseModel):
    """
    Base for sub-documents read back from the store.

    Stored products may predate the current write rules, so every field
    is optional and unbounded and unknown keys are ignored. Write payloads
    use the strict models above.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PurchaseLimitRecord(StoredModel):
    enabled: bool | None = None
    max_quantity_per_order: int | None = Field(default=None, alias="maxQuantityPerOrder")
    message: str | None = None


class VariationColorRecord(StoredModel):
    name: str | None = None
    hex_code: str | None = None
    swatch_image: str | None = None


class VariationImageRecord(StoredModel):
    id: str | None = None
    url: str | None = None
    alt_text: str | None = None
    angle: str | None = None
    is_primary: bool | None = None


class VariationRecord(StoredModel):
    id: str | None = None
    color: VariationColorRecord | None = None
    price: float | None = None
    in_stock: bool | None = Field(default=None, alias="inStock")
    stock_quantity: int | None = Field(default=None, alias="stockQuantity")
    images: list[VariationImageRecord] | None = None
