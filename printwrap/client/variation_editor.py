# printwrap/client/variation_editor.py
"""
Local editing of a product's variations before submission.

Every mutation works on a deep copy of the variations list and then
swaps it in as a whole, so a snapshot handed out earlier (to a renderer
or a listener) never changes underneath its holder.
"""

import copy
import itertools
import time
from collections.abc import Callable
from typing import Any

from printwrap.models.product import (
    ANGLES,
    Variation,
    VariationColor,
    VariationImage,
    angle_alt_field,
    angle_image_field,
    derive_angles,
)

VariationsListener = Callable[[list[Variation]], None]

# Keys the server owns; never part of a submission.
SERVER_FIELDS = ("id", "createdAt", "updatedAt")

_id_counter = itertools.count(1)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{time.time_ns()}_{next(_id_counter)}"


def _drop_nulls(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def _load_variation(raw: dict[str, Any]) -> Variation:
    """
    Editable Variation from API data.

    Older records may carry nulls or lack ids; nulls take the model
    defaults and missing ids are generated.
    """
    data = _drop_nulls(raw)
    data["id"] = data.get("id") or _new_id("var")
    if isinstance(data.get("color"), dict):
        data["color"] = _drop_nulls(data["color"])
    data["images"] = [
        {**_drop_nulls(image), "id": image.get("id") or _new_id("img")}
        for image in data.get("images", [])
    ]
    return Variation.model_validate(data)


class VariationEditor:
    """
    Editable variation/image tree plus the single-product angle images.

    Widgets that edit a variation (e.g. a color picker) are handed this
    editor and call its methods; changes are published to subscribers.
    """

    def __init__(
        self,
        product: dict[str, Any] | None = None,
    ):
        """
        Args:
            product: Initial form values, camelCase keys as returned by the
                API (`model_dump(by_alias=True)` of a ProductRead works).
        """
        product = dict(product or {})
        self.fields: dict[str, Any] = product
        self.has_variations: bool = bool(product.get("hasVariations"))
        self._variations: list[Variation] = [
            _load_variation(v) for v in product.get("variations") or []
        ]
        self._listeners: list[VariationsListener] = []

    # ----- snapshots / subscriptions -----

    @property
    def variations(self) -> list[Variation]:
        return self._variations

    @property
    def angles(self) -> list[str]:
        """Angles with an image, derived from the current fields."""
        return derive_angles(self.fields)

    def subscribe(self, listener: VariationsListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _copy(self) -> list[Variation]:
        return copy.deepcopy(self._variations)

    def _commit(self, variations: list[Variation]) -> None:
        self._variations = variations
        for listener in list(self._listeners):
            listener(variations)

    @staticmethod
    def _check_index(items: list, index: int, what: str) -> None:
        if not 0 <= index < len(items):
            raise IndexError(f"{what} index {index} out of range")

    # ----- variations -----

    def add_variation(self, base_price: float | None = None) -> Variation:
        variation = Variation(
            id=_new_id("var"),
            color=VariationColor(),
            price=base_price if base_price is not None else self.fields.get("price", 0),
            in_stock=True,
            stock_quantity=0,
        )
        variations = self._copy()
        variations.append(variation)
        self._commit(variations)
        return variation

    def remove_variation(self, variation_id: str) -> None:
        self._commit([v for v in self._copy() if v.id != variation_id])

    def update_variation(self, index: int, **changes: Any) -> Variation:
        """
        Replace fields of one variation, e.g. update_variation(0, price=12).
        """
        variations = self._copy()
        self._check_index(variations, index, "variation")
        variations[index] = variations[index].model_copy(update=changes)
        self._commit(variations)
        return variations[index]

    def set_color(self, index: int, hex_code: str, name: str | None = None) -> Variation:
        """
        Apply a picked color to a variation, keeping its swatch image.
        """
        current = self._variations[index].color if 0 <= index < len(self._variations) else None
        color = VariationColor(
            name=name if name is not None else (current.name if current else ""),
            hex_code=hex_code,
            swatch_image=current.swatch_image if current else None,
        )
        return self.update_variation(index, color=color)

    # ----- images -----

    def add_image(self, variation_index: int, angle: str) -> VariationImage:
        """
        Append an empty image slot; the first image of a variation is primary.
        """
        variations = self._copy()
        self._check_index(variations, variation_index, "variation")
        target = variations[variation_index]
        image = VariationImage(
            id=_new_id("img"),
            url="",
            alt_text="",
            angle=angle,
            is_primary=len(target.images) == 0,
        )
        target.images.append(image)
        self._commit(variations)
        return image

    def update_image(self, variation_index: int, image_index: int, **changes: Any) -> VariationImage:
        variations = self._copy()
        self._check_index(variations, variation_index, "variation")
        images = variations[variation_index].images
        self._check_index(images, image_index, "image")
        images[image_index] = images[image_index].model_copy(update=changes)
        if changes.get("is_primary"):
            for i, image in enumerate(images):
                if i != image_index and image.is_primary:
                    images[i] = image.model_copy(update={"is_primary": False})
        self._commit(variations)
        return images[image_index]

    def remove_image(self, variation_index: int, image_id: str) -> None:
        variations = self._copy()
        self._check_index(variations, variation_index, "variation")
        variation = variations[variation_index]
        variation.images = [img for img in variation.images if img.id != image_id]
        self._commit(variations)

    def set_primary(self, variation_index: int, image_index: int) -> None:
        """
        Make one image primary; clears the flag on the variation's other
        images only.
        """
        variations = self._copy()
        self._check_index(variations, variation_index, "variation")
        variation = variations[variation_index]
        self._check_index(variation.images, image_index, "image")
        variation.images = [
            img.model_copy(update={"is_primary": i == image_index})
            for i, img in enumerate(variation.images)
        ]
        self._commit(variations)

    # ----- single-product angle images -----

    def set_angle_image(self, angle: str, url: str, alt_text: str | None = None) -> None:
        if angle not in ANGLES:
            raise ValueError(f"unknown angle: {angle}")
        self.fields[angle_image_field(angle)] = url
        if alt_text is not None:
            self.fields[angle_alt_field(angle)] = alt_text

    def clear_angle_image(self, angle: str) -> None:
        self.set_angle_image(angle, "", "")

    # ----- submission -----

    def to_payload(self) -> dict[str, Any]:
        """
        Build the body sent to the API.

        - Images without a url are dropped from every variation.
        - Single products get `angles` from their non-empty angle images.
        """
        payload = {k: v for k, v in self.fields.items() if k not in SERVER_FIELDS}
        payload["hasVariations"] = self.has_variations
        payload["variations"] = [
            {
                **variation.model_dump(by_alias=True),
                "images": [
                    image.model_dump()
                    for image in variation.images
                    if image.is_complete
                ],
            }
            for variation in self._variations
        ]
        if not self.has_variations:
            payload["angles"] = derive_angles(payload)
        return payload
