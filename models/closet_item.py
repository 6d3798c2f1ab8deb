"""Closet item data model and helpers."""

from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from models.product import ProductResult
from models.taxonomy import DEFAULT_SEASON, validate_category

_ID_ALPHABET = string.digits + string.ascii_lowercase


class ClosetItemValidationError(ValueError):
    """Raised when a closet item cannot be created from the given fields."""


def utc_timestamp() -> str:
    """ISO-8601 timestamp with millisecond precision and a ``Z`` suffix."""

    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_item_id() -> str:
    """Opaque id made of the epoch milliseconds and six random base36 chars."""

    suffix = "".join(random.choices(_ID_ALPHABET, k=6))
    return f"{int(time.time() * 1000)}-{suffix}"


@dataclass(frozen=True)
class ProductSnapshot:
    """Copy of the product the user linked to an item at registration time."""

    name: str
    brand: Optional[str] = None
    price: Optional[float] = None
    purchase_url: str = ""
    jan_code: Optional[str] = None
    source: Optional[str] = None

    @classmethod
    def from_product(cls, product: ProductResult) -> "ProductSnapshot":
        return cls(
            name=product.name,
            brand=product.brand,
            price=product.price,
            purchase_url=product.url,
            jan_code=product.jan_code or None,
            source=product.source,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "brand": self.brand,
            "price": self.price,
            "purchaseUrl": self.purchase_url,
            "janCode": self.jan_code,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ProductSnapshot":
        return cls(
            name=str(payload.get("name") or ""),
            brand=payload.get("brand"),
            price=payload.get("price"),
            purchase_url=str(payload.get("purchaseUrl") or ""),
            jan_code=payload.get("janCode"),
            source=payload.get("source"),
        )


@dataclass(frozen=True)
class ClosetItem:
    """Represents one registered piece of clothing.

    Items are immutable once added to the catalog. The category is checked on
    construction; every other field is free-form.
    """

    id: str
    name: str
    category: str
    color: str = ""
    season: str = DEFAULT_SEASON
    barcode: str = ""
    notes: str = ""
    image_uri: str = ""
    created_at: str = field(default_factory=utc_timestamp)
    product: Optional[ProductSnapshot] = None

    def __post_init__(self) -> None:
        try:
            validate_category(self.category)
        except ValueError as exc:
            raise ClosetItemValidationError(str(exc)) from exc

    def to_dict(self) -> Dict[str, Any]:
        """Serialise using the camelCase keys of the persisted catalog."""

        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "color": self.color,
            "season": self.season,
            "barcode": self.barcode,
            "notes": self.notes,
            "imageUri": self.image_uri,
            "createdAt": self.created_at,
            "product": self.product.to_dict() if self.product else None,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ClosetItem":
        product = payload.get("product")
        return cls(
            id=str(payload["id"]),
            name=str(payload.get("name") or ""),
            category=str(payload.get("category") or ""),
            color=str(payload.get("color") or ""),
            season=str(payload.get("season") or DEFAULT_SEASON),
            barcode=str(payload.get("barcode") or ""),
            notes=str(payload.get("notes") or ""),
            image_uri=str(payload.get("imageUri") or ""),
            created_at=str(payload.get("createdAt") or utc_timestamp()),
            product=ProductSnapshot.from_dict(product) if isinstance(product, dict) else None,
        )


@dataclass
class ItemDraft:
    """Mutable form state collected before an item is added."""

    name: str = ""
    category: str = ""
    color: str = ""
    season: str = DEFAULT_SEASON
    barcode: str = ""
    notes: str = ""
    image_uri: str = ""
    selected_product: Optional[ProductResult] = None


def build_closet_item(draft: ItemDraft) -> ClosetItem:
    """Factory to build a :class:`ClosetItem` from a completed draft."""

    if not draft.category:
        raise ClosetItemValidationError("Please select a category.")

    name = draft.name.strip() or f"{draft.color or 'Item'} {draft.category}".strip()
    product = ProductSnapshot.from_product(draft.selected_product) if draft.selected_product else None
    return ClosetItem(
        id=new_item_id(),
        name=name,
        category=draft.category,
        color=draft.color,
        season=draft.season,
        barcode=draft.barcode.strip(),
        notes=draft.notes.strip(),
        image_uri=draft.image_uri,
        product=product,
    )


__all__ = [
    "ClosetItem",
    "ClosetItemValidationError",
    "ItemDraft",
    "ProductSnapshot",
    "build_closet_item",
    "new_item_id",
    "utc_timestamp",
]
