"""Product search source abstractions shared by the vendor clients."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence

from models.product import ProductResult


class VendorSearchError(RuntimeError):
    """Raised when a vendor search cannot produce results."""


class TextSearchSource(ABC):
    """A vendor that answers free-text product searches."""

    source_tag: str = ""

    @abstractmethod
    def search_text(self, query: str) -> List[ProductResult]:
        """Return the vendor's capped result list for ``query``."""


class BarcodeSearchSource(ABC):
    """A vendor that can resolve a JAN/EAN barcode to a single product."""

    @abstractmethod
    def search_barcode(self, barcode: str) -> Optional[ProductResult]:
        """Return the matching product or ``None``."""


class StaticProductSearch(TextSearchSource, BarcodeSearchSource):
    """Offline deterministic source for tests and local runs."""

    def __init__(
        self,
        source_tag: str,
        products: Iterable[ProductResult] = (),
        barcode_products: dict[str, ProductResult] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.source_tag = source_tag
        self.products = list(products)
        self.barcode_products = barcode_products or {}
        self.error = error
        self.queries: List[str] = []

    def search_text(self, query: str) -> List[ProductResult]:
        self.queries.append(query)
        if self.error:
            raise self.error
        return list(self.products)

    def search_barcode(self, barcode: str) -> Optional[ProductResult]:
        self.queries.append(barcode)
        if self.error:
            raise self.error
        return self.barcode_products.get(barcode)


def match_brand(text: str, brands: Sequence[str]) -> Optional[str]:
    """Return the first known brand contained in ``text`` (case-insensitive)."""

    upper_text = text.upper()
    for brand in brands:
        if brand.upper() in upper_text:
            return brand
    return None


__all__ = [
    "BarcodeSearchSource",
    "StaticProductSearch",
    "TextSearchSource",
    "VendorSearchError",
    "match_brand",
]
