"""Rakuten Ichiba item search client (keyword and JAN barcode lookups)."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

import requests
from pydantic import BaseModel, ValidationError

from models.product import ProductResult
from tools.observability import instrument_call
from tools.product_search import BarcodeSearchSource, TextSearchSource, match_brand

LOGGER = logging.getLogger(__name__)

RAKUTEN_SEARCH_URL = "https://app.rakuten.co.jp/services/api/IchibaItem/Search/20220601"
FASHION_GENRE_ID = "100371"
KEYWORD_HITS = 10

RAKUTEN_BRANDS = [
    "UNIQLO",
    "GU",
    "ZARA",
    "H&M",
    "GAP",
    "MUJI",
    "無印良品",
    "Nike",
    "Adidas",
    "Converse",
    "New Balance",
    "VANS",
    "BEAMS",
    "UNITED ARROWS",
    "SHIPS",
    "JOURNAL STANDARD",
    "nano・universe",
    "URBAN RESEARCH",
    "GLOBAL WORK",
]
_BRACKET_PATTERN = re.compile(r"【(.+?)】")


class _ImageUrl(BaseModel):
    imageUrl: Optional[str] = None


class _Item(BaseModel):
    itemName: Optional[str] = None
    itemPrice: Optional[float] = None
    itemUrl: Optional[str] = None
    itemCode: Optional[str] = None
    shopName: Optional[str] = None
    mediumImageUrls: List[_ImageUrl] = []


class _ItemWrapper(BaseModel):
    Item: _Item


class _SearchResponse(BaseModel):
    Items: List[_ItemWrapper] = []


def extract_brand_from_name(name: str) -> Optional[str]:
    """Guess a brand from a listing title, falling back to the first 【...】 segment."""

    brand = match_brand(name, RAKUTEN_BRANDS)
    if brand:
        return brand
    bracket = _BRACKET_PATTERN.search(name)
    if bracket:
        return bracket.group(1)
    return None


def _to_product(item: _Item, jan_code: Optional[str]) -> ProductResult:
    name = item.itemName or ""
    image_url = item.mediumImageUrls[0].imageUrl if item.mediumImageUrls else None
    return ProductResult(
        name=name or "Unknown product",
        brand=extract_brand_from_name(name) or item.shopName or None,
        price=item.itemPrice or 0,
        url=item.itemUrl or "",
        image_url=image_url or None,
        source="rakuten",
        jan_code=jan_code,
    )


class RakutenClient(TextSearchSource, BarcodeSearchSource):
    """Rakuten Ichiba client with schema validation and graceful fallbacks.

    Every failure path (missing application id, network error, non-2xx,
    malformed payload) degrades to an empty result and is logged.
    """

    source_tag = "rakuten"

    def __init__(self, app_id: str | None = None, timeout_seconds: float = 10.0) -> None:
        self.app_id = app_id
        self.timeout_seconds = timeout_seconds

    def _fetch(self, params: dict) -> Optional[_SearchResponse]:
        try:
            response = requests.get(
                RAKUTEN_SEARCH_URL,
                params={"applicationId": self.app_id, **params},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            return _SearchResponse.model_validate(response.json())
        except ValidationError as exc:
            LOGGER.error("Rakuten payload schema validation failed", exc_info=exc)
        except (requests.RequestException, ValueError) as exc:
            LOGGER.error("Rakuten API unreachable", exc_info=exc)
        return None

    @instrument_call("rakuten_search_text")
    def search_text(self, query: str) -> List[ProductResult]:
        if not self.app_id:
            LOGGER.warning("RAKUTEN_APP_ID not configured")
            return []

        parsed = self._fetch(
            {
                "keyword": query,
                "hits": str(KEYWORD_HITS),
                "genreId": FASHION_GENRE_ID,
                "sort": "-reviewCount",
            }
        )
        if parsed is None:
            return []
        return [_to_product(wrapper.Item, wrapper.Item.itemCode or None) for wrapper in parsed.Items]

    @instrument_call("rakuten_search_barcode")
    def search_barcode(self, barcode: str) -> Optional[ProductResult]:
        if not self.app_id:
            LOGGER.warning("RAKUTEN_APP_ID not configured")
            return None

        parsed = self._fetch({"keyword": barcode, "hits": "1"})
        if parsed is None or not parsed.Items:
            return None
        return _to_product(parsed.Items[0].Item, barcode)


__all__ = ["RakutenClient", "extract_brand_from_name", "RAKUTEN_SEARCH_URL"]
