"""SerpApi Google Shopping search client."""

from __future__ import annotations

import logging
import re
from typing import Any, List, Optional

import requests
from pydantic import BaseModel, ValidationError

from models.product import ProductResult
from tools.observability import instrument_call
from tools.product_search import TextSearchSource, match_brand

LOGGER = logging.getLogger(__name__)

SERPAPI_SEARCH_URL = "https://serpapi.com/search"
MAX_RESULTS = 5

SERPAPI_BRANDS = ["UNIQLO", "GU", "ZARA", "H&M", "GAP", "MUJI", "Nike", "Adidas", "Converse"]
_NUMBER_PATTERN = re.compile(r"\d+\.?\d*|\.\d+")


class _ShoppingResult(BaseModel):
    title: Optional[str] = None
    source: Optional[str] = None
    extracted_price: Any = None
    link: Optional[str] = None
    thumbnail: Optional[str] = None


class _ShoppingResponse(BaseModel):
    shopping_results: List[_ShoppingResult] = []


def parse_price(value: Any) -> Optional[float]:
    """Coerce a vendor price into a float, or ``None`` when it has no digits."""

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        # Only the first decimal point counts, so "1.2.3" reads as 1.2.
        match = _NUMBER_PATTERN.search(re.sub(r"[,¥$]", "", value))
        if match:
            return float(match.group(0))
    return None


class SerpApiClient(TextSearchSource):
    """Google Shopping via SerpApi, localised for Japan."""

    source_tag = "serpapi"

    def __init__(self, api_key: str | None = None, timeout_seconds: float = 10.0) -> None:
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    @instrument_call("serpapi_search_text")
    def search_text(self, query: str) -> List[ProductResult]:
        if not self.api_key:
            LOGGER.warning("SERPAPI_KEY not configured")
            return []

        params = {
            "api_key": self.api_key,
            "engine": "google_shopping",
            "q": query,
            "gl": "jp",
            "hl": "ja",
        }
        try:
            response = requests.get(SERPAPI_SEARCH_URL, params=params, timeout=self.timeout_seconds)
            response.raise_for_status()
            parsed = _ShoppingResponse.model_validate(response.json())
        except ValidationError as exc:
            LOGGER.error("SerpApi payload schema validation failed", exc_info=exc)
            return []
        except (requests.RequestException, ValueError) as exc:
            LOGGER.error("SerpApi text search failed", exc_info=exc)
            return []

        return [
            ProductResult(
                name=result.title or "Unknown product",
                brand=match_brand(result.source or result.title or "", SERPAPI_BRANDS),
                price=parse_price(result.extracted_price),
                url=result.link or "",
                image_url=result.thumbnail or None,
                source="serpapi",
            )
            for result in parsed.shopping_results[:MAX_RESULTS]
        ]


__all__ = ["SerpApiClient", "parse_price", "SERPAPI_SEARCH_URL"]
