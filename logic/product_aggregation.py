"""Merge, deduplicate and rank product candidates from the search vendors."""

from __future__ import annotations

import contextvars
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from closet_app.logging_config import get_logger, log_event, operation_context
from models.product import ProductResult
from tools.product_search import BarcodeSearchSource, TextSearchSource

logger = get_logger(__name__)

MAX_RESULTS = 10
DEDUPE_PREFIX_LENGTH = 30


class InvalidSearchRequestError(ValueError):
    """Raised when neither a query nor a barcode was supplied."""


@dataclass(frozen=True)
class AggregationResult:
    products: List[ProductResult]
    diagnostics: Dict[str, object] = field(default_factory=dict)


def dedupe_key(product: ProductResult) -> str:
    """Identity of a candidate: first 30 name characters, lowercased, plus source tag."""

    return f"{product.name[:DEDUPE_PREFIX_LENGTH].lower()}-{product.source}"


def deduplicate_products(products: Iterable[ProductResult]) -> List[ProductResult]:
    """Drop later candidates whose key was already seen; first occurrence wins."""

    seen: set[str] = set()
    unique: List[ProductResult] = []
    for product in products:
        key = dedupe_key(product)
        if key in seen:
            continue
        seen.add(key)
        unique.append(product)
    return unique


def rank_products(products: Sequence[ProductResult]) -> List[ProductResult]:
    """Move priced candidates ahead of unpriced ones, keeping order within each group.

    ``sorted`` is stable, so a boolean key keeps the input order inside each bucket.
    """

    return sorted(products, key=lambda product: not product.has_price)


def _safe_text_search(source: TextSearchSource, query: str) -> List[ProductResult]:
    try:
        return list(source.search_text(query))
    except Exception as exc:  # noqa: BLE001 - a vendor failure only removes that vendor
        log_event(
            logger,
            logging.WARNING,
            "vendor_search_degraded",
            source=source.source_tag,
            error=str(exc),
        )
        return []


def _safe_barcode_search(source: BarcodeSearchSource, barcode: str) -> Optional[ProductResult]:
    try:
        return source.search_barcode(barcode)
    except Exception as exc:  # noqa: BLE001
        log_event(logger, logging.WARNING, "barcode_search_degraded", error=str(exc))
        return None


class ProductAggregator:
    """Fan a search out to the configured vendors and fan the results back in.

    ``text_sources`` are queried concurrently and their results are pooled in
    the order given here, after any barcode match.
    """

    def __init__(
        self,
        barcode_source: BarcodeSearchSource | None,
        text_sources: Sequence[TextSearchSource],
        limit: int = MAX_RESULTS,
    ) -> None:
        self.barcode_source = barcode_source
        self.text_sources = list(text_sources)
        self.limit = limit

    def _search_all_text(self, query: str) -> List[List[ProductResult]]:
        if not self.text_sources:
            return []
        with ThreadPoolExecutor(max_workers=len(self.text_sources)) as executor:
            # Each worker runs in a copy of the caller context so vendor logs keep the request correlation id.
            futures = [
                executor.submit(contextvars.copy_context().run, _safe_text_search, source, query)
                for source in self.text_sources
            ]
            # Joined in submission order so the pool keeps source order.
            return [future.result() for future in futures]

    def search(self, query: str | None = None, barcode: str | None = None) -> AggregationResult:
        query = (query or "").strip()
        barcode = (barcode or "").strip()
        if not query and not barcode:
            raise InvalidSearchRequestError("Query or barcode is required")

        with operation_context("logic:product_aggregation.search") as correlation_id:
            pool: List[ProductResult] = []
            per_source: Dict[str, int] = {}

            if barcode and self.barcode_source is not None:
                match = _safe_barcode_search(self.barcode_source, barcode)
                per_source["barcode"] = 1 if match else 0
                if match:
                    pool.append(match)

            if query:
                for source, results in zip(self.text_sources, self._search_all_text(query)):
                    per_source[source.source_tag] = len(results)
                    pool.extend(results)

            unique = deduplicate_products(pool)
            products = rank_products(unique)[: self.limit]
            diagnostics: Dict[str, object] = {
                "per_source": per_source,
                "pooled": len(pool),
                "unique": len(unique),
                "returned": len(products),
            }
            log_event(
                logger,
                logging.INFO,
                "product_search_completed",
                correlation_id=correlation_id,
                **diagnostics,
            )
            return AggregationResult(products=products, diagnostics=diagnostics)


__all__ = [
    "AggregationResult",
    "InvalidSearchRequestError",
    "MAX_RESULTS",
    "ProductAggregator",
    "dedupe_key",
    "deduplicate_products",
    "rank_products",
]
