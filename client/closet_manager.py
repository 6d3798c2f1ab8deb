"""Client-side closet workflow: register items, link products, generate outfits."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from client.api_client import ClosetApiClient
from closet_app.config import ClosetConfig
from closet_app.logging_config import get_logger, log_event, operation_context
from logic.outfit_generator import generate_outfit, group_by_category
from memory.closet_store import ClosetCatalog, build_storage
from models.analysis import AnalysisResult
from models.closet_item import ClosetItem, ItemDraft, build_closet_item
from models.outfit import Outfit
from models.product import ProductResult
from models.taxonomy import CATEGORIES, COLORS, SEASONS, known_value

logger = get_logger(__name__)


def apply_analysis(draft: ItemDraft, analysis: AnalysisResult, include_brand_note: bool = True) -> ItemDraft:
    """Copy recognised classifier values into the draft.

    Category, color and season are only taken when they belong to the known
    vocabulary; anything else leaves the draft field untouched.
    """

    updated = replace(draft)
    category = known_value(analysis.category, CATEGORIES)
    if category:
        updated.category = category
    color = known_value(analysis.color, COLORS)
    if color:
        updated.color = color
    season = known_value(analysis.season, SEASONS)
    if season:
        updated.season = season
    if analysis.description:
        updated.name = analysis.description
    if include_brand_note and analysis.brand_guess:
        updated.notes = f"Brand: {analysis.brand_guess}"
    return updated


def build_search_query(analysis: AnalysisResult) -> str:
    return f"{analysis.brand_guess or ''} {analysis.description or analysis.category}".strip()


@dataclass
class RegistrationCandidate:
    """Draft pre-filled from a photo plus products the user may link to it."""

    draft: ItemDraft
    analysis: AnalysisResult
    products: List[ProductResult] = field(default_factory=list)


class ClosetManager:
    """Owns the local catalog and the latest generated outfit."""

    def __init__(
        self,
        catalog: ClosetCatalog,
        api_client: ClosetApiClient | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.catalog = catalog
        self.api_client = api_client
        self.rng = rng
        self.latest_outfit: Optional[Outfit] = None

    @classmethod
    def from_config(cls, config: ClosetConfig | None = None) -> "ClosetManager":
        config = config or ClosetConfig.from_env()
        storage = build_storage(config.catalog_store_backend, config.catalog_store_path)
        manager = cls(
            catalog=ClosetCatalog(storage),
            api_client=ClosetApiClient(config.api_base_url),
        )
        manager.load()
        return manager

    def load(self) -> List[ClosetItem]:
        return self.catalog.load()

    @property
    def items(self) -> List[ClosetItem]:
        return self.catalog.items

    def items_by_category(self) -> Dict[str, List[ClosetItem]]:
        return group_by_category(self.catalog.items)

    def _require_api(self) -> ClosetApiClient:
        if self.api_client is None:
            raise RuntimeError("No backend client configured")
        return self.api_client

    def register_from_image(
        self,
        base64_image: str,
        barcode: str | None = None,
        image_uri: str = "",
    ) -> RegistrationCandidate:
        """Analyze a photo, pre-fill a draft and fetch matching products."""

        api = self._require_api()
        with operation_context("client:register_from_image") as correlation_id:
            analysis = api.analyze_image(base64_image)
            draft = apply_analysis(ItemDraft(barcode=barcode or "", image_uri=image_uri), analysis)
            products = api.search_products(build_search_query(analysis), barcode or None)
            log_event(
                logger,
                logging.INFO,
                "registration_candidates_ready",
                correlation_id=correlation_id,
                category=draft.category,
                product_count=len(products),
            )
            return RegistrationCandidate(draft=draft, analysis=analysis, products=products)

    def prefill_from_picked_image(self, draft: ItemDraft, base64_image: str) -> ItemDraft:
        """Library photos only pre-fill the form; no product search and no brand note."""

        analysis = self._require_api().analyze_image(base64_image)
        return apply_analysis(draft, analysis, include_brand_note=False)

    @staticmethod
    def select_product(draft: ItemDraft, product: Optional[ProductResult]) -> ItemDraft:
        """Link the chosen product to the draft; ``None`` means the user skipped."""

        return replace(draft, selected_product=product)

    def add_item(self, draft: ItemDraft) -> ClosetItem:
        item = build_closet_item(draft)
        self.catalog.add(item)
        logger.info("Added closet item", extra={"item_id": item.id, "category": item.category})
        return item

    def generate_outfit(self) -> Outfit:
        self.latest_outfit = generate_outfit(self.catalog.items, rng=self.rng)
        return self.latest_outfit


__all__ = [
    "ClosetManager",
    "RegistrationCandidate",
    "apply_analysis",
    "build_search_query",
]
