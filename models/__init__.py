"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.analysis import AnalysisResult, fallback_analysis
from models.closet_item import ClosetItem, ClosetItemValidationError, ItemDraft, ProductSnapshot, build_closet_item
from models.outfit import Outfit
from models.product import ProductResult

__all__ = [
    "AnalysisResult",
    "ClosetItem",
    "ClosetItemValidationError",
    "ItemDraft",
    "Outfit",
    "ProductResult",
    "ProductSnapshot",
    "build_closet_item",
    "fallback_analysis",
]
