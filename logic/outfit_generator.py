"""Random outfit assembly from the local closet catalog."""
from __future__ import annotations

import logging
import random
from typing import Dict, List, Sequence

from models.closet_item import ClosetItem
from models.outfit import Outfit
from models.taxonomy import OUTFIT_SLOTS

logger = logging.getLogger(__name__)


class OutfitGenerationError(RuntimeError):
    """Base error for outfits that cannot be generated."""


class NoItemsError(OutfitGenerationError):
    """The catalog is empty."""


class NoEligibleCategoriesError(OutfitGenerationError):
    """The catalog has items but none of them fills an outfit slot."""


def group_by_category(items: Sequence[ClosetItem]) -> Dict[str, List[ClosetItem]]:
    grouped: Dict[str, List[ClosetItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return grouped


def generate_outfit(items: Sequence[ClosetItem], rng: random.Random | None = None) -> Outfit:
    """Pick one item uniformly at random for every slot that has candidates.

    Slots are filled independently, so the same catalog can produce the same
    outfit twice in a row. Slots without a matching item are left out.
    """

    if not items:
        raise NoItemsError("Add a few items before generating outfits.")

    chooser = rng or random
    grouped = group_by_category(items)
    picks: Dict[str, ClosetItem] = {}
    for slot in OUTFIT_SLOTS:
        options = grouped.get(slot, [])
        if options:
            picks[slot] = chooser.choice(options)

    if not picks:
        raise NoEligibleCategoriesError("Add items with different categories.")

    logger.info("Generated outfit with slots %s", list(picks))
    return Outfit(items=picks)


__all__ = [
    "NoEligibleCategoriesError",
    "NoItemsError",
    "OutfitGenerationError",
    "generate_outfit",
    "group_by_category",
]
