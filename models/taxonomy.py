"""Canonical vocabulary for closet items.

The closet uses a small closed vocabulary: six categories, five seasons and a
suggested color palette. Outfit slots are the subset of categories that outfit
generation fills.
"""

from typing import Iterable, List, Optional

CATEGORIES: List[str] = ["Top", "Bottom", "Outerwear", "Shoes", "Accessory", "Other"]
SEASONS: List[str] = ["All", "Spring", "Summer", "Autumn", "Winter"]
COLORS: List[str] = ["Black", "White", "Gray", "Navy", "Blue", "Green", "Brown", "Beige"]
OUTFIT_SLOTS: List[str] = ["Top", "Bottom", "Shoes", "Outerwear", "Accessory"]

DEFAULT_SEASON = "All"


def validate_category(value: str) -> str:
    """Validate a category value.

    Raises a :class:`ValueError` if the category is not one of the fixed
    categories. Matching is exact, the same way the capture form offers them.
    """

    if value not in CATEGORIES:
        raise ValueError(f"Unsupported category '{value}'. Allowed: {CATEGORIES}")
    return value


def known_value(value: Optional[str], allowed: Iterable[str]) -> Optional[str]:
    """Return ``value`` when it belongs to ``allowed``, else ``None``."""

    if value and value in allowed:
        return value
    return None


__all__ = [
    "CATEGORIES",
    "SEASONS",
    "COLORS",
    "OUTFIT_SLOTS",
    "DEFAULT_SEASON",
    "validate_category",
    "known_value",
]
