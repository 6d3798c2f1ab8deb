"""Outfit schema."""

import time
from dataclasses import dataclass, field
from typing import Any, Dict

from models.closet_item import ClosetItem, utc_timestamp


def new_outfit_id() -> str:
    return f"outfit-{int(time.time() * 1000)}"


@dataclass(frozen=True)
class Outfit:
    """Slot name to item snapshot, taken at generation time."""

    items: Dict[str, ClosetItem]
    id: str = field(default_factory=new_outfit_id)
    created_at: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "createdAt": self.created_at,
            "items": {slot: item.to_dict() for slot, item in self.items.items()},
        }
