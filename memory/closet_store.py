"""Key-value storage backends and the write-through closet catalog."""
from __future__ import annotations

import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Dict, List, Optional

from models.closet_item import ClosetItem, ClosetItemValidationError

logger = logging.getLogger(__name__)

STORAGE_KEY = "closet_items_v1"


class CatalogLoadError(RuntimeError):
    """Raised when the persisted catalog cannot be read back."""


class KeyValueStorage:
    """Interface for string key-value persistence."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError


class InMemoryStorage(KeyValueStorage):
    """Process-local storage, used in tests and throwaway sessions."""

    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self.values: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.values[key] = value


class JSONFileStorage(KeyValueStorage):
    """One file per key under a base directory, suitable for local runs."""

    def __init__(self, base_dir: str | Path = "data/closet") -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.base_dir / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)


class SQLiteKeyValueStorage(KeyValueStorage):
    """SQLite-backed storage for lightweight durability."""

    def __init__(self, db_path: str | Path = "data/closet.db") -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL
                )
                """
            )

    def get_item(self, key: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO kv_store(key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
                (key, value, time.time()),
            )


class ClosetCatalog:
    """Ordered in-memory list of items, flushed whole to storage on every change.

    Newest items come first. Items are never edited or removed.
    """

    def __init__(self, storage: KeyValueStorage, storage_key: str = STORAGE_KEY) -> None:
        self.storage = storage
        self.storage_key = storage_key
        self._items: List[ClosetItem] = []
        self._loaded = False

    @property
    def items(self) -> List[ClosetItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def load(self) -> List[ClosetItem]:
        """Read the persisted list once; later calls return the in-memory copy."""

        if self._loaded:
            return self.items

        raw = self.storage.get_item(self.storage_key)
        if raw:
            try:
                payload = json.loads(raw)
                if not isinstance(payload, list):
                    raise ValueError("stored catalog is not a list")
                self._items = [ClosetItem.from_dict(entry) for entry in payload]
            except (ValueError, KeyError, TypeError, ClosetItemValidationError) as exc:
                logger.error("Could not load saved items", extra={"error": str(exc)})
                raise CatalogLoadError("Could not load saved items.") from exc
        self._loaded = True
        logger.info("Loaded closet catalog", extra={"item_count": len(self._items)})
        return self.items

    def add(self, item: ClosetItem) -> ClosetItem:
        if not self._loaded:
            self.load()
        updated = [item, *self._items]
        # Memory only changes once storage accepted the new list.
        self._flush(updated)
        self._items = updated
        return item

    def _flush(self, items: List[ClosetItem]) -> None:
        payload = json.dumps([item.to_dict() for item in items], ensure_ascii=False)
        self.storage.set_item(self.storage_key, payload)


def build_storage(backend: str, path: str | None = None) -> KeyValueStorage:
    """Pick a storage backend by name (``json``, ``sqlite`` or ``memory``)."""

    backend = backend.lower()
    if backend == "sqlite":
        return SQLiteKeyValueStorage(path or "data/closet.db")
    if backend == "memory":
        return InMemoryStorage()
    return JSONFileStorage(path or "data/closet")


__all__ = [
    "CatalogLoadError",
    "ClosetCatalog",
    "InMemoryStorage",
    "JSONFileStorage",
    "KeyValueStorage",
    "SQLiteKeyValueStorage",
    "STORAGE_KEY",
    "build_storage",
]
