"""Record store: JSON documents addressed by slash-separated keys.

Projects are stored as ``projects/<project_id>`` and the shared library as
``global/characters`` and ``global/wardrobes``. Two backends exist: plain JSON
files for local use and a single Supabase table for deployments.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any

import structlog

from prompt_shop.config import get_settings
from prompt_shop.db.client import SupabaseClient, get_supabase_client

logger = structlog.get_logger()


def _check_key(key: str) -> str:
    parts = key.split("/")
    if not key or any(part in ("", ".", "..") for part in parts):
        raise ValueError(f"Invalid record key '{key}'")
    return key


class RecordStore(ABC):
    """Interface shared by the storage backends."""

    @abstractmethod
    def load(self, key: str) -> dict[str, Any] | None:
        ...

    @abstractmethod
    def save(self, key: str, record: dict[str, Any]) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        ...

    @abstractmethod
    def list_keys(self, prefix: str = "") -> list[str]:
        ...


class FileRecordStore(RecordStore):
    """Stores each record as ``<root>/<key>.json``."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / f"{_check_key(key)}.json"

    def load(self, key: str) -> dict[str, Any] | None:
        path = self._path(key)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def save(self, key: str, record: dict[str, Any]) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(record, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        path.unlink()
        return True

    def list_keys(self, prefix: str = "") -> list[str]:
        if not self.root.exists():
            return []
        keys = [
            path.relative_to(self.root).with_suffix("").as_posix()
            for path in self.root.rglob("*.json")
        ]
        return sorted(key for key in keys if key.startswith(prefix))


class SupabaseRecordStore(RecordStore):
    """Stores records as ``{key, data, updated_at}`` rows in one table."""

    def __init__(self, db: SupabaseClient, table: str) -> None:
        self.db = db
        self.table = table

    def load(self, key: str) -> dict[str, Any] | None:
        rows = self.db.select(self.table, filters={"key": _check_key(key)}, limit=1)
        return rows[0]["data"] if rows else None

    def save(self, key: str, record: dict[str, Any]) -> None:
        self.db.upsert(
            self.table,
            {
                "key": _check_key(key),
                "data": record,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            },
            on_conflict="key",
        )

    def delete(self, key: str) -> bool:
        removed = self.db.delete(self.table, filters={"key": _check_key(key)})
        return bool(removed)

    def list_keys(self, prefix: str = "") -> list[str]:
        rows = self.db.select(self.table, columns="key", prefix=("key", prefix) if prefix else None)
        return sorted(row["key"] for row in rows)


@lru_cache
def get_record_store() -> RecordStore:
    """Get the cached record store for the configured backend."""
    settings = get_settings()
    if settings.storage_backend == "supabase":
        logger.info("store.backend", backend="supabase", table=settings.supabase_table)
        return SupabaseRecordStore(get_supabase_client(), settings.supabase_table)
    if settings.storage_backend != "local":
        raise ValueError(f"Unknown storage backend '{settings.storage_backend}'")
    logger.info("store.backend", backend="local", root=settings.data_dir)
    return FileRecordStore(settings.data_dir)
