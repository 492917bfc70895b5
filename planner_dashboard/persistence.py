"""Persistence adapter for the planner state.

The whole ``PlannerState`` is stored as one JSON string under a single
key.  The key-value medium is swappable: a directory of JSON files (the
default), a SQLite table, or an in-memory dict for tests.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional

from .config import DB_PATH, STATE_DIR, STORAGE_BACKEND, STORAGE_KEY
from .models import PlannerState, ValidationError, seed_state

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Minimal string key-value interface used by :class:`PersistenceAdapter`."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore(KeyValueStore):
    """Stores each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = Path(directory or STATE_DIR)

    def get_path(self, key: str) -> Path:
        cleaned = "".join(c for c in key if c.isalnum() or c in {"_", "-"})
        return self.directory / f"{cleaned or 'state'}.json"

    def get(self, key: str) -> Optional[str]:
        target = self.get_path(key)
        if not target.exists():
            return None
        with target.open("r", encoding="utf-8") as handle:
            return handle.read()

    def set(self, key: str, value: str) -> None:
        target = self.get_path(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling temp file and rename so readers never see a partial blob
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, target)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


class SqliteStore(KeyValueStore):
    """Stores keys in a single ``kv`` table of a SQLite database."""

    SCHEMA_SQL = "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL);"

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or DB_PATH)

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.path))
        try:
            conn.execute(self.SCHEMA_SQL)
            yield conn
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:
        with self.connect() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self.connect() as conn:
            conn.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )
            conn.commit()


def create_store(
    backend: Optional[str] = None,
    state_dir: Optional[Path] = None,
    db_path: Optional[Path] = None,
) -> KeyValueStore:
    """Build the key-value backend named by ``backend`` (or config)."""
    name = (backend or STORAGE_BACKEND).strip().lower()
    if name == "json":
        return JsonFileStore(state_dir)
    if name == "sqlite":
        return SqliteStore(db_path)
    if name == "memory":
        return MemoryStore()
    raise ValueError(f"Unknown storage backend '{name}'. Expected json, sqlite or memory.")


class PersistenceAdapter:
    """Loads and saves the full planner state under one key."""

    def __init__(self, store: Optional[KeyValueStore] = None, key: str = STORAGE_KEY):
        self.store = store if store is not None else create_store()
        self.key = key

    def load(self) -> PlannerState:
        """Return the persisted state, or the seed state if missing or corrupt."""
        try:
            raw = self.store.get(self.key)
        except (OSError, UnicodeDecodeError, sqlite3.Error) as exc:
            logger.warning("Could not read planner state '%s': %s", self.key, exc)
            return seed_state()
        if raw is None:
            logger.info("No saved planner state under '%s'; starting from seed", self.key)
            return seed_state()
        try:
            return PlannerState.from_dict(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Discarding corrupt planner state '%s': %s", self.key, exc)
            return seed_state()

    def dumps(self, state: PlannerState) -> str:
        return json.dumps(state.to_dict())

    def save(self, state: PlannerState) -> None:
        """Overwrite the stored blob with ``state``; write failures are dropped."""
        try:
            self.store.set(self.key, self.dumps(state))
        except (OSError, sqlite3.Error) as exc:
            logger.warning("Failed to save planner state '%s': %s", self.key, exc)
