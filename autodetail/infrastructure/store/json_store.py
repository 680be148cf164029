from __future__ import annotations

import fcntl
import json
import logging
from pathlib import Path
from typing import IO, Any

from autodetail.infrastructure.store.memory_store import MemoryDocumentStore


class JsonDocumentStore(MemoryDocumentStore):
    """
    Document store persisted as one JSON file per table.

    Several processes may share a data directory (the API and the job runner).
    Each operation, or each whole transaction, holds an exclusive lock on the
    directory and reads the tables it touches from disk, so a write never
    replaces a table with a stale copy. Every committed write rewrites the
    table file through a temp file and an atomic rename, so a crash leaves
    either the old or the new table on disk.
    """

    LOCK_FILE = ".store.lock"

    def __init__(self, data_dir: str = "./data/store") -> None:
        super().__init__()
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._logger = logging.getLogger(__name__)
        self._loaded: set[str] = set()
        self._lock_handle: IO[str] | None = None

    def _get_file_path(self, table: str) -> Path:
        return self._data_dir / f"{table}.json"

    def _open_session(self) -> None:
        self._lock_handle = open(self._data_dir / self.LOCK_FILE, "a", encoding="utf-8")
        fcntl.flock(self._lock_handle, fcntl.LOCK_EX)
        # Another process may have written since the last session.
        self._loaded.clear()

    def _close_session(self) -> None:
        if self._lock_handle is not None:
            fcntl.flock(self._lock_handle, fcntl.LOCK_UN)
            self._lock_handle.close()
            self._lock_handle = None

    def _table(self, table: str) -> dict[str, dict[str, Any]]:
        if table not in self._loaded:
            self._tables[table] = self._load_table(table)
            self._loaded.add(table)
        return self._tables[table]

    def _load_table(self, table: str) -> dict[str, dict[str, Any]]:
        """Load table data from its JSON file."""
        file_path = self._get_file_path(table)
        if not file_path.exists():
            return {}
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            self._logger.error(
                "Unreadable table file, starting empty",
                extra={"table": table, "error": str(e)},
            )
            return {}
        return dict(data.get("documents") or {})

    def _snapshot(self) -> Any:
        return super()._snapshot(), set(self._loaded)

    def _restore(self, snapshot: Any) -> None:
        tables, loaded = snapshot
        super()._restore(tables)
        self._loaded = loaded

    def _flush(self, table: str) -> None:
        """Save table data to JSON file atomically."""
        file_path = self._get_file_path(table)
        temp_path = file_path.with_suffix(".json.tmp")
        data: dict[str, Any] = {"table": table, "version": 1, "documents": self._tables.get(table, {})}

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise
