from __future__ import annotations

import copy
import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from autodetail.application.ports.document_store import DocumentStorePort


class MemoryDocumentStore(DocumentStorePort):
    def __init__(self) -> None:
        self._tables: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = threading.RLock()
        self._session_depth = 0
        self._tx_depth = 0
        self._dirty: set[str] = set()

    @contextmanager
    def _session(self) -> Iterator[None]:
        """Hold the store for one operation or one whole transaction."""
        with self._lock:
            outermost = self._session_depth == 0
            if outermost:
                self._open_session()
            self._session_depth += 1
            try:
                yield
            finally:
                self._session_depth -= 1
                if outermost:
                    self._close_session()

    def _open_session(self) -> None:
        pass

    def _close_session(self) -> None:
        pass

    def _table(self, table: str) -> dict[str, dict[str, Any]]:
        return self._tables.setdefault(table, {})

    def _changed(self, table: str) -> None:
        """Hook called after every write to `table`."""
        if self._tx_depth:
            self._dirty.add(table)
            return
        self._flush(table)

    def _flush(self, table: str) -> None:
        pass

    def _snapshot(self) -> Any:
        return copy.deepcopy(self._tables)

    def _restore(self, snapshot: Any) -> None:
        self._tables = snapshot

    def get(self, table: str, doc_id: str) -> dict[str, Any] | None:
        with self._session():
            doc = self._table(table).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def insert(self, table: str, doc: dict[str, Any], doc_id: str | None = None) -> str:
        with self._session():
            new_id = doc_id or uuid.uuid4().hex
            rows = self._table(table)
            if new_id in rows:
                raise KeyError(f"{table}/{new_id} already exists")
            rows[new_id] = {**copy.deepcopy(doc), "id": new_id}
            self._changed(table)
            return new_id

    def put(self, table: str, doc_id: str, doc: dict[str, Any]) -> None:
        with self._session():
            self._table(table)[doc_id] = {**copy.deepcopy(doc), "id": doc_id}
            self._changed(table)

    def patch(self, table: str, doc_id: str, changes: dict[str, Any]) -> bool:
        with self._session():
            doc = self._table(table).get(doc_id)
            if doc is None:
                return False
            doc.update(copy.deepcopy(changes))
            doc["id"] = doc_id
            self._changed(table)
            return True

    def compare_and_patch(
        self,
        table: str,
        doc_id: str,
        field: str,
        expected: Any,
        changes: dict[str, Any],
    ) -> bool:
        with self._session():
            doc = self._table(table).get(doc_id)
            if doc is None or doc.get(field) != expected:
                return False
            return self.patch(table, doc_id, changes)

    def delete(self, table: str, doc_id: str) -> bool:
        with self._session():
            removed = self._table(table).pop(doc_id, None)
            if removed is None:
                return False
            self._changed(table)
            return True

    def find(self, table: str, **equals: Any) -> list[dict[str, Any]]:
        with self._session():
            return [
                copy.deepcopy(doc)
                for doc in self._table(table).values()
                if all(doc.get(k) == v for k, v in equals.items())
            ]

    def find_range(
        self,
        table: str,
        field: str,
        start: Any | None = None,
        end: Any | None = None,
    ) -> list[dict[str, Any]]:
        with self._session():
            rows = []
            for doc in self._table(table).values():
                value = doc.get(field)
                if value is None:
                    continue
                if start is not None and value < start:
                    continue
                if end is not None and value >= end:
                    continue
                rows.append(copy.deepcopy(doc))
            rows.sort(key=lambda d: d[field])
            return rows

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._session():
            outermost = self._tx_depth == 0
            snapshot = self._snapshot() if outermost else None
            self._tx_depth += 1
            try:
                yield
            except BaseException:
                self._tx_depth -= 1
                if outermost:
                    self._restore(snapshot)
                    self._dirty.clear()
                raise
            self._tx_depth -= 1
            if outermost:
                dirty, self._dirty = self._dirty, set()
                for table in sorted(dirty):
                    self._flush(table)
