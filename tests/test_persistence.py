"""
Tests for durable document store persistence.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from autodetail.application.ports.document_store import BOOKINGS, SERVICES
from autodetail.core.config import Settings, settings
from autodetail.infrastructure.store.json_store import JsonDocumentStore
from autodetail.infrastructure.store.memory_store import MemoryDocumentStore
from autodetail.wiring import dependencies


def test_json_store_persistence():
    """Documents written by one store instance are visible to the next."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonDocumentStore(data_dir=tmpdir)
        doc_id = store.insert(SERVICES, {"name": "Express Exterior Wash", "base_price": 49, "is_active": True})
        store.patch(SERVICES, doc_id, {"base_price": 59})

        reloaded = JsonDocumentStore(data_dir=tmpdir)
        doc = reloaded.get(SERVICES, doc_id)

        assert doc == {"id": doc_id, "name": "Express Exterior Wash", "base_price": 59, "is_active": True}
        assert reloaded.find(SERVICES, is_active=True) == [doc]


def test_json_file_format():
    """Each table lives in its own file with a version marker."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonDocumentStore(data_dir=tmpdir)
        doc_id = store.insert(BOOKINGS, {"status": "pending", "scheduled_at": 1781352000.0})

        file_path = Path(tmpdir) / "bookings.json"
        assert file_path.exists()
        assert not (Path(tmpdir) / "bookings.json.tmp").exists()

        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        assert data["table"] == BOOKINGS
        assert data["version"] == 1
        assert data["documents"][doc_id]["scheduled_at"] == 1781352000.0


def test_rolled_back_transaction_is_not_persisted():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonDocumentStore(data_dir=tmpdir)
        kept = store.insert(BOOKINGS, {"status": "pending"})

        with pytest.raises(RuntimeError):
            with store.transaction():
                store.insert(BOOKINGS, {"status": "confirmed"})
                store.delete(BOOKINGS, kept)
                raise RuntimeError("abort")

        assert [d["id"] for d in store.find(BOOKINGS)] == [kept]
        assert [d["id"] for d in JsonDocumentStore(data_dir=tmpdir).find(BOOKINGS)] == [kept]


def test_committed_transaction_is_flushed_once_complete():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonDocumentStore(data_dir=tmpdir)

        with store.transaction():
            first = store.insert(BOOKINGS, {"status": "pending"})
            second = store.insert(BOOKINGS, {"status": "pending"})
            assert not (Path(tmpdir) / "bookings.json").exists()

        ids = {d["id"] for d in JsonDocumentStore(data_dir=tmpdir).find(BOOKINGS)}
        assert ids == {first, second}


def test_unreadable_table_starts_empty():
    with tempfile.TemporaryDirectory() as tmpdir:
        (Path(tmpdir) / "bookings.json").write_text("{not json", encoding="utf-8")

        store = JsonDocumentStore(data_dir=tmpdir)

        assert store.find(BOOKINGS) == []


def test_two_instances_share_one_directory():
    """A write from one process never replaces what another wrote after it loaded."""
    with tempfile.TemporaryDirectory() as tmpdir:
        api_store = JsonDocumentStore(data_dir=tmpdir)
        job_store = JsonDocumentStore(data_dir=tmpdir)
        first = api_store.insert(BOOKINGS, {"status": "pending"})
        assert job_store.get(BOOKINGS, first) is not None

        second = api_store.insert(BOOKINGS, {"status": "pending"})
        job_store.patch(BOOKINGS, first, {"status": "confirmed"})
        third = job_store.insert(BOOKINGS, {"status": "pending"})

        reloaded = JsonDocumentStore(data_dir=tmpdir)
        assert {d["id"] for d in reloaded.find(BOOKINGS)} == {first, second, third}
        assert reloaded.get(BOOKINGS, first)["status"] == "confirmed"
        assert api_store.get(BOOKINGS, third) is not None


def test_transaction_sees_writes_from_another_instance():
    with tempfile.TemporaryDirectory() as tmpdir:
        api_store = JsonDocumentStore(data_dir=tmpdir)
        job_store = JsonDocumentStore(data_dir=tmpdir)
        job_store.find(SERVICES)
        service_id = api_store.insert(SERVICES, {"name": "Full Interior Detail"})

        with job_store.transaction():
            assert job_store.get(SERVICES, service_id)["name"] == "Full Interior Detail"
            job_store.insert(BOOKINGS, {"status": "pending"})

        assert len(api_store.find(BOOKINGS)) == 1
        assert api_store.get(SERVICES, service_id) is not None


def test_default_store_is_durable(monkeypatch, tmp_path):
    """Without an explicit opt-in every environment gets the JSON store."""
    monkeypatch.setattr(settings, "ENV", "prod")
    monkeypatch.setattr(settings, "STORE_PROVIDER", Settings.model_fields["STORE_PROVIDER"].default)
    monkeypatch.setattr(settings, "STORE_DATA_DIR", str(tmp_path))
    monkeypatch.setattr(dependencies, "_store", None)

    assert isinstance(dependencies.get_store(), JsonDocumentStore)


def test_memory_store_on_explicit_opt_in(monkeypatch):
    monkeypatch.setattr(settings, "STORE_PROVIDER", "memory")
    monkeypatch.setattr(dependencies, "_store", None)

    store = dependencies.get_store()

    assert isinstance(store, MemoryDocumentStore)
    assert not isinstance(store, JsonDocumentStore)


def test_compare_and_patch():
    store = MemoryDocumentStore()
    doc_id = store.insert(BOOKINGS, {"status": "confirmed"})

    assert store.compare_and_patch(BOOKINGS, doc_id, "status", "confirmed", {"status": "in-progress"})
    assert not store.compare_and_patch(BOOKINGS, doc_id, "status", "confirmed", {"status": "cancelled"})
    assert store.get(BOOKINGS, doc_id)["status"] == "in-progress"
    assert not store.compare_and_patch(BOOKINGS, "missing", "status", "confirmed", {})


def test_returned_documents_are_copies():
    store = MemoryDocumentStore()
    doc_id = store.insert(BOOKINGS, {"status": "pending", "service_ids": ["s1"]})

    doc = store.get(BOOKINGS, doc_id)
    doc["service_ids"].append("s2")

    assert store.get(BOOKINGS, doc_id)["service_ids"] == ["s1"]


def test_find_range_is_half_open_and_sorted():
    store = MemoryDocumentStore()
    for value in (30.0, 10.0, 20.0, 40.0):
        store.insert(BOOKINGS, {"scheduled_at": value})
    store.insert(BOOKINGS, {"scheduled_at": None})

    values = [d["scheduled_at"] for d in store.find_range(BOOKINGS, "scheduled_at", 10.0, 40.0)]

    assert values == [10.0, 20.0, 30.0]


def test_duplicate_insert_is_rejected():
    store = MemoryDocumentStore()
    store.insert(BOOKINGS, {"status": "pending"}, doc_id="b1")

    with pytest.raises(KeyError):
        store.insert(BOOKINGS, {"status": "pending"}, doc_id="b1")
