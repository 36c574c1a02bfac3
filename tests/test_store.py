# Path: tests/test_store.py
# Purpose: Exercise both index stores: duplicates, snapshots, persistence, and failure modes.
# Layer: tests.

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from ris.errors import DuplicateIdentifier, ExtractorMismatch, StorageUnavailable
from ris.models.domain import ImageDocument
from ris.store import MemoryIndexStore, SqliteIndexStore
from ris.store.sqlite_store import INDEX_FILENAME


def _doc(identifier, *values):
    return ImageDocument(identifier=identifier, descriptor=np.array(values, dtype=np.float32))


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        backend = MemoryIndexStore()
    else:
        backend = SqliteIndexStore(tmp_path / "index")
    yield backend
    backend.close()


def test_append_and_scan_in_identifier_order(store):
    store.append(_doc("b", 2.0, 0.0))
    store.append(_doc("a", 1.0, 0.5))

    with store.open_for_query() as handle:
        docs = list(store.scan(handle))

    assert [doc.identifier for doc in docs] == ["a", "b"]
    np.testing.assert_array_equal(docs[0].descriptor, np.array([1.0, 0.5], dtype=np.float32))
    assert store.count() == 2


def test_duplicate_identifier_is_rejected(store):
    store.append(_doc("a", 1.0))

    with pytest.raises(DuplicateIdentifier):
        store.append(_doc("a", 9.0))

    with store.open_for_query() as handle:
        (doc,) = list(store.scan(handle))
    assert doc.descriptor.tolist() == [1.0]


def test_handle_sees_snapshot_only(store):
    store.append(_doc("a", 1.0))

    with store.open_for_query() as handle:
        store.append(_doc("b", 2.0))
        assert handle.size == 1
        assert [doc.identifier for doc in store.scan(handle)] == ["a"]

    assert store.count() == 2


def test_scan_is_restartable(store):
    for name in ("x", "y", "z"):
        store.append(_doc(name, 1.0, 2.0))

    with store.open_for_query() as handle:
        first = [doc.identifier for doc in store.scan(handle)]
        second = [doc.identifier for doc in store.scan(handle)]

    assert first == second == ["x", "y", "z"]


def test_signature_mismatch(store):
    store.bind_signature("cedd:v1:dim=144")
    store.bind_signature("cedd:v1:dim=144")

    with pytest.raises(ExtractorMismatch):
        store.bind_signature("color_histogram:v1:dim=96")

    store.append(_doc("a", 1.0))
    with store.open_for_query() as handle:
        assert handle.signature == "cedd:v1:dim=144"


def test_concurrent_appends(store):
    def worker(thread_id):
        rejected = 0
        for i in range(25):
            store.append(_doc(f"t{thread_id}-{i:02d}", float(i)))
        try:
            store.append(_doc("shared", float(thread_id)))
        except DuplicateIdentifier:
            rejected += 1
        return rejected

    with ThreadPoolExecutor(max_workers=8) as executor:
        rejected = sum(executor.map(worker, range(8)))

    assert rejected == 7
    assert store.count() == 8 * 25 + 1


def test_sqlite_persists_across_reopen(tmp_path):
    with SqliteIndexStore(tmp_path / "index") as store:
        store.bind_signature("sig")
        store.append(_doc("/images/a.jpg", 0.25, 7.0))

    reopened = SqliteIndexStore(tmp_path / "index")
    with reopened.open_for_query() as handle:
        docs = list(reopened.scan(handle))
        assert handle.signature == "sig"

    assert [doc.identifier for doc in docs] == ["/images/a.jpg"]
    assert docs[0].descriptor.tolist() == [0.25, 7.0]
    with pytest.raises(DuplicateIdentifier):
        reopened.append(_doc("/images/a.jpg", 1.0, 1.0))
    reopened.close()


def test_sqlite_missing_index_is_unavailable(tmp_path):
    store = SqliteIndexStore(tmp_path / "missing")

    with pytest.raises(StorageUnavailable):
        store.open_for_query()
    assert not (tmp_path / "missing").exists()


def test_sqlite_corrupt_index_is_unavailable(tmp_path):
    index_dir = tmp_path / "index"
    index_dir.mkdir()
    (index_dir / INDEX_FILENAME).write_bytes(b"this is not a database" * 100)

    with pytest.raises(StorageUnavailable):
        SqliteIndexStore(index_dir).open_for_query()


def test_memory_store_empty_snapshot():
    store = MemoryIndexStore()

    with store.open_for_query() as handle:
        assert handle.size == 0
        assert handle.signature is None
        assert list(store.scan(handle)) == []


def test_stored_descriptor_is_isolated_from_caller(store):
    descriptor = np.array([1.0, 2.0], dtype=np.float32)
    store.append(ImageDocument(identifier="a", descriptor=descriptor))

    descriptor[:] = 99.0

    with store.open_for_query() as handle:
        (doc,) = list(store.scan(handle))
    assert doc.descriptor.tolist() == [1.0, 2.0]


def test_memory_store_descriptors_are_read_only():
    store = MemoryIndexStore()
    store.append(_doc("a", 1.0, 2.0))

    with store.open_for_query() as handle:
        (doc,) = list(store.scan(handle))
    with pytest.raises(ValueError):
        doc.descriptor[0] = 5.0


def test_scan_rejects_foreign_handle(tmp_path):
    memory = MemoryIndexStore()
    sqlite = SqliteIndexStore(tmp_path / "index")
    sqlite.append(_doc("a", 1.0))

    with memory.open_for_query() as memory_handle, sqlite.open_for_query() as sqlite_handle:
        with pytest.raises(TypeError):
            list(memory.scan(sqlite_handle))
        with pytest.raises(TypeError):
            list(sqlite.scan(memory_handle))
    sqlite.close()
