"""
Tests for the growable array and the record store built on it.
"""

import pytest

from snapper.models import FileRecord
from snapper.store.growable import GrowableArray
from snapper.store.record_store import CHUNK_SIZE, INITIAL_CAPACITY, RecordStore


class TestGrowableArray:
    """Test chunked growth and element access."""

    def test_grows_in_chunks(self):
        arr: GrowableArray[int] = GrowableArray(initial_capacity=2, chunk_size=3)
        for i in range(3):
            arr.append(i)

        assert len(arr) == 3
        assert arr.capacity == 5
        assert arr.grow_events == 1
        assert list(arr) == [0, 1, 2]

    def test_size_never_exceeds_capacity(self):
        arr: GrowableArray[int] = GrowableArray(initial_capacity=1, chunk_size=1)
        for i in range(50):
            arr.append(i)
            assert len(arr) <= arr.capacity

    @pytest.mark.parametrize("capacity,chunk", [(0, 5), (10, 0), (-1, 1)])
    def test_invalid_sizes_rejected(self, capacity, chunk):
        with pytest.raises(ValueError):
            GrowableArray(capacity, chunk)

    def test_indexing(self):
        arr: GrowableArray[str] = GrowableArray(4, 4)
        arr.append("a")
        arr.append("b")

        assert arr[0] == "a"
        assert arr[-1] == "b"
        with pytest.raises(IndexError):
            arr[2]

    def test_sort_only_touches_live_items(self):
        arr: GrowableArray[int] = GrowableArray(10, 5)
        for i in (3, 1, 2):
            arr.append(i)

        arr.sort(key=lambda x: x)

        assert list(arr) == [1, 2, 3]
        assert arr.capacity == 10

    def test_clear_keeps_capacity(self):
        arr: GrowableArray[int] = GrowableArray(2, 2)
        for i in range(5):
            arr.append(i)
        capacity = arr.capacity

        arr.clear()

        assert len(arr) == 0
        assert list(arr) == []
        assert arr.capacity == capacity


class TestRecordStore:
    """Test the ordered FileRecord collection."""

    def test_defaults(self):
        store = RecordStore()

        assert store.size() == 0
        assert store.capacity == INITIAL_CAPACITY
        assert store.column_template == "%p %m %c"
        assert store.field_delimiter == "%t"
        assert store.record_delimiter == "%n"

    def test_chunk_constants(self):
        assert INITIAL_CAPACITY == 200_000
        assert CHUNK_SIZE == 50_000

    def test_keeps_insertion_order(self):
        store = RecordStore(initial_capacity=2, chunk_size=2)
        for name in ("c", "a", "b"):
            store.append(FileRecord(path=f"/{name}"))

        assert [r.path for r in store] == ["/c", "/a", "/b"]
        assert store.get(1).path == "/a"
        assert store[-1].path == "/b"
        assert store.grow_events == 1

    def test_clear_releases_records(self):
        store = RecordStore()
        store.append(FileRecord(path="/a"))

        store.clear()

        assert len(store) == 0
