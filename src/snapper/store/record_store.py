from __future__ import annotations

from typing import Any, Callable, Iterator

from ..models import FileRecord
from ..snapshot.columns import DEFAULT_FIELD_DELIMITER, DEFAULT_RECORD_DELIMITER, DEFAULT_TEMPLATE
from .growable import GrowableArray

# Counted in records.
INITIAL_CAPACITY = 200_000
CHUNK_SIZE = 50_000


class RecordStore:
    """Ordered collection of FileRecord plus the format strings used to write it.

    Insertion order is traversal order until :func:`snapper.sorter.sort_records`
    reorders it. The delimiters are kept in their escape-coded form.
    """

    def __init__(
        self,
        column_template: str = DEFAULT_TEMPLATE,
        field_delimiter: str = DEFAULT_FIELD_DELIMITER,
        record_delimiter: str = DEFAULT_RECORD_DELIMITER,
        initial_capacity: int = INITIAL_CAPACITY,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        self.column_template = column_template
        self.field_delimiter = field_delimiter
        self.record_delimiter = record_delimiter
        self._records: GrowableArray[FileRecord] = GrowableArray(initial_capacity, chunk_size)

    def append(self, record: FileRecord) -> None:
        self._records.append(record)

    def get(self, index: int) -> FileRecord:
        return self._records[index]

    def size(self) -> int:
        return len(self._records)

    @property
    def capacity(self) -> int:
        return self._records.capacity

    @property
    def grow_events(self) -> int:
        return self._records.grow_events

    def sort(self, key: Callable[[FileRecord], Any], reverse: bool = False) -> None:
        self._records.sort(key=key, reverse=reverse)

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, index: int) -> FileRecord:
        return self._records[index]

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(self._records)
