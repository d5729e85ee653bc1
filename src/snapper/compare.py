"""Compare two snapshots keyed on path."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .models import FileRecord
from .snapshot.columns import COLUMN_LABELS, PATH_CODE, ColumnSpec
from .snapshot.writer import render_field
from .store.record_store import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class FileChange:
    path: str
    fields: list[str]
    before: FileRecord
    after: FileRecord


@dataclass
class SnapshotDiff:
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    changed: list[FileChange] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.changed)

    def report(self) -> list[str]:
        """Human-readable lines: ``+`` added, ``-`` removed, ``~`` changed."""
        lines = [f"+ {p}" for p in self.added]
        lines += [f"- {p}" for p in self.removed]
        lines += [f"~ {c.path} ({', '.join(c.fields)})" for c in self.changed]
        lines.append(f"{len(self.added)} added, {len(self.removed)} removed, {len(self.changed)} changed")
        return lines


def shared_codes(before: RecordStore, after: RecordStore) -> list[str]:
    """Field codes captured by both stores, path excluded, in ``before`` order."""
    theirs = set(ColumnSpec.compile(after.column_template).codes)
    codes: list[str] = []
    for code in ColumnSpec.compile(before.column_template).codes:
        if code != PATH_CODE and code in theirs and code not in codes:
            codes.append(code)
    return codes


def _index(store: RecordStore) -> dict[str, FileRecord]:
    by_path: dict[str, FileRecord] = {}
    for record in store:
        if record.path is None:
            continue
        if record.path in by_path:
            logger.debug(f"Duplicate path in snapshot: {record.path}")
        by_path[record.path] = record
    return by_path


def compare_stores(before: RecordStore, after: RecordStore) -> SnapshotDiff:
    codes = shared_codes(before, after)
    old = _index(before)
    new = _index(after)

    diff = SnapshotDiff(
        added=[p for p in new if p not in old],
        removed=[p for p in old if p not in new],
    )
    for path, record in new.items():
        previous = old.get(path)
        if previous is None:
            continue
        fields = [
            COLUMN_LABELS[code]
            for code in codes
            if render_field(code, previous) != render_field(code, record)
        ]
        if fields:
            diff.changed.append(FileChange(path, fields, previous, record))

    logger.info(
        f"Compared {len(old)} and {len(new)} records on {len(codes)} fields: "
        f"{len(diff.added)} added, {len(diff.removed)} removed, {len(diff.changed)} changed"
    )
    return diff
