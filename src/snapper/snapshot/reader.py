"""Parse snapshot files back into a RecordStore.

The header line is self-describing: each tab-separated label is matched
against :data:`~snapper.snapshot.columns.COLUMN_LABELS` to learn which
field lives at which column index. Unknown labels are skipped but still
occupy their column. Snapshots on disk are always tab-delimited, whatever
field delimiter the writing run was configured with.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from ..models import SENTINEL, FileRecord, FileType, Selection
from ..store.record_store import RecordStore
from .columns import COLUMN_LABELS, LABEL_CODES, PATH_CODE, ColumnSpec

logger = logging.getLogger(__name__)

_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")
_OCTAL_RE = re.compile(r"[+-]?[0-7]+")


class SnapshotFormatError(ValueError):
    """Raised when a snapshot cannot describe valid records."""


def parse_int(text: str, base: int = 10) -> int:
    """Parse ``text`` as a whole integer, returning ``SENTINEL`` otherwise."""
    pattern = _OCTAL_RE if base == 8 else _DECIMAL_RE
    if not pattern.fullmatch(text):
        return SENTINEL
    return int(text, base)


def parse_header(line: str) -> dict[int, str]:
    """Map column index to field code for every recognized header label."""
    columns: dict[int, str] = {}
    for index, label in enumerate(line.split("\t")):
        code = LABEL_CODES.get(label)
        if code is None:
            if label:
                logger.debug(f"Ignoring unknown header column {index}: {label!r}")
            continue
        columns[index] = code
    if PATH_CODE not in columns.values():
        raise SnapshotFormatError(
            f"Snapshot header has no {COLUMN_LABELS[PATH_CODE]!r} column: {line!r}"
        )
    return columns


def _numeric(record: FileRecord, text: str, code: str, base: int = 10) -> int:
    value = parse_int(text, base)
    if value == SENTINEL and text != str(SENTINEL):
        logger.debug(f"Invalid {COLUMN_LABELS[code]} value {text!r} for {record.path}")
    return value


def parse_record(line: str, columns: dict[int, str]) -> FileRecord:
    record = FileRecord()
    fields = line.split("\t")
    permissions: str | None = None
    human_size: str | None = None
    raw_mode = False
    raw_size = False

    for index, code in columns.items():
        if index >= len(fields):
            continue
        text = fields[index]
        if code == "p":
            record.path = text
        elif code == "a":
            record.atime_text = text or None
        elif code == "A":
            record.atime = _numeric(record, text, code)
        elif code == "m":
            record.mtime_text = text or None
        elif code == "M":
            record.mtime = _numeric(record, text, code)
        elif code == "c":
            record.ctime_text = text or None
        elif code == "C":
            record.ctime = _numeric(record, text, code)
        elif code == "s":
            human_size = text
        elif code == "S":
            record.size = _numeric(record, text, code)
            raw_size = True
        elif code == "i":
            record.inode = _numeric(record, text, code)
        elif code == "o":
            record.uid = _numeric(record, text, code)
        elif code == "g":
            record.gid = _numeric(record, text, code)
        elif code == "t":
            record.type = FileType.from_letter(text)
        elif code == "T":
            record.mode = _numeric(record, text, code)
            raw_mode = True
        elif code == "P":
            permissions = text
        elif code == "e":
            record.selected = Selection.from_letter(text)

    # Raw mode wins over the octal permissions column.
    if permissions is not None and not raw_mode:
        record.mode = _numeric(record, permissions, "P", base=8)
    if human_size is not None and not raw_size:
        record.size = _numeric(record, human_size, "s")
    return record


def parse_snapshot(lines: Iterable[str]) -> RecordStore:
    """Build a RecordStore from snapshot lines (line terminators optional)."""
    it = iter(lines)
    header: str | None = None
    for raw in it:
        header = raw.rstrip("\r\n")
        break
    if not header:
        raise SnapshotFormatError("Snapshot has no header line")

    columns = parse_header(header)
    codes = [columns[i] for i in sorted(columns)]
    store = RecordStore(column_template=ColumnSpec.from_codes(codes).template)

    for raw in it:
        line = raw.rstrip("\r\n")
        if not line:
            continue
        store.append(parse_record(line, columns))
    return store


def read_snapshot(path: str | Path) -> RecordStore:
    """Read a snapshot file written by :func:`~snapper.snapshot.writer.write_snapshot`."""
    p = Path(path)
    # newline="" splits on CR, LF and CRLF alike.
    with p.open("r", encoding="utf-8", errors="surrogateescape", newline="") as f:
        store = parse_snapshot(f)
    logger.info(f"Read {len(store)} records from {p}")
    return store
