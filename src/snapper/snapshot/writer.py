"""Render a RecordStore as a snapshot file (header line + one line per record)."""
from __future__ import annotations

import logging
import os
import stat
import sys
import time
from pathlib import Path
from typing import IO, Callable, Iterator

from ..models import SENTINEL, FileRecord
from ..store.record_store import RecordStore
from .columns import (
    DEFAULT_FIELD_DELIMITER,
    DEFAULT_RECORD_DELIMITER,
    ColumnSpec,
    Token,
    TokenKind,
    compile_delimiter,
)

logger = logging.getLogger(__name__)

# Longest path plus room for the remaining columns.
PATH_MAX = 4096
MAX_RECORD_LENGTH = PATH_MAX + 100

KB = 1024
MB = KB * 1024
GB = MB * 1024
TB = GB * 1024

# (bit, chmod-style value) pairs composing the "P" column.
_OCTAL_BITS = (
    (stat.S_ISUID, 4000),
    (stat.S_ISGID, 2000),
    (stat.S_ISVTX, 1000),
    (stat.S_IRUSR, 400),
    (stat.S_IWUSR, 200),
    (stat.S_IXUSR, 100),
    (stat.S_IRGRP, 40),
    (stat.S_IWGRP, 20),
    (stat.S_IXGRP, 10),
    (stat.S_IROTH, 4),
    (stat.S_IWOTH, 2),
    (stat.S_IXOTH, 1),
)

_STRIPPED = str.maketrans("", "", "\t\r\n")

STDOUT = "<stdout>"


def format_size(size: int) -> str:
    if size < KB:
        return f"{size} bytes"
    if size < MB:
        return f"{size / KB:.1f} KB"
    if size < GB:
        return f"{size / MB:.2f} MB"
    if size < TB:
        return f"{size / GB:.2f} GB"
    return f"{size / TB:.3f} TB"


def format_permissions(mode: int) -> str:
    if mode == SENTINEL:
        return str(SENTINEL)
    composed = sum(value for bit, value in _OCTAL_BITS if mode & bit)
    return f"{composed:04d}"


def format_timestamp(epoch: int, text: str | None = None) -> str:
    if text is not None:
        return text
    return time.ctime(epoch)


def render_field(code: str, record: FileRecord) -> str:
    """Render one field code for ``record`` (tabs and newlines removed)."""
    if code == "p":
        value = record.path or ""
    elif code == "a":
        value = format_timestamp(record.atime, record.atime_text)
    elif code == "A":
        value = str(record.atime)
    elif code == "m":
        value = format_timestamp(record.mtime, record.mtime_text)
    elif code == "M":
        value = str(record.mtime)
    elif code == "c":
        value = format_timestamp(record.ctime, record.ctime_text)
    elif code == "C":
        value = str(record.ctime)
    elif code == "s":
        value = format_size(record.size)
    elif code == "S":
        value = str(record.size)
    elif code == "i":
        value = str(record.inode)
    elif code == "o":
        value = str(record.uid)
    elif code == "g":
        value = str(record.gid)
    elif code == "t":
        value = record.type.value if record.type is not None else ""
    elif code == "T":
        value = str(record.mode)
    elif code == "P":
        value = format_permissions(record.mode)
    elif code == "e":
        value = record.selected.value
    else:
        raise KeyError(f"Unknown field code: {code!r}")
    return value.translate(_STRIPPED)


class _Line:
    """Accumulates pieces of one output line, dropping any that would overflow."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.parts: list[str] = []
        self.length = 0

    def add(self, piece: str) -> None:
        if self.length + len(piece) > self.limit:
            return
        self.parts.append(piece)
        self.length += len(piece)

    def __str__(self) -> str:
        return "".join(self.parts)


class SnapshotWriter:
    """Interprets a ColumnSpec to render headers and records."""

    def __init__(
        self,
        spec: ColumnSpec,
        field_delimiter: str = DEFAULT_FIELD_DELIMITER,
        record_delimiter: str = DEFAULT_RECORD_DELIMITER,
        max_record_length: int = MAX_RECORD_LENGTH,
    ) -> None:
        self.spec = spec
        self.field_delimiter = compile_delimiter(field_delimiter)
        self.record_delimiter = compile_delimiter(record_delimiter)
        self.max_record_length = max_record_length

    @classmethod
    def for_store(cls, store: RecordStore, max_record_length: int = MAX_RECORD_LENGTH) -> "SnapshotWriter":
        return cls(
            ColumnSpec.compile(store.column_template),
            field_delimiter=store.field_delimiter,
            record_delimiter=store.record_delimiter,
            max_record_length=max_record_length,
        )

    def _render(self, piece_for: Callable[[Token], str]) -> str:
        line = _Line(self.max_record_length)
        for token in self.spec.tokens:
            line.add(piece_for(token))
            line.add(self.field_delimiter)
        line.add(self.record_delimiter)
        return str(line)

    def render_header(self) -> str:
        return self._render(lambda token: token.label)

    def render_record(self, record: FileRecord) -> str:
        def piece(token: Token) -> str:
            if token.kind is TokenKind.FIELD:
                return render_field(token.value, record)
            return token.value

        return self._render(piece)

    def iter_lines(self, store: RecordStore) -> Iterator[str]:
        yield self.render_header()
        for record in store:
            yield self.render_record(record)

    def write(self, store: RecordStore, stream: IO[str]) -> int:
        """Write header and records to ``stream``; returns the number of records."""
        count = -1
        for line in self.iter_lines(store):
            stream.write(line)
            count += 1
        stream.flush()
        return count


def _open_destination(path: Path | None) -> tuple[IO[str], bool]:
    if path is None:
        return sys.stdout, False
    try:
        return open(path, "w", encoding="utf-8", errors="surrogateescape", newline=""), True
    except OSError as e:
        logger.error(f"Couldn't open {path} for output: {e}. Defaulting to stdout.")
        return sys.stdout, False


def _widen_permissions(path: Path) -> None:
    try:
        mode = stat.S_IMODE(os.stat(path).st_mode)
        os.chmod(path, mode | 0o666)
    except OSError as e:
        logger.debug(f"Could not widen permissions on {path}: {e}")


def write_snapshot(
    store: RecordStore,
    path: Path | str | None = None,
    max_record_length: int = MAX_RECORD_LENGTH,
) -> str:
    """Write ``store`` to ``path`` (stdout when ``None``).

    Returns the destination actually used, which is ``"<stdout>"`` when the
    file could not be opened.
    """
    target = Path(path) if path is not None else None
    writer = SnapshotWriter.for_store(store, max_record_length=max_record_length)
    stream, is_file = _open_destination(target)
    if not is_file:
        writer.write(store, stream)
        return STDOUT

    try:
        with stream:
            count = writer.write(store, stream)
    except OSError as e:
        logger.error(f"Couldn't write {target}: {e}")
        raise
    _widen_permissions(target)  # type: ignore[arg-type]
    logger.info(f"Wrote {count} records to {target}")
    return str(target)
