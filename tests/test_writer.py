"""
Tests for snapshot rendering: field formatting, line layout and file output.
"""

import io
import os
import stat
import time
from pathlib import Path

import pytest

from snapper.models import SENTINEL, FileRecord, FileType, Selection
from snapper.snapshot.columns import ColumnSpec
from snapper.snapshot.writer import (
    STDOUT,
    SnapshotWriter,
    format_permissions,
    format_size,
    render_field,
    write_snapshot,
)
from snapper.store.record_store import RecordStore


class TestFormatSize:
    """Test human-readable size units."""

    @pytest.mark.parametrize(
        "size,expected",
        [
            (0, "0 bytes"),
            (1023, "1023 bytes"),
            (1024, "1.0 KB"),
            (1536, "1.5 KB"),
            (1048576, "1.00 MB"),
            (1073741824, "1.00 GB"),
            (1024 ** 4, "1.000 TB"),
        ],
    )
    def test_units(self, size, expected):
        assert format_size(size) == expected


class TestFormatPermissions:
    """Test chmod-style octal rendering of mode bits."""

    def test_setuid_rwxr_xr_x(self):
        assert format_permissions(stat.S_IFREG | stat.S_ISUID | 0o755) == "4755"

    def test_plain_file(self):
        assert format_permissions(stat.S_IFREG | 0o644) == "0644"

    def test_sticky_directory(self):
        assert format_permissions(stat.S_IFDIR | stat.S_ISVTX | 0o777) == "1777"

    def test_unknown_mode_renders_sentinel(self):
        assert format_permissions(SENTINEL) == "-1"


class TestRenderField:
    """Test per-code rendering of a record."""

    def test_raw_numbers(self):
        record = FileRecord(path="/x", size=42, inode=7, uid=501, gid=20, mtime=1000)

        assert render_field("S", record) == "42"
        assert render_field("i", record) == "7"
        assert render_field("o", record) == "501"
        assert render_field("g", record) == "20"
        assert render_field("M", record) == "1000"

    def test_human_time_uses_ctime(self):
        record = FileRecord(path="/x", mtime=1000)
        assert render_field("m", record) == time.ctime(1000)

    def test_human_time_prefers_stored_text(self):
        record = FileRecord(path="/x", mtime_text="Thu Jan  1 00:16:40 1970")
        assert render_field("m", record) == "Thu Jan  1 00:16:40 1970"

    def test_type_and_selection(self):
        record = FileRecord(path="/x", type=FileType.DIRECTORY, selected=Selection.YES)

        assert render_field("t", record) == "D"
        assert render_field("e", record) == "y"

    def test_unknown_mode_in_both_mode_columns(self):
        record = FileRecord(path="/x")

        assert render_field("P", record) == "-1"
        assert render_field("T", record) == "-1"

    def test_missing_type_renders_empty(self):
        assert render_field("t", FileRecord(path="/x")) == ""

    def test_delimiter_characters_removed(self):
        record = FileRecord(path="/odd\tname\nwith\rbreaks")
        assert render_field("p", record) == "/oddnamewithbreaks"

    def test_unknown_code_raises(self):
        with pytest.raises(KeyError):
            render_field("z", FileRecord(path="/x"))


class TestSnapshotWriter:
    """Test header and record line layout."""

    def test_header_has_trailing_delimiter(self):
        writer = SnapshotWriter(ColumnSpec.compile("%p %m %c"))
        assert writer.render_header() == "Path\tLast Modified\tLast Mode Change\t\n"

    def test_record_line(self):
        writer = SnapshotWriter(ColumnSpec.compile("%p %S %P"))
        record = FileRecord(path="/a", size=3, mode=stat.S_IFREG | 0o640)

        assert writer.render_record(record) == "/a\t3\t0640\t\n"

    def test_literal_text_is_its_own_column(self):
        writer = SnapshotWriter(ColumnSpec.compile("%p=%S"))

        assert writer.render_header() == "Path\t=\tSize (raw)\t\n"
        assert writer.render_record(FileRecord(path="/a", size=1)) == "/a\t=\t1\t\n"

    def test_custom_delimiters(self):
        writer = SnapshotWriter(ColumnSpec.compile("%p %S"), field_delimiter="|", record_delimiter="%r%n")
        assert writer.render_record(FileRecord(path="/a", size=1)) == "/a|1|\r\n"

    def test_overlong_piece_dropped(self):
        writer = SnapshotWriter(ColumnSpec.compile("%p"), max_record_length=10)
        assert writer.render_record(FileRecord(path="/" + "x" * 20)) == "\t\n"

    def test_write_counts_records(self):
        store = RecordStore(column_template="%p %S")
        store.append(FileRecord(path="/a", size=1))
        store.append(FileRecord(path="/b", size=2))
        buf = io.StringIO()

        count = SnapshotWriter.for_store(store).write(store, buf)

        assert count == 2
        assert buf.getvalue() == "Path\tSize (raw)\t\n/a\t1\t\n/b\t2\t\n"


class TestWriteSnapshot:
    """Test writing snapshot files."""

    def test_writes_file_and_widens_permissions(self, tmp_path: Path):
        store = RecordStore(column_template="%p %S")
        store.append(FileRecord(path="/a", size=1))
        out = tmp_path / "snap.txt"

        dest = write_snapshot(store, out)

        assert dest == str(out)
        assert out.read_text(encoding="utf-8") == "Path\tSize (raw)\t\n/a\t1\t\n"
        assert stat.S_IMODE(os.stat(out).st_mode) & 0o666 == 0o666

    def test_unopenable_path_falls_back_to_stdout(self, tmp_path: Path, capsys):
        store = RecordStore(column_template="%p")
        store.append(FileRecord(path="/a"))

        dest = write_snapshot(store, tmp_path / "missing" / "snap.txt")

        assert dest == STDOUT
        assert "/a\t" in capsys.readouterr().out

    def test_none_writes_stdout(self, capsys):
        store = RecordStore(column_template="%p")
        store.append(FileRecord(path="/a"))

        assert write_snapshot(store) == STDOUT
        assert capsys.readouterr().out == "Path\t\n/a\t\n"
