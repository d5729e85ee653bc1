from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from enum import Enum

# Numeric fields that are absent or unparsable hold this value.
SENTINEL = -1


class FileType(str, Enum):
    """Single-letter classification of a filesystem entity."""

    DIRECTORY = "D"
    LINK = "L"
    SOCKET = "S"
    FIFO = "U"
    BLOCK = "B"
    CHAR = "C"
    REGULAR = "F"
    OTHER = "X"

    @classmethod
    def from_mode(cls, mode: int) -> "FileType":
        """Classify ``st_mode`` bits; the order of checks is significant."""
        if stat.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat.S_ISLNK(mode):
            return cls.LINK
        if stat.S_ISSOCK(mode):
            return cls.SOCKET
        if stat.S_ISFIFO(mode):
            return cls.FIFO
        if stat.S_ISBLK(mode):
            return cls.BLOCK
        if stat.S_ISCHR(mode):
            return cls.CHAR
        if stat.S_ISREG(mode):
            return cls.REGULAR
        return cls.OTHER

    @classmethod
    def from_letter(cls, text: str) -> "FileType | None":
        if not text:
            return None
        try:
            return cls(text[0])
        except ValueError:
            return cls.OTHER


class Selection(str, Enum):
    """Tri-state flag used by downstream tools that pick records."""

    YES = "y"
    NO = "n"
    UNDETERMINED = "u"

    @classmethod
    def from_letter(cls, text: str) -> "Selection":
        if text[:1] == "y":
            return cls.YES
        if text[:1] == "n":
            return cls.NO
        return cls.UNDETERMINED


@dataclass
class FileRecord:
    """One inventoried filesystem entity.

    Records built from a live walk carry epoch timestamps; records parsed
    back from a snapshot that only stored human-readable times carry the
    ``*_text`` variants instead and keep the epoch fields at ``SENTINEL``.
    """

    path: str | None = None
    atime: int = SENTINEL
    atime_text: str | None = None
    mtime: int = SENTINEL
    mtime_text: str | None = None
    ctime: int = SENTINEL
    ctime_text: str | None = None
    size: int = SENTINEL
    inode: int = SENTINEL
    uid: int = SENTINEL
    gid: int = SENTINEL
    mode: int = SENTINEL
    type: FileType | None = None
    selected: Selection = Selection.UNDETERMINED

    @property
    def name(self) -> str:
        """Last path component (the path itself for the filesystem root)."""
        if not self.path:
            return ""
        return os.path.basename(self.path.rstrip("/")) or self.path

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result) -> "FileRecord":
        return cls(
            path=path,
            atime=int(st.st_atime),
            mtime=int(st.st_mtime),
            ctime=int(st.st_ctime),
            size=int(st.st_size),
            inode=int(st.st_ino),
            uid=int(st.st_uid),
            gid=int(st.st_gid),
            mode=int(st.st_mode),
            type=FileType.from_mode(st.st_mode),
        )
