"""Order a RecordStore by one numeric field.

The sort token is a single field letter: lower case sorts ascending, upper
case descending (big letter, big values first). Path tokens, or no token
at all, keep the order the walk produced.
"""
from __future__ import annotations

import logging
from functools import cmp_to_key
from typing import Callable

from .models import FileRecord
from .store.record_store import RecordStore

logger = logging.getLogger(__name__)

SORT_FIELDS: dict[str, str] = {
    "s": "size",
    "a": "atime",
    "m": "mtime",
    "c": "ctime",
    "i": "inode",
    "o": "uid",
    "g": "gid",
}

PATH_TOKENS = frozenset("pP")

VALID_TOKENS = frozenset(SORT_FIELDS) | frozenset(k.upper() for k in SORT_FIELDS) | PATH_TOKENS


def make_comparator(token: str) -> Callable[[FileRecord, FileRecord], int] | None:
    """Return a -1/0/1 comparator for ``token``, or ``None`` if it does not sort."""
    attr = SORT_FIELDS.get(token.lower())
    if attr is None or token in PATH_TOKENS:
        return None
    descending = token.isupper()

    def compare(left: FileRecord, right: FileRecord) -> int:
        if descending:
            left, right = right, left
        a = getattr(left, attr)
        b = getattr(right, attr)
        if a > b:
            return 1
        if a < b:
            return -1
        return 0

    return compare


def sort_records(store: RecordStore, token: str | None) -> bool:
    """Sort ``store`` in place. Returns True when a sort was performed."""
    if not token or token in PATH_TOKENS:
        return False
    comparator = make_comparator(token)
    if comparator is None:
        logger.warning(f"Unknown sort token {token!r}; keeping traversal order")
        return False
    store.sort(key=cmp_to_key(comparator))
    logger.info(f"Sorted {len(store)} records by {SORT_FIELDS[token.lower()]} "
                f"({'descending' if token.isupper() else 'ascending'})")
    return True
