"""snapper: filesystem snapshot engine.

Walks a directory tree once, records each entity's metadata, and writes a
self-describing, column-templated text snapshot that can be read back,
re-sorted, compared against a later snapshot, or used to clone ownership
and permissions onto another tree.

Public API:
- SnapConfig
- Scanner
- read_snapshot / write_snapshot
- compare_stores
- PermissionCloner
"""

from .compare import compare_stores
from .config import SnapConfig
from .permclone import PermissionCloner
from .scanner.scanner import Scanner
from .snapshot.reader import read_snapshot
from .snapshot.writer import write_snapshot

__all__ = [
    "SnapConfig",
    "Scanner",
    "read_snapshot",
    "write_snapshot",
    "compare_stores",
    "PermissionCloner",
]
