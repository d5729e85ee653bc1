"""Replicate ownership and permission bits from one tree onto another.

The source tree is walked physically; every node is matched to the node at
the same relative position below the destination. Nodes missing from the
destination are reported and skipped. Nothing is created or deleted.
"""
from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path

from .models import FileRecord, FileType
from .paths import aligned_path, depth
from .scanner.traverser import TraversalOptions, Traverser

logger = logging.getLogger(__name__)


@dataclass
class CloneStats:
    visited: int = 0
    changed: int = 0
    missing: int = 0
    errors: int = 0


def _directory(path: str | Path, role: str) -> str:
    resolved = os.path.realpath(os.fspath(path))
    if not os.path.exists(resolved):
        raise ValueError(f"Can't find {role} {path}")
    if not os.path.isdir(resolved):
        raise ValueError(f"{role.capitalize()} path must be a directory: {path}")
    return resolved


class PermissionCloner:
    def __init__(self, source: str | Path, destination: str | Path, warn_on_missing: bool = False) -> None:
        self.source = _directory(source, "source")
        self.destination = _directory(destination, "destination")
        self.warn_on_missing = warn_on_missing

    def _target_stat(self, target: str, stats: CloneStats) -> os.stat_result | None:
        try:
            return os.lstat(target)
        except FileNotFoundError:
            stats.missing += 1
            if self.warn_on_missing:
                logger.warning(f"[MISSING_T]: {target}")
            else:
                logger.info(f"[MISSING_T]: {target}")
        except OSError as e:
            stats.errors += 1
            logger.error(f"{target}: {e.strerror or e}")
        return None

    def _apply(self, record: FileRecord, target: str, current: os.stat_result, stats: CloneStats) -> bool:
        is_link = record.type is FileType.LINK
        changed = False

        if record.uid != current.st_uid:
            logger.warning(f"Changing owner on {target}")
            changed = True
            try:
                os.chown(target, record.uid, -1, follow_symlinks=False)
            except OSError as e:
                stats.errors += 1
                logger.error(f"{target}: {e.strerror or e}")

        if record.gid != current.st_gid:
            logger.warning(f"Changing group on {target}")
            changed = True
            try:
                os.chown(target, -1, record.gid, follow_symlinks=False)
            except OSError as e:
                stats.errors += 1
                logger.error(f"{target}: {e.strerror or e}")

        wanted = stat.S_IMODE(record.mode)
        if not is_link and wanted != stat.S_IMODE(current.st_mode):
            logger.warning(f"Changing mode on {target}")
            changed = True
            try:
                os.chmod(target, wanted)
            except OSError as e:
                stats.errors += 1
                logger.error(f"{target}: {e.strerror or e}")

        return changed

    def run(self) -> CloneStats:
        stats = CloneStats()
        traverser = Traverser(self.source, options=TraversalOptions(cross_device=True))
        for record in traverser.walk():
            stats.visited += 1
            target = aligned_path(record.path, depth(self.source, record.path), self.destination)
            current = self._target_stat(target, stats)
            if current is None:
                continue
            if self._apply(record, target, current, stats):
                stats.changed += 1

        stats.errors += traverser.errors
        logger.info(f"Visited {stats.visited} files, changed {stats.changed} files.")
        return stats
