"""Physical (non-symlink-following) filesystem walk producing FileRecords."""
from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from typing import Callable, Iterator

from ..models import FileRecord
from .ignore import IgnoreMatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraversalOptions:
    cross_device: bool = False
    skip_directories: bool = False


class Traverser:
    """Walks ``root`` once, depth first, children in name order.

    Ignored nodes are pruned together with their subtree. Unreadable
    directories are still recorded; the listing error is logged and the
    walk continues. Nodes that cannot be stat'ed are logged and skipped.
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        matcher: IgnoreMatcher | None = None,
        options: TraversalOptions = TraversalOptions(),
        on_visit: Callable[[int], None] | None = None,
    ) -> None:
        self.root = os.path.abspath(os.fspath(root))
        self.matcher = matcher or IgnoreMatcher()
        self.options = options
        self.on_visit = on_visit
        self.visited = 0
        self.skipped = 0
        self.errors = 0

    def _report(self, path: str, error: OSError) -> None:
        self.errors += 1
        logger.error(f"{path}: {error.strerror or error}")

    def _children(self, directory: str) -> list[tuple[str, str, os.stat_result]]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            self._report(directory, e)
            return []

        children: list[tuple[str, str, os.stat_result]] = []
        for entry in entries:
            try:
                st = entry.stat(follow_symlinks=False)
            except OSError as e:
                self._report(entry.path, e)
                continue
            children.append((entry.path, entry.name, st))
        return children

    def walk(self) -> Iterator[FileRecord]:
        self.visited = self.skipped = self.errors = 0
        try:
            root_st = os.lstat(self.root)
        except OSError as e:
            self._report(self.root, e)
            return

        root_dev = root_st.st_dev
        root_name = os.path.basename(self.root) or self.root
        stack: list[tuple[str, str, os.stat_result]] = [(self.root, root_name, root_st)]

        while stack:
            path, name, st = stack.pop()
            self.visited += 1
            if self.on_visit is not None:
                self.on_visit(self.visited)

            if self.matcher.should_ignore(path, name):
                logger.info(f"Found {path}, which is on the ignore list. Ignoring it and its children.")
                self.skipped += 1
                continue

            is_dir = stat.S_ISDIR(st.st_mode)
            if is_dir and self.options.skip_directories:
                self.skipped += 1
            else:
                logger.debug(f"Visiting: {path}")
                yield FileRecord.from_stat(path, st)

            if not is_dir:
                continue
            if not self.options.cross_device and st.st_dev != root_dev:
                logger.info(f"Not descending into {path}: different device")
                continue
            # Reversed so the first child by name is popped first.
            stack.extend(reversed(self._children(path)))
