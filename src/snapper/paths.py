from __future__ import annotations

import os


def depth(root: str, path: str) -> int:
    """Number of path components ``path`` lies below ``root`` (0 for the root)."""
    rel = os.path.relpath(path, root)
    if rel == os.curdir:
        return 0
    return len(rel.split(os.sep))


def aligned_path(path: str, level: int, destination: str) -> str:
    """Map ``path`` at ``level`` onto ``destination`` by its last ``level`` components.

    ``aligned_path("/src/a/b", 2, "/dst")`` is ``"/dst/a/b"``; level 0 maps
    to ``destination`` itself.
    """
    if level <= 0:
        return destination
    suffix = path.rstrip("/").rsplit("/", level)[1:]
    return "/".join([destination.rstrip("/"), *suffix])
