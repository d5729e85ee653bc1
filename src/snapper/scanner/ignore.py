from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from ..store.growable import GrowableArray

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IgnoreRule:
    """A single ignore rule.

    Rules starting with ``/`` are absolute paths and match the full path of
    a node; anything else matches the node's name (last path component).
    Matching is exact: ``/dev`` ignores only ``/dev``, not ``/Users/dev``,
    and ``.svn`` ignores only entries named exactly ``.svn``.
    """

    pattern: str

    @property
    def is_absolute(self) -> bool:
        return self.pattern.startswith("/")

    def matches(self, path: str, name: str) -> bool:
        if self.is_absolute:
            return path == self.pattern
        return name == self.pattern


def _normalize(rule: str) -> str:
    if rule.startswith("/") and len(rule) > 1:
        return rule.rstrip("/") or "/"
    return rule


class IgnoreMatcher:
    """Immutable set of ignore rules consulted once per node during a walk."""

    def __init__(self, rules: Iterable[str] = ()) -> None:
        self._rules: GrowableArray[IgnoreRule] = GrowableArray(initial_capacity=10, chunk_size=5)
        for rule in rules:
            if not rule:
                logger.warning("Discarding empty ignore rule")
                continue
            self._rules.append(IgnoreRule(_normalize(rule)))
            logger.debug(f"Ignore rule added: {rule}")

    def should_ignore(self, path: str, name: str) -> bool:
        """True if the node (and, for a directory, its subtree) must be skipped."""
        for rule in self._rules:
            if rule.matches(path, name):
                return True
        return False

    @property
    def rules(self) -> tuple[IgnoreRule, ...]:
        return tuple(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[IgnoreRule]:
        return iter(self._rules)
