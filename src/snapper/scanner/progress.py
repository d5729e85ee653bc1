from __future__ import annotations

import sys
from typing import IO

PROGRESS_EVERY = 10_000


class StatusPrinter:
    """Human-facing status output on stderr, silenced in quiet mode.

    Progress updates erase the previous update with backspaces, so the
    counter overwrites itself in place on a terminal.
    """

    def __init__(self, stream: IO[str] | None = None, quiet: bool = False, every: int = PROGRESS_EVERY) -> None:
        self._stream = stream
        self.quiet = quiet
        self.every = every
        self._last_status = 0

    @property
    def stream(self) -> IO[str]:
        return self._stream if self._stream is not None else sys.stderr

    def message(self, text: str) -> None:
        if self.quiet:
            return
        self.stream.write(text)
        self.stream.flush()
        self._last_status = 0

    def status(self, text: str) -> None:
        if self.quiet:
            return
        self.stream.write("\b" * self._last_status + text)
        self.stream.flush()
        self._last_status = len(text)

    def tick(self, visited: int) -> None:
        if visited % self.every == 0:
            self.status(f"{visited // 1000}k files scanned...")
