"""Data classes for scan results."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScanStats:
    """Statistics from a scan operation."""

    files_visited: int = 0
    files_skipped: int = 0
    records: int = 0
    errors: int = 0
    sorted: bool = False
    destination: str | None = None
    elapsed_seconds: float = 0.0

    @property
    def rate(self) -> float:
        """Files visited per second (0.0 for an instantaneous scan)."""
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.files_visited / self.elapsed_seconds
