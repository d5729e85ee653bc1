"""Scan pipeline: walk, collect, sort, write."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from ..config import SnapConfig
from ..snapshot.writer import write_snapshot
from ..sorter import sort_records
from ..store.record_store import RecordStore
from .ignore import IgnoreMatcher
from .progress import StatusPrinter
from .traverser import TraversalOptions, Traverser
from .types import ScanStats

logger = logging.getLogger(__name__)


@dataclass
class Scanner:
    cfg: SnapConfig
    status: StatusPrinter | None = None

    def __post_init__(self) -> None:
        if self.status is None:
            self.status = StatusPrinter(quiet=self.cfg.quiet)

    def _traverser(self) -> Traverser:
        return Traverser(
            self.cfg.scan_path,
            matcher=IgnoreMatcher(self.cfg.ignore),
            options=TraversalOptions(
                cross_device=self.cfg.cross_device,
                skip_directories=self.cfg.skip_directories,
            ),
            on_visit=self.status.tick,
        )

    def scan(self) -> tuple[RecordStore, ScanStats]:
        """Walk the configured tree into a new RecordStore."""
        store = RecordStore(
            column_template=self.cfg.column_template,
            field_delimiter=self.cfg.field_delimiter,
            record_delimiter=self.cfg.record_delimiter,
        )
        traverser = self._traverser()

        self.status.message(f"Beginning scan: {traverser.root}\n")
        logger.info(f"Scanning {traverser.root}")
        start = time.time()
        for record in traverser.walk():
            store.append(record)
        elapsed = time.time() - start
        self.status.message("\n")

        stats = ScanStats(
            files_visited=traverser.visited,
            files_skipped=traverser.skipped,
            records=len(store),
            errors=traverser.errors,
            elapsed_seconds=elapsed,
        )
        logger.info(
            f"Scan complete: {stats.records} records, {stats.files_skipped} skipped, "
            f"{stats.errors} errors in {elapsed:.2f}s"
        )
        if store.grow_events:
            logger.debug(f"Record store grew {store.grow_events} times to {store.capacity} slots")
        return store, stats

    def run(self) -> ScanStats:
        """Scan, sort if requested, write the snapshot, print the rate line."""
        store, stats = self.scan()

        if self.cfg.sort_token:
            self.status.message("Sorting...")
            stats.sorted = sort_records(store, self.cfg.sort_token)
            self.status.message("Done!\n")

        self.status.message("Writing file...")
        stats.destination = write_snapshot(
            store, self.cfg.output_path, max_record_length=self.cfg.max_record_length
        )
        self.status.message("Done.\n")

        self.status.message(
            f"Scanned {stats.files_visited} files in {stats.elapsed_seconds:.2f} seconds "
            f"for an effective rate of {stats.rate:.1f} files/s\n"
        )
        return stats
