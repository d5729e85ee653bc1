from __future__ import annotations

import dataclasses
import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import NoReturn

import typer

from .compare import compare_stores
from .config import SnapConfig, load_config
from .permclone import PermissionCloner
from .scanner.scanner import Scanner
from .snapshot.reader import SnapshotFormatError, read_snapshot
from .snapshot.writer import write_snapshot
from .sorter import VALID_TOKENS, sort_records

app = typer.Typer(add_completion=False, no_args_is_help=True)

logger = logging.getLogger(__name__)


def _resolve_log_path(log_path_template: str | None) -> str | None:
    """Expand ``{date}`` and ``{datetime}`` in a scan log path and create its directory.

    One log per scan day (``snapper_{date}.log``) or per run
    (``snapper_{datetime}.log``) is the usual choice.
    """
    if not log_path_template:
        return None

    started = datetime.now()
    log_path = Path(
        log_path_template
        .replace("{datetime}", started.strftime("%Y%m%d_%H%M%S"))
        .replace("{date}", started.strftime("%Y%m%d"))
    )
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return str(log_path)


def _setup_logging(log_file: str | None, log_level: str, verbose: bool) -> None:
    """Configure the snapper logger. Only called when verbose or a log file is requested."""
    level = getattr(logging, log_level.upper(), logging.WARNING)
    if verbose:
        level = min(level, logging.INFO)

    fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    handlers: list[logging.Handler] = []

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(fmt, datefmt))
    handlers.append(console)

    if log_file:
        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5
        )
        file_handler.setFormatter(logging.Formatter(fmt, datefmt))
        handlers.append(file_handler)

    root = logging.getLogger("snapper")
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)


def _warn_if_not_root(action: str) -> None:
    if os.geteuid() != 0:
        logger.warning(f"Not running as root: {action} may be incomplete.")


def _cfg(config: str | None) -> SnapConfig:
    try:
        return load_config(config)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


@app.command()
def init(out: str = typer.Option("snapper.toml", help="Write example config to this path"),
         path: str = typer.Option("/", help="Tree to scan")):
    """Write a starter snapper.toml."""
    outp = Path(out)
    outp.write_text(f"""[scan]
path = {json.dumps(path)}
# output = "/var/tmp/snapshot.txt"   # stdout when unset
ignore = ["/dev", "/proc", "/Volumes", ".svn", ".git"]
all_devices = false
skip_directories = false
# sort = "S"   # s a m c i o g, upper case for descending

[format]
columns = "%p %m %c"
field_delimiter = "%t"
record_delimiter = "%n"

[output]
quiet = false

[logging]
level = "WARNING"
# file = "logs/snapper_{{date}}.log"
""", encoding="utf-8")
    typer.echo(f"Wrote {outp}")


@app.command()
def scan(
    config: str = typer.Option(None, "--config", help="TOML config file"),
    path: str = typer.Option(None, "--path", "-p", help="Tree to scan (default: /)"),
    output: str = typer.Option(None, "--output", "-o", help="Snapshot file (default: stdout)"),
    ignore: list[str] = typer.Option(None, "--ignore", "-i", help="Absolute path or name to skip (repeatable)"),
    columns: str = typer.Option(None, "--columns", "-c", help="Column template, e.g. '%p %S %P'"),
    field_delimiter: str = typer.Option(None, "--field-delimiter", "-f", help="Field delimiter (%t, %r, %n escapes)"),
    record_delimiter: str = typer.Option(None, "--record-delimiter", "-r", help="Record delimiter"),
    sort: str = typer.Option(None, "--sort", "-s", help="Sort field s a m c i o g; upper case descending"),
    all_devices: bool = typer.Option(None, "--all-devices/--one-device", "-a", help="Descend into other filesystems"),
    skip_directories: bool = typer.Option(None, "--skip-directories/--record-directories", "-D",
                                          help="Walk directories without recording them"),
    quiet: bool = typer.Option(None, "--quiet/--no-quiet", "-q", help="Suppress status output"),
    log_file: str = typer.Option(None, "--log-file", "-l", help="Log file path (supports {date}, {datetime})"),
    log_level: str = typer.Option(None, "--log-level", help="Log level: DEBUG, INFO, WARNING, ERROR"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose (INFO) logging"),
):
    """Walk a tree and write a snapshot."""
    cfg = _cfg(config)

    overrides: dict[str, object] = {}
    if path is not None:
        overrides["scan_path"] = Path(path)
    if output is not None:
        overrides["output_path"] = Path(output)
    if ignore:
        overrides["ignore"] = [*cfg.ignore, *ignore]
    if columns is not None:
        overrides["column_template"] = columns
    if field_delimiter is not None:
        overrides["field_delimiter"] = field_delimiter
    if record_delimiter is not None:
        overrides["record_delimiter"] = record_delimiter
    if sort is not None:
        overrides["sort_token"] = sort
    if all_devices is not None:
        overrides["cross_device"] = all_devices
    if skip_directories is not None:
        overrides["skip_directories"] = skip_directories
    if quiet is not None:
        overrides["quiet"] = quiet
    if log_file is not None:
        overrides["log_file"] = log_file
    if log_level is not None:
        overrides["log_level"] = log_level
    try:
        cfg = dataclasses.replace(cfg, **overrides)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    # Determine log file: CLI flag > config setting > None
    effective_log_file = _resolve_log_path(cfg.log_file)
    if verbose or effective_log_file:
        _setup_logging(effective_log_file, cfg.log_level, verbose)

    _warn_if_not_root("the scan")
    Scanner(cfg).run()


@app.command()
def show(
    snapshot: str = typer.Argument(..., help="Snapshot file to read"),
    columns: str = typer.Option(None, "--columns", "-c", help="Re-render with this column template"),
    sort: str = typer.Option(None, "--sort", "-s", help="Sort field s a m c i o g; upper case descending"),
    output: str = typer.Option(None, "--output", "-o", help="Write here instead of stdout"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose (INFO) logging"),
):
    """Read a snapshot and write it back out, optionally re-sorted or re-templated."""
    if verbose:
        _setup_logging(None, "INFO", verbose)
    if sort is not None and sort not in VALID_TOKENS:
        raise typer.BadParameter(f"Invalid sort token: {sort!r}")
    if columns is not None and not columns.strip():
        raise typer.BadParameter("Column template must not be empty")

    try:
        store = read_snapshot(snapshot)
    except (OSError, SnapshotFormatError) as e:
        _fail(f"{snapshot}: {e}")

    if columns is not None:
        store.column_template = columns
    sort_records(store, sort)
    write_snapshot(store, output)


@app.command()
def compare(
    before: str = typer.Argument(..., help="Earlier snapshot"),
    after: str = typer.Argument(..., help="Later snapshot"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose (INFO) logging"),
):
    """Report paths added, removed and changed between two snapshots."""
    if verbose:
        _setup_logging(None, "INFO", verbose)
    stores = []
    for snapshot in (before, after):
        try:
            stores.append(read_snapshot(snapshot))
        except (OSError, SnapshotFormatError) as e:
            _fail(f"{snapshot}: {e}")

    diff = compare_stores(*stores)
    for line in diff.report():
        typer.echo(line)


@app.command()
def clone(
    source: str = typer.Option(..., "--source", "-s", help="Directory to copy ownership and modes from"),
    destination: str = typer.Option(..., "--destination", "-d", help="Directory to apply them to"),
    warn_missing: bool = typer.Option(False, "--warn-missing", "-w",
                                      help="Warn about nodes present in source but not destination"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose (INFO) logging"),
):
    """Clone owner, group and permission bits from SOURCE onto DESTINATION."""
    if verbose:
        _setup_logging(None, "INFO", verbose)
    try:
        cloner = PermissionCloner(source, destination, warn_on_missing=warn_missing)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    _warn_if_not_root("ownership changes")
    stats = cloner.run()
    typer.echo(f"Visited {stats.visited} files, changed {stats.changed} files.")
    if stats.missing:
        typer.echo(f"  ({stats.missing} missing from destination)")
    if stats.errors:
        typer.echo(f"  ({stats.errors} errors)")


if __name__ == "__main__":
    app()
