from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import os
import tomllib

from .snapshot.columns import DEFAULT_FIELD_DELIMITER, DEFAULT_RECORD_DELIMITER, DEFAULT_TEMPLATE
from .snapshot.writer import MAX_RECORD_LENGTH
from .sorter import VALID_TOKENS

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _expand(p: str) -> str:
    return os.path.expandvars(os.path.expanduser(p))


@dataclass(frozen=True)
class SnapConfig:
    """Settings for one scan.

    Passed explicitly to the scanner and writer; nothing here is global.
    """

    scan_path: Path = Path("/")
    output_path: Path | None = None
    ignore: list[str] = field(default_factory=list)

    # Format
    column_template: str = DEFAULT_TEMPLATE
    field_delimiter: str = DEFAULT_FIELD_DELIMITER
    record_delimiter: str = DEFAULT_RECORD_DELIMITER
    max_record_length: int = MAX_RECORD_LENGTH

    # Walk
    sort_token: str | None = None
    cross_device: bool = False
    skip_directories: bool = False

    # Output / logging
    quiet: bool = False
    log_level: str = "WARNING"
    log_file: str | None = None

    def __post_init__(self):
        """Expand ~ and environment variables in paths and validate values."""
        if isinstance(self.scan_path, str):
            object.__setattr__(self, 'scan_path', Path(_expand(self.scan_path)))
        if isinstance(self.output_path, str):
            object.__setattr__(self, 'output_path', Path(_expand(self.output_path)))
        if self.log_file:
            object.__setattr__(self, 'log_file', _expand(self.log_file))

        if self.sort_token is not None and self.sort_token not in VALID_TOKENS:
            raise ValueError(
                f"Invalid sort token: {self.sort_token!r}. Must be one of {''.join(sorted(VALID_TOKENS))}."
            )
        if not self.column_template.strip():
            raise ValueError("Invalid column template: must not be empty.")
        if not self.field_delimiter or not self.record_delimiter:
            raise ValueError("Invalid delimiters: field and record delimiters must not be empty.")
        if self.max_record_length <= 0:
            raise ValueError(f"Invalid max_record_length: {self.max_record_length}. Must be positive.")
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}. Must be one of {VALID_LOG_LEVELS}.")

    @staticmethod
    def from_toml(path: str | Path) -> "SnapConfig":
        data = tomllib.loads(Path(path).read_text(encoding="utf-8"))
        scan = data.get("scan", {})
        fmt = data.get("format", {})
        output = data.get("output", {})
        log = data.get("logging", {})

        output_path = scan.get("output")

        return SnapConfig(
            scan_path=Path(_expand(scan.get("path", "/"))),
            output_path=Path(_expand(output_path)) if output_path else None,
            ignore=list(scan.get("ignore", [])),
            column_template=fmt.get("columns", DEFAULT_TEMPLATE),
            field_delimiter=fmt.get("field_delimiter", DEFAULT_FIELD_DELIMITER),
            record_delimiter=fmt.get("record_delimiter", DEFAULT_RECORD_DELIMITER),
            max_record_length=int(fmt.get("max_record_length", MAX_RECORD_LENGTH)),
            sort_token=scan.get("sort") or None,
            cross_device=bool(scan.get("all_devices", False)),
            skip_directories=bool(scan.get("skip_directories", False)),
            quiet=bool(output.get("quiet", False)),
            log_level=str(log.get("level", "WARNING")),
            log_file=log.get("file"),
        )


def load_config(path: str | Path | None) -> SnapConfig:
    """Load a SnapConfig from TOML, or the defaults when no file is given."""
    if path is None:
        return SnapConfig()
    p = Path(path)
    if not p.is_file():
        raise ValueError(f"Config file not found: {p}")
    return SnapConfig.from_toml(p)
