"""
Tests for SnapConfig parsing and validation.
"""

import dataclasses
from pathlib import Path

import pytest

from snapper.config import SnapConfig, load_config


class TestSnapConfig:
    """Test defaults, path expansion and validation."""

    def test_defaults(self):
        cfg = SnapConfig()

        assert cfg.scan_path == Path("/")
        assert cfg.output_path is None
        assert cfg.ignore == []
        assert cfg.column_template == "%p %m %c"
        assert cfg.field_delimiter == "%t"
        assert cfg.record_delimiter == "%n"
        assert cfg.sort_token is None
        assert cfg.cross_device is False
        assert cfg.skip_directories is False

    def test_string_paths_expanded(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("SNAP_HOME", str(tmp_path))
        cfg = SnapConfig(scan_path="$SNAP_HOME/data", output_path="$SNAP_HOME/out.txt")

        assert cfg.scan_path == tmp_path / "data"
        assert cfg.output_path == tmp_path / "out.txt"

    @pytest.mark.parametrize("token", ["s", "S", "a", "m", "C", "i", "o", "G", "p", "P"])
    def test_valid_sort_tokens(self, token):
        assert SnapConfig(sort_token=token).sort_token == token

    def test_invalid_sort_token(self):
        with pytest.raises(ValueError, match="sort token"):
            SnapConfig(sort_token="x")

    def test_empty_template(self):
        with pytest.raises(ValueError, match="column template"):
            SnapConfig(column_template="  ")

    def test_non_positive_record_length(self):
        with pytest.raises(ValueError, match="max_record_length"):
            SnapConfig(max_record_length=0)

    def test_invalid_log_level(self):
        with pytest.raises(ValueError, match="log level"):
            SnapConfig(log_level="LOUD")

    def test_replace_revalidates(self):
        with pytest.raises(ValueError):
            dataclasses.replace(SnapConfig(), sort_token="?")

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            SnapConfig().quiet = True  # type: ignore[misc]


class TestLoadConfig:
    """Test loading SnapConfig from TOML."""

    def test_full_file(self, tmp_path: Path):
        cfg_file = tmp_path / "snapper.toml"
        cfg_file.write_text(f"""
[scan]
path = "{tmp_path}"
output = "{tmp_path}/snap.txt"
ignore = ["/dev", ".svn"]
all_devices = true
skip_directories = true
sort = "S"

[format]
columns = "%p %S %P"
field_delimiter = "|"
record_delimiter = "%r%n"
max_record_length = 512

[output]
quiet = true

[logging]
level = "DEBUG"
file = "snapper-{{date}}.log"
""", encoding="utf-8")

        cfg = load_config(cfg_file)

        assert cfg.scan_path == tmp_path
        assert cfg.output_path == tmp_path / "snap.txt"
        assert cfg.ignore == ["/dev", ".svn"]
        assert cfg.cross_device is True
        assert cfg.skip_directories is True
        assert cfg.sort_token == "S"
        assert cfg.column_template == "%p %S %P"
        assert cfg.field_delimiter == "|"
        assert cfg.record_delimiter == "%r%n"
        assert cfg.max_record_length == 512
        assert cfg.quiet is True
        assert cfg.log_level == "DEBUG"
        assert cfg.log_file == "snapper-{date}.log"

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        cfg_file = tmp_path / "snapper.toml"
        cfg_file.write_text("", encoding="utf-8")

        assert load_config(cfg_file) == SnapConfig()

    def test_none_gives_defaults(self):
        assert load_config(None) == SnapConfig()

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ValueError, match="not found"):
            load_config(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path: Path):
        cfg_file = tmp_path / "snapper.toml"
        cfg_file.write_text("[scan\npath = ", encoding="utf-8")

        with pytest.raises(ValueError):
            load_config(cfg_file)

    def test_invalid_value_in_file(self, tmp_path: Path):
        cfg_file = tmp_path / "snapper.toml"
        cfg_file.write_text('[scan]\nsort = "q"\n', encoding="utf-8")

        with pytest.raises(ValueError, match="sort token"):
            load_config(cfg_file)
