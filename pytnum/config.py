"""Configuration system for pytnum.
Supports TOML configuration files at project and user level. The analysis
bounds of both drivers live here; the domain itself has no configuration.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from pytnum.core.bits import MASK64
from pytnum.core.exceptions import ConfigError

CONFIG_FILES = [
    "pytnum.toml",
    ".pytnum.toml",
    "pyproject.toml",
]

OUTPUT_FORMATS = ("text", "json")
DIVIDER_WIDTHS = (32, 64)


@dataclass
class CompareConfig:
    """Bounds of the exhaustive precision comparison."""

    max_value: int = 4095
    divisor_min: int = 0
    divisor_max: int = 4095
    workers: int = 1
    chunk_size: int = 64
    incomparable_samples: int = 10

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def validate(self) -> None:
        _check_word("compare.max_value", self.max_value)
        _check_word("compare.divisor_min", self.divisor_min)
        _check_word("compare.divisor_max", self.divisor_max)
        _check_order("compare.divisor_max", self.divisor_min, self.divisor_max)
        _check_positive("compare.workers", self.workers)
        _check_positive("compare.chunk_size", self.chunk_size)
        _check_word("compare.incomparable_samples", self.incomparable_samples)


@dataclass
class RefuteConfig:
    """Bounds and solver settings of the soundness refutation."""

    dividend_min: int = 0
    dividend_max: int = 64
    divisor_min: int = 1
    divisor_max: int = 64
    timeout_ms: int = 30000
    divider_width: int = 64
    symbolic_dividends: bool = False
    mask_max: int = 15

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def validate(self) -> None:
        _check_word("refute.dividend_min", self.dividend_min)
        _check_word("refute.dividend_max", self.dividend_max)
        _check_order("refute.dividend_max", self.dividend_min, self.dividend_max)
        _check_word("refute.divisor_min", self.divisor_min)
        _check_word("refute.divisor_max", self.divisor_max)
        _check_order("refute.divisor_max", self.divisor_min, self.divisor_max)
        _check_positive("refute.timeout_ms", self.timeout_ms)
        if self.divider_width not in DIVIDER_WIDTHS:
            raise ConfigError(
                "refute.divider_width", self.divider_width, f"must be one of {DIVIDER_WIDTHS}"
            )
        if not isinstance(self.symbolic_dividends, bool):
            raise ConfigError(
                "refute.symbolic_dividends", self.symbolic_dividends, "must be a boolean"
            )
        _check_word("refute.mask_max", self.mask_max)


@dataclass
class OutputConfig:
    """Configuration for output and reporting."""

    format: str = "text"
    color: bool = True
    verbose: bool = False
    show_timing: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def validate(self) -> None:
        if self.format not in OUTPUT_FORMATS:
            raise ConfigError("output.format", self.format, f"must be one of {OUTPUT_FORMATS}")
        for key in ("color", "verbose", "show_timing"):
            if not isinstance(getattr(self, key), bool):
                raise ConfigError(f"output.{key}", getattr(self, key), "must be a boolean")


def _check_word(key: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(key, value, "must be an integer")
    if value < 0:
        raise ConfigError(key, value, "must not be negative")
    if value > MASK64:
        raise ConfigError(key, value, "must fit in a 64-bit word")


def _check_positive(key: str, value: Any) -> None:
    _check_word(key, value)
    if value == 0:
        raise ConfigError(key, value, "must be positive")


def _check_order(key: str, low: int, high: int) -> None:
    if low > high:
        raise ConfigError(key, high, f"upper bound is below the lower bound {low}")


@dataclass
class PyTnumConfig:
    """Main configuration for pytnum."""

    compare: CompareConfig = field(default_factory=CompareConfig)
    refute: RefuteConfig = field(default_factory=RefuteConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    config_file: Path | None = None

    def validate(self) -> None:
        """Raise ``ConfigError`` for the first invalid value."""
        self.compare.validate()
        self.refute.validate()
        self.output.validate()

    def to_dict(self) -> dict[str, Any]:
        return {
            "compare": self.compare.to_dict(),
            "refute": self.refute.to_dict(),
            "output": self.output.to_dict(),
        }

    def to_toml(self) -> str:
        """Generate TOML configuration string."""
        lines = []
        for section, values in self.to_dict().items():
            lines.append(f"[{section}]")
            for key, value in values.items():
                if isinstance(value, bool):
                    lines.append(f"{key} = {str(value).lower()}")
                elif isinstance(value, str):
                    lines.append(f'{key} = "{value}"')
                else:
                    lines.append(f"{key} = {value}")
            lines.append("")
        return "\n".join(lines)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find configuration file by walking up directory tree.
    A ``pyproject.toml`` only counts when it has a ``[tool.pytnum]`` table.
    """
    if start_dir is None:
        start_dir = Path.cwd()
    current = start_dir.resolve()
    for directory in (current, *current.parents):
        for config_name in CONFIG_FILES:
            config_path = directory / config_name
            if not config_path.is_file():
                continue
            if config_name == "pyproject.toml" and not _has_tool_table(config_path):
                continue
            return config_path
    home = Path.home()
    for config_name in [".pytnum.toml", "pytnum.toml"]:
        config_path = home / config_name
        if config_path.is_file():
            return config_path
    return None


def _has_tool_table(path: Path) -> bool:
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return "pytnum" in data.get("tool", {})


def load_config(
    config_path: Path | None = None,
    start_dir: Path | None = None,
) -> PyTnumConfig:
    """Load configuration from file or use defaults.
    Args:
        config_path: Explicit path to config file
        start_dir: Directory to start searching for config
    Returns:
        Loaded and validated configuration
    Raises:
        ConfigError: the file cannot be parsed or holds an invalid value
    """
    config = PyTnumConfig()
    if config_path is None:
        config_path = find_config_file(start_dir)
    if config_path is None:
        return config
    if not config_path.exists():
        raise ConfigError("config_file", str(config_path), "file does not exist")
    config.config_file = config_path
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError("config_file", str(config_path), f"invalid TOML: {e}") from e
    if config_path.name == "pyproject.toml":
        tnum_data = data.get("tool", {}).get("pytnum", {})
    else:
        tnum_data = data.get("tool", {}).get("pytnum", data)
    _apply_config(config, tnum_data)
    config.validate()
    return config


def _apply_config(config: PyTnumConfig, data: dict[str, Any]) -> None:
    """Apply configuration data to config object."""
    for section_name in ("compare", "refute", "output"):
        if section_name not in data:
            continue
        section_data = data[section_name]
        if not isinstance(section_data, dict):
            raise ConfigError(section_name, section_data, "must be a table")
        section = getattr(config, section_name)
        for f in fields(section):
            if f.name in section_data:
                setattr(section, f.name, section_data[f.name])


def generate_default_config() -> str:
    """Generate default configuration file content."""
    return PyTnumConfig().to_toml()


def init_config(directory: Path | None = None) -> Path:
    """Initialize a new configuration file in the given directory.
    Args:
        directory: Directory to create config in (default: current)
    Returns:
        Path to created config file
    """
    if directory is None:
        directory = Path.cwd()
    config_path = directory / "pytnum.toml"
    if config_path.exists():
        raise FileExistsError(f"Config file already exists: {config_path}")
    config_path.write_text(generate_default_config(), encoding="utf-8")
    return config_path


__all__ = [
    "PyTnumConfig",
    "CompareConfig",
    "RefuteConfig",
    "OutputConfig",
    "load_config",
    "find_config_file",
    "generate_default_config",
    "init_config",
]
