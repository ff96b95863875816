"""
Loading of ``botblocks.toml``.

Every section is optional; a missing file yields the defaults.
"""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConfigError
from .limits import DEFAULT_LIMITS, FlexLimits

CONFIG_FILENAME = "botblocks.toml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class CompilerConfig:
    """Compiler behaviour."""

    strict: bool = False  # promote warnings to errors
    default_alt_text: str = "Flex Message"


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class BotBlocksConfig:
    """Parsed botblocks.toml."""

    compiler: CompilerConfig = field(default_factory=CompilerConfig)
    limits: FlexLimits = DEFAULT_LIMITS
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    path: Path | None = None

    @property
    def log_level(self) -> int:
        return getattr(logging, self.logging.level)


def _table(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, dict):
        raise ConfigError(f"[{name}] must be a table")
    return value


def _typed(section: str, data: dict[str, Any], key: str, expected: type, default: Any) -> Any:
    value = data.get(key, default)
    if not isinstance(value, expected) or (expected is not bool and isinstance(value, bool)):
        raise ConfigError(f"{section}.{key} must be of type {expected.__name__}")
    return value


def parse_config(data: dict[str, Any], path: Path | None = None) -> BotBlocksConfig:
    """
    Build a config from already-parsed TOML data.

    Raises:
        ConfigError: On wrong value types, unknown limits or log levels
    """
    compiler_data = _table(data, "compiler")
    limits_data = _table(data, "limits")
    logging_data = _table(data, "logging")

    compiler = CompilerConfig(
        strict=_typed("compiler", compiler_data, "strict", bool, False),
        default_alt_text=_typed("compiler", compiler_data, "default_alt_text", str, "Flex Message"),
    )

    level = _typed("logging", logging_data, "level", str, "WARNING").upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"logging.level must be one of {', '.join(LOG_LEVELS)}, got '{level}'")

    return BotBlocksConfig(
        compiler=compiler,
        limits=DEFAULT_LIMITS.with_overrides(limits_data),
        logging=LoggingConfig(level=level),
        path=path,
    )


def load_config(path: Path | None = None) -> BotBlocksConfig:
    """
    Load ``botblocks.toml``.

    Args:
        path: Config file, or a directory containing ``botblocks.toml``.
            Defaults to the current directory.

    Returns:
        The parsed config, or defaults when the file does not exist

    Raises:
        ConfigError: If the file is not valid TOML or has invalid values
    """
    path = Path(path) if path is not None else Path.cwd()
    if path.is_dir():
        path = path / CONFIG_FILENAME
    if not path.exists():
        return BotBlocksConfig()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    return parse_config(data, path)
