"""Configuration management for pykill.

Settings come from a TOML file, looked up in this order:
  1. an explicit path
  2. $PYKILL_CONFIG
  3. pykill.toml in the current or a parent directory
  4. $XDG_CONFIG_HOME/pykill/config.toml (~/.config by default)

Example pykill.toml:

    refresh_interval = 5.0
    ascii_glyphs = true
    log_level = "INFO"
"""

import logging
import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path

from pykill.errors import ConfigError

logger = logging.getLogger(__name__)

LOG_LEVELS = frozenset(["DEBUG", "INFO", "WARNING", "ERROR"])


def _config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")


def _cache_home() -> Path:
    return Path(os.environ.get("XDG_CACHE_HOME") or Path.home() / ".cache")


@dataclass(slots=True)
class Settings:
    """Runtime settings."""

    refresh_interval: float = 2.0
    ascii_glyphs: bool = False
    proc_root: Path = Path("/proc")
    log_file: Path | None = None
    log_level: str = "WARNING"

    @property
    def log_path(self) -> Path:
        """Get the log file, defaulting to the user's cache directory."""
        return self.log_file or _cache_home() / "pykill" / "pykill.log"


def find_config_file() -> Path | None:
    """Find the configuration file, if any."""
    env_path = os.environ.get("PYKILL_CONFIG")
    if env_path:
        return Path(env_path)

    current = Path.cwd()
    for parent in [current] + list(current.parents):
        config_file = parent / "pykill.toml"
        if config_file.exists():
            return config_file

    config_file = _config_home() / "pykill" / "config.toml"
    if config_file.exists():
        return config_file
    return None


def _coerce(name: str, value: object) -> object:
    """Check and convert one raw TOML value."""
    if name == "refresh_interval":
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigError(f"refresh_interval must be a positive number, got {value!r}")
        return float(value)
    if name == "ascii_glyphs":
        if not isinstance(value, bool):
            raise ConfigError(f"ascii_glyphs must be true or false, got {value!r}")
        return value
    if name in ("proc_root", "log_file"):
        if not isinstance(value, str) or not value:
            raise ConfigError(f"{name} must be a path, got {value!r}")
        return Path(value).expanduser()
    if name == "log_level":
        level = str(value).upper()
        if level not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {sorted(LOG_LEVELS)}, got {value!r}")
        return level
    return value


def load_settings(path: Path | None = None) -> Settings:
    """
    Load settings from a TOML file.

    Missing files mean defaults; unknown keys are ignored.

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values.
    """
    if path is None:
        path = find_config_file()

    settings = Settings()
    if path is None or not path.exists():
        return settings

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"cannot load {path}: {e}") from e

    known = {f.name for f in fields(Settings)}
    for key, value in data.items():
        if key not in known:
            logger.warning(f"Ignoring unknown setting {key!r} in {path}")
            continue
        setattr(settings, key, _coerce(key, value))

    return settings
