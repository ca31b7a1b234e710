"""
Configuration file loading for sugarbit.

Loads .sugarbit.yaml from project root or home directory.
Config values provide defaults that can be overridden by CLI options.

Example:

    source:
      url: https://example.net/reports/BG.json
      timeout: 10
    refresh:
      interval: 1m
    thresholds:
      max_age: 15m
      max_delta_age: 10m
    graph:
      target_low: 3.8
      target_high: 8.0
    load:
      on_malformed: skip
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import yaml

from .graph import SLOT_CAPACITY, TARGET_HIGH, TARGET_LOW
from .series import ON_MALFORMED_CHOICES, ON_MALFORMED_SKIP, VALUE_CEILING_FLOOR
from .summary import MAX_AGE, MAX_DELTA_AGE

CONFIG_FILENAME = ".sugarbit.yaml"

DEFAULT_URL = "https://dleclerc.net/sugarscout/reports/BG.json"
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smh]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600}


def parse_duration(value: Union[int, float, str]) -> int:
    """Parse a duration in seconds: ``90``, ``"90s"``, ``"15m"``, ``"3h"``.

    Raises:
        ValueError: If the value is not a duration
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    match = _DURATION_RE.match(str(value).lower())
    if not match:
        raise ValueError(f"Invalid duration: {value!r}. Expected e.g. 90, '90s', '15m', '3h'")
    return int(float(match.group(1)) * _DURATION_UNITS[match.group(2)])


@dataclass
class ConfigSource:
    """Where readings are fetched from."""
    url: str = DEFAULT_URL
    headers: dict[str, str] = field(default_factory=lambda: dict(NO_CACHE_HEADERS))
    timeout: float = 10.0


@dataclass
class ConfigRefresh:
    """Update cadence, all in seconds."""
    interval: int = 60
    min_interval: int = 15
    upload_interval: int = 5 * 60
    grace: int = 30


@dataclass
class ConfigThresholds:
    max_age: int = MAX_AGE
    max_delta_age: int = MAX_DELTA_AGE


@dataclass
class ConfigGraph:
    target_low: float = TARGET_LOW
    target_high: float = TARGET_HIGH
    ceiling_floor: float = VALUE_CEILING_FLOOR
    capacity: int = SLOT_CAPACITY
    width: int = 72
    height: int = 16


@dataclass
class ConfigLoad:
    on_malformed: str = ON_MALFORMED_SKIP


@dataclass
class Config:
    """Loaded configuration."""
    source: ConfigSource = field(default_factory=ConfigSource)
    refresh: ConfigRefresh = field(default_factory=ConfigRefresh)
    thresholds: ConfigThresholds = field(default_factory=ConfigThresholds)
    graph: ConfigGraph = field(default_factory=ConfigGraph)
    load: ConfigLoad = field(default_factory=ConfigLoad)
    source_path: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: dict, source_path: Optional[Path] = None) -> "Config":
        """Create Config from parsed YAML dict.

        Raises:
            ValueError: If a value has the wrong shape
        """
        config = cls(source_path=source_path)

        # Source
        if isinstance(data.get("source"), dict):
            src = data["source"]
            config.source.url = src.get("url", config.source.url)
            if isinstance(src.get("headers"), dict):
                config.source.headers = {str(k): str(v) for k, v in src["headers"].items()}
            config.source.timeout = float(src.get("timeout", config.source.timeout))

        # Refresh cadence
        if isinstance(data.get("refresh"), dict):
            ref = data["refresh"]
            for name in ("interval", "min_interval", "upload_interval", "grace"):
                if name in ref:
                    setattr(config.refresh, name, parse_duration(ref[name]))

        # Staleness thresholds
        if isinstance(data.get("thresholds"), dict):
            th = data["thresholds"]
            for name in ("max_age", "max_delta_age"):
                if name in th:
                    setattr(config.thresholds, name, parse_duration(th[name]))

        # Graph
        if isinstance(data.get("graph"), dict):
            gr = data["graph"]
            for name in ("target_low", "target_high", "ceiling_floor"):
                if name in gr:
                    setattr(config.graph, name, float(gr[name]))
            for name in ("capacity", "width", "height"):
                if name in gr:
                    setattr(config.graph, name, int(gr[name]))
            if config.graph.ceiling_floor <= 0:
                raise ValueError(f"graph.ceiling_floor must be > 0, got {config.graph.ceiling_floor}")

        # Load policy
        if isinstance(data.get("load"), dict):
            policy = data["load"].get("on_malformed", config.load.on_malformed)
            if policy not in ON_MALFORMED_CHOICES:
                raise ValueError(
                    f"load.on_malformed must be one of {', '.join(ON_MALFORMED_CHOICES)}, got {policy!r}"
                )
            config.load.on_malformed = policy

        return config


# Global cached config
_cached_config: Optional[Config] = None


def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """Search the directory tree, then the home directory, for .sugarbit.yaml.

    Search stops at the git root so a config from an enclosing project is
    not picked up.
    """
    search_dir = start or Path.cwd()
    while search_dir != search_dir.parent:
        candidate = search_dir / CONFIG_FILENAME
        if candidate.exists():
            return candidate
        if (search_dir / ".git").exists():
            break
        search_dir = search_dir.parent

    home_config = Path.home() / CONFIG_FILENAME
    if home_config.exists():
        return home_config
    return None


def load_config(path: Optional[Path] = None, use_cache: bool = True) -> Config:
    """Load .sugarbit.yaml.

    Search order:
    1. Explicit path if provided
    2. .sugarbit.yaml in current directory
    3. .sugarbit.yaml in parent directories (up to git root or /)
    4. ~/.sugarbit.yaml in home directory

    Args:
        path: Explicit path to config file
        use_cache: Whether to use cached config (default True)

    Returns:
        Loaded Config, or default Config if no file found or it is broken
    """
    global _cached_config

    if use_cache and _cached_config is not None:
        return _cached_config

    if path and path.exists():
        config_path = path
    else:
        config_path = find_config_file()

    if config_path is None:
        config = Config()
    else:
        try:
            data = yaml.safe_load(config_path.read_text()) or {}
            if not isinstance(data, dict):
                raise ValueError("top level must be a mapping")
            config = Config.from_dict(data, source_path=config_path)
        except (yaml.YAMLError, OSError, ValueError, TypeError) as e:
            logging.getLogger("sugarbit.core.config").warning(
                f"Failed to load config from {config_path}: {e}"
            )
            config = Config()

    if use_cache:
        _cached_config = config

    return config


def clear_config_cache() -> None:
    """Clear the cached config (useful for testing)."""
    global _cached_config
    _cached_config = None
