import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from sqleasy.errors import ConfigError

MEMORY = ":memory:"

_PRAGMA_VALUE = re.compile(r"-?\w+")

DEFAULT_PRAGMAS: dict[str, Any] = {
    "foreign_keys": "ON",
    "busy_timeout": 5000,
    "journal_mode": "WAL",
}


def config_file() -> Path:
    """Return config file path: $SQLEASY_CONFIG, else ./sqleasy.yaml"""
    override = os.environ.get("SQLEASY_CONFIG")
    if override:
        return Path(override)
    return Path.cwd() / "sqleasy.yaml"


def _validate_config(cfg: Any) -> None:
    """Validate config structure. Fail fast on invalid types."""
    if not isinstance(cfg, dict):
        raise ConfigError(f"Config must be a dict, got {type(cfg).__name__}")

    if "database" in cfg and not isinstance(cfg["database"], str):
        raise ConfigError("Config 'database' must be a string")

    pragmas = cfg.get("pragmas")
    if pragmas is not None:
        if not isinstance(pragmas, dict):
            raise ConfigError("Config 'pragmas' must be a dict")
        for name, value in pragmas.items():
            if not isinstance(name, str) or not name.isidentifier():
                raise ConfigError(f"Invalid pragma name: {name!r}")
            if isinstance(value, int) or (
                isinstance(value, str) and _PRAGMA_VALUE.fullmatch(value)
            ):
                continue
            raise ConfigError(f"Invalid value for pragma {name}: {value!r}")


def clear_cache():
    load_config.cache_clear()


@lru_cache(maxsize=1)
def load_config() -> dict:
    """Load the config file, returning its content or an empty dict if not found."""
    path = config_file()
    if not path.exists():
        return {}
    with open(path) as f:
        cfg = yaml.safe_load(f) or {}
    _validate_config(cfg)
    return cfg


def default_database() -> str:
    """Database used when initialize() gets no file name."""
    env_path = os.environ.get("SQLEASY_DB_PATH")
    if env_path:
        return env_path
    return load_config().get("database") or MEMORY


def pragmas() -> dict[str, Any]:
    """Pragmas applied to every new connection, configured values over defaults."""
    merged = dict(DEFAULT_PRAGMAS)
    merged.update(load_config().get("pragmas") or {})
    return merged
