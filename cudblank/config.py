"""
cudblank config management.

An optional cudblank.yaml tunes how the tool runs; the match patterns
themselves are fixed. Lookup order:
- <project root>/cudblank.yaml
- <project root>/config/cudblank.yaml
- ~/.config/cudblank/cudblank.yaml
"""

import logging
from pathlib import Path

import yaml

from .errors import ConfigError
from .targets import DEFAULT_SELECTOR

logger = logging.getLogger(__name__)

CONFIG_NAME = "cudblank.yaml"
MAX_CONFIG_BYTES = 1_000_000

DEFAULTS = {
    "packages": DEFAULT_SELECTOR,
    "formatter": "gofmt",
    "dry_run": False,
}

# key -> accepted value types
_SCHEMA = {
    "packages": (str,),
    "formatter": (str, type(None)),
    "dry_run": (bool,),
}


def find_config(root: Path | str = ".") -> Path | None:
    """Find cudblank.yaml in the project or user home."""
    root = Path(root)
    candidates = [
        root / CONFIG_NAME,
        root / "config" / CONFIG_NAME,
        Path.home() / ".config" / "cudblank" / CONFIG_NAME,
    ]
    for path in candidates:
        if path.exists():
            return path
    return None


def validate_config(config: dict, source: str | None = None) -> dict:
    """Check keys and value types; returns the config merged over defaults."""
    unknown = sorted(set(config) - set(_SCHEMA))
    if unknown:
        raise ConfigError(f"unknown key(s): {', '.join(unknown)}", source)

    for key, value in config.items():
        if not isinstance(value, _SCHEMA[key]):
            raise ConfigError(f"'{key}' has invalid value {value!r}", source)

    packages = config.get("packages")
    if packages is not None and not packages.strip():
        raise ConfigError("'packages' must not be empty", source)

    return {**DEFAULTS, **config}


def load_config(config_path: Path | str | None = None) -> dict:
    """Load a config file, or the defaults when there is none."""
    if config_path is None:
        logger.debug("no %s found, using defaults", CONFIG_NAME)
        return dict(DEFAULTS)

    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError("config file not found", str(config_path))

    # YAML bomb protection
    if config_path.stat().st_size > MAX_CONFIG_BYTES:
        raise ConfigError("config file too large (max 1MB)", str(config_path))

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        if mark:
            raise ConfigError(
                f"malformed YAML (line {mark.line + 1}, column {mark.column + 1})",
                str(config_path),
            ) from e
        raise ConfigError("malformed YAML", str(config_path)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("top level must be a mapping", str(config_path))

    logger.debug("loaded config from %s", config_path)
    return validate_config(data, str(config_path))
