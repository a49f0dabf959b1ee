"""
User configuration for claudy.

Config file: ~/.claudy/config.yaml

Example config:
    monitor:
      tick_interval: 0.25           # seconds between event drains
      index_refresh_interval: 10    # backstop reload of sessions-index.json
      staleness_seconds: 300        # window for the active-only filter
      count_progress_messages: false
      auto_follow: true

Every monitor key can also be set with an environment variable named
CLAUDY_<KEY> (e.g. CLAUDY_STALENESS_SECONDS=600). The config file wins over
the environment, the environment wins over the built-in defaults.
"""

import os
from typing import Any, Dict, Optional, Tuple

import yaml

from .logging_config import get_logger
from .settings import DEFAULTS, SETTING_TYPES, MonitorSettings, get_state_dir

logger = get_logger("config")

CONFIG_PATH = get_state_dir() / "config.yaml"

SOURCE_CONFIG = "config"
SOURCE_ENV = "env"
SOURCE_DEFAULT = "default"


def load_config() -> dict:
    """Load configuration from config file.

    Returns:
        The parsed mapping, or {} when the file is missing, unreadable, or
        not a YAML mapping.
    """
    if not CONFIG_PATH.exists():
        return {}

    try:
        with open(CONFIG_PATH) as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, IOError) as e:
        logger.warning("Ignoring unreadable config %s: %s", CONFIG_PATH, e)
        return {}

    if not isinstance(data, dict):
        return {}
    return data


def _coerce(value: Any, expected: type) -> Optional[Any]:
    """Coerce a config/env value to the expected type, or None if invalid."""
    if expected is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("1", "true", "yes", "on"):
                return True
            if lowered in ("0", "false", "no", "off"):
                return False
        return None

    # bool is an int subclass; reject it for numeric settings
    if isinstance(value, bool):
        return None
    try:
        coerced = expected(value)
    except (TypeError, ValueError):
        return None
    if coerced < 0:
        return None
    return coerced


def _monitor_section() -> dict:
    section = load_config().get("monitor", {})
    return section if isinstance(section, dict) else {}


def _raw_setting(section: dict, key: str) -> Tuple[str, Any]:
    """Find a monitor key's raw value and where it came from.

    Returns:
        (source, raw) with source one of SOURCE_CONFIG, SOURCE_ENV or
        SOURCE_DEFAULT (raw is None for the default)
    """
    raw = section.get(key)
    if raw is not None:
        return SOURCE_CONFIG, raw
    raw = os.environ.get(f"CLAUDY_{key.upper()}")
    if raw is not None:
        return SOURCE_ENV, raw
    return SOURCE_DEFAULT, None


def get_setting_sources() -> Dict[str, str]:
    """Map each monitor key to the source that supplies it."""
    section = _monitor_section()
    return {key: _raw_setting(section, key)[0] for key in SETTING_TYPES}


def get_monitor_settings() -> MonitorSettings:
    """Build MonitorSettings from config file, environment, and defaults.

    Returns:
        MonitorSettings with every key resolved; invalid values are logged
        and replaced by the default.
    """
    section = _monitor_section()

    resolved = {}
    for key, expected in SETTING_TYPES.items():
        default = getattr(DEFAULTS, key)
        source, raw = _raw_setting(section, key)
        if source == SOURCE_DEFAULT:
            resolved[key] = default
            continue

        value = _coerce(raw, expected)
        if value is None:
            logger.warning("Invalid value for monitor.%s: %r (using %r)", key, raw, default)
            value = default
        resolved[key] = value

    return MonitorSettings(**resolved)
