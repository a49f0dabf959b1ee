"""
Paths and policy defaults for claudy.

State (config file, logs) lives under ~/.claudy unless CLAUDY_STATE_DIR is
set. The monitored transcripts live under ~/.claude/projects unless
CLAUDY_PROJECTS_DIR or the --path flag says otherwise. claudy never writes
inside the projects directory.
"""

import os
from dataclasses import dataclass
from pathlib import Path


def get_state_dir() -> Path:
    """Return the claudy state directory, honouring CLAUDY_STATE_DIR."""
    override = os.environ.get("CLAUDY_STATE_DIR")
    if override:
        return Path(override)
    return Path.home() / ".claudy"


def get_log_dir() -> Path:
    return get_state_dir() / "logs"


def get_default_projects_path() -> Path:
    """Default root of the Claude Code projects tree."""
    override = os.environ.get("CLAUDY_PROJECTS_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".claude" / "projects"


@dataclass
class MonitorSettings:
    """Policy constants for the monitor engine.

    None of these are structural; they can all be overridden from the
    ``monitor:`` section of config.yaml (see config.get_monitor_settings).
    """
    tick_interval: float = 0.25  # seconds between event drains
    index_refresh_interval: float = 10.0  # backstop index reload + rescan
    staleness_seconds: float = 300.0  # "active" window for the active-only filter
    count_progress_messages: bool = False
    max_queue_events: int = 10_000
    watch_debounce_ms: int = 200
    auto_follow: bool = True

    def to_dict(self) -> dict:
        return {
            "tick_interval": self.tick_interval,
            "index_refresh_interval": self.index_refresh_interval,
            "staleness_seconds": self.staleness_seconds,
            "count_progress_messages": self.count_progress_messages,
            "max_queue_events": self.max_queue_events,
            "watch_debounce_ms": self.watch_debounce_ms,
            "auto_follow": self.auto_follow,
        }


DEFAULTS = MonitorSettings()

# Keys accepted under monitor: in config.yaml, with their expected types
SETTING_TYPES = {
    "tick_interval": float,
    "index_refresh_interval": float,
    "staleness_seconds": float,
    "count_progress_messages": bool,
    "max_queue_events": int,
    "watch_debounce_ms": int,
    "auto_follow": bool,
}
