"""
Load a project's sessions-index.json.

Claude Code periodically rewrites this document with per-session metadata:

{
  "version": 1,
  "originalPath": "/home/user/project",
  "entries": [
    {"sessionId": "...", "fullPath": "...", "fileMtime": 1768000000000,
     "firstPrompt": "...", "customTitle": "...", "summary": "...",
     "messageCount": 42, "created": "2026-01-10T09:00:00.000Z",
     "modified": "2026-01-10T10:42:00.000Z", "gitBranch": "main",
     "projectPath": "/home/user/project", "isSidechain": false}
  ]
}

A missing or malformed index is not an error: the loader returns an empty
list and inline transcript metadata stays the source of truth.
"""

import json
from pathlib import Path
from typing import Any, List, Optional

from .logging_config import get_logger
from .models import IndexEntry, parse_iso_timestamp

logger = get_logger("index_loader")

INDEX_FILENAME = "sessions-index.json"


def is_index_file(path: Path) -> bool:
    return path.name == INDEX_FILENAME


def index_path_for(project_dir: Path) -> Path:
    return project_dir / INDEX_FILENAME


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _opt_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None


def parse_index_entry(data: Any) -> Optional[IndexEntry]:
    """Build an IndexEntry from one raw entry, or None if it has no sessionId."""
    if not isinstance(data, dict):
        return None
    session_id = _opt_str(data.get("sessionId"))
    if session_id is None:
        return None

    return IndexEntry(
        session_id=session_id,
        full_path=_opt_str(data.get("fullPath")),
        file_mtime=_opt_int(data.get("fileMtime")),
        first_prompt=_opt_str(data.get("firstPrompt")),
        custom_title=_opt_str(data.get("customTitle")),
        summary=_opt_str(data.get("summary")),
        message_count=_opt_int(data.get("messageCount")),
        created=parse_iso_timestamp(data.get("created")),
        modified=parse_iso_timestamp(data.get("modified")),
        git_branch=_opt_str(data.get("gitBranch")),
        project_path=_opt_str(data.get("projectPath")),
        is_sidechain=data.get("isSidechain") is True,
    )


def load_index(project_dir: Path) -> List[IndexEntry]:
    """Parse project_dir's index document into IndexEntry records.

    Args:
        project_dir: A project directory under the projects root

    Returns:
        Entries in document order; [] when the index is absent or unusable
    """
    path = index_path_for(project_dir)
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except FileNotFoundError:
        return []
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        # Often a half-written rewrite; the next refresh will pick it up
        logger.debug("Malformed index %s: %s", path, e)
        return []
    except OSError as e:
        logger.warning("Could not read index %s: %s", path, e)
        return []

    if not isinstance(document, dict):
        return []
    raw_entries = document.get("entries")
    if not isinstance(raw_entries, list):
        return []

    entries = []
    for raw in raw_entries:
        entry = parse_index_entry(raw)
        if entry is not None:
            entries.append(entry)
    return entries
