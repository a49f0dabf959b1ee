"""
Discover Claude Code session transcripts on disk.

Layout (read-only):
- {root}/{encoded-path}/                    one directory per working directory
- {root}/{encoded-path}/{sessionId}.jsonl   transcript
- {root}/{encoded-path}/sessions-index.json metadata index
- {root}/{encoded-path}/{sessionId}/subagents/agent-*.jsonl   excluded
- {root}/{encoded-path}/{sessionId}/tool-results/...          not parsed

Discovery is lazy and fails softly: an unreadable directory is skipped and
reported as a ScanWarning, it never aborts the scan.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from .logging_config import get_logger

logger = get_logger("scanner")

SESSION_SUFFIX = ".jsonl"
SUBAGENT_PREFIX = "agent-"
SUBAGENT_DIR = "subagents"


@dataclass(frozen=True)
class ScanWarning:
    """A directory that could not be read during a scan pass."""
    path: Path
    reason: str


def _warn(warnings: Optional[List[ScanWarning]], path: Path, error: OSError) -> None:
    reason = error.strerror or str(error)
    logger.warning("Skipping unreadable directory %s: %s", path, reason)
    if warnings is not None:
        warnings.append(ScanWarning(path=path, reason=reason))


def is_session_file(path: Path) -> bool:
    """True for primary transcripts; subagent transcripts are excluded."""
    if path.suffix != SESSION_SUFFIX:
        return False
    if path.name.startswith(SUBAGENT_PREFIX):
        return False
    return SUBAGENT_DIR not in path.parts


def session_id_for(path: Path) -> str:
    """Session id is the transcript's file stem."""
    return path.stem


def iter_project_dirs(
    root: Path, warnings: Optional[List[ScanWarning]] = None
) -> Iterator[Path]:
    """Yield project subdirectories of root, sorted by name."""
    try:
        children = sorted(root.iterdir())
    except FileNotFoundError:
        return
    except OSError as e:
        _warn(warnings, root, e)
        return

    for child in children:
        try:
            if child.is_dir():
                yield child
        except OSError as e:
            _warn(warnings, child, e)


def iter_session_files(
    project_dir: Path, warnings: Optional[List[ScanWarning]] = None
) -> Iterator[Path]:
    """Yield transcripts directly inside one project directory.

    Per-session containers ({sessionId}/subagents, tool output) are never
    descended into.
    """
    try:
        children = sorted(project_dir.iterdir())
    except FileNotFoundError:
        return
    except OSError as e:
        _warn(warnings, project_dir, e)
        return

    for child in children:
        if not is_session_file(child):
            continue
        try:
            if child.is_file():
                yield child
        except OSError as e:
            _warn(warnings, child, e)


def discover_session_files(
    root: Path, warnings: Optional[List[ScanWarning]] = None
) -> Iterator[Path]:
    """Lazily yield every primary transcript under root.

    Args:
        root: The projects directory (e.g. ~/.claude/projects)
        warnings: Optional list collecting ScanWarnings for skipped directories

    Yields:
        Transcript paths, grouped by project directory
    """
    for project_dir in iter_project_dirs(root, warnings):
        yield from iter_session_files(project_dir, warnings)


def decode_project_dir_name(name: str) -> str:
    """Best-effort inverse of Claude Code's directory naming.

    /home/user/myproject is stored as -home-user-myproject. Dashes inside
    the original path are indistinguishable from separators, so this is only
    a display fallback for sessions that never reported a cwd.
    """
    if name.startswith("-"):
        return "/" + name[1:].replace("-", "/")
    return name
