"""
Status bar widget for TUI.

Shows counts, active filters, follow mode, and warnings.
"""

from rich.text import Text
from textual.widgets import Static


def render_status(
    visible: int,
    total: int,
    active_only: bool,
    query: str,
    following: bool,
    warnings: int,
) -> Text:
    t = Text()
    t.append(f" {visible}/{total} sessions", style="bold")
    if active_only:
        t.append("  [active only]", style="bold green")
    if query:
        t.append(f"  filter: {query}", style="yellow")
    t.append("  following" if following else "  scroll locked",
             style="cyan" if following else "dim")
    if warnings:
        t.append(f"  ⚠ {warnings}", style="bold red")
    t.append("   q:Quit j/k:Nav a:Active /:Filter r:Refresh G:Follow g:Top", style="dim")
    return t


class StatusBar(Static):
    """One-line summary of the monitor state"""

    def update_status(
        self,
        visible: int,
        total: int,
        active_only: bool = False,
        query: str = "",
        following: bool = True,
        warnings: int = 0,
    ) -> None:
        self.update(render_status(visible, total, active_only, query, following, warnings))
