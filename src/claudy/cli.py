"""
CLI interface for claudy using Typer.

    claudy [--path PATH]                  live TUI monitor
    claudy list [--path] [--active] [--filter TEXT]
    claudy config show | init | path
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import SOURCE_DEFAULT, SOURCE_ENV, get_monitor_settings, get_setting_sources
from .engine import MonitorEngine, RootNotFoundError
from .logging_config import setup_cli_logging, setup_tui_logging
from .settings import get_default_projects_path
from .tui_formatters import format_ago, format_tokens
from .watcher import WatchChannelError

app = typer.Typer(
    name="claudy",
    help="Watch Claude Code session transcripts live",
    no_args_is_help=False,
    invoke_without_command=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(
    name="config",
    help="Show or create the claudy config file.",
    no_args_is_help=False,
    invoke_without_command=True,
)
app.add_typer(config_app, name="config")

console = Console()
err_console = Console(stderr=True)

PathOption = Annotated[
    Optional[Path],
    typer.Option("--path", "-p", help="Projects directory (default ~/.claude/projects)"),
]


CONFIG_TEMPLATE = """\
# claudy configuration
# Location: ~/.claudy/config.yaml

# monitor:
#   tick_interval: 0.25            # seconds between event drains
#   index_refresh_interval: 10     # seconds between index reloads / rescans
#   staleness_seconds: 300         # active-only window
#   count_progress_messages: false
#   max_queue_events: 10000
#   watch_debounce_ms: 200
#   auto_follow: true
"""


def _resolve_root(path: Optional[Path]) -> Path:
    return path.expanduser() if path is not None else get_default_projects_path()


def _fail(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


def run_tui(root: Path) -> None:
    """Start the engine and hand it to the Textual app."""
    from .tui import ClaudyTUI

    setup_tui_logging()
    engine = MonitorEngine(root, settings=get_monitor_settings())
    try:
        engine.start()
    except RootNotFoundError as e:
        _fail(str(e))
    except WatchChannelError as e:
        engine.stop()
        _fail(f"cannot watch {root}: {e}")

    tui = ClaudyTUI(engine)
    try:
        tui.run()
    finally:
        engine.stop()

    if tui.fatal_error is not None:
        _fail(f"file watching failed: {tui.fatal_error}")


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    path: PathOption = None,
    version: Annotated[
        bool, typer.Option("--version", help="Show version and exit")
    ] = False,
):
    """Launch the live monitor when no command is given."""
    if version:
        print(__version__)
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        run_tui(_resolve_root(path))


@app.command("list")
def list_sessions(
    path: PathOption = None,
    active: Annotated[
        bool, typer.Option("--active", "-a", help="Only sessions active in the last few minutes")
    ] = False,
    filter_text: Annotated[
        Optional[str], typer.Option("--filter", "-f", help="Case-insensitive name/id/summary filter")
    ] = None,
):
    """Print the session list once and exit."""
    setup_cli_logging()
    root = _resolve_root(path)
    engine = MonitorEngine(root, settings=get_monitor_settings())
    engine.state.filter.active_only = active
    engine.state.filter.query = filter_text or ""

    now = datetime.now(timezone.utc)
    try:
        engine.load(now)
    except RootNotFoundError as e:
        _fail(str(e))

    entries = engine.view_entries
    if not entries:
        rprint("[dim]No sessions found[/dim]")
        return

    table = Table(title=f"Sessions in {engine.root}")
    table.add_column("", width=1)
    table.add_column("Name", style="bold")
    table.add_column("Id", style="dim")
    table.add_column("Msgs", justify="right", style="cyan")
    table.add_column("In", justify="right", style="magenta")
    table.add_column("Out", justify="right", style="magenta")
    table.add_column("Last", justify="right", style="dim")

    for entry in entries:
        table.add_row(
            "[green]●[/green]" if entry.is_active else "[dim]○[/dim]",
            entry.display_name,
            entry.session_id[:8],
            str(entry.message_count),
            format_tokens(entry.tokens_in),
            format_tokens(entry.tokens_out),
            format_ago(entry.last_activity, now),
        )
    console.print(table)

    if engine.warning_count:
        rprint(f"[yellow]{engine.warning_count} warning(s) while scanning; see the log[/yellow]")


@config_app.callback(invoke_without_command=True)
def config_default(ctx: typer.Context):
    """Show effective settings (default when no subcommand given)."""
    if ctx.invoked_subcommand is None:
        _config_show()


@config_app.command("show")
def config_show():
    """Show effective monitor settings."""
    _config_show()


def _config_show():
    from .config import CONFIG_PATH

    settings = get_monitor_settings()
    sources = get_setting_sources()

    if CONFIG_PATH.exists():
        rprint(f"[bold]Configuration[/bold] ({CONFIG_PATH}):\n")
    else:
        rprint(f"[dim]No config file at {CONFIG_PATH}; using environment and defaults[/dim]\n")

    rprint("  monitor:")
    for key, value in settings.to_dict().items():
        source = sources[key]
        if source == SOURCE_ENV:
            marker = f"  [dim](from CLAUDY_{key.upper()})[/dim]"
        elif source == SOURCE_DEFAULT:
            marker = "  [dim](default)[/dim]"
        else:
            marker = ""
        rprint(f"    {key}: {value}{marker}")


@config_app.command("init")
def config_init(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite existing config file")
    ] = False,
):
    """Create a config file with documented defaults."""
    from .config import CONFIG_PATH

    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)

    if CONFIG_PATH.exists() and not force:
        rprint(f"[yellow]Config file already exists:[/yellow] {CONFIG_PATH}")
        rprint("[dim]Use --force to overwrite[/dim]")
        raise typer.Exit(1)

    CONFIG_PATH.write_text(CONFIG_TEMPLATE)
    rprint(f"[green]✓[/green] Created config file: [bold]{CONFIG_PATH}[/bold]")


@config_app.command("path")
def config_path():
    """Show the config file path."""
    from .config import CONFIG_PATH
    print(CONFIG_PATH)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
