"""
Rich console configuration for the GPS path tracker.

Provides terminal output with progress bars, panels, and styled logging.
"""

import logging
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme
from rich.panel import Panel
from rich.table import Table
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TaskProgressColumn,
    TimeElapsedColumn,
    MofNCompleteColumn,
)

TRACKER_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "highlight": "bold magenta",
    "muted": "dim",
    "gps": "green",
    "distance": "bold cyan",
})

# Global console instance
console = Console(theme=TRACKER_THEME)


def setup_rich_logging(verbose: bool = False) -> None:
    """
    Configure logging to use Rich handler.

    Args:
        verbose: Enable DEBUG level logging with full details
    """
    level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                show_time=verbose,
                show_path=verbose,
                rich_tracebacks=True,
                tracebacks_show_locals=verbose,
                markup=False,
            )
        ],
        force=True,  # Override any existing configuration
    )


def create_replay_progress() -> Progress:
    """
    Create a progress bar for replaying recorded fixes.

    Returns:
        Configured Progress instance with a status field for live distance
    """
    return Progress(
        SpinnerColumn("dots"),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(bar_width=40, style="cyan", complete_style="green"),
        TaskProgressColumn(),
        MofNCompleteColumn(),
        TextColumn("[dim]{task.fields[status]}[/]"),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def create_poll_progress() -> Progress:
    """
    Create a lighter progress display for live polling.

    Returns:
        Configured Progress instance with a status field
    """
    return Progress(
        SpinnerColumn("dots"),
        TextColumn("[cyan]{task.description}"),
        TextColumn("[dim]{task.fields[status]}[/]"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def print_banner(version: str = "1.0.0") -> None:
    """
    Print a styled startup banner.

    Args:
        version: Version string to display
    """
    console.print("\n[bold cyan]GPS PATH TRACKER[/]")
    console.print("[dim]Local-frame path recording with adaptive grid[/]")
    console.print(f"[muted]Version {version}[/]\n")


def print_config_summary(source: str, config, outputs: Optional[List[str]] = None) -> None:
    """
    Print a styled configuration summary panel.

    Args:
        source: Description of the position source (file or URL)
        config: TrackerConfig in effect
        outputs: Planned output files
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Source", f"[gps]{source}[/]")
    table.add_row("Min Distance", f"{config.min_distance_m:g} m")
    table.add_row("Min Interval", f"{config.min_time_between_ms} ms")
    table.add_row("Scale", f"{config.pixels_per_meter:g} px/m")
    table.add_row("Canvas", f"{config.canvas_size_px}px (margin {config.margin_px}px)")
    table.add_row("Grid", ", ".join(f"{c:g}" for c in config.grid_candidates_m) + " m")
    retries = "unbounded" if config.max_retries is None else str(config.max_retries)
    table.add_row("Timeout Retry", f"{config.retry_delay_ms} ms ({retries})")
    if outputs:
        table.add_row("Output", f"[green]{', '.join(outputs)}[/]")

    panel = Panel(
        table,
        title="[bold]Configuration[/]",
        border_style="cyan",
        padding=(1, 2),
    )
    console.print(panel)
    console.print()


def print_completion_summary(status, outputs: List[str]) -> None:
    """
    Print a styled completion summary.

    Args:
        status: TrackerStatus at the end of the session
        outputs: Paths of created files
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold green")

    table.add_row("State", status.state.value)
    table.add_row("Points", f"{status.point_count:,}")
    table.add_row("Distance", f"{status.total_distance_m:.2f} m")
    table.add_row("Duration", status.elapsed_text)
    if status.x_m is not None:
        table.add_row("Position", f"X={status.x_m:.2f} m, Y={status.y_m:.2f} m")
    if status.error is not None:
        table.add_row("Last Error", f"[warning]{status.error.value}[/]")
    for path in outputs:
        table.add_row("Output", path)

    panel = Panel(
        table,
        title="[bold green]Complete[/]",
        border_style="green",
        padding=(1, 2),
    )
    console.print()
    console.print(panel)


def print_error(message: str, hint: Optional[str] = None) -> None:
    """
    Print a styled error message.

    Args:
        message: Error message
        hint: Optional hint for resolution
    """
    console.print(f"\n[error]Error:[/] {message}")
    if hint:
        console.print(f"[muted]Hint: {hint}[/]")
