"""
Rich-based terminal dashboard for speedcheck results.

All formatting helpers live in ``client.stats`` -- this module only does
presentation via the ``rich`` library.
"""
from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from client.engine import EngineState
from client.history import History, format_history_table, sparkline
from client.stats import format_latency, format_speed

console = Console()
error_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------

def print_header(api_url: str) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Speedcheck[/bold cyan]\n"
            f"[dim]Latency, download and upload against {api_url}[/dim]",
            border_style="cyan",
        )
    )
    console.print()


def print_server_health(health: dict) -> None:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="dim")
    table.add_column(style="bold")
    table.add_row("Status:", str(health.get("status", "?")))
    table.add_row("Uptime:", f"{float(health.get('uptime', 0)):.0f} s")
    console.print(Panel(table, title="[bold]Server[/bold]", border_style="blue"))


def print_final_results(state: EngineState) -> None:
    r = state.results
    console.print()
    console.print(
        Panel.fit(
            f"[bold white]   Ping:[/bold white]  [bold yellow]{format_latency(r.ping)}[/bold yellow]\n"
            f"[bold white]   Download:[/bold white]  [bold blue]{format_speed(r.download)}[/bold blue]\n"
            f"[bold white]   Upload:[/bold white]  [bold green]{format_speed(r.upload)}[/bold green]",
            title="[bold]Results[/bold]",
            border_style="cyan",
        )
    )
    console.print()


def print_error(message: str, stderr: bool = False) -> None:
    """Errors go to stderr when stdout carries machine-readable output."""
    (error_console if stderr else console).print(f"\n[bold red]{message}[/bold red]")


def print_history(history: History) -> None:
    """Recent tests, newest first, with averages and a download trend."""
    if not len(history):
        return

    table = Table(title="Recent Tests", box=box.ROUNDED)
    table.add_column("Time", style="dim")
    table.add_column("Download", justify="right", style="blue")
    table.add_column("Upload", justify="right", style="green")
    table.add_column("Ping", justify="right", style="yellow")

    for row in format_history_table(history.entries):
        table.add_row(
            row["time"],
            f"↓ {row['download']}",
            f"↑ {row['upload']}",
            f"{row['ping']}ms",
        )
    console.print(table)

    avg_dl, avg_ul = history.averages()
    trend = sparkline([r.download for r in reversed(history.entries)])
    console.print(
        f"  [dim]Avg Download[/dim] [bold blue]{avg_dl:.1f} Mbps[/bold blue]   "
        f"[dim]Avg Upload[/dim] [bold green]{avg_ul:.1f} Mbps[/bold green]   "
        f"[cyan]{trend}[/cyan]"
    )


# ---------------------------------------------------------------------------
# Progress display
# ---------------------------------------------------------------------------

class ProgressDisplay:
    """Feeds engine snapshots into a ``rich`` progress bar."""

    def __init__(self) -> None:
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.description}"),
            BarColumn(bar_width=40),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=console,
        )
        self._task_id = None
        self.last_state: Optional[EngineState] = None

    def start(self) -> None:
        self.progress.start()
        self._task_id = self.progress.add_task("Starting...", total=100)

    def update(self, state: EngineState) -> None:
        """Update channel callback for :class:`client.engine.MeasurementEngine`."""
        self.last_state = state
        if self._task_id is None or not state.testing:
            return
        self.progress.update(
            self._task_id,
            completed=state.progress,
            description=state.message or "Starting...",
        )

    def stop(self) -> None:
        self.progress.stop()
        self._task_id = None
