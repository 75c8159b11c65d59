"""Terminal rendering of wayback results."""

from datetime import datetime
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich import box
from rich.markup import escape

from .models import LAYOUT, LAYOUT_DISPLAY, Outcome, SelectionResult, format_wayback_time


class ResultReport:
    """Renders selection results to a Rich console."""

    def __init__(self, console: Optional[Console] = None,
                 hash_length: int = 12, tag_width: int = 12):
        """Initialize the report.

        Args:
            console: Rich console for output (creates new if None)
            hash_length: Number of hash characters shown
            tag_width: Maximum width of the tag column
        """
        self.console = console or Console()
        self.hash_length = hash_length
        self.tag_width = tag_width

    def build_table(self, results: Sequence[SelectionResult]) -> Table:
        """Build a table with one row per found result."""
        table = Table(box=box.SIMPLE, show_edge=False)
        table.add_column("Type", style="bold")
        table.add_column("Hash", style="yellow", no_wrap=True)
        table.add_column("Tag", style="cyan", max_width=self.tag_width, no_wrap=True)
        table.add_column("Commit Time", style="green", no_wrap=True)

        for result in results:
            if not result.is_found:
                continue
            table.add_row(
                result.policy.label,
                result.commit.short_sha(self.hash_length),
                escape(result.tag or ""),
                format_wayback_time(result.commit.committed_at),
            )

        return table

    def render(self, when: datetime, results: Sequence[SelectionResult]) -> None:
        """Print the wayback time, a table of found commits and any misses."""
        self.console.print(f"Wayback time: [bold]{format_wayback_time(when)}[/bold]")

        if any(result.is_found for result in results):
            self.console.print(self.build_table(results))

        for result in results:
            if result.outcome is Outcome.NOT_FOUND:
                self.console.print(f"[yellow]{result.policy.label}: Reference not found[/yellow]")
            elif result.outcome is Outcome.FAILED:
                self.error(f"{result.policy.label}: {result.error}")

    def current_tag(self, tag: Optional[str]) -> None:
        if tag:
            self.console.print(f"HEAD is tagged [cyan]{escape(tag)}[/cyan]")
        else:
            self.console.print("[yellow]HEAD is not tagged[/yellow]")

    def layout_help(self, now: datetime) -> None:
        """Show the accepted wayback time layout and the current time in it."""
        self.console.print("Format wayback commit time to match layout\n")
        self.console.print(f"Layout                 {LAYOUT_DISPLAY}")
        self.console.print(f"strftime layout        {LAYOUT}", highlight=False)
        self.console.print(f"Formatted current time {format_wayback_time(now)}")

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]error: {escape(message)}[/bold red]", highlight=False)
