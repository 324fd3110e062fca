"""Rich-powered console output for bundle-impact."""

from __future__ import annotations

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.table import Table


class Console:
    """Terminal output for bundle-impact using Rich."""

    def __init__(self, stderr: bool = False) -> None:
        self.console = RichConsole(stderr=stderr)

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}", highlight=False)

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}", highlight=False)

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {escape(message)}", highlight=False)

    def show_weights(self, summary: dict) -> None:
        """Display per-file sizes in a table, with totals in the caption."""
        table = Table(title="Bundle Impact", border_style="cyan")
        table.add_column("Status", justify="center")
        table.add_column("File", style="bold")
        table.add_column("Base", justify="right")
        table.add_column("Size", justify="right", style="cyan")
        table.add_column("Diff", justify="right")

        for w in summary.get("weights", []):
            delta = w["delta"]
            color = "red" if delta > 0 else "green" if delta < 0 else "dim"
            pct = f" ({w['percent']:+d}%)" if w["percent"] is not None else ""
            table.add_row(
                w["status"],
                escape(w["path"]),
                str(w["base_size"]),
                str(w["size"]),
                f"[{color}]{delta:+d}{pct}[/{color}]",
            )

        delta = summary.get("delta", 0)
        table.caption = (
            f"{summary.get('files', 0)} files, "
            f"{summary.get('base_size', 0)} → {summary.get('size', 0)} bytes ({delta:+d})"
        )
        self.console.print(table)
