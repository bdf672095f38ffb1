"""Rich console output shared by the funcpack commands.

Commands import `console` from here rather than building their own, so
every table and panel uses the same theme.

Usage:
    from funcpack.pipeline.ui import console, print_header, print_summary

    print_header("PACKAGED FUNCTIONS")
    console.print(results_table(results))
    print_summary(results, "dist")
"""

import sys

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

FUNCPACK_THEME = Theme({
    "info": "bold cyan",
    "warning": "bold yellow",
    "error": "bold red",
    "success": "bold green",
    "fn": "bold magenta",
    "path": "cyan",
    "dim": "dim white",
})

console = Console(
    theme=FUNCPACK_THEME,
    force_terminal=sys.stdout.isatty()
)

_PANEL_STYLES = {
    "error": ("bold red", "red"),
    "warning": ("bold yellow", "yellow"),
    "success": ("bold green", "green"),
}


def print_header(title: str) -> None:
    console.rule(f"[bold]{title}[/bold]")


def print_error(msg: str) -> None:
    console.print(f"[error]ERROR:[/error] {msg}")


def print_warning(msg: str) -> None:
    console.print(f"[warning]WARNING:[/warning] {msg}")


def plain_table(*columns: str) -> Table:
    """Borderless table with one header per column name."""
    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    for column in columns:
        table.add_column(column)
    return table


def results_table(results) -> Table:
    """One row per packaged function: output path, size, input count and time."""
    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    table.add_column("Function", style="fn")
    table.add_column("Output", style="path")
    table.add_column("Size", justify="right")
    table.add_column("Files", justify="right")
    table.add_column("Time", justify="right", style="dim")

    for result in results:
        if result.ok:
            size = f"{result.size:,} B" if result.size is not None else "-"
            table.add_row(result.name, result.path, size, str(len(result.inputs)), f"{result.duration_ms}ms")
        else:
            table.add_row(result.name, "[error]FAILED[/error]", "-", "-", "-")

    return table


def print_summary(results, dest: str) -> None:
    """Closing panel of a batch, red when any function failed."""
    failed = sum(1 for result in results if not result.ok)

    if failed:
        status, message, level = "FAILED", f"{failed} of {len(results)} function(s) failed", "error"
    else:
        status, message, level = "DONE", f"{len(results)} function(s) packaged", "success"

    text_style, border_style = _PANEL_STYLES[level]
    console.print(
        Panel(
            Text.assemble(
                (f"STATUS: [{status}]\n", text_style),
                (f"{message}\n", border_style),
                (f"Output: {dest}", border_style),
            ),
            border_style=border_style,
            expand=False,
        )
    )
