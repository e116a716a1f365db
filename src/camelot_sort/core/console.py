"""Centralized Rich Console management."""

from typing import Iterable, Sequence

from rich.console import Console
from rich.table import Table

_console: Console | None = None


def get_console() -> Console:
    """Get or create the global Rich Console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def print_table(
    title: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[object]],
    dim_rows: frozenset[int] = frozenset(),
) -> None:
    """Render rows as a Rich table.

    Args:
        title: Table caption
        columns: Column headers
        rows: Row values (converted with str())
        dim_rows: Zero-based indices of rows to render dimmed
    """
    table = Table(title=title, show_lines=False)
    for column in columns:
        table.add_column(column)
    for index, row in enumerate(rows):
        table.add_row(*(str(v) for v in row), style="dim" if index in dim_rows else None)
    get_console().print(table)
