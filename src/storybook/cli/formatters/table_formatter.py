"""Table output formatter for CLI."""

import io
from enum import Enum
from typing import Any

from rich.console import Console
from rich.table import Table


class OutputFormat(str, Enum):
    """Layouts a table formatter can produce."""

    TEXT = "text"
    TABLE = "table"


class TableFormatter:
    """Render rows of result fields as a Rich table."""

    def __init__(self, console: Console | None = None, title: str | None = None) -> None:
        self.console = console or Console()
        self.title = title

    def format(
        self, data: list[dict[str, Any]], format_type: OutputFormat = OutputFormat.TABLE
    ) -> str:
        """Format rows as a Rich table, or plain lines for TEXT."""
        if not data:
            return "No data to display"
        if format_type == OutputFormat.TEXT:
            return "\n".join(
                ", ".join(f"{key}: {value}" for key, value in row.items()) for row in data
            )
        return self._format_table(data)

    def _format_table(self, data: list[dict[str, Any]]) -> str:
        columns = list(data[0].keys())
        table = Table(title=self.title, show_header=True, header_style="bold magenta")
        for col in columns:
            table.add_column(col.replace("_", " ").title())
        for row in data:
            table.add_row(*[_cell(row.get(col)) for col in columns])

        string_io = io.StringIO()
        temp_console = Console(file=string_io, force_terminal=True, width=self.console.width)
        temp_console.print(table)
        return string_io.getvalue().rstrip()


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, list | tuple):
        return ", ".join(str(v) for v in value) or "-"
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)
