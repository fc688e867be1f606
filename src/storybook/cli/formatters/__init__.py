"""Output formatters for CLI."""

from storybook.cli.formatters.json_formatter import JsonFormatter
from storybook.cli.formatters.table_formatter import OutputFormat, TableFormatter

__all__ = ["JsonFormatter", "OutputFormat", "TableFormatter"]
