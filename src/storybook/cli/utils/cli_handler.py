"""Unified CLI handler for standardized error handling and output."""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console

from storybook.cli.formatters.json_formatter import JsonFormatter
from storybook.config import get_logger
from storybook.exceptions import StorybookError, ValidationError

logger = get_logger(__name__)


class CLIHandler:
    """Unified handler for CLI commands."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize CLI handler.

        Args:
            console: Rich console for output
        """
        self.console = console or Console()
        self.json_formatter = JsonFormatter()

    def handle_error(
        self, error: Exception, json_output: bool = False, exit_code: int = 1
    ) -> NoReturn:
        """Display an error and exit.

        Args:
            error: Exception to handle
            json_output: Whether to output JSON
            exit_code: Exit code to use

        Raises:
            typer.Exit: Always
        """
        logger.error("Command failed", error=str(error), error_type=type(error).__name__)

        if json_output:
            print(self.json_formatter.format_error_response(error, exit_code))
        elif isinstance(error, ValidationError):
            self.console.print(f"[red]Validation {error.format_error()}[/red]")
        elif isinstance(error, StorybookError):
            self.console.print(f"[red]{error.format_error()}[/red]")
        else:
            self.console.print(f"[red]Error: {error}[/red]")

        raise typer.Exit(exit_code)

    def read_manuscript(self, path: Path | None) -> str:
        """Read manuscript text from a file, or from stdin when no path is given.

        Raises:
            typer.Exit: If no input is available or the file cannot be read
        """
        if path is not None and str(path) != "-":
            if not path.is_file():
                self.console.print(f"[red]Error: File not found: {path}[/red]")
                raise typer.Exit(1)
            try:
                return path.read_text(encoding="utf-8")
            except UnicodeDecodeError as e:
                self.handle_error(
                    ValidationError(
                        f"Cannot read {path}: the file is not UTF-8 text",
                        hint="Save the manuscript as UTF-8 and try again",
                        details={"file": str(path), "position": e.start},
                    )
                )
            except OSError as e:
                self.handle_error(
                    StorybookError(
                        f"Cannot read {path}: {e.strerror or e}",
                        details={"file": str(path)},
                    )
                )
        if sys.stdin.isatty():
            self.console.print(
                "[red]Error: No input provided. Pass a file or pipe text on stdin[/red]"
            )
            raise typer.Exit(1)
        return sys.stdin.read()

    def output(
        self,
        result: Any,
        json_output: bool,
        render: Callable[[Console, Any], None],
    ) -> None:
        """Print a result as JSON or through a rich renderer."""
        if json_output:
            # Plain print keeps ANSI codes out of the JSON
            print(self.json_formatter.format(result))
        else:
            render(self.console, result)
