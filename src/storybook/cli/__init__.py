"""Command-line interface for Storybook."""

from storybook.cli.main import app, main

__all__ = ["app", "main"]
