"""MCP server command for Storybook."""

import typer

from storybook.config import get_logger

logger = get_logger(__name__)


def mcp_command() -> None:
    """Run the Storybook MCP (Model Context Protocol) server over stdio.

    This exposes the manuscript analyzers as tools to MCP-compatible
    clients.

    Example:
        storybook mcp
    """
    try:
        from storybook.mcp.server import main as mcp_main

        logger.info("Starting MCP server")
        mcp_main()

    except KeyboardInterrupt:
        logger.info("MCP server stopped by user")
        raise typer.Exit(0) from None
    except Exception as e:
        logger.error("MCP server failed", error=str(e))
        raise typer.Exit(1) from e
