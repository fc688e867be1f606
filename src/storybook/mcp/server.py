"""MCP Server for Storybook."""

from mcp.server import FastMCP

from storybook.config import get_logger
from storybook.thinking import ThinkingSession

logger = get_logger(__name__)


def create_server(session: ThinkingSession | None = None) -> FastMCP:
    """Create and configure the MCP server.

    Args:
        session: Thought history for the sequential analysis tool; a fresh
            session when omitted

    Returns:
        Configured FastMCP server instance
    """
    mcp = FastMCP("storybook")

    from storybook.mcp.tools import register_analysis_tools, register_thinking_tools

    register_analysis_tools(mcp)
    register_thinking_tools(mcp, session or ThinkingSession())

    logger.info("Created MCP server", server="storybook")
    return mcp


def main() -> None:
    """Main entry point for MCP server."""
    server = create_server()
    server.run()


if __name__ == "__main__":
    main()
