"""MCP tools for Storybook."""

from storybook.mcp.tools.analysis import register_analysis_tools
from storybook.mcp.tools.thinking import register_thinking_tools

__all__ = [
    "register_analysis_tools",
    "register_thinking_tools",
]
