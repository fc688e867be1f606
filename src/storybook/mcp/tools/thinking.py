"""Sequential story analysis tool for the MCP server."""

from typing import Any

from mcp.server import FastMCP

from storybook.config import get_logger
from storybook.mcp.utils import format_error, format_success
from storybook.thinking import ThinkingSession

logger = get_logger(__name__)


def register_thinking_tools(mcp: FastMCP, session: ThinkingSession) -> None:
    """Register the sequential analysis tool.

    Args:
        mcp: FastMCP server instance
        session: Thought history shared by calls to this server
    """

    @mcp.tool(name="analyze-sequentially")
    async def analyze_sequentially_tool(
        thought: str,
        thought_number: int,
        total_thoughts: int,
        next_thought_needed: bool,
        is_revision: bool = False,
        revises_thought: int | None = None,
        narrative_context: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Record one step of a step-by-step story analysis.

        Thoughts are numbered; a revision of an earlier thought starts a new
        branch of the analysis.

        Args:
            thought: The analysis step
            thought_number: Position of this step
            total_thoughts: Estimated number of steps
            next_thought_needed: Whether another step follows
            is_revision: Whether this step revises an earlier one
            revises_thought: Number of the revised step
            narrative_context: Scene, themes, characters and plot points

        Returns:
            The recorded thought and the session status
        """
        try:
            recorded = session.process_thought(
                {
                    "thought": thought,
                    "thoughtNumber": thought_number,
                    "totalThoughts": total_thoughts,
                    "nextThoughtNeeded": next_thought_needed,
                    "isRevision": is_revision,
                    "revisesThought": revises_thought,
                    "narrativeContext": narrative_context,
                }
            )
            return format_success(recorded.to_dict(), **session.status())
        except Exception as e:
            logger.error("Sequential analysis tool failed", error=str(e))
            return format_error(e)
