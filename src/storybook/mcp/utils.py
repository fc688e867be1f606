"""Utility functions for MCP server."""

from typing import Any


def format_error(error: Exception) -> dict[str, Any]:
    """Format an exception as an MCP error response.

    Args:
        error: The exception to format

    Returns:
        Dictionary with error information
    """
    message = getattr(error, "message", None) or str(error)
    return {
        "success": False,
        "error": message,
        "error_type": type(error).__name__,
    }


def format_success(data: Any, **metadata: Any) -> dict[str, Any]:
    """Format successful response data.

    Args:
        data: The response data
        **metadata: Additional metadata fields

    Returns:
        Dictionary with success response
    """
    response = {
        "success": True,
        "data": data,
    }
    response.update(metadata)
    return response
