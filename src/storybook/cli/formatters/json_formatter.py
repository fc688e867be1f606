"""JSON output formatter for CLI."""

from __future__ import annotations

import json
from typing import Any


class JsonFormatter:
    """JSON formatter for result records and plain data."""

    def format(self, data: Any) -> str:
        """Format data as JSON.

        Result records are dumped with their public (camelCase) keys.
        """
        if hasattr(data, "to_dict"):
            return json.dumps(data.to_dict(), default=str, indent=2)
        if hasattr(data, "model_dump"):
            return json.dumps(
                data.model_dump(mode="json", by_alias=True), default=str, indent=2
            )
        if isinstance(data, dict):
            return json.dumps(
                {key: _plain(value) for key, value in data.items()},
                default=str,
                indent=2,
            )
        if isinstance(data, list | tuple):
            return json.dumps([_plain(item) for item in data], default=str, indent=2)
        return json.dumps({"value": data}, default=str, indent=2)

    def format_error_response(self, error: str | Exception, code: int = 1) -> str:
        """Format an error response.

        Args:
            error: Error message or exception
            code: Error code

        Returns:
            JSON string
        """
        if isinstance(error, Exception):
            message = getattr(error, "message", None) or str(error)
            response = {
                "success": False,
                "error": message,
                "error_type": type(error).__name__,
                "code": code,
            }
            hint = getattr(error, "hint", None)
            if hint:
                response["hint"] = hint
        else:
            response = {"success": False, "error": error, "code": code}
        return json.dumps(response, indent=2)


def _plain(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, list | tuple):
        return [_plain(item) for item in value]
    return value
