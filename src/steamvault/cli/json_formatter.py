"""
JSON Output Formatter for the SteamVault CLI

Machine-readable envelope used by every command when ``--json`` is given.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import orjson


def format_json_output(
    success: bool,
    command: str,
    data: Any | None = None,
    errors: list[str] | None = None,
) -> bytes:
    """
    Format command output as JSON.

    Args:
        success: Whether the command executed successfully
        command: The command name (e.g., "fetch", "leaderboard")
        data: The command's output data
        errors: List of error messages

    Returns:
        JSON-encoded bytes ready for output

    Example:
        >>> output = format_json_output(True, "price get", {"cached": False})
        >>> print(output.decode())
        {
          "command": "price get",
          "data": {
            "cached": false
          },
          "errors": [],
          "success": true,
          "timestamp": "2026-10-18T10:30:00+00:00"
        }
    """
    if errors is None:
        errors = []

    if errors:
        success = False

    json_data = {
        "success": success,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "command": command,
        "data": data,
        "errors": errors,
    }

    try:
        return orjson.dumps(
            json_data,
            option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2 | orjson.OPT_NON_STR_KEYS,
        )
    except TypeError as e:
        fallback = {
            "success": False,
            "timestamp": json_data["timestamp"],
            "command": command,
            "data": None,
            "errors": [f"JSON serialization error: {e}"],
        }
        return orjson.dumps(fallback, option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2)
