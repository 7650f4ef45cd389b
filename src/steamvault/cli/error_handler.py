"""
CLI Error Handling

Consistent error output and exit codes for every command. Messages come
from the same mapping the HTTP boundary uses, so per-strategy upstream
diagnostics stay in the logs.
"""

from __future__ import annotations

import logging
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from steamvault.cli.json_formatter import format_json_output
from steamvault.shared.constants import CLIDefaults
from steamvault.shared.error_handling import error_response, map_exception_to_steamvault_error
from steamvault.shared.errors import ErrorCode

logger = logging.getLogger(__name__)

_error_console = Console(stderr=True)


def handle_cli_error(
    error: BaseException,
    command: str,
    *,
    json_output: bool = False,
) -> int:
    """Handle CLI errors with consistent formatting and logging.

    Args:
        error: The exception that occurred
        command: The CLI command being executed
        json_output: Whether to output JSON format

    Returns:
        Exit code for the CLI command
    """
    mapped = map_exception_to_steamvault_error(error, command, ErrorCode.CLI_UNEXPECTED_ERROR)
    status, body = error_response(mapped)
    error_context: dict[str, Any] = {
        "command": command,
        "error_type": type(error).__name__,
        "error_code": mapped.code.value,
        "status": status,
    }
    if "reason" in body:
        error_context["reason"] = body["reason"]

    logger.debug("CLI error in %s: %s", command, mapped.message, extra={"context": error_context})

    if json_output:
        typer.echo(
            format_json_output(
                success=False,
                command=command,
                errors=[body["error"]],
                data=error_context,
            ).decode("utf-8")
        )
    else:
        detail = f": {escape(body['reason'])}" if "reason" in body else ""
        _error_console.print(f"[red]Error:[/red] {escape(body['error'])}{detail} ({mapped.code.value})")

    return CLIDefaults.EXIT_ERROR
