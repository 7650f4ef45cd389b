"""
CLI Context Management

Global CLI state (output mode, log level, config file) held in a
ContextVar so every Typer command reads the options parsed by the main
callback.
"""

from __future__ import annotations

import contextvars
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class LogLevel(str, Enum):
    """Log level enumeration for type safety."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class CliContext(BaseModel):
    """
    Options shared by all commands.

    Attributes:
        log_level: Logging level; None keeps the configured level
        json_output: Whether to output in JSON format
        config_path: Optional TOML configuration file
    """

    log_level: LogLevel | None = Field(default=None)
    json_output: bool = Field(default=False)
    config_path: Path | None = Field(default=None)


_cli_context: contextvars.ContextVar[CliContext | None] = contextvars.ContextVar(
    "cli_context",
    default=None,
)


def get_cli_context() -> CliContext:
    """Return the current CLI context, or defaults if none was set."""
    return _cli_context.get() or CliContext()


def set_cli_context(context: CliContext) -> None:
    _cli_context.set(context)
