"""Application-level configuration models (logging, security)."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level name")
    file: str | None = Field(default=None, description="Optional JSON log file")
    use_rich: bool = Field(default=True, description="Rich console output")


class SecuritySettings(BaseModel):
    """Security configuration.

    An empty ``secret_token`` disables the privileged clear operation.
    """

    secret_token: str = Field(
        default="",
        repr=False,
        description="Bearer credential for clearing the cache",
    )

    def __repr__(self) -> str:
        masked = "****" if self.secret_token else "[empty]"
        return f"SecuritySettings(secret_token={masked})"


__all__ = [
    "LoggingSettings",
    "SecuritySettings",
]
