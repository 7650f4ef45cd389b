"""SteamVault Settings Configuration Model.

Main Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import toml
from pydantic import Field
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from steamvault.config.models.app_settings import LoggingSettings, SecuritySettings
from steamvault.config.models.cache_settings import CacheSettings
from steamvault.config.models.upstream_settings import UpstreamSettings

logger = logging.getLogger(__name__)

_toml_path: ContextVar[Path | None] = ContextVar("steamvault_toml_path", default=None)


class TomlFileSettingsSource(PydanticBaseSettingsSource):
    """Values from the TOML file being loaded by ``Settings.from_toml_file``."""

    def __init__(self, settings_cls: type[BaseSettings]) -> None:
        super().__init__(settings_cls)
        path = _toml_path.get()
        self._data: dict[str, Any] = toml.load(path) if path is not None else {}

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


class Settings(BaseSettings):
    """Settings facade providing unified configuration access.

    Environment variables override file values, e.g.
    ``STEAMVAULT_SECURITY__SECRET_TOKEN`` or ``STEAMVAULT_CACHE__TTL_MS``.
    """

    model_config = SettingsConfigDict(
        env_prefix="STEAMVAULT_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from TOML file with environment variable overrides."""
        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        token = _toml_path.set(file_path)
        try:
            return cls()
        finally:
            _toml_path.reset(token)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment beats the file; the file beats defaults
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlFileSettingsSource(settings_cls),
            file_secret_settings,
        )

    def to_toml_file(self, file_path: str | Path) -> None:
        """Save settings to TOML file.

        The secret token is written because the file is the credential's
        source; file permissions protect it.
        """
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(mode="json", exclude_none=True)

        with open(file_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)
        logger.debug("Saved configuration to %s", file_path)
