"""Tests for configuration models and the settings loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from steamvault.config.loader import SettingsLoader, load_settings
from steamvault.config.models import (
    CacheSettings,
    SecuritySettings,
    Settings,
    StrategySettings,
    UpstreamSettings,
)


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep default config paths and .env lookups inside tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in ("STEAMVAULT_SECURITY__SECRET_TOKEN", "STEAMVAULT_UPSTREAM__RETRY_ATTEMPTS"):
        # setenv first so monkeypatch restores the variable even when .env loading sets it
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


class TestUpstreamSettings:
    def test_default_strategy_order(self) -> None:
        settings = UpstreamSettings()

        labels = [s.label for s in settings.strategies]
        assert labels[0] == "direct"
        assert labels == ["direct", "allorigins-raw", "corsproxy", "allorigins-get"]
        assert settings.strategies[-1].envelope_field == "contents"

    def test_disabled_strategies_are_skipped(self) -> None:
        settings = UpstreamSettings(
            strategies=[
                StrategySettings(label="direct", kind="direct", url_template="{target}"),
                StrategySettings(label="off", url_template="https://x/{target_encoded}", enabled=False),
            ]
        )

        assert [s.label for s in settings.enabled_strategies()] == ["direct"]

    def test_rejects_unknown_kind(self) -> None:
        with pytest.raises(ValidationError):
            StrategySettings(label="x", kind="carrier-pigeon", url_template="{target}")

    def test_rejects_zero_retry_attempts(self) -> None:
        with pytest.raises(ValidationError):
            UpstreamSettings(retry_attempts=0)


class TestCacheAndSecuritySettings:
    def test_inventory_cache_expires_by_default(self) -> None:
        cache = Settings().cache

        assert cache.cache_snapshots is True
        assert cache.ttl_ms == 600_000

    def test_ttl_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            CacheSettings(ttl_ms=0)

    def test_secret_not_in_repr(self) -> None:
        security = SecuritySettings(secret_token="hunter2")  # pragma: allowlist secret

        assert "hunter2" not in repr(security)
        assert "hunter2" not in repr(Settings(security=security))


class TestSettings:
    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        # Given
        monkeypatch.setenv("STEAMVAULT_SECURITY__SECRET_TOKEN", "from-env")
        monkeypatch.setenv("STEAMVAULT_UPSTREAM__RETRY_ATTEMPTS", "5")

        # When
        settings = Settings()

        # Then
        assert settings.security.secret_token == "from-env"
        assert settings.upstream.retry_attempts == 5

    def test_toml_round_trip(self, tmp_path: Path) -> None:
        # Given
        original = Settings(
            cache=CacheSettings(db_path=tmp_path / "c.db", ttl_ms=600_000),
            upstream=UpstreamSettings(retry_attempts=2),
        )
        path = tmp_path / "config" / "config.toml"

        # When
        original.to_toml_file(path)
        loaded = Settings.from_toml_file(path)

        # Then
        assert loaded.cache.ttl_ms == 600_000
        assert loaded.cache.db_path == tmp_path / "c.db"
        assert loaded.upstream.retry_attempts == 2
        assert [s.label for s in loaded.upstream.strategies] == [
            s.label for s in original.upstream.strategies
        ]

    def test_environment_overrides_toml_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        # Given
        config_file = tmp_path / "config.toml"
        config_file.write_text(
            '[security]\nsecret_token = "from-file"\n\n[upstream]\nretry_attempts = 2\n',
            encoding="utf-8",
        )
        monkeypatch.setenv("STEAMVAULT_SECURITY__SECRET_TOKEN", "from-env")

        # When
        settings = Settings.from_toml_file(config_file)

        # Then
        assert settings.security.secret_token == "from-env"
        assert settings.upstream.retry_attempts == 2

    def test_toml_file_does_not_leak_into_later_settings(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.toml"
        config_file.write_text("[upstream]\nretry_attempts = 2\n", encoding="utf-8")

        Settings.from_toml_file(config_file)

        assert Settings().upstream.retry_attempts == UpstreamSettings().retry_attempts

    def test_missing_toml_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            Settings.from_toml_file(tmp_path / "absent.toml")


class TestSettingsLoader:
    def test_load_settings_reads_dotenv(self, tmp_path: Path) -> None:
        # Given
        (tmp_path / ".env").write_text("STEAMVAULT_SECURITY__SECRET_TOKEN=dotenv-secret\n", encoding="utf-8")

        # When
        settings = load_settings()

        # Then
        assert settings.security.secret_token == "dotenv-secret"

    def test_load_settings_prefers_default_config_path(self, tmp_path: Path) -> None:
        (tmp_path / "config.toml").write_text("[cache]\nttl_ms = 1234\n", encoding="utf-8")

        assert load_settings().cache.ttl_ms == 1234

    def test_reload_replaces_singleton(self, tmp_path: Path) -> None:
        # Given
        loader = SettingsLoader()
        loader._instance = None
        first = loader.get_config()
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[upstream]\nretry_attempts = 4\n", encoding="utf-8")

        # When
        reloaded = loader.reload_config(config_file)

        # Then
        assert loader.get_config() is reloaded
        assert reloaded is not first
        assert reloaded.upstream.retry_attempts == 4
