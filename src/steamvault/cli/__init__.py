"""SteamVault command-line interface."""

from steamvault.cli.typer_app import app

__all__ = ["app"]
