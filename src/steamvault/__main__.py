"""Entry point for ``python -m steamvault``."""

from steamvault.cli.typer_app import app

if __name__ == "__main__":
    app()
