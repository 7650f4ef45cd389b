"""
SteamVault Typer CLI Application

Command-line front end over the inventory service: fetch inventories,
inspect and clear the cache, manage cached prices and query stored
snapshots.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, Any, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from steamvault.cli.context import CliContext, LogLevel, get_cli_context, set_cli_context
from steamvault.cli.error_handler import handle_cli_error
from steamvault.cli.json_formatter import format_json_output
from steamvault.config import get_config, reload_config
from steamvault.config.models.settings import Settings
from steamvault.services.inventory_service import InventoryService
from steamvault.shared.constants import CLICommands, CLIDefaults, CLIHelp, LeaderboardConfig
from steamvault.shared.logging import setup_structured_logger

__version__ = CLIDefaults.VERSION

T = TypeVar("T")

console = Console()


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(CLIHelp.VERSION_TEXT.format(version=__version__))
        raise typer.Exit


app = typer.Typer(
    name=CLIHelp.APP_NAME,
    help=CLIHelp.APP_DESCRIPTION,
    no_args_is_help=True,
)
cache_app = typer.Typer(help=CLIHelp.CACHE_HELP, no_args_is_help=True)
price_app = typer.Typer(help=CLIHelp.PRICE_HELP, no_args_is_help=True)
app.add_typer(cache_app, name=CLICommands.CACHE)
app.add_typer(price_app, name=CLICommands.PRICE)


@app.callback()
def main(
    json_output: Annotated[bool, typer.Option("--json", help=CLIHelp.JSON_HELP)] = False,
    log_level: Annotated[
        LogLevel | None,
        typer.Option("--log-level", case_sensitive=False, help=CLIHelp.LOG_LEVEL_HELP),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", exists=True, dir_okay=False, help=CLIHelp.CONFIG_HELP),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help=CLIHelp.VERSION_HELP,
        ),
    ] = False,
) -> None:
    """Process the options shared by every command."""
    set_cli_context(
        CliContext(
            json_output=json_output,
            log_level=log_level,
            config_path=config_path,
        )
    )


def load_cli_settings(context: CliContext) -> Settings:
    """Load settings and configure logging for one command run."""
    settings = reload_config(context.config_path) if context.config_path else get_config()
    level = context.log_level.value if context.log_level else settings.logging.level
    setup_structured_logger(
        level=level,
        log_file=settings.logging.file,
        use_rich_console=settings.logging.use_rich,
    )
    return settings


def build_service(settings: Settings) -> InventoryService:
    return InventoryService.from_settings(settings)


def _run(command: str, action: Callable[[InventoryService], Awaitable[T]]) -> T:
    """Run ``action`` against a fresh service, mapping errors to exit codes."""
    context = get_cli_context()

    async def _invoke() -> T:
        service = build_service(load_cli_settings(context))
        try:
            return await action(service)
        finally:
            await service.close()

    try:
        return asyncio.run(_invoke())
    except typer.Exit:
        raise
    except Exception as e:  # pylint: disable=broad-exception-caught
        exit_code = handle_cli_error(e, command, json_output=context.json_output)
        raise typer.Exit(exit_code) from e


def _sync(func: Callable[[InventoryService], T]) -> Callable[[InventoryService], Awaitable[T]]:
    async def wrapper(service: InventoryService) -> T:
        return func(service)

    return wrapper


def _emit(command: str, data: Any, render: Callable[[Any], None] | None = None) -> None:
    if get_cli_context().json_output:
        typer.echo(format_json_output(success=True, command=command, data=data).decode("utf-8"))
    elif render is not None:
        render(data)
    else:
        console.print_json(data=data)


def _summary_table(title: str, rows: list[dict[str, Any]], *, with_matches: bool = False) -> None:
    if not rows:
        console.print(f"[yellow]{title}: no results[/yellow]")
        return

    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Account", style="cyan", no_wrap=True)
    table.add_column("Items", justify="right")
    table.add_column("Fetched at (ms)", justify="right")
    if with_matches:
        table.add_column("Matches", justify="right", style="green")

    for rank, row in enumerate(rows, start=1):
        cells = [str(rank), row["account_id"], str(row["item_count"]), str(row["fetched_at"])]
        if with_matches:
            cells.append(str(row["matches"]))
        table.add_row(*cells)
    console.print(table)


def _items_table(data: dict[str, Any]) -> None:
    table = Table(
        title=f"{data['account_id']}: {data['item_count']} items (source: {data['source']})",
    )
    table.add_column("Asset", style="dim", no_wrap=True)
    table.add_column("Market name", style="cyan")
    table.add_column("Type")
    table.add_column("Amount", justify="right")

    for item in data["items"][: CLIDefaults.TABLE_MAX_ROWS]:
        table.add_row(
            item["asset_id"],
            escape(item["market_name"]),
            escape(item["type"]),
            str(item["amount"]),
        )
    console.print(table)

    hidden = data["item_count"] - CLIDefaults.TABLE_MAX_ROWS
    if hidden > 0:
        console.print(f"[dim]... {hidden} more (use --json for all)[/dim]")


@app.command(CLICommands.FETCH, help=CLIHelp.FETCH_HELP)
def fetch_command(
    account_id: Annotated[str, typer.Argument(help="17-digit account id")],
    normalized: Annotated[bool, typer.Option("--normalized", help=CLIHelp.NORMALIZED_HELP)] = False,
    no_cache: Annotated[bool, typer.Option("--no-cache", help=CLIHelp.NO_CACHE_HELP)] = False,
) -> None:
    data = _run(
        CLICommands.FETCH,
        lambda service: service.fetch_inventory(
            account_id,
            normalized=normalized,
            use_cache=not no_cache,
        ),
    )
    _emit(CLICommands.FETCH, data, _items_table if normalized else None)


@cache_app.command(CLICommands.GET, help=CLIHelp.CACHE_GET_HELP)
def cache_get_command(key: Annotated[str, typer.Argument(help="Cache key")]) -> None:
    command = f"{CLICommands.CACHE} {CLICommands.GET}"
    _emit(command, _run(command, _sync(lambda service: service.read_cached(key))))


@cache_app.command(CLICommands.CLEAR, help=CLIHelp.CACHE_CLEAR_HELP)
def cache_clear_command(
    token: Annotated[
        str,
        typer.Option("--token", prompt=True, hide_input=True, help=CLIHelp.TOKEN_HELP),
    ],
) -> None:
    command = f"{CLICommands.CACHE} {CLICommands.CLEAR}"
    data = _run(command, _sync(lambda service: service.clear_cache(token)))

    def render(result: dict[str, Any]) -> None:
        console.print(f"[green]Cache cleared[/green] ({result['cleared']} entries)")

    _emit(command, data, render)


@cache_app.command(CLICommands.STATS, help=CLIHelp.CACHE_STATS_HELP)
def cache_stats_command() -> None:
    command = f"{CLICommands.CACHE} {CLICommands.STATS}"
    _emit(command, _run(command, _sync(lambda service: service.store.stats())))


@price_app.command(CLICommands.GET, help=CLIHelp.PRICE_GET_HELP)
def price_get_command(item_name: Annotated[str, typer.Argument(help="Market item name")]) -> None:
    command = f"{CLICommands.PRICE} {CLICommands.GET}"
    _emit(command, _run(command, _sync(lambda service: service.get_price(item_name))))


@price_app.command(CLICommands.SET, help=CLIHelp.PRICE_SET_HELP)
def price_set_command(
    item_name: Annotated[str, typer.Argument(help="Market item name")],
    price: Annotated[float, typer.Argument(help="Price")],
) -> None:
    command = f"{CLICommands.PRICE} {CLICommands.SET}"
    _emit(command, _run(command, _sync(lambda service: service.set_price(item_name, price))))


@app.command(CLICommands.LEADERBOARD, help=CLIHelp.LEADERBOARD_HELP)
def leaderboard_command(
    limit: Annotated[int, typer.Option("--limit", "-n", help=CLIHelp.LIMIT_HELP)] = LeaderboardConfig.DEFAULT_LIMIT,
    order_by: Annotated[str, typer.Option("--order-by", help=CLIHelp.ORDER_BY_HELP)] = "item_count",
) -> None:
    data = _run(
        CLICommands.LEADERBOARD,
        _sync(lambda service: service.leaderboard(limit=limit, order_by=order_by)),
    )
    _emit(CLICommands.LEADERBOARD, data, lambda rows: _summary_table("Leaderboard", rows))


@app.command(CLICommands.SEARCH, help=CLIHelp.SEARCH_HELP)
def search_command(
    query: Annotated[str, typer.Argument(help="Case-insensitive item name fragment")],
    limit: Annotated[int, typer.Option("--limit", "-n", help=CLIHelp.LIMIT_HELP)] = LeaderboardConfig.DEFAULT_LIMIT,
) -> None:
    data = _run(CLICommands.SEARCH, _sync(lambda service: service.search_items(query, limit=limit)))
    _emit(
        CLICommands.SEARCH,
        data,
        lambda rows: _summary_table(f"Accounts holding '{escape(query)}'", rows, with_matches=True),
    )


if __name__ == "__main__":
    app()
