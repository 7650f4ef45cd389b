"""
CLI Constants

Command names and help text for the SteamVault command line.
"""


class CLICommands:
    """Command names."""

    FETCH = "fetch"
    CACHE = "cache"
    PRICE = "price"
    LEADERBOARD = "leaderboard"
    SEARCH = "search"

    # Sub-commands
    GET = "get"
    SET = "set"
    CLEAR = "clear"
    STATS = "stats"


class CLIHelp:
    """Help text."""

    APP_NAME = "steamvault"
    APP_DESCRIPTION = "Fetch, cache and query Steam inventory snapshots."
    VERSION_TEXT = "SteamVault v{version}"
    VERSION_HELP = "Show version information and exit."
    LOG_LEVEL_HELP = "Override the configured log level."
    FETCH_HELP = "Fetch an account's inventory through the configured strategies."
    NORMALIZED_HELP = "Print normalized item records instead of the raw document."
    NO_CACHE_HELP = "Bypass the snapshot cache and always hit the upstream."
    CACHE_HELP = "Inspect or clear the persistent cache."
    CACHE_GET_HELP = "Read a cached value by key."
    CACHE_CLEAR_HELP = "Clear every cache entry and snapshot (requires the secret token)."
    CACHE_STATS_HELP = "Show cache entry counts."
    TOKEN_HELP = "Secret token authorizing the clear."
    PRICE_HELP = "Read or write cached item prices."
    PRICE_GET_HELP = "Read a cached item price."
    PRICE_SET_HELP = "Write an item price into the cache."
    LEADERBOARD_HELP = "List stored snapshots ordered by size or recency."
    ORDER_BY_HELP = "Order column: item_count or fetched_at."
    LIMIT_HELP = "Maximum number of rows."
    SEARCH_HELP = "Find accounts holding items whose name contains a query."
    JSON_HELP = "Output JSON instead of tables."
    CONFIG_HELP = "Path to a TOML configuration file."


class CLIDefaults:
    """Defaults."""

    VERSION = "1.0.0"
    EXIT_SUCCESS = 0
    EXIT_ERROR = 1
    # Items shown in the normalized fetch table before truncating
    TABLE_MAX_ROWS = 50
