"""
Upstream Inventory Service Constants

Endpoints, outbound headers and response classification markers for
the Steam Community inventory resource.
"""

from typing import ClassVar

from .http_codes import HTTPHeaders, HTTPStatusCodes


class SteamInventoryConfig:
    """Steam Community inventory endpoint configuration."""

    BASE_URL = "https://steamcommunity.com"
    INVENTORY_PATH = "/inventory/{account_id}/{app_id}/{context_id}"

    # Unturned
    DEFAULT_APP_ID = 304930
    DEFAULT_CONTEXT_ID = 2
    DEFAULT_LANGUAGE = "english"
    DEFAULT_COUNT = 5000

    # SteamID64: 17 decimal digits
    ACCOUNT_ID_PATTERN = r"^[0-9]{17}$"


class UpstreamDefaults:
    """Retry, timeout and rate-limit defaults for the resilient fetcher."""

    TIMEOUT_SECONDS = 8.0
    RETRY_ATTEMPTS = 3
    RETRY_DELAY = 0.5
    RETRY_MAX_DELAY = 8.0

    # Process-local courtesy limit
    MAX_REQUESTS = 20
    TIME_PERIOD_SECONDS = 60.0

    RETRYABLE_STATUSES: ClassVar[frozenset[int]] = frozenset(
        {
            HTTPStatusCodes.TOO_MANY_REQUESTS,
            HTTPStatusCodes.INTERNAL_SERVER_ERROR,
            HTTPStatusCodes.BAD_GATEWAY,
            HTTPStatusCodes.SERVICE_UNAVAILABLE,
            HTTPStatusCodes.GATEWAY_TIMEOUT,
        }
    )

    # Bot filtering upstream keys partly on the presence of these headers
    BROWSER_HEADERS: ClassVar[dict[str, str]] = {
        HTTPHeaders.USER_AGENT: (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
        ),
        HTTPHeaders.ACCEPT: "application/json, text/plain, */*",
        HTTPHeaders.ACCEPT_LANGUAGE: "en-US,en;q=0.9",
    }


class StrategyKinds:
    """Transport strategy kinds."""

    DIRECT = "direct"
    RELAY = "relay"


class ResponseMarkers:
    """Markers used by the response validator."""

    NULL_LITERAL = "null"

    # Lower-cased substrings of interstitial or login pages
    BLOCKED_MARKUP: ClassVar[tuple[str, ...]] = (
        "<html",
        "<!doctype",
        "g-recaptcha",
        "login/home",
        "sign in",
    )

    ASSET_FIELDS: ClassVar[tuple[str, ...]] = ("assets", "items", "rgInventory")
    DESCRIPTION_FIELDS: ClassVar[tuple[str, ...]] = ("descriptions", "rgDescriptions")


class FailureReasons:
    """Reason strings reported by validator verdicts and strategy failures."""

    BLOCKED_OR_EMPTY = "blocked or empty"
    MALFORMED = "malformed"
    UNEXPECTED_SHAPE = "unexpected shape"
    TIMEOUT = "timeout"
    CONNECTION_ERROR = "connection error"
    HTTP_STATUS = "HTTP {status}"
