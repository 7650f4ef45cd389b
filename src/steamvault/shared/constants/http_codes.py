"""HTTP Status Code Constants.

This module contains HTTP status code constants for clear and
type-safe handling of upstream responses.
"""


class HTTPStatusCodes:
    """HTTP status code constants."""

    # 4xx Client Errors
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    TOO_MANY_REQUESTS = 429
    CLIENT_CLOSED_REQUEST = 499

    # 5xx Server Errors
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504

    @staticmethod
    def is_success(code: int) -> bool:
        """Check if status code indicates success (2xx)."""
        return 200 <= code < 300

    @staticmethod
    def is_server_error(code: int) -> bool:
        """Check if status code indicates server error (5xx)."""
        return 500 <= code < 600


class HTTPHeaders:
    """Common HTTP header names."""

    ACCEPT = "Accept"
    ACCEPT_LANGUAGE = "Accept-Language"
    USER_AGENT = "User-Agent"
